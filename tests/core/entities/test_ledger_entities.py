"""Tests for product, movement and photo entities."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from stockledger.core.entities import (
    Movement,
    MovementFilters,
    MovementType,
    Photo,
    Product,
    ProductSnapshot,
    ensure_utc,
)


class TestProduct:
    """Tests for Product entity."""

    def test_defaults(self):
        product = Product(name="Wool blanket", category="Blankets")
        assert product.id
        assert product.quantity == 0
        assert product.price == 0.0
        assert product.average_cost == 0.0
        assert product.notes is None
        assert product.created_at.tzinfo is not None

    def test_ids_are_unique(self):
        assert Product(name="a", category="x").id != Product(name="b", category="x").id

    def test_inventory_value(self):
        product = Product(name="Bag", category="Bags", quantity=5, average_cost=4.0)
        assert product.inventory_value == 20.0

    def test_margins(self):
        product = Product(name="Bag", category="Bags", price=10.0, average_cost=4.0)
        assert product.unit_margin == 6.0
        assert product.margin_percent == pytest.approx(60.0)

    def test_margin_percent_without_price(self):
        product = Product(name="Bag", category="Bags", average_cost=4.0)
        assert product.margin_percent == 0.0

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Bag", category="Bags", quantity=-1)

    def test_negative_average_cost_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Bag", category="Bags", average_cost=-0.5)

    def test_naive_timestamps_become_utc(self):
        naive = datetime(2024, 1, 15, 12, 0)
        product = Product(name="Bag", category="Bags", created_at=naive, updated_at=naive)
        assert product.created_at.tzinfo == UTC
        assert product.created_at.hour == 12


class TestMovement:
    """Tests for Movement entity."""

    def _movement(self, **overrides) -> Movement:
        data = {
            "product_id": "p1",
            "type": MovementType.SALE,
            "quantity": -2,
            "unit_price": 50.0,
            "total_amount": 100.0,
            "average_cost_at_time": 20.0,
            "product_snapshot": ProductSnapshot(name="Runner", category="Table runners"),
        }
        data.update(overrides)
        return Movement(**data)

    def test_direction(self):
        sale = self._movement()
        assert sale.is_outbound
        assert not sale.is_inbound

        production = self._movement(type=MovementType.PRODUCTION, quantity=4, unit_price=None)
        assert production.is_inbound

    def test_type_from_string(self):
        movement = self._movement(type="adjustment", unit_price=None, total_amount=0.0)
        assert movement.type is MovementType.ADJUSTMENT

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            self._movement(type="transfer")

    def test_snapshot_is_frozen(self):
        snapshot = ProductSnapshot(name="Runner", category="Table runners")
        with pytest.raises(ValidationError):
            snapshot.name = "Other"

    def test_naive_created_at_becomes_utc(self):
        movement = self._movement(created_at=datetime(2024, 3, 1, 8, 0))
        assert movement.created_at == datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


class TestMovementFilters:
    def test_empty(self):
        filters = MovementFilters()
        assert filters.product_id is None
        assert filters.type is None

    def test_bounds_normalized(self):
        filters = MovementFilters(start_date=datetime(2024, 1, 1))
        assert filters.start_date.tzinfo == UTC


class TestPhoto:
    def test_storage_size(self):
        photo = Photo(product_id="p1", blob=b"12345", thumbnail=b"12", mime_type="image/jpeg")
        assert photo.storage_size == 7
        assert photo.width == 0


def test_ensure_utc_keeps_aware_values():
    aware = datetime(2024, 1, 1, tzinfo=UTC)
    assert ensure_utc(aware) is aware
