"""Tests for the moving-average costing engine."""

import pytest

from stockledger.core.entities import Movement, MovementType, Product, ProductSnapshot
from stockledger.core.exceptions import (
    InsufficientStockError,
    InvalidCostError,
    InvalidPriceError,
    InvalidQuantityError,
    NegativeStockError,
    ZeroAdjustmentError,
)
from stockledger.core.services.costing import (
    apply_adjustment,
    apply_production,
    apply_sale,
    recalculate_total,
    weighted_average_cost,
)


def _product(quantity: int = 0, average_cost: float = 0.0, price: float = 100.0) -> Product:
    return Product(
        id="p1",
        name="Tablecloth",
        category="Tablecloths",
        quantity=quantity,
        price=price,
        average_cost=average_cost,
    )


class TestWeightedAverageCost:
    def test_zero_stock_takes_incoming_cost(self):
        assert weighted_average_cost(0, 9.0, 10, 4.0) == 4.0

    def test_blend(self):
        assert weighted_average_cost(10, 5.0, 5, 7.0) == pytest.approx(85 / 15)

    def test_same_cost_is_stable(self):
        assert weighted_average_cost(3, 4.0, 7, 4.0) == pytest.approx(4.0)


class TestApplySale:
    def test_sale(self):
        result = apply_sale(_product(quantity=10, average_cost=4.0), 3, 100.0)
        assert result.movement_type is MovementType.SALE
        assert result.quantity_delta == -3
        assert result.new_quantity == 7
        assert result.new_average_cost == 4.0
        assert result.total_amount == 300.0
        assert result.average_cost_at_time == 4.0
        assert result.unit_price == 100.0

    def test_falls_back_to_product_price(self):
        result = apply_sale(_product(quantity=5, price=25.0), 2)
        assert result.unit_price == 25.0
        assert result.total_amount == 50.0

    def test_can_sell_entire_stock(self):
        result = apply_sale(_product(quantity=3), 3, 10.0)
        assert result.new_quantity == 0

    def test_insufficient_stock(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            apply_sale(_product(quantity=3), 5, 10.0)
        assert exc_info.value.message == "insufficient stock: available 3, requested 5"

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, quantity):
        with pytest.raises(InsufficientStockError):
            apply_sale(_product(quantity=3), quantity, 10.0)

    def test_zero_price_rejected(self):
        with pytest.raises(InvalidPriceError):
            apply_sale(_product(quantity=3, price=0.0), 1)

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_price_rejected(self, price):
        with pytest.raises(InvalidPriceError) as exc_info:
            apply_sale(_product(quantity=5, price=10.0), 1, price)
        assert exc_info.value.details == {"unit_price": str(price)}

    def test_non_finite_default_price_rejected(self):
        product = Product.model_construct(
            id="p1", name="Tote", category="Bags", quantity=5, price=float("nan"), average_cost=0.0
        )
        with pytest.raises(InvalidPriceError):
            apply_sale(product, 1)

    def test_does_not_mutate_product(self):
        product = _product(quantity=10, average_cost=4.0)
        apply_sale(product, 3, 100.0)
        assert product.quantity == 10


class TestApplyProduction:
    def test_first_production(self):
        result = apply_production(_product(), 10, 4.0)
        assert result.quantity_delta == 10
        assert result.new_quantity == 10
        assert result.new_average_cost == 4.0
        assert result.total_amount == 40.0
        assert result.unit_cost == 4.0

    def test_average_at_time_is_new_average(self):
        result = apply_production(_product(quantity=10, average_cost=5.0), 5, 7.0)
        assert result.new_average_cost == pytest.approx(85 / 15)
        assert result.average_cost_at_time == result.new_average_cost

    def test_zero_cost_allowed(self):
        result = apply_production(_product(quantity=2, average_cost=6.0), 2, 0.0)
        assert result.new_average_cost == pytest.approx(3.0)

    @pytest.mark.parametrize("quantity", [0, -4])
    def test_invalid_quantity(self, quantity):
        with pytest.raises(InvalidQuantityError):
            apply_production(_product(), quantity, 4.0)

    def test_negative_cost(self):
        with pytest.raises(InvalidCostError):
            apply_production(_product(), 1, -0.01)

    @pytest.mark.parametrize("cost", [float("nan"), float("inf")])
    def test_non_finite_cost_rejected(self, cost):
        with pytest.raises(InvalidCostError):
            apply_production(_product(quantity=10, average_cost=4.0), 1, cost)

    def test_blend_four_and_seven(self):
        # 10 @ 4.00 then 5 @ 7.00 -> (40 + 35) / 15 = 5.00
        result = apply_production(_product(quantity=10, average_cost=4.0), 5, 7.0)
        assert result.new_quantity == 15
        assert result.new_average_cost == pytest.approx(5.0)
        assert result.average_cost_at_time == pytest.approx(5.0)
        assert result.total_amount == 35.0

    def test_does_not_mutate_product(self):
        product = _product(quantity=10, average_cost=5.0)
        apply_production(product, 5, 7.0)
        assert product.average_cost == 5.0


class TestApplyAdjustment:
    def test_negative_adjustment(self):
        result = apply_adjustment(_product(quantity=7, average_cost=4.0), -2)
        assert result.movement_type is MovementType.ADJUSTMENT
        assert result.new_quantity == 5
        assert result.new_average_cost == 4.0
        assert result.total_amount == 0.0
        assert result.average_cost_at_time == 4.0

    def test_positive_adjustment_keeps_cost(self):
        result = apply_adjustment(_product(quantity=1, average_cost=3.0), 4)
        assert result.new_quantity == 5
        assert result.new_average_cost == 3.0

    def test_zero_rejected(self):
        with pytest.raises(ZeroAdjustmentError):
            apply_adjustment(_product(quantity=1), 0)

    def test_negative_stock_rejected(self):
        with pytest.raises(NegativeStockError):
            apply_adjustment(_product(quantity=1), -2)


class TestRecalculateTotal:
    def _movement(self, **fields) -> Movement:
        return Movement(
            product_id="p1",
            product_snapshot=ProductSnapshot(name="Tablecloth", category="Tablecloths"),
            **fields,
        )

    def test_sale(self):
        movement = self._movement(type=MovementType.SALE, quantity=-4, unit_price=12.5)
        assert recalculate_total(movement) == 50.0

    def test_production(self):
        movement = self._movement(type=MovementType.PRODUCTION, quantity=3, unit_cost=2.0)
        assert recalculate_total(movement) == 6.0

    def test_adjustment(self):
        movement = self._movement(type=MovementType.ADJUSTMENT, quantity=-1, total_amount=9.0)
        assert recalculate_total(movement) == 0.0

    def test_sale_without_price_keeps_total(self):
        movement = self._movement(type=MovementType.SALE, quantity=-1, total_amount=7.0)
        assert recalculate_total(movement) == 7.0
