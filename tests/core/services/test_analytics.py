"""Tests for financial analytics."""

from datetime import UTC, datetime

import pytest

from stockledger.core.entities import Movement, MovementType, Product, ProductSnapshot, StockStatus
from stockledger.core.services.analytics import (
    DELETED_PRODUCT_NAME,
    filter_by_date,
    financial_summary,
    inventory_by_category,
    is_low_stock,
    is_out_of_stock,
    low_stock_products,
    out_of_stock_products,
    product_profitability,
    stock_status,
    top_selling_products,
    total_inventory_value,
)


def _movement(
    product_id: str,
    type: MovementType,
    quantity: int,
    day: int,
    unit_price: float | None = None,
    unit_cost: float | None = None,
    average_cost_at_time: float = 0.0,
) -> Movement:
    if type == MovementType.SALE:
        total = (unit_price or 0.0) * abs(quantity)
    elif type == MovementType.PRODUCTION:
        total = (unit_cost or 0.0) * quantity
    else:
        total = 0.0
    return Movement(
        product_id=product_id,
        type=type,
        quantity=quantity,
        unit_price=unit_price,
        unit_cost=unit_cost,
        total_amount=total,
        average_cost_at_time=average_cost_at_time,
        created_at=datetime(2024, 5, day, 12, 0, tzinfo=UTC),
        product_snapshot=ProductSnapshot(name=f"name-{product_id}", category="Bags"),
    )


@pytest.fixture
def product() -> Product:
    # State after: production 10 @ 4, sale 3 @ 100, adjustment -2
    return Product(id="p1", name="Tote", category="Bags", quantity=5, price=100.0, average_cost=4.0)


@pytest.fixture
def movements() -> list[Movement]:
    return [
        _movement("p1", MovementType.PRODUCTION, 10, day=1, unit_cost=4.0, average_cost_at_time=4.0),
        _movement("p1", MovementType.SALE, -3, day=2, unit_price=100.0, average_cost_at_time=4.0),
        _movement("p1", MovementType.ADJUSTMENT, -2, day=3, average_cost_at_time=4.0),
    ]


class TestFinancialSummary:
    def test_worked_example(self, product, movements):
        summary = financial_summary([product], movements)

        assert summary.total_revenue == 300.0
        assert summary.sold_products_cost == 12.0
        assert summary.inventory_value == 20.0
        assert summary.total_costs == 32.0
        assert summary.sales_profit == 288.0
        assert summary.profit_margin == pytest.approx(96.0)
        assert summary.net_profit == 268.0
        assert summary.total_sales == 1
        assert summary.total_productions == 1
        assert summary.total_adjustments == 1

    def test_no_revenue_means_zero_margin(self, product):
        summary = financial_summary([product], [])
        assert summary.total_revenue == 0.0
        assert summary.profit_margin == 0.0

    def test_empty(self):
        summary = financial_summary([], [])
        assert summary.net_profit == 0.0
        assert summary.total_sales == 0

    def test_seeded_stock_counts_as_production(self):
        seeded = Product(id="p2", name="Runner", category="Table runners", quantity=4)
        summary = financial_summary([seeded], [])
        assert summary.total_productions == 1

    def test_date_window_narrows_movements_only(self, product, movements):
        summary = financial_summary(
            [product],
            movements,
            start_date=datetime(2024, 5, 2, tzinfo=UTC),
            end_date=datetime(2024, 5, 2, 23, 59, tzinfo=UTC),
        )
        assert summary.total_sales == 1
        assert summary.total_adjustments == 0
        assert summary.inventory_value == 20.0

    def test_historical_cost_is_frozen(self, product, movements):
        repriced = product.model_copy(update={"average_cost": 50.0})
        summary = financial_summary([repriced], movements)
        assert summary.sold_products_cost == 12.0


class TestFilterByDate:
    def test_bounds_inclusive(self, movements):
        selected = filter_by_date(
            movements,
            start_date=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
            end_date=datetime(2024, 5, 2, 12, 0, tzinfo=UTC),
        )
        assert len(selected) == 2

    def test_no_bounds(self, movements):
        assert filter_by_date(movements) == movements


class TestTopSellingProducts:
    def test_ranked_by_units(self):
        products = [
            Product(id="a", name="A", category="Bags"),
            Product(id="b", name="B", category="Bags"),
        ]
        movements = [
            _movement("a", MovementType.SALE, -1, day=1, unit_price=10.0, average_cost_at_time=2.0),
            _movement("b", MovementType.SALE, -4, day=1, unit_price=5.0, average_cost_at_time=1.0),
            _movement("b", MovementType.SALE, -2, day=2, unit_price=7.0, average_cost_at_time=1.0),
        ]

        stats = top_selling_products(products, movements)

        assert [s.product_id for s in stats] == ["b", "a"]
        assert stats[0].total_sold == 6
        assert stats[0].revenue == 34.0
        assert stats[0].cost == 6.0
        assert stats[0].profit == 28.0
        assert stats[0].avg_sale_price == 6.0

    def test_deleted_product_name(self):
        movements = [_movement("gone", MovementType.SALE, -1, day=1, unit_price=3.0)]
        stats = top_selling_products([], movements)
        assert stats[0].product_name == DELETED_PRODUCT_NAME

    def test_limit(self):
        movements = [
            _movement(str(i), MovementType.SALE, -(i + 1), day=1, unit_price=1.0)
            for i in range(8)
        ]
        stats = top_selling_products([], movements, limit=3)
        assert len(stats) == 3
        assert stats[0].total_sold == 8

    def test_ignores_non_sales(self, product, movements):
        stats = top_selling_products([product], movements)
        assert len(stats) == 1
        assert stats[0].total_sold == 3


class TestProductProfitability:
    def test_figures(self, movements):
        result = product_profitability("p1", movements)
        assert result.total_revenue == 300.0
        assert result.total_cost == 12.0
        assert result.net_profit == 288.0
        assert result.profit_margin == pytest.approx(96.0)
        assert result.units_sold == 3
        assert result.units_produced == 10

    def test_unknown_product(self, movements):
        result = product_profitability("other", movements)
        assert result.total_revenue == 0.0
        assert result.profit_margin == 0.0


class TestInventory:
    def test_by_category(self):
        products = [
            Product(name="A", category="Bags", quantity=2, average_cost=3.0),
            Product(name="B", category="Bags", quantity=1, average_cost=4.0),
            Product(name="C", category="Blankets", quantity=5, average_cost=10.0),
        ]
        totals = inventory_by_category(products)
        assert totals["Bags"].quantity == 3
        assert totals["Bags"].value == 10.0
        assert totals["Blankets"].value == 50.0
        assert total_inventory_value(products) == 60.0


class TestStockChecks:
    @pytest.mark.parametrize(
        "quantity, expected",
        [
            (0, StockStatus.OUT_OF_STOCK),
            (1, StockStatus.LOW_STOCK),
            (4, StockStatus.LOW_STOCK),
            (5, StockStatus.IN_STOCK),
        ],
    )
    def test_status(self, quantity, expected):
        assert stock_status(quantity) is expected

    def test_custom_threshold(self):
        assert is_low_stock(8, threshold=10)
        assert not is_low_stock(0, threshold=10)
        assert is_out_of_stock(0)

    def test_product_lists(self):
        products = [
            Product(name="empty", category="x", quantity=0),
            Product(name="low", category="x", quantity=2),
            Product(name="ok", category="x", quantity=20),
        ]
        assert [p.name for p in low_stock_products(products)] == ["low"]
        assert [p.name for p in out_of_stock_products(products)] == ["empty"]
