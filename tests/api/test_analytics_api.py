"""API tests for analytics endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from stockledger.api.dependencies import get_report
from stockledger.api.main import app
from stockledger.application.use_cases import FinancialReportUseCase
from stockledger.core.entities import Product
from stockledger.core.services.analytics import (
    CategoryValue,
    FinancialSummary,
    ProductProfitability,
    ProductStats,
)


@pytest.fixture
def mock_report():
    report = AsyncMock(spec=FinancialReportUseCase)
    report.summary.return_value = FinancialSummary(
        total_revenue=300.0,
        sold_products_cost=12.0,
        inventory_value=20.0,
        total_costs=32.0,
        sales_profit=288.0,
        profit_margin=96.0,
        net_profit=268.0,
        total_sales=1,
        total_productions=1,
        total_adjustments=1,
    )
    report.top_products.return_value = [
        ProductStats(
            product_id="p1",
            product_name="Tote",
            total_sold=3,
            revenue=300.0,
            cost=12.0,
            profit=288.0,
            avg_sale_price=100.0,
        )
    ]
    report.product_profitability.return_value = ProductProfitability(
        total_revenue=300.0,
        total_cost=12.0,
        net_profit=288.0,
        profit_margin=96.0,
        units_sold=3,
        units_produced=10,
    )
    report.low_stock.return_value = [Product(id="p1", name="Tote", category="Bags", quantity=2)]
    report.out_of_stock.return_value = []
    report.inventory_by_category.return_value = {
        "Blankets": CategoryValue(quantity=4, value=40.0),
        "Bags": CategoryValue(quantity=5, value=20.0),
    }
    return report


@pytest.fixture
async def client(mock_report):
    app.dependency_overrides[get_report] = lambda: mock_report
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_report, None)


class TestAnalyticsAPI:
    async def test_summary(self, client: AsyncClient):
        response = await client.get("/api/analytics/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["total_revenue"] == 300.0
        assert data["sales_profit"] == 288.0
        assert data["net_profit"] == 268.0
        assert data["profit_margin"] == 96.0
        assert data["start_date"] is None

    async def test_summary_window(self, client: AsyncClient, mock_report):
        response = await client.get(
            "/api/analytics/summary",
            params={"start_date": "2024-05-01T00:00:00Z", "end_date": "2024-05-31T23:59:59Z"},
        )
        assert response.status_code == 200
        kwargs = mock_report.summary.call_args.kwargs
        assert kwargs["start_date"].day == 1
        assert kwargs["end_date"].day == 31

    async def test_top_products(self, client: AsyncClient, mock_report):
        response = await client.get("/api/analytics/top-products", params={"limit": 3})
        assert response.status_code == 200
        assert response.json()[0]["product_name"] == "Tote"
        mock_report.top_products.assert_awaited_once_with(limit=3)

    async def test_product_profitability(self, client: AsyncClient):
        response = await client.get("/api/analytics/products/p1")
        assert response.status_code == 200
        data = response.json()
        assert data["product_id"] == "p1"
        assert data["units_produced"] == 10

    async def test_low_stock(self, client: AsyncClient, mock_report):
        response = await client.get("/api/analytics/low-stock", params={"threshold": 3})
        assert response.status_code == 200
        assert response.json()["products"][0]["stock_status"] == "low-stock"
        mock_report.low_stock.assert_awaited_once_with(3)

    async def test_out_of_stock(self, client: AsyncClient):
        response = await client.get("/api/analytics/out-of-stock")
        assert response.json() == {"products": [], "total": 0}

    async def test_inventory_by_category_sorted(self, client: AsyncClient):
        response = await client.get("/api/analytics/inventory-by-category")
        assert [c["category"] for c in response.json()] == ["Bags", "Blankets"]
