"""Financial analytics endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from stockledger.api.dependencies import get_app_settings, get_report
from stockledger.application.dto.responses import (
    CategoryValueResponse,
    FinancialSummaryResponse,
    ProductListResponse,
    ProductProfitabilityResponse,
    ProductResponse,
    ProductStatsResponse,
)
from stockledger.application.use_cases import FinancialReportUseCase
from stockledger.config import Settings

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/summary", response_model=FinancialSummaryResponse)
async def financial_summary(
    start_date: datetime | None = Query(default=None, description="Inclusive lower bound"),
    end_date: datetime | None = Query(default=None, description="Inclusive upper bound"),
    report: FinancialReportUseCase = Depends(get_report),
) -> FinancialSummaryResponse:
    """
    Business-wide financial summary.

    The date window narrows the movements considered; inventory value always
    reflects current stock.
    """
    summary = await report.summary(start_date=start_date, end_date=end_date)
    return FinancialSummaryResponse(
        total_revenue=summary.total_revenue,
        sold_products_cost=summary.sold_products_cost,
        inventory_value=summary.inventory_value,
        total_costs=summary.total_costs,
        sales_profit=summary.sales_profit,
        profit_margin=summary.profit_margin,
        net_profit=summary.net_profit,
        total_sales=summary.total_sales,
        total_productions=summary.total_productions,
        total_adjustments=summary.total_adjustments,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/top-products", response_model=list[ProductStatsResponse])
async def top_products(
    limit: int | None = Query(default=None, ge=1, le=100),
    report: FinancialReportUseCase = Depends(get_report),
) -> list[ProductStatsResponse]:
    """Best sellers by units sold."""
    stats = await report.top_products(limit=limit)
    return [
        ProductStatsResponse(
            product_id=s.product_id,
            product_name=s.product_name,
            total_sold=s.total_sold,
            revenue=s.revenue,
            cost=s.cost,
            profit=s.profit,
            avg_sale_price=s.avg_sale_price,
        )
        for s in stats
    ]


@router.get("/products/{product_id}", response_model=ProductProfitabilityResponse)
async def product_profitability(
    product_id: str,
    report: FinancialReportUseCase = Depends(get_report),
) -> ProductProfitabilityResponse:
    result = await report.product_profitability(product_id)
    return ProductProfitabilityResponse(
        product_id=product_id,
        total_revenue=result.total_revenue,
        total_cost=result.total_cost,
        net_profit=result.net_profit,
        profit_margin=result.profit_margin,
        units_sold=result.units_sold,
        units_produced=result.units_produced,
    )


@router.get("/low-stock", response_model=ProductListResponse)
async def low_stock(
    threshold: int | None = Query(default=None, ge=1),
    report: FinancialReportUseCase = Depends(get_report),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    """Products with 0 < quantity < threshold."""
    threshold = threshold or settings.ledger.low_stock_threshold
    products = await report.low_stock(threshold)
    return ProductListResponse(
        products=[ProductResponse.from_entity(p, threshold) for p in products],
        total=len(products),
    )


@router.get("/out-of-stock", response_model=ProductListResponse)
async def out_of_stock(
    report: FinancialReportUseCase = Depends(get_report),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    products = await report.out_of_stock()
    return ProductListResponse(
        products=[
            ProductResponse.from_entity(p, settings.ledger.low_stock_threshold)
            for p in products
        ],
        total=len(products),
    )


@router.get("/inventory-by-category", response_model=list[CategoryValueResponse])
async def inventory_by_category(
    report: FinancialReportUseCase = Depends(get_report),
) -> list[CategoryValueResponse]:
    """Units and carrying value per category."""
    totals = await report.inventory_by_category()
    return [
        CategoryValueResponse(category=category, quantity=v.quantity, value=v.value)
        for category, v in sorted(totals.items())
    ]
