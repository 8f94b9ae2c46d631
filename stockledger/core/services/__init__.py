"""
Core business logic services.

Layer-pure modules that depend only on:
- stockledger/core/entities/*
- stockledger/core/exceptions.py

NO infrastructure imports and no I/O.
"""

from stockledger.core.services.analytics import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    DELETED_PRODUCT_NAME,
    CategoryValue,
    FinancialSummary,
    ProductProfitability,
    ProductStats,
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
from stockledger.core.services.costing import (
    CostingResult,
    apply_adjustment,
    apply_production,
    apply_sale,
    recalculate_total,
    weighted_average_cost,
)
from stockledger.core.services.snapshot import (
    CURRENT_SCHEMA_VERSION,
    Snapshot,
    dump_snapshot,
    encode_snapshot,
    parse_snapshot,
    upcast,
)

__all__ = [
    # Costing
    "CostingResult",
    "apply_sale",
    "apply_production",
    "apply_adjustment",
    "recalculate_total",
    "weighted_average_cost",
    # Analytics
    "DEFAULT_LOW_STOCK_THRESHOLD",
    "DELETED_PRODUCT_NAME",
    "CategoryValue",
    "FinancialSummary",
    "ProductProfitability",
    "ProductStats",
    "filter_by_date",
    "financial_summary",
    "inventory_by_category",
    "is_low_stock",
    "is_out_of_stock",
    "low_stock_products",
    "out_of_stock_products",
    "product_profitability",
    "stock_status",
    "top_selling_products",
    "total_inventory_value",
    # Snapshot
    "CURRENT_SCHEMA_VERSION",
    "Snapshot",
    "dump_snapshot",
    "encode_snapshot",
    "parse_snapshot",
    "upcast",
]
