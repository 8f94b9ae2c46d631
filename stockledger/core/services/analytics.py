"""
Financial analytics over the movement ledger.

Pure read-side derivations recomputed on demand from the movement log and the
current product snapshot. Historical cost figures always use the
``average_cost_at_time`` frozen on each movement, never the live average.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from stockledger.core.entities import Movement, MovementType, Product, StockStatus

DEFAULT_LOW_STOCK_THRESHOLD = 5
DELETED_PRODUCT_NAME = "Deleted product"


@dataclass(frozen=True)
class FinancialSummary:
    """Business-wide financial figures."""

    total_revenue: float
    sold_products_cost: float
    inventory_value: float
    total_costs: float
    sales_profit: float
    profit_margin: float  # percent, sales-only basis
    net_profit: float  # whole-inventory basis
    total_sales: int
    total_productions: int
    total_adjustments: int


@dataclass(frozen=True)
class ProductStats:
    """Sales performance of one product."""

    product_id: str
    product_name: str
    total_sold: int
    revenue: float
    cost: float
    profit: float
    avg_sale_price: float


@dataclass(frozen=True)
class ProductProfitability:
    """Profitability of one product across its ledger history."""

    total_revenue: float
    total_cost: float
    net_profit: float
    profit_margin: float
    units_sold: int
    units_produced: int


@dataclass(frozen=True)
class CategoryValue:
    """Stock on hand and carrying value for a category."""

    quantity: int
    value: float


def _margin(profit: float, revenue: float) -> float:
    return profit / revenue * 100 if revenue > 0 else 0.0


def _cost_of_goods_sold(sales: Iterable[Movement]) -> float:
    return sum(abs(m.quantity) * m.average_cost_at_time for m in sales)


def filter_by_date(
    movements: Iterable[Movement],
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[Movement]:
    """Keep movements created within [start_date, end_date] (bounds inclusive)."""
    selected = []
    for movement in movements:
        if start_date is not None and movement.created_at < start_date:
            continue
        if end_date is not None and movement.created_at > end_date:
            continue
        selected.append(movement)
    return selected


def total_inventory_value(products: Iterable[Product]) -> float:
    return sum(p.quantity * p.average_cost for p in products)


def financial_summary(
    products: Sequence[Product],
    movements: Iterable[Movement],
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> FinancialSummary:
    """
    Compute the financial summary.

    The date window only narrows the movements considered; inventory value
    always reflects current stock.

    ``sales_profit``/``profit_margin`` are computed on goods actually sold,
    while ``net_profit`` charges the carrying cost of unsold stock as well.
    Both are reported side by side.
    """
    selected = filter_by_date(movements, start_date, end_date)

    sales = [m for m in selected if m.type == MovementType.SALE]
    productions = [m for m in selected if m.type == MovementType.PRODUCTION]
    adjustments = [m for m in selected if m.type == MovementType.ADJUSTMENT]

    total_revenue = sum(m.total_amount for m in sales)
    sold_products_cost = _cost_of_goods_sold(sales)
    inventory_value = total_inventory_value(products)
    total_costs = inventory_value + sold_products_cost

    sales_profit = total_revenue - sold_products_cost
    profit_margin = _margin(sales_profit, total_revenue)
    net_profit = total_revenue - total_costs

    # Stock seeded at creation has no production entry; count it as one run.
    produced_ids = {m.product_id for m in productions}
    seeded = [p for p in products if p.quantity > 0 and p.id not in produced_ids]

    return FinancialSummary(
        total_revenue=total_revenue,
        sold_products_cost=sold_products_cost,
        inventory_value=inventory_value,
        total_costs=total_costs,
        sales_profit=sales_profit,
        profit_margin=profit_margin,
        net_profit=net_profit,
        total_sales=len(sales),
        total_productions=len(productions) + len(seeded),
        total_adjustments=len(adjustments),
    )


def top_selling_products(
    products: Iterable[Product],
    movements: Iterable[Movement],
    limit: int = 5,
) -> list[ProductStats]:
    """Rank products by units sold, descending."""
    grouped: dict[str, dict[str, float]] = {}

    for sale in movements:
        if sale.type != MovementType.SALE:
            continue
        entry = grouped.setdefault(
            sale.product_id,
            {"sold": 0, "revenue": 0.0, "cost": 0.0, "price_sum": 0.0, "count": 0},
        )
        quantity = abs(sale.quantity)
        entry["sold"] += quantity
        entry["revenue"] += sale.total_amount
        entry["cost"] += quantity * sale.average_cost_at_time
        entry["price_sum"] += sale.unit_price or 0.0
        entry["count"] += 1

    names = {p.id: p.name for p in products}

    stats = [
        ProductStats(
            product_id=product_id,
            product_name=names.get(product_id, DELETED_PRODUCT_NAME),
            total_sold=int(data["sold"]),
            revenue=data["revenue"],
            cost=data["cost"],
            profit=data["revenue"] - data["cost"],
            avg_sale_price=data["price_sum"] / data["count"] if data["count"] else 0.0,
        )
        for product_id, data in grouped.items()
    ]
    stats.sort(key=lambda s: s.total_sold, reverse=True)
    return stats[:limit]


def product_profitability(
    product_id: str, movements: Iterable[Movement]
) -> ProductProfitability:
    """Revenue, cost and volume figures for a single product."""
    own = [m for m in movements if m.product_id == product_id]
    sales = [m for m in own if m.type == MovementType.SALE]
    productions = [m for m in own if m.type == MovementType.PRODUCTION]

    total_revenue = sum(m.total_amount for m in sales)
    total_cost = _cost_of_goods_sold(sales)
    net_profit = total_revenue - total_cost

    return ProductProfitability(
        total_revenue=total_revenue,
        total_cost=total_cost,
        net_profit=net_profit,
        profit_margin=_margin(net_profit, total_revenue),
        units_sold=sum(abs(m.quantity) for m in sales),
        units_produced=sum(m.quantity for m in productions),
    )


def inventory_by_category(products: Iterable[Product]) -> dict[str, CategoryValue]:
    totals: dict[str, CategoryValue] = {}
    for product in products:
        current = totals.get(product.category, CategoryValue(quantity=0, value=0.0))
        totals[product.category] = CategoryValue(
            quantity=current.quantity + product.quantity,
            value=current.value + product.quantity * product.average_cost,
        )
    return totals


# Stock checks


def is_out_of_stock(quantity: int) -> bool:
    return quantity == 0


def is_low_stock(quantity: int, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> bool:
    return 0 < quantity < threshold


def stock_status(
    quantity: int, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
) -> StockStatus:
    if is_out_of_stock(quantity):
        return StockStatus.OUT_OF_STOCK
    if is_low_stock(quantity, threshold):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def low_stock_products(
    products: Iterable[Product], threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
) -> list[Product]:
    return [p for p in products if is_low_stock(p.quantity, threshold)]


def out_of_stock_products(products: Iterable[Product]) -> list[Product]:
    return [p for p in products if is_out_of_stock(p.quantity)]
