"""
Moving-average costing engine.

Pure, synchronous functions that compute the stock and cost consequences of
one inventory event. Nothing here performs I/O or mutates its inputs; the
transaction coordinator persists the result.
"""

import math
from dataclasses import dataclass

from stockledger.core.entities import Movement, MovementType, Product
from stockledger.core.exceptions import (
    InsufficientStockError,
    InvalidCostError,
    InvalidPriceError,
    InvalidQuantityError,
    NegativeStockError,
    ZeroAdjustmentError,
)


@dataclass(frozen=True)
class CostingResult:
    """Outcome of applying one event to a product."""

    movement_type: MovementType
    quantity_delta: int
    new_quantity: int
    new_average_cost: float
    total_amount: float
    average_cost_at_time: float
    unit_price: float | None = None
    unit_cost: float | None = None


def weighted_average_cost(
    current_quantity: int,
    current_cost: float,
    incoming_quantity: int,
    incoming_cost: float,
) -> float:
    """
    Blend existing stock cost with incoming stock cost.

    With no stock on hand the incoming cost is taken as-is, so a stale
    average never dilutes a fresh cost basis.
    """
    if current_quantity == 0:
        return incoming_cost
    total_cost = current_quantity * current_cost + incoming_quantity * incoming_cost
    return total_cost / (current_quantity + incoming_quantity)


def apply_sale(
    product: Product,
    quantity: int,
    unit_price: float | None = None,
) -> CostingResult:
    """Sell units out of stock. Average cost is unchanged."""
    if quantity <= 0 or quantity > product.quantity:
        raise InsufficientStockError(
            product_id=product.id,
            requested=quantity,
            available=product.quantity,
        )

    price = product.price if unit_price is None else unit_price
    if not math.isfinite(price) or price <= 0:
        raise InvalidPriceError(price)

    return CostingResult(
        movement_type=MovementType.SALE,
        quantity_delta=-quantity,
        new_quantity=product.quantity - quantity,
        new_average_cost=product.average_cost,
        total_amount=price * quantity,
        # cost basis of the goods sold
        average_cost_at_time=product.average_cost,
        unit_price=price,
    )


def apply_production(
    product: Product,
    quantity: int,
    unit_cost: float,
) -> CostingResult:
    """Add produced units and re-blend the moving average cost."""
    if quantity <= 0:
        raise InvalidQuantityError(quantity)
    if not math.isfinite(unit_cost) or unit_cost < 0:
        raise InvalidCostError(unit_cost)

    new_average = weighted_average_cost(
        product.quantity, product.average_cost, quantity, unit_cost
    )

    return CostingResult(
        movement_type=MovementType.PRODUCTION,
        quantity_delta=quantity,
        new_quantity=product.quantity + quantity,
        new_average_cost=new_average,
        total_amount=unit_cost * quantity,
        # the basis established by this run, not the prior one
        average_cost_at_time=new_average,
        unit_cost=unit_cost,
    )


def apply_adjustment(product: Product, delta: int) -> CostingResult:
    """Correct stock by a signed delta. No monetary value, cost unchanged."""
    if delta == 0:
        raise ZeroAdjustmentError(product.id)
    new_quantity = product.quantity + delta
    if new_quantity < 0:
        raise NegativeStockError(
            product_id=product.id,
            delta=delta,
            available=product.quantity,
        )

    return CostingResult(
        movement_type=MovementType.ADJUSTMENT,
        quantity_delta=delta,
        new_quantity=new_quantity,
        new_average_cost=product.average_cost,
        total_amount=0.0,
        average_cost_at_time=product.average_cost,
    )


def recalculate_total(movement: Movement) -> float:
    """Monetary total implied by a movement's own fields."""
    if movement.type == MovementType.SALE and movement.unit_price is not None:
        return movement.unit_price * abs(movement.quantity)
    if movement.type == MovementType.PRODUCTION and movement.unit_cost is not None:
        return movement.unit_cost * abs(movement.quantity)
    if movement.type == MovementType.ADJUSTMENT:
        return 0.0
    return movement.total_amount
