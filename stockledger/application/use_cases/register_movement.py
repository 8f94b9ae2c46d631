"""Register Movement Use Case - the transaction coordinator.

Turns a business event (sale, production run, adjustment) into one atomic
state transition: load the product, run the costing engine, then write the
movement and the updated product in the same storage transaction.
"""

import asyncio
import math
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from stockledger.config import get_logger
from stockledger.core.entities import (
    Movement,
    MovementFilters,
    Product,
    ProductSnapshot,
    utcnow,
)
from stockledger.core.exceptions import (
    InvalidCostError,
    InvalidPriceError,
    MovementNotFoundError,
    ProductNotFoundError,
)
from stockledger.core.interfaces import Collection, IEntityStore
from stockledger.core.services.analytics import filter_by_date
from stockledger.core.services.costing import (
    CostingResult,
    apply_adjustment,
    apply_production,
    apply_sale,
    recalculate_total,
)

logger = get_logger(__name__)

# Fields a correction may not rewrite
PROTECTED_MOVEMENT_FIELDS = frozenset(
    {"id", "created_at", "product_snapshot", "average_cost_at_time"}
)


@dataclass
class TransactionResult:
    """Product state and ledger entry produced by one business event."""

    product: Product
    movement: Movement


class TransactionCoordinator:
    """
    Register inventory events atomically.

    Events for the same product are serialized with a per-product lock, and
    each event runs in a single write transaction spanning the movement and
    the product. A costing rejection raises before anything is written; a
    storage failure rolls back both writes.
    """

    def __init__(self, store: IEntityStore | None = None):
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}
        # Tasks holding or waiting on each lock; the entry goes at zero
        self._lock_users: dict[str, int] = {}

    async def _get_store(self) -> IEntityStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import get_entity_store

            self._store = await get_entity_store()
        return self._store

    @asynccontextmanager
    async def _product_lock(self, product_id: str) -> AsyncIterator[None]:
        """Serialize events per product without keeping a lock per id forever."""
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        self._lock_users[product_id] = self._lock_users.get(product_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[product_id] -= 1
            if self._lock_users[product_id] == 0:
                del self._lock_users[product_id]
                del self._locks[product_id]

    async def register_sale(
        self,
        product_id: str,
        quantity: int,
        unit_price: float | None = None,
        notes: str | None = None,
    ) -> TransactionResult:
        """Sell units. Raises InsufficientStockError or InvalidPriceError."""
        return await self._register(
            product_id,
            lambda product: apply_sale(product, quantity, unit_price),
            notes,
        )

    async def register_production(
        self,
        product_id: str,
        quantity: int,
        unit_cost: float,
        notes: str | None = None,
    ) -> TransactionResult:
        """Add produced units and re-blend the average cost."""
        return await self._register(
            product_id,
            lambda product: apply_production(product, quantity, unit_cost),
            notes,
        )

    async def register_adjustment(
        self,
        product_id: str,
        delta: int,
        notes: str | None = None,
    ) -> TransactionResult:
        """Correct stock by a signed delta."""
        return await self._register(
            product_id,
            lambda product: apply_adjustment(product, delta),
            notes,
        )

    async def _register(
        self,
        product_id: str,
        compute: Callable[[Product], CostingResult],
        notes: str | None,
    ) -> TransactionResult:
        store = await self._get_store()

        async with self._product_lock(product_id):
            async with store.transaction() as session:
                product = await session.get(Collection.PRODUCTS, product_id)
                if product is None:
                    raise ProductNotFoundError(product_id)

                result = compute(product)

                now = utcnow()
                movement = Movement(
                    product_id=product.id,
                    type=result.movement_type,
                    quantity=result.quantity_delta,
                    unit_price=result.unit_price,
                    unit_cost=result.unit_cost,
                    total_amount=result.total_amount,
                    average_cost_at_time=result.average_cost_at_time,
                    notes=notes,
                    created_at=now,
                    product_snapshot=ProductSnapshot(
                        name=product.name,
                        category=product.category,
                    ),
                )
                updated = product.model_copy(
                    update={
                        "quantity": result.new_quantity,
                        "average_cost": result.new_average_cost,
                        "updated_at": now,
                    }
                )

                await session.put(Collection.MOVEMENTS, movement)
                await session.put(Collection.PRODUCTS, updated)

        logger.info(
            f"{result.movement_type.value}_registered",
            product_id=product_id,
            movement_id=movement.id,
            quantity=result.quantity_delta,
            new_quantity=updated.quantity,
            average_cost=round(updated.average_cost, 4),
        )
        return TransactionResult(product=updated, movement=movement)

    # Corrections

    async def update_movement(self, movement_id: str, **changes: Any) -> Movement:
        """
        Rewrite a recorded movement.

        Identity fields are preserved and ``total_amount`` is re-derived from
        the corrected fields. Product stock is NOT recalculated; fix stock
        with an explicit adjustment if needed.
        """
        unit_price = changes.get("unit_price")
        if unit_price is not None and (not math.isfinite(unit_price) or unit_price <= 0):
            raise InvalidPriceError(unit_price)
        unit_cost = changes.get("unit_cost")
        if unit_cost is not None and (not math.isfinite(unit_cost) or unit_cost < 0):
            raise InvalidCostError(unit_cost)

        store = await self._get_store()

        async with store.transaction() as session:
            movement = await session.get(Collection.MOVEMENTS, movement_id)
            if movement is None:
                raise MovementNotFoundError(movement_id)

            allowed = {k: v for k, v in changes.items() if k not in PROTECTED_MOVEMENT_FIELDS}
            updated = Movement.model_validate({**movement.model_dump(), **allowed})
            updated = updated.model_copy(update={"total_amount": recalculate_total(updated)})

            await session.put(Collection.MOVEMENTS, updated)

        logger.warning(
            "movement_corrected_stock_unchanged",
            movement_id=movement_id,
            product_id=updated.product_id,
            fields=sorted(allowed),
        )
        return updated

    async def delete_movement(self, movement_id: str) -> None:
        """Remove a movement from the ledger. Product stock is NOT restored."""
        store = await self._get_store()

        async with store.transaction() as session:
            movement = await session.get(Collection.MOVEMENTS, movement_id)
            if movement is None:
                raise MovementNotFoundError(movement_id)
            await session.delete(Collection.MOVEMENTS, movement_id)

        logger.warning(
            "movement_deleted_stock_unchanged",
            movement_id=movement_id,
            product_id=movement.product_id,
        )

    # Reads

    async def get_movement(self, movement_id: str) -> Movement:
        store = await self._get_store()
        movement = await store.get(Collection.MOVEMENTS, movement_id)
        if movement is None:
            raise MovementNotFoundError(movement_id)
        return movement

    async def list_movements(self, filters: MovementFilters | None = None) -> list[Movement]:
        """List movements matching the filters, newest first."""
        filters = filters or MovementFilters()
        store = await self._get_store()

        if filters.product_id is not None:
            movements = await store.get_by_index(
                Collection.MOVEMENTS, "by-product", filters.product_id
            )
        elif filters.type is not None:
            movements = await store.get_by_index(
                Collection.MOVEMENTS, "by-type", filters.type
            )
        else:
            movements = await store.get_all(Collection.MOVEMENTS)

        if filters.type is not None:
            movements = [m for m in movements if m.type == filters.type]
        movements = filter_by_date(movements, filters.start_date, filters.end_date)

        return sorted(movements, key=lambda m: m.created_at, reverse=True)

    async def recent_movements(self, limit: int = 10) -> list[Movement]:
        movements = await self.list_movements()
        return movements[:limit]
