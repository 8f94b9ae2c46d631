"""Financial Report Use Case - loads the ledger and runs the analytics."""

from datetime import datetime

from stockledger.config import get_logger, get_settings
from stockledger.core.entities import Movement, Product, ensure_utc
from stockledger.core.interfaces import Collection, IEntityStore
from stockledger.core.services import analytics
from stockledger.core.services.analytics import (
    CategoryValue,
    FinancialSummary,
    ProductProfitability,
    ProductStats,
)

logger = get_logger(__name__)


class FinancialReportUseCase:
    """Read-side reports recomputed on demand from the movement log."""

    def __init__(
        self,
        store: IEntityStore | None = None,
        low_stock_threshold: int | None = None,
        top_products_limit: int | None = None,
    ):
        self._store = store
        settings = get_settings()
        self.low_stock_threshold = (
            low_stock_threshold
            if low_stock_threshold is not None
            else settings.ledger.low_stock_threshold
        )
        self.top_products_limit = (
            top_products_limit
            if top_products_limit is not None
            else settings.ledger.top_products_limit
        )

    async def _get_store(self) -> IEntityStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import get_entity_store

            self._store = await get_entity_store()
        return self._store

    async def _load_products(self) -> list[Product]:
        store = await self._get_store()
        return await store.get_all(Collection.PRODUCTS)

    async def _load_movements(self) -> list[Movement]:
        store = await self._get_store()
        return await store.get_all(Collection.MOVEMENTS)

    async def summary(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> FinancialSummary:
        """Financial summary, optionally limited to a date window."""
        products = await self._load_products()
        movements = await self._load_movements()

        result = analytics.financial_summary(
            products,
            movements,
            start_date=ensure_utc(start_date) if start_date else None,
            end_date=ensure_utc(end_date) if end_date else None,
        )
        logger.debug(
            "financial_summary_computed",
            products=len(products),
            movements=len(movements),
            total_revenue=result.total_revenue,
        )
        return result

    async def top_products(self, limit: int | None = None) -> list[ProductStats]:
        products = await self._load_products()
        movements = await self._load_movements()
        return analytics.top_selling_products(
            products, movements, limit=limit or self.top_products_limit
        )

    async def product_profitability(self, product_id: str) -> ProductProfitability:
        # Deleted products still have a ledger history, so no existence check
        store = await self._get_store()
        movements = await store.get_by_index(Collection.MOVEMENTS, "by-product", product_id)
        return analytics.product_profitability(product_id, movements)

    async def inventory_by_category(self) -> dict[str, CategoryValue]:
        return analytics.inventory_by_category(await self._load_products())

    async def inventory_value(self) -> float:
        return analytics.total_inventory_value(await self._load_products())

    async def low_stock(self, threshold: int | None = None) -> list[Product]:
        products = await self._load_products()
        return analytics.low_stock_products(
            products, threshold if threshold is not None else self.low_stock_threshold
        )

    async def out_of_stock(self) -> list[Product]:
        return analytics.out_of_stock_products(await self._load_products())
