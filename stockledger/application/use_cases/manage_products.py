"""Manage Products Use Case - product lifecycle and photo attachments."""

import math

from stockledger.config import get_logger
from stockledger.core.entities import PRODUCT_CATEGORIES, Photo, Product, utcnow
from stockledger.core.exceptions import (
    InvalidCostError,
    ProductNotFoundError,
    ValidationError,
)
from stockledger.core.interfaces import Collection, IEntityStore

logger = get_logger(__name__)

# Editable through update(); stock and cost only move through the ledger
EDITABLE_FIELDS = frozenset({"name", "category", "price", "notes"})


def _check_price(price: float) -> None:
    if not math.isfinite(price) or price < 0:
        raise ValidationError(
            f"price must be a finite number, not negative: {price}",
            code="INVALID_PRICE",
            details={"price": price if math.isfinite(price) else str(price)},
        )


class ManageProductsUseCase:
    """Create, edit, delete and query products."""

    def __init__(self, store: IEntityStore | None = None):
        self._store = store

    async def _get_store(self) -> IEntityStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import get_entity_store

            self._store = await get_entity_store()
        return self._store

    async def create(
        self,
        name: str,
        category: str,
        quantity: int = 0,
        price: float = 0.0,
        initial_cost: float = 0.0,
        notes: str | None = None,
    ) -> Product:
        """
        Create a product with its opening stock.

        ``initial_cost`` seeds the moving average cost. Opening stock is not
        recorded as a movement.
        """
        if quantity < 0:
            raise ValidationError(
                f"initial quantity cannot be negative: {quantity}",
                code="INVALID_QUANTITY",
                details={"quantity": quantity},
            )
        if not math.isfinite(initial_cost) or initial_cost < 0:
            raise InvalidCostError(initial_cost)
        _check_price(price)

        product = Product(
            name=name,
            category=category,
            quantity=quantity,
            price=price,
            average_cost=initial_cost,
            notes=notes,
        )
        store = await self._get_store()
        await store.put(Collection.PRODUCTS, product)

        logger.info(
            "product_created",
            product_id=product.id,
            category=category,
            quantity=quantity,
        )
        return product

    async def get(self, product_id: str) -> Product:
        store = await self._get_store()
        product = await store.get(Collection.PRODUCTS, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def list_products(self, category: str | None = None) -> list[Product]:
        """List products, optionally by category, sorted by name."""
        store = await self._get_store()
        if category is not None:
            products = await store.get_by_index(Collection.PRODUCTS, "by-category", category)
        else:
            products = await store.get_all(Collection.PRODUCTS)
        return sorted(products, key=lambda p: p.name.lower())

    async def search(self, term: str) -> list[Product]:
        """Case-insensitive match on name, category or notes."""
        needle = term.strip().lower()
        products = await self.list_products()
        if not needle:
            return products
        return [
            p
            for p in products
            if needle in p.name.lower()
            or needle in p.category.lower()
            or (p.notes and needle in p.notes.lower())
        ]

    async def categories(self) -> list[str]:
        """Suggested categories followed by any custom ones in use."""
        store = await self._get_store()
        in_use = {p.category for p in await store.get_all(Collection.PRODUCTS)}
        custom = sorted(in_use.difference(PRODUCT_CATEGORIES))
        return [*PRODUCT_CATEGORIES, *custom]

    async def update(self, product_id: str, **changes) -> Product:
        """Edit descriptive fields of a product."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"fields cannot be edited directly: {', '.join(sorted(unknown))}",
                code="FIELD_NOT_EDITABLE",
                details={"fields": sorted(unknown)},
            )
        if changes.get("price") is not None:
            _check_price(changes["price"])

        store = await self._get_store()
        async with store.transaction() as session:
            product = await session.get(Collection.PRODUCTS, product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            updated = product.model_copy(update={**changes, "updated_at": utcnow()})
            await session.put(Collection.PRODUCTS, updated)

        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        return updated

    async def delete(self, product_id: str) -> None:
        """Delete a product and its photos. Its movements are kept."""
        store = await self._get_store()
        product = await store.get(Collection.PRODUCTS, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        await store.delete_product(product_id)

    # Photos

    async def add_photo(
        self,
        product_id: str,
        blob: bytes,
        thumbnail: bytes,
        mime_type: str,
        width: int = 0,
        height: int = 0,
        size: int | None = None,
    ) -> Photo:
        """Attach an already-processed image to a product."""
        store = await self._get_store()
        if await store.get(Collection.PRODUCTS, product_id) is None:
            raise ProductNotFoundError(product_id)

        photo = Photo(
            product_id=product_id,
            blob=blob,
            thumbnail=thumbnail,
            mime_type=mime_type,
            size=len(blob) if size is None else size,
            compressed_size=len(blob),
            width=width,
            height=height,
        )
        await store.put(Collection.PHOTOS, photo)
        logger.info("photo_added", product_id=product_id, photo_id=photo.id)
        return photo

    async def list_photos(self, product_id: str) -> list[Photo]:
        """Photos of a product, oldest first."""
        store = await self._get_store()
        photos = await store.get_by_index(Collection.PHOTOS, "by-product", product_id)
        return sorted(photos, key=lambda p: p.created_at)

    async def delete_photo(self, photo_id: str) -> None:
        store = await self._get_store()
        await store.delete(Collection.PHOTOS, photo_id)
        logger.info("photo_deleted", photo_id=photo_id)
