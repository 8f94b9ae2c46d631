"""Abstract interface for the entity store."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Any

from stockledger.core.entities import Movement, Photo, Product

Entity = Product | Movement | Photo


class Collection(str, Enum):
    """Named collections held by the entity store."""

    PRODUCTS = "products"
    MOVEMENTS = "movements"
    PHOTOS = "photos"


# Secondary indexes per collection: index name -> entity attribute
INDEXES: dict[Collection, dict[str, str]] = {
    Collection.PRODUCTS: {
        "by-category": "category",
        "by-updated": "updated_at",
    },
    Collection.MOVEMENTS: {
        "by-product": "product_id",
        "by-type": "type",
        "by-date": "created_at",
    },
    Collection.PHOTOS: {
        "by-product": "product_id",
        "by-created": "created_at",
    },
}

ENTITY_TYPES: dict[Collection, type[Entity]] = {
    Collection.PRODUCTS: Product,
    Collection.MOVEMENTS: Movement,
    Collection.PHOTOS: Photo,
}


class IStoreSession(ABC):
    """
    Operations bound to one open storage transaction.

    Everything done through a session is committed together or not at all.
    """

    @abstractmethod
    async def get(self, collection: Collection, entity_id: str) -> Entity | None:
        """Get an entity by ID."""
        pass

    @abstractmethod
    async def get_all(self, collection: Collection) -> list[Entity]:
        """Get every entity of a collection (order not meaningful)."""
        pass

    @abstractmethod
    async def get_by_index(
        self, collection: Collection, index_name: str, value: Any
    ) -> list[Entity]:
        """Get entities whose indexed attribute equals value."""
        pass

    @abstractmethod
    async def put(self, collection: Collection, entity: Entity) -> Entity:
        """Insert or replace an entity."""
        pass

    @abstractmethod
    async def delete(self, collection: Collection, entity_id: str) -> None:
        """Remove an entity (no-op when absent)."""
        pass

    @abstractmethod
    async def clear(self, collection: Collection) -> None:
        """Remove every entity of a collection."""
        pass


class IEntityStore(ABC):
    """Interface for product, movement and photo persistence."""

    @abstractmethod
    async def get(self, collection: Collection, entity_id: str) -> Entity | None:
        """Get an entity by ID."""
        pass

    @abstractmethod
    async def get_all(self, collection: Collection) -> list[Entity]:
        """Get every entity of a collection (order not meaningful)."""
        pass

    @abstractmethod
    async def get_by_index(
        self, collection: Collection, index_name: str, value: Any
    ) -> list[Entity]:
        """Get entities whose indexed attribute equals value."""
        pass

    @abstractmethod
    async def put(self, collection: Collection, entity: Entity) -> Entity:
        """Insert or replace an entity."""
        pass

    @abstractmethod
    async def delete(self, collection: Collection, entity_id: str) -> None:
        """Remove an entity (no-op when absent)."""
        pass

    @abstractmethod
    async def count(self, collection: Collection) -> int:
        """Number of entities in a collection."""
        pass

    @abstractmethod
    async def delete_product(self, product_id: str) -> None:
        """Delete a product and its photos. Movements are left untouched."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[IStoreSession]:
        """
        Open a write transaction spanning all collections.

        Usage:
            async with store.transaction() as session:
                await session.put(Collection.MOVEMENTS, movement)
                await session.put(Collection.PRODUCTS, product)
        """
        pass


__all__ = [
    "Collection",
    "Entity",
    "ENTITY_TYPES",
    "INDEXES",
    "IEntityStore",
    "IStoreSession",
]
