"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.storage import (
    ENTITY_TYPES,
    INDEXES,
    Collection,
    Entity,
    IEntityStore,
    IStoreSession,
)

__all__ = [
    "Collection",
    "Entity",
    "ENTITY_TYPES",
    "INDEXES",
    "IEntityStore",
    "IStoreSession",
]
