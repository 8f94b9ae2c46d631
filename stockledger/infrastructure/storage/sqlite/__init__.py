"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockledger.infrastructure.storage.sqlite.entity_store import (
    SQLiteEntityStore,
    SQLiteStoreSession,
)

# Singleton instance
_entity_store: SQLiteEntityStore | None = None


async def get_entity_store() -> SQLiteEntityStore:
    """Get singleton entity store instance."""
    global _entity_store
    if _entity_store is None:
        _entity_store = SQLiteEntityStore()
    return _entity_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store
    "SQLiteEntityStore",
    "SQLiteStoreSession",
    "get_entity_store",
]
