"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    SQLiteEntityStore,
    close_pool,
    get_connection,
    get_entity_store,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite store
    "SQLiteEntityStore",
    "get_entity_store",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
