"""
Async SQLite connections for the ledger database.

Connections are opened lazily up to ``pool_size`` and handed out through a
queue. Writes go through :meth:`ConnectionPool.transaction`, which takes the
SQLite write lock before the first statement so a sale's stock check and its
stock decrement see the same snapshot.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import DatabaseError

logger = get_logger(__name__)

# Applied to every connection right after it is opened
_SESSION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Bounded set of aiosqlite connections to one database file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        if pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._opened: list[aiosqlite.Connection] = []
        self._open_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_settings(cls) -> "ConnectionPool":
        storage = get_settings().storage
        return cls(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )

    @property
    def open_connections(self) -> int:
        return len(self._opened)

    async def initialize(self) -> None:
        """Open the first connection so a bad path fails at startup."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._open_lock:
            if not self._opened:
                await self._idle.put(await self._open())
        logger.info("connection_pool_ready", db_path=str(self.db_path), pool_size=self.pool_size)

    async def _open(self) -> aiosqlite.Connection:
        try:
            conn = await aiosqlite.connect(self.db_path)
            for pragma in _SESSION_PRAGMAS:
                await conn.execute(pragma)
            await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        except aiosqlite.Error as e:
            raise DatabaseError("connect", str(e)) from e
        conn.row_factory = aiosqlite.Row
        self._opened.append(conn)
        logger.debug("connection_opened", total=len(self._opened))
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        if self._closed:
            raise DatabaseError("acquire", "connection pool is closed")
        try:
            return self._idle.get_nowait()
        except asyncio.QueueEmpty:
            pass
        async with self._open_lock:
            if len(self._opened) < self.pool_size:
                return await self._open()
        # Every connection is checked out; wait for one to come back
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads; it is returned when the block exits."""
        conn = await self._checkout()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside ``BEGIN IMMEDIATE``.

        Commits when the block exits normally and rolls back otherwise.
        SQLite failures surface as DatabaseError.
        """
        async with self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.Error as e:
                raise DatabaseError("begin", str(e)) from e

            try:
                yield conn
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.error("transaction_rolled_back", error=str(e))
                raise DatabaseError("transaction", str(e)) from e
            except BaseException:
                await conn.rollback()
                raise

            try:
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                raise DatabaseError("commit", str(e)) from e

    async def close(self) -> None:
        self._closed = True
        async with self._open_lock:
            for conn in self._opened:
                await conn.close()
            count = len(self._opened)
            self._opened.clear()
        while not self._idle.empty():
            self._idle.get_nowait()
        logger.info("connection_pool_closed", closed=count)


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool, built from settings on first use."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_settings()
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
