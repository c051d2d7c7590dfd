"""Async SQLite connection wrapper with WAL mode, explicit transactions and schema initialization."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

import aiosqlite

from nestedset.config import TreeConfig
from nestedset.db.schema import schema_sql
from nestedset.errors import StorageFailureError

logger = logging.getLogger(__name__)


class Database:
    """Thin async wrapper around aiosqlite.

    The connection runs in autocommit mode. ``transaction()`` opens an explicit
    transaction; statements issued inside it commit or roll back together.
    Transactions from concurrent tasks sharing the connection run one at a
    time; nesting is tracked per task.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._lock = asyncio.Lock()
        self._depth: ContextVar[int] = ContextVar(f"nestedset_tx_depth_{id(self)}", default=0)

    @classmethod
    async def connect(
        cls, path: str = "nestedset.db", config: TreeConfig | None = None
    ) -> "Database":
        """Create a connection with WAL mode and the schema for ``config``."""
        conn = await aiosqlite.connect(path, isolation_level=None)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db.ensure_schema(config or TreeConfig())
        return db

    async def ensure_schema(self, config: TreeConfig) -> None:
        """Create the node table for ``config`` if it doesn't exist. Idempotent."""
        await self._conn.executescript(schema_sql(config))

    @property
    def in_transaction(self) -> bool:
        """True while the current task is inside ``transaction()``."""
        return self._depth.get() > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed statements atomically.

        A nested block in the same task joins the outermost transaction. Other
        tasks wait until it finishes. Any exception rolls the whole transaction
        back; store errors are re-raised as StorageFailureError with the
        original error chained.
        """
        depth = self._depth.get()
        if depth:
            token = self._depth.set(depth + 1)
            try:
                yield
            finally:
                self._depth.reset(token)
            return

        async with self._lock:
            try:
                await self._conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.Error as e:
                raise StorageFailureError(f"could not begin transaction: {e}") from e

            token = self._depth.set(1)
            try:
                yield
                await self._conn.execute("COMMIT")
            except aiosqlite.Error as e:
                await self._rollback(e)
                raise StorageFailureError(str(e)) from e
            except BaseException as e:
                await self._rollback(e)
                raise
            finally:
                self._depth.reset(token)

    async def _rollback(self, cause: BaseException) -> None:
        logger.warning("Rolling back transaction: %r", cause)
        # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
        if self._conn.in_transaction:
            await self._conn.execute("ROLLBACK")

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        """Execute a single SQL statement."""
        return await self._conn.execute(sql, params or ())

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        """Execute and return a single row."""
        cursor = await self._conn.execute(sql, params or ())
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        """Execute and return all rows."""
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()
