import asyncio
import logging
from typing import Any, Sequence

import aiosqlite

from tablekv.core.errors import ConstraintViolation
from tablekv.core.ports.connection import Connection, QueryResult
from tablekv.core.storage.statements import IDENTIFIER


class SQLiteConnection(Connection):
    """
    Connection backed by a single aiosqlite handle.

    The database file is opened and the pairs table created on the first
    call to `initialize_database()`; subsequent calls return immediately.
    Every mutation is committed as soon as it has been executed, so each
    statement is atomic on its own and nothing spans two statements.
    """

    def __init__(self, path: str, table: str = "pairs") -> None:
        if not IDENTIFIER.match(table):
            raise ValueError(f"invalid table name: {table!r}")

        self._path = path
        self._table = table
        self._db: aiosqlite.Connection | None = None
        self._initialized = False
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger("infra.sqlite.connection")

    @property
    def table(self) -> str:
        return self._table

    async def initialize_database(self) -> None:
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            db = await aiosqlite.connect(self._path)
            db.row_factory = aiosqlite.Row
            await db.execute(
                f"CREATE TABLE IF NOT EXISTS `{self._table}` ("
                "`key` BLOB PRIMARY KEY, "
                "`value` BLOB"
                ")"
            )
            await db.commit()

            self._db = db
            self._initialized = True
            self._logger.info(f"Database {self._path} ready (table {self._table})")

    async def query(self, sql: str, params: Sequence[Any]) -> QueryResult:
        if self._db is None:
            raise RuntimeError("Database is not initialized")

        try:
            async with self._db.execute(sql, list(params)) as cursor:
                rows = [dict(row) for row in await cursor.fetchall()]
                affected_rows = cursor.rowcount
        except aiosqlite.Error as ex:
            if self._db.in_transaction:
                await self._db.rollback()
            if isinstance(ex, aiosqlite.IntegrityError):
                raise ConstraintViolation(str(ex)) from ex
            raise

        if self._db.in_transaction:
            await self._db.commit()

        return QueryResult(rows=rows, affected_rows=max(affected_rows, 0))

    async def close(self) -> None:
        async with self._lock:
            if self._db is not None:
                await self._db.close()
                self._db = None
            self._initialized = False
