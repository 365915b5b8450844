"""SQLite connection backed by the standard-library ``sqlite3`` module."""
from __future__ import annotations

import sqlite3
from typing import Any, ClassVar

from brickorm.config import EngineConfig
from brickorm.connection.base import Connection, StatementResult
from brickorm.dialect.sqlite import SQLiteDialect


class SQLiteConnection(Connection):
    """Runs compiled statements on a ``sqlite3.Connection``.

    Parameter style: ``?`` – the compiler's own placeholder, so SQL is
    passed to ``sqlite3`` unchanged.

    The wrapped connection is switched to autocommit
    (``isolation_level = None``) so that transactions are only opened by
    :meth:`begin` / :meth:`Connection.transaction`, never implicitly.
    """

    driver_errors: ClassVar[tuple[type[BaseException], ...]] = (sqlite3.Error,)

    def __init__(
        self, connection: sqlite3.Connection, config: EngineConfig | None = None
    ) -> None:
        super().__init__(SQLiteDialect(), config)
        connection.isolation_level = None
        self._conn = connection

    @classmethod
    def connect(
        cls, database: str = ":memory:", config: EngineConfig | None = None, **kwargs: Any
    ) -> SQLiteConnection:
        """Open ``database`` (a path or ``":memory:"``) and wrap it."""
        return cls(sqlite3.connect(database, **kwargs), config)

    @property
    def raw_connection(self) -> sqlite3.Connection:
        return self._conn

    def _perform(self, sql: str, bindings: list[Any]) -> StatementResult:
        cursor = self._conn.execute(sql, bindings)
        try:
            rows: list[dict[str, Any]] = []
            if cursor.description is not None:
                columns = [d[0] for d in cursor.description]
                rows = [dict(zip(columns, values)) for values in cursor.fetchall()]
            return StatementResult(
                rows=rows, rowcount=cursor.rowcount, lastrowid=cursor.lastrowid or None
            )
        finally:
            cursor.close()

    def begin(self) -> None:
        self.run("BEGIN")

    def commit(self) -> None:
        self.run("COMMIT")

    def rollback(self) -> None:
        self.run("ROLLBACK")

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def close(self) -> None:
        self._conn.close()

    def executescript(self, script: str) -> None:
        """Run a multi-statement SQL script (schema setup, fixtures)."""
        self._conn.executescript(script)
