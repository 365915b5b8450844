"""Connection backed by a SQLAlchemy ``Engine``.

Lets the engine run on any database SQLAlchemy has a driver for
(``psycopg``, ``PyMySQL``, ``pyodbc``, ``sqlite3``, …) while brickORM keeps
compiling the SQL itself.  Only the driver-level API is used
(``exec_driver_sql``); SQLAlchemy's own SQL expression layer is not.

Install the optional dependency before using this module::

    pip install "brickorm[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from brickorm.connection.sqlalchemy import SQLAlchemyConnection

    conn = SQLAlchemyConnection(create_engine("postgresql+psycopg://app@localhost/app"))
    rows = conn.table("users").where("active", True).get()
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from brickorm.config import EngineConfig
from brickorm.connection import placeholders
from brickorm.connection.base import Connection, StatementResult
from brickorm.dialect.base import Dialect
from brickorm.dialect.registry import DialectFactory

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.engine import Connection as SAConnection, RootTransaction


class SQLAlchemyConnection(Connection):
    """Runs compiled statements through a SQLAlchemy engine.

    The dialect is resolved from ``engine.dialect.name`` through
    :class:`~brickorm.dialect.registry.DialectFactory` unless one is passed
    explicitly.  ``?`` placeholders are rewritten for the driver's
    paramstyle before execution.

    Outside an explicit transaction every statement is committed right
    after it runs, matching the autocommit behaviour of the other
    connections.

    Args:
        engine: A SQLAlchemy :class:`~sqlalchemy.engine.Engine`.
        config: Engine configuration.
        dialect: Override the dialect resolved from the engine.
    """

    driver_errors: ClassVar[tuple[type[BaseException], ...]] = (SQLAlchemyError,)

    def __init__(
        self,
        engine: Engine,
        config: EngineConfig | None = None,
        dialect: Dialect | None = None,
    ) -> None:
        super().__init__(dialect or DialectFactory.create(engine.dialect.name), config)
        self._engine = engine
        self._conn: SAConnection = engine.connect()
        self._paramstyle: str = engine.dialect.paramstyle
        self._transaction: RootTransaction | None = None

    @property
    def engine(self) -> Engine:
        return self._engine

    def _perform(self, sql: str, bindings: list[Any]) -> StatementResult:
        params = placeholders.as_parameters(bindings)
        if params:
            driver_sql = placeholders.translate(sql, self._paramstyle)
            result = self._conn.exec_driver_sql(driver_sql, params)
        else:
            # No parameters: the driver does no %-interpolation either.
            result = self._conn.exec_driver_sql(sql)
        try:
            rows = [dict(m) for m in result.mappings().all()] if result.returns_rows else []
            outcome = StatementResult(
                rows=rows, rowcount=result.rowcount, lastrowid=_lastrowid(result)
            )
        finally:
            result.close()
        if self._transaction is None:
            self._conn.commit()
        return outcome

    def begin(self) -> None:
        if self._conn.in_transaction():
            # Close the implicit "autobegin" transaction left by reads.
            self._conn.commit()
        self._transaction = self._conn.begin()

    def commit(self) -> None:
        if self._transaction is not None:
            self._transaction.commit()
            self._transaction = None

    def rollback(self) -> None:
        if self._transaction is not None:
            self._transaction.rollback()
            self._transaction = None

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def close(self) -> None:
        self._conn.close()

    def run(self, sql: str, bindings: Sequence[Any] = ()) -> StatementResult:
        try:
            return super().run(sql, bindings)
        except Exception:
            # A failed statement leaves SQLAlchemy's implicit transaction
            # in an aborted state; reset it unless the caller owns one.
            if self._transaction is None and self._conn.in_transaction():
                self._conn.rollback()
            raise


def _lastrowid(result: Any) -> Any:
    # Drivers without cursor.lastrowid (psycopg) report 0 or raise.
    try:
        return result.lastrowid or None
    except (AttributeError, DBAPIError, NotImplementedError):
        return None
