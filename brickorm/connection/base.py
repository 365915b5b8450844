"""Connection abstraction: the ``Connection`` ABC.

The Template Method pattern (GoF) is used:
- ``Connection`` owns the execution skeleton shared by every driver:
  timing, logging, the optional query log, error wrapping and the
  convenience readers (``select``, ``select_one``, ``scalar``).
- ``SQLiteConnection`` and ``SQLAlchemyConnection`` override only the
  driver-specific steps (``_perform`` and transaction control).

A connection is tagged with exactly one :class:`~brickorm.dialect.base.Dialect`
and hands it to every :class:`~brickorm.query.builder.QueryBuilder` it
creates via :meth:`Connection.table`.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar

from brickorm.config import EngineConfig
from brickorm.dialect.base import Dialect
from brickorm.errors import ExecutionError
from brickorm.query.builder import QueryBuilder

logger = logging.getLogger(__name__)

#: A result row keyed by column name.
Row = dict[str, Any]


@dataclass
class StatementResult:
    """What a driver reports back for one executed statement.

    Attributes:
        rows: Result rows (empty for statements that return none).
        rowcount: Affected row count as reported by the driver.
        lastrowid: Driver-reported id of the last inserted row, if any.
    """

    rows: list[Row] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Any = None


@dataclass
class QueryLogEntry:
    """One entry of the in-memory query log."""

    sql: str
    bindings: list[Any]
    elapsed: float


class Connection(ABC):
    """Abstract base for dialect-tagged database connections.

    Args:
        dialect: The dialect every builder of this connection compiles for.
        config: Engine configuration; defaults to ``EngineConfig()``.
    """

    #: Driver exception types that are wrapped in :class:`ExecutionError`.
    driver_errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, dialect: Dialect, config: EngineConfig | None = None) -> None:
        self._dialect = dialect
        self._config = config or EngineConfig()
        self._query_log: list[QueryLogEntry] = []
        self._log_queries = self._config.log_queries
        self._last_insert_id: Any = None

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def config(self) -> EngineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Driver-specific steps
    # ------------------------------------------------------------------

    @abstractmethod
    def _perform(self, sql: str, bindings: list[Any]) -> StatementResult:
        """Run one statement on the driver and collect its result."""

    @abstractmethod
    def begin(self) -> None:
        """Start an explicit transaction."""

    @abstractmethod
    def commit(self) -> None:
        """Commit the explicit transaction."""

    @abstractmethod
    def rollback(self) -> None:
        """Roll back the explicit transaction."""

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """Whether an explicit transaction is open."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying driver connection."""

    # ------------------------------------------------------------------
    # Execution skeleton
    # ------------------------------------------------------------------

    def run(self, sql: str, bindings: Sequence[Any] = ()) -> StatementResult:
        """Execute ``sql`` with positional ``bindings`` and return the raw result.

        Raises:
            ExecutionError: If the driver raises one of :attr:`driver_errors`.
                SQL and bindings are attached only when ``config.debug`` is set.
        """
        params = list(bindings)
        logger.debug("Executing on %s: %s [%d binding(s)]", self._dialect.name, sql, len(params))
        start = time.perf_counter()
        try:
            result = self._perform(sql, params)
        except self.driver_errors as exc:
            logger.error("Statement failed on %s: %s", self._dialect.name, exc)
            if self._config.debug:
                raise ExecutionError(str(exc), sql, params) from exc
            raise ExecutionError(str(exc)) from exc
        elapsed = time.perf_counter() - start

        threshold = self._config.slow_query_threshold
        if threshold is not None and elapsed > threshold:
            logger.warning("Slow statement (%.3fs): %s", elapsed, sql)
        if self._log_queries:
            self._query_log.append(QueryLogEntry(sql=sql, bindings=params, elapsed=elapsed))
        return result

    def execute(self, sql: str, bindings: Sequence[Any] = ()) -> list[Row]:
        """Execute a statement and return its rows."""
        return self.run(sql, bindings).rows

    def select(self, sql: str, bindings: Sequence[Any] = ()) -> list[Row]:
        return self.execute(sql, bindings)

    def select_one(self, sql: str, bindings: Sequence[Any] = ()) -> Row | None:
        rows = self.execute(sql, bindings)
        return rows[0] if rows else None

    def scalar(self, sql: str, bindings: Sequence[Any] = ()) -> Any:
        """Return the first column of the first row, or ``None``."""
        row = self.select_one(sql, bindings)
        if row is None:
            return None
        return next(iter(row.values()), None)

    def statement(self, sql: str, bindings: Sequence[Any] = ()) -> int:
        """Execute an INSERT / UPDATE / DELETE and return the affected row count."""
        return self.run(sql, bindings).rowcount

    def insert(self, sql: str, bindings: Sequence[Any] = ()) -> Any:
        """Execute an INSERT and return the driver-reported id of the new row.

        Returns ``None`` when the driver does not report one; call
        :meth:`last_insert_id` to ask the database instead.
        """
        result = self.run(sql, bindings)
        self._last_insert_id = result.lastrowid
        return result.lastrowid

    def last_insert_id(self) -> Any:
        """Return the id generated by the most recent INSERT on this connection."""
        if self._last_insert_id is not None:
            return self._last_insert_id
        return self.scalar(self._dialect.last_insert_id_sql())

    # ------------------------------------------------------------------
    # Builders and transactions
    # ------------------------------------------------------------------

    def table(self, name: str) -> QueryBuilder:
        """Return a fresh :class:`QueryBuilder` targeting ``name``."""
        return QueryBuilder(name, connection=self)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Run the enclosed block in a transaction.

        Commits on normal exit and rolls back (then re-raises) on any
        exception.  Pivot ``sync`` is not transactional by itself; wrap it
        here when the detach and the attaches must be atomic::

            with conn.transaction():
                user.roles().sync([2, 3])
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # ------------------------------------------------------------------
    # Query log
    # ------------------------------------------------------------------

    @property
    def query_log(self) -> list[QueryLogEntry]:
        return list(self._query_log)

    def enable_query_log(self) -> None:
        self._log_queries = True

    def disable_query_log(self) -> None:
        self._log_queries = False

    def flush_query_log(self) -> None:
        self._query_log.clear()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self._dialect.name!r})"
