"""Fluent, dialect-neutral query builder.

``QueryBuilder`` accumulates clauses in a :class:`~brickorm.query.clauses.QueryState`
and compiles them through a :class:`~brickorm.query.compiler.QueryCompiler`.
Every mutator returns ``self`` and performs no I/O; only the execution
methods (``get``, ``first``, ``count``, ``insert``, ``update``, ``delete``,
…) talk to the connection.

Example::

    users = (
        conn.table("users")
        .select("id", "name")
        .where("active", True)
        .where_in("role", ["admin", "editor"])
        .order_by("name")
        .limit(20)
    )
    sql, bindings = users.compile()
    rows = users.get()

A builder is meant to be owned by one logical query.  To derive several
queries from a common base (e.g. a page of rows and the total count),
``clone()`` it: the clone shares no mutable state with the original.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from brickorm.dialect.base import Dialect
from brickorm.errors import BuilderError
from brickorm.query.clause_builders import PLACEHOLDER
from brickorm.query.clauses import (
    BasicWhere,
    BetweenWhere,
    Expression,
    FullTextWhere,
    HavingClause,
    InWhere,
    JoinClause,
    JsonWhere,
    NullWhere,
    OrderClause,
    QueryState,
    RawWhere,
    SelectColumn,
)
from brickorm.query.compiler import CompiledSQL, QueryCompiler

if TYPE_CHECKING:
    from brickorm.connection.base import Connection, Row

_MISSING: Any = object()


class QueryBuilder:
    """Accumulates query clauses and compiles them to ``(sql, bindings)``.

    Args:
        table: Target table; may be set later with :meth:`from_table`.
        connection: Connection used by the execution methods.  Optional for
            builders that are only compiled.
        dialect: Dialect used by :meth:`compile` when none is passed.
            Defaults to the connection's dialect.
    """

    def __init__(
        self,
        table: str | None = None,
        connection: Connection | None = None,
        dialect: Dialect | None = None,
    ) -> None:
        self._connection = connection
        self._dialect = dialect or (connection.dialect if connection is not None else None)
        self._state = QueryState(table=table)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def table(self) -> str | None:
        return self._state.table

    @property
    def connection(self) -> Connection | None:
        return self._connection

    @property
    def dialect(self) -> Dialect | None:
        return self._dialect

    @property
    def state(self) -> QueryState:
        """A deep copy of the accumulated clause state."""
        return self._state.model_copy(deep=True)

    def clone(self) -> QueryBuilder:
        """Return an independent copy of this builder.

        The clone shares the connection and dialect (both stateless from
        the builder's point of view) but no clause lists.
        """
        copy = QueryBuilder(connection=self._connection, dialect=self._dialect)
        copy._state = self._state.model_copy(deep=True)
        return copy

    # ------------------------------------------------------------------
    # SELECT / FROM
    # ------------------------------------------------------------------

    def from_table(self, table: str) -> QueryBuilder:
        self._state.table = table
        return self

    def select(self, *columns: str | Sequence[str]) -> QueryBuilder:
        """Replace the selected columns (``select("id", "name")`` or a list)."""
        names = _flatten(columns) or ["*"]
        self._state.columns = [SelectColumn(name=n) for n in names]
        return self

    def add_select(self, *columns: str | Sequence[str]) -> QueryBuilder:
        """Append columns to the selection, skipping ones already selected."""
        existing = {(c.name, c.raw) for c in self._state.columns}
        for name in _flatten(columns):
            if (name, False) not in existing:
                self._state.columns.append(SelectColumn(name=name))
        return self

    def select_raw(self, sql: str) -> QueryBuilder:
        """Append a verbatim SQL expression (e.g. ``COUNT(*) AS n``) to the selection."""
        self._state.columns.append(SelectColumn(name=sql, raw=True))
        return self

    def distinct(self, value: bool = True) -> QueryBuilder:
        self._state.distinct = value
        return self

    # ------------------------------------------------------------------
    # JOIN
    # ------------------------------------------------------------------

    def join(
        self,
        table: str,
        left: str,
        operator: str = "=",
        right: str | None = None,
        type: str = "INNER",
    ) -> QueryBuilder:
        """Add ``<type> JOIN table ON left <operator> right``.

        ``join("posts", "users.id", "posts.user_id")`` is shorthand for an
        equality join.
        """
        if right is None:
            operator, right = "=", operator
        self._check_operator(operator)
        self._state.joins.append(
            JoinClause(table=table, left=left, operator=operator, right=right, type=type)
        )
        return self

    def left_join(
        self, table: str, left: str, operator: str = "=", right: str | None = None
    ) -> QueryBuilder:
        return self.join(table, left, operator, right, type="LEFT")

    def right_join(
        self, table: str, left: str, operator: str = "=", right: str | None = None
    ) -> QueryBuilder:
        return self.join(table, left, operator, right, type="RIGHT")

    def cross_join(self, table: str) -> QueryBuilder:
        self._state.joins.append(JoinClause(table=table, type="CROSS"))
        return self

    # ------------------------------------------------------------------
    # WHERE
    # ------------------------------------------------------------------

    def where(
        self,
        column: str | Mapping[str, Any],
        operator: Any = _MISSING,
        value: Any = _MISSING,
        boolean: str = "AND",
    ) -> QueryBuilder:
        """Add a ``column <operator> ?`` predicate.

        Forms accepted::

            .where("age", ">=", 18)
            .where("status", "active")          # implies "="
            .where({"status": "active", "role": "admin"})
            .where("deleted_at", None)          # becomes IS NULL
        """
        if isinstance(column, Mapping):
            for key, val in column.items():
                self.where(key, "=", val, boolean)
            return self

        if value is _MISSING:
            if operator is _MISSING:
                raise BuilderError(f"where('{column}') needs a value.", clause="WHERE")
            operator, value = "=", operator

        if value is None and operator in ("=", "!=", "<>"):
            return self.where_null(column, boolean, negate=operator != "=")

        self._check_operator(operator)
        self._state.wheres.append(
            BasicWhere(column=column, operator=operator, value=value, boolean=boolean)
        )
        return self

    def or_where(
        self,
        column: str | Mapping[str, Any],
        operator: Any = _MISSING,
        value: Any = _MISSING,
    ) -> QueryBuilder:
        return self.where(column, operator, value, "OR")

    def where_raw(
        self, sql: str, bindings: Sequence[Any] = (), boolean: str = "AND"
    ) -> QueryBuilder:
        """Insert a literal SQL predicate with its own positional bindings.

        The bindings are kept with the fragment, so they are emitted at the
        fragment's position relative to the other predicates.

        Raises:
            BuilderError: If the number of ``?`` in ``sql`` differs from
                ``len(bindings)``.
        """
        bindings = list(bindings)
        if sql.count(PLACEHOLDER) != len(bindings):
            raise BuilderError(
                f"Raw predicate has {sql.count(PLACEHOLDER)} placeholder(s) "
                f"but {len(bindings)} binding(s).",
                clause="WHERE",
            )
        self._state.wheres.append(RawWhere(sql=sql, bindings=bindings, boolean=boolean))
        return self

    def or_where_raw(self, sql: str, bindings: Sequence[Any] = ()) -> QueryBuilder:
        return self.where_raw(sql, bindings, "OR")

    def where_in(
        self,
        column: str,
        values: Iterable[Any],
        boolean: str = "AND",
        negate: bool = False,
    ) -> QueryBuilder:
        self._state.wheres.append(
            InWhere(column=column, values=list(values), negate=negate, boolean=boolean)
        )
        return self

    def where_not_in(
        self, column: str, values: Iterable[Any], boolean: str = "AND"
    ) -> QueryBuilder:
        return self.where_in(column, values, boolean, negate=True)

    def where_null(
        self, column: str, boolean: str = "AND", negate: bool = False
    ) -> QueryBuilder:
        self._state.wheres.append(NullWhere(column=column, negate=negate, boolean=boolean))
        return self

    def where_not_null(self, column: str, boolean: str = "AND") -> QueryBuilder:
        return self.where_null(column, boolean, negate=True)

    def where_between(
        self,
        column: str,
        values: Sequence[Any],
        boolean: str = "AND",
        negate: bool = False,
    ) -> QueryBuilder:
        if len(values) != 2:
            raise BuilderError(
                f"where_between('{column}') needs exactly two values.", clause="WHERE"
            )
        low, high = values
        self._state.wheres.append(
            BetweenWhere(column=column, low=low, high=high, negate=negate, boolean=boolean)
        )
        return self

    def where_not_between(
        self, column: str, values: Sequence[Any], boolean: str = "AND"
    ) -> QueryBuilder:
        return self.where_between(column, values, boolean, negate=True)

    def where_like(self, column: str, pattern: str, boolean: str = "AND") -> QueryBuilder:
        return self.where(column, "LIKE", pattern, boolean)

    def where_full_text(
        self,
        columns: str | Sequence[str],
        query: str,
        boolean: str = "AND",
        **options: Any,
    ) -> QueryBuilder:
        """Add a dialect-specific full-text search predicate.

        ``options`` are passed to the dialect (``language="german"`` for
        PostgreSQL, for example).
        """
        cols = [columns] if isinstance(columns, str) else list(columns)
        if not cols:
            raise BuilderError("Full-text search needs at least one column.", clause="WHERE")
        self._state.wheres.append(
            FullTextWhere(columns=cols, query=query, options=options, boolean=boolean)
        )
        return self

    def where_json(
        self,
        column: str,
        path: str,
        operator: str,
        value: Any,
        boolean: str = "AND",
    ) -> QueryBuilder:
        """Compare the value at a JSON path (``"address.city"``) of ``column``."""
        self._check_operator(operator)
        self._state.wheres.append(
            JsonWhere(column=column, path=path, operator=operator, value=value, boolean=boolean)
        )
        return self

    # ------------------------------------------------------------------
    # GROUP BY / HAVING / ORDER BY / pagination
    # ------------------------------------------------------------------

    def group_by(self, *columns: str | Sequence[str]) -> QueryBuilder:
        self._state.groups.extend(_flatten(columns))
        return self

    def having(
        self,
        column: str,
        operator: Any = _MISSING,
        value: Any = _MISSING,
        boolean: str = "AND",
    ) -> QueryBuilder:
        if value is _MISSING:
            if operator is _MISSING:
                raise BuilderError(f"having('{column}') needs a value.", clause="HAVING")
            operator, value = "=", operator
        self._check_operator(operator)
        self._state.havings.append(
            HavingClause(column=column, operator=operator, value=value, boolean=boolean)
        )
        return self

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        self._state.orders.append(OrderClause(column=column, direction=direction))
        return self

    def order_by_desc(self, column: str) -> QueryBuilder:
        return self.order_by(column, "DESC")

    def limit(self, value: int | None) -> QueryBuilder:
        self._state.limit = _non_negative("limit", value)
        return self

    def offset(self, value: int | None) -> QueryBuilder:
        self._state.offset = _non_negative("offset", value)
        return self

    def for_page(self, page: int, per_page: int = 15) -> QueryBuilder:
        """Set limit / offset for a 1-based page number."""
        return self.offset(max(page - 1, 0) * per_page).limit(per_page)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile(self, dialect: Dialect | None = None) -> CompiledSQL:
        """Compile the SELECT statement to ``(sql, bindings)``.

        Args:
            dialect: Dialect to compile for; defaults to the builder's own.

        Raises:
            NoTableError: If no table has been set.
            UnsupportedOperatorError: If an operator is not allowed by the
                dialect.
        """
        return self._compiler(dialect).compile_select(self._state)

    def to_sql(self, dialect: Dialect | None = None) -> str:
        return self.compile(dialect).sql

    def get_bindings(self, dialect: Dialect | None = None) -> list[Any]:
        return self.compile(dialect).bindings

    def compile_insert(
        self, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> CompiledSQL:
        return self._compiler().compile_insert(self._state, _rows(values))

    def compile_update(self, values: Mapping[str, Any]) -> CompiledSQL:
        return self._compiler().compile_update(self._state, values)

    def compile_delete(self) -> CompiledSQL:
        return self._compiler().compile_delete(self._state)

    # ------------------------------------------------------------------
    # Execution – reads
    # ------------------------------------------------------------------

    def get(self) -> list[Row]:
        """Execute the query and return every row."""
        compiled = self.compile()
        return self._require_connection().select(compiled.sql, compiled.bindings)

    def first(self) -> Row | None:
        """Execute with ``LIMIT 1`` (on a clone) and return the row or ``None``."""
        compiled = self.clone().limit(1).compile()
        return self._require_connection().select_one(compiled.sql, compiled.bindings)

    def find(self, id: Any, key: str = "id") -> Row | None:
        return self.clone().where(key, "=", id).first()

    def value(self, column: str) -> Any:
        """Return the first row's value for ``column``, or ``None``."""
        query = self.clone().select(column).limit(1)
        compiled = query.compile()
        return self._require_connection().scalar(compiled.sql, compiled.bindings)

    def exists(self) -> bool:
        query = self.clone()
        query._state.columns = [SelectColumn(name="1", raw=True)]
        query._state.orders = []
        return query.first() is not None

    def count(self, column: str = "*") -> int:
        return int(self.aggregate("COUNT", column) or 0)

    def max(self, column: str) -> Any:
        return self.aggregate("MAX", column)

    def min(self, column: str) -> Any:
        return self.aggregate("MIN", column)

    def avg(self, column: str) -> Any:
        return self.aggregate("AVG", column)

    def sum(self, column: str) -> Any:
        return self.aggregate("SUM", column)

    def aggregate(self, function: str, column: str = "*") -> Any:
        """Run ``function(column)`` over the current constraints.

        Computed on a clone with ordering and pagination removed, so the
        builder itself can still be used to fetch a page of rows.
        """
        query = self.clone()
        query._state.columns = [
            SelectColumn(name=column, function=function, alias="aggregate")
        ]
        query._state.orders = []
        query._state.limit = None
        query._state.offset = None
        compiled = query.compile()
        return self._require_connection().scalar(compiled.sql, compiled.bindings)

    # ------------------------------------------------------------------
    # Execution – writes
    # ------------------------------------------------------------------

    def insert(self, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> Any:
        """Insert one row (returns the last insert id) or many (returns rowcount)."""
        compiled = self.compile_insert(values)
        conn = self._require_connection()
        if isinstance(values, Mapping):
            return conn.insert(compiled.sql, compiled.bindings)
        return conn.statement(compiled.sql, compiled.bindings)

    def update(self, values: Mapping[str, Any]) -> int:
        """Update matching rows and return the affected row count."""
        compiled = self.compile_update(values)
        return self._require_connection().statement(compiled.sql, compiled.bindings)

    def delete(self) -> int:
        """Delete matching rows and return the affected row count."""
        compiled = self.compile_delete()
        return self._require_connection().statement(compiled.sql, compiled.bindings)

    def increment(
        self, column: str, amount: int | float = 1, extra: Mapping[str, Any] | None = None
    ) -> int:
        """Compile ``column = column + ?`` (plus ``extra`` columns) and run it."""
        wrapped = self._compiler().dialect.wrap(column)
        values = {**(extra or {}), column: Expression(f"{wrapped} + ?", (amount,))}
        return self.update(values)

    def decrement(
        self, column: str, amount: int | float = 1, extra: Mapping[str, Any] | None = None
    ) -> int:
        wrapped = self._compiler().dialect.wrap(column)
        values = {**(extra or {}), column: Expression(f"{wrapped} - ?", (amount,))}
        return self.update(values)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _compiler(self, dialect: Dialect | None = None) -> QueryCompiler:
        dialect = dialect or self._dialect
        if dialect is None:
            raise BuilderError(
                "No dialect: pass one to compile() or build the query from a connection.",
                clause="compile",
            )
        return QueryCompiler(dialect)

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise BuilderError(
                "This builder has no connection; it can only be compiled.",
                clause="execute",
            )
        return self._connection

    def _check_operator(self, operator: str) -> None:
        # Fail at mutation time when the dialect is already known;
        # compile() checks again for builders without one.
        if self._dialect is not None:
            self._dialect.check_operator(operator)

    def __repr__(self) -> str:
        dialect = self._dialect.name if self._dialect else None
        return f"QueryBuilder(table={self._state.table!r}, dialect={dialect!r})"


def _flatten(columns: Sequence[str | Sequence[str]]) -> list[str]:
    flat: list[str] = []
    for col in columns:
        if isinstance(col, str):
            flat.append(col)
        else:
            flat.extend(col)
    return flat


def _rows(
    values: Mapping[str, Any] | Sequence[Mapping[str, Any]],
) -> list[Mapping[str, Any]]:
    if isinstance(values, Mapping):
        return [values]
    return list(values)


def _non_negative(name: str, value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise BuilderError(f"{name} must be a non-negative integer, got {value!r}.", clause=name.upper())
    return value
