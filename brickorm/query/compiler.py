"""QueryState → parameterized SQL.

``QueryCompiler`` is the top-level orchestrator.  It wires together the
clause-level sub-builders, then drives the compilation algorithm.  All
dialect-specific behaviour is delegated to the injected
:class:`~brickorm.dialect.base.Dialect`; the compiler itself never asks
which dialect it holds.

Sub-builder hierarchy
---------------------
QueryCompiler
  ├── SelectClauseBuilder  (clause_builders.py)
  ├── JoinClauseBuilder    (clause_builders.py)
  ├── WhereClauseBuilder   (clause_builders.py, also used for HAVING)
  └── OrderClauseBuilder   (clause_builders.py)

A fresh :class:`~brickorm.query.clause_builders.BindingCollector` is
created per ``compile_*`` call, so compiling is a pure function of the
state and the dialect: compiling the same state twice yields the same SQL
text and the same bindings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from brickorm.dialect.base import Dialect
from brickorm.errors import BuilderError, NoTableError
from brickorm.query.clause_builders import (
    BindingCollector,
    JoinClauseBuilder,
    OrderClauseBuilder,
    SelectClauseBuilder,
    WhereClauseBuilder,
)
from brickorm.query.clauses import Expression, QueryState


@dataclass
class CompiledSQL:
    """The output of a successful compilation.

    Attributes:
        sql: The compiled SQL string with ``?`` placeholders.
        bindings: Values for the placeholders, in placeholder order.
        dialect: The dialect the SQL was compiled for.
    """

    sql: str
    bindings: list[Any] = field(default_factory=list)
    dialect: str = ""

    def __iter__(self):
        # Lets callers unpack: ``sql, bindings = builder.compile()``.
        yield self.sql
        yield self.bindings


class QueryCompiler:
    """Compiles builder state to SQL for one dialect.

    Args:
        dialect: Dialect strategy used for quoting, operators, pagination,
            full-text and JSON predicates.
    """

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def compile_select(self, state: QueryState) -> CompiledSQL:
        """Compile a SELECT statement.

        Raises:
            NoTableError: If ``state`` has no table.
            UnsupportedOperatorError: If a predicate uses an operator the
                dialect does not allow.
        """
        table = self._require_table(state, "SELECT")
        collector = BindingCollector()
        wrap = self._dialect.wrap

        parts: list[str] = [
            SelectClauseBuilder(self._dialect).build(state.columns, state.distinct),
            f"FROM {wrap(table)}",
        ]

        join_builder = JoinClauseBuilder(self._dialect)
        parts.extend(join_builder.build(j) for j in state.joins)

        where_builder = WhereClauseBuilder(self._dialect, collector)
        if state.wheres:
            parts.append(f"WHERE {where_builder.build(state.wheres)}")

        if state.groups:
            parts.append(f"GROUP BY {', '.join(wrap(g) for g in state.groups)}")

        if state.havings:
            parts.append(f"HAVING {where_builder.build(state.havings)}")

        if state.orders:
            parts.append(OrderClauseBuilder(self._dialect).build(state.orders))

        pagination = self._dialect.compile_pagination(
            state.limit, state.offset, ordered=bool(state.orders)
        )
        if pagination:
            parts.append(pagination)

        return self._result(parts, collector)

    # ------------------------------------------------------------------
    # INSERT / UPDATE / DELETE
    # ------------------------------------------------------------------

    def compile_insert(
        self, state: QueryState, rows: Sequence[Mapping[str, Any]]
    ) -> CompiledSQL:
        """Compile a (multi-row) INSERT.  All rows must share the same keys."""
        table = self._require_table(state, "INSERT")
        if not rows or not rows[0]:
            raise BuilderError("INSERT needs at least one non-empty row.", clause="INSERT")

        columns = list(rows[0])
        collector = BindingCollector()
        wrap = self._dialect.wrap
        tuples: list[str] = []
        for row in rows:
            if set(row) != set(columns):
                raise BuilderError(
                    "Every row of a multi-row INSERT must have the same columns.",
                    clause="INSERT",
                )
            tuples.append(
                "(" + ", ".join(self._value(row[c], collector) for c in columns) + ")"
            )

        parts = [
            f"INSERT INTO {wrap(table)} ({', '.join(wrap(c) for c in columns)})",
            f"VALUES {', '.join(tuples)}",
        ]
        return self._result(parts, collector)

    def compile_update(
        self, state: QueryState, values: Mapping[str, Any]
    ) -> CompiledSQL:
        """Compile an UPDATE; SET bindings precede WHERE bindings."""
        table = self._require_table(state, "UPDATE")
        if not values:
            raise BuilderError("UPDATE needs at least one column.", clause="UPDATE")
        self._reject_joins(state, "UPDATE")

        collector = BindingCollector()
        wrap = self._dialect.wrap
        sets = ", ".join(
            f"{wrap(col)} = {self._value(val, collector)}" for col, val in values.items()
        )
        parts = [f"UPDATE {wrap(table)}", f"SET {sets}"]
        if state.wheres:
            where_sql = WhereClauseBuilder(self._dialect, collector).build(state.wheres)
            parts.append(f"WHERE {where_sql}")
        return self._result(parts, collector)

    def compile_delete(self, state: QueryState) -> CompiledSQL:
        """Compile a DELETE restricted by the state's WHERE clauses."""
        table = self._require_table(state, "DELETE")
        self._reject_joins(state, "DELETE")

        collector = BindingCollector()
        parts = [f"DELETE FROM {self._dialect.wrap(table)}"]
        if state.wheres:
            where_sql = WhereClauseBuilder(self._dialect, collector).build(state.wheres)
            parts.append(f"WHERE {where_sql}")
        return self._result(parts, collector)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _result(self, parts: list[str], collector: BindingCollector) -> CompiledSQL:
        return CompiledSQL(
            sql=" ".join(parts),
            bindings=collector.bindings,
            dialect=self._dialect.name,
        )

    @staticmethod
    def _require_table(state: QueryState, statement: str) -> str:
        if not state.table:
            raise NoTableError(statement)
        return state.table

    @staticmethod
    def _reject_joins(state: QueryState, statement: str) -> None:
        if state.joins:
            raise BuilderError(
                f"{statement} with JOIN clauses is not portable across dialects.",
                clause=statement,
            )

    @staticmethod
    def _value(value: Any, collector: BindingCollector) -> str:
        if isinstance(value, Expression):
            collector.extend(list(value.bindings))
            return value.sql
        return collector.add(value)
