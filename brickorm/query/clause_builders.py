"""Clause-level SQL builders.

Each class renders exactly one clause of a statement.  They all receive the
same :class:`BindingCollector` for one compilation run, and append to it in
the order they emit ``?`` placeholders.  Because the compiler calls them in
statement order, the collected bindings line up with the placeholders of
the final SQL text.

Classes
-------
SelectClauseBuilder   : ``SELECT [DISTINCT] <columns>``
JoinClauseBuilder     : ``<type> JOIN … ON …``
WhereClauseBuilder    : predicate list joined by AND / OR (WHERE and HAVING)
OrderClauseBuilder    : ``ORDER BY …``
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from brickorm.dialect.base import Dialect
from brickorm.errors import BuilderError
from brickorm.query.clauses import (
    BasicWhere,
    BetweenWhere,
    FullTextWhere,
    HavingClause,
    InWhere,
    JoinClause,
    JsonWhere,
    NullWhere,
    OrderClause,
    RawWhere,
    SelectColumn,
)

#: The positional placeholder emitted for every bound value.
PLACEHOLDER = "?"


@dataclass
class BindingCollector:
    """Accumulates positional bindings during a single compilation run."""

    bindings: list[Any] = field(default_factory=list)

    def add(self, value: Any) -> str:
        """Store ``value`` and return its placeholder."""
        self.bindings.append(value)
        return PLACEHOLDER

    def extend(self, values: list[Any]) -> None:
        self.bindings.extend(values)


class SelectClauseBuilder:
    """Builds the ``SELECT [DISTINCT] …`` clause."""

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    def build(self, columns: list[SelectColumn], distinct: bool = False) -> str:
        prefix = "SELECT DISTINCT" if distinct else "SELECT"
        items = [self.build_column(c) for c in columns] or ["*"]
        return f"{prefix} {', '.join(items)}"

    def build_column(self, column: SelectColumn) -> str:
        if column.raw:
            return column.name
        expr = self._dialect.wrap(column.name)
        if column.function:
            expr = f"{column.function.upper()}({expr})"
        if column.alias:
            expr = f"{expr} AS {self._dialect.quote_identifier(column.alias)}"
        return expr


class JoinClauseBuilder:
    """Builds a single ``JOIN … ON …`` fragment."""

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    def build(self, join: JoinClause) -> str:
        wrap = self._dialect.wrap
        if join.type == "CROSS":
            return f"CROSS JOIN {wrap(join.table)}"
        if join.left is None or join.right is None:
            raise BuilderError(
                f"{join.type} JOIN on '{join.table}' needs both ON columns.",
                clause="JOIN",
            )
        op = self._dialect.check_operator(join.operator)
        return (
            f"{join.type} JOIN {wrap(join.table)} "
            f"ON {wrap(join.left)} {op} {wrap(join.right)}"
        )


class WhereClauseBuilder:
    """Builds a predicate list (the body of WHERE or HAVING).

    The first predicate's boolean is ignored; every later one is prefixed
    with its own ``AND`` / ``OR``.
    """

    def __init__(self, dialect: Dialect, collector: BindingCollector) -> None:
        self._dialect = dialect
        self._collector = collector

    def build(self, predicates: list[Any]) -> str:
        parts: list[str] = []
        for i, pred in enumerate(predicates):
            sql = self._build_predicate(pred)
            parts.append(sql if i == 0 else f"{pred.boolean} {sql}")
        return " ".join(parts)

    def _build_predicate(self, pred: Any) -> str:
        wrap = self._dialect.wrap
        add = self._collector.add

        if isinstance(pred, (BasicWhere, HavingClause)):
            op = self._dialect.check_operator(pred.operator)
            return f"{wrap(pred.column)} {op} {add(pred.value)}"
        if isinstance(pred, InWhere):
            if not pred.values:
                return "1 = 1" if pred.negate else "1 = 0"
            keyword = "NOT IN" if pred.negate else "IN"
            placeholders = ", ".join(add(v) for v in pred.values)
            return f"{wrap(pred.column)} {keyword} ({placeholders})"
        if isinstance(pred, NullWhere):
            keyword = "IS NOT NULL" if pred.negate else "IS NULL"
            return f"{wrap(pred.column)} {keyword}"
        if isinstance(pred, BetweenWhere):
            keyword = "NOT BETWEEN" if pred.negate else "BETWEEN"
            return f"{wrap(pred.column)} {keyword} {add(pred.low)} AND {add(pred.high)}"
        if isinstance(pred, RawWhere):
            self._collector.extend(pred.bindings)
            return pred.sql
        if isinstance(pred, FullTextWhere):
            sql, bindings = self._dialect.compile_full_text(
                pred.columns, pred.query, **pred.options
            )
            self._collector.extend(bindings)
            return sql
        if isinstance(pred, JsonWhere):
            sql, bindings = self._dialect.compile_json_path(
                pred.column, pred.path, pred.operator, pred.value
            )
            self._collector.extend(bindings)
            return sql
        raise BuilderError(
            f"Unknown predicate type: {type(pred).__name__}", clause="WHERE"
        )


class OrderClauseBuilder:
    """Builds the ``ORDER BY …`` list."""

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    def build(self, orders: list[OrderClause]) -> str:
        items = [f"{self._dialect.wrap(o.column)} {o.direction}" for o in orders]
        return f"ORDER BY {', '.join(items)}"
