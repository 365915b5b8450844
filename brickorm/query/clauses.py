"""Pydantic models for the clause state accumulated by ``QueryBuilder``.

Every WHERE fragment carries its own bound values.  The compiler walks the
fragments left to right and collects bindings as it emits ``?``
placeholders, so binding order always matches placeholder order, even
when a raw fragment is added between two ordinary predicates.

``QueryState`` is the single mutable object a builder owns; cloning a
builder is a deep ``model_copy`` of its state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FORBID = ConfigDict(extra="forbid")

#: How a predicate is joined to the one before it.
Boolean = Literal["AND", "OR"]

#: Supported join types.
JoinType = Literal["INNER", "LEFT", "RIGHT", "CROSS"]


# ---------------------------------------------------------------------------
# WHERE fragments
# ---------------------------------------------------------------------------


class _Predicate(BaseModel):
    model_config = _FORBID

    boolean: Boolean = "AND"

    @field_validator("boolean", mode="before")
    @classmethod
    def normalise_boolean(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class BasicWhere(_Predicate):
    """``column <operator> ?``."""

    kind: Literal["basic"] = "basic"
    column: str
    operator: str = "="
    value: Any = None


class InWhere(_Predicate):
    """``column [NOT] IN (?, ?, ...)``.

    An empty ``values`` list compiles to an always-false (or, negated,
    always-true) predicate instead of the invalid ``IN ()``.
    """

    kind: Literal["in"] = "in"
    column: str
    values: list[Any] = Field(default_factory=list)
    negate: bool = False


class NullWhere(_Predicate):
    """``column IS [NOT] NULL``."""

    kind: Literal["null"] = "null"
    column: str
    negate: bool = False


class BetweenWhere(_Predicate):
    """``column [NOT] BETWEEN ? AND ?``."""

    kind: Literal["between"] = "between"
    column: str
    low: Any
    high: Any
    negate: bool = False


class RawWhere(_Predicate):
    """A literal SQL fragment with its own positional bindings."""

    kind: Literal["raw"] = "raw"
    sql: str
    bindings: list[Any] = Field(default_factory=list)


class FullTextWhere(_Predicate):
    """A full-text search predicate rendered by the dialect."""

    kind: Literal["fulltext"] = "fulltext"
    columns: list[str]
    query: str
    options: dict[str, Any] = Field(default_factory=dict)


class JsonWhere(_Predicate):
    """A JSON-path comparison rendered by the dialect."""

    kind: Literal["json"] = "json"
    column: str
    path: str
    operator: str = "="
    value: Any = None


WhereClause = Annotated[
    BasicWhere | InWhere | NullWhere | BetweenWhere | RawWhere | FullTextWhere | JsonWhere,
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Other clauses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expression:
    """A raw SQL expression used as a value (e.g. ``count + ?`` in UPDATE).

    Attributes:
        sql: SQL text, emitted verbatim.
        bindings: Values for the ``?`` placeholders inside ``sql``.
    """

    sql: str
    bindings: tuple[Any, ...] = field(default_factory=tuple)


class SelectColumn(BaseModel):
    """One item of the SELECT list.

    Attributes:
        name: Column reference, or SQL text when ``raw`` is set.
        raw: Emit ``name`` verbatim instead of quoting it.
        function: Optional aggregate wrapper (``COUNT``, ``MAX``, ...).
        alias: Optional output alias.
    """

    model_config = _FORBID

    name: str
    raw: bool = False
    function: str | None = None
    alias: str | None = None


class JoinClause(BaseModel):
    """``<type> JOIN table ON left <operator> right``.

    Attributes:
        table: Table to join.
        left: Left-hand column of the ON condition.
        operator: Comparison operator of the ON condition.
        right: Right-hand column of the ON condition.
        type: SQL join type.
    """

    model_config = _FORBID

    table: str
    left: str | None = None
    operator: str = "="
    right: str | None = None
    type: JoinType = "INNER"

    @field_validator("type", mode="before")
    @classmethod
    def normalise_type(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class HavingClause(BaseModel):
    """``column <operator> ?`` inside HAVING."""

    model_config = _FORBID

    column: str
    operator: str = "="
    value: Any = None
    boolean: Boolean = "AND"

    @field_validator("boolean", mode="before")
    @classmethod
    def normalise_boolean(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class OrderClause(BaseModel):
    """A single ORDER BY item.

    Attributes:
        column: Column to order by.
        direction: Sort direction.
    """

    model_config = _FORBID

    column: str
    direction: Literal["ASC", "DESC"] = "ASC"

    @field_validator("direction", mode="before")
    @classmethod
    def normalise_direction(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class QueryState(BaseModel):
    """Everything a ``QueryBuilder`` has accumulated so far.

    Attributes:
        table: Target table (``None`` until one is set).
        columns: Selected columns; ``["*"]`` by default.
        distinct: Emit ``SELECT DISTINCT``.
        joins: JOIN clauses in the order they were added.
        wheres: WHERE fragments in the order they were added.
        groups: GROUP BY columns.
        havings: HAVING predicates.
        orders: ORDER BY items.
        limit: Maximum number of rows.
        offset: Number of rows to skip.
    """

    model_config = _FORBID

    table: str | None = None
    columns: list[SelectColumn] = Field(
        default_factory=lambda: [SelectColumn(name="*")]
    )
    distinct: bool = False
    joins: list[JoinClause] = Field(default_factory=list)
    wheres: list[WhereClause] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    havings: list[HavingClause] = Field(default_factory=list)
    orders: list[OrderClause] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)
