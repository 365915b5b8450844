"""Relation contract: the ``Relation`` ABC.

The Template Method pattern (GoF) is used:
- ``Relation`` builds the related model's query, captures the parent key
  and calls :meth:`add_constraints` exactly once, at construction.
- Each variant overrides only :meth:`add_constraints` and, where the
  result shape differs, :meth:`get_results`.

A relation never forwards unknown attributes to its builder.  Chain on
:attr:`Relation.query` instead::

    posts = user.posts()
    posts.query.where("published", True).order_by_desc("created_at")
    rows = posts.get_results()
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from brickorm.errors import MissingParentKeyError, PivotMutationError
from brickorm.query.builder import QueryBuilder
from brickorm.query.compiler import CompiledSQL

if TYPE_CHECKING:
    from brickorm.connection.base import Connection, Row
    from brickorm.dialect.base import Dialect
    from brickorm.model import Model


class Relation(ABC):
    """Abstract base for every relationship variant.

    Args:
        parent: The model instance the relation starts from.
        related: The model class on the other side.
        key_name: Parent attribute whose value constrains the relation.
    """

    def __init__(self, parent: Model, related: type[Model], key_name: str) -> None:
        self._parent = parent
        self._related = related
        self._parent_key = self._capture_key(parent, key_name)
        self._query = related.query(parent.connection)
        self.add_constraints()

    # ------------------------------------------------------------------
    # Template steps
    # ------------------------------------------------------------------

    @abstractmethod
    def add_constraints(self) -> None:
        """Restrict :attr:`query` to rows belonging to the parent."""

    @abstractmethod
    def get_results(self) -> Any:
        """Execute the relation: a row (or ``None``) or a list of rows."""

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def query(self) -> QueryBuilder:
        """The underlying builder; further constraints are chained on it."""
        return self._query

    @property
    def parent(self) -> Model:
        return self._parent

    @property
    def related(self) -> type[Model]:
        return self._related

    @property
    def parent_key(self) -> Any:
        """Parent key value captured when the relation was built."""
        return self._parent_key

    @property
    def connection(self) -> Connection:
        return self._parent.connection

    # ------------------------------------------------------------------
    # Execution helpers
    # ------------------------------------------------------------------

    def get(self) -> list[Row]:
        return self._query.get()

    def first(self) -> Row | None:
        return self._query.first()

    def get_models(self) -> list[Model]:
        """Execute the relation and hydrate every row as a related model."""
        result = self.get_results()
        if result is None:
            return []
        rows = result if isinstance(result, list) else [result]
        return [self._related.hydrate(self.connection, row) for row in rows]

    def compile(self, dialect: Dialect | None = None) -> CompiledSQL:
        return self._query.compile(dialect)

    def to_sql(self, dialect: Dialect | None = None) -> str:
        return self._query.to_sql(dialect)

    # ------------------------------------------------------------------
    # Pivot operations (many-to-many only)
    # ------------------------------------------------------------------

    def attach(self, ids: Any, attributes: Any = None) -> None:
        raise PivotMutationError(type(self).__name__, "attach")

    def detach(self, ids: Any = None) -> int:
        raise PivotMutationError(type(self).__name__, "detach")

    def sync(self, ids: Any) -> Relation:
        raise PivotMutationError(type(self).__name__, "sync")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _capture_key(model: Model, key_name: str) -> Any:
        value = model.get_attribute(key_name)
        if value is None:
            raise MissingParentKeyError(type(model).__name__, key_name)
        return value

    def _qualify(self, column: str) -> str:
        return f"{self._related.table_name()}.{column}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(parent={type(self._parent).__name__}, "
            f"related={self._related.__name__}, parent_key={self._parent_key!r})"
        )
