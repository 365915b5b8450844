"""Active-record model base class.

A ``Model`` is a row of one table plus the metadata relations need:
table name, primary key name, and the morph name stored in polymorphic
type columns.  The connection is injected per instance; models never
look one up from global state::

    class User(Model):
        table = "users"

        def posts(self) -> HasMany:
            return self.has_many(Post)

        def roles(self) -> BelongsToMany:
            return self.belongs_to_many(Role, "role_user")

    user = User.find(conn, 7)
    rows = user.posts().get_results()

Relationship methods build a new :class:`~brickorm.relations.base.Relation`
on every call; results are not cached on the model.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, ClassVar

from brickorm.connection.base import Connection, Row
from brickorm.query.builder import QueryBuilder
from brickorm.relations.belongs_to import BelongsTo
from brickorm.relations.belongs_to_many import BelongsToMany
from brickorm.relations.has_one_or_many import HasMany, HasOne
from brickorm.relations.morph import MorphMany, MorphOne, MorphRegistry, MorphTo

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_name(name: str) -> str:
    """``BlogPost`` → ``blog_post``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class Model:
    """Base class for table-backed models.

    Class attributes:
        table: Table name.  Defaults to the snake-cased class name plus
            ``"s"`` (``BlogPost`` → ``blog_posts``).
        primary_key: Primary key column name.
        morph_alias: Value written to polymorphic type columns for this
            model.  Defaults to the class name.

    Args:
        connection: Connection used by every query this model issues.
        attributes: Initial attribute values.
        exists: Whether the row is already stored (set by :meth:`hydrate`).
    """

    table: ClassVar[str | None] = None
    primary_key: ClassVar[str] = "id"
    morph_alias: ClassVar[str | None] = None

    def __init__(
        self,
        connection: Connection,
        attributes: Mapping[str, Any] | None = None,
        *,
        exists: bool = False,
    ) -> None:
        self._connection = connection
        self._attributes: dict[str, Any] = dict(attributes or {})
        self._original: dict[str, Any] = dict(self._attributes) if exists else {}
        self.exists = exists

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @classmethod
    def table_name(cls) -> str:
        return cls.table or f"{snake_name(cls.__name__)}s"

    @classmethod
    def morph_name(cls) -> str:
        """The discriminator stored in ``<name>_type`` columns for this model."""
        return cls.morph_alias or cls.__name__

    @classmethod
    def foreign_key_name(cls) -> str:
        """Default foreign-key column pointing at this model (``user_id``)."""
        return f"{snake_name(cls.__name__)}_{cls.primary_key}"

    def get_table(self) -> str:
        return self.table_name()

    def get_key_name(self) -> str:
        return self.primary_key

    def get_key(self) -> Any:
        return self.get_attribute(self.primary_key)

    @property
    def connection(self) -> Connection:
        return self._connection

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def set_attribute(self, name: str, value: Any) -> Model:
        self._attributes[name] = value
        return self

    def fill(self, attributes: Mapping[str, Any]) -> Model:
        self._attributes.update(attributes)
        return self

    def get_attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def get_dirty(self) -> dict[str, Any]:
        """Attributes changed since the model was loaded or last saved."""
        return {
            k: v
            for k, v in self._attributes.items()
            if k not in self._original or self._original[k] != v
        }

    def is_dirty(self, *names: str) -> bool:
        dirty = self.get_dirty()
        if not names:
            return bool(dirty)
        return any(n in dirty for n in names)

    def sync_original(self) -> Model:
        self._original = dict(self._attributes)
        return self

    def to_dict(self) -> dict[str, Any]:
        return dict(self._attributes)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def new_query(self) -> QueryBuilder:
        """A fresh builder on this model's table and connection."""
        return self._connection.table(self.get_table())

    @classmethod
    def query(cls, connection: Connection) -> QueryBuilder:
        return connection.table(cls.table_name())

    @classmethod
    def hydrate(cls, connection: Connection, row: Row) -> Model:
        """Wrap a fetched row in a model marked as stored."""
        return cls(connection, row, exists=True)

    @classmethod
    def find(cls, connection: Connection, id: Any) -> Model | None:
        row = cls.query(connection).find(id, key=cls.primary_key)
        return cls.hydrate(connection, row) if row is not None else None

    @classmethod
    def all(cls, connection: Connection) -> list[Model]:
        return [cls.hydrate(connection, r) for r in cls.query(connection).get()]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """Insert the model, or update its dirty attributes if it exists."""
        if self.exists:
            dirty = self.get_dirty()
            if not dirty:
                return True
            self.new_query().where(self.primary_key, "=", self.get_key()).update(dirty)
            self.sync_original()
            return True

        new_id = self.new_query().insert(self._attributes)
        if self.get_key() is None:
            if new_id is None:
                new_id = self._connection.last_insert_id()
            self.set_attribute(self.primary_key, new_id)
        self.exists = True
        self.sync_original()
        logger.debug("Inserted %s with %s=%r", type(self).__name__, self.primary_key, self.get_key())
        return True

    def delete(self) -> bool:
        if not self.exists:
            return False
        deleted = self.new_query().where(self.primary_key, "=", self.get_key()).delete()
        self.exists = False
        return deleted > 0

    # ------------------------------------------------------------------
    # Relationship factories
    # ------------------------------------------------------------------

    def has_one(
        self,
        related: type[Model],
        foreign_key: str | None = None,
        local_key: str | None = None,
    ) -> HasOne:
        return HasOne(
            self,
            related,
            foreign_key or self.foreign_key_name(),
            local_key or self.get_key_name(),
        )

    def has_many(
        self,
        related: type[Model],
        foreign_key: str | None = None,
        local_key: str | None = None,
    ) -> HasMany:
        return HasMany(
            self,
            related,
            foreign_key or self.foreign_key_name(),
            local_key or self.get_key_name(),
        )

    def belongs_to(
        self,
        related: type[Model],
        foreign_key: str | None = None,
        owner_key: str | None = None,
    ) -> BelongsTo:
        return BelongsTo(
            self,
            related,
            foreign_key or related.foreign_key_name(),
            owner_key or related.primary_key,
        )

    def belongs_to_many(
        self,
        related: type[Model],
        table: str | None = None,
        foreign_pivot_key: str | None = None,
        related_pivot_key: str | None = None,
        parent_key: str | None = None,
        related_key: str | None = None,
    ) -> BelongsToMany:
        return BelongsToMany(
            self,
            related,
            table or self.joining_table(related),
            foreign_pivot_key or self.foreign_key_name(),
            related_pivot_key or related.foreign_key_name(),
            parent_key or self.get_key_name(),
            related_key or related.primary_key,
        )

    def morph_one(
        self,
        related: type[Model],
        name: str,
        type: str | None = None,
        id: str | None = None,
        local_key: str | None = None,
    ) -> MorphOne:
        return MorphOne(
            self,
            related,
            type or f"{name}_type",
            id or f"{name}_id",
            local_key or self.get_key_name(),
        )

    def morph_many(
        self,
        related: type[Model],
        name: str,
        type: str | None = None,
        id: str | None = None,
        local_key: str | None = None,
    ) -> MorphMany:
        return MorphMany(
            self,
            related,
            type or f"{name}_type",
            id or f"{name}_id",
            local_key or self.get_key_name(),
        )

    def morph_to(
        self,
        name: str,
        registry: MorphRegistry,
        type: str | None = None,
        id: str | None = None,
        owner_key: str | None = None,
    ) -> MorphTo:
        return MorphTo(
            self,
            registry,
            type or f"{name}_type",
            id or f"{name}_id",
            owner_key,
        )

    @classmethod
    def joining_table(cls, related: type[Model]) -> str:
        """Default pivot table: both snake names, sorted, joined by ``_``."""
        names = sorted([snake_name(cls.__name__), snake_name(related.__name__)])
        return "_".join(names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.get_key() is not None
            and self.get_key() == other.get_key()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"
