"""One-to-one and one-to-many relations where the related table holds the key."""
from __future__ import annotations

from typing import TYPE_CHECKING

from brickorm.relations.base import Relation

if TYPE_CHECKING:
    from brickorm.connection.base import Row
    from brickorm.model import Model


class HasOneOrMany(Relation):
    """Shared constraint: ``related.foreign_key = parent.local_key``."""

    def __init__(
        self, parent: Model, related: type[Model], foreign_key: str, local_key: str
    ) -> None:
        self.foreign_key = foreign_key
        self.local_key = local_key
        super().__init__(parent, related, local_key)

    def add_constraints(self) -> None:
        self._query.where(self._qualify(self.foreign_key), "=", self._parent_key)


class HasOne(HasOneOrMany):
    def get_results(self) -> Row | None:
        return self._query.first()


class HasMany(HasOneOrMany):
    def get_results(self) -> list[Row]:
        return self._query.get()
