"""Inverse of has-one / has-many: the parent holds the foreign key."""
from __future__ import annotations

from typing import TYPE_CHECKING

from brickorm.relations.base import Relation

if TYPE_CHECKING:
    from brickorm.connection.base import Row
    from brickorm.model import Model


class BelongsTo(Relation):
    """``related.owner_key = parent.foreign_key``; returns one row or ``None``.

    Args:
        parent: The child model (e.g. a ``Post``).
        related: The owning model class (e.g. ``User``).
        foreign_key: Column on the parent holding the owner's key.
        owner_key: Key column on the related table.
    """

    def __init__(
        self, parent: Model, related: type[Model], foreign_key: str, owner_key: str
    ) -> None:
        self.foreign_key = foreign_key
        self.owner_key = owner_key
        super().__init__(parent, related, foreign_key)

    def add_constraints(self) -> None:
        self._query.where(self._qualify(self.owner_key), "=", self._parent_key)

    def get_results(self) -> Row | None:
        return self._query.first()
