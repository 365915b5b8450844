"""Polymorphic relations and the morph type registry.

A polymorphic child table stores two columns per relation, ``<name>_type``
and ``<name>_id``.  The type column holds the owning model's
:meth:`~brickorm.model.Model.morph_name`; the registry maps it back to a
model class::

    morphs = MorphRegistry()
    morphs.register(Post)
    morphs.register(Video, "video")

    comment.morph_to("commentable", morphs).get_results()
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from brickorm.errors import UnresolvedMorphTypeError
from brickorm.relations.base import Relation

if TYPE_CHECKING:
    from brickorm.connection.base import Row
    from brickorm.model import Model


class MorphRegistry:
    """Maps stored morph type values to model classes.

    Owned by the caller rather than kept as module state, so different
    connections (or tests) can use different maps.
    """

    def __init__(self) -> None:
        self._types: dict[str, type[Model]] = {}

    def register(self, model: type[Model], alias: str | None = None) -> type[Model]:
        """Register ``model`` under ``alias`` (default: ``model.morph_name()``)."""
        self._types[alias or model.morph_name()] = model
        return model

    def resolve(self, morph_type: Any) -> type[Model]:
        """Return the model class for ``morph_type``.

        Raises:
            UnresolvedMorphTypeError: If the value is missing or unregistered.
        """
        model = self._types.get(morph_type) if isinstance(morph_type, str) else None
        if model is None:
            raise UnresolvedMorphTypeError(morph_type, list(self._types))
        return model

    def registered_types(self) -> list[str]:
        return sorted(self._types)

    def __contains__(self, morph_type: object) -> bool:
        return morph_type in self._types


class MorphOneOrMany(Relation):
    """``related.<id> = parent.local_key AND related.<type> = parent morph name``."""

    def __init__(
        self,
        parent: Model,
        related: type[Model],
        morph_type: str,
        morph_id: str,
        local_key: str,
    ) -> None:
        self.morph_type = morph_type
        self.morph_id = morph_id
        self.local_key = local_key
        super().__init__(parent, related, local_key)

    def add_constraints(self) -> None:
        self._query.where(self._qualify(self.morph_id), "=", self._parent_key)
        self._query.where(self._qualify(self.morph_type), "=", self._parent.morph_name())


class MorphOne(MorphOneOrMany):
    def get_results(self) -> Row | None:
        return self._query.first()


class MorphMany(MorphOneOrMany):
    def get_results(self) -> list[Row]:
        return self._query.get()


class MorphTo(Relation):
    """The owning side of a polymorphic relation.

    The related class is resolved from the parent's ``morph_type`` value at
    construction, so an unregistered type fails before any query runs.

    Args:
        parent: The child model holding the type and id columns.
        registry: Morph type → model class map.
        morph_type: Parent column holding the owner's morph name.
        morph_id: Parent column holding the owner's key.
        owner_key: Key column on the owner; defaults to its primary key.
    """

    def __init__(
        self,
        parent: Model,
        registry: MorphRegistry,
        morph_type: str,
        morph_id: str,
        owner_key: str | None = None,
    ) -> None:
        self.morph_type = morph_type
        self.morph_id = morph_id
        self.registry = registry
        related = registry.resolve(parent.get_attribute(morph_type))
        self.owner_key = owner_key or related.primary_key
        super().__init__(parent, related, morph_id)

    def add_constraints(self) -> None:
        self._query.where(self._qualify(self.owner_key), "=", self._parent_key)

    def get_results(self) -> Row | None:
        return self._query.first()
