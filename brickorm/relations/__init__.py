"""brickORM relations: constrained queries between models."""
from brickorm.relations.base import Relation
from brickorm.relations.belongs_to import BelongsTo
from brickorm.relations.belongs_to_many import BelongsToMany
from brickorm.relations.has_one_or_many import HasMany, HasOne, HasOneOrMany
from brickorm.relations.morph import (
    MorphMany,
    MorphOne,
    MorphOneOrMany,
    MorphRegistry,
    MorphTo,
)

__all__ = [
    "BelongsTo",
    "BelongsToMany",
    "HasMany",
    "HasOne",
    "HasOneOrMany",
    "MorphMany",
    "MorphOne",
    "MorphOneOrMany",
    "MorphRegistry",
    "MorphTo",
    "Relation",
]
