"""brickORM – a dialect-aware query builder and relation layer.

Public API::

    from brickorm import SQLiteConnection, Model

    class User(Model):
        def posts(self):
            return self.has_many(Post)

    class Post(Model):
        pass

    conn = SQLiteConnection.connect(":memory:")
    user = User.find(conn, 7)
    sql, bindings = user.posts().compile()
    rows = user.posts().get_results()

Queries can also be compiled without any connection::

    from brickorm import QueryBuilder, DialectFactory

    compiled = (
        QueryBuilder("users", dialect=DialectFactory.create("postgresql"))
        .where("active", True)
        .limit(10)
        .compile()
    )
"""
from __future__ import annotations

from brickorm.config import EngineConfig
from brickorm.connection.base import Connection, QueryLogEntry, Row, StatementResult
from brickorm.connection.sqlite import SQLiteConnection
from brickorm.dialect import (
    Dialect,
    DialectFactory,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
)
from brickorm.errors import (
    BrickORMError,
    BuilderError,
    DialectNotFoundError,
    ExecutionError,
    MissingParentKeyError,
    NoTableError,
    PivotMutationError,
    RelationError,
    UnresolvedMorphTypeError,
    UnsupportedOperatorError,
)
from brickorm.model import Model
from brickorm.query import CompiledSQL, Expression, QueryBuilder, QueryCompiler, QueryState
from brickorm.relations import (
    BelongsTo,
    BelongsToMany,
    HasMany,
    HasOne,
    MorphMany,
    MorphOne,
    MorphRegistry,
    MorphTo,
    Relation,
)

__all__ = [
    # Query layer
    "QueryBuilder",
    "QueryCompiler",
    "QueryState",
    "CompiledSQL",
    "Expression",
    # Dialects
    "Dialect",
    "DialectFactory",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLServerDialect",
    # Connections
    "Connection",
    "SQLiteConnection",
    "StatementResult",
    "QueryLogEntry",
    "Row",
    "EngineConfig",
    # Models and relations
    "Model",
    "Relation",
    "HasOne",
    "HasMany",
    "BelongsTo",
    "BelongsToMany",
    "MorphOne",
    "MorphMany",
    "MorphTo",
    "MorphRegistry",
    # Errors
    "BrickORMError",
    "BuilderError",
    "NoTableError",
    "UnsupportedOperatorError",
    "RelationError",
    "MissingParentKeyError",
    "UnresolvedMorphTypeError",
    "PivotMutationError",
    "ExecutionError",
    "DialectNotFoundError",
]

__version__ = "0.1.0"
