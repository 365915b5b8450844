"""brickORM query layer: fluent builder → parameterized SQL."""
from brickorm.query.builder import QueryBuilder
from brickorm.query.clauses import Expression, QueryState
from brickorm.query.compiler import CompiledSQL, QueryCompiler

__all__ = [
    "CompiledSQL",
    "Expression",
    "QueryBuilder",
    "QueryCompiler",
    "QueryState",
]
