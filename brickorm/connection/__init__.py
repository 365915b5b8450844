"""brickORM connections: dialect-tagged statement executors.

``SQLAlchemyConnection`` lives in :mod:`brickorm.connection.sqlalchemy` and
is not imported here, so SQLAlchemy stays an optional dependency.
"""
from brickorm.connection.base import Connection, QueryLogEntry, Row, StatementResult
from brickorm.connection.sqlite import SQLiteConnection

__all__ = [
    "Connection",
    "QueryLogEntry",
    "Row",
    "SQLiteConnection",
    "StatementResult",
]
