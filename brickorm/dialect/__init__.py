"""brickORM dialects: per-engine SQL syntax strategies."""
from brickorm.dialect.base import Dialect
from brickorm.dialect.mysql import MySQLDialect
from brickorm.dialect.postgres import PostgresDialect
from brickorm.dialect.registry import DialectFactory
from brickorm.dialect.sqlite import SQLiteDialect
from brickorm.dialect.sqlserver import SQLServerDialect

DialectFactory.register_class("mysql", MySQLDialect)
DialectFactory.register_class("postgresql", PostgresDialect)
DialectFactory.register_class("sqlite", SQLiteDialect)
DialectFactory.register_class("sqlserver", SQLServerDialect)

DialectFactory.register_alias("mariadb", "mysql")
DialectFactory.register_alias("postgres", "postgresql")
DialectFactory.register_alias("pgsql", "postgresql")
DialectFactory.register_alias("mssql", "sqlserver")

__all__ = [
    "Dialect",
    "DialectFactory",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLServerDialect",
]
