"""Shared pytest fixtures for brickORM unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from brickorm.config import EngineConfig
from brickorm.connection.sqlite import SQLiteConnection
from brickorm.dialect import MySQLDialect, PostgresDialect, SQLiteDialect, SQLServerDialect
from brickorm.relations import MorphRegistry
from tests.fixtures import SEED, load_ddl
from tests.fixtures.models import morph_registry


def seed(conn: SQLiteConnection) -> None:
    for table, rows in SEED.items():
        conn.table(table).insert(rows)


@pytest.fixture()
def conn() -> Iterator[SQLiteConnection]:
    """In-memory SQLite connection with the sample schema and seed rows."""
    connection = SQLiteConnection.connect(":memory:", EngineConfig(debug=True))
    connection.executescript(load_ddl("sqlite"))
    seed(connection)
    yield connection
    connection.close()


@pytest.fixture()
def morphs() -> MorphRegistry:
    return morph_registry()


@pytest.fixture(scope="session")
def mysql() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture(scope="session")
def postgres() -> PostgresDialect:
    return PostgresDialect()


@pytest.fixture(scope="session")
def sqlite() -> SQLiteDialect:
    return SQLiteDialect()


@pytest.fixture(scope="session")
def sqlserver() -> SQLServerDialect:
    return SQLServerDialect()
