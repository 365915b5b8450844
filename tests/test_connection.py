"""Unit tests for connections: execution, logging, transactions, placeholders."""

from __future__ import annotations

import logging

import pytest

from brickorm.config import EngineConfig
from brickorm.connection import placeholders
from brickorm.connection.sqlite import SQLiteConnection
from brickorm.errors import BuilderError, ExecutionError
from brickorm.query import QueryBuilder

# ---------------------------------------------------------------------------
# Placeholder translation
# ---------------------------------------------------------------------------


def test_qmark_is_unchanged():
    assert placeholders.translate("a = ? AND b LIKE '%x'", "qmark") == "a = ? AND b LIKE '%x'"


def test_format_style_doubles_percent():
    sql = "SELECT * FROM t WHERE a = ? AND b LIKE '50%?' AND c % 2 = ?"
    assert placeholders.translate(sql, "format") == (
        "SELECT * FROM t WHERE a = %s AND b LIKE '50%%?' AND c %% 2 = %s"
    )


def test_quoted_identifiers_are_skipped():
    sql = 'SELECT "what?" FROM [t?] WHERE `c?` = ?'
    assert placeholders.translate(sql, "pyformat") == 'SELECT "what?" FROM [t?] WHERE `c?` = %s'


def test_numeric_style():
    assert placeholders.translate("a = ? AND b IN (?, ?)", "numeric") == "a = :1 AND b IN (:2, :3)"


def test_unknown_paramstyle_raises():
    with pytest.raises(BuilderError):
        placeholders.translate("a = ?", "named")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_config_from_mapping_ignores_unknown_keys():
    config = EngineConfig.from_mapping(
        {"host": "localhost", "debug": True, "slow_query_threshold": 0.5}
    )
    assert config == EngineConfig(debug=True, slow_query_threshold=0.5)


# ---------------------------------------------------------------------------
# Execution through the builder
# ---------------------------------------------------------------------------


def test_table_returns_bound_builder(conn):
    query = conn.table("users")
    assert isinstance(query, QueryBuilder)
    assert query.connection is conn
    assert query.dialect is conn.dialect


def test_get_first_value(conn):
    assert len(conn.table("users").get()) == 3
    assert conn.table("users").order_by_desc("id").first()["name"] == "Chloe"
    assert conn.table("users").where("id", 8).value("name") == "Brian"
    assert conn.table("users").where("id", 404).first() is None


def test_find(conn):
    assert conn.table("users").find(7)["name"] == "Ada"
    assert conn.table("roles").find("admin", key="name")["id"] == 5


def test_exists(conn):
    assert conn.table("posts").where("user_id", 7).exists()
    assert not conn.table("posts").where("user_id", 404).exists()


def test_aggregates(conn):
    users = conn.table("users")
    assert users.count() == 3
    assert users.max("age") == 41
    assert users.min("age") == 29
    assert users.sum("age") == 106
    assert users.where("active", 1).avg("age") == pytest.approx(32.5)


def test_count_ignores_pagination(conn):
    posts = conn.table("posts").where("published", 1).order_by("id").limit(2)
    assert posts.count() == 4
    assert len(posts.get()) == 2


def test_where_null_against_database(conn):
    assert [r["id"] for r in conn.table("users").where("email", None).get()] == [9]


def test_full_text_fallback_against_sqlite(conn):
    rows = conn.table("posts").where_full_text(["title"], "query").get()
    assert [r["id"] for r in rows] == [2]


def test_json_path_against_sqlite(conn):
    conn.table("documents").insert({"data": '{"address": {"city": "Oslo"}}'})
    conn.table("documents").insert({"data": '{"address": {"city": "Bergen"}}'})
    rows = conn.table("documents").where_json("data", "address.city", "=", "Oslo").get()
    assert len(rows) == 1


def test_insert_returns_id(conn):
    new_id = conn.table("roles").insert({"name": "guest"})
    assert new_id == 7
    assert conn.last_insert_id() == 7


def test_insert_many_returns_rowcount(conn):
    assert conn.table("roles").insert([{"name": "a"}, {"name": "b"}]) == 2


def test_update_and_delete_return_rowcount(conn):
    assert conn.table("posts").where("user_id", 7).update({"published": 1}) == 3
    assert conn.table("posts").where("published", 0).count() == 0
    assert conn.table("posts").where_in("id", [1, 2]).delete() == 2


def test_increment_and_decrement(conn):
    users = conn.table("users").where("id", 7)
    assert users.increment("age", 2) == 1
    assert users.value("age") == 38
    users.decrement("age", extra={"name": "Ada L."})
    row = users.first()
    assert (row["age"], row["name"]) == (37, "Ada L.")


def test_scalar_and_select_one(conn):
    assert conn.scalar("SELECT COUNT(*) FROM users WHERE age > ?", [30]) == 2
    assert conn.select_one("SELECT name FROM users WHERE id = ?", [404]) is None


# ---------------------------------------------------------------------------
# Errors, logging and query log
# ---------------------------------------------------------------------------


def test_driver_error_is_wrapped_with_sql_in_debug(conn):
    with pytest.raises(ExecutionError) as exc:
        conn.table("missing").where("id", 1).get()
    assert exc.value.sql == 'SELECT * FROM "missing" WHERE "id" = ?'
    assert exc.value.bindings == [1]
    assert exc.value.__cause__ is not None


def test_driver_error_hides_sql_without_debug():
    with SQLiteConnection.connect() as connection:
        with pytest.raises(ExecutionError) as exc:
            connection.execute("SELECT * FROM missing")
    assert exc.value.sql is None
    assert "missing" in str(exc.value)


def test_failed_statement_is_logged(conn, caplog):
    with caplog.at_level(logging.ERROR, logger="brickorm.connection.base"):
        with pytest.raises(ExecutionError):
            conn.execute("SELECT * FROM missing")
    assert any("Statement failed on sqlite" in r.getMessage() for r in caplog.records)


def test_statements_are_logged_at_debug_without_values(conn, caplog):
    with caplog.at_level(logging.DEBUG, logger="brickorm.connection.base"):
        conn.table("users").where("email", "ada@example.com").get()
    message = caplog.records[-1].getMessage()
    assert "[1 binding(s)]" in message
    assert "ada@example.com" not in message


def test_slow_statement_warning(caplog):
    with SQLiteConnection.connect(config=EngineConfig(slow_query_threshold=0.0)) as connection:
        with caplog.at_level(logging.WARNING, logger="brickorm.connection.base"):
            connection.execute("SELECT 1")
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_query_log(conn):
    assert conn.query_log == []
    conn.enable_query_log()
    conn.table("users").where("id", 7).first()
    entry = conn.query_log[0]
    assert entry.sql == 'SELECT * FROM "users" WHERE "id" = ? LIMIT 1'
    assert entry.bindings == [7]
    assert entry.elapsed >= 0

    conn.flush_query_log()
    conn.disable_query_log()
    conn.table("users").get()
    assert conn.query_log == []


def test_query_log_enabled_from_config():
    with SQLiteConnection.connect(config=EngineConfig(log_queries=True)) as connection:
        connection.execute("SELECT 1")
        assert len(connection.query_log) == 1


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def test_transaction_commits(conn):
    with conn.transaction():
        assert conn.in_transaction
        conn.table("roles").insert({"name": "guest"})
    assert not conn.in_transaction
    assert conn.table("roles").where("name", "guest").exists()


def test_transaction_rolls_back_on_error(conn):
    with pytest.raises(ExecutionError):
        with conn.transaction():
            conn.table("roles").insert({"name": "guest"})
            conn.execute("INSERT INTO missing VALUES (1)")
    assert not conn.in_transaction
    assert not conn.table("roles").where("name", "guest").exists()


def test_repr(conn):
    assert repr(conn) == "SQLiteConnection(dialect='sqlite')"
