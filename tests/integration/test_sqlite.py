"""Integration tests: build → compile → execute against a file-backed SQLite DB.

Runs the same scenarios twice: once through the stdlib-backed
``SQLiteConnection`` and once through ``SQLAlchemyConnection`` on a SQLite
engine (skipped when SQLAlchemy is not installed).  Covers 1:1, 1:many,
many:many with pivot mutations, polymorphic relations, model persistence
and transactions.
"""
from __future__ import annotations

import pytest

from brickorm.config import EngineConfig
from brickorm.connection.base import Connection
from brickorm.connection.sqlite import SQLiteConnection
from brickorm.errors import UnresolvedMorphTypeError
from tests.fixtures import SEED, load_ddl
from tests.fixtures.models import Comment, Post, User, morph_registry


def _create_schema(conn: Connection) -> None:
    for statement in load_ddl("sqlite").split(";"):
        if statement.strip():
            conn.statement(statement)
    for table, rows in SEED.items():
        conn.table(table).insert(rows)


def _native(path) -> Connection:
    return SQLiteConnection.connect(str(path / "native.db"), EngineConfig(debug=True))


def _sqlalchemy(path) -> Connection:
    sqlalchemy = pytest.importorskip("sqlalchemy")
    from brickorm.connection.sqlalchemy import SQLAlchemyConnection

    engine = sqlalchemy.create_engine(f"sqlite:///{path / 'engine.db'}")
    return SQLAlchemyConnection(engine, EngineConfig(debug=True))


@pytest.fixture(params=["native", "sqlalchemy"])
def db(request, tmp_path):
    factory = _native if request.param == "native" else _sqlalchemy
    conn = factory(tmp_path)
    _create_schema(conn)
    yield conn
    conn.close()


def test_dialect_resolved(db):
    assert db.dialect.name == "sqlite"


def test_has_many_three_of_five(db):
    user = User.find(db, 7)
    posts = user.posts().get_results()
    assert len(posts) == 3
    assert db.table("posts").count() == 5


def test_paginated_relation(db):
    posts = User.find(db, 7).posts()
    posts.query.order_by("id").for_page(2, 2)
    assert [r["id"] for r in posts.get_results()] == [4]


def test_belongs_to_and_has_one(db):
    post = Post.find(db, 3)
    assert post.author().get_results()["name"] == "Brian"
    assert User.find(db, 7).profile().get_results()["bio"] == "Mathematician"


def test_sync_twice_leaves_exact_set(db):
    roles = User.find(db, 7).roles()
    roles.sync([2, 3])
    roles.sync([2, 3])
    assert sorted(r["id"] for r in roles.get_results()) == [2, 3]
    assert roles.pivot_query().count() == 2


def test_duplicate_attach_without_unique_constraint(db):
    roles = User.find(db, 8).roles()
    roles.attach(5)
    roles.attach(5)
    assert roles.pivot_query().where("role_id", 5).count() == 2
    assert [r["id"] for r in roles.get_results()].count(5) == 2


def test_detach_returns_affected_rows(db):
    roles = User.find(db, 7).roles()
    assert roles.detach([5, 6, 404]) == 2


def test_morph_relations(db):
    morphs = morph_registry()
    comments = Post.find(db, 1).comments().get_models()
    assert [c.get_attribute("body") for c in comments] == ["Great post", "Thanks"]

    owner = comments[0].commentable(morphs).get_results()
    assert owner["title"] == "Relational algebra"

    orphan = Comment.find(db, 4)
    with pytest.raises(UnresolvedMorphTypeError):
        orphan.commentable(morphs)


def test_model_round_trip(db):
    user = User(db, {"name": "Dana", "email": "dana@example.com", "active": 1, "age": 30})
    user.save()
    assert user.get_key() is not None

    loaded = User.find(db, user.get_key())
    loaded.set_attribute("age", 31)
    loaded.save()
    assert db.table("users").where("id", user.get_key()).value("age") == 31

    post = Post(db, {"user_id": user.get_key(), "title": "Hello", "published": 1})
    post.save()
    assert [r["title"] for r in loaded.posts().get_results()] == ["Hello"]

    assert post.delete()
    assert loaded.posts().get_results() == []
    assert loaded.delete()
    assert User.find(db, user.get_key()) is None


def test_transaction_rollback(db):
    with pytest.raises(RuntimeError):
        with db.transaction():
            User.find(db, 7).roles().sync([])
            raise RuntimeError("abort")
    assert len(User.find(db, 7).roles().get_results()) == 2


def test_transaction_commit(db):
    with db.transaction():
        User.find(db, 9).roles().attach([2, 3])
    assert len(User.find(db, 9).roles().get_results()) == 2
