"""Unit tests for the error hierarchy and its structured responses."""

from __future__ import annotations

import pytest

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


@pytest.mark.parametrize(
    "error, parent",
    [
        (NoTableError(), BuilderError),
        (UnsupportedOperatorError("~", "mysql", ["="]), BuilderError),
        (MissingParentKeyError("User", "id"), RelationError),
        (UnresolvedMorphTypeError("Podcast", ["Post"]), RelationError),
        (PivotMutationError("HasMany", "sync"), RelationError),
        (ExecutionError("boom"), BrickORMError),
        (DialectNotFoundError("oracle", ["mysql"]), BrickORMError),
    ],
)
def test_hierarchy(error, parent):
    assert isinstance(error, parent)
    assert isinstance(error, BrickORMError)


def test_error_response_shape():
    response = MissingParentKeyError("User", "id").to_error_response()
    assert response == {
        "error": "MISSING_PARENT_KEY",
        "message": "Model 'User' has no value for key 'id'; the relation cannot be constrained.",
    }


def test_builder_error_records_clause():
    assert NoTableError("UPDATE").clause == "FROM"
    assert BuilderError("bad", clause="WHERE").clause == "WHERE"


def test_execution_error_without_sql_hides_query():
    response = ExecutionError("no such table: x").to_error_response()
    assert response == {"error": "EXECUTION_ERROR", "message": "no such table: x"}


def test_execution_error_with_sql():
    error = ExecutionError("no such table: x", "SELECT * FROM x WHERE id = ?", [1])
    assert "[SQL: SELECT * FROM x WHERE id = ?]" in str(error)
    response = error.to_error_response()
    assert response["query"] == "SELECT * FROM x WHERE id = ?"
    assert response["bindings"] == [1]


def test_unresolved_morph_lists_registered_types():
    error = UnresolvedMorphTypeError("Podcast", ["Video", "Post"])
    assert error.registered == ["Post", "Video"]
    assert "'Podcast'" in str(error)
