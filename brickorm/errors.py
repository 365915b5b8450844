"""Custom exception hierarchy for brickORM.

All public errors inherit from BrickORMError so callers can catch the base
class for any brickORM-specific failure.

Builder and relation errors are raised while a query is being constructed,
before anything is sent to the database.  ``ExecutionError`` is the only
error that originates from the connection.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class BrickORMError(Exception):
    """Base exception for all brickORM errors."""

    code = "BRICKORM_ERROR"

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response for API layers."""
        return {"error": self.code, "message": str(self)}


# ---------------------------------------------------------------------------
# Query construction
# ---------------------------------------------------------------------------


class BuilderError(BrickORMError):
    """Raised when a query is malformed or incomplete.

    Args:
        message: Human-readable description.
        clause: The clause being built or compiled when the error occurred.
    """

    code = "BUILDER_ERROR"

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause


class NoTableError(BuilderError):
    """Raised when a statement is compiled without a FROM / target table."""

    code = "NO_TABLE"

    def __init__(self, statement: str = "SELECT") -> None:
        super().__init__(
            f"Cannot compile {statement}: no table was given.", clause="FROM"
        )
        self.statement = statement


class UnsupportedOperatorError(BuilderError):
    """Raised when an operator is not in the dialect's allow-list."""

    code = "UNSUPPORTED_OPERATOR"

    def __init__(self, operator: str, dialect: str, allowed: Sequence[str]) -> None:
        super().__init__(
            f"Operator '{operator}' is not supported by the '{dialect}' dialect.",
            clause="WHERE",
        )
        self.operator = operator
        self.dialect = dialect
        self.allowed = sorted(allowed)

    def to_error_response(self) -> dict[str, Any]:
        return {
            **super().to_error_response(),
            "details": {
                "operator": self.operator,
                "dialect": self.dialect,
                "allowed": self.allowed,
            },
        }


class DialectNotFoundError(BrickORMError):
    """Raised when no dialect is registered under a given identifier."""

    code = "DIALECT_NOT_FOUND"

    def __init__(self, name: str, registered: Sequence[str]) -> None:
        super().__init__(
            f"Unsupported dialect: '{name}'. Registered dialects: {sorted(registered)}."
        )
        self.name = name
        self.registered = sorted(registered)


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------


class RelationError(BrickORMError):
    """Raised when a relationship cannot be resolved or mutated."""

    code = "RELATION_ERROR"


class MissingParentKeyError(RelationError):
    """Raised when the parent model has no value for the relation's key."""

    code = "MISSING_PARENT_KEY"

    def __init__(self, model: str, key: str) -> None:
        super().__init__(
            f"Model '{model}' has no value for key '{key}'; "
            "the relation cannot be constrained."
        )
        self.model = model
        self.key = key


class UnresolvedMorphTypeError(RelationError):
    """Raised when a stored morph type is not registered."""

    code = "UNRESOLVED_MORPH_TYPE"

    def __init__(self, morph_type: Any, registered: Sequence[str]) -> None:
        super().__init__(
            f"Morph type {morph_type!r} does not resolve to a registered model. "
            f"Registered types: {sorted(registered)}."
        )
        self.morph_type = morph_type
        self.registered = sorted(registered)


class PivotMutationError(RelationError):
    """Raised when attach / detach / sync is called on a non-pivot relation."""

    code = "PIVOT_MUTATION"

    def __init__(self, relation: str, operation: str) -> None:
        super().__init__(
            f"'{operation}' is only available on many-to-many relations, "
            f"not on {relation}."
        )
        self.relation = relation
        self.operation = operation


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ExecutionError(BrickORMError):
    """Raised when the database rejects or fails a statement.

    The original driver exception is chained as ``__cause__``.  The SQL text
    and bindings are only attached when the connection runs in debug mode,
    so schema and query details do not leak otherwise.

    Args:
        message: Human-readable description from the driver.
        sql: The statement that failed (debug mode only).
        bindings: The bindings sent with it (debug mode only).
    """

    code = "EXECUTION_ERROR"

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        bindings: Sequence[Any] | None = None,
    ) -> None:
        if sql is not None:
            message = f"{message} [SQL: {sql}] [bindings: {list(bindings or [])}]"
        super().__init__(message)
        self.sql = sql
        self.bindings = list(bindings) if bindings is not None else None

    def to_error_response(self) -> dict[str, Any]:
        response = super().to_error_response()
        if self.sql is not None:
            response["query"] = self.sql
            response["bindings"] = self.bindings
        return response
