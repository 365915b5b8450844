"""Dialect abstraction: the ``Dialect`` ABC.

The Strategy pattern (GoF) is used:
- ``Dialect`` declares every SQL-syntax decision the query compiler needs.
- ``MySQLDialect``, ``PostgresDialect``, ``SQLiteDialect`` and
  ``SQLServerDialect`` implement those decisions independently.

The compiler never branches on which dialect it holds, so a new database
engine is added by writing one subclass and registering it with
:class:`~brickorm.dialect.registry.DialectFactory`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar

from brickorm.errors import BuilderError, UnsupportedOperatorError

#: Comparison operators every dialect accepts.
COMMON_OPERATORS: frozenset[str] = frozenset(
    {"=", "<", ">", "<=", ">=", "<>", "!=", "LIKE", "NOT LIKE"}
)


class Dialect(ABC):
    """Abstract base for database-engine dialects.

    Dialects are stateless; one instance can be shared by any number of
    connections and builders.
    """

    #: Allow-listed comparison operators (upper-case for keyword operators).
    operators: ClassVar[frozenset[str]] = COMMON_OPERATORS

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the canonical dialect identifier (e.g. ``'mysql'``)."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted single identifier segment.

        Args:
            name: Unquoted identifier (one table or column name, no dots).

        Returns:
            Quoted identifier with embedded quote characters escaped.
        """

    @abstractmethod
    def compile_pagination(
        self, limit: int | None, offset: int | None, *, ordered: bool = True
    ) -> str:
        """Return the pagination suffix, or ``""`` when there is none.

        Args:
            limit: Maximum number of rows, or ``None``.
            offset: Rows to skip, or ``None``.  Zero is treated as no offset.
            ordered: Whether the statement already has an ORDER BY clause.

        Returns:
            SQL text appended after ORDER BY.
        """

    @abstractmethod
    def compile_full_text(
        self, columns: Sequence[str], query: str, **options: Any
    ) -> tuple[str, list[Any]]:
        """Return a full-text search predicate and its bindings.

        Args:
            columns: Column names to search.
            query: The user's search text (always bound, never inlined).
            **options: Dialect-specific options (e.g. ``language``).

        Returns:
            ``(predicate_sql, bindings)``.
        """

    @abstractmethod
    def compile_json_path(
        self, column: str, path: str, operator: str, value: Any
    ) -> tuple[str, list[Any]]:
        """Return a JSON-path comparison predicate and its bindings.

        Args:
            column: JSON column name.
            path: Dotted path (``'address.city'``) or a ``$``-rooted path.
            operator: Comparison operator (checked against :attr:`operators`).
            value: Right-hand value (always bound).

        Returns:
            ``(predicate_sql, bindings)``.
        """

    @abstractmethod
    def type_map(self) -> dict[str, str]:
        """Return the canonical-type-name → native-column-type mapping."""

    @abstractmethod
    def last_insert_id_sql(self) -> str:
        """Return the statement that reads the session's last generated id.

        Connections only run it when the driver itself does not report the
        id of the row just inserted.
        """

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def wrap(self, value: str) -> str:
        """Quote a possibly-dotted, possibly-aliased column or table reference.

        ``users.id`` becomes two quoted segments, ``*`` and ``users.*`` keep
        their star unquoted, and ``name AS label`` quotes both sides.
        """
        lowered = value.lower()
        if " as " in lowered:
            idx = lowered.index(" as ")
            return f"{self.wrap(value[:idx].strip())} AS {self.wrap(value[idx + 4:].strip())}"
        segments = value.split(".")
        return ".".join(
            seg if seg == "*" else self.quote_identifier(seg) for seg in segments
        )

    def check_operator(self, operator: str) -> str:
        """Normalise ``operator`` and make sure the dialect allows it.

        Raises:
            UnsupportedOperatorError: If the operator is not allow-listed.
        """
        normalised = " ".join(operator.strip().split()).upper()
        if normalised not in self.operators:
            raise UnsupportedOperatorError(operator, self.name, self.operators)
        return normalised

    def native_type(self, canonical: str) -> str:
        """Translate a canonical type name (``'string'``) to the native type.

        Raises:
            BuilderError: If the dialect has no mapping for ``canonical``.
        """
        mapping = self.type_map()
        try:
            return mapping[canonical]
        except KeyError:
            raise BuilderError(
                f"Type '{canonical}' has no native mapping in the '{self.name}' dialect.",
                clause="type",
            ) from None

    @staticmethod
    def json_path_segments(path: str) -> list[str]:
        """Split ``'$.a.b'`` / ``'a.b'`` / ``'a->b'`` into ``['a', 'b']``."""
        cleaned = path.strip()
        if cleaned.startswith("$"):
            cleaned = cleaned[1:]
        cleaned = cleaned.replace("->", ".")
        return [seg for seg in cleaned.split(".") if seg]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
