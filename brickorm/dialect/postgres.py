"""PostgreSQL dialect."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, ClassVar

from brickorm.dialect.base import COMMON_OPERATORS, Dialect
from brickorm.errors import BuilderError

_LANGUAGE_RE = re.compile(r"^[A-Za-z_]+$")


class PostgresDialect(Dialect):
    """PostgreSQL syntax.

    Full-text search compiles to ``to_tsvector(lang, ...) @@
    plainto_tsquery(lang, ?)``.  The text-search configuration name is
    inlined as a string literal rather than bound: ``to_tsvector`` needs a
    ``regconfig`` and an untyped parameter cannot be resolved to one.  It is
    therefore validated against a strict word pattern first.
    """

    operators: ClassVar[frozenset[str]] = COMMON_OPERATORS | {
        "ILIKE", "NOT ILIKE", "~", "~*", "!~", "!~*",
        "SIMILAR TO", "NOT SIMILAR TO", "IS DISTINCT FROM", "IS NOT DISTINCT FROM",
    }

    @property
    def name(self) -> str:
        return "postgresql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def compile_pagination(
        self, limit: int | None, offset: int | None, *, ordered: bool = True
    ) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def compile_full_text(
        self, columns: Sequence[str], query: str, **options: Any
    ) -> tuple[str, list[Any]]:
        language = options.get("language", "english")
        if not _LANGUAGE_RE.match(language):
            raise BuilderError(
                f"Invalid text search configuration: {language!r}.", clause="WHERE"
            )
        document = " || ' ' || ".join(self.wrap(c) for c in columns)
        return (
            f"to_tsvector('{language}', {document}) @@ plainto_tsquery('{language}', ?)",
            [query],
        )

    def compile_json_path(
        self, column: str, path: str, operator: str, value: Any
    ) -> tuple[str, list[Any]]:
        op = self.check_operator(operator)
        segments = self.json_path_segments(path)
        if len(segments) == 1:
            return f"{self.wrap(column)}->>? {op} ?", [segments[0], value]
        # #>> takes a text[] path literal such as '{address,city}'
        return (
            f"{self.wrap(column)}#>>? {op} ?",
            ["{" + ",".join(segments) + "}", value],
        )

    def last_insert_id_sql(self) -> str:
        return "SELECT lastval()"

    def type_map(self) -> dict[str, str]:
        return {
            "string": "VARCHAR",
            "text": "TEXT",
            "integer": "INTEGER",
            "bigint": "BIGINT",
            "decimal": "DECIMAL",
            "float": "REAL",
            "double": "DOUBLE PRECISION",
            "boolean": "BOOLEAN",
            "date": "DATE",
            "datetime": "TIMESTAMP",
            "timestamp": "TIMESTAMP WITH TIME ZONE",
            "time": "TIME",
            "json": "JSON",
            "jsonb": "JSONB",
            "binary": "BYTEA",
            "uuid": "UUID",
        }
