"""SQLite dialect."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from brickorm.dialect.base import COMMON_OPERATORS, Dialect


class SQLiteDialect(Dialect):
    """SQLite syntax.

    Note: SQLite has no built-in full-text predicate outside FTS virtual
    tables, so full-text search falls back to one ``LIKE '%term%'`` per
    column joined with ``OR``.  SQLite's ``LIKE`` is case-insensitive for
    ASCII by default.
    """

    operators: ClassVar[frozenset[str]] = COMMON_OPERATORS | {
        "GLOB", "NOT GLOB", "IS", "IS NOT",
    }

    @property
    def name(self) -> str:
        return "sqlite"

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
            if limit is None:
                parts.append("LIMIT -1")  # SQLite requires LIMIT before OFFSET
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def compile_full_text(
        self, columns: Sequence[str], query: str, **options: Any
    ) -> tuple[str, list[Any]]:
        pattern = f"%{query}%"
        preds = [f"{self.wrap(c)} LIKE ?" for c in columns]
        return f"({' OR '.join(preds)})", [pattern] * len(columns)

    def compile_json_path(
        self, column: str, path: str, operator: str, value: Any
    ) -> tuple[str, list[Any]]:
        op = self.check_operator(operator)
        json_path = "$." + ".".join(self.json_path_segments(path))
        return f"json_extract({self.wrap(column)}, ?) {op} ?", [json_path, value]

    def last_insert_id_sql(self) -> str:
        return "SELECT last_insert_rowid()"

    def type_map(self) -> dict[str, str]:
        return {
            "string": "TEXT",
            "text": "TEXT",
            "integer": "INTEGER",
            "bigint": "INTEGER",
            "decimal": "NUMERIC",
            "float": "REAL",
            "double": "REAL",
            "boolean": "INTEGER",
            "date": "TEXT",
            "datetime": "TEXT",
            "timestamp": "TEXT",
            "time": "TEXT",
            "json": "TEXT",
            "binary": "BLOB",
        }
