"""MySQL dialect."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from brickorm.dialect.base import COMMON_OPERATORS, Dialect

# MySQL cannot express OFFSET without LIMIT; this is the documented
# "all remaining rows" value (2**64 - 1).
_MAX_ROWS = 18446744073709551615


class MySQLDialect(Dialect):
    """MySQL / MariaDB syntax.

    Identifiers are quoted with backticks (`` ` ``) rather than
    double-quotes.  Full-text search uses ``MATCH ... AGAINST`` in boolean
    mode and therefore needs a FULLTEXT index on the searched columns.
    """

    operators: ClassVar[frozenset[str]] = COMMON_OPERATORS | {
        "<=>", "REGEXP", "NOT REGEXP", "RLIKE",
    }

    @property
    def name(self) -> str:
        return "mysql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def compile_pagination(
        self, limit: int | None, offset: int | None, *, ordered: bool = True
    ) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset:
            if limit is None:
                parts.append(f"LIMIT {_MAX_ROWS}")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def compile_full_text(
        self, columns: Sequence[str], query: str, **options: Any
    ) -> tuple[str, list[Any]]:
        cols = ", ".join(self.wrap(c) for c in columns)
        return f"MATCH({cols}) AGAINST(? IN BOOLEAN MODE)", [query]

    def compile_json_path(
        self, column: str, path: str, operator: str, value: Any
    ) -> tuple[str, list[Any]]:
        op = self.check_operator(operator)
        json_path = "$." + ".".join(self.json_path_segments(path))
        return f"JSON_EXTRACT({self.wrap(column)}, ?) {op} ?", [json_path, value]

    def last_insert_id_sql(self) -> str:
        return "SELECT LAST_INSERT_ID()"

    def type_map(self) -> dict[str, str]:
        return {
            "string": "VARCHAR",
            "text": "TEXT",
            "integer": "INT",
            "bigint": "BIGINT",
            "decimal": "DECIMAL",
            "float": "FLOAT",
            "double": "DOUBLE",
            "boolean": "TINYINT(1)",
            "date": "DATE",
            "datetime": "DATETIME",
            "timestamp": "TIMESTAMP",
            "time": "TIME",
            "json": "JSON",
            "binary": "BLOB",
        }
