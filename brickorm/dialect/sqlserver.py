"""SQL Server (T-SQL) dialect."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from brickorm.dialect.base import Dialect


class SQLServerDialect(Dialect):
    """Microsoft SQL Server syntax.

    Identifiers are quoted with square brackets.  Pagination uses
    ``OFFSET ... ROWS FETCH NEXT ... ROWS ONLY``, which T-SQL only accepts
    after an ORDER BY; unordered statements get ``ORDER BY (SELECT NULL)``.
    """

    @property
    def name(self) -> str:
        return "sqlserver"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("]", "]]")
        return f"[{escaped}]"

    def compile_pagination(
        self, limit: int | None, offset: int | None, *, ordered: bool = True
    ) -> str:
        if limit is None and not offset:
            return ""
        parts: list[str] = []
        if not ordered:
            parts.append("ORDER BY (SELECT NULL)")
        parts.append(f"OFFSET {offset or 0} ROWS")
        if limit is not None:
            parts.append(f"FETCH NEXT {limit} ROWS ONLY")
        return " ".join(parts)

    def compile_full_text(
        self, columns: Sequence[str], query: str, **options: Any
    ) -> tuple[str, list[Any]]:
        if len(columns) == 1:
            target = self.wrap(columns[0])
        else:
            target = "(" + ", ".join(self.wrap(c) for c in columns) + ")"
        return f"CONTAINS({target}, ?)", [query]

    def compile_json_path(
        self, column: str, path: str, operator: str, value: Any
    ) -> tuple[str, list[Any]]:
        op = self.check_operator(operator)
        json_path = "$." + ".".join(self.json_path_segments(path))
        return f"JSON_VALUE({self.wrap(column)}, ?) {op} ?", [json_path, value]

    def last_insert_id_sql(self) -> str:
        return "SELECT SCOPE_IDENTITY()"

    def type_map(self) -> dict[str, str]:
        return {
            "string": "NVARCHAR(255)",
            "text": "NVARCHAR(MAX)",
            "integer": "INT",
            "bigint": "BIGINT",
            "decimal": "DECIMAL",
            "float": "REAL",
            "double": "FLOAT",
            "boolean": "BIT",
            "date": "DATE",
            "datetime": "DATETIME2",
            "timestamp": "DATETIMEOFFSET",
            "time": "TIME",
            "json": "NVARCHAR(MAX)",
            "binary": "VARBINARY(MAX)",
            "uuid": "UNIQUEIDENTIFIER",
        }
