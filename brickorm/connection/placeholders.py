"""Translate ``?`` placeholders to a DB-API driver's paramstyle.

The compiler always emits positional ``?`` placeholders.  Drivers such as
``psycopg`` and ``PyMySQL`` expect ``%s`` instead, and treat a bare ``%``
as the start of a placeholder, so literal percent signs must be doubled.
Quoted literals and quoted identifiers are copied through untouched.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from brickorm.errors import BuilderError

_QUOTES = {"'": "'", '"': '"', "`": "`", "[": "]"}


def translate(sql: str, paramstyle: str) -> str:
    """Return ``sql`` with every unquoted ``?`` rewritten for ``paramstyle``.

    Supported styles: ``qmark`` (unchanged), ``format`` / ``pyformat``
    (``%s``) and ``numeric`` (``:1``, ``:2``, …).
    """
    if paramstyle == "qmark":
        return sql
    if paramstyle not in ("format", "pyformat", "numeric"):
        raise BuilderError(f"Unsupported driver paramstyle: '{paramstyle}'.")

    out: list[str] = []
    position = 0
    i = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        if ch in _QUOTES:
            close = _QUOTES[ch]
            end = sql.find(close, i + 1)
            end = length - 1 if end == -1 else end
            chunk = sql[i:end + 1]
            out.append(chunk.replace("%", "%%") if paramstyle != "numeric" else chunk)
            i = end + 1
            continue
        if ch == "?":
            position += 1
            out.append(f":{position}" if paramstyle == "numeric" else "%s")
        elif ch == "%" and paramstyle != "numeric":
            out.append("%%")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def as_parameters(bindings: Sequence[Any]) -> tuple[Any, ...]:
    """Positional parameters in the shape DB-API ``execute`` expects."""
    return tuple(bindings)
