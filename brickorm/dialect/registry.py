"""Dialect registry (Open/Closed Principle).

``DialectFactory`` maps database-engine identifiers to
:class:`~brickorm.dialect.base.Dialect` classes.  Connections resolve their
dialect through it once, when they are created; the query builder only
ever receives a ``Dialect`` instance.

Usage::

    from brickorm.dialect.registry import DialectFactory

    @DialectFactory.register("oracle")
    class OracleDialect(Dialect):
        ...

    dialect = DialectFactory.create("oracle")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from brickorm.dialect.base import Dialect
from brickorm.errors import DialectNotFoundError


class DialectFactory:
    """Registry mapping dialect identifiers to :class:`Dialect` classes.

    Registered classes hold no connection state, so the registry carries
    no runtime wiring; it only answers "which syntax rules go with this
    engine name".
    """

    _dialects: ClassVar[dict[str, type[Dialect]]] = {}
    _aliases: ClassVar[dict[str, str]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[Dialect]], type[Dialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The dialect identifier (e.g. ``"postgresql"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[Dialect]) -> type[Dialect]:
            cls._dialects[name] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, dialect_cls: type[Dialect]) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[name] = dialect_cls

    @classmethod
    def register_alias(cls, alias: str, name: str) -> None:
        """Make ``alias`` resolve to the dialect registered as ``name``.

        Driver names rarely agree (``pgsql``, ``postgres``, ``postgresql``),
        so connections can pass whatever their driver reports.
        """
        cls._aliases[alias] = name

    @classmethod
    def create(cls, name: str) -> Dialect:
        """Instantiate the dialect registered for ``name`` (or an alias).

        Raises:
            DialectNotFoundError: If nothing is registered under ``name``.
        """
        key = cls._aliases.get(name.lower(), name.lower())
        dialect_cls = cls._dialects.get(key)
        if dialect_cls is None:
            raise DialectNotFoundError(name, list(cls._dialects))
        return dialect_cls()

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect identifiers."""
        return sorted(cls._dialects)
