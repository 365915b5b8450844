"""Runtime configuration for connections.

``EngineConfig`` is plain data; it is passed to a connection when the
connection is created and never read from ambient global state::

    config = EngineConfig(debug=True, log_queries=True)
    conn = SQLiteConnection.connect(":memory:", config=config)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any


@dataclass
class EngineConfig:
    """Connection-level settings.

    Attributes:
        debug: Attach the failing SQL and bindings to
            :class:`~brickorm.errors.ExecutionError`.  Leave off in
            production so query details are not exposed to callers.
        log_queries: Record every statement in the connection's in-memory
            query log (see :attr:`Connection.query_log`).
        slow_query_threshold: Statements slower than this many seconds are
            logged at WARNING.  ``None`` disables the check.
    """

    debug: bool = False
    log_queries: bool = False
    slow_query_threshold: float | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> EngineConfig:
        """Build a config from a plain mapping, ignoring unknown keys.

        Useful when the settings come from a framework's database config
        section that also carries host, port, credentials and so on.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in mapping.items() if k in known})
