"""Many-to-many relation through a pivot (junction) table.

Besides reading, ``BelongsToMany`` owns the pivot lifecycle:

* :meth:`attach` inserts one pivot row per id.  No uniqueness check is
  made, so attaching the same id twice stores two rows unless the table
  has a unique constraint.
* :meth:`detach` deletes the parent's pivot rows, optionally only those
  for the given ids.
* :meth:`sync` is a full replacement: detach everything, then attach each
  id.  It is not transactional; wrap it in ``connection.transaction()``
  when it must be atomic.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from brickorm.query.builder import QueryBuilder
from brickorm.relations.base import Relation

if TYPE_CHECKING:
    from brickorm.connection.base import Row
    from brickorm.model import Model

logger = logging.getLogger(__name__)


class BelongsToMany(Relation):
    """Related rows joined through ``table``.

    Args:
        parent: The model the relation starts from.
        related: The model class on the far side of the pivot.
        table: Pivot table name.
        foreign_pivot_key: Pivot column holding the parent's key.
        related_pivot_key: Pivot column holding the related model's key.
        parent_key: Parent attribute stored in ``foreign_pivot_key``.
        related_key: Related column matched against ``related_pivot_key``.
    """

    def __init__(
        self,
        parent: Model,
        related: type[Model],
        table: str,
        foreign_pivot_key: str,
        related_pivot_key: str,
        parent_key: str,
        related_key: str,
    ) -> None:
        self.table = table
        self.foreign_pivot_key = foreign_pivot_key
        self.related_pivot_key = related_pivot_key
        self.parent_key_name = parent_key
        self.related_key = related_key
        self._pivot_columns: list[str] = []
        super().__init__(parent, related, parent_key)

    def add_constraints(self) -> None:
        self._query.select(f"{self._related.table_name()}.*")
        self._query.join(
            self.table,
            self._qualify(self.related_key),
            "=",
            f"{self.table}.{self.related_pivot_key}",
        )
        self._query.where(f"{self.table}.{self.foreign_pivot_key}", "=", self._parent_key)

    def get_results(self) -> list[Row]:
        return self._query.get()

    def with_pivot(self, *columns: str) -> BelongsToMany:
        """Also select pivot ``columns``, aliased as ``pivot_<column>``."""
        for column in columns:
            if column not in self._pivot_columns:
                self._pivot_columns.append(column)
                self._query.add_select(f"{self.table}.{column} as pivot_{column}")
        return self

    # ------------------------------------------------------------------
    # Pivot operations
    # ------------------------------------------------------------------

    def pivot_query(self) -> QueryBuilder:
        """A builder on the pivot table restricted to this parent's rows."""
        return self.connection.table(self.table).where(
            self.foreign_pivot_key, "=", self._parent_key
        )

    def attach(self, ids: Any, attributes: Mapping[str, Any] | None = None) -> int:
        """Insert a pivot row for each id and return how many were inserted.

        ``attributes`` are extra pivot columns written on every row.
        """
        count = 0
        for related_id in _as_list(ids):
            row = {
                **(attributes or {}),
                self.foreign_pivot_key: self._parent_key,
                self.related_pivot_key: related_id,
            }
            # A one-row list goes through the rowcount path: pivot tables
            # usually have no generated id to report.
            count += self.connection.table(self.table).insert([row])
        logger.debug(
            "Attached %d row(s) to %s for %s=%r",
            count, self.table, self.foreign_pivot_key, self._parent_key,
        )
        return count

    def detach(self, ids: Any = None) -> int:
        """Delete the parent's pivot rows (only ``ids`` when given)."""
        query = self.pivot_query()
        if ids is not None:
            query.where_in(self.related_pivot_key, _as_list(ids))
        deleted = query.delete()
        logger.debug(
            "Detached %d row(s) from %s for %s=%r",
            deleted, self.table, self.foreign_pivot_key, self._parent_key,
        )
        return deleted

    def sync(self, ids: Iterable[Any]) -> BelongsToMany:
        """Replace the parent's pivot set with exactly ``ids``."""
        ids = list(ids)
        self.detach()
        for related_id in ids:
            self.attach(related_id)
        return self


def _as_list(ids: Any) -> list[Any]:
    if isinstance(ids, (str, bytes)) or not isinstance(ids, Iterable):
        return [ids]
    return list(ids)
