"""
Table catalog: the ordered set of tables a converter exports and imports.
"""

import logging

from typing import Iterable, Iterator, List, Optional

from .constants import RESERVED_TABLES
from .interfaces import DatabaseInterface


class TableCatalog:
    """
    Ordered, duplicate-free list of table names.

    The catalog is resolved once: by the first explicit ``add_table``, or,
    when no table was added, by the first call to ``resolved_names()``, which
    discovers every user table in the database. Reserved internal tables are
    never discovered. Removing tables afterwards never triggers discovery
    again, so a catalog emptied by ``remove_table`` stays empty.
    """

    def __init__(self, db: DatabaseInterface, tables: Optional[Iterable[str]] = None,
                 reserved: Iterable[str] = RESERVED_TABLES):
        self.db = db
        self.logger = logging.getLogger(__name__)
        self._reserved = frozenset(name.lower() for name in reserved)
        self._table_names: List[str] = []
        self._resolved = False
        for name in tables or ():
            self.add_table(name)

    @property
    def resolved(self) -> bool:
        return self._resolved

    def add_table(self, table_name: str) -> None:
        """Append a table unless it is already in the catalog."""
        self._resolved = True
        if table_name not in self._table_names:
            self._table_names.append(table_name)

    def remove_table(self, table_name: str) -> None:
        """Remove a table if present; discovered tables can be removed too."""
        names = self.resolved_names()
        if table_name in names:
            names.remove(table_name)

    def resolved_names(self) -> List[str]:
        """
        Return the catalog, discovering the database's tables on first use.

        Every table of the listing is considered, not only the first one.

        Returns:
            The live, ordered list of table names
        """
        if not self._resolved:
            for name in self.db.list_tables():
                if name.lower() in self._reserved:
                    continue
                self._table_names.append(name)
            self._resolved = True
            self.logger.debug(f"Discovered {len(self._table_names)} tables: {self._table_names}")
        return self._table_names

    def __contains__(self, table_name: str) -> bool:
        return table_name in self.resolved_names()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.resolved_names()))

    def __len__(self) -> int:
        return len(self.resolved_names())
