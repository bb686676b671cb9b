"""
Abstract interfaces for the database/XML conversion system.

This module defines the contract a database adapter must implement so the
exporter and the import handler can work against any engine.
"""

from abc import ABC, abstractmethod
from typing import Any, ContextManager, Dict, Iterator, List, Optional, Sequence

from .models import InsertResult


class DatabaseInterface(ABC):
    """Abstract interface for the database capability borrowed by the converter."""

    @abstractmethod
    def list_tables(self) -> List[str]:
        """
        List the tables present in the database, in the engine's catalog order.

        Returns:
            Table names, system tables included
        """
        pass

    @abstractmethod
    def iter_rows(self, table_name: str) -> ContextManager[Iterator[Dict[str, Any]]]:
        """
        Stream all rows of a table.

        Must be used as a context manager; the underlying cursor is released
        when the block exits, whether normally or through an exception.

        Args:
            table_name: Table to read

        Returns:
            Context manager yielding an iterator of column -> value mappings
        """
        pass

    @abstractmethod
    def insert(self, table_name: str, row: Dict[str, Any]) -> InsertResult:
        """
        Insert one row and commit it.

        Constraint violations are reported through the result, never raised.

        Args:
            table_name: Target table
            row: Column -> value mapping

        Returns:
            InsertResult tagged INSERTED, CONFLICT or FAILED
        """
        pass

    @abstractmethod
    def delete(self, table_name: str, where: Optional[str] = None,
               params: Sequence[Any] = ()) -> int:
        """
        Delete rows matching a predicate and commit.

        Args:
            table_name: Target table
            where: Optional SQL predicate using ``?`` placeholders; all rows when None
            params: Values bound to the placeholders

        Returns:
            Number of rows deleted, or -1 when the driver cannot tell
        """
        pass


def quote_identifier(name: str) -> str:
    """Quote a table or column name for use in generated SQL."""
    return '"' + str(name).replace('"', '""') + '"'
