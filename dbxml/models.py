"""
Core data models for the database/XML conversion system.

This module defines the enumerations and result structures shared by the
exporter, the import handler and the database adapters.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

from .exceptions import ConfigurationError


class ReplaceStrategy(Enum):
    """
    Determines how existing rows are handled when importing a row from XML
    causes a constraint violation.
    """
    # All existing rows are dropped from the table before any rows are added
    REPLACE_ALL = "replace_all"
    # On conflict drop the existing row (matched on the id column) and insert again
    REPLACE_EXISTING = "replace_existing"
    # On conflict keep the existing row and ignore the incoming one
    REPLACE_NONE = "replace_none"

    @classmethod
    def from_name(cls, name: str) -> 'ReplaceStrategy':
        """
        Parse a strategy from its name, case-insensitively.

        Accepts both the value ("replace_all") and the member name ("REPLACE_ALL").

        Raises:
            ConfigurationError: If the name matches no strategy
        """
        if isinstance(name, cls):
            return name
        normalized = str(name).strip().lower().replace('-', '_')
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        valid = ", ".join(s.value for s in cls)
        raise ConfigurationError(f"Unknown replace strategy '{name}' (expected one of: {valid})")


class InsertOutcome(Enum):
    """Result tag of a single row insert."""
    INSERTED = "inserted"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass
class InsertResult:
    """
    Outcome of inserting one row.

    Attributes:
        outcome: Whether the row was inserted, conflicted with a constraint, or failed otherwise
        row_id: Row identifier reported by the driver, when available
        error: Driver exception behind a CONFLICT or FAILED outcome
    """
    outcome: InsertOutcome
    row_id: Optional[int] = None
    error: Optional[BaseException] = None

    @property
    def inserted(self) -> bool:
        return self.outcome is InsertOutcome.INSERTED

    @classmethod
    def ok(cls, row_id: Optional[int] = None) -> 'InsertResult':
        return cls(InsertOutcome.INSERTED, row_id=row_id)

    @classmethod
    def conflict(cls, error: BaseException) -> 'InsertResult':
        return cls(InsertOutcome.CONFLICT, error=error)

    @classmethod
    def failed(cls, error: BaseException) -> 'InsertResult':
        return cls(InsertOutcome.FAILED, error=error)


@dataclass
class ImportResult:
    """
    Counters gathered while importing one XML document.

    Attributes:
        tables_processed: Catalog tables whose element was found in the document
        tables_ignored: Table elements naming tables outside the catalog
        rows_inserted: Rows inserted without a conflict
        rows_replaced: Rows inserted after deleting a conflicting row
        rows_skipped: Incoming rows dropped because an existing row was kept
        rows_discarded: Rows read under a table outside the catalog
    """
    tables_processed: List[str] = field(default_factory=list)
    tables_ignored: List[str] = field(default_factory=list)
    rows_inserted: int = 0
    rows_replaced: int = 0
    rows_skipped: int = 0
    rows_discarded: int = 0

    @property
    def rows_committed(self) -> int:
        """Rows written to the database, replacements included."""
        return self.rows_inserted + self.rows_replaced

    def summary(self) -> Dict[str, Any]:
        return {
            'tables_processed': len(self.tables_processed),
            'tables_ignored': len(self.tables_ignored),
            'rows_inserted': self.rows_inserted,
            'rows_replaced': self.rows_replaced,
            'rows_skipped': self.rows_skipped,
            'rows_discarded': self.rows_discarded,
        }


@dataclass
class ExportResult:
    """
    Counters gathered while exporting a database.

    Attributes:
        rows_per_table: Number of row elements written for each table, in catalog order
    """
    rows_per_table: Dict[str, int] = field(default_factory=dict)

    @property
    def tables_exported(self) -> int:
        return len(self.rows_per_table)

    @property
    def rows_exported(self) -> int:
        return sum(self.rows_per_table.values())
