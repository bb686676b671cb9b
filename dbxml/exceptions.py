"""
Custom exceptions for the database/XML conversion system.

This module defines specific exception types for the failure classes that can
occur while exporting a database as XML or importing an XML document back into
a database.
"""

from typing import Any, Dict, Optional


class DbXmlError(Exception):
    """Base exception for all conversion related errors."""

    def __init__(self, message: str, table_name: str = None):
        """
        Initialize conversion error.

        Args:
            message: Error description
            table_name: Optional name of the table being processed when the error occurred
        """
        super().__init__(message)
        self.table_name = table_name


class XMLStructureError(DbXmlError):
    """Exception raised when the XML document does not have the expected shape."""

    def __init__(self, message: str, element: str = None, table_name: str = None):
        """
        Initialize XML structure error.

        Args:
            message: Error description
            element: Tag of the element that broke the expected structure
            table_name: Optional name of the active table
        """
        super().__init__(message, table_name)
        self.element = element


class DatabaseIntegrityError(DbXmlError):
    """Exception raised when a row cannot be committed and the replace strategy gives no way out."""

    def __init__(self, message: str, table_name: str = None, row: Optional[Dict[str, Any]] = None):
        """
        Initialize database integrity error.

        Args:
            message: Error description
            table_name: Table the row was destined for
            row: The pending row that could not be committed
        """
        super().__init__(message, table_name)
        self.row = dict(row) if row else None


class DatabaseConnectionError(DbXmlError):
    """Exception raised when database connection fails."""
    pass


class ConfigurationError(DbXmlError):
    """Exception raised when configuration is invalid or missing."""
    pass
