"""
Database/XML Conversion System

Streams the contents of a relational database (all tables or selected ones)
to an XML document and imports such documents back, with configurable
handling of rows that conflict with existing ones.
"""

__version__ = "1.0.0"

from .models import (
    ReplaceStrategy,
    InsertOutcome,
    InsertResult,
    ImportResult,
    ExportResult
)

from .interfaces import DatabaseInterface

from .exceptions import (
    DbXmlError,
    XMLStructureError,
    DatabaseIntegrityError,
    DatabaseConnectionError,
    ConfigurationError
)

from .catalog import TableCatalog
from .converter import DatabaseXmlConverter, export_db_as_xml_to_stream, import_xml_stream_to_db
from .database.sqlite_database import SQLiteDatabase

__all__ = [
    # Core models
    "ReplaceStrategy",
    "InsertOutcome",
    "InsertResult",
    "ImportResult",
    "ExportResult",

    # Interfaces
    "DatabaseInterface",

    # Components
    "TableCatalog",
    "DatabaseXmlConverter",
    "SQLiteDatabase",
    "export_db_as_xml_to_stream",
    "import_xml_stream_to_db",

    # Exceptions
    "DbXmlError",
    "XMLStructureError",
    "DatabaseIntegrityError",
    "DatabaseConnectionError",
    "ConfigurationError"
]
