"""
Converter façade: save or restore the contents of a database (or selected
tables of it) as one XML element.

Table names and column values must be representable as XML attribute text.
"""

import logging

from pathlib import Path
from typing import BinaryIO, IO, Iterable, List, Optional, Union

from lxml import etree

from .catalog import TableCatalog
from .config.config_manager import ConverterSettings
from .config.processing_defaults import ConverterDefaults
from .exceptions import XMLStructureError
from .export.xml_exporter import XMLExporter
from .interfaces import DatabaseInterface
from .models import ExportResult, ImportResult, ReplaceStrategy
from .parsing.import_handler import ImportHandler


class DatabaseXmlConverter:
    """
    Exports a database to XML and imports it back.

    The database handle is borrowed: the converter never opens, commits around
    or closes it. The table catalog is shared by export and import; when no
    table is added, all user tables are discovered on first use.
    """

    def __init__(self, db: DatabaseInterface, database_tag: str = ConverterDefaults.DATABASE_TAG,
                 replace_strategy: ReplaceStrategy = ReplaceStrategy.REPLACE_EXISTING,
                 tables: Optional[Iterable[str]] = None, id_column: str = ConverterDefaults.ID_COLUMN,
                 chunk_size: int = ConverterDefaults.CHUNK_SIZE, encoding: str = ConverterDefaults.ENCODING):
        """
        Args:
            db: Database to save or load
            database_tag: Name of the XML element containing the entire database
            replace_strategy: How rows conflicting with existing rows are handled on import
            tables: Optional explicit list of tables; all user tables when empty
            id_column: Column used to find the row to replace under REPLACE_EXISTING
            chunk_size: Bytes read from the input per parser feed
            encoding: Encoding of exported documents
        """
        self.db = db
        self.database_tag = database_tag
        self.replace_strategy = ReplaceStrategy.from_name(replace_strategy)
        self.id_column = id_column
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.catalog = TableCatalog(db, tables)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, db: DatabaseInterface, settings: ConverterSettings) -> 'DatabaseXmlConverter':
        return cls(db, database_tag=settings.database_tag, replace_strategy=settings.replace_strategy,
                   tables=settings.tables, id_column=settings.id_column,
                   chunk_size=settings.chunk_size, encoding=settings.encoding)

    def add_table(self, table_name: str) -> None:
        self.catalog.add_table(table_name)

    def remove_table(self, table_name: str) -> None:
        self.catalog.remove_table(table_name)

    @property
    def table_names(self) -> List[str]:
        return list(self.catalog)

    def export_to(self, output: Union[str, Path, BinaryIO], pretty_print: bool = False) -> ExportResult:
        """
        Write the catalog tables as XML.

        Args:
            output: File name or binary stream
            pretty_print: Put each table and row element on its own line

        Returns:
            ExportResult with per-table row counts
        """
        if isinstance(output, Path):
            output = str(output)
        exporter = XMLExporter(self.db, self.catalog, database_tag=self.database_tag,
                               encoding=self.encoding, pretty_print=pretty_print)
        return exporter.export(output)

    def create_import_handler(self) -> ImportHandler:
        """Handler for callers that drive their own lxml parser or event source."""
        return ImportHandler(self.db, self.catalog, replace_strategy=self.replace_strategy,
                             database_tag=self.database_tag, id_column=self.id_column)

    def import_from(self, source: Union[str, Path, IO]) -> ImportResult:
        """
        Read an XML document written by ``export_to`` into the database.

        Rows are committed one at a time as the document is parsed; a failure
        leaves the rows committed so far in place.

        Args:
            source: File name or stream (text or binary)

        Returns:
            ImportResult with row and table counters

        Raises:
            XMLStructureError: Document is malformed or lacks required attributes
            DatabaseIntegrityError: A row cannot be committed under the replace strategy
        """
        if isinstance(source, (str, Path)):
            with open(source, 'rb') as stream:
                return self._parse(stream)
        return self._parse(source)

    def _parse(self, stream: IO) -> ImportResult:
        handler = self.create_import_handler()
        parser = etree.XMLParser(target=handler, resolve_entities="internal", no_network=True, huge_tree=True)
        self.logger.info(f"Importing with strategy {self.replace_strategy.value}")
        try:
            chunk = stream.read(self.chunk_size)
            while chunk:
                parser.feed(chunk)
                chunk = stream.read(self.chunk_size)
            return parser.close()
        except etree.XMLSyntaxError as e:
            handler.abort()
            self.logger.error(f"XML syntax error during import: {e}")
            raise XMLStructureError(f"XML syntax error: {e}", table_name=handler.current_table)


def export_db_as_xml_to_stream(db: DatabaseInterface, output: Union[str, BinaryIO],
                               database_tag: str = ConverterDefaults.DATABASE_TAG) -> ExportResult:
    """Write a complete database as XML to a file name or binary stream."""
    return DatabaseXmlConverter(db, database_tag).export_to(output)


def import_xml_stream_to_db(db: DatabaseInterface, source: Union[str, IO],
                            replace: ReplaceStrategy = ReplaceStrategy.REPLACE_EXISTING,
                            database_tag: str = ConverterDefaults.DATABASE_TAG) -> ImportResult:
    """Read a complete database from an XML stream written by ``export_db_as_xml_to_stream``."""
    return DatabaseXmlConverter(db, database_tag, replace_strategy=replace).import_from(source)
