"""
Streaming exporter: database rows in, XML document out.

Uses lxml's incremental ``etree.xmlfile`` writer, so each row element is
serialized and released before the next row is fetched from the cursor.
"""

import logging

from typing import Any, BinaryIO, Union

from lxml import etree

from ..catalog import TableCatalog
from ..constants import TABLE_ELEMENT, TABLE_NAME_ATTRIBUTE
from ..interfaces import DatabaseInterface
from ..models import ExportResult
from ..parsing.row_codec import RowCodec


class XMLExporter:
    """
    Writes every catalog table of a database as one XML document.

    Output layout: one root element named after the database tag, one table
    element per catalog table (in catalog order) carrying a ``table_name``
    attribute, one row element per row in cursor order.
    """

    def __init__(self, db: DatabaseInterface, catalog: TableCatalog, database_tag: str = "database",
                 row_codec: RowCodec = None, encoding: str = "utf-8", pretty_print: bool = False):
        self.db = db
        self.catalog = catalog
        self.database_tag = database_tag
        self.row_codec = row_codec or RowCodec()
        self.encoding = encoding
        self.pretty_print = pretty_print
        self.logger = logging.getLogger(__name__)

    def export(self, output: Union[str, BinaryIO]) -> ExportResult:
        """
        Export the catalog tables to a file name or binary file-like object.

        Errors from the database or the output abort the export and propagate;
        whatever was already written is left as is.

        Args:
            output: Path or binary stream receiving the document

        Returns:
            ExportResult with the row count of each exported table
        """
        with etree.xmlfile(output, encoding=self.encoding) as xf:
            xf.write_declaration()
            result = self.write_to(xf)
            xf.flush()
        self.logger.info(f"Exported {result.rows_exported} rows from {result.tables_exported} tables")
        return result

    def write_to(self, xf: Any) -> ExportResult:
        """Write the root element and its content to an open incremental writer."""
        result = ExportResult()
        with xf.element(self.database_tag):
            for table_name in self.catalog:
                self._newline(xf, 1)
                with xf.element(TABLE_ELEMENT, {TABLE_NAME_ATTRIBUTE: table_name}):
                    result.rows_per_table[table_name] = self._write_table(xf, table_name)
                    self._newline(xf, 1)
            self._newline(xf, 0)
        return result

    def _write_table(self, xf: Any, table_name: str) -> int:
        count = 0
        with self.db.iter_rows(table_name) as rows:
            for row in rows:
                self._newline(xf, 2)
                xf.write(self.row_codec.to_element(row))
                count += 1
        self.logger.debug(f"Wrote {count} rows for table {table_name}")
        return count

    def _newline(self, xf: Any, depth: int) -> None:
        if self.pretty_print:
            xf.write("\n" + "  " * depth)
