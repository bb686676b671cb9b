"""
ODBC adapter implementing the converter's database interface with pyodbc.

The connection runs in autocommit mode so each row insert or delete is
committed as soon as it executes.
"""

import logging
import pyodbc

from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Sequence

from ..interfaces import DatabaseInterface, quote_identifier
from ..models import InsertResult
from ..exceptions import DatabaseConnectionError
from ..parsing.row_codec import decode_binary_columns


BINARY_SQL_TYPES = frozenset({pyodbc.SQL_BINARY, pyodbc.SQL_VARBINARY, pyodbc.SQL_LONGVARBINARY})


class OdbcDatabase(DatabaseInterface):
    """
    Database capability backed by a pyodbc connection.

    Tables are discovered through the ODBC catalog function rather than a
    vendor-specific system view, so any driver that reports TABLE objects works.
    """

    def __init__(self, connection_string: str, timeout: int = 30):
        """
        Args:
            connection_string: ODBC connection string
            timeout: Login timeout in seconds
        """
        self.logger = logging.getLogger(__name__)
        self.connection_string = connection_string
        self.timeout = timeout
        self.conn = None
        self._binary_columns_cache: Dict[str, FrozenSet[str]] = {}

    def connect(self):
        """Open the ODBC connection."""
        try:
            self.conn = pyodbc.connect(self.connection_string, autocommit=True, timeout=self.timeout)
        except pyodbc.Error as e:
            self.logger.error(f"Database connection failed: {e}")
            raise DatabaseConnectionError(f"Failed to connect to database: {e}")
        self.conn.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
        self.conn.setdecoding(pyodbc.SQL_WCHAR, encoding='utf-8')
        self.conn.setencoding(encoding='utf-8')

    def close(self):
        if self.conn:
            try:
                self.conn.close()
            except pyodbc.Error:
                pass  # Ignore errors during cleanup
            self.conn = None

    def __enter__(self):
        if not self.conn:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _connection(self):
        if not self.conn:
            self.connect()
        return self.conn

    def list_tables(self) -> List[str]:
        cursor = self._connection().cursor()
        try:
            return [row.table_name for row in cursor.tables(tableType='TABLE').fetchall()]
        finally:
            cursor.close()

    @contextmanager
    def iter_rows(self, table_name: str) -> Iterator[Iterator[Dict[str, Any]]]:
        cursor = self._connection().cursor()
        try:
            cursor.execute(f"SELECT * FROM {quote_identifier(table_name)}")
            columns = [description[0] for description in cursor.description]
            yield self._fetch_rows(cursor, columns)
        finally:
            cursor.close()

    @staticmethod
    def _fetch_rows(cursor, columns: List[str]) -> Iterator[Dict[str, Any]]:
        row = cursor.fetchone()
        while row is not None:
            yield dict(zip(columns, row))
            row = cursor.fetchone()

    def binary_columns(self, table_name: str) -> FrozenSet[str]:
        """Columns the driver reports with a binary SQL type (cached once the table exists)."""
        if table_name in self._binary_columns_cache:
            return self._binary_columns_cache[table_name]
        cursor = self._connection().cursor()
        try:
            columns = cursor.columns(table=table_name).fetchall()
        finally:
            cursor.close()
        binary = frozenset(column.column_name for column in columns if column.data_type in BINARY_SQL_TYPES)
        if columns:
            self._binary_columns_cache[table_name] = binary
        return binary

    def insert(self, table_name: str, row: Dict[str, Any]) -> InsertResult:
        if row:
            columns = ", ".join(quote_identifier(c) for c in row)
            placeholders = ", ".join("?" for _ in row)
            sql = f"INSERT INTO {quote_identifier(table_name)} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {quote_identifier(table_name)} DEFAULT VALUES"
        try:
            values = decode_binary_columns(row, self.binary_columns(table_name)) if row else {}
        except (pyodbc.Error, ValueError) as e:
            return InsertResult.failed(e)
        cursor = self._connection().cursor()
        try:
            if values:
                cursor.execute(sql, list(values.values()))
            else:
                cursor.execute(sql)
        except pyodbc.IntegrityError as e:
            return InsertResult.conflict(e)
        except pyodbc.Error as e:
            return InsertResult.failed(e)
        finally:
            cursor.close()
        return InsertResult.ok()

    def delete(self, table_name: str, where: Optional[str] = None,
               params: Sequence[Any] = ()) -> int:
        sql = f"DELETE FROM {quote_identifier(table_name)}"
        if where:
            sql += f" WHERE {where}"
        cursor = self._connection().cursor()
        try:
            cursor.execute(sql, list(params))
            return cursor.rowcount
        finally:
            cursor.close()
