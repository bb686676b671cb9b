"""
SQLite adapter implementing the converter's database interface.

Each insert and delete is committed on its own; the converter never wraps an
import in a transaction.
"""

import logging
import sqlite3

from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Sequence, Union

from ..interfaces import DatabaseInterface, quote_identifier
from ..models import InsertResult
from ..exceptions import DatabaseConnectionError
from ..parsing.row_codec import decode_binary_columns


class SQLiteDatabase(DatabaseInterface):
    """
    Database capability backed by a sqlite3 connection.

    The adapter can open its own connection from a path (and then owns it),
    or wrap a connection supplied by the caller (which stays the caller's to close).
    """

    def __init__(self, database: Union[str, sqlite3.Connection]):
        self.logger = logging.getLogger(__name__)
        self._binary_columns_cache: Dict[str, FrozenSet[str]] = {}
        if isinstance(database, sqlite3.Connection):
            self.db_path = None
            self.conn: Optional[sqlite3.Connection] = database
            self._owns_connection = False
        else:
            self.db_path = str(database)
            self.conn = None
            self._owns_connection = True

    def connect(self):
        """Establish database connection."""
        try:
            self.conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"Failed to open SQLite database {self.db_path}: {e}")
        self.logger.debug(f"Opened SQLite database {self.db_path}")

    def close(self):
        """Close database connection if this adapter opened it."""
        if self.conn and self._owns_connection:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        if not self.conn:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            self.connect()
        return self.conn

    def list_tables(self) -> List[str]:
        cursor = self._connection().execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        try:
            return [row[0] for row in cursor.fetchall()]
        finally:
            cursor.close()

    @contextmanager
    def iter_rows(self, table_name: str) -> Iterator[Iterator[Dict[str, Any]]]:
        cursor = self._connection().execute(f"SELECT * FROM {quote_identifier(table_name)}")
        try:
            columns = [description[0] for description in cursor.description]
            yield (dict(zip(columns, row)) for row in cursor)
        finally:
            cursor.close()

    def binary_columns(self, table_name: str) -> FrozenSet[str]:
        """Columns of a table whose declared type is a BLOB type (cached once the table exists)."""
        if table_name in self._binary_columns_cache:
            return self._binary_columns_cache[table_name]
        cursor = self._connection().execute(f"PRAGMA table_info({quote_identifier(table_name)})")
        try:
            columns = cursor.fetchall()
        finally:
            cursor.close()
        binary = frozenset(column[1] for column in columns if "BLOB" in (column[2] or "").upper())
        if columns:
            self._binary_columns_cache[table_name] = binary
        return binary

    def insert(self, table_name: str, row: Dict[str, Any]) -> InsertResult:
        conn = self._connection()
        if row:
            columns = ", ".join(quote_identifier(c) for c in row)
            placeholders = ", ".join("?" for _ in row)
            sql = f"INSERT INTO {quote_identifier(table_name)} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {quote_identifier(table_name)} DEFAULT VALUES"
        try:
            values = decode_binary_columns(row, self.binary_columns(table_name))
            cursor = conn.execute(sql, tuple(values.values()))
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            return InsertResult.conflict(e)
        except (sqlite3.DatabaseError, ValueError) as e:
            conn.rollback()
            return InsertResult.failed(e)
        return InsertResult.ok(cursor.lastrowid)

    def delete(self, table_name: str, where: Optional[str] = None,
               params: Sequence[Any] = ()) -> int:
        sql = f"DELETE FROM {quote_identifier(table_name)}"
        if where:
            sql += f" WHERE {where}"
        conn = self._connection()
        cursor = conn.execute(sql, tuple(params))
        conn.commit()
        return cursor.rowcount
