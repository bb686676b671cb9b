"""
Streaming import handler: XML events in, database rows out.

The handler is an lxml parser *target*. lxml calls ``start``, ``end``,
``data`` and ``close`` in document order while the document is fed in; the
handler never sees more than one row at a time and never builds a tree.

Document shape handled here::

    <database>
      <table table_name="T">
        <row col1="v1" col2="v2"/>
      </table>
    </database>
"""

import logging

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..catalog import TableCatalog
from ..constants import ROW_ELEMENT, TABLE_ELEMENT, TABLE_NAME_ATTRIBUTE
from ..exceptions import DatabaseIntegrityError, XMLStructureError
from ..interfaces import DatabaseInterface, quote_identifier
from ..models import ImportResult, InsertOutcome, InsertResult, ReplaceStrategy
from .row_codec import RowCodec


class ImportState(Enum):
    """Which kind of element consumes the next event."""
    IDLE = "idle"            # inside the root element, no table open
    IN_TABLE = "in_table"    # inside a table element, no row open
    IN_ROW = "in_row"        # inside a row element
    SKIPPING = "skipping"    # inside an element the format does not define


class ImportHandler:
    """
    Single-pass state machine that commits rows from an XML document to a database.

    Every open element pushes a state on ``_states`` and every end tag pops it,
    so the top of the stack always tells which kind of element is open. The row
    being read is held in ``_pending_row`` and is committed (or discarded) at the
    next element boundary; the field is cleared after every attempt, so at most
    one row is buffered at any time.

    How a row that conflicts with an existing row is handled depends on the
    replace strategy:

    - REPLACE_ALL: the table was emptied when its element started, so a conflict
      is fatal and raises DatabaseIntegrityError.
    - REPLACE_EXISTING: the existing row with the same id column value is deleted
      and the insert is retried; a second failure raises DatabaseIntegrityError.
    - REPLACE_NONE: the existing row is kept and the incoming one is dropped.

    Rows under a table element whose name is not in the catalog are read and
    discarded without touching the database.
    """

    def __init__(self, db: DatabaseInterface, catalog: TableCatalog,
                 replace_strategy: ReplaceStrategy = ReplaceStrategy.REPLACE_EXISTING,
                 database_tag: str = "database", id_column: str = "_id",
                 row_codec: Optional[RowCodec] = None):
        """
        Args:
            db: Database the rows are written to (borrowed, not closed)
            catalog: Tables whose rows are persisted
            replace_strategy: Conflict handling policy
            database_tag: Expected root element tag
            id_column: Column identifying the existing row to replace under REPLACE_EXISTING
            row_codec: Codec reading row elements; a default RowCodec when None
        """
        self.db = db
        self.catalog = catalog
        self.replace_strategy = replace_strategy
        self.database_tag = database_tag
        self.id_column = id_column
        self.row_codec = row_codec or RowCodec()
        self.logger = logging.getLogger(__name__)

        self.result = ImportResult()
        self._states: List[ImportState] = []
        self._root_seen = False
        self._aborted = False
        self._current_table: Optional[str] = None
        self._pending_row: Optional[Dict[str, Any]] = None

    @property
    def state(self) -> Optional[ImportState]:
        """State of the innermost open element, None outside the root element."""
        return self._states[-1] if self._states else None

    @property
    def current_table(self) -> Optional[str]:
        return self._current_table

    @property
    def pending_row(self) -> Optional[Dict[str, Any]]:
        return self._pending_row

    # lxml parser target interface

    def start(self, tag: str, attrib: Mapping[str, str], nsmap=None) -> None:
        try:
            self._handle_start(tag, attrib)
        except Exception:
            self.abort()
            raise

    def end(self, tag: str) -> None:
        try:
            self._save_pending_row()
            if not self._states:
                raise XMLStructureError(f"Unmatched end tag </{tag}>", element=tag)
            if self._states.pop() is ImportState.IN_TABLE:
                self._current_table = None
        except Exception:
            self.abort()
            raise

    def data(self, data: str) -> None:
        # Text between elements is layout only
        pass

    def close(self) -> ImportResult:
        """
        End of document: flush a row still pending and report the counters.

        lxml also calls this when parsing fails. Nothing is written after a
        failure, nor when the document ends with elements still open: a
        truncated document's pending row is discarded.
        """
        if self._aborted:
            self.logger.info(f"Import aborted: {self.result.summary()}")
            return self.result
        if self._states:
            if self._pending_row is not None:
                self.result.rows_discarded += 1
            self._pending_row = None
            self.logger.warning(f"Document ended with {len(self._states)} element(s) still open; nothing more written")
            return self.result
        self._save_pending_row()
        self.logger.info(f"Import finished: {self.result.summary()}")
        return self.result

    def abort(self) -> None:
        """Stop writing: drop the pending row and make ``close()`` a no-op."""
        self._aborted = True
        self._pending_row = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    # Transitions

    def _handle_start(self, tag: str, attrib: Mapping[str, str]) -> None:
        state = self.state
        if state is ImportState.IN_ROW:
            raise XMLStructureError(f"Unexpected <{tag}> element inside a <{ROW_ELEMENT}> element",
                                    element=tag, table_name=self._current_table)
        self._save_pending_row()

        if state is None:
            self._start_root(tag)
        elif state is ImportState.SKIPPING:
            self._states.append(ImportState.SKIPPING)
        elif tag == TABLE_ELEMENT:
            if state is not ImportState.IDLE:
                raise XMLStructureError(f"<{TABLE_ELEMENT}> element found inside a <{TABLE_ELEMENT}> element",
                                        element=tag, table_name=self._current_table)
            self._start_table(attrib)
            self._states.append(ImportState.IN_TABLE)
        elif tag == ROW_ELEMENT:
            if state is not ImportState.IN_TABLE:
                raise XMLStructureError(f"<{ROW_ELEMENT}> element found outside a <{TABLE_ELEMENT}> element",
                                        element=tag, table_name=self._current_table)
            self._pending_row = self.row_codec.from_attributes(attrib)
            self._states.append(ImportState.IN_ROW)
        else:
            self.logger.warning(f"Skipping unrecognized <{tag}> element")
            self._states.append(ImportState.SKIPPING)

    def _start_root(self, tag: str) -> None:
        if self._root_seen:
            raise XMLStructureError(f"Unexpected <{tag}> element after the root element", element=tag)
        if tag != self.database_tag:
            raise XMLStructureError(
                f"Root element is <{tag}>, expected <{self.database_tag}>", element=tag)
        self._root_seen = True
        self._states.append(ImportState.IDLE)

    def _start_table(self, attrib: Mapping[str, str]) -> None:
        table_name = attrib.get(TABLE_NAME_ATTRIBUTE)
        if table_name is None:
            raise XMLStructureError(f"{TABLE_NAME_ATTRIBUTE} not found in {TABLE_ELEMENT} element.",
                                    element=TABLE_ELEMENT)

        if table_name in self.catalog:
            self._current_table = table_name
            self.result.tables_processed.append(table_name)
            if self.replace_strategy is ReplaceStrategy.REPLACE_ALL:
                deleted = self.db.delete(table_name)
                self.logger.info(f"Emptied table {table_name} before import ({deleted} rows deleted)")
        else:
            self._current_table = None
            self.result.tables_ignored.append(table_name)
            self.logger.warning(f"Table {table_name} is not in the catalog; its rows will be ignored")

    def _save_pending_row(self) -> None:
        if self._pending_row is None:
            return
        row = self._pending_row
        try:
            if self._current_table is None:
                self.result.rows_discarded += 1
            else:
                self._commit_row(self._current_table, row)
        finally:
            self._pending_row = None

    def _commit_row(self, table_name: str, row: Dict[str, Any]) -> None:
        insert_result = self.db.insert(table_name, row)
        outcome = insert_result.outcome

        if outcome is InsertOutcome.INSERTED:
            self.result.rows_inserted += 1
        elif outcome is InsertOutcome.FAILED:
            self._fail(f"Failed to insert row in {table_name}: {insert_result.error}", table_name, row)
        elif self.replace_strategy is ReplaceStrategy.REPLACE_ALL:
            self._fail(f"Failed to insert row in {table_name} after emptying: {insert_result.error}",
                       table_name, row)
        elif self.replace_strategy is ReplaceStrategy.REPLACE_EXISTING:
            self._replace_existing(table_name, row, insert_result)
        else:
            self.result.rows_skipped += 1
            self.logger.debug(f"Kept existing row in {table_name}, dropped incoming row: {insert_result.error}")

    def _replace_existing(self, table_name: str, row: Dict[str, Any], conflict: InsertResult) -> None:
        row_id = row.get(self.id_column)
        if row_id is None:
            self._fail(f"Row in {table_name} conflicts with an existing row ({conflict.error}) "
                       f"and has no {self.id_column} column to replace it by", table_name, row)

        self.logger.debug(f"Replacing row {self.id_column}={row_id} in {table_name}")
        self.db.delete(table_name, f"{quote_identifier(self.id_column)} = ?", (row_id,))
        retry = self.db.insert(table_name, row)
        if not retry.inserted:
            self._fail(f"Failed to insert row in {table_name} after removing existing row "
                       f"{self.id_column}={row_id}: {retry.error}", table_name, row)
        self.result.rows_replaced += 1

    def _fail(self, message: str, table_name: str, row: Dict[str, Any]) -> None:
        self.logger.error(message)
        raise DatabaseIntegrityError(message, table_name=table_name, row=row)
