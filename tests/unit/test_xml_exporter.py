"""
Unit Tests for XMLExporter

Uses an instrumented row source to check that rows are streamed one at a time
and that the per-table cursor is released on every exit path.
"""

import io

from contextlib import contextmanager

import pytest

from lxml import etree

from dbxml.catalog import TableCatalog
from dbxml.export.xml_exporter import XMLExporter
from dbxml.interfaces import DatabaseInterface
from dbxml.models import InsertResult
from dbxml.parsing.row_codec import RowCodec


class CountingCodec(RowCodec):
    """Row codec counting how many rows have been turned into elements."""

    def __init__(self):
        super().__init__()
        self.encoded = 0

    def to_element(self, row):
        self.encoded += 1
        return super().to_element(row)


class InstrumentedDatabase(DatabaseInterface):
    """Read-only database producing generated rows and recording how far ahead of the writer it gets."""

    def __init__(self, tables, codec, fail_after=None):
        self.tables = tables
        self.codec = codec
        self.fail_after = fail_after
        self.produced = 0
        self.max_outstanding = 0
        self.open_cursors = 0
        self.closed_cursors = 0

    def list_tables(self):
        return list(self.tables)

    @contextmanager
    def iter_rows(self, table_name):
        self.open_cursors += 1
        try:
            yield self._rows(self.tables[table_name])
        finally:
            self.closed_cursors += 1

    def _rows(self, count):
        for i in range(count):
            if self.fail_after is not None and i == self.fail_after:
                raise RuntimeError("cursor lost")
            self.produced += 1
            self.max_outstanding = max(self.max_outstanding, self.produced - self.codec.encoded)
            yield {"_id": i, "value": f"v{i}"}

    def insert(self, table_name, row):
        return InsertResult.failed(RuntimeError("read-only"))

    def delete(self, table_name, where=None, params=()):
        raise RuntimeError("read-only")


def export(db, codec, **kwargs):
    output = io.BytesIO()
    exporter = XMLExporter(db, TableCatalog(db), row_codec=codec, **kwargs)
    result = exporter.export(output)
    return result, output.getvalue()


class TestDocumentShape:

    def test_tables_and_rows_in_order(self):
        codec = CountingCodec()
        db = InstrumentedDatabase({"first": 2, "empty": 0, "second": 1}, codec)
        result, xml = export(db, codec, database_tag="backup")

        root = etree.fromstring(xml)
        assert root.tag == "backup"
        assert [t.get("table_name") for t in root] == ["first", "empty", "second"]
        assert [r.get("_id") for r in root[0]] == ["0", "1"]
        assert len(root[1]) == 0
        assert result.rows_per_table == {"first": 2, "empty": 0, "second": 1}

    def test_declaration_and_encoding(self):
        codec = CountingCodec()
        _, xml = export(InstrumentedDatabase({"t": 1}, codec), codec)
        declaration = xml.split(b"?>")[0]
        assert declaration.startswith(b"<?xml version=")
        assert b"utf-8" in declaration.lower()

    def test_pretty_print_puts_rows_on_their_own_lines(self):
        codec = CountingCodec()
        _, xml = export(InstrumentedDatabase({"t": 2}, codec), codec, pretty_print=True)
        lines = [line.strip() for line in xml.decode("utf-8").splitlines()]
        assert '<table table_name="t">' in lines
        assert len([line for line in lines if line.startswith("<row ")]) == 2
        assert len(etree.fromstring(xml)[0]) == 2


class TestStreaming:

    def test_at_most_one_row_in_flight(self):
        codec = CountingCodec()
        db = InstrumentedDatabase({"big": 5000}, codec)
        result, _ = export(db, codec)
        assert result.rows_exported == 5000
        assert db.max_outstanding <= 1

    def test_cursor_released_after_each_table(self):
        codec = CountingCodec()
        db = InstrumentedDatabase({"a": 3, "b": 3}, codec)
        export(db, codec)
        assert db.open_cursors == db.closed_cursors == 2

    def test_cursor_released_when_export_fails(self):
        codec = CountingCodec()
        db = InstrumentedDatabase({"a": 10}, codec, fail_after=4)
        with pytest.raises(RuntimeError, match="cursor lost"):
            export(db, codec)
        assert db.closed_cursors == 1

    def test_sink_failure_propagates(self):
        class BrokenSink(io.RawIOBase):
            def writable(self):
                return True

            def write(self, data):
                raise OSError("disk full")

        codec = CountingCodec()
        db = InstrumentedDatabase({"a": 10000}, codec)
        exporter = XMLExporter(db, TableCatalog(db), row_codec=codec)
        with pytest.raises((OSError, etree.LxmlError)):
            exporter.export(BrokenSink())
        assert db.open_cursors == db.closed_cursors
