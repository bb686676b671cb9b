"""Unit Tests for TableCatalog."""

from unittest.mock import Mock

from dbxml.catalog import TableCatalog
from dbxml.interfaces import DatabaseInterface


def make_db(tables):
    db = Mock(spec=DatabaseInterface)
    db.list_tables.return_value = list(tables)
    return db


class TestExplicitTables:

    def test_add_preserves_order_and_ignores_duplicates(self):
        catalog = TableCatalog(make_db([]))
        catalog.add_table("b")
        catalog.add_table("a")
        catalog.add_table("b")
        assert catalog.resolved_names() == ["b", "a"]

    def test_explicit_tables_skip_discovery(self):
        db = make_db(["x", "y"])
        catalog = TableCatalog(db, ["y"])
        assert list(catalog) == ["y"]
        db.list_tables.assert_not_called()

    def test_remove_is_a_noop_for_unknown_names(self):
        catalog = TableCatalog(make_db([]), ["a", "b"])
        catalog.remove_table("zzz")
        catalog.remove_table("a")
        assert catalog.resolved_names() == ["b"]


class TestDiscovery:

    def test_discovers_every_user_table(self):
        catalog = TableCatalog(make_db(["notes", "tags", "people"]))
        assert catalog.resolved_names() == ["notes", "tags", "people"]

    def test_reserved_tables_are_excluded_case_insensitively(self):
        catalog = TableCatalog(make_db(["android_metadata", "notes", "SQLITE_SEQUENCE", "tags"]))
        assert catalog.resolved_names() == ["notes", "tags"]

    def test_discovery_is_cached(self):
        db = make_db(["notes"])
        catalog = TableCatalog(db)
        catalog.resolved_names()
        assert "notes" in catalog
        assert len(catalog) == 1
        db.list_tables.assert_called_once()

    def test_remove_applies_to_discovered_tables(self):
        catalog = TableCatalog(make_db(["notes", "tags"]))
        catalog.remove_table("notes")
        assert list(catalog) == ["tags"]

    def test_empty_database_yields_empty_catalog(self):
        catalog = TableCatalog(make_db(["sqlite_sequence"]))
        assert list(catalog) == []

    def test_removing_every_discovered_table_leaves_catalog_empty(self):
        db = make_db(["notes", "tags"])
        catalog = TableCatalog(db)
        catalog.remove_table("notes")
        catalog.remove_table("tags")
        assert list(catalog) == []
        assert "notes" not in catalog
        db.list_tables.assert_called_once()

    def test_empty_database_is_listed_once(self):
        db = make_db([])
        catalog = TableCatalog(db)
        assert "notes" not in catalog
        assert "tags" not in catalog
        assert len(catalog) == 0
        db.list_tables.assert_called_once()
        assert catalog.resolved
