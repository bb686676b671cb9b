"""Integration Tests for the dbxml command-line interface."""

import sqlite3

import pytest

from lxml import etree

from dbxml.cli import main
from dbxml.config.config_manager import reset_config_manager


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for variable in ("DBXML_DATABASE_TAG", "DBXML_REPLACE_STRATEGY", "DBXML_TABLES", "DBXML_ID_COLUMN",
                     "DBXML_CHUNK_SIZE", "DBXML_ENCODING", "DBXML_LOG_LEVEL", "DBXML_CONNECTION_STRING"):
        monkeypatch.delenv(variable, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def db_file(tmp_path):
    path = tmp_path / "app.db"
    conn = sqlite3.connect(str(path))
    conn.executescript("""
        CREATE TABLE notes (_id INTEGER PRIMARY KEY, title TEXT);
        INSERT INTO notes VALUES (1, 'first'), (2, 'second');
    """)
    conn.close()
    return path


@pytest.fixture
def empty_db_file(tmp_path):
    path = tmp_path / "restore.db"
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE notes (_id INTEGER PRIMARY KEY, title TEXT)")
    conn.close()
    return path


def count_rows(path):
    conn = sqlite3.connect(str(path))
    try:
        return conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]
    finally:
        conn.close()


class TestCli:

    def test_export_then_import(self, db_file, empty_db_file, tmp_path):
        dump = tmp_path / "dump.xml"

        assert main(["export", "--sqlite", str(db_file), "--output", str(dump), "--pretty"]) == 0
        root = etree.parse(str(dump)).getroot()
        assert [r.get("title") for r in root[0]] == ["first", "second"]

        assert main(["import", "--sqlite", str(empty_db_file), "--input", str(dump)]) == 0
        assert count_rows(empty_db_file) == 2

    def test_import_with_strategy_and_settings_file(self, db_file, tmp_path):
        dump = tmp_path / "dump.xml"
        dump.write_text('<backup><table table_name="notes"><row _id="9" title="only"/></table></backup>')
        settings = tmp_path / "dbxml.yaml"
        settings.write_text("database_tag: backup\n")

        code = main(["--config", str(settings), "import", "--sqlite", str(db_file),
                     "--input", str(dump), "--strategy", "replace_all"])

        assert code == 0
        assert count_rows(db_file) == 1

    def test_structure_error_exit_code(self, db_file, tmp_path):
        dump = tmp_path / "bad.xml"
        dump.write_text("<database><table><row _id='1'/></table></database>")
        assert main(["import", "--sqlite", str(db_file), "--input", str(dump)]) == 1

    def test_missing_input_file(self, db_file, tmp_path):
        assert main(["import", "--sqlite", str(db_file), "--input", str(tmp_path / "nope.xml")]) == 1

    def test_no_database_given(self, tmp_path):
        assert main(["export", "--output", str(tmp_path / "out.xml")]) == 1

    def test_usage_error(self):
        assert main(["import", "--strategy", "merge"]) == 2
