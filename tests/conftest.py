"""Shared fixtures: small SQLite databases and XML documents built in memory."""

import io
import sqlite3

import pytest

from dbxml.database.sqlite_database import SQLiteDatabase


SCHEMA = """
CREATE TABLE notes (_id INTEGER PRIMARY KEY, title TEXT NOT NULL, body TEXT, score REAL);
CREATE TABLE tags (_id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT UNIQUE);
CREATE TABLE android_metadata (locale TEXT);
"""

NOTES = [
    (1, "groceries", "milk, eggs", 1.5),
    (2, "ideas", None, 3.0),
    (3, "quote", 'He said "hi" & <left>', None),
]

TAGS = [
    (1, "home"),
    (2, "work"),
]


def create_schema(conn: sqlite3.Connection) -> sqlite3.Connection:
    conn.executescript(SCHEMA)
    conn.execute("INSERT INTO android_metadata (locale) VALUES ('en_US')")
    conn.commit()
    return conn


def _table_rows(conn: sqlite3.Connection, table: str):
    return conn.execute(f'SELECT * FROM "{table}" ORDER BY _id').fetchall()


@pytest.fixture
def empty_conn():
    conn = create_schema(sqlite3.connect(":memory:"))
    yield conn
    conn.close()


@pytest.fixture
def source_conn():
    conn = create_schema(sqlite3.connect(":memory:"))
    conn.executemany("INSERT INTO notes VALUES (?, ?, ?, ?)", NOTES)
    conn.executemany("INSERT INTO tags VALUES (?, ?)", TAGS)
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture
def empty_db(empty_conn):
    return SQLiteDatabase(empty_conn)


@pytest.fixture
def source_db(source_conn):
    return SQLiteDatabase(source_conn)


@pytest.fixture
def table_rows():
    """Function returning all rows of a table as tuples, ordered by _id."""
    return _table_rows


@pytest.fixture
def xml_source():
    """Function wrapping XML text in a binary stream."""
    return lambda text: io.BytesIO(text.encode("utf-8"))
