"""
Database adapters.

The ODBC adapter lives in ``dbxml.database.odbc_database`` and is imported on
demand, since pyodbc needs the system ODBC driver manager to load.
"""

from .sqlite_database import SQLiteDatabase

__all__ = ["SQLiteDatabase"]
