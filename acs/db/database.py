"""SQLite database helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from acs.settings import get_database_path

from .schema import initialize_schema


def _configure_connection(connection: sqlite3.Connection) -> None:
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Create a SQLite connection and ensure schema exists.

    Without an explicit path the location comes from settings
    (``ACS_DB_PATH`` or the per-user data directory).
    """
    if db_path is None:
        db_path = get_database_path()

    connection = sqlite3.connect(str(db_path), check_same_thread=False)
    _configure_connection(connection)
    initialize_schema(connection)
    return connection

