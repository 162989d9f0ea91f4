"""SQLite database helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from tablebracket.settings import get_app_data_dir

from .schema import initialize_schema

DB_FILENAME = "tablebracket.db"


def get_default_database_path() -> Path:
    """Return the default database path inside the per-user data directory."""
    return get_app_data_dir() / DB_FILENAME


def _configure_connection(connection: sqlite3.Connection) -> None:
    connection.row_factory = sqlite3.Row


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Create a SQLite connection and ensure schema exists."""
    if db_path is None:
        db_path = get_default_database_path()

    connection = sqlite3.connect(str(db_path))
    _configure_connection(connection)
    initialize_schema(connection)
    return connection
