"""Database initialization and connection management.

Creates the schema on first boot, provides connection factory.
"""

import pathlib
import sqlite3


_SCHEMA = """
CREATE TABLE IF NOT EXISTS signals (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    symbol      TEXT    NOT NULL,
    mode        TEXT    NOT NULL,
    direction   INTEGER NOT NULL,
    strength    INTEGER NOT NULL,
    rate        REAL,
    details     TEXT    NOT NULL,
    created_at  TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_signals_symbol_created
    ON signals (symbol, created_at);
"""


def init_db(db_path: str) -> None:
    """Initialize the database, creating tables that don't exist yet.

    Args:
        db_path: Path to the SQLite database file.  Parent directories are
                 created when missing.
    """
    if db_path != ":memory:":
        pathlib.Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(_SCHEMA)
    finally:
        conn.close()


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a new SQLite connection with row-factory enabled.

    Callers are responsible for closing the connection.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn
