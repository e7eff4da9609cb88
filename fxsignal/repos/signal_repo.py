"""Signal history repository — SQLite operations for the signals table."""

import json

from fxsignal.models.snapshot import SignalSnapshot
from fxsignal.repos.db import get_connection


class SignalRepo:
    """Data access layer for published signals.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def insert_signal(self, snapshot: SignalSnapshot) -> int:
        """Record a published signal and return its ``id``."""
        details = {
            name: sig.to_dict() for name, sig in snapshot.signal.details.items()
        }
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute(
                """
                INSERT INTO signals
                    (symbol, mode, direction, strength, rate, details, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    snapshot.symbol,
                    snapshot.signal.mode,
                    snapshot.signal.direction,
                    snapshot.signal.strength,
                    snapshot.rate,
                    json.dumps(details),
                    snapshot.timestamp.isoformat(),
                ),
            )
            conn.commit()
            return cur.lastrowid
        finally:
            conn.close()

    def list_recent(self, limit: int = 50, symbol: str | None = None) -> list[dict]:
        """Return up to *limit* signals, newest first."""
        conn = get_connection(self._db_path)
        try:
            if symbol:
                rows = conn.execute(
                    "SELECT * FROM signals WHERE symbol = ? ORDER BY id DESC LIMIT ?",
                    (symbol, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM signals ORDER BY id DESC LIMIT ?", (limit,)
                ).fetchall()
            return [_row_to_dict(r) for r in rows]
        finally:
            conn.close()

    def get_latest(self, symbol: str | None = None) -> dict | None:
        """Return the most recent signal, or ``None``."""
        rows = self.list_recent(limit=1, symbol=symbol)
        return rows[0] if rows else None


def _row_to_dict(row) -> dict:
    data = dict(row)
    data["details"] = json.loads(data["details"])
    return data
