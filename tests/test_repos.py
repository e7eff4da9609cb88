"""Tests for the SQLite signal history repository."""

from datetime import datetime, timedelta, timezone

import pytest

from fxsignal.models.snapshot import SignalSnapshot
from fxsignal.repos.db import get_connection, init_db
from fxsignal.repos.signal_repo import SignalRepo
from fxsignal.strategy.models import AggregateSignal, Signal

_T0 = datetime(2025, 3, 14, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(tmp_path):
    db_path = str(tmp_path / "data" / "fxsignal.db")
    init_db(db_path)
    return SignalRepo(db_path)


def _snapshot(minutes: int = 0, symbol: str = "GBPUSD=X", direction: int = 1) -> SignalSnapshot:
    signal = AggregateSignal(
        direction=direction,
        strength=75,
        details={"rsi": Signal(direction, 28.5, "RSI")},
        mode="technical",
    )
    return SignalSnapshot(
        timestamp=_T0 + timedelta(minutes=minutes),
        symbol=symbol,
        rate=1.2634,
        signal=signal,
        bars=70,
    )


def test_init_db_creates_parent_and_table(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "x.db")
    init_db(db_path)
    init_db(db_path)  # idempotent
    conn = get_connection(db_path)
    try:
        tables = {r["name"] for r in conn.execute("SELECT name FROM sqlite_master")}
    finally:
        conn.close()
    assert "signals" in tables


def test_insert_and_read_back(repo):
    row_id = repo.insert_signal(_snapshot())
    latest = repo.get_latest()
    assert latest["id"] == row_id
    assert latest["symbol"] == "GBPUSD=X"
    assert latest["mode"] == "technical"
    assert latest["direction"] == 1
    assert latest["strength"] == 75
    assert latest["rate"] == pytest.approx(1.2634)
    assert latest["created_at"] == "2025-03-14T09:00:00+00:00"
    assert latest["details"]["rsi"] == {"signal": 1, "value": 28.5, "indicator": "RSI"}


def test_list_recent_newest_first_with_limit(repo):
    for i in range(5):
        repo.insert_signal(_snapshot(minutes=i))
    rows = repo.list_recent(limit=3)
    assert [r["created_at"][11:16] for r in rows] == ["09:04", "09:03", "09:02"]


def test_filter_by_symbol(repo):
    repo.insert_signal(_snapshot(symbol="GBPUSD=X"))
    repo.insert_signal(_snapshot(symbol="EURUSD=X", direction=-1))
    rows = repo.list_recent(symbol="GBPUSD=X")
    assert len(rows) == 1
    assert repo.get_latest("EURUSD=X")["direction"] == -1


def test_empty(repo):
    assert repo.list_recent() == []
    assert repo.get_latest() is None
