"""Tests for the internal API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from fxsignal.api.routers import configure_routers
from fxsignal.config import Config, SettingsStore
from fxsignal.engine import SignalEngine
from fxsignal.errors import NetworkError
from fxsignal.main import app
from fxsignal.repos.db import init_db
from fxsignal.repos.signal_repo import SignalRepo
from fxsignal.strategy.models import PriceBar, PriceSeries

client = TestClient(app)


# ── Helpers ──────────────────────────────────────────────────────────────


def _make_config(**overrides) -> Config:
    defaults = dict(
        symbol="GBPUSD=X",
        display_pair="GBP/USD",
        lookback_days=100,
        quote_base_url="https://quotes.test",
        request_timeout_seconds=5.0,
        settings_path="data/settings.json",
        db_path=":memory:",
        log_level="WARNING",
        api_port=8080,
    )
    defaults.update(overrides)
    return Config(**defaults)


class _Provider:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    async def fetch_daily_series(self, symbol, lookback_days=100, now=None):
        if self.fail:
            raise NetworkError("offline")
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        return PriceSeries(
            symbol=symbol,
            bars=tuple(
                PriceBar(start + timedelta(days=i), c, c, c, c)
                for i, c in enumerate(1.25 + 0.001 * (i % 9) for i in range(80))
            ),
        )

    async def fetch_latest_price(self, symbol):
        return 1.2634


@pytest.fixture
def engine(tmp_path):
    db_path = str(tmp_path / "fxsignal.db")
    init_db(db_path)
    repo = SignalRepo(db_path)
    eng = SignalEngine(
        config=_make_config(db_path=db_path),
        provider=_Provider(),
        settings=SettingsStore(tmp_path / "settings.json"),
        signal_repo=repo,
    )
    configure_routers(engine=eng, signal_repo=repo)
    yield eng
    configure_routers(engine=None)


# ── Tests ────────────────────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_unconfigured_engine_is_503():
    configure_routers(engine=None)
    assert client.get("/state").status_code == 503


class TestSignalEndpoints:
    def test_signal_404_before_first_refresh(self, engine):
        resp = client.get("/signal")
        assert resp.status_code == 404

    def test_refresh_then_signal(self, engine):
        resp = client.post("/refresh")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["snapshot"]["rate"] == 1.2634

        sig = client.get("/signal").json()
        assert sig["symbol"] == "GBPUSD=X"
        assert sig["mode"] == "ensemble"
        assert set(sig["details"]) == {"rsi", "macd", "ma_cross", "bollinger"}
        assert sig["signal"] in (-1, 0, 1)
        assert 0 <= sig["strength"] <= 100

    def test_state(self, engine):
        client.post("/refresh")
        state = client.get("/state").json()
        assert state["pair"] == "GBP/USD"
        assert state["stale"] is False
        assert state["last_signal"] is not None
        assert state["settings"]["fusion_mode"] == "ensemble"

    def test_failed_refresh_reports_error(self, engine):
        engine._provider.fail = True
        body = client.post("/refresh").json()
        assert body["success"] is False
        assert body["error"] == "offline"
        state = client.get("/state").json()
        assert state["stale"] is False
        assert state["last_error"] == "offline"

    def test_failed_refresh_after_success_is_stale(self, engine):
        client.post("/refresh")
        engine._provider.fail = True
        body = client.post("/refresh").json()
        assert body["stale"] is True
        assert client.get("/state").json()["stale"] is True

    def test_history(self, engine):
        client.post("/refresh")
        client.post("/refresh")
        data = client.get("/signals/history", params={"limit": 1}).json()
        assert len(data["signals"]) == 1
        assert data["signals"][0]["symbol"] == "GBPUSD=X"

    def test_history_limit_validated(self, engine):
        assert client.get("/signals/history", params={"limit": 0}).status_code == 422

    def test_notifications_empty(self, engine):
        assert client.get("/notifications").json() == {"notifications": []}


class TestSettingsEndpoints:
    def test_get_defaults(self, engine):
        data = client.get("/settings").json()
        assert data["refresh_interval_minutes"] == 5
        assert data["indicators"]["rsi"]["period"] == 14

    def test_partial_update(self, engine):
        resp = client.post("/settings", json={"fusion_mode": "ml", "indicators": {"rsi": {"period": 9}}})
        assert resp.status_code == 200
        data = resp.json()
        assert data["fusion_mode"] == "ml"
        assert data["indicators"]["rsi"]["period"] == 9
        assert data["indicators"]["macd"]["slow"] == 26
        assert engine.settings.get().fusion_mode == "ml"

    def test_invalid_update_rejected(self, engine):
        resp = client.post("/settings", json={"signal_strength_threshold": 150})
        assert resp.status_code == 400
        assert "signal_strength_threshold" in resp.json()["detail"]
        assert engine.settings.get().signal_strength_threshold == 70

    def test_unknown_key_rejected(self, engine):
        resp = client.post("/settings", json={"theme": "dark"})
        assert resp.status_code == 400

    def test_reset(self, engine):
        client.post("/settings", json={"refresh_interval_minutes": 30})
        resp = client.post("/reset")
        assert resp.status_code == 200
        body = resp.json()
        assert body["settings"]["refresh_interval_minutes"] == 5
        assert body["success"] is True
        assert engine.previous_snapshot is None
