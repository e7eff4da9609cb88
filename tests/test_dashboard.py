"""Tests for the CLI dashboard output."""

from fxsignal.cli.dashboard import format_signal_status


def _state(**overrides) -> dict:
    state = {
        "symbol": "GBPUSD=X",
        "pair": "GBP/USD",
        "settings": {
            "refresh_interval_minutes": 5,
            "notifications_enabled": True,
            "signal_strength_threshold": 70,
            "fusion_mode": "ensemble",
        },
        "last_signal": {
            "timestamp": "2025-03-14T09:00:00+00:00",
            "symbol": "GBPUSD=X",
            "rate": 1.26345,
            "bars": 70,
            "signal": 1,
            "strength": 75,
            "mode": "ensemble",
            "details": {
                "rsi": {"signal": 1, "value": 28.123, "indicator": "RSI"},
                "macd": {"signal": 0.5, "value": "0.00120 / 0.00100", "indicator": "MACD"},
                "ma_cross": {"signal": 0, "value": None, "indicator": "MA Cross"},
                "bollinger": {"signal": -0.5, "value": "Upper: 1.28 / Lower: 1.24", "indicator": "Bollinger Bands"},
            },
        },
        "previous_signal": None,
        "stale": False,
        "last_error": None,
        "running": False,
        "cycle_count": 1,
    }
    state.update(overrides)
    return state


def test_signal_summary(capsys):
    out = format_signal_status(_state())
    assert "GBP/USD Signal" in out
    assert "1.26345" in out
    assert "BUY" in out
    assert "75%" in out
    assert "ensemble" in out
    assert capsys.readouterr().out.strip() == out.strip()


def test_indicator_rows():
    out = format_signal_status(_state())
    lines = out.splitlines()
    rsi = next(line for line in lines if line.strip().startswith("RSI"))
    assert "BUY" in rsi and "28.12" in rsi
    assert any("weak buy" in line for line in lines if "MACD" in line)
    assert any("N/A" in line for line in lines if "MA Cross" in line)
    assert any("weak sell" in line for line in lines if "Bollinger" in line)


def test_no_signal_yet():
    out = format_signal_status(_state(last_signal=None))
    assert "No signal computed yet." in out


def test_stale_marker():
    out = format_signal_status(_state(stale=True, last_error="offline"))
    assert "STALE: offline" in out


def test_settings_footer():
    out = format_signal_status(_state())
    assert "Refresh every:   5 min" in out
    assert "Notify at:       70% (on)" in out
