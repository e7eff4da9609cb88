"""Tests for the notification rule and the notification log."""

from datetime import datetime, timezone

import pytest

from fxsignal.models.settings import DEFAULT_SETTINGS
from fxsignal.notifier import Notifier, should_notify
from fxsignal.strategy.models import AggregateSignal

_AT = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


def _sig(direction: int, strength: int) -> AggregateSignal:
    return AggregateSignal(direction=direction, strength=strength)


class TestShouldNotify:
    def test_first_strong_signal(self):
        assert should_notify(_sig(1, 75), None, DEFAULT_SETTINGS) is True

    def test_threshold_is_inclusive(self):
        assert should_notify(_sig(-1, 70), None, DEFAULT_SETTINGS) is True
        assert should_notify(_sig(-1, 69), None, DEFAULT_SETTINGS) is False

    def test_same_direction_is_suppressed(self):
        assert should_notify(_sig(1, 100), _sig(1, 75), DEFAULT_SETTINGS) is False

    def test_reversal_notifies(self):
        assert should_notify(_sig(-1, 75), _sig(1, 75), DEFAULT_SETTINGS) is True

    def test_from_neutral_notifies(self):
        assert should_notify(_sig(1, 75), _sig(0, 0), DEFAULT_SETTINGS) is True

    def test_neutral_never_notifies(self):
        settings = DEFAULT_SETTINGS.merged({"signal_strength_threshold": 0})
        assert should_notify(_sig(0, 0), _sig(1, 80), settings) is False

    def test_disabled(self):
        settings = DEFAULT_SETTINGS.merged({"notifications_enabled": False})
        assert should_notify(_sig(1, 100), None, settings) is False


class TestNotifier:
    def test_message_format(self):
        note = Notifier("GBP/USD").notify(_sig(-1, 75), _AT)
        assert note.title == "GBP/USD SELL Signal"
        assert note.message == "SELL signal detected with 75% strength!"
        assert note.to_dict()["created_at"] == "2025-03-14T09:30:00+00:00"

    def test_history_is_capped(self):
        notifier = Notifier("GBP/USD")
        for i in range(60):
            notifier.notify(_sig(1, 40 + i), _AT)
        history = notifier.history
        assert len(history) == 50
        assert history[0].strength == 50
        assert history[-1].strength == 99

    def test_history_is_a_copy(self):
        notifier = Notifier("GBP/USD")
        notifier.notify(_sig(1, 80), _AT)
        notifier.history.clear()
        assert len(notifier.history) == 1

    def test_delivery_failure_is_logged(self, caplog):
        def _broken(note):
            raise ConnectionError("smtp down")

        notifier = Notifier("GBP/USD", deliver=_broken)
        note = notifier.notify(_sig(1, 80), _AT)
        assert note in notifier.history
        assert "delivery failed" in caplog.text

    @pytest.mark.parametrize("direction,word", [(1, "BUY"), (-1, "SELL")])
    def test_label(self, direction, word):
        assert Notifier("EUR/USD").notify(_sig(direction, 90), _AT).title == f"EUR/USD {word} Signal"
