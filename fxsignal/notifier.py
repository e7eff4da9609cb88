"""Signal notifications — de-duplication rule and a bounded notification log.

Delivering a notification (desktop, e-mail, chat) is left to an optional
callback; this module decides *whether* one is due and records it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fxsignal.models.settings import Settings
from fxsignal.strategy.models import AggregateSignal

logger = logging.getLogger("fxsignal.notifier")

_MAX_LOG_ENTRIES = 50


def should_notify(
    current: AggregateSignal,
    previous: Optional[AggregateSignal],
    settings: Settings,
) -> bool:
    """Return ``True`` when *current* deserves a notification.

    All of the following must hold:

    * notifications are enabled;
    * ``current.strength >= settings.signal_strength_threshold``;
    * ``current.direction != 0``;
    * the direction differs from the previous cycle's (no previous cycle
      counts as different).
    """
    if not settings.notifications_enabled:
        return False
    if current.direction == 0:
        return False
    if current.strength < settings.signal_strength_threshold:
        return False
    return previous is None or previous.direction != current.direction


@dataclass(frozen=True)
class Notification:
    """A notification that was raised for a signal change."""

    title: str
    message: str
    direction: int
    strength: int
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "direction": self.direction,
            "strength": self.strength,
            "created_at": self.created_at.isoformat(),
        }


class Notifier:
    """Formats, logs and optionally delivers signal notifications.

    Args:
        pair: Display name of the traded pair, e.g. ``"GBP/USD"``.
        deliver: Optional callable receiving each ``Notification``.
            Delivery errors are logged and do not interrupt the cycle.
    """

    def __init__(
        self,
        pair: str,
        deliver: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self._pair = pair
        self._deliver = deliver
        self._log: list[Notification] = []

    @property
    def history(self) -> list[Notification]:
        """Most recent notifications, oldest first."""
        return list(self._log)

    def notify(self, signal: AggregateSignal, at: datetime) -> Notification:
        side = signal.label
        note = Notification(
            title=f"{self._pair} {side} Signal",
            message=f"{side} signal detected with {signal.strength}% strength!",
            direction=signal.direction,
            strength=signal.strength,
            created_at=at,
        )
        logger.warning("%s — %s", note.title, note.message)

        self._log.append(note)
        if len(self._log) > _MAX_LOG_ENTRIES:
            del self._log[0]

        if self._deliver is not None:
            try:
                self._deliver(note)
            except Exception as exc:
                logger.error("Notification delivery failed: %s", exc)
        return note
