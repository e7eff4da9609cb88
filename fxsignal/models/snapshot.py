"""Refresh-cycle result types."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fxsignal.strategy.models import AggregateSignal


@dataclass(frozen=True)
class SignalSnapshot:
    """The signal published by one successful refresh cycle."""

    timestamp: datetime
    symbol: str
    rate: Optional[float]
    signal: AggregateSignal
    bars: int = 0  # length of the series the signal was computed from

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "symbol": self.symbol,
            "rate": self.rate,
            "bars": self.bars,
            **self.signal.to_dict(),
        }


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a refresh cycle.

    ``success`` is ``False`` when the price data could not be fetched; the
    previously published snapshot (if any) is then reported as ``stale``.
    """

    success: bool
    snapshot: Optional[SignalSnapshot] = None
    error: Optional[str] = None
    stale: bool = False
    notified: bool = False

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "error": self.error,
            "stale": self.stale,
            "notified": self.notified,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
        }
