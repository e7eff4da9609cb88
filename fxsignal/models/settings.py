"""User settings dataclass.

An immutable snapshot of the options a refresh cycle reads: interval,
notification policy, fusion mode and indicator overrides.  Updates never
mutate a snapshot; they build a new one that replaces it atomically.
"""

from dataclasses import dataclass, field, replace
from typing import Mapping

from fxsignal.strategy.aggregator import FUSION_MODES
from fxsignal.strategy.models import StrategyParameters


@dataclass(frozen=True)
class Settings:
    """Runtime options consumed at the start of each refresh cycle."""

    refresh_interval_minutes: int = 5
    notifications_enabled: bool = True
    signal_strength_threshold: int = 70  # percent, 0-100
    fusion_mode: str = "ensemble"  # technical | ml | ensemble
    indicators: StrategyParameters = field(default_factory=StrategyParameters)

    def validate(self) -> None:
        """Raise ``ValueError`` naming the first invalid option."""
        if self.refresh_interval_minutes < 1:
            raise ValueError("refresh_interval_minutes must be >= 1")
        if not 0 <= self.signal_strength_threshold <= 100:
            raise ValueError("signal_strength_threshold must be between 0 and 100")
        if self.fusion_mode not in FUSION_MODES:
            raise ValueError(
                f"Unknown fusion_mode '{self.fusion_mode}'. "
                f"Available: {', '.join(FUSION_MODES)}"
            )
        self.indicators.validate()

    def merged(self, updates: Mapping) -> "Settings":
        """Return a validated copy with *updates* applied.

        Only the keys present in *updates* change.  ``indicators`` may be a
        partial nested mapping, e.g. ``{"rsi": {"period": 7}}``; sections
        not mentioned keep their current values.
        """
        known = {
            "refresh_interval_minutes",
            "notifications_enabled",
            "signal_strength_threshold",
            "fusion_mode",
            "indicators",
        }
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        changes: dict = {}
        if "refresh_interval_minutes" in updates:
            changes["refresh_interval_minutes"] = int(updates["refresh_interval_minutes"])
        if "notifications_enabled" in updates:
            changes["notifications_enabled"] = _as_bool(updates["notifications_enabled"])
        if "signal_strength_threshold" in updates:
            changes["signal_strength_threshold"] = int(updates["signal_strength_threshold"])
        if "fusion_mode" in updates:
            changes["fusion_mode"] = str(updates["fusion_mode"])
        if "indicators" in updates:
            current = self.indicators.to_dict()
            for section, values in (updates["indicators"] or {}).items():
                current.setdefault(section, {}).update(values or {})
            changes["indicators"] = StrategyParameters.from_overrides(current)

        new = replace(self, **changes)
        new.validate()
        return new

    def to_dict(self) -> dict:
        return {
            "refresh_interval_minutes": self.refresh_interval_minutes,
            "notifications_enabled": self.notifications_enabled,
            "signal_strength_threshold": self.signal_strength_threshold,
            "fusion_mode": self.fusion_mode,
            "indicators": self.indicators.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Settings":
        return DEFAULT_SETTINGS.merged(data)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


DEFAULT_SETTINGS = Settings()
