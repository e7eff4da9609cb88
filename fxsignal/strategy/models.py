"""Strategy data models — price series, per-indicator and aggregate signals."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Union


@dataclass(frozen=True)
class PriceBar:
    """A single daily OHLCV bar."""

    date: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class PriceSeries:
    """Immutable, strictly time-ordered daily bars for one symbol.

    Replaced wholesale on every refresh; never mutated in place.
    Raises ``ValueError`` if the bars are out of order or repeat a date.
    """

    symbol: str
    bars: tuple[PriceBar, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "bars", tuple(self.bars))
        for prev, cur in zip(self.bars, self.bars[1:]):
            if cur.date <= prev.date:
                raise ValueError(
                    f"Bars must be strictly time-ordered: {cur.date.isoformat()} "
                    f"follows {prev.date.isoformat()}"
                )

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def closes(self) -> list[float]:
        """Close prices, oldest first."""
        return [b.close for b in self.bars]

    @property
    def last_close(self) -> Optional[float]:
        return self.bars[-1].close if self.bars else None


SignalValue = Union[float, str, None]


@dataclass(frozen=True)
class Signal:
    """One indicator's vote.

    ``direction`` is one of -1 (strong sell), -0.5 (weak sell), 0,
    0.5 (weak buy) or 1 (strong buy).  ``value`` is the indicator
    reading: a number, a formatted description, or ``None`` when the
    indicator could not be computed.
    """

    direction: float
    value: SignalValue
    indicator: str

    @classmethod
    def neutral(cls, indicator: str) -> "Signal":
        return cls(direction=0, value=None, indicator=indicator)

    def to_dict(self) -> dict:
        return {
            "signal": self.direction,
            "value": self.value,
            "indicator": self.indicator,
        }


@dataclass(frozen=True)
class AggregateSignal:
    """Fused recommendation for one refresh cycle."""

    direction: int  # -1, 0 or 1
    strength: int  # 0-100
    details: Mapping[str, Signal] = field(default_factory=dict)
    mode: str = "ensemble"

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @classmethod
    def neutral(cls, mode: str = "ensemble") -> "AggregateSignal":
        return cls(direction=0, strength=0, details={}, mode=mode)

    @property
    def label(self) -> str:
        if self.direction > 0:
            return "BUY"
        if self.direction < 0:
            return "SELL"
        return "NEUTRAL"

    def to_dict(self) -> dict:
        return {
            "signal": self.direction,
            "strength": self.strength,
            "mode": self.mode,
            "details": {name: s.to_dict() for name, s in self.details.items()},
        }


# ── Strategy parameters ──────────────────────────────────────────────────


@dataclass(frozen=True)
class RSIParams:
    period: int = 14
    overbought: float = 70.0
    oversold: float = 30.0


@dataclass(frozen=True)
class MACDParams:
    fast: int = 12
    slow: int = 26
    signal: int = 9


@dataclass(frozen=True)
class MACrossParams:
    short: int = 10
    long: int = 50


@dataclass(frozen=True)
class BollingerParams:
    period: int = 20
    std_dev: float = 2.0


@dataclass(frozen=True)
class StrategyParameters:
    """Per-indicator periods and thresholds, supplied at call time."""

    rsi: RSIParams = field(default_factory=RSIParams)
    macd: MACDParams = field(default_factory=MACDParams)
    ma_cross: MACrossParams = field(default_factory=MACrossParams)
    bollinger: BollingerParams = field(default_factory=BollingerParams)

    def validate(self) -> None:
        """Raise ``ValueError`` for periods or thresholds that cannot work."""
        if self.rsi.period < 1 or self.bollinger.period < 1:
            raise ValueError("Indicator periods must be >= 1")
        if not 0 <= self.rsi.oversold < self.rsi.overbought <= 100:
            raise ValueError(
                "RSI thresholds must satisfy 0 <= oversold < overbought <= 100"
            )
        if not 1 <= self.macd.fast < self.macd.slow or self.macd.signal < 1:
            raise ValueError("MACD periods must satisfy 1 <= fast < slow and signal >= 1")
        if not 1 <= self.ma_cross.short < self.ma_cross.long:
            raise ValueError("MA crossover periods must satisfy 1 <= short < long")
        if self.bollinger.std_dev <= 0:
            raise ValueError("Bollinger std_dev multiplier must be > 0")

    @property
    def max_lookback(self) -> int:
        """Longest lookback any indicator needs."""
        return max(
            self.rsi.period + 1,
            self.macd.slow + self.macd.signal,
            self.ma_cross.long + 1,
            self.bollinger.period + 1,
        )

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping]) -> "StrategyParameters":
        """Build parameters from ``{"rsi": {"period": 7}, ...}``.

        Missing sections and keys keep their defaults.  Unknown sections or
        keys raise ``ValueError``.
        """
        if not overrides:
            return cls()
        sections = {f.name: f for f in fields(cls)}
        built = {}
        for section, values in overrides.items():
            if section not in sections:
                raise ValueError(
                    f"Unknown indicator '{section}'. "
                    f"Available: {', '.join(sections)}"
                )
            param_cls = type(sections[section].default_factory())
            allowed = {f.name for f in fields(param_cls)}
            unknown = set(values or {}) - allowed
            if unknown:
                raise ValueError(
                    f"Unknown {section} parameter(s): {', '.join(sorted(unknown))}"
                )
            defaults = param_cls()
            kwargs = {}
            for key, raw in (values or {}).items():
                kind = type(getattr(defaults, key))
                kwargs[key] = kind(raw)
            built[section] = param_cls(**kwargs)
        params = cls(**built)
        params.validate()
        return params

    def to_dict(self) -> dict:
        return asdict(self)
