"""Technical indicators — SMA, EMA, RSI, MACD, Bollinger Bands. Pure functions, no I/O.

Every series returned here is *end-aligned*: the last element always
describes the most recent bar, and the output is shorter than the input
by the indicator's warm-up length.  Nothing is padded with NaN.
"""

import math
from dataclasses import dataclass
from typing import Sequence

# Substituted for a zero average loss so RS never divides by zero.
RSI_EPSILON = 1e-10


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")


# ── Moving averages ──────────────────────────────────────────────────────


def calculate_sma(values: Sequence[float], period: int) -> list[float]:
    """Calculate a Simple Moving Average series.

    Element ``j`` is the mean of ``values[j : j + period]``, i.e. the
    trailing window ending at input index ``j + period - 1``.

    Returns ``len(values) - period + 1`` values, or ``[]`` when fewer than
    *period* values are available.
    """
    _check_period(period)
    n = len(values)
    if n < period:
        return []

    sma: list[float] = []
    for i in range(period - 1, n):
        window = values[i - period + 1 : i + 1]
        sma.append(sum(window) / period)
    return sma


def calculate_ema(values: Sequence[float], period: int) -> list[float]:
    """Calculate an Exponential Moving Average series.

    Uses the standard EMA formula:
        ``EMA_today = (x - EMA_yesterday) × k + EMA_yesterday``
    where ``k = 2 / (period + 1)``.

    The first EMA value is seeded with the SMA of the first *period*
    values.  Because every value depends on the whole prefix, callers must
    always pass the full series rather than resuming from a slice.

    Returns ``len(values) - period + 1`` values, or ``[]`` when fewer than
    *period* values are available.
    """
    _check_period(period)
    if len(values) < period:
        return []

    k = 2.0 / (period + 1)
    ema: list[float] = [sum(values[:period]) / period]
    for x in values[period:]:
        ema.append((x - ema[-1]) * k + ema[-1])
    return ema


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(values: Sequence[float], period: int = 14) -> list[float]:
    """Calculate Wilder's Relative Strength Index.

    Algorithm (Wilder-smoothed):
        1. delta = x[i] - x[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = mean of the first *period* deltas.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RS = avg_gain / avg_loss  (avg_loss == 0 → ``RSI_EPSILON``)
        6. RSI = 100 - 100 / (1 + RS)

    Returns ``len(values) - period`` values (the first corresponds to the
    seed), or ``[]`` when fewer than ``period + 1`` values are available.
    """
    _check_period(period)
    if len(values) < period + 1:
        return []

    deltas = [values[i] - values[i - 1] for i in range(1, len(values))]
    gains = [max(d, 0.0) for d in deltas]
    losses = [abs(min(d, 0.0)) for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    def _rsi_from_avgs(ag: float, al: float) -> float:
        rs = ag / (al if al != 0 else RSI_EPSILON)
        return 100.0 - 100.0 / (1.0 + rs)

    rsi = [_rsi_from_avgs(avg_gain, avg_loss)]
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        rsi.append(_rsi_from_avgs(avg_gain, avg_loss))

    return rsi


# ── MACD ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MACDSeries:
    """MACD line, signal line and histogram, each end-aligned."""

    macd_line: list[float]
    signal_line: list[float]
    histogram: list[float]


def calculate_macd(
    values: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDSeries:
    """Calculate MACD = EMA(fast) − EMA(slow), its signal line and histogram.

    The slow EMA starts ``slow_period - fast_period`` bars later than the
    fast EMA, so ``macd[i] = fast[i + offset] - slow[i]`` pairs values of
    the same bar.  Signal line = EMA(macd, *signal_period*).  Histogram is
    MACD − signal over the signal line's (shorter) span.

    Returns empty lists for whatever part cannot be computed yet.
    """
    if fast_period >= slow_period:
        raise ValueError(
            f"fast_period ({fast_period}) must be < slow_period ({slow_period})"
        )

    fast_ema = calculate_ema(values, fast_period)
    slow_ema = calculate_ema(values, slow_period)

    offset = slow_period - fast_period
    macd_line = [fast_ema[i + offset] - slow for i, slow in enumerate(slow_ema)]

    signal_line = calculate_ema(macd_line, signal_period)
    lag = len(macd_line) - len(signal_line)
    histogram = [macd_line[i + lag] - sig for i, sig in enumerate(signal_line)]

    return MACDSeries(macd_line=macd_line, signal_line=signal_line, histogram=histogram)


# ── Bollinger Bands ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class BollingerBands:
    """Upper, middle and lower bands, each end-aligned."""

    upper: list[float]
    middle: list[float]
    lower: list[float]


def calculate_bollinger(
    values: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """Calculate Bollinger Bands.

    Middle = SMA(*period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation of each window around that
    window's own mean.  A flat window gives σ = 0 and all three bands meet.
    """
    middle = calculate_sma(values, period)
    upper: list[float] = []
    lower: list[float] = []

    for j, mean in enumerate(middle):
        window = values[j : j + period]
        variance = sum((x - mean) ** 2 for x in window) / period
        sigma = math.sqrt(variance)
        upper.append(mean + std_dev * sigma)
        lower.append(mean - std_dev * sigma)

    return BollingerBands(upper=upper, middle=middle, lower=lower)
