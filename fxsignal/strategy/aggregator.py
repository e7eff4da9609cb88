"""Signal aggregation — fuses the four indicator votes into one recommendation.

Three fusion modes are supported:

- ``technical``: plain mean of the four directions.
- ``ml``: fixed linear reweighting (RSI and MACD 0.3 each, MA cross and
  Bollinger 0.2 each).  It is a heuristic blend, not a trained model.
- ``ensemble`` (default): majority vote of buy versus sell signals.

``compute_signal()`` is the single public entry point used by the engine,
the API and the CLI.
"""

import logging
import math
from typing import Mapping, Optional

from fxsignal.errors import ComputationFailure
from fxsignal.strategy.models import (
    AggregateSignal,
    PriceSeries,
    Signal,
    StrategyParameters,
)
from fxsignal.strategy.registry import INDICATOR_NAMES, STRATEGY_REGISTRY, all_strategies

logger = logging.getLogger("fxsignal.aggregator")

FUSION_MODES: tuple[str, ...] = ("technical", "ml", "ensemble")
DEFAULT_MODE = "ensemble"

ML_WEIGHTS: dict[str, float] = {
    "rsi": 0.3,
    "macd": 0.3,
    "ma_cross": 0.2,
    "bollinger": 0.2,
}

# Scores inside ±DEADBAND are reported as neutral.
DEADBAND = 0.1

# Weighted sums are snapped to this many decimals before thresholding, so a
# score that is exactly ±DEADBAND in decimal stays inside the band.
_SCORE_DECIMALS = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _direction_from_score(score: float) -> int:
    if score > DEADBAND:
        return 1
    if score < -DEADBAND:
        return -1
    return 0


def _complete(signals: Mapping[str, Signal]) -> dict[str, Signal]:
    """Return signals for every registered indicator, in aggregation order.

    Missing indicators are filled with a neutral vote.
    """
    completed: dict[str, Signal] = {}
    for name in INDICATOR_NAMES:
        sig = signals.get(name)
        if sig is None:
            sig = Signal.neutral(STRATEGY_REGISTRY[name].label)
        completed[name] = sig
    return completed


def _ensemble(directions: list[float]) -> tuple[float, float]:
    positive = sum(1 for d in directions if d > 0)
    negative = sum(1 for d in directions if d < 0)
    if positive > negative:
        return 1.0, positive / len(directions) * 100
    if negative > positive:
        return -1.0, negative / len(directions) * 100
    return 0.0, 0.0


def aggregate(
    signals: Mapping[str, Signal],
    mode: str = DEFAULT_MODE,
) -> AggregateSignal:
    """Fuse per-indicator signals into an ``AggregateSignal``.

    Args:
        signals: ``{"rsi": Signal, "macd": Signal, ...}``.  Missing
            indicators count as neutral.
        mode: ``"technical"``, ``"ml"`` or ``"ensemble"``.  Unknown modes
            fall back to ``"ensemble"``.

    Returns:
        The fused signal.  Any unexpected error yields
        ``AggregateSignal.neutral()`` so a refresh cycle always completes.
    """
    if mode not in FUSION_MODES:
        logger.warning("Unknown fusion mode '%s'; using '%s'", mode, DEFAULT_MODE)
        mode = DEFAULT_MODE

    try:
        details = _complete(signals)
        directions = [details[name].direction for name in INDICATOR_NAMES]

        if mode == "technical":
            score = sum(directions) / len(directions)
            strength = abs(score) * 100
        elif mode == "ml":
            score = sum(
                details[name].direction * weight for name, weight in ML_WEIGHTS.items()
            )
            strength = abs(score) * 100
        else:
            score, strength = _ensemble(directions)

        score = round(score, _SCORE_DECIMALS)
        strength = round(strength, _SCORE_DECIMALS)
        return AggregateSignal(
            direction=_direction_from_score(score),
            strength=_round_half_up(strength),
            details=details,
            mode=mode,
        )
    except Exception:
        logger.error("Signal aggregation failed; reporting neutral", exc_info=True)
        return AggregateSignal.neutral(mode)


def _evaluate(strategy, series: PriceSeries, params: StrategyParameters) -> Signal:
    """Run one strategy, downgrading any failure to a neutral vote."""
    try:
        return strategy.compute(series, params)
    except Exception as exc:
        failure = ComputationFailure(strategy.label, exc)
        logger.error("%s; substituting neutral signal", failure, exc_info=True)
        return Signal.neutral(strategy.label)


def compute_signal(
    series: PriceSeries,
    mode: str = DEFAULT_MODE,
    params: Optional[StrategyParameters] = None,
) -> AggregateSignal:
    """Compute every indicator on *series* and fuse them under *mode*.

    Pure: identical inputs always give an identical result.
    """
    params = params or StrategyParameters()
    signals = {
        strategy.name: _evaluate(strategy, series, params)
        for strategy in all_strategies()
    }
    return aggregate(signals, mode)
