"""Strategy registry — maps indicator names to strategy classes.

Iteration order is the fixed aggregation order: RSI, MACD, MA cross,
Bollinger.  The ``ml`` fusion weights are keyed by the same names.
"""

from fxsignal.strategy.base import IndicatorStrategy
from fxsignal.strategy.bollinger import BollingerStrategy
from fxsignal.strategy.ma_cross import MACrossStrategy
from fxsignal.strategy.macd import MACDStrategy
from fxsignal.strategy.rsi import RSIStrategy


STRATEGY_REGISTRY: dict[str, type] = {
    "rsi": RSIStrategy,
    "macd": MACDStrategy,
    "ma_cross": MACrossStrategy,
    "bollinger": BollingerStrategy,
}

INDICATOR_NAMES: tuple[str, ...] = tuple(STRATEGY_REGISTRY)


def get_strategy(name: str) -> IndicatorStrategy:
    """Look up and instantiate a strategy by registry key.

    Raises ``KeyError`` if the strategy name is not registered.
    """
    if name not in STRATEGY_REGISTRY:
        raise KeyError(
            f"Unknown strategy '{name}'. "
            f"Available: {', '.join(STRATEGY_REGISTRY.keys())}"
        )
    return STRATEGY_REGISTRY[name]()


def all_strategies() -> list[IndicatorStrategy]:
    """Instantiate every registered strategy in aggregation order."""
    return [get_strategy(name) for name in INDICATOR_NAMES]
