"""RSI strategy — oversold / overbought mean reversion."""

import logging

from fxsignal.strategy.indicators import calculate_rsi
from fxsignal.strategy.models import PriceSeries, Signal, StrategyParameters

logger = logging.getLogger("fxsignal.strategy")


class RSIStrategy:
    """Buys when RSI is oversold, sells when it is overbought.

    Implements ``IndicatorStrategy``.
    """

    name = "rsi"
    label = "RSI"

    def compute(self, series: PriceSeries, params: StrategyParameters) -> Signal:
        cfg = params.rsi
        rsi = calculate_rsi(series.closes, cfg.period)
        if not rsi:
            logger.debug(
                "RSI(%d): need %d closes, got %d", cfg.period, cfg.period + 1, len(series)
            )
            return Signal.neutral(self.label)

        current = rsi[-1]
        if current < cfg.oversold:
            direction = 1
        elif current > cfg.overbought:
            direction = -1
        else:
            direction = 0

        return Signal(direction=direction, value=current, indicator=self.label)
