"""MACD strategy — signal-line crossovers with histogram flips as weaker votes."""

import logging

from fxsignal.strategy.indicators import calculate_macd
from fxsignal.strategy.models import PriceSeries, Signal, StrategyParameters

logger = logging.getLogger("fxsignal.strategy")


class MACDStrategy:
    """Votes on the two most recent MACD / signal-line points.

    Rules, first match wins:

    1. MACD crosses above the signal line → strong buy (1)
    2. MACD crosses below the signal line → strong sell (-1)
    3. Histogram flips negative → positive → weak buy (0.5)
    4. Histogram flips positive → negative → weak sell (-0.5)
    5. Otherwise neutral.

    Implements ``IndicatorStrategy``.
    """

    name = "macd"
    label = "MACD"

    def compute(self, series: PriceSeries, params: StrategyParameters) -> Signal:
        cfg = params.macd
        result = calculate_macd(series.closes, cfg.fast, cfg.slow, cfg.signal)
        if len(result.signal_line) < 2:
            logger.debug(
                "MACD(%d,%d,%d): not enough closes (%d)",
                cfg.fast, cfg.slow, cfg.signal, len(series),
            )
            return Signal.neutral(self.label)

        macd_now, macd_prev = result.macd_line[-1], result.macd_line[-2]
        sig_now, sig_prev = result.signal_line[-1], result.signal_line[-2]
        hist_now, hist_prev = result.histogram[-1], result.histogram[-2]

        if macd_now > sig_now and macd_prev <= sig_prev:
            direction = 1
        elif macd_now < sig_now and macd_prev >= sig_prev:
            direction = -1
        elif hist_now > 0 and hist_prev < 0:
            direction = 0.5
        elif hist_now < 0 and hist_prev > 0:
            direction = -0.5
        else:
            direction = 0

        return Signal(
            direction=direction,
            value=f"{macd_now:.5f} / {sig_now:.5f}",
            indicator=self.label,
        )
