"""Bollinger Bands strategy — band touches and re-entries toward the middle."""

import logging
import math

from fxsignal.strategy.indicators import calculate_bollinger
from fxsignal.strategy.models import PriceSeries, Signal, StrategyParameters

logger = logging.getLogger("fxsignal.strategy")

# Bands narrower than this (relative to price) count as collapsed.
_FLAT_BAND_TOLERANCE = 1e-9


class BollingerStrategy:
    """Votes on where the latest close sits relative to the bands.

    Rules, first match wins:

    1. Close at or below the lower band → strong buy (1)
    2. Close at or above the upper band → strong sell (-1)
    3. Close below the middle band after the previous close touched the
       lower band → weak buy (0.5)
    4. Close above the middle band after the previous close touched the
       upper band → weak sell (-0.5)
    5. Otherwise neutral.

    A zero-volatility window collapses all three bands onto the price;
    that case is reported as neutral rather than as a band touch.

    Implements ``IndicatorStrategy``.
    """

    name = "bollinger"
    label = "Bollinger Bands"

    def compute(self, series: PriceSeries, params: StrategyParameters) -> Signal:
        cfg = params.bollinger
        closes = series.closes
        bands = calculate_bollinger(closes, cfg.period, cfg.std_dev)
        if len(bands.middle) < 2:
            logger.debug(
                "Bollinger(%d): need %d closes, got %d",
                cfg.period, cfg.period + 1, len(closes),
            )
            return Signal.neutral(self.label)

        price, prev_price = closes[-1], closes[-2]
        upper, upper_prev = bands.upper[-1], bands.upper[-2]
        lower, lower_prev = bands.lower[-1], bands.lower[-2]
        middle = bands.middle[-1]
        value = f"Upper: {upper:.5f} / Lower: {lower:.5f}"

        if math.isclose(upper, lower, rel_tol=_FLAT_BAND_TOLERANCE, abs_tol=1e-12):
            return Signal(direction=0, value=value, indicator=self.label)

        if price <= lower:
            direction = 1
        elif price >= upper:
            direction = -1
        elif price < middle and prev_price <= lower_prev:
            direction = 0.5
        elif price > middle and prev_price >= upper_prev:
            direction = -0.5
        else:
            direction = 0

        return Signal(direction=direction, value=value, indicator=self.label)
