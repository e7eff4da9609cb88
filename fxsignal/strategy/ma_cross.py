"""Moving-average crossover strategy — golden / death cross on two SMAs."""

import logging

from fxsignal.strategy.indicators import calculate_sma
from fxsignal.strategy.models import PriceSeries, Signal, StrategyParameters

logger = logging.getLogger("fxsignal.strategy")


class MACrossStrategy:
    """Compares a short and a long SMA on the last two bars.

    * Golden cross (short moves above long) → strong buy (1).
    * Death cross (short moves below long) → strong sell (-1).
    * Short already above long → weak buy (0.5); below → weak sell (-0.5).

    Implements ``IndicatorStrategy``.
    """

    name = "ma_cross"
    label = "MA Cross"

    def compute(self, series: PriceSeries, params: StrategyParameters) -> Signal:
        cfg = params.ma_cross
        closes = series.closes
        short_sma = calculate_sma(closes, cfg.short)
        long_sma = calculate_sma(closes, cfg.long)
        if len(long_sma) < 2:
            logger.debug(
                "MA cross %d/%d: need %d closes, got %d",
                cfg.short, cfg.long, cfg.long + 1, len(closes),
            )
            return Signal.neutral(self.label)

        short_now, short_prev = short_sma[-1], short_sma[-2]
        long_now, long_prev = long_sma[-1], long_sma[-2]

        if short_now > long_now and short_prev <= long_prev:
            direction = 1
        elif short_now < long_now and short_prev >= long_prev:
            direction = -1
        elif short_now > long_now:
            direction = 0.5
        elif short_now < long_now:
            direction = -0.5
        else:
            direction = 0

        return Signal(
            direction=direction,
            value=(
                f"{cfg.short}SMA: {short_now:.5f} / "
                f"{cfg.long}SMA: {long_now:.5f}"
            ),
            indicator=self.label,
        )
