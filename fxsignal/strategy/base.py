"""Indicator strategy protocol.

Defines the interface that all indicator strategies must implement.  The
aggregator iterates strategies through this interface only and never
needs to know the concrete indicator behind a vote.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fxsignal.strategy.models import PriceSeries, Signal, StrategyParameters


@runtime_checkable
class IndicatorStrategy(Protocol):
    """Interface that all indicator strategies must satisfy.

    ``name`` is the registry / details key (e.g. ``"rsi"``); ``label`` is
    the human-readable indicator name carried on each ``Signal``.
    """

    name: str
    label: str

    def compute(self, series: PriceSeries, params: StrategyParameters) -> Signal:
        """Derive this indicator's vote from *series*.

        Must be a pure function of its arguments.  Insufficient history
        yields ``Signal.neutral(label)`` instead of raising.
        """
        ...
