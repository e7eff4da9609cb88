"""FX Signal — refresh engine (orchestration loop).

Connects the quote provider, the signal computation and the notifier
into a single polling loop.  Fetch → compute → publish → notify.

Only one refresh cycle is ever in flight: a trigger that arrives while a
cycle is running (timer tick or manual refresh) joins that cycle and gets
its result instead of starting a second fetch.
"""

import asyncio
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional

from fxsignal.config import Config, SettingsStore
from fxsignal.errors import DataUnavailable
from fxsignal.models.snapshot import RefreshResult, SignalSnapshot
from fxsignal.notifier import Notifier, should_notify
from fxsignal.repos.signal_repo import SignalRepo
from fxsignal.strategy.aggregator import compute_signal

logger = logging.getLogger("fxsignal.engine")


class SignalEngine:
    """Runs refresh cycles and retains the last two published signals.

    Args:
        config: Application configuration.
        provider: A ``YahooFinanceClient`` (or compatible duck-type / mock)
                  exposing ``fetch_daily_series`` and ``fetch_latest_price``.
        settings: Store holding the current ``Settings`` snapshot.
        notifier: Receives signals that pass the notification rule.
        signal_repo: Optional history repository; ``None`` disables
                     persistence.
    """

    def __init__(
        self,
        config: Config,
        provider,
        settings: SettingsStore,
        notifier: Optional[Notifier] = None,
        signal_repo: Optional[SignalRepo] = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._settings = settings
        self._notifier = notifier or Notifier(config.display_pair)
        self._repo = signal_repo
        self._last: Optional[SignalSnapshot] = None
        self._previous: Optional[SignalSnapshot] = None
        self._last_error: Optional[str] = None
        self._inflight: Optional[asyncio.Task] = None
        self._running: bool = False
        self._cycle_count: int = 0

    @property
    def symbol(self) -> str:
        return self._config.symbol

    @property
    def settings(self) -> SettingsStore:
        return self._settings

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def last_snapshot(self) -> Optional[SignalSnapshot]:
        return self._last

    @property
    def previous_snapshot(self) -> Optional[SignalSnapshot]:
        return self._previous

    @property
    def running(self) -> bool:
        return self._running

    @property
    def state(self) -> dict:
        """Current settings and published signals, for the API and CLI."""
        last, previous = self._last, self._previous
        return {
            "symbol": self.symbol,
            "pair": self._config.display_pair,
            "settings": self._settings.get().to_dict(),
            "last_signal": last.to_dict() if last else None,
            "previous_signal": previous.to_dict() if previous else None,
            "stale": self._last_error is not None and last is not None,
            "last_error": self._last_error,
            "running": self._running,
            "cycle_count": self._cycle_count,
        }

    # ── Single cycle ─────────────────────────────────────────────────────

    async def refresh(self) -> RefreshResult:
        """Run a refresh cycle, or join the one already in flight."""
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Refresh already in progress; joining it")
        else:
            self._inflight = asyncio.ensure_future(self._refresh_cycle())
        return await asyncio.shield(self._inflight)

    async def _refresh_cycle(self, utc_now: Optional[datetime] = None) -> RefreshResult:
        # Read the settings snapshot once; later updates apply next cycle.
        settings = self._settings.get()
        self._cycle_count += 1

        try:
            series = await self._provider.fetch_daily_series(
                self.symbol, self._config.lookback_days,
            )
            if not series.bars:
                raise DataUnavailable(f"No price data returned for {self.symbol}")
        except DataUnavailable as exc:
            self._last_error = str(exc)
            logger.error("Refresh failed for %s: %s", self.symbol, exc)
            return RefreshResult(
                success=False,
                snapshot=self._last,
                error=str(exc),
                stale=self._last is not None,
            )

        if len(series) < settings.indicators.max_lookback:
            logger.warning(
                "Only %d bars for %s; indicators needing %d will report neutral",
                len(series), self.symbol, settings.indicators.max_lookback,
            )

        try:
            rate = await self._provider.fetch_latest_price(self.symbol)
        except DataUnavailable as exc:
            rate = series.last_close
            logger.warning(
                "Latest price unavailable (%s); using last close %s", exc, rate,
            )

        signal = compute_signal(series, settings.fusion_mode, settings.indicators)
        snapshot = SignalSnapshot(
            timestamp=utc_now or datetime.now(timezone.utc),
            symbol=self.symbol,
            rate=rate,
            signal=signal,
            bars=len(series),
        )

        previous_signal = self._last.signal if self._last else None
        notified = should_notify(signal, previous_signal, settings)
        if notified:
            self._notifier.notify(signal, snapshot.timestamp)

        self._previous, self._last = self._last, snapshot
        self._last_error = None
        logger.info(
            "Signal %s: %s (%d%%, mode=%s, rate=%s)",
            self.symbol, signal.label, signal.strength, signal.mode, rate,
        )

        if self._repo is not None:
            try:
                self._repo.insert_signal(snapshot)
            except sqlite3.Error as exc:
                logger.error("Failed to persist signal: %s", exc)

        return RefreshResult(success=True, snapshot=snapshot, notified=notified)

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def reset(self) -> RefreshResult:
        """Restore default settings, forget retained signals and refresh.

        A cycle already in flight read the old settings, so it is allowed
        to finish and a new cycle is started under the defaults.
        """
        while self._inflight is not None and not self._inflight.done():
            await asyncio.wait({self._inflight})
        self._settings.reset()
        self._last = None
        self._previous = None
        self._last_error = None
        return await self.refresh()

    def stop(self) -> None:
        """Signal the loop to stop after the current cycle."""
        self._running = False

    # ── Polling loop ─────────────────────────────────────────────────────

    async def run(
        self,
        poll_interval: Optional[float] = None,
        max_cycles: int = 0,
    ) -> list[RefreshResult]:
        """Refresh periodically until stopped.

        Args:
            poll_interval: Seconds between cycles.  Defaults to the current
                           ``refresh_interval_minutes`` setting, re-read
                           every cycle so changes apply without a restart.
            max_cycles: Stop after this many cycles (0 = unlimited).

        Returns:
            List of per-cycle results.
        """
        self._running = True
        results: list[RefreshResult] = []
        cycle = 0

        while self._running:
            cycle += 1
            try:
                result = await self.refresh()
                results.append(result)
                logger.info(
                    "Cycle %d: %s", cycle, "ok" if result.success else "failed",
                )
            except Exception as exc:
                logger.error("Cycle %d error: %s", cycle, exc, exc_info=True)
                results.append(RefreshResult(success=False, error=str(exc)))

            if max_cycles > 0 and cycle >= max_cycles:
                break

            interval = (
                poll_interval
                if poll_interval is not None
                else self._settings.get().refresh_interval_minutes * 60
            )
            # Interruptible sleep: checks _running every second
            remaining = float(interval)
            while self._running and remaining > 0:
                step = min(1.0, remaining)
                await asyncio.sleep(step)
                remaining -= step

        self._running = False
        return results
