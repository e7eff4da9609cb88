"""Yahoo Finance chart API async client.

Fetches the daily OHLC history and the latest quote for a currency pair
(e.g. ``GBPUSD=X``).  Failures surface as ``NetworkError`` or
``FormatError`` so the engine can report a stale refresh.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from fxsignal.config import Config
from fxsignal.errors import FormatError, NetworkError
from fxsignal.strategy.models import PriceBar, PriceSeries

logger = logging.getLogger("fxsignal.provider")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class YahooFinanceClient:
    """Async client wrapping the Yahoo Finance v8 chart endpoint.

    Args:
        config: Application configuration (base URL and timeout).
        retry_base_delay: First backoff delay in seconds.
    """

    def __init__(self, config: Config, retry_base_delay: float = _RETRY_BASE_DELAY) -> None:
        self._base_url = config.quote_base_url
        self._timeout = config.request_timeout_seconds
        self._retry_base_delay = retry_base_delay
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "fxsignal/0.1",
        }

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _get_with_retry(self, url: str, params: dict) -> httpx.Response:
        """GET with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Other HTTP errors are not retried.  Raises ``NetworkError``
        once retries are exhausted.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            delay = self._retry_base_delay * (2 ** attempt)
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(
                        url,
                        headers=self._headers,
                        params=params,
                        timeout=self._timeout,
                    )
            except httpx.TransportError as exc:
                logger.warning(
                    "GET %s transport error (%s) — retry %d/%d in %.1fs",
                    url, exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)
                continue
            except httpx.HTTPError as exc:
                # Decoding errors, redirect loops: retrying will not help
                raise NetworkError(f"Quote request failed: {exc}") from exc

            if resp.status_code in _RETRYABLE_STATUS_CODES:
                logger.warning(
                    "GET %s returned %d — retry %d/%d in %.1fs",
                    url, resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = httpx.HTTPStatusError(
                    f"Server error '{resp.status_code}'",
                    request=resp.request,
                    response=resp,
                )
                await asyncio.sleep(delay)
                continue

            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise NetworkError(f"Quote request failed: {exc}") from exc
            return resp

        raise NetworkError(
            f"Quote request failed after {_MAX_RETRIES} attempts: {last_exc}"
        ) from last_exc

    async def _chart(self, symbol: str, params: dict) -> dict:
        url = f"{self._base_url}/v8/finance/chart/{symbol}"
        resp = await self._get_with_retry(url, params)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise FormatError(f"Quote response for {symbol} is not JSON") from exc

        chart = payload.get("chart") if isinstance(payload, dict) else None
        if not chart or not chart.get("result"):
            error = (chart or {}).get("error")
            raise FormatError(f"Invalid chart payload for {symbol}: {error}")
        return chart["result"][0]

    # ── Daily history ────────────────────────────────────────────────────

    async def fetch_daily_series(
        self,
        symbol: str,
        lookback_days: int = 100,
        now: Optional[datetime] = None,
    ) -> PriceSeries:
        """Fetch the daily bars of the last *lookback_days* calendar days.

        Bars without a close are skipped; repeated dates keep the last bar.

        Returns:
            ``PriceSeries`` ordered oldest-first.
        """
        end = now or datetime.now(timezone.utc)
        start = end - timedelta(days=lookback_days)
        result = await self._chart(
            symbol,
            {
                "period1": int(start.timestamp()),
                "period2": int(end.timestamp()),
                "interval": "1d",
            },
        )
        bars = parse_chart_bars(result)
        logger.info("Loaded %d daily bars for %s", len(bars), symbol)
        return PriceSeries(symbol=symbol, bars=tuple(bars))

    # ── Latest quote ─────────────────────────────────────────────────────

    async def fetch_latest_price(self, symbol: str) -> float:
        """Return the provider's current market price for *symbol*."""
        result = await self._chart(symbol, {"interval": "1d", "range": "1d"})
        price = (result.get("meta") or {}).get("regularMarketPrice")
        if price is None:
            raise FormatError(f"No regularMarketPrice for {symbol}")
        try:
            return float(price)
        except (TypeError, ValueError) as exc:
            raise FormatError(f"Bad regularMarketPrice for {symbol}: {price!r}") from exc


def parse_chart_bars(result: dict) -> list[PriceBar]:
    """Convert a chart ``result`` object into time-ordered ``PriceBar``s.

    Raises ``FormatError`` if timestamps or the quote block are missing.
    """
    timestamps = result.get("timestamp")
    try:
        quote = result["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise FormatError("Chart payload is missing indicators.quote") from exc
    if not timestamps:
        raise FormatError("Chart payload is missing timestamps")

    def _column(name: str) -> list:
        col = quote.get(name) or []
        return list(col) + [None] * (len(timestamps) - len(col))

    opens, highs, lows = _column("open"), _column("high"), _column("low")
    closes, volumes = _column("close"), _column("volume")

    by_day: dict = {}
    for i, ts in enumerate(timestamps):
        if closes[i] is None:
            continue
        try:
            date = datetime.fromtimestamp(int(ts), tz=timezone.utc)
            close = float(closes[i])
            bar = PriceBar(
                date=date,
                open=float(opens[i]) if opens[i] is not None else close,
                high=float(highs[i]) if highs[i] is not None else close,
                low=float(lows[i]) if lows[i] is not None else close,
                close=close,
                volume=float(volumes[i]) if volumes[i] is not None else 0.0,
            )
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise FormatError(f"Bad chart bar at index {i}: {exc}") from exc
        by_day[date.date()] = bar

    return [by_day[day] for day in sorted(by_day)]
