"""FX Signal — application configuration.

Loads .env variables into a typed config object, and persists the user's
runtime settings as JSON.
"""

import json
import logging
import os
import pathlib
import threading
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from fxsignal.models.settings import DEFAULT_SETTINGS, Settings

logger = logging.getLogger("fxsignal")


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    symbol: str  # quote provider ticker, e.g. "GBPUSD=X"
    display_pair: str  # e.g. "GBP/USD"
    lookback_days: int
    quote_base_url: str
    request_timeout_seconds: float
    settings_path: str
    db_path: str
    log_level: str
    api_port: int


def _env_number(name: str, default: str, kind: type):
    raw = os.environ.get(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(
            f"Environment variable {name} must be {kind.__name__}, got {raw!r}"
        ) from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Every variable has a default; a numeric variable that does not parse
    raises ``ValueError`` naming the variable.
    """
    load_dotenv(dotenv_path=env_path)

    lookback_days = _env_number("LOOKBACK_DAYS", "100", int)
    if lookback_days < 1:
        raise ValueError("LOOKBACK_DAYS must be >= 1")

    return Config(
        symbol=os.environ.get("FX_SYMBOL", "GBPUSD=X"),
        display_pair=os.environ.get("FX_DISPLAY_PAIR", "GBP/USD"),
        lookback_days=lookback_days,
        quote_base_url=os.environ.get(
            "QUOTE_BASE_URL", "https://query1.finance.yahoo.com"
        ).rstrip("/"),
        request_timeout_seconds=_env_number("REQUEST_TIMEOUT_SECONDS", "30", float),
        settings_path=os.environ.get("SETTINGS_PATH", "data/settings.json"),
        db_path=os.environ.get("DB_PATH", "data/fxsignal.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        api_port=_env_number("API_PORT", "8080", int),
    )


# ── User settings persistence ────────────────────────────────────────────


def load_settings(path: str | pathlib.Path) -> Settings:
    """Read settings from *path*, falling back to defaults.

    A missing file gives the defaults.  A corrupt or invalid file is
    logged and also gives the defaults, so startup never fails on it.
    """
    path = pathlib.Path(path)
    if not path.exists():
        return DEFAULT_SETTINGS
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.from_dict(data)
    except (ValueError, TypeError) as exc:
        logger.error("Ignoring invalid settings file %s: %s", path, exc)
        return DEFAULT_SETTINGS


def save_settings(settings: Settings, path: str | pathlib.Path) -> None:
    """Write *settings* to *path* as JSON, creating parent directories."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)


class SettingsStore:
    """Holds the current settings snapshot.

    ``get()`` returns an immutable snapshot; ``update()`` and ``reset()``
    build a new snapshot, persist it and swap the reference in one step,
    so a refresh cycle that already read its snapshot is never affected.

    Args:
        path: JSON file to persist to, or ``None`` to keep settings in
              memory only.
    """

    def __init__(self, path: str | pathlib.Path | None = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._lock = threading.Lock()
        self._current = load_settings(self._path) if self._path else DEFAULT_SETTINGS

    def get(self) -> Settings:
        return self._current

    def update(self, updates: Mapping) -> Settings:
        """Apply a partial update.  Raises ``ValueError`` if invalid."""
        with self._lock:
            new = self._current.merged(updates)
            self._swap(new)
        logger.info("Settings updated: %s", ", ".join(sorted(updates)))
        return new

    def reset(self) -> Settings:
        """Restore the default settings."""
        with self._lock:
            self._swap(DEFAULT_SETTINGS)
        logger.info("Settings reset to defaults")
        return DEFAULT_SETTINGS

    def _swap(self, new: Settings) -> None:
        if self._path:
            save_settings(new, self._path)
        self._current = new
