"""Internal API routers — /state, /signal, /refresh, /settings, /reset endpoints.

No business logic, no DB access. Delegates to the engine, the repo and the
notifier injected at startup.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

logger = logging.getLogger("fxsignal")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_engine = None  # Set via configure_routers()
_signal_repo = None  # Set via configure_routers()


def configure_routers(engine, signal_repo=None) -> None:
    """Inject dependencies from the application startup.

    Args:
        engine: A ``SignalEngine`` instance (or duck-type for tests).
        signal_repo: A ``SignalRepo`` instance, or ``None`` when history is
                     not persisted.
    """
    global _engine, _signal_repo  # noqa: PLW0603
    _engine = engine
    _signal_repo = signal_repo


def _require_engine():
    if _engine is None:
        raise HTTPException(status_code=503, detail="Signal engine not configured")
    return _engine


# ── Read endpoints ───────────────────────────────────────────────────────


@router.get("/state")
async def get_state():
    """Return settings, the last published signal and its staleness."""
    return _require_engine().state


@router.get("/signal")
async def get_signal():
    """Return the most recent signal, or 404 before the first refresh."""
    snapshot = _require_engine().last_snapshot
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No signal computed yet")
    return snapshot.to_dict()


@router.get("/signals/history")
async def get_signal_history(limit: int = Query(default=50, ge=1, le=500)):
    """Return persisted signals, newest first."""
    if _signal_repo is None:
        return {"signals": []}
    symbol = _engine.symbol if _engine is not None else None
    return {"signals": _signal_repo.list_recent(limit=limit, symbol=symbol)}


@router.get("/notifications")
async def get_notifications():
    """Return recent notifications, newest first."""
    engine = _require_engine()
    return {
        "notifications": [n.to_dict() for n in reversed(engine.notifier.history)]
    }


# ── Actions ──────────────────────────────────────────────────────────────


@router.post("/refresh")
async def post_refresh():
    """Run a refresh cycle now (or join the one in progress)."""
    result = await _require_engine().refresh()
    return result.to_dict()


@router.post("/reset")
async def post_reset():
    """Restore default settings and refresh from scratch."""
    result = await _require_engine().reset()
    return {"settings": _engine.settings.get().to_dict(), **result.to_dict()}


# ── Settings ─────────────────────────────────────────────────────────────


@router.get("/settings")
async def get_settings():
    """Return current runtime settings."""
    return _require_engine().settings.get().to_dict()


@router.post("/settings")
async def post_settings(body: dict):
    """Apply a partial settings update and persist it.

    The new values take effect from the next refresh cycle.  Invalid
    values are rejected with 400 and leave the settings untouched.
    """
    engine = _require_engine()
    try:
        new = engine.settings.update(body)
    except (ValueError, TypeError) as exc:
        logger.warning("Rejected settings update: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return new.to_dict()
