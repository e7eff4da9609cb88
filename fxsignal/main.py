"""FX Signal — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for a
one-shot signal check or the continuous refresh loop.
"""

import logging

from fastapi import FastAPI

from fxsignal.api.routers import router

app = FastAPI(title="FX Signal Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("fxsignal")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


def build_engine(config):
    """Wire provider, settings, notifier and repo into a ``SignalEngine``."""
    from fxsignal.config import SettingsStore
    from fxsignal.engine import SignalEngine
    from fxsignal.notifier import Notifier
    from fxsignal.provider.yahoo_client import YahooFinanceClient
    from fxsignal.repos.db import init_db
    from fxsignal.repos.signal_repo import SignalRepo

    init_db(config.db_path)
    repo = SignalRepo(config.db_path)
    engine = SignalEngine(
        config=config,
        provider=YahooFinanceClient(config),
        settings=SettingsStore(config.settings_path),
        notifier=Notifier(config.display_pair),
        signal_repo=repo,
    )
    return engine, repo


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import asyncio

    from fxsignal.api.routers import configure_routers
    from fxsignal.cli.dashboard import format_signal_status
    from fxsignal.config import load_config

    parser = argparse.ArgumentParser(description="FX Signal — technical signal monitor")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh, print the signal and exit",
    )
    parser.add_argument(
        "--engine-only",
        action="store_true",
        help="Run the refresh loop without the API server",
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    args = parser.parse_args()

    config = load_config(args.env_file)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    engine, repo = build_engine(config)
    configure_routers(engine=engine, signal_repo=repo)

    import signal

    def handle_shutdown(signum, frame):
        logger.info("Shutdown signal received — stopping gracefully.")
        engine.stop()

    signal.signal(signal.SIGINT, handle_shutdown)

    if args.once:
        result = asyncio.run(engine.refresh())
        format_signal_status(engine.state)
        raise SystemExit(0 if result.success else 1)
    if args.engine_only:
        asyncio.run(_run_engine_only(engine))
    else:
        asyncio.run(_run_server_and_engine(engine, config.api_port))


async def _run_server_and_engine(engine, port: int) -> None:
    """Start the API server and the refresh loop concurrently."""
    import asyncio

    import uvicorn

    uvi_config = uvicorn.Config(app, host="0.0.0.0", port=port, log_level="info")
    server = uvicorn.Server(uvi_config)

    logger.info("Starting FX Signal for %s; API at http://localhost:%d", engine.symbol, port)

    async def _run_server():
        await server.serve()
        engine.stop()

    await asyncio.gather(_run_server(), engine.run(), return_exceptions=True)
    logger.info("FX Signal stopped.")


async def _run_engine_only(engine) -> None:
    """Run the refresh loop without starting the API server."""
    logger.info("Starting FX Signal engine (no API) for %s", engine.symbol)
    await engine.run()
    logger.info("FX Signal engine stopped.")


if __name__ == "__main__":
    _run_cli()
