# src/keh_studio/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, resumes a persisted session (which
restarts the deadline monitor), then runs the console REPL on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.session import resume_if_logged_in
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.monitor.stop()
    except Exception:
        logger.debug("Monitor stop failed.", exc_info=True)

    try:
        state.gate.cancel()
    except Exception:
        logger.debug("Gate cancel failed.", exc_info=True)


async def _run(state: AppState) -> None:
    if resume_if_logged_in(state):
        logger.info("Resumed persisted session; deadline monitor running.")

    console = asyncio.create_task(run_console_loop(state))

    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        console.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Some platforms (Windows) do not support loop signal handlers.
            pass

    try:
        await console
    except asyncio.CancelledError:
        logger.info("Console cancelled.")
    finally:
        _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/keh")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "keh"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
