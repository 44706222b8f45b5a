# src/first_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder dispatcher in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..logging_setup import setup_logging
from ..reminders.reminder_scheduler import start_reminders_in_background

logger = logging.getLogger(__name__)


def make_sigterm_handler(stop_event: threading.Event, *, interrupt: bool):
    """
    SIGTERM handler: set stop_event; with interrupt=True also raise KeyboardInterrupt,
    since the console REPL blocks in input() and never looks at the event.
    """

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_event.set()
        if interrupt:
            raise KeyboardInterrupt

    return _handle_signal


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    reminder_runner = start_reminders_in_background(
        state.reminder_store,
        ConsoleNotifier(),
        interval_seconds=settings.reminder_poll_seconds,
        retry_delay_seconds=settings.reminder_retry_seconds,
    )

    stop_main = threading.Event()

    try:
        signal.signal(signal.SIGTERM, make_sigterm_handler(stop_main, interrupt=settings.console_enabled))
    except (ValueError, OSError):
        # Not available on every platform / outside the main thread.
        logger.debug("SIGTERM handler not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            try:
                run_console_loop(state)
            except KeyboardInterrupt:
                logger.info("Interrupted outside the prompt, shutting down...")
            stop_main.set()
        else:
            logger.info("Console disabled. Delivering reminders only. Press Ctrl+C to stop.")
            try:
                stop_main.wait()
            except KeyboardInterrupt:
                logger.info("KeyboardInterrupt, shutting down...")

    finally:
        if reminder_runner is not None:
            reminder_runner.stop()
            reminder_runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
