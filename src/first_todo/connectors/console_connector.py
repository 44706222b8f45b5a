# src/first_todo/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleNotifier:
    """
    ReminderNotifier that prints reminders to the console.

    Called from the dispatcher thread; a lock keeps lines from interleaving.
    """

    def __init__(self, stream=None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    async def notify(self, *, title: str, body: str, task_id: str) -> None:
        stream = self._stream or sys.stdout
        with self._lock:
            stream.write(f"\n[{_ts_local()}] 🔔 {title}: {body}\n")
            stream.flush()


def _prompt(state: AppState) -> str:
    pending = state.badge.count
    scope = "today" if state.store.today_only else "all"
    return f"[{pending} pending | {scope}] >>> "


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (classifier=%s).", state.classifier_name)
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(_prompt(state)).strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            with state.lock:
                response = command_registry.handle(state, user_input, emit=emit)
                if response is None:
                    # Plain text is a new task, with the same trailing @date syntax as /add.
                    response = command_registry.handle(state, "/add " + user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        print(f"[{_ts_local()}] {response}")

    logger.info("Console connector finished.")
