# src/first_todo/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import cast

from ..config import REMINDER_DELAY_MAX, REMINDER_DELAY_MIN
from ..core.state import AppState
from ..todos.todo_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Anything that is not a command is added as a new task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def parse_target_date(token: str, *, today: date | None = None) -> float | None:
    """
    "@today" / "@tomorrow" / "@YYYY-MM-DD" -> local midnight as epoch seconds.

    Raises ValueError for anything else that starts with "@".
    """
    if today is None:
        today = date.today()
    raw = token[1:] if token.startswith("@") else token
    raw = raw.strip().lower()

    if raw == "today":
        day = today
    elif raw == "tomorrow":
        day = today + timedelta(days=1)
    else:
        day = datetime.strptime(raw, DATE_FORMAT).date()

    return datetime.combine(day, time()).timestamp()


def split_text_and_date(args: list[str], *, today: date | None = None) -> tuple[str, float | None]:
    """Trailing "@..." token (if any) is the target date; the rest is the task text."""
    if args and args[-1].startswith("@"):
        return " ".join(args[:-1]), parse_target_date(args[-1], today=today)
    return " ".join(args), None


def format_date(ts: float | None) -> str:
    if ts is None:
        return ""
    return datetime.fromtimestamp(ts).strftime(DATE_FORMAT)


def resolve_task(state: AppState, ref: str) -> Task | None:
    """
    Row number from the last listing, a full task id, or a unique id prefix (4+ chars).

    A number outside the listed rows is tried as an id prefix (hex ids can be all digits).
    """
    store = state.store
    if ref.isdigit():
        idx = int(ref) - 1
        if 0 <= idx < len(state.last_rows):
            return store.get(state.last_rows[idx])

    exact = store.get(ref)
    if exact is not None:
        return exact

    if len(ref) < 4:
        return None
    matches = [t for t in store.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def render_task_list(state: AppState) -> str:
    store = state.store
    groups = store.grouped()

    state.last_rows = []
    scope = "today" if store.today_only else "all"
    if not groups:
        return f"No tasks ({scope})."

    lines = [f"Tasks ({scope}):"]
    row = 0
    for category, tasks in groups.items():
        header = f"{category.icon} {category.value}" if category.icon else category.value
        lines.append(f"{header} ({len(tasks)})")
        for task in tasks:
            row += 1
            state.last_rows.append(task.id)
            mark = "x" if task.is_done else " "
            due = format_date(task.target_date)
            suffix = f"  (target {due})" if due else ""
            lines.append(f"  {row}. [{mark}] {task.text}{suffix}")
    return "\n".join(lines)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add buy milk            -> task without target date
    /add buy milk @today     -> task for today
    /add gym @2026-01-31     -> task for a given day
    """
    try:
        text, target = split_text_and_date(args)
    except ValueError:
        return "Usage: /add <text> [@today | @tomorrow | @YYYY-MM-DD]"

    if emit is not None and text.strip() and state.classifier_name == "llm":
        emit("Classifying...")

    return add_task(state, text, target)


def add_task(state: AppState, text: str, target: float | None = None) -> str:
    task = state.store.add(text, target)
    if task is None:
        return "Nothing to add (empty task)."

    delay = state.preferences.reminder_delay_minutes()
    due = format_date(task.target_date)
    due_part = f" for {due}" if due else ""
    lines = [
        f"Added [{task.category.value}] {task.text}{due_part}. Reminder in {delay} min.",
    ]
    if state.store.motivation_message:
        lines.append(state.store.motivation_message)
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_task_list(state)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <row number | task id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}. Use /list to refresh row numbers."
    state.store.toggle_done(task.id)
    status = "done" if task.is_done else "not done"
    return f"Marked {status}: {task.text}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <row number | task id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}. Use /list to refresh row numbers."
    state.store.delete(task.id)
    return f"Deleted: {task.text}"


def cmd_today(state: AppState, args: list[str]) -> str:
    """
    /today       -> toggle the today-only filter
    /today on    -> only tasks whose target date is today
    /today off   -> all tasks
    """
    store = state.store
    if not args:
        enabled = not store.today_only
    else:
        arg = args[0].lower()
        if arg in ("on", "1", "true", "yes"):
            enabled = True
        elif arg in ("off", "0", "false", "no"):
            enabled = False
        else:
            return "Usage: /today [on|off]"

    store.set_today_only_filter(enabled)
    return f"Today-only filter {'ON' if enabled else 'OFF'}.\n{render_task_list(state)}"


def cmd_recommend(state: AppState, args: list[str]) -> str:
    pick = state.store.pick_recommendation()
    return f"Recommended: {pick}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.store.stats()
    return (
        "Stats:\n"
        f"  Total: {stats.total}\n"
        f"  Completed: {stats.completed_count}\n"
        f"  Pending: {stats.pending_count}\n"
        f"  Completion rate: {stats.completion_rate:.1f}%"
    )


def cmd_remind(state: AppState, args: list[str]) -> str:
    """
    /remind        -> show the reminder delay
    /remind 30     -> remind 30 minutes after adding a task
    """
    if not args:
        return f"Reminders fire {state.preferences.reminder_delay_minutes()} minute(s) after a task is added."

    try:
        value = state.preferences.set_reminder_delay_minutes(int(args[0]))
    except ValueError:
        return f"Usage: /remind <minutes {REMINDER_DELAY_MIN}-{REMINDER_DELAY_MAX}>"
    return f"Reminder delay set to {value} minute(s)."


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    settings = state.settings
    return (
        "Status:\n"
        f"  Classifier: {state.classifier_name}\n"
        f"  Today-only filter: {'ON' if store.today_only else 'OFF'}\n"
        f"  Pending tasks: {state.badge.count}\n"
        f"  Reminder delay: {state.preferences.reminder_delay_minutes()} min\n"
        f"  Data dir: {getattr(settings, 'data_dir', '?')}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <text> [@today|@tomorrow|@YYYY-MM-DD].")
registry.register("list", cmd_list, help_text="List tasks grouped by category.", aliases=["ls"])
registry.register("done", cmd_done, help_text="Toggle done: /done <row|id>.", aliases=["toggle"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <row|id>.", aliases=["delete", "rm"])
registry.register("today", cmd_today, help_text="Today-only filter: /today [on|off].")
registry.register("recommend", cmd_recommend, help_text="Pick a random open task from the current view.",
                  aliases=["rec"])
registry.register("stats", cmd_stats, help_text="Show completion statistics.")
registry.register("remind", cmd_remind, help_text="Reminder delay in minutes: /remind [1-1440].")
registry.register("status", cmd_status, help_text="Show current settings.")
