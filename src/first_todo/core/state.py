# src/first_todo/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..reminders.reminder_store import ReminderStore
from ..storage.preferences import Preferences
from ..todos.todo_store import TaskStore


@dataclass
class CountingBadge:
    """BadgeSink that just remembers the last pending count (shown in the console prompt)."""

    count: int = 0

    def set_badge_count(self, count: int) -> None:
        self.count = int(count)


@dataclass
class AppState:
    # Store Settings on the state for easy access in commands.
    settings: Any

    store: TaskStore
    preferences: Preferences
    reminder_store: ReminderStore
    badge: CountingBadge
    classifier_name: str

    # Task ids in the order of the last rendered listing (row numbers start at 1).
    last_rows: list[str] = field(default_factory=list)

    # Serializes command handling; the reminder thread never touches TaskStore.
    lock: threading.RLock = field(default_factory=threading.RLock)
