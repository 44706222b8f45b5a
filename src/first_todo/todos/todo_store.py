# src/first_todo/todos/todo_store.py

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable
from datetime import date, datetime

from ..core.ports import BadgeSink, CategoryClassifier, ReminderScheduler, TaskPersistence
from .todo_models import CATEGORY_ORDER, Category, Task, TaskStats, new_task_id

logger = logging.getLogger(__name__)

MOTIVATION_MESSAGES: tuple[str, ...] = (
    "Nice! One more step forward 💪",
    "Plans only matter once you act on them 🚀",
    "Start now and tomorrow looks different ✨",
    "Don't give up, keep going 🛤️",
)

NOTHING_TO_DO = "Nothing to do today 🎉"

REMINDER_TITLE = "Task reminder"


def category_rank(key: str | Category) -> int:
    """Position in the reference order; unknown keys rank after every known one."""
    value = key.value if isinstance(key, Category) else str(key)
    try:
        return CATEGORY_ORDER.index(value)
    except ValueError:
        return len(CATEGORY_ORDER)


def category_display_order(keys: Iterable[str | Category]) -> list[str | Category]:
    return sorted(keys, key=category_rank)


def reminder_body(text: str) -> str:
    return f"Don't forget: {text}!"


class TaskStore:
    """
    In-memory task collection and the only place that mutates it.

    Every mutation runs explicit post-mutation hooks in a fixed order:
    - persistence.save(all tasks)
    - badge recompute (number of not-done tasks)
    - (add only) reminder scheduling + new motivation message

    Hook failures are logged and swallowed: durability and notifications are best-effort.
    Views (filtered/sorted/grouped/stats) are recomputed on every call.
    """

    def __init__(
        self,
        *,
        persistence: TaskPersistence,
        classifier: CategoryClassifier,
        reminders: ReminderScheduler,
        badge: BadgeSink | None = None,
        reminder_delay: Callable[[], int] | int = 5,
        clock: Callable[[], float] | None = None,
        rng: random.Random | None = None,
        purge_on_start: bool = True,
    ) -> None:
        self._persistence = persistence
        self._classifier = classifier
        self._reminders = reminders
        self._badge = badge
        self._reminder_delay = reminder_delay
        self._clock = clock or time.time
        self._rng = rng or random.Random()

        self.today_only = False
        self.motivation_message = ""
        self.today_recommendation: str | None = None

        self._tasks: list[Task] = self._load()

        try:
            granted = self._reminders.request_authorization()
            logger.debug("Reminder authorization granted=%s", granted)
        except Exception:
            logger.exception("Reminder authorization request failed.")

        if purge_on_start:
            self.purge_completed()
        self._recompute_badge()

        logger.info("TaskStore ready total=%d pending=%d", len(self._tasks), self.stats().pending_count)

    # ---- loading / hooks ----

    def _load(self) -> list[Task]:
        try:
            loaded = list(self._persistence.load())
        except Exception:
            logger.exception("Failed to load tasks; starting empty.")
            return []

        seen: set[str] = set()
        out: list[Task] = []
        for task in loaded:
            if task.id in seen:
                logger.warning("Duplicate task id on load, skipping id=%s", task.id)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    def _save(self) -> None:
        try:
            self._persistence.save(list(self._tasks))
        except Exception:
            logger.exception("Failed to save tasks (total=%d).", len(self._tasks))

    def _recompute_badge(self) -> None:
        if self._badge is None:
            return
        pending = sum(1 for t in self._tasks if not t.is_done)
        try:
            self._badge.set_badge_count(pending)
        except Exception:
            logger.exception("Failed to update badge count.")

    def _after_mutation(self) -> None:
        self._save()
        self._recompute_badge()

    def _current_delay(self) -> int:
        raw = self._reminder_delay() if callable(self._reminder_delay) else self._reminder_delay
        return int(raw)

    def _schedule_reminder(self, task: Task) -> None:
        try:
            delay = self._current_delay()
            self._reminders.schedule(task.id, delay, REMINDER_TITLE, reminder_body(task.text))
            logger.debug("Reminder scheduled task_id=%s delay_minutes=%s", task.id, delay)
        except Exception:
            logger.exception("Failed to schedule reminder task_id=%s", task.id)

    def _classify(self, text: str) -> Category:
        try:
            label = self._classifier.classify(text)
        except Exception:
            logger.exception("Classifier failed; falling back to %s.", Category.OTHERS.value)
            label = None
        category = Category.from_label(label)
        if label is not None and Category.parse(label) is None:
            logger.info("Unknown classifier label %r -> %s", label, category.value)
        return category

    def _find_index(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- mutations ----

    def add(self, text: str, target_date: float | None = None) -> Task | None:
        """Create a task from free text. Blank text is ignored (returns None)."""
        clean = (text or "").strip()
        if not clean:
            return None

        task = Task(
            id=new_task_id(),
            text=clean,
            category=self._classify(clean),
            date_added=float(self._clock()),
            target_date=target_date,
            is_done=False,
        )
        self._tasks.append(task)
        logger.info("Task added id=%s category=%s", task.id, task.category.value)

        self._after_mutation()
        self._schedule_reminder(task)
        self.motivation_message = self._rng.choice(MOTIVATION_MESSAGES)
        return task

    def toggle_done(self, task_id: str) -> None:
        idx = self._find_index(task_id)
        if idx is None:
            return
        task = self._tasks[idx]
        task.is_done = not task.is_done
        logger.debug("Task toggled id=%s is_done=%s", task_id, task.is_done)
        self._after_mutation()

    def delete(self, task_id: str) -> None:
        # A reminder already scheduled for this task is left in place.
        idx = self._find_index(task_id)
        if idx is None:
            return
        del self._tasks[idx]
        logger.debug("Task deleted id=%s", task_id)
        self._after_mutation()

    def purge_completed(self) -> int:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if not t.is_done]
        removed = before - len(self._tasks)
        if removed:
            logger.info("Purged %d completed task(s).", removed)
            self._after_mutation()
        return removed

    def set_today_only_filter(self, enabled: bool) -> None:
        self.today_only = bool(enabled)

    def pick_recommendation(self) -> str:
        candidates = [t for t in self.filtered() if not t.is_done]
        if candidates:
            self.today_recommendation = self._rng.choice(candidates).text
        else:
            self.today_recommendation = NOTHING_TO_DO
        return self.today_recommendation

    # ---- queries ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._find_index(task_id)
        return None if idx is None else self._tasks[idx]

    def _today(self) -> date:
        return datetime.fromtimestamp(self._clock()).date()

    def is_today(self, task: Task) -> bool:
        if task.target_date is None:
            return False
        return datetime.fromtimestamp(task.target_date).date() == self._today()

    def filtered(self) -> list[Task]:
        if not self.today_only:
            return list(self._tasks)
        return [t for t in self._tasks if self.is_today(t)]

    def sorted(self) -> list[Task]:
        return sorted(self.filtered(), key=lambda t: (t.is_done, t.date_added))

    def grouped(self) -> dict[Category, list[Task]]:
        buckets: dict[Category, list[Task]] = {}
        for task in self.sorted():
            buckets.setdefault(task.category, []).append(task)
        return {key: buckets[key] for key in sorted(buckets, key=category_rank)}

    def display_rows(self) -> list[Task]:
        """Tasks in on-screen order: groups by category order, then sorted() order."""
        return [task for tasks in self.grouped().values() for task in tasks]

    def stats(self) -> TaskStats:
        total = len(self._tasks)
        completed = sum(1 for t in self._tasks if t.is_done)
        rate = (completed / total) * 100 if total else 0.0
        return TaskStats(
            total=total,
            completed_count=completed,
            pending_count=total - completed,
            completion_rate=rate,
        )
