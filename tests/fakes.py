# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from first_todo.core.ports import ChatMessage
from first_todo.todos.todo_models import Task


class FakeLLMClient:
    """
    Deterministic LLM client for unit tests.

    - Captures calls for assertions
    - Yields a predefined text as a single chunk (or raises)
    """

    def __init__(self, next_text: str = "others", error: Exception | None = None) -> None:
        self.next_text = next_text
        self.error = error
        self.calls: list[tuple[list[ChatMessage], str]] = []

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        self.calls.append((messages, system_prompt))
        if self.error is not None:
            raise self.error
        yield self.next_text


class FakeClassifier:
    """Returns a fixed label (or raises) and records every text it saw."""

    def __init__(self, label: str | None = None, error: Exception | None = None) -> None:
        self.label = label
        self.error = error
        self.calls: list[str] = []

    def classify(self, text: str) -> str | None:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.label


@dataclass(slots=True)
class ScheduledReminder:
    task_id: str
    delay_minutes: int
    title: str
    body: str


@dataclass
class FakeReminderScheduler:
    scheduled: list[ScheduledReminder] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)
    authorization_requests: int = 0
    fail: bool = False

    def request_authorization(self) -> bool:
        self.authorization_requests += 1
        return True

    def schedule(self, task_id: str, delay_minutes: int, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification backend down")
        self.scheduled.append(ScheduledReminder(task_id, delay_minutes, title, body))

    def cancel(self, task_id: str) -> bool:
        self.cancelled.append(task_id)
        return True


@dataclass
class FakeBadge:
    counts: list[int] = field(default_factory=list)

    def set_badge_count(self, count: int) -> None:
        self.counts.append(count)

    @property
    def last(self) -> int | None:
        return self.counts[-1] if self.counts else None


class InMemoryPersistence:
    """TaskPersistence keeping snapshots of every save (copies, not live objects)."""

    def __init__(self, tasks: Sequence[Task] = (), *, fail_save: bool = False, fail_load: bool = False) -> None:
        self.stored: list[dict[str, object]] = [t.to_record() for t in tasks]
        self.saves: list[list[dict[str, object]]] = []
        self.fail_save = fail_save
        self.fail_load = fail_load

    def save(self, tasks: Sequence[Task]) -> None:
        if self.fail_save:
            raise OSError("disk full")
        self.stored = [t.to_record() for t in tasks]
        self.saves.append(list(self.stored))

    def load(self) -> list[Task]:
        if self.fail_load:
            raise OSError("unreadable")
        out: list[Task] = []
        for record in self.stored:
            task = Task.from_record(record)
            if task is not None:
                out.append(task)
        return out


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass(slots=True)
class Notification:
    title: str
    body: str
    task_id: str


@dataclass(slots=True)
class FakeNotifier:
    """
    Fake ReminderNotifier used by dispatcher tests.
    """

    sent: list[Notification] = field(default_factory=list)
    fail_times: int = 0

    async def notify(self, *, title: str, body: str, task_id: str) -> None:
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("notifier unavailable")
        self.sent.append(Notification(title=title, body=body, task_id=task_id))
