# src/first_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskStore depends on Protocols instead of concrete implementations.
This keeps the classifier/storage/notification backends swappable and makes testing easier.
"""

from typing import Any, Awaitable, Iterable, Protocol, Sequence

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class CategoryClassifier(Protocol):
    """
    Free text -> category label.

    Returns None when no label could be produced. The label is raw classifier
    output; TaskStore normalizes it.
    """

    def classify(self, text: str) -> str | None: ...


class TaskPersistence(Protocol):
    """Durable storage for the whole task collection (save/load only)."""

    def save(self, tasks: Sequence[Any]) -> None: ...
    def load(self) -> list[Any]: ...


class ReminderScheduler(Protocol):
    """
    One-shot local reminders keyed by task id.

    schedule() is fire-and-forget: a second call for the same task id replaces
    the pending reminder instead of adding another one.
    """

    def request_authorization(self) -> bool: ...

    def schedule(self, task_id: str, delay_minutes: int, title: str, body: str) -> None: ...

    def cancel(self, task_id: str) -> bool: ...


class BadgeSink(Protocol):
    """Receives the number of not-done tasks after every mutation."""

    def set_badge_count(self, count: int) -> None: ...


class ReminderNotifier(Protocol):
    """
    Delivery side of reminders: how the dispatcher shows an alert.

    The notifier decides how to present it (console line, desktop popup, ...).
    """

    def notify(self, *, title: str, body: str, task_id: str) -> Awaitable[None]: ...


class ReminderRepo(Protocol):
    # Scheduling API
    def upsert_reminder(self, *, task_id: str, fire_at: float, title: str, body: str) -> None: ...
    def cancel_reminder(self, task_id: str) -> bool: ...

    # Dispatcher API
    def list_due_reminders(self, *, now_ts: float, limit: int = 32) -> list[Any]: ...
    def try_claim_reminder(self, task_id: str) -> bool: ...
    def mark_delivered(self, task_id: str) -> bool: ...
    def reschedule(self, task_id: str, *, fire_at: float) -> bool: ...

    # Housekeeping
    def requeue_stale_claims(self, *, older_than_ts: float) -> int: ...
    def prune_finished(self, *, older_than_ts: float) -> int: ...
