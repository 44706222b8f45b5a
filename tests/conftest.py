# tests/conftest.py

from __future__ import annotations

import random
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from first_todo.cli.bootstrap import create_initial_state
from first_todo.core.state import AppState
from first_todo.storage.defaults_store import DefaultsStore
from first_todo.todos.todo_store import TaskStore

from .fakes import FakeBadge, FakeClassifier, FakeClock, FakeReminderScheduler, InMemoryPersistence

# Local wall-clock noon, so "today" is unambiguous regardless of the test machine's timezone.
NOW = datetime(2026, 10, 19, 12, 0, 0).timestamp()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="first-todo-test",
        data_dir=tmp_path,
        defaults_db_path=tmp_path / "defaults.sqlite3",
        reminders_db_path=tmp_path / "reminders.sqlite3",
        classifier_backend="keyword",
        openrouter_api_key=None,
        openrouter_base_url="https://openrouter.ai/api/v1",
        llm_models=[],
        extra_headers={},
        reminder_delay_minutes=5,
        purge_completed_on_start=True,
    )


@pytest.fixture()
def defaults(tmp_path: Path) -> DefaultsStore:
    return DefaultsStore(tmp_path / "defaults.sqlite3")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def classifier() -> FakeClassifier:
    return FakeClassifier(label="shopping")


@pytest.fixture()
def reminders() -> FakeReminderScheduler:
    return FakeReminderScheduler()


@pytest.fixture()
def badge() -> FakeBadge:
    return FakeBadge()


@pytest.fixture()
def persistence() -> InMemoryPersistence:
    return InMemoryPersistence()


@pytest.fixture()
def store(
    persistence: InMemoryPersistence,
    classifier: FakeClassifier,
    reminders: FakeReminderScheduler,
    badge: FakeBadge,
    clock: FakeClock,
) -> TaskStore:
    """TaskStore wired with deterministic fakes (fixed clock, seeded RNG)."""
    return TaskStore(
        persistence=persistence,
        classifier=classifier,
        reminders=reminders,
        badge=badge,
        reminder_delay=5,
        clock=clock,
        rng=random.Random(1234),
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired through the real composition root.

    NOTE: We keep real SQLite stores here (defaults/reminders) because
    their correctness is part of what we want to test.
    """
    return create_initial_state(settings=settings)
