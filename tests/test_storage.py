# tests/test_storage.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from first_todo.cli.bootstrap import create_initial_state
from first_todo.cli.commands import registry
from first_todo.storage.defaults_store import DefaultsStore
from first_todo.storage.preferences import REMINDER_TIME_KEY, Preferences
from first_todo.storage.task_persistence import TODO_LIST_KEY, DefaultsTaskPersistence
from first_todo.todos.todo_models import Category, Task


@pytest.fixture()
def sample_tasks() -> list[Task]:
    return [
        Task(id="t1", text="buy milk", category=Category.SHOPPING, date_added=100.0, target_date=200.0),
        Task(id="t2", text="standup", category=Category.MEETING, date_added=150.5, is_done=True),
        Task(id="t3", text="운동하기", category=Category.WORKOUT, date_added=175.0),
    ]


# ---- DefaultsStore ----


def test_defaults_set_get_delete(defaults: DefaultsStore) -> None:
    assert defaults.get("missing") is None

    defaults.set("k", "v1")
    defaults.set("k", "v2")
    defaults.set("other", "x")

    assert defaults.get("k") == "v2"
    assert defaults.keys() == ["k", "other"]
    assert defaults.delete("k") is True
    assert defaults.delete("k") is False
    assert defaults.get("k") is None


def test_defaults_survive_reopen(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "defaults.sqlite3"
    DefaultsStore(db).set("k", "v")
    assert DefaultsStore(db).get("k") == "v"


# ---- task persistence ----


def test_round_trip(defaults: DefaultsStore, sample_tasks: list[Task]) -> None:
    persistence = DefaultsTaskPersistence(defaults)
    persistence.save(sample_tasks)
    assert persistence.load() == sample_tasks


def test_load_without_prior_data_is_empty(defaults: DefaultsStore) -> None:
    assert DefaultsTaskPersistence(defaults).load() == []


def test_saved_layout_is_single_key_json_list(defaults: DefaultsStore, sample_tasks: list[Task]) -> None:
    DefaultsTaskPersistence(defaults).save(sample_tasks)

    data = json.loads(defaults.get(TODO_LIST_KEY))

    assert [r["id"] for r in data] == ["t1", "t2", "t3"]
    assert set(data[0]) == {"id", "text", "category", "isDone", "dateAdded", "targetDate"}
    assert data[2]["text"] == "운동하기"


@pytest.mark.parametrize("raw", ["not json", "{\"id\": 1}", "42", ""])
def test_malformed_data_is_treated_as_absent(defaults: DefaultsStore, raw: str) -> None:
    defaults.set(TODO_LIST_KEY, raw)
    assert DefaultsTaskPersistence(defaults).load() == []


def test_load_tolerates_missing_fields_and_skips_bad_records(defaults: DefaultsStore) -> None:
    defaults.set(
        TODO_LIST_KEY,
        json.dumps(
            [
                {"id": "a", "text": "legacy", "category": "쇼핑", "dateAdded": 5},
                "garbage",
                {"id": "b"},
                {"id": "a", "text": "duplicate"},
                {"id": "c", "text": "done", "isDone": True, "targetDate": 9.5},
            ]
        ),
    )

    tasks = DefaultsTaskPersistence(defaults).load()

    assert [t.id for t in tasks] == ["a", "c"]
    assert tasks[0].category is Category.SHOPPING
    assert tasks[0].is_done is False
    assert tasks[0].target_date is None
    assert tasks[1].target_date == 9.5


def test_save_failure_is_swallowed(defaults: DefaultsStore, sample_tasks: list[Task], monkeypatch) -> None:
    def boom(key: str, value: str) -> None:
        raise OSError("read-only filesystem")

    monkeypatch.setattr(defaults, "set", boom)
    DefaultsTaskPersistence(defaults).save(sample_tasks)


# ---- preferences ----


def test_reminder_delay_defaults_and_persists(defaults: DefaultsStore) -> None:
    prefs = Preferences(defaults, default_delay=5)
    assert prefs.reminder_delay_minutes() == 5

    assert prefs.set_reminder_delay_minutes(30) == 30
    assert Preferences(defaults).reminder_delay_minutes() == 30
    assert defaults.get(REMINDER_TIME_KEY) == "30"


@pytest.mark.parametrize("value", [0, -5, 1441])
def test_reminder_delay_rejects_out_of_range(defaults: DefaultsStore, value: int) -> None:
    prefs = Preferences(defaults)
    with pytest.raises(ValueError):
        prefs.set_reminder_delay_minutes(value)
    assert prefs.reminder_delay_minutes() == 5


@pytest.mark.parametrize(("stored", "expected"), [("5.0", 5), ("9999", 1440), ("0", 1), ("abc", 7)])
def test_reminder_delay_tolerates_stored_values(defaults: DefaultsStore, stored: str, expected: int) -> None:
    defaults.set(REMINDER_TIME_KEY, stored)
    assert Preferences(defaults, default_delay=7).reminder_delay_minutes() == expected


def test_reminder_delay_is_independent_of_task_list(defaults: DefaultsStore, sample_tasks: list[Task]) -> None:
    prefs = Preferences(defaults)
    prefs.set_reminder_delay_minutes(15)
    DefaultsTaskPersistence(defaults).save([])
    assert prefs.reminder_delay_minutes() == 15


def test_unusable_timestamps_load_as_absent_and_still_list(settings) -> None:
    DefaultsStore(settings.defaults_db_path).set(
        TODO_LIST_KEY,
        '[{"id": "a", "text": "far future", "targetDate": 1e20},'
        ' {"id": "b", "text": "not a number", "targetDate": NaN, "dateAdded": Infinity},'
        ' {"id": "c", "text": "huge int", "dateAdded": 1' + "0" * 400 + "}]",
    )

    state = create_initial_state(settings=settings)

    assert [t.target_date for t in state.store.tasks] == [None, None, None]
    assert [t.date_added for t in state.store.tasks] == [0.0, 0.0, 0.0]

    listing = registry.handle(state, "/list")
    assert "far future" in listing
    assert "not a number" in listing
    assert registry.handle(state, "/today on").endswith("No tasks (today).")
