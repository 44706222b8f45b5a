# tests/test_config.py

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from first_todo.config import Settings, clamp_reminder_delay
from first_todo.llm.client import OpenRouterLLMClient, friendly_llm_error_message

_VARS = (
    "FIRST_TODO_CLASSIFIER",
    "FIRST_TODO_DATA_DIR",
    "FIRST_TODO_DEFAULTS_DB_PATH",
    "FIRST_TODO_REMINDERS_DB_PATH",
    "FIRST_TODO_REMINDER_DELAY_MINUTES",
    "FIRST_TODO_PURGE_COMPLETED_ON_START",
    "FIRST_TODO_LLM_MODELS",
    "FIRST_TODO_OPENROUTER_API_KEY",
    "OPENROUTER_API_KEY",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.classifier_backend == "auto"
    assert s.openrouter_api_key is None
    assert s.reminder_delay_minutes == 5
    assert s.purge_completed_on_start is True
    assert s.defaults_db_path == s.data_dir / "defaults.sqlite3"
    assert s.llm_models


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("FIRST_TODO_CLASSIFIER", "Keyword")
    clean_env.setenv("FIRST_TODO_DATA_DIR", str(tmp_path))
    clean_env.setenv("FIRST_TODO_REMINDER_DELAY_MINUTES", "99999")
    clean_env.setenv("FIRST_TODO_PURGE_COMPLETED_ON_START", "off")
    clean_env.setenv("FIRST_TODO_LLM_MODELS", "a/one, b/two")
    clean_env.setenv("OPENROUTER_API_KEY", "sk-test")

    s = Settings.from_env()

    assert s.classifier_backend == "keyword"
    assert s.reminders_db_path == tmp_path / "reminders.sqlite3"
    assert s.reminder_delay_minutes == 1440
    assert s.purge_completed_on_start is False
    assert s.llm_models == ["a/one", "b/two"]
    assert s.openrouter_api_key == "sk-test"


def test_unknown_classifier_falls_back_to_auto(clean_env) -> None:
    clean_env.setenv("FIRST_TODO_CLASSIFIER", "magic")
    assert Settings.from_env().classifier_backend == "auto"


@pytest.mark.parametrize(("value", "expected"), [(-3, 1), (0, 1), (5, 5), (1440, 1440), (2000, 1440)])
def test_clamp_reminder_delay(value: int, expected: int) -> None:
    assert clamp_reminder_delay(value) == expected


def test_llm_client_requires_key_and_base_url(clean_env) -> None:
    s = Settings.from_env()
    with pytest.raises(RuntimeError) as excinfo:
        OpenRouterLLMClient(s)
    assert "missing API key" in friendly_llm_error_message(excinfo.value)


def test_llm_client_with_empty_model_list_fails_on_use(clean_env) -> None:
    clean_env.setenv("OPENROUTER_API_KEY", "sk-test")
    client = OpenRouterLLMClient(replace(Settings.from_env(), llm_models=[]))

    with pytest.raises(RuntimeError) as excinfo:
        list(client.stream_chat([{"role": "user", "content": "hi"}], "system"))
    assert "no models" in friendly_llm_error_message(excinfo.value)
