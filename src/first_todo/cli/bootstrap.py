# src/first_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (storage, classifier, reminders) into TaskStore and AppState.
"""

from __future__ import annotations

import logging

from ..classify.keyword_classifier import KeywordCategoryClassifier
from ..classify.llm_classifier import LLMCategoryClassifier
from ..config import get_settings
from ..core.ports import CategoryClassifier
from ..core.state import AppState, CountingBadge
from ..llm.client import OpenRouterLLMClient, friendly_llm_error_message
from ..reminders.reminder_scheduler import LocalReminderScheduler
from ..reminders.reminder_store import ReminderStore
from ..storage.defaults_store import DefaultsStore
from ..storage.preferences import Preferences
from ..storage.task_persistence import DefaultsTaskPersistence
from ..todos.todo_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.defaults_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.reminders_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_classifier(settings) -> tuple[CategoryClassifier, str]:
    """
    Pick the classifier backend from settings.classifier_backend:
    - "keyword": offline keyword table
    - "llm":     LLM classifier (falls back to keyword if the client cannot be built)
    - "auto":    LLM when an API key is configured, else keyword
    """
    backend = str(getattr(settings, "classifier_backend", "auto") or "auto").lower()
    has_key = bool((getattr(settings, "openrouter_api_key", None) or "").strip())

    if backend == "llm" or (backend == "auto" and has_key):
        try:
            return LLMCategoryClassifier(OpenRouterLLMClient(settings)), "llm"
        except RuntimeError as e:
            logger.warning("LLM classifier unavailable: %s", friendly_llm_error_message(e))

    return KeywordCategoryClassifier(), "keyword"


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    defaults = DefaultsStore(settings.defaults_db_path)
    preferences = Preferences(defaults, default_delay=settings.reminder_delay_minutes)
    reminder_store = ReminderStore(settings.reminders_db_path)
    classifier, classifier_name = build_classifier(settings)
    badge = CountingBadge()

    store = TaskStore(
        persistence=DefaultsTaskPersistence(defaults),
        classifier=classifier,
        reminders=LocalReminderScheduler(reminder_store),
        badge=badge,
        reminder_delay=preferences.reminder_delay_minutes,
        purge_on_start=settings.purge_completed_on_start,
    )

    return AppState(
        settings=settings,
        store=store,
        preferences=preferences,
        reminder_store=reminder_store,
        badge=badge,
        classifier_name=classifier_name,
    )
