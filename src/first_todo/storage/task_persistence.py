# src/first_todo/storage/task_persistence.py

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from ..todos.todo_models import Task
from .defaults_store import DefaultsStore

logger = logging.getLogger(__name__)

TODO_LIST_KEY = "TodoList"


class DefaultsTaskPersistence:
    """
    Task collection stored as one JSON list under a single defaults key.

    save() never raises; load() treats missing or malformed data as "no tasks".
    Records missing newer fields decode with defaults (see Task.from_record).
    """

    def __init__(self, defaults: DefaultsStore, key: str = TODO_LIST_KEY) -> None:
        self._defaults = defaults
        self._key = key

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            payload = json.dumps([t.to_record() for t in tasks], ensure_ascii=False)
            self._defaults.set(self._key, payload)
        except Exception:
            logger.exception("Failed to save %d task(s) under key=%s", len(tasks), self._key)

    def load(self) -> list[Task]:
        try:
            raw = self._defaults.get(self._key)
        except Exception:
            logger.exception("Failed to read key=%s", self._key)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored task list under key=%s is not valid JSON; ignoring.", self._key)
            return []

        if not isinstance(data, list):
            logger.warning("Stored task list under key=%s is not a list; ignoring.", self._key)
            return []

        out: list[Task] = []
        seen: set[str] = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            task = Task.from_record(item)
            if task is None or task.id in seen:
                continue
            seen.add(task.id)
            out.append(task)

        skipped = len(data) - len(out)
        if skipped:
            logger.info("Skipped %d undecodable task record(s).", skipped)
        logger.debug("Loaded %d task(s) from key=%s", len(out), self._key)
        return out
