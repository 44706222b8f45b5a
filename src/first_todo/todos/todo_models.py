# src/first_todo/todos/todo_models.py

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Category(StrEnum):
    """
    Closed set of task categories.

    Member order is the reference display order.
    """

    SHOPPING = "shopping"
    MEETING = "meeting"
    WORKOUT = "workout"
    OTHERS = "others"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @classmethod
    def from_label(cls, raw: str | None) -> Category:
        """Map classifier output (or a stored label) onto a category; unknown -> OTHERS."""
        found = cls.parse(raw)
        return cls.OTHERS if found is None else found

    @classmethod
    def parse(cls, raw: str | None) -> Category | None:
        if not raw:
            return None
        key = " ".join(str(raw).split()).strip().lower()
        return _ALIASES.get(key)


_ICONS: dict[Category, str] = {
    Category.SHOPPING: "🛒",
    Category.MEETING: "📅",
    Category.WORKOUT: "🏋️",
    Category.OTHERS: "",
}

# Legacy builds stored the localized labels.
_ALIASES: dict[str, Category] = {
    "shopping": Category.SHOPPING,
    "쇼핑": Category.SHOPPING,
    "meeting": Category.MEETING,
    "회의": Category.MEETING,
    "workout": Category.WORKOUT,
    "운동": Category.WORKOUT,
    "others": Category.OTHERS,
    "other": Category.OTHERS,
    "기타": Category.OTHERS,
}

CATEGORY_ORDER: tuple[str, ...] = tuple(c.value for c in Category)


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Task:
    """
    A single to-do entry.

    Timestamps are epoch seconds. is_done is the only field mutated after creation.
    """

    id: str
    text: str
    category: Category
    date_added: float
    target_date: float | None = None
    is_done: bool = False

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category.value,
            "isDone": self.is_done,
            "dateAdded": self.date_added,
            "targetDate": self.target_date,
        }

    @classmethod
    def from_record(cls, raw: dict[str, object]) -> Task | None:
        """
        Decode a stored record, tolerating missing optional fields.

        Returns None when the record has no usable id or text.
        """
        task_id = raw.get("id")
        text = raw.get("text")
        if not isinstance(task_id, str) or not task_id.strip():
            return None
        if not isinstance(text, str) or not text.strip():
            return None

        category = raw.get("category")
        return cls(
            id=task_id,
            text=text,
            category=Category.from_label(category if isinstance(category, str) else None),
            date_added=_as_float(raw.get("dateAdded"), 0.0) or 0.0,
            target_date=_as_float(raw.get("targetDate"), None),
            is_done=raw.get("isDone") is True,
        )


def _as_float(value: object, default: float | None) -> float | None:
    """Stored timestamp -> epoch seconds; NaN, inf and out-of-range values give default."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        ts = float(value) if isinstance(value, (int, float)) else float(str(value))
    except (ValueError, OverflowError):
        return default
    if not math.isfinite(ts):
        return default
    try:
        datetime.fromtimestamp(ts)
    except (OverflowError, OSError, ValueError):
        return default
    return ts


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed_count: int
    pending_count: int
    completion_rate: float
