# src/first_todo/reminders/reminder_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ReminderStatus(StrEnum):
    """
    Reminder lifecycle status.

    Notes:
    - "sending" is a claim-lock so a reminder is not delivered twice
      if more than one dispatcher polls the same database.
    """

    PENDING = "pending"
    SENDING = "sending"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def from_db(cls, raw: str | None) -> ReminderStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


@dataclass(slots=True)
class Reminder:
    task_id: str
    status: ReminderStatus
    fire_at: float
    title: str
    body: str
    created_at: float
    updated_at: float
    attempts: int = 0
