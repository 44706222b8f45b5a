# src/first_todo/storage/preferences.py

from __future__ import annotations

import logging

from ..config import REMINDER_DELAY_DEFAULT, REMINDER_DELAY_MAX, REMINDER_DELAY_MIN, clamp_reminder_delay
from .defaults_store import DefaultsStore

logger = logging.getLogger(__name__)

REMINDER_TIME_KEY = "reminderTime"


class Preferences:
    """User-adjustable settings persisted next to (but independently of) the task list."""

    def __init__(self, defaults: DefaultsStore, *, default_delay: int = REMINDER_DELAY_DEFAULT) -> None:
        self._defaults = defaults
        self._default_delay = clamp_reminder_delay(default_delay)

    def reminder_delay_minutes(self) -> int:
        try:
            raw = self._defaults.get(REMINDER_TIME_KEY)
        except Exception:
            logger.exception("Failed to read %s; using default.", REMINDER_TIME_KEY)
            return self._default_delay

        if raw is None:
            return self._default_delay
        try:
            # Older builds stored a slider value like "5.0".
            return clamp_reminder_delay(int(float(raw)))
        except (ValueError, OverflowError):
            logger.warning("Malformed %s=%r; using default.", REMINDER_TIME_KEY, raw)
            return self._default_delay

    def set_reminder_delay_minutes(self, minutes: int) -> int:
        value = int(minutes)
        if not REMINDER_DELAY_MIN <= value <= REMINDER_DELAY_MAX:
            raise ValueError(
                f"reminder delay must be between {REMINDER_DELAY_MIN} and {REMINDER_DELAY_MAX} minutes"
            )
        self._defaults.set(REMINDER_TIME_KEY, str(value))
        logger.info("Reminder delay set to %d minute(s).", value)
        return value
