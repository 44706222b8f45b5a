# src/first_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Every path lives under a local (gitignored) data directory by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

ENV_PREFIX = "FIRST_TODO"

CLASSIFIER_BACKENDS = ("auto", "llm", "keyword")

REMINDER_DELAY_MIN = 1
REMINDER_DELAY_MAX = 1440
REMINDER_DELAY_DEFAULT = 5


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def clamp_reminder_delay(minutes: int) -> int:
    return max(REMINDER_DELAY_MIN, min(REMINDER_DELAY_MAX, int(minutes)))


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- LLM / OpenRouter (category classifier) ----
    openrouter_api_key: Optional[str]
    openrouter_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]
    classifier_backend: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    defaults_db_path: Path
    reminders_db_path: Path

    # ---- Tasks / reminders ----
    purge_completed_on_start: bool
    reminder_delay_minutes: int
    reminder_poll_seconds: float
    reminder_retry_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="first-todo") or "first-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        http_referer = _env(_k("HTTP_REFERER"), "https://example.com")
        title = _env(_k("APP_TITLE"), app_name)

        extra_headers = {
            "HTTP-Referer": http_referer,
            "X-Title": title,
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "qwen/qwen-2.5-72b-instruct:free",
                "deepseek/deepseek-chat-v3-0324:free",
            ],
        )

        classifier_backend = _env(_k("CLASSIFIER"), "auto").strip().lower()
        if classifier_backend not in CLASSIFIER_BACKENDS:
            classifier_backend = "auto"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/first_todo"))
        defaults_db_path = _env_path(_k("DEFAULTS_DB_PATH"), data_dir / "defaults.sqlite3")
        reminders_db_path = _env_path(_k("REMINDERS_DB_PATH"), data_dir / "reminders.sqlite3")

        purge_completed_on_start = _env_bool(_k("PURGE_COMPLETED_ON_START"), True)
        reminder_delay_minutes = clamp_reminder_delay(
            _env_int(_k("REMINDER_DELAY_MINUTES"), REMINDER_DELAY_DEFAULT)
        )
        reminder_poll_seconds = _env_float(_k("REMINDER_POLL_SECONDS"), 5.0)
        reminder_retry_seconds = _env_float(_k("REMINDER_RETRY_SECONDS"), 60.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            classifier_backend=classifier_backend,
            data_dir=data_dir,
            defaults_db_path=defaults_db_path,
            reminders_db_path=reminders_db_path,
            purge_completed_on_start=purge_completed_on_start,
            reminder_delay_minutes=reminder_delay_minutes,
            reminder_poll_seconds=reminder_poll_seconds,
            reminder_retry_seconds=reminder_retry_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
