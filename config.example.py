# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep the API key in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "FIRST_TODO_APP_NAME": "App display name (default: first-todo).",
    "FIRST_TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "FIRST_TODO_CONSOLE_ENABLED": "Run the console REPL (true/false). Off => deliver reminders only.",
    # Category classifier
    "FIRST_TODO_CLASSIFIER": "auto | llm | keyword (default: auto => llm when an API key is set).",
    # LLM / OpenRouter
    "FIRST_TODO_OPENROUTER_API_KEY": "OpenRouter API key (OPENROUTER_API_KEY is accepted too).",
    "FIRST_TODO_OPENROUTER_BASE_URL": "OpenAI-compatible base URL (default: https://openrouter.ai/api/v1).",
    "FIRST_TODO_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "FIRST_TODO_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "FIRST_TODO_APP_TITLE": "Optional OpenRouter metadata header title.",
    "FIRST_TODO_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "FIRST_TODO_LLM_READ_TIMEOUT_SECONDS": "Read timeout (default: 15).",
    "FIRST_TODO_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Skip a model that sends nothing for this long (default: 10).",
    # Paths (gitignored)
    "FIRST_TODO_DATA_DIR": "Local data directory (default: .local/first_todo).",
    "FIRST_TODO_DEFAULTS_DB_PATH": "Key-value store with the task list and preferences "
    "(default: <data_dir>/defaults.sqlite3).",
    "FIRST_TODO_REMINDERS_DB_PATH": "Reminder queue SQLite path (default: <data_dir>/reminders.sqlite3).",
    # Tasks / reminders
    "FIRST_TODO_PURGE_COMPLETED_ON_START": "Drop completed tasks at startup (default: true).",
    "FIRST_TODO_REMINDER_DELAY_MINUTES": "Initial reminder delay, 1-1440 (default: 5). /remind overrides it.",
    "FIRST_TODO_REMINDER_POLL_SECONDS": "Reminder dispatcher poll interval (default: 5).",
    "FIRST_TODO_REMINDER_RETRY_SECONDS": "Retry delay after a failed delivery (default: 60).",
}
