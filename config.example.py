# config.example.py

"""
Documentation-only module (safe to commit).

Homebase reads its settings from HOMEBASE_* environment variables, optionally
loaded from a local .env file (gitignored). Every variable has a default, so
an empty environment runs the console app against .local/homebase/.
"""

ENV_VARS = {
    # App / logging
    "HOMEBASE_APP_NAME": "App display name (default: homebase).",
    "HOMEBASE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "HOMEBASE_FIRST_NAME": "Name used in the greeting (default: none).",
    # Connectors
    "HOMEBASE_CONSOLE_ENABLED": "Run the console REPL after loading (true/false, default: true).",
    # Paths (gitignored)
    "HOMEBASE_DATA_DIR": "Local data directory, also holds homebase.log (default: .local/homebase).",
    "HOMEBASE_STORE_PATH": "SQLite key-value store path (default: <data_dir>/homebase.sqlite3).",
    # Lifecycle tuning
    "HOMEBASE_UNDO_WINDOW_SECONDS": "How long a completion can be undone (default: 6).",
    "HOMEBASE_HYDRATION_TIMEOUT_SECONDS": "Bounded wait for the first load before offering defaults (default: 5).",
    "HOMEBASE_SEED_DEFAULTS": "Seed example On Deck tasks when nothing is stored yet (true/false, default: true).",
}
