# config.example.py

"""
Documentation-only module (safe to commit).

Process-level configuration is loaded from environment variables (optionally via a local .env file).
Launch behaviour lives in JSON settings files; see SETTINGS_KEYS below.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "INNERLOOP_APP_NAME": "App display name (default: innerloop).",
    "INNERLOOP_LOG_LEVEL": "Console logging level (default: INFO).",
    "INNERLOOP_DATA_DIR": "Local data dir for logs and default user settings (default: .local/innerloop).",
    # Settings layers
    "INNERLOOP_USER_SETTINGS": "User-level settings JSON (default: <data dir>/settings.json).",
    "INNERLOOP_WORKSPACE_FILE": "Group file: {\"folders\": [{\"path\": ...}], \"settings\": {...}}.",
    "INNERLOOP_FOLDERS": "Folders to open, os.pathsep separated (default: group file folders, else cwd).",
    "INNERLOOP_FOLDER_SETTINGS_NAME": "Per-folder settings file (default: .innerloop/settings.json).",
    "INNERLOOP_FOLDER_TASKS_NAME": "Per-folder tasks file (default: .innerloop/tasks.json).",
    # Connectors
    "INNERLOOP_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
}

SETTINGS_KEYS = {
    "default_url": "Absolute http(s) URL to open (no default).",
    "auto_open_delay": "Delay in ms before opening after a matched task start (default: 0).",
    "availability_check": "Connect to the URL's host before opening (default: true).",
    "availability_check_timeout": "How long to keep trying, in ms (default: 1000).",
    "editor_column": "Where to place the browser: active, beside, one..nine (default: beside).",
    "task_monitoring_mode": "matching | all (default: matching).",
    "monitored_tasks": "List of criteria objects matched against tasks (default: []).",
    "matched_task_behavior": "none | onetime | everytime (default: onetime).",
}
