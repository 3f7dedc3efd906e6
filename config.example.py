# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See .env.example for a ready-to-copy template.

Every path defaults to a location under TASKBOARD_DATA_DIR, so moving the whole
board usually means setting that single variable.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: WARNING). The log file is always DEBUG.",
    "TASKBOARD_PROMPT": "REPL prompt (default: 'boards> ').",
    # Paths
    "TASKBOARD_DATA_DIR": "Local data directory (default: ~/.taskboard).",
    "TASKBOARD_TASKS_DIR": "One JSON file per task (default: <data_dir>/tasks).",
    "TASKBOARD_SUBTASKS_DIR": "One JSON file per subtask (default: <data_dir>/subtasks).",
    "TASKBOARD_BOARD_PATH": "Swimlane membership (default: <data_dir>/boards.json).",
    "TASKBOARD_LINKS_PATH": "Task -> subtasks links (default: <data_dir>/tasks_link.json).",
    "TASKBOARD_NOTES_PATH": "Free-text notes per id (default: <data_dir>/notes.json).",
    "TASKBOARD_LOG_DIR": "Directory for taskboard.log (default: <data_dir>/logs).",
    # Ids
    "TASKBOARD_ID_DIGITS": "Digits in TASK-/SUBTASK- ids, taken from the millisecond clock (default: 5).",
}
