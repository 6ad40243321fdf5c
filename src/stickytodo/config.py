# stickytodo/config.py
import os
from pathlib import Path

import typer

APP_NAME = "sticky-todo"
DATABASE_NAME = "sticky_notes.db"
DB_ENV_VAR = "STICKY_DB"

NOTE_ID = 1

REMINDER_TITLE = "⏰ Sticky ToDo"
REMINDER_TIMEOUT = 10


def default_database_path() -> Path:
    """Returns the database path, honouring the STICKY_DB environment variable."""
    override = os.environ.get(DB_ENV_VAR)
    if override:
        return Path(override)
    return Path(typer.get_app_dir(APP_NAME)) / DATABASE_NAME
