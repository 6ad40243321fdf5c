# NOTE/database.py
from stickytodo.config import NOTE_ID
from stickytodo.logging_config import get_logger
from stickytodo.storage import Database

logger = get_logger(__name__)


class NoteStore:
    """The single sticky note, stored as one row keyed by NOTE_ID."""

    def __init__(self, db: Database):
        self.db = db

    def get_note(self) -> str:
        rows = self.db.query("SELECT content FROM notes WHERE id = ?", (NOTE_ID,))
        if not rows or rows[0]["content"] is None:
            return ""
        return rows[0]["content"]

    def save_note(self, content: str) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO notes (id, content) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET content = excluded.content",
                (NOTE_ID, content),
            )
        logger.debug("Saved note (%d chars)", len(content))
