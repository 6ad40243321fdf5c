# stickytodo/commands.py
"""
The command surface the UI talks to.

Each command maps to one store operation. Failures are logged and turned
into default values (an empty note, an empty list, 0 or False) so the UI
can keep running on whatever it last showed.
"""
from pathlib import Path
from typing import Callable, List, Optional, Union

from stickytodo.exceptions import StickyError
from stickytodo.logging_config import get_logger
from stickytodo.NOTE.database import NoteStore
from stickytodo.storage import Database
from stickytodo.TODO.database import TodoStore
from stickytodo.TODO.model import TodoItem

logger = get_logger(__name__)
frontend_logger = get_logger("stickytodo.frontend")


class Commands:
    def __init__(self, path: Optional[Union[str, Path]] = None, db: Optional[Database] = None):
        self.db = db if db is not None else Database(path)
        self.notes = NoteStore(self.db)
        self.todos = TodoStore(self.db)

    def init(self) -> bool:
        """Opens the database and creates the tables. False if storage is unavailable."""
        try:
            self.db.connect()
            return True
        except StickyError as e:
            logger.error("Could not initialise storage: %s", e)
            return False

    def close(self) -> None:
        self.db.close()

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Registers a callable that is told to reload the list after every mutation."""
        self.todos.subscribe(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        self.todos.unsubscribe(listener)

    # --- Note ---

    def load_note(self) -> str:
        try:
            return self.notes.get_note()
        except StickyError as e:
            logger.error("load_note failed: %s", e)
            return ""

    def save_note_content(self, content: str) -> bool:
        try:
            self.notes.save_note(content)
            return True
        except StickyError as e:
            logger.error("save_note_content failed: %s", e)
            return False

    # --- Todos ---

    def load_todos(self) -> List[TodoItem]:
        try:
            return self.todos.read_all()
        except StickyError as e:
            logger.error("load_todos failed: %s", e)
            return []

    def find_todo(self, todo_id: int) -> Optional[TodoItem]:
        try:
            return self.todos.get(todo_id)
        except StickyError as e:
            logger.error("find_todo failed: %s", e)
            return None

    def add_todo_item(self, text: str, parent_id: Optional[int] = None) -> int:
        """Returns the new id, or 0 when the todo could not be created."""
        try:
            return self.todos.create(text, parent_id)
        except StickyError as e:
            logger.warning("add_todo_item failed: %s", e)
            return 0

    def update_todo_status(self, todo_id: int, completed: bool) -> bool:
        return self._run("update_todo_status", self.todos.set_completed, todo_id, completed)

    def update_todo_text(self, todo_id: int, text: str) -> bool:
        return self._run("update_todo_text", self.todos.update_text, todo_id, text)

    def remove_todo_item(self, todo_id: int) -> bool:
        return self._run("remove_todo_item", self.todos.delete, todo_id)

    def move_todo_item(self, todo_id: int, target_parent_id: Optional[int], target_position: int) -> bool:
        return self._run("move_todo_item", self.todos.move, todo_id, target_parent_id, target_position)

    def set_todo_count(self, todo_id: int, count: Optional[int]) -> bool:
        return self._run("set_todo_count", self.todos.set_counter, todo_id, count)

    def decrement_todo(self, todo_id: int) -> bool:
        return self._run("decrement_todo", self.todos.decrement, todo_id)

    def reset_all_todos(self) -> bool:
        try:
            self.todos.reset_all()
            return True
        except StickyError as e:
            logger.error("reset_all_todos failed: %s", e)
            return False

    def log_message(self, msg: str) -> None:
        frontend_logger.info("[FRONTEND] %s", msg)

    def _run(self, name: str, operation: Callable[..., bool], *args) -> bool:
        try:
            return operation(*args)
        except StickyError as e:
            logger.warning("%s%r failed: %s", name, args, e)
            return False
