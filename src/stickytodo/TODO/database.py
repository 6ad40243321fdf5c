# TODO/database.py
import sqlite3
from typing import Callable, Iterable, List, Optional

from stickytodo.exceptions import CycleError, InvalidCounterError, InvariantViolationError, PositionOutOfRangeError
from stickytodo.logging_config import get_logger
from stickytodo.storage import Database
from stickytodo.TODO.model import TodoItem
from stickytodo.TODO.tree import build_children_map, descendant_ids, index_by_id, would_create_cycle

logger = get_logger(__name__)

TODO_COLUMNS = "id, text, completed, parent_id, position, target_count, current_count"

# Keeps IN (...) lists under SQLite's bound-parameter limit
_CHUNK_SIZE = 500

Listener = Callable[[], None]


class TodoStore:
    """
    Durable CRUD over the todo forest.

    Every mutation runs as one transaction on the shared ``Database``. Ids
    that don't exist make a mutation a no-op that returns False. Listeners
    registered with ``subscribe`` are called with no arguments after each
    committed mutation; they are expected to re-read the full list.
    """

    def __init__(self, db: Database):
        self.db = db
        self._listeners: List[Listener] = []

    # --- Reload notifications ---

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Reload listener %r failed", listener)

    # --- Row helpers ---

    @staticmethod
    def _fetch_all(conn: sqlite3.Connection) -> List[TodoItem]:
        rows = conn.execute(f"SELECT {TODO_COLUMNS} FROM todos").fetchall()
        return [TodoItem(**row) for row in rows]

    @staticmethod
    def _fetch_one(conn: sqlite3.Connection, todo_id: int) -> Optional[TodoItem]:
        row = conn.execute(f"SELECT {TODO_COLUMNS} FROM todos WHERE id = ?", (todo_id,)).fetchone()
        return TodoItem(**row) if row else None

    @staticmethod
    def _update_many(conn: sqlite3.Connection, set_clause: str, values: tuple, ids: Iterable[int]) -> None:
        ids = list(ids)
        for start in range(0, len(ids), _CHUNK_SIZE):
            chunk = ids[start:start + _CHUNK_SIZE]
            placeholders = ", ".join("?" for _ in chunk)
            conn.execute(f"UPDATE todos SET {set_clause} WHERE id IN ({placeholders})", values + tuple(chunk))

    @staticmethod
    def _next_position(conn: sqlite3.Connection, parent_id: Optional[int]) -> int:
        """max(position) + 1 among the siblings, or 0 for an empty group."""
        row = conn.execute("SELECT MAX(position) FROM todos WHERE parent_id IS ?", (parent_id,)).fetchone()
        return 0 if row[0] is None else row[0] + 1

    # --- Completion cascade ---

    def _recompute_ancestors(self, conn: sqlite3.Connection, parent_id: Optional[int]) -> None:
        """
        Re-derives completed for parent_id and every ancestor above it.

        A parent is completed iff it has children and all of them are
        completed. A parent left without children keeps whatever value it
        had, and so do the ancestors above it.
        """
        seen = set()
        current = parent_id
        while current is not None and current not in seen:
            seen.add(current)
            total, open_count = conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(CASE WHEN completed THEN 0 ELSE 1 END), 0) "
                "FROM todos WHERE parent_id = ?",
                (current,),
            ).fetchone()
            if total == 0:
                return
            conn.execute("UPDATE todos SET completed = ? WHERE id = ?", (open_count == 0, current))
            row = conn.execute("SELECT parent_id FROM todos WHERE id = ?", (current,)).fetchone()
            current = row["parent_id"] if row else None

    def _apply_completed(self, conn: sqlite3.Connection, todo: TodoItem, completed: bool) -> None:
        """Self, then every descendant, then the ancestor chain."""
        conn.execute("UPDATE todos SET completed = ? WHERE id = ?", (completed, todo.id))
        subtree = descendant_ids(build_children_map(self._fetch_all(conn)), todo.id)
        if subtree:
            self._update_many(conn, "completed = ?", (completed,), subtree)
        self._recompute_ancestors(conn, todo.parent_id)

    # --- Public operations ---

    def read_all(self) -> List[TodoItem]:
        """Every todo, grouped by parent and ordered by position within each group."""
        rows = self.db.query(
            f"SELECT {TODO_COLUMNS} FROM todos "
            "ORDER BY parent_id IS NOT NULL, parent_id, position, id"
        )
        return [TodoItem(**row) for row in rows]

    def get(self, todo_id: int) -> Optional[TodoItem]:
        rows = self.db.query(f"SELECT {TODO_COLUMNS} FROM todos WHERE id = ?", (todo_id,))
        return TodoItem(**rows[0]) if rows else None

    def create(self, text: str, parent_id: Optional[int] = None) -> int:
        """Appends a new todo to the end of its sibling group and returns its id."""
        with self.db.transaction() as conn:
            if parent_id is not None and self._fetch_one(conn, parent_id) is None:
                raise InvariantViolationError(f"Parent todo {parent_id} does not exist.")
            position = self._next_position(conn, parent_id)
            cursor = conn.execute(
                "INSERT INTO todos (text, completed, parent_id, position, target_count, current_count) "
                "VALUES (?, ?, ?, ?, NULL, 0)",
                (text, False, parent_id, position),
            )
            todo_id = cursor.lastrowid
            self._recompute_ancestors(conn, parent_id)
        logger.debug("Created todo %s under %s at position %s", todo_id, parent_id, position)
        self._notify()
        return todo_id

    def update_text(self, todo_id: int, text: str) -> bool:
        with self.db.transaction() as conn:
            cursor = conn.execute("UPDATE todos SET text = ? WHERE id = ?", (text, todo_id))
            changed = cursor.rowcount > 0
        if not changed:
            logger.debug("update_text: todo %s not found", todo_id)
            return False
        self._notify()
        return True

    def delete(self, todo_id: int) -> bool:
        """
        Removes a todo with its whole subtree and closes the gap it leaves
        among its siblings.
        """
        with self.db.transaction() as conn:
            todos = self._fetch_all(conn)
            todo = index_by_id(todos).get(todo_id)
            if todo is None:
                logger.debug("delete: todo %s not found", todo_id)
                return False
            doomed = [todo_id] + descendant_ids(build_children_map(todos), todo_id)
            for start in range(0, len(doomed), _CHUNK_SIZE):
                chunk = doomed[start:start + _CHUNK_SIZE]
                placeholders = ", ".join("?" for _ in chunk)
                conn.execute(f"DELETE FROM todos WHERE id IN ({placeholders})", tuple(chunk))
            conn.execute(
                "UPDATE todos SET position = position - 1 WHERE parent_id IS ? AND position > ?",
                (todo.parent_id, todo.position),
            )
            self._recompute_ancestors(conn, todo.parent_id)
        logger.debug("Deleted todo %s and %d descendant(s)", todo_id, len(doomed) - 1)
        self._notify()
        return True

    def set_completed(self, todo_id: int, completed: bool) -> bool:
        """
        Sets completed on the todo and all its descendants, then re-derives
        every ancestor from its children.
        """
        with self.db.transaction() as conn:
            todo = self._fetch_one(conn, todo_id)
            if todo is None:
                logger.debug("set_completed: todo %s not found", todo_id)
                return False
            self._apply_completed(conn, todo, bool(completed))
        logger.debug("Set todo %s completed=%s", todo_id, bool(completed))
        self._notify()
        return True

    def move(self, todo_id: int, target_parent_id: Optional[int], target_position: int) -> bool:
        """
        Reparents and/or reorders a todo.

        The gap at the source is closed before the gap at the destination is
        opened, so ``target_position`` is the todo's index in the destination
        group after the move. Moving down within the same group therefore
        takes the pre-move index minus one.
        """
        with self.db.transaction() as conn:
            todos = self._fetch_all(conn)
            by_id = index_by_id(todos)
            todo = by_id.get(todo_id)
            if todo is None:
                logger.debug("move: todo %s not found", todo_id)
                return False
            if target_parent_id is not None and target_parent_id not in by_id:
                raise InvariantViolationError(f"Target parent {target_parent_id} does not exist.")
            if would_create_cycle(by_id, todo_id, target_parent_id):
                raise CycleError(f"Cannot move todo {todo_id} under itself or one of its descendants.")
            destination = [t for t in build_children_map(todos).get(target_parent_id, []) if t.id != todo_id]
            if not 0 <= target_position <= len(destination):
                raise PositionOutOfRangeError(
                    f"Position {target_position} is outside 0..{len(destination)} for parent {target_parent_id}."
                )

            # 1. Close the gap in the old sibling group
            conn.execute(
                "UPDATE todos SET position = position - 1 WHERE parent_id IS ? AND position > ?",
                (todo.parent_id, todo.position),
            )
            # 2. Make room in the new sibling group
            conn.execute(
                "UPDATE todos SET position = position + 1 WHERE parent_id IS ? AND position >= ? AND id != ?",
                (target_parent_id, target_position, todo_id),
            )
            # 3. Place the todo
            conn.execute(
                "UPDATE todos SET parent_id = ?, position = ? WHERE id = ?",
                (target_parent_id, target_position, todo_id),
            )

            self._recompute_ancestors(conn, todo.parent_id)
            if target_parent_id != todo.parent_id:
                self._recompute_ancestors(conn, target_parent_id)
        logger.debug("Moved todo %s to parent %s position %s", todo_id, target_parent_id, target_position)
        self._notify()
        return True

    # --- Countdown counters ---

    def set_counter(self, todo_id: int, target_count: Optional[int]) -> bool:
        """
        Arms a countdown of target_count, or clears it when None.

        Arming starts the todo over: current_count is reset and the todo
        (with its subtree) is marked not completed. Clearing leaves
        completed untouched.
        """
        if target_count is not None and target_count < 1:
            raise InvalidCounterError(f"Countdown must be at least 1, got {target_count}.")
        with self.db.transaction() as conn:
            todo = self._fetch_one(conn, todo_id)
            if todo is None:
                logger.debug("set_counter: todo %s not found", todo_id)
                return False
            if target_count is None:
                conn.execute("UPDATE todos SET target_count = NULL, current_count = 0 WHERE id = ?", (todo_id,))
            else:
                conn.execute(
                    "UPDATE todos SET target_count = ?, current_count = ? WHERE id = ?",
                    (target_count, target_count, todo_id),
                )
                self._apply_completed(conn, todo, False)
        logger.debug("Set countdown of todo %s to %s", todo_id, target_count)
        self._notify()
        return True

    def decrement(self, todo_id: int) -> bool:
        """Counts a todo down by one; reaching zero completes it."""
        with self.db.transaction() as conn:
            todo = self._fetch_one(conn, todo_id)
            if todo is None or not todo.has_counter:
                logger.debug("decrement: todo %s not found or has no countdown", todo_id)
                return False
            remaining = max(todo.current_count - 1, 0)
            conn.execute("UPDATE todos SET current_count = ? WHERE id = ?", (remaining, todo_id))
            if remaining <= 0:
                self._apply_completed(conn, todo, True)
        logger.debug("Decremented todo %s to %s", todo_id, remaining)
        self._notify()
        return True

    def reset_all(self) -> int:
        """Unchecks every todo and re-arms every countdown. Returns the number of rows touched."""
        with self.db.transaction() as conn:
            cursor = conn.execute("UPDATE todos SET completed = 0, current_count = COALESCE(target_count, 0)")
            count = cursor.rowcount
        logger.debug("Reset %d todo(s)", count)
        self._notify()
        return count
