# TODO/tree.py
"""
In-memory views over one full read of the todo table.

The engine builds these maps inside its transaction instead of issuing a
query per row when it needs a subtree, an ancestor chain or a cycle check.
"""
from collections import defaultdict
from typing import Dict, List, Optional

from stickytodo.TODO.model import TodoItem

ChildrenMap = Dict[Optional[int], List[TodoItem]]


def build_children_map(todos: List[TodoItem]) -> ChildrenMap:
    """Groups todos by parent_id, each group sorted by position."""
    children_map: ChildrenMap = defaultdict(list)
    for todo in todos:
        children_map[todo.parent_id].append(todo)
    for siblings in children_map.values():
        siblings.sort(key=lambda t: (t.position, t.id if t.id is not None else 0))
    return children_map


def index_by_id(todos: List[TodoItem]) -> Dict[int, TodoItem]:
    return {todo.id: todo for todo in todos}


def descendant_ids(children_map: ChildrenMap, todo_id: int) -> List[int]:
    """All transitive descendants of todo_id, breadth first, excluding itself."""
    found = []
    queue = [todo_id]
    seen = {todo_id}
    while queue:
        current = queue.pop(0)
        for child in children_map.get(current, []):
            if child.id in seen:
                continue
            seen.add(child.id)
            found.append(child.id)
            queue.append(child.id)
    return found


def ancestor_ids(by_id: Dict[int, TodoItem], todo_id: int) -> List[int]:
    """Parent, grandparent, ... up to the root for todo_id."""
    chain = []
    seen = {todo_id}
    current = by_id.get(todo_id)
    while current is not None and current.parent_id is not None:
        if current.parent_id in seen:
            break
        chain.append(current.parent_id)
        seen.add(current.parent_id)
        current = by_id.get(current.parent_id)
    return chain


def would_create_cycle(by_id: Dict[int, TodoItem], todo_id: int, target_parent_id: Optional[int]) -> bool:
    """True if placing todo_id under target_parent_id makes it its own ancestor."""
    if target_parent_id is None:
        return False
    if target_parent_id == todo_id:
        return True
    return todo_id in ancestor_ids(by_id, target_parent_id)
