# TODO/model.py
from dataclasses import dataclass
from typing import Optional


@dataclass
class TodoItem:
    text: str
    completed: bool = False
    parent_id: Optional[int] = None  # None: root level
    position: int = 0                # 0-based index among siblings
    target_count: Optional[int] = None  # None: plain checkbox, no countdown
    current_count: int = 0
    id: Optional[int] = None

    # SQLite hands booleans back as 0/1 and legacy rows may carry NULL counters
    def __post_init__(self):
        self.completed = bool(self.completed)
        if self.current_count is None:
            self.current_count = 0
        if self.position is None:
            self.position = 0

    @property
    def has_counter(self) -> bool:
        return self.target_count is not None

    def __repr__(self):
        return (f"TodoItem(id={self.id}, text='{self.text}', completed={self.completed}, "
                f"parent_id={self.parent_id}, position={self.position}, "
                f"target_count={self.target_count}, current_count={self.current_count})")

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "parent_id": self.parent_id,
            "position": self.position,
            "target_count": self.target_count,
            "current_count": self.current_count,
        }
