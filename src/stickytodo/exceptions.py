# stickytodo/exceptions.py


class StickyError(Exception):
    """Base exception for sticky-todo errors."""
    pass


class StorageError(StickyError):
    """Raised when the database cannot be opened, read or written."""
    pass


class InvariantViolationError(StickyError):
    """Raised when a request would break the shape of the todo forest."""
    pass


class CycleError(InvariantViolationError):
    """Raised when a move would place a todo under itself or its descendants."""
    pass


class PositionOutOfRangeError(InvariantViolationError):
    """Raised when a target position lies outside its sibling group."""
    pass


class InvalidCounterError(InvariantViolationError):
    """Raised when a countdown is armed with a non-positive count."""
    pass
