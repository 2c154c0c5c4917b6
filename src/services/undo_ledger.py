"""LIFO stack of reversible booking actions."""

from src.models.reservation import UndoAction


class UndoLedger:
    """Last-in-first-out record of bookings that can still be undone."""

    def __init__(self):
        self._actions: list[UndoAction] = []

    def __len__(self) -> int:
        return len(self._actions)

    def __bool__(self) -> bool:
        return bool(self._actions)

    def push(self, action: UndoAction) -> None:
        self._actions.append(action)

    def pop(self) -> UndoAction | None:
        """Take the most recent action, or None when nothing is left."""
        if not self._actions:
            return None
        return self._actions.pop()

    def peek(self) -> UndoAction | None:
        return self._actions[-1] if self._actions else None
