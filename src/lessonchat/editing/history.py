"""Bounded undo/redo history of block sequences."""

from typing import Optional

from lessonchat.models.block import Block

Snapshot = tuple[Block, ...]


class EditHistory:
    """Undo and redo stacks of full block sequences.

    Blocks are immutable, so a snapshot is just a tuple of references.
    The undo stack holds at most ``limit`` entries; pushing past the limit
    discards the oldest entry.

    Example:
        >>> history = EditHistory(limit=20)
        >>> history.record(document.blocks)   # before mutating
        >>> previous = history.undo(current_blocks)
    """

    def __init__(self, limit: int = 20):
        self.limit = limit
        self._undo: list[Snapshot] = []
        self._redo: list[Snapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def record(self, snapshot: Snapshot) -> None:
        """Push the pre-mutation state and clear the redo stack."""
        self._undo.append(tuple(snapshot))
        if len(self._undo) > self.limit:
            del self._undo[: len(self._undo) - self.limit]
        self._redo.clear()

    def undo(self, current: Snapshot) -> Optional[Snapshot]:
        """Step back one state.

        Args:
            current: State being left (pushed onto the redo stack)

        Returns:
            State to restore, or None if there is nothing to undo
        """
        if not self._undo:
            return None
        self._redo.append(tuple(current))
        return self._undo.pop()

    def redo(self, current: Snapshot) -> Optional[Snapshot]:
        """Step forward one state (mirror of undo)."""
        if not self._redo:
            return None
        self._undo.append(tuple(current))
        if len(self._undo) > self.limit:
            del self._undo[: len(self._undo) - self.limit]
        return self._redo.pop()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
