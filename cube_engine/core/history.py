"""
历史模块：状态撤销/重做栈
"""
from typing import List, Optional

from .state import CubeState

MAX_HISTORY_SIZE = 100


class History:
    """Undo/redo stack of CubeState values; pushing clears the redo side."""

    def __init__(self, initial: CubeState, max_size: int = MAX_HISTORY_SIZE):
        self._past: List[CubeState] = []
        self._current = initial
        self._future: List[CubeState] = []
        self.max_size = max_size

    @property
    def current(self) -> CubeState:
        return self._current

    def push(self, state: CubeState):
        self._past.append(self._current)
        if len(self._past) > self.max_size:
            self._past.pop(0)
        self._current = state
        self._future.clear()

    def undo(self) -> Optional[CubeState]:
        if not self._past:
            return None
        self._future.append(self._current)
        self._current = self._past.pop()
        return self._current

    def redo(self) -> Optional[CubeState]:
        if not self._future:
            return None
        self._past.append(self._current)
        self._current = self._future.pop()
        return self._current

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def past_len(self) -> int:
        return len(self._past)

    def future_len(self) -> int:
        return len(self._future)

    def clear(self):
        self._past.clear()
        self._future.clear()

    def reset(self, state: CubeState):
        self.clear()
        self._current = state
