from typing import List, Optional

from .core.config import SolveConfig
from .core.moves import Move
from .core.state import CubeState
from .solver import Solution, solve_detailed

FACE_NAMES = {'U': '上', 'D': '下', 'L': '左', 'R': '右', 'F': '前', 'B': '后'}


def move_to_text(move: Move) -> str:
    face = FACE_NAMES[move.face.name]
    if move.depth > 1:
        face = f"{face}面外 {move.depth} 层"
    else:
        face = f"{face}面"
    if move.turns == 3:
        return f"{face}逆时针90°"
    if move.turns == 2:
        return f"{face}180°"
    return f"{face}顺时针90°"


class Solver:
    """Step-by-step playback of a solution."""

    def __init__(self, config: Optional[SolveConfig] = None):
        self.config = config
        self.solution: Optional[Solution] = None
        self._remaining: List[Move] = []

    def solve(self, state: CubeState) -> List[Move]:
        self.solution = solve_detailed(state, self.config)
        self._remaining = list(self.solution.algorithm.simplified())
        return list(self._remaining)

    def next_move(self) -> Optional[Move]:
        if self._remaining:
            return self._remaining[0]
        return None

    def advance(self):
        if self._remaining:
            self._remaining.pop(0)

    def remaining(self) -> List[Move]:
        return list(self._remaining)

    def is_solved(self) -> bool:
        return not self._remaining

    def reset(self):
        self.solution = None
        self._remaining = []
