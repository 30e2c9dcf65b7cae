from typing import Dict, Optional, Union

from .core.errors import InvalidReason
from .core.history import History
from .core.moves import Algorithm, Move, apply_algorithm
from .core.notation import parse
from .core.state import Color, CubeState, deserialize, serialize
from .core.validation import validate


class Cube:
    """High-level cube wrapper: moves by notation, validation and undo/redo."""

    def __init__(self, size: int = 3, state: Optional[CubeState] = None):
        self.size = size if state is None else state.size
        self.history = History(state if state is not None else CubeState.solved(self.size))

    @classmethod
    def from_record(cls, record) -> "Cube":
        return cls(state=deserialize(record))

    @property
    def state(self) -> CubeState:
        return self.history.current

    def reset(self):
        self.history.reset(CubeState.solved(self.size))

    def set_state(self, state: CubeState):
        if state.size != self.size:
            raise ValueError(f"阶数不一致: {state.size} != {self.size}")
        self.history.push(state)

    def apply(self, moves: Union[str, Move, Algorithm]) -> CubeState:
        if isinstance(moves, str):
            moves = parse(moves, self.size)
        elif isinstance(moves, Move):
            moves = Algorithm.of(moves)
        state = apply_algorithm(self.state, moves)
        self.history.push(state)
        return state

    def undo(self) -> bool:
        return self.history.undo() is not None

    def redo(self) -> bool:
        return self.history.redo() is not None

    def is_solved(self) -> bool:
        return self.state.is_solved()

    def validate(self) -> Optional[InvalidReason]:
        return validate(self.state)

    def is_valid(self) -> bool:
        return self.validate() is None

    def color_counts(self) -> Dict[str, int]:
        return {c.code: n for c, n in self.state.color_counts().items()}

    def to_record(self) -> dict:
        return serialize(self.state)

    def paint(self, face, row: int, col: int, color: Color):
        """Change one sticker, e.g. when correcting a captured face by hand."""
        self.history.push(self.state.with_sticker(face, row, col, color))
