"""
打乱模块：可复现的随机打乱
"""
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from .core.config import scramble_length
from .core.moves import Algorithm, Move, apply_algorithm
from .core.notation import format_algorithm
from .core.state import CubeState, Face

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrambleResult:
    algorithm: Algorithm
    state: CubeState

    @property
    def notation(self) -> str:
        return format_algorithm(self.algorithm)


def move_vocabulary(size: int) -> List[Move]:
    """All moves a scramble may draw from: every face, depth 1..N//2, every turn."""
    max_depth = max(1, size // 2) if size >= 4 else 1
    return [Move(face, depth, turns)
            for face in Face
            for depth in range(1, max_depth + 1)
            for turns in (1, 2, 3)]


def scramble(size: int, move_count: Optional[int] = None, seed=None,
             rng: Optional[random.Random] = None) -> ScrambleResult:
    """
    生成打乱
    Args:
        size: 魔方阶数
        move_count: 步数（None 取默认值）
        seed: 随机种子
        rng: 调用方提供的随机源（优先于 seed）
    Returns:
        ScrambleResult（打乱序列 + 打乱后的状态）
    """
    solved = CubeState.solved(size)
    if move_count is None:
        move_count = scramble_length(size)
    if move_count < 0:
        raise ValueError("move_count 不能为负")
    rng = rng if rng is not None else random.Random(seed)
    vocabulary = move_vocabulary(size)
    moves: List[Move] = []
    while len(moves) < move_count:
        move = rng.choice(vocabulary)
        if moves:
            prev = moves[-1]
            if move.face == prev.face or move == prev.inverse():
                continue
        moves.append(move)
    algorithm = Algorithm(tuple(moves))
    logger.debug("scramble %dx%d: %s", size, size, algorithm)
    return ScrambleResult(algorithm, apply_algorithm(solved, algorithm))
