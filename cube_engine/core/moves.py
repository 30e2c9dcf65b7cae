"""
转动模块：纯函数式的层转动、宽层转动、整体转体与中层转动
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .state import CubeState, Face

# 每个面的外法向量（x 向右, y 向上, z 向前）
FACE_NORMALS = {
    Face.U: (0, 1, 0),
    Face.R: (1, 0, 0),
    Face.F: (0, 0, 1),
    Face.D: (0, -1, 0),
    Face.L: (-1, 0, 0),
    Face.B: (0, 0, -1),
}

TURN_SUFFIX = {1: "", 2: "2", 3: "'"}


@dataclass(frozen=True)
class Move:
    """
    一次转动
    Args:
        face: 转动所朝向的面
        depth: 从该面数起转动的层数（1 为外层, >1 为宽层转动）
        turns: 1=顺时针90°, 2=180°, 3=逆时针90°
    """
    face: Face
    depth: int = 1
    turns: int = 1

    def __post_init__(self):
        object.__setattr__(self, 'face', Face(self.face))
        if self.turns not in (1, 2, 3):
            raise ValueError(f"turns 必须是 1, 2 或 3: {self.turns}")
        if self.depth < 1:
            raise ValueError(f"depth 必须 >= 1: {self.depth}")

    @property
    def is_quarter(self) -> bool:
        return self.turns != 2

    def inverse(self) -> "Move":
        return Move(self.face, self.depth, 4 - self.turns)

    def __str__(self) -> str:
        name = self.face.name
        if self.depth == 2:
            name += "w"
        elif self.depth > 2:
            name = f"{self.depth}{name}w"
        return name + TURN_SUFFIX[self.turns]


@dataclass(frozen=True)
class Algorithm:
    """An ordered, immutable sequence of moves."""
    moves: Tuple[Move, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'moves', tuple(self.moves))

    @classmethod
    def of(cls, *moves: Move) -> "Algorithm":
        return cls(tuple(moves))

    def __add__(self, other: "Algorithm") -> "Algorithm":
        if isinstance(other, Move):
            return Algorithm(self.moves + (other,))
        if not isinstance(other, Algorithm):
            return NotImplemented
        return Algorithm(self.moves + other.moves)

    def __len__(self) -> int:
        return len(self.moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self.moves)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return Algorithm(self.moves[item])
        return self.moves[item]

    def __bool__(self) -> bool:
        return bool(self.moves)

    def __str__(self) -> str:
        return " ".join(str(m) for m in self.moves)

    def inverse(self) -> "Algorithm":
        return Algorithm(tuple(m.inverse() for m in reversed(self.moves)))

    def repeat(self, count: int) -> "Algorithm":
        return Algorithm(self.moves * count)

    def simplified(self) -> "Algorithm":
        """合并相邻的同面同层转动, 删除抵消为零的转动"""
        stack: List[Move] = []
        for move in self.moves:
            if stack and stack[-1].face == move.face and stack[-1].depth == move.depth:
                turns = (stack[-1].turns + move.turns) % 4
                stack.pop()
                if turns:
                    stack.append(Move(move.face, move.depth, turns))
            else:
                stack.append(move)
        return Algorithm(tuple(stack))

    def equivalent(self, other: "Algorithm", size: Optional[int] = None) -> bool:
        """
        Cancellation-aware equality. With ``size`` the two algorithms are
        compared by their effect on a cube of that size.
        """
        if size is not None:
            return np.array_equal(algorithm_permutation(size, self),
                                  algorithm_permutation(size, other))
        return self.simplified().moves == other.simplified().moves

    def relabel(self, mapping: Dict[Face, Face]) -> "Algorithm":
        return Algorithm(tuple(Move(mapping.get(m.face, m.face), m.depth, m.turns)
                               for m in self.moves))


AlgorithmLike = Union[Algorithm, Sequence[Move]]


# --- 贴纸几何 ---
@lru_cache(maxsize=None)
def sticker_geometry(size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Returns (positions, normals), each of shape (6*N*N, 3) in flat sticker order.

    Cubie coordinates run over -(N-1)..N-1 in steps of 2; a sticker sits on
    the surface at +/-N along its face normal.
    """
    n = size
    r, c = np.meshgrid(np.arange(n), np.arange(n), indexing='ij')
    r = r.reshape(-1)
    c = c.reshape(-1)
    lo = -(n - 1) + 2 * c
    hi = (n - 1) - 2 * r
    full = np.full_like(r, n)
    per_face = {
        Face.U: (lo, full, -(n - 1) + 2 * r),
        Face.R: (full, hi, (n - 1) - 2 * c),
        Face.F: (lo, hi, full),
        Face.D: (lo, -full, (n - 1) - 2 * r),
        Face.L: (-full, hi, -(n - 1) + 2 * c),
        Face.B: ((n - 1) - 2 * c, hi, -full),
    }
    positions = np.concatenate([np.stack(per_face[f], axis=1) for f in Face])
    normals = np.concatenate([np.tile(FACE_NORMALS[f], (n * n, 1)) for f in Face])
    positions.setflags(write=False)
    normals.setflags(write=False)
    return positions, normals


@lru_cache(maxsize=None)
def _position_index(size: int) -> np.ndarray:
    positions, _ = sticker_geometry(size)
    span = 2 * size + 1
    table = np.full(span ** 3, -1, dtype=np.int64)
    table[_position_keys(positions, size)] = np.arange(len(positions))
    return table


def _position_keys(positions: np.ndarray, size: int) -> np.ndarray:
    span = 2 * size + 1
    p = positions + size
    return (p[:, 0] * span + p[:, 1]) * span + p[:, 2]


def _rotate_cw(vectors: np.ndarray, normal: Tuple[int, int, int]) -> np.ndarray:
    # 绕外法向 u 顺时针 90°：v' = -(u x v) + u (u . v)
    u = np.array(normal)
    cross = np.cross(np.broadcast_to(u, vectors.shape), vectors)
    return -cross + np.outer(vectors @ u, u)


@lru_cache(maxsize=None)
def move_permutation(size: int, face: Face, depth: int, turns: int) -> np.ndarray:
    """
    Gather array ``src`` such that ``new_flat = old_flat[src]`` applies the move.
    """
    if not 1 <= depth < max(size, 2):
        raise ValueError(f"depth {depth} 对 {size}x{size} 魔方非法")
    face = Face(face)
    if turns != 1:
        quarter = move_permutation(size, face, depth, 1)
        src = quarter
        for _ in range(turns - 1):
            src = src[quarter]
        src.setflags(write=False)
        return src

    positions, _ = sticker_geometry(size)
    normal = FACE_NORMALS[face]
    axis = int(np.flatnonzero(normal)[0])
    sign = normal[axis]
    along = np.clip(positions[:, axis], -(size - 1), size - 1)
    layer = ((size - 1) - sign * along) // 2
    moving = np.flatnonzero(layer < depth)

    rotated = _rotate_cw(positions[moving], normal)
    targets = _position_index(size)[_position_keys(rotated, size)]
    src = np.arange(6 * size * size)
    src[targets] = moving
    src.setflags(write=False)
    return src


def algorithm_permutation(size: int, algorithm: Iterable[Move]) -> np.ndarray:
    src = np.arange(6 * size * size)
    for move in algorithm:
        src = src[move_permutation(size, move.face, move.depth, move.turns)]
    return src


def apply(state: CubeState, move: Move) -> CubeState:
    """Apply one move; returns a new state."""
    size = state.size
    if move.depth >= size:
        raise ValueError(f"{move} 的层数超出 {size}x{size} 魔方")
    src = move_permutation(size, move.face, move.depth, move.turns)
    return CubeState._from_flat(state.flat()[src], size)


def apply_algorithm(state: CubeState, algorithm: AlgorithmLike) -> CubeState:
    moves = list(algorithm)
    if not moves:
        return state
    size = state.size
    for move in moves:
        if move.depth >= size:
            raise ValueError(f"{move} 的层数超出 {size}x{size} 魔方")
    src = algorithm_permutation(size, moves)
    return CubeState._from_flat(state.flat()[src], size)


# --- 复合转动 ---
ROTATION_AXES = {
    'x': (Face.R, Face.L),
    'y': (Face.U, Face.D),
    'z': (Face.F, Face.B),
}

SLICE_FACES = {
    'M': Face.L,
    'E': Face.D,
    'S': Face.F,
}


def rotation(axis: str, turns: int, size: int) -> Algorithm:
    """Whole-cube rotation x/y/z as a wide (N-1) move plus the opposite outer move."""
    face, opposite = ROTATION_AXES[axis]
    if size < 2:
        raise ValueError("size 必须 >= 2")
    return Algorithm.of(Move(face, size - 1, turns), Move(opposite, 1, 4 - turns))


def inner_slice(face: Face, layer: int, turns: int) -> Algorithm:
    """
    转动从 face 数起第 layer 层（0 为外层）的单层
    """
    if layer == 0:
        return Algorithm.of(Move(face, 1, turns))
    return Algorithm.of(Move(face, layer + 1, turns), Move(face, layer, 4 - turns))


def slice_move(name: str, turns: int, size: int) -> Algorithm:
    """Middle-layer M/E/S move; only defined for odd sizes."""
    if size % 2 == 0 or size < 3:
        raise ValueError(f"{name} 只在奇数阶魔方上有定义")
    return inner_slice(SLICE_FACES[name], (size - 1) // 2, turns)


_ORIENTATION_FIRST = [(), (('x', 1),), (('x', 2),), (('x', 3),), (('z', 1),), (('z', 3),)]
_ORIENTATION_SECOND = [(), (('y', 1),), (('y', 2),), (('y', 3),)]


def orientation_algorithms(size: int) -> List[Algorithm]:
    """The 24 whole-cube orientations as rotation algorithms, identity first."""
    result = []
    for first in _ORIENTATION_FIRST:
        for second in _ORIENTATION_SECOND:
            alg = Algorithm()
            for axis, turns in first + second:
                alg = alg + rotation(axis, turns, size)
            result.append(alg)
    return result


@lru_cache(maxsize=None)
def orientation_face_maps() -> Tuple[Dict[Face, Face], ...]:
    """
    For each of the 24 orientations, where each face's content ends up:
    ``mapping[old_face] == new_face``.
    """
    maps = []
    solved = CubeState.solved(3)
    for alg in orientation_algorithms(3):
        turned = apply_algorithm(solved, alg)
        mapping = {}
        for face in Face:
            mapping[Face(int(turned.stickers[face, 1, 1]))] = face
        maps.append(mapping)
    return tuple(maps)


def sticker_indices(size: int, points) -> np.ndarray:
    """Flat sticker indices of surface points given as rows of (x, y, z)."""
    points = np.asarray(points, dtype=np.int64).reshape(-1, 3)
    if np.any(np.abs(points) > size):
        raise ValueError("坐标超出魔方表面")
    index = _position_index(size)[_position_keys(points, size)]
    if np.any(index < 0):
        raise ValueError("坐标不在魔方表面上")
    return index
