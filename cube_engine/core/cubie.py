"""
块模型模块：贴纸 (facelet) <-> 块 (cubie) 转换
角块/棱块编号与 Kociemba 两阶段算法一致
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .moves import FACE_NORMALS, Move, apply, sticker_indices
from .state import CubeState, Face

U, R, F, D, L, B = Face.U, Face.R, Face.F, Face.D, Face.L, Face.B

# 角块: URF, UFL, ULB, UBR, DFR, DLF, DBL, DRB
URF, UFL, ULB, UBR, DFR, DLF, DBL, DRB = range(8)
# 棱块: UR, UF, UL, UB, DR, DF, DL, DB, FR, FL, BL, BR
UR, UF, UL, UB, DR, DF, DL, DB, FR, FL, BL, BR = range(12)

CORNER_NAMES = ['URF', 'UFL', 'ULB', 'UBR', 'DFR', 'DLF', 'DBL', 'DRB']
EDGE_NAMES = ['UR', 'UF', 'UL', 'UB', 'DR', 'DF', 'DL', 'DB', 'FR', 'FL', 'BL', 'BR']


def _f(face: Face, n: int) -> Tuple[Face, int, int]:
    # 3x3 面上的第 n 个贴纸 (1..9) -> (面, 行, 列)
    return face, (n - 1) // 3, (n - 1) % 3


CORNER_FACELETS = [
    (_f(U, 9), _f(R, 1), _f(F, 3)),
    (_f(U, 7), _f(F, 1), _f(L, 3)),
    (_f(U, 1), _f(L, 1), _f(B, 3)),
    (_f(U, 3), _f(B, 1), _f(R, 3)),
    (_f(D, 3), _f(F, 9), _f(R, 7)),
    (_f(D, 1), _f(L, 9), _f(F, 7)),
    (_f(D, 7), _f(B, 9), _f(L, 7)),
    (_f(D, 9), _f(R, 9), _f(B, 7)),
]

EDGE_FACELETS = [
    (_f(U, 6), _f(R, 2)),
    (_f(U, 8), _f(F, 2)),
    (_f(U, 4), _f(L, 2)),
    (_f(U, 2), _f(B, 2)),
    (_f(D, 6), _f(R, 8)),
    (_f(D, 2), _f(F, 8)),
    (_f(D, 4), _f(L, 8)),
    (_f(D, 8), _f(B, 8)),
    (_f(F, 6), _f(R, 4)),
    (_f(F, 4), _f(L, 6)),
    (_f(B, 6), _f(L, 4)),
    (_f(B, 4), _f(R, 6)),
]

CORNER_COLORS = [
    (U, R, F), (U, F, L), (U, L, B), (U, B, R),
    (D, F, R), (D, L, F), (D, B, L), (D, R, B),
]

EDGE_COLORS = [
    (U, R), (U, F), (U, L), (U, B), (D, R), (D, F),
    (D, L), (D, B), (F, R), (F, L), (B, L), (B, R),
]


class PieceError(ValueError):
    """Raised when outer-layer stickers do not form a real piece."""


def _scale(index: int, size: int) -> int:
    return {0: 0, 1: size // 2, 2: size - 1}[index]


def facelet_index(size: int, facelet: Tuple[Face, int, int]) -> int:
    face, r, c = facelet
    return int(face) * size * size + _scale(r, size) * size + _scale(c, size)


def permutation_parity(perm: Sequence[int]) -> int:
    parity = 0
    n = len(perm)
    for i in range(n):
        for j in range(i + 1, n):
            if perm[i] > perm[j]:
                parity ^= 1
    return parity


@dataclass(frozen=True)
class CubieCube:
    """
    外层块状态
    cp[i]/ep[i]: 位置 i 上是哪一块; co[i]/eo[i]: 该块的朝向
    """
    cp: Tuple[int, ...] = tuple(range(8))
    co: Tuple[int, ...] = (0,) * 8
    ep: Tuple[int, ...] = tuple(range(12))
    eo: Tuple[int, ...] = (0,) * 12

    def multiply(self, other: "CubieCube") -> "CubieCube":
        cp = tuple(self.cp[other.cp[i]] for i in range(8))
        co = tuple((self.co[other.cp[i]] + other.co[i]) % 3 for i in range(8))
        ep = tuple(self.ep[other.ep[i]] for i in range(12))
        eo = tuple((self.eo[other.ep[i]] + other.eo[i]) % 2 for i in range(12))
        return CubieCube(cp, co, ep, eo)

    def apply_moves(self, move_indices) -> "CubieCube":
        cube = self
        for m in move_indices:
            cube = cube.multiply(move_cubes()[m])
        return cube

    def corner_parity(self) -> int:
        return permutation_parity(self.cp)

    def edge_parity(self) -> int:
        return permutation_parity(self.ep)

    def is_solved(self) -> bool:
        return self == SOLVED_CUBIE

    def to_state(self) -> CubeState:
        """转换回 3x3 贴纸状态"""
        arr = np.empty((6, 3, 3), dtype=np.uint8)
        for face in Face:
            arr[face] = int(face)
        for i in range(8):
            j, ori = self.cp[i], self.co[i]
            for n in range(3):
                face, r, c = CORNER_FACELETS[i][(n + ori) % 3]
                arr[face, r, c] = int(CORNER_COLORS[j][n])
        for i in range(12):
            j, ori = self.ep[i], self.eo[i]
            for n in range(2):
                face, r, c = EDGE_FACELETS[i][(n + ori) % 2]
                arr[face, r, c] = int(EDGE_COLORS[j][n])
        return CubeState(arr)


SOLVED_CUBIE = CubieCube()


def corners_from_state(state: CubeState) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """
    从贴纸恢复角块 (cp, co)；假定状态已转到标准朝向
    Raises:
        PieceError: 贴纸组合不是真实角块
    """
    flat = state.flat()
    size = state.size
    cp: List[int] = []
    co: List[int] = []
    for i, facelets in enumerate(CORNER_FACELETS):
        colors = [int(flat[facelet_index(size, f)]) for f in facelets]
        for ori in range(3):
            if colors[ori] in (U, D):
                break
        else:
            raise PieceError(f"角块位置 {CORNER_NAMES[i]} 没有白/黄贴纸")
        col1, col2 = colors[(ori + 1) % 3], colors[(ori + 2) % 3]
        for j, (c0, c1, c2) in enumerate(CORNER_COLORS):
            if c0 == colors[ori] and c1 == col1 and c2 == col2:
                cp.append(j)
                co.append(ori)
                break
        else:
            raise PieceError(f"角块位置 {CORNER_NAMES[i]} 的颜色组合非法: {colors}")
    if sorted(cp) != list(range(8)):
        raise PieceError("角块重复")
    return tuple(cp), tuple(co)


def edges_from_state(state: CubeState) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """Middle edge stickers (odd sizes) to (ep, eo)."""
    if state.size % 2 == 0:
        raise ValueError("偶数阶魔方没有中棱")
    flat = state.flat()
    size = state.size
    ep: List[int] = []
    eo: List[int] = []
    for i, facelets in enumerate(EDGE_FACELETS):
        a, b = (int(flat[facelet_index(size, f)]) for f in facelets)
        for j, (c0, c1) in enumerate(EDGE_COLORS):
            if (a, b) == (c0, c1):
                ep.append(j)
                eo.append(0)
                break
            if (a, b) == (c1, c0):
                ep.append(j)
                eo.append(1)
                break
        else:
            raise PieceError(f"棱块位置 {EDGE_NAMES[i]} 的颜色组合非法: {(a, b)}")
    if sorted(ep) != list(range(12)):
        raise PieceError("棱块重复")
    return tuple(ep), tuple(eo)


def cubie_from_state(state: CubeState) -> CubieCube:
    cp, co = corners_from_state(state)
    if state.size % 2 == 1:
        ep, eo = edges_from_state(state)
    else:
        ep, eo = tuple(range(12)), (0,) * 12
    return CubieCube(cp, co, ep, eo)


# 18 个外层转动, 索引 = 面 * 3 + (圈数 - 1)
MOVE_NAMES = [f"{f.name}{s}" for f in Face for s in ("", "2", "'")]


def move_index(face: Face, turns: int) -> int:
    return int(face) * 3 + turns - 1


def index_move(index: int) -> Move:
    return Move(Face(index // 3), 1, index % 3 + 1)


@lru_cache(maxsize=None)
def move_cubes() -> Tuple[CubieCube, ...]:
    solved = CubeState.solved(3)
    return tuple(cubie_from_state(apply(solved, index_move(i))) for i in range(18))


# --- 翼棱 ---
# 第 k 层翼棱轨道有 24 个位置 (棱槽 e, 侧 s), 编号 e * 2 + s。
# 同一棱槽两侧的翼棱颜色相同但互为镜像, 身份里带上手性以区分。
N_WING_POSITIONS = 24


def wing_layers(size: int) -> range:
    """Wing orbits of a cube; the middle layer of odd sizes holds midges, not wings."""
    return range(1, size // 2)


@lru_cache(maxsize=None)
def wing_stickers(size: int, layer: int) -> np.ndarray:
    """
    Returns (24, 2) flat sticker indices; columns follow the face order of EDGE_FACELETS.
    """
    offset = (size - 1) - 2 * layer
    if offset <= 0:
        raise ValueError(f"{size}x{size} 魔方没有第 {layer} 层翼棱")
    points = []
    for (face_a, _, _), (face_b, _, _) in EDGE_FACELETS:
        na = np.array(FACE_NORMALS[face_a])
        nb = np.array(FACE_NORMALS[face_b])
        axis = np.cross(na, nb)
        base = (size - 1) * (na + nb)
        for sign in (1, -1):
            cubie = base + sign * offset * axis
            points.append(cubie + na)
            points.append(cubie + nb)
    table = sticker_indices(size, points).reshape(N_WING_POSITIONS, 2)
    table.setflags(write=False)
    return table


@lru_cache(maxsize=None)
def wing_sticker_lookup(size: int, layer: int) -> np.ndarray:
    """Flat sticker index -> wing position, -1 off the orbit."""
    lookup = np.full(6 * size * size, -1, dtype=np.int64)
    stickers = wing_stickers(size, layer)
    for pos in range(N_WING_POSITIONS):
        lookup[stickers[pos]] = pos
    return lookup


def wing_identity(color_a: int, color_b: int, side: int) -> int:
    """Orientation-free label of a wing piece; -1 when both stickers match."""
    if color_a == color_b:
        return -1
    low, high = min(color_a, color_b), max(color_a, color_b)
    positive = (side == 0) == (color_a < color_b)
    return (low * 6 + high) * 2 + int(positive)


def wing_identities(state: CubeState, layer: int) -> List[int]:
    colors = state.flat()[wing_stickers(state.size, layer)]
    return [wing_identity(int(a), int(b), pos % 2) for pos, (a, b) in enumerate(colors)]


@lru_cache(maxsize=None)
def wing_homes() -> Dict[int, int]:
    result = {}
    for e, ((face_a, _, _), (face_b, _, _)) in enumerate(EDGE_FACELETS):
        for side in (0, 1):
            result[wing_identity(int(face_a), int(face_b), side)] = e * 2 + side
    return result


def wings_from_state(state: CubeState, layer: int,
                     targets: Optional[Dict[int, int]] = None) -> List[int]:
    """
    dest[p] = 位置 p 上的翼棱应去的位置
    Raises:
        PieceError: 翼棱颜色组合不存在或重复 (例如单个翼棱被翻转)
    """
    targets = wing_homes() if targets is None else targets
    dest = []
    for pos, ident in enumerate(wing_identities(state, layer)):
        if ident not in targets:
            raise PieceError(f"第 {layer} 层翼棱位置 {pos} 的颜色组合非法")
        dest.append(targets[ident])
    if sorted(dest) != list(range(N_WING_POSITIONS)):
        raise PieceError(f"第 {layer} 层翼棱重复")
    return dest
