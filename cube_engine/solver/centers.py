"""
中心块模块：用交换子逐块还原 N 阶魔方的中心

在 "目标面在 F、来源面在 U" 的视角里, 交换子 [X, Y] 把 U(r, c) 送到 F(r, c)：
    X = 从 L 数第 c 层的单层转动
    Y = F^a (从 L 数第 l 层) F^-a, 其中 a=1 时 l = N-1-r, a=3 时 l = r
净效果只是三个中心贴纸的轮换, 第三个位置也在 U 上。
"""
import logging
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np

from ..core.errors import SolveError, SolveErrorKind
from ..core.moves import Algorithm, Move, algorithm_permutation, apply, apply_algorithm, inner_slice
from ..core.state import Color, CubeState, Face
from . import frames
from .search import Deadline

logger = logging.getLogger(__name__)

# 依次还原的面；最后一个面 (L) 自动还原
CENTER_ORDER = (Face.U, Face.F, Face.R, Face.D, Face.B)


def _index(size: int, face: Face, r: int, c: int) -> int:
    return int(face) * size * size + r * size + c


def _candidates(size: int, r: int, c: int):
    n = size - 1
    for a, l in ((1, n - r), (3, r), (1, r), (3, n - r)):
        if not 1 <= l <= size - 2:
            continue
        for tx in (1, 3):
            for ty in (1, 3):
                x = inner_slice(Face.L, c, tx)
                y = Algorithm.of(Move(Face.F, 1, a)) + inner_slice(Face.L, l, ty) + \
                    Algorithm.of(Move(Face.F, 1, 4 - a))
                yield x + y + x.inverse() + y.inverse()


@lru_cache(maxsize=None)
def commutator(size: int, r: int, c: int) -> Algorithm:
    """
    U(r, c) -> F(r, c) 的中心交换子；另外两个被轮换的贴纸都在 U 上
    """
    source = _index(size, Face.U, r, c)
    target = _index(size, Face.F, r, c)
    for alg in _candidates(size, r, c):
        perm = algorithm_permutation(size, alg)
        moved = np.flatnonzero(perm != np.arange(perm.size))
        if len(moved) != 3 or perm[target] != source:
            continue
        faces, rest = np.divmod(moved, size * size)
        rows, cols = np.divmod(rest, size)
        inner = (rows >= 1) & (rows <= size - 2) & (cols >= 1) & (cols <= size - 2)
        on_front = int(np.count_nonzero(faces == int(Face.F)))
        on_top = int(np.count_nonzero(faces == int(Face.U)))
        if np.all(inner) and on_front == 1 and on_top == 2:
            return alg
    raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                     detail=f"{size}x{size} 中心位置 ({r}, {c}) 没有可用的交换子")


def _center_block(state: CubeState, face: Face) -> np.ndarray:
    n = state.size
    return state.stickers[int(face), 1:n - 1, 1:n - 1]


def face_done(state: CubeState, face: Face, color: Color) -> bool:
    return bool(np.all(_center_block(state, face) == int(color)))


def all_done(state: CubeState) -> bool:
    return all(face_done(state, face, Color(int(face))) for face in Face)


def _free_front(turned: CubeState, r: int, c: int, color: Color) -> Tuple[Algorithm, CubeState]:
    """Turn F until F(r, c) does not already hold ``color``."""
    alg = Algorithm()
    for turns in range(4):
        if turns:
            move = Move(Face.F, 1, 1)
            turned = apply(turned, move)
            alg = alg + move
        if turned.stickers[int(Face.F), r, c] != int(color):
            return alg.simplified(), turned
    raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"F 面 ({r}, {c}) 轨道已满")


def _sources(turned: CubeState, color: Color) -> List[Tuple[int, int]]:
    block = _center_block(turned, Face.U)
    return [(int(r) + 1, int(c) + 1) for r, c in np.argwhere(block == int(color))]


def move_all(turned: CubeState, color: Color,
             deadline: Optional[Deadline] = None) -> Tuple[Algorithm, CubeState]:
    """In the current view, move every ``color`` centre on U onto F."""
    size = turned.size
    total = Algorithm()
    while True:
        if deadline is not None:
            deadline.check()
        sources = _sources(turned, color)
        if not sources:
            return total, turned
        r, c = sources[0]
        setup, turned = _free_front(turned, r, c, color)
        insert = commutator(size, r, c)
        turned = apply_algorithm(turned, insert)
        total = total + setup + insert


def _count(state: CubeState, face: Face, color: Color) -> int:
    return int(np.count_nonzero(_center_block(state, face) == int(color)))


def solve_centers(state: CubeState, deadline: Optional[Deadline] = None) -> Tuple[Algorithm, CubeState]:
    """
    还原所有中心块；假定状态已在标准视角 (奇数阶中心块已归位)
    Returns:
        (标准视角下的转动序列, 还原中心后的状态)
    """
    total = Algorithm()
    unsolved = list(Face)
    for face in CENTER_ORDER:
        color = Color(int(face))
        while not face_done(state, face, color):
            progressed = False
            others = [f for f in unsolved if f != face]
            adjacent = [f for f in others if f != face.opposite()]
            for source in adjacent + [f for f in others if f not in adjacent]:
                if _count(state, source, color) == 0:
                    continue
                if source in adjacent:
                    front = face
                else:
                    # 对面的中心先跳到一个相邻的未完成面
                    front = adjacent[0]
                index = frames.frame_for(front, source)
                alg, _ = move_all(frames.view(state, index), color, deadline)
                alg = frames.to_original(alg, index)
                state = apply_algorithm(state, alg)
                total = total + alg
                progressed = True
                break
            if not progressed:
                raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                                 detail=f"{face.name} 面中心缺少 {color.code} 色块")
        unsolved.remove(face)
        logger.debug("%s 面中心完成, 累计 %d 步", face.name, len(total))
    if not all_done(state):
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="中心块未全部还原")
    return total, state
