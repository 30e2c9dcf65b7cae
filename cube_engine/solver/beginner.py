"""
层先法兜底求解：十字 -> 底层角 -> 第二层 -> 顶层朝向 -> 顶层排列
步数不是最优，但每个阶段都有界
"""
import logging
from functools import lru_cache
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.cubie import (BL, BR, CubieCube, DB, DBL, DF, DFR, DL, DLF, DR, DRB, FL, FR,
                          index_move, move_cubes, move_index)
from ..core.errors import SolveError, SolveErrorKind
from ..core.moves import Algorithm
from ..core.notation import parse
from ..core.state import Face
from .search import Deadline

logger = logging.getLogger(__name__)

# 绕竖直轴的整体重标号：F->R, R->B, B->L, L->F
_REL = {Face.F: Face.R, Face.R: Face.B, Face.B: Face.L, Face.L: Face.F}

CROSS_EDGES = (DR, DF, DL, DB)
# 每个框架 k 对应的底层角槽位、第二层棱槽位和顶层角位置
CORNER_SLOTS = (DFR, DRB, DBL, DLF)
MIDDLE_SLOTS = (FR, BR, BL, FL)
TOP_CORNER_ABOVE = (0, 3, 2, 1)

SEXY = "R U R' U'"
RIGHT_INSERT = "U R U' R' U' F' U F"
LEFT_INSERT = "U' L' U L U F U' F'"
EDGE_OLL = ("F R U R' U' F'", "F U R U' R' F'")
CORNER_OLL = ("R U R' U R U2 R'", "R U2 R' U' R U' R'")
CORNER_PLL = ("R' F R' B2 R F' R' B2 R2", "R2 B2 R F R' B2 R F' R")
EDGE_PLL = ("R U' R U R U R U' R' U' R2", "R2 U R U R' U' R' U' R' U R'")

AUFS = ((), (0,), (1,), (2,))


def _indices(text: str, frame: int = 0) -> Tuple[int, ...]:
    alg = parse(text)
    for _ in range(frame % 4):
        alg = alg.relabel(_REL)
    return tuple(move_index(m.face, m.turns) for m in alg)


def _apply(cube: CubieCube, moves: Sequence[int]) -> CubieCube:
    cubes = move_cubes()
    for m in moves:
        cube = cube.multiply(cubes[m])
    return cube


# --- 十字：四条底棱的精确距离表 ---
@lru_cache(maxsize=None)
def _edge_move_table() -> np.ndarray:
    # 单条棱的状态 = 位置 * 2 + 朝向
    table = np.empty((24, 18), dtype=np.int64)
    for m, cube in enumerate(move_cubes()):
        for pos in range(12):
            q = cube.ep.index(pos)
            for ori in range(2):
                table[pos * 2 + ori, m] = q * 2 + (ori + cube.eo[q]) % 2
    return table


def _cross_index(cube: CubieCube) -> int:
    idx = 0
    for piece in CROSS_EDGES:
        pos = cube.ep.index(piece)
        idx = idx * 24 + pos * 2 + cube.eo[pos]
    return idx


@lru_cache(maxsize=None)
def _cross_table() -> np.ndarray:
    edge_move = _edge_move_table()
    size = 24 ** 4
    dist = np.full(size, -1, dtype=np.int8)
    start = _cross_index(CubieCube())
    dist[start] = 0
    frontier = np.array([start], dtype=np.int64)
    depth = 0
    while frontier.size:
        digits = [(frontier // 24 ** (3 - i)) % 24 for i in range(4)]
        found = []
        for m in range(18):
            nxt = np.zeros_like(frontier)
            for d in digits:
                nxt = nxt * 24 + edge_move[d, m]
            nxt = nxt[dist[nxt] < 0]
            if nxt.size:
                nxt = np.unique(nxt)
                dist[nxt] = depth + 1
                found.append(nxt)
        frontier = np.concatenate(found) if found else np.empty(0, dtype=np.int64)
        depth += 1
    logger.debug("cross table depth %d", depth - 1)
    return dist


def warm_up():
    _cross_table()


def solve_cross(cube: CubieCube) -> List[int]:
    dist = _cross_table()
    edge_move = _edge_move_table()
    moves: List[int] = []
    idx = _cross_index(cube)
    while dist[idx] > 0:
        d = dist[idx]
        digits = [(idx // 24 ** (3 - i)) % 24 for i in range(4)]
        for m in range(18):
            nxt = 0
            for digit in digits:
                nxt = nxt * 24 + int(edge_move[digit, m])
            if dist[nxt] == d - 1:
                moves.append(m)
                idx = nxt
                break
        else:
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="十字距离表不一致")
    return moves


# --- 宏搜索 ---
def _macro_search(cube: CubieCube, macros: Sequence[Sequence[int]],
                  goal: Callable[[CubieCube], bool], depth: int,
                  finals: Sequence[Sequence[int]] = ((),),
                  deadline: Optional[Deadline] = None) -> Optional[List[int]]:
    """Breadth-first search over macro sequences of length <= depth."""
    frontier = [(cube, [])]
    for level in range(depth + 1):
        if deadline is not None:
            deadline.check()
        nxt = []
        for state, seq in frontier:
            for tail in finals:
                end = _apply(state, tail)
                if goal(end):
                    return seq + list(tail)
            if level < depth:
                for macro in macros:
                    nxt.append((_apply(state, macro), seq + list(macro)))
        frontier = nxt
    return None


def _with_aufs(algs: Sequence[Tuple[int, ...]]) -> List[Tuple[int, ...]]:
    return [auf + alg for auf in AUFS for alg in algs]


def _cross_done(c: CubieCube) -> bool:
    return all(c.ep[p] == p and c.eo[p] == 0 for p in CROSS_EDGES)


def _corners_done(c: CubieCube) -> bool:
    return _cross_done(c) and all(c.cp[p] == p and c.co[p] == 0 for p in CORNER_SLOTS)


def _f2l_done(c: CubieCube) -> bool:
    return _corners_done(c) and all(c.ep[p] == p and c.eo[p] == 0 for p in MIDDLE_SLOTS)


def _edges_oriented(c: CubieCube) -> bool:
    return _f2l_done(c) and not any(c.eo[:4])


def _top_oriented(c: CubieCube) -> bool:
    return _edges_oriented(c) and not any(c.co[:4])


def _top_corners_placed(c: CubieCube) -> bool:
    return _top_oriented(c) and all(c.cp[p] == p for p in range(4))


def _solved(c: CubieCube) -> bool:
    return c.is_solved()


def _first_layer_corners(cube: CubieCube, deadline: Optional[Deadline]) -> List[int]:
    moves: List[int] = []
    for k, slot in enumerate(CORNER_SLOTS):
        if deadline is not None:
            deadline.check()
        target = lambda c, slot=slot: c.cp[slot] == slot and c.co[slot] == 0
        if target(cube):
            continue
        pos = cube.cp.index(slot)
        if pos >= 4:
            # 在底层错误位置：用所在槽位的框架把它换到顶层
            seq = list(_indices(SEXY, CORNER_SLOTS.index(pos)))
            cube = _apply(cube, seq)
            moves += seq
            pos = cube.cp.index(slot)
        while pos != TOP_CORNER_ABOVE[k]:
            cube = _apply(cube, (0,))
            moves.append(0)
            pos = cube.cp.index(slot)
        sexy = _indices(SEXY, k)
        for _ in range(6):
            if target(cube):
                break
            cube = _apply(cube, sexy)
            moves += sexy
        done = lambda c, k=k: _cross_done(c) and all(
            c.cp[s] == s and c.co[s] == 0 for s in CORNER_SLOTS[:k + 1])
        if not done(cube):
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"底层角块 {slot} 未能归位")
    return moves


def _second_layer(cube: CubieCube, deadline: Optional[Deadline]) -> List[int]:
    moves: List[int] = []
    for k, slot in enumerate(MIDDLE_SLOTS):
        if deadline is not None:
            deadline.check()
        placed = MIDDLE_SLOTS[:k + 1]
        goal = lambda c, placed=placed: _corners_done(c) and all(
            c.ep[s] == s and c.eo[s] == 0 for s in placed)
        if goal(cube):
            continue
        pos = cube.ep.index(slot)
        if pos >= 8:
            seq = list(_indices(RIGHT_INSERT, MIDDLE_SLOTS.index(pos)))
            cube = _apply(cube, seq)
            moves += seq
        inserts = [_indices(RIGHT_INSERT, k), _indices(LEFT_INSERT, k + 1)]
        seq = _macro_search(cube, _with_aufs(inserts), goal, 1, deadline=deadline)
        if seq is None:
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"中层棱块 {slot} 未能归位")
        cube = _apply(cube, seq)
        moves += seq
    return moves


def _stage(cube, algs, goal, depth, finals=((),), deadline=None, name=""):
    macros = _with_aufs([_indices(a) for a in algs])
    seq = _macro_search(cube, macros, goal, depth, finals, deadline)
    if seq is None:
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"层先法阶段失败: {name}")
    return seq


def layer_by_layer(cube: CubieCube, deadline: Optional[Deadline] = None) -> List[Tuple[str, List[int]]]:
    """
    层先法
    Returns:
        [(阶段名, 转动索引列表), ...]
    """
    stages: List[Tuple[str, List[int]]] = []

    seq = solve_cross(cube)
    cube = _apply(cube, seq)
    stages.append(("底层十字", seq))

    seq = _first_layer_corners(cube, deadline)
    cube = _apply(cube, seq)
    stages.append(("底层角块", seq))

    seq = _second_layer(cube, deadline)
    cube = _apply(cube, seq)
    stages.append(("第二层", seq))

    seq = _stage(cube, EDGE_OLL, _edges_oriented, 3, deadline=deadline, name="顶层棱朝向")
    cube = _apply(cube, seq)
    stages.append(("顶层十字", seq))

    seq = _stage(cube, CORNER_OLL, _top_oriented, 3, deadline=deadline, name="顶层角朝向")
    cube = _apply(cube, seq)
    stages.append(("顶层朝向", seq))

    seq = _stage(cube, CORNER_PLL, _top_corners_placed, 3, finals=AUFS,
                 deadline=deadline, name="顶层角排列")
    cube = _apply(cube, seq)
    stages.append(("顶层角排列", seq))

    seq = _stage(cube, EDGE_PLL, _solved, 2, finals=AUFS, deadline=deadline, name="顶层棱排列")
    cube = _apply(cube, seq)
    stages.append(("顶层棱排列", seq))

    if not cube.is_solved():
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="层先法结束后未还原")
    logger.info("层先法完成: %d 步", sum(len(s) for _, s in stages))
    return stages


def to_algorithm(moves: Sequence[int]) -> Algorithm:
    return Algorithm(tuple(index_move(m) for m in moves))
