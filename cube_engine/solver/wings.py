"""
翼棱模块：N 阶魔方第 k 层翼棱的归位与三循环

翼棱位置与身份 (含手性) 在 core.cubie 中定义, 这里负责目标位置、奇偶与三循环求解。
"""
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.cubie import (EDGE_FACELETS, N_WING_POSITIONS, PieceError, facelet_index, index_move,
                          permutation_parity, wing_identity, wing_layers, wing_sticker_lookup,
                          wing_stickers, wings_from_state)
from ..core.errors import SolveError, SolveErrorKind
from ..core.moves import Algorithm, algorithm_permutation, apply_algorithm, inner_slice
from ..core.notation import parse
from ..core.state import CubeState, Face
from .search import Deadline

logger = logging.getLogger(__name__)

# 18 个外层转动 + 18 个第 k 层单层转动
N_GENERATORS = 36


def midge_targets(state: CubeState) -> Dict[int, int]:
    """Odd sizes: every wing belongs next to the midge of its colours."""
    flat = state.flat()
    size = state.size
    result = {}
    for e, (fa, fb) in enumerate(EDGE_FACELETS):
        color_a = int(flat[facelet_index(size, fa)])
        color_b = int(flat[facelet_index(size, fb)])
        for side in (0, 1):
            result[wing_identity(color_a, color_b, side)] = e * 2 + side
    if len(result) != N_WING_POSITIONS or -1 in result:
        raise PieceError("中棱颜色组合非法")
    return result


def wing_parity(state: CubeState, layer: int) -> int:
    return permutation_parity(wings_from_state(state, layer))


# --- 三循环 ---
def generator(size: int, layer: int, g: int) -> Algorithm:
    if g < 18:
        return Algorithm.of(index_move(g))
    g -= 18
    return inner_slice(Face(g // 3), layer, g % 3 + 1)


def base_cycle(layer: int) -> Algorithm:
    """[S, U R' U'] with S the R-side slice of ``layer``: a 3-cycle of wings only."""
    s = inner_slice(Face.R, layer, 1)
    v = parse("U R' U'")
    return s + v + s.inverse() + v.inverse()


def _dest_from_perm(size: int, layer: int, perm: np.ndarray) -> List[int]:
    inverse = np.empty_like(perm)
    inverse[perm] = np.arange(perm.size)
    stickers = wing_stickers(size, layer)
    return wing_sticker_lookup(size, layer)[inverse[stickers[:, 0]]].tolist()


def position_dest(size: int, layer: int, algorithm: Algorithm) -> List[int]:
    """Where the wing at each position ends up after ``algorithm``."""
    return _dest_from_perm(size, layer, algorithm_permutation(size, algorithm))


@lru_cache(maxsize=None)
def _abstract() -> Tuple[Tuple[Tuple[int, ...], ...], Tuple[int, int, int]]:
    # 翼棱位置上的作用与阶数和层数无关, 用 4 阶第 1 层计算
    dests = tuple(tuple(position_dest(4, 1, generator(4, 1, g))) for g in range(N_GENERATORS))
    cycle = position_dest(4, 1, base_cycle(1))
    moved = [p for p in range(N_WING_POSITIONS) if cycle[p] != p]
    if len(moved) != 3:
        raise RuntimeError(f"基础三循环移动了 {len(moved)} 个翼棱")
    c1 = moved[0]
    c2 = cycle[c1]
    c3 = cycle[c2]
    return dests, (c1, c2, c3)


@lru_cache(maxsize=None)
def setup_paths() -> Dict[Tuple[int, int, int], Tuple[int, ...]]:
    """
    BFS over ordered position triples: the generator sequence G that carries the
    base cycle's positions onto each triple.
    """
    dests, start = _abstract()
    paths = {start: ()}
    frontier = [start]
    while frontier:
        nxt = []
        for triple in frontier:
            path = paths[triple]
            for g, d in enumerate(dests):
                moved = (d[triple[0]], d[triple[1]], d[triple[2]])
                if moved not in paths:
                    paths[moved] = path + (g,)
                    nxt.append(moved)
        frontier = nxt
    logger.debug("翼棱三循环预备表: %d 个三元组", len(paths))
    return paths


def cycle_algorithm(size: int, layer: int, a: int, t: int, u: int) -> Algorithm:
    """Moves the wing at ``a`` to ``t``, ``t`` to ``u`` and ``u`` to ``a``; nothing else."""
    path = setup_paths().get((a, t, u))
    if path is None:
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"翼棱三循环 {(a, t, u)} 不可达")
    setup = Algorithm()
    for g in path:
        setup = setup + generator(size, layer, g)
    alg = (setup.inverse() + base_cycle(layer) + setup).simplified()

    perm = algorithm_permutation(size, alg)
    dest = _dest_from_perm(size, layer, perm)
    expected = list(range(N_WING_POSITIONS))
    expected[a], expected[t], expected[u] = t, u, a
    if dest != expected or np.count_nonzero(perm != np.arange(perm.size)) != 6:
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                         detail=f"翼棱三循环校验失败: {size}x{size} 第 {layer} 层 {(a, t, u)}")
    return alg


def place_wings(state: CubeState, layer: int, targets: Optional[Dict[int, int]] = None,
                deadline: Optional[Deadline] = None) -> Tuple[Algorithm, CubeState]:
    """
    用三循环把第 layer 层翼棱全部送到目标位置
    Raises:
        PieceError: 翼棱颜色组合非法
        SolveError: 翼棱排列为奇排列
    """
    total = Algorithm()
    while True:
        if deadline is not None:
            deadline.check()
        dest = wings_from_state(state, layer, targets)
        unsolved = [p for p in range(N_WING_POSITIONS) if dest[p] != p]
        if not unsolved:
            return total, state
        if len(unsolved) < 3:
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                             detail=f"第 {layer} 层翼棱只剩一次对换")
        a = unsolved[0]
        t = dest[a]
        u = next(p for p in unsolved if p != a and p != t)
        alg = cycle_algorithm(state.size, layer, a, t, u)
        state = apply_algorithm(state, alg)
        total = total + alg


def solved(state: CubeState, layer: int, targets: Optional[Dict[int, int]] = None) -> bool:
    dest = wings_from_state(state, layer, targets)
    return all(d == p for p, d in enumerate(dest))


def all_layers_solved(state: CubeState, targets: Optional[Dict[int, int]] = None,
                      orbits: Optional[Sequence[int]] = None) -> bool:
    orbits = wing_layers(state.size) if orbits is None else orbits
    return all(solved(state, layer, targets) for layer in orbits)
