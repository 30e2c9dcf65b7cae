"""
坐标表模块：两阶段算法的坐标转动表与剪枝表（numpy 向量化构建）
"""
import itertools
import logging
import os
import threading
import time
from functools import lru_cache
from typing import Iterable, Optional, Sequence

import numpy as np

from ..core import config
from ..core.cubie import move_cubes

logger = logging.getLogger(__name__)

N_TWIST = 2187      # 3^7
N_FLIP = 2048       # 2^11
N_SLICE = 495       # C(12, 4)
N_PERM8 = 40320     # 8!
N_PERM4 = 24        # 4!
N_MOVES = 18

# 第二阶段可用的转动：U, U2, U', D, D2, D', R2, L2, F2, B2
PHASE2_MOVES = (0, 1, 2, 9, 10, 11, 4, 13, 7, 16)

_lock = threading.RLock()


def _move_arrays():
    cubes = move_cubes()
    cp = np.array([c.cp for c in cubes], dtype=np.int64)
    co = np.array([c.co for c in cubes], dtype=np.int64)
    ep = np.array([c.ep for c in cubes], dtype=np.int64)
    eo = np.array([c.eo for c in cubes], dtype=np.int64)
    return cp, co, ep, eo


def perm_rank(perms: np.ndarray) -> np.ndarray:
    """Lexicographic rank of each row (rows are permutations of 0..n-1)."""
    n = perms.shape[1]
    rank = np.zeros(perms.shape[0], dtype=np.int64)
    for i in range(n):
        smaller = (perms[:, i + 1:] < perms[:, i:i + 1]).sum(axis=1)
        rank = rank * (n - i) + smaller
    return rank


@lru_cache(maxsize=None)
def all_perms(n: int) -> np.ndarray:
    arr = np.array(list(itertools.permutations(range(n))), dtype=np.int64)
    arr.setflags(write=False)
    return arr


# --- 坐标编码 ---
def twist_coord(co: Sequence[int]) -> int:
    t = 0
    for i in range(7):
        t = 3 * t + co[i]
    return t


def flip_coord(eo: Sequence[int]) -> int:
    f = 0
    for i in range(11):
        f = 2 * f + eo[i]
    return f


@lru_cache(maxsize=None)
def _slice_combos():
    combos = list(itertools.combinations(range(12), 4))
    lookup = np.full(1 << 12, -1, dtype=np.int64)
    for idx, combo in enumerate(combos):
        lookup[sum(1 << p for p in combo)] = idx
    return combos, lookup


def slice_coord(ep: Sequence[int]) -> int:
    _, lookup = _slice_combos()
    mask = sum(1 << i for i, e in enumerate(ep) if e >= 8)
    return int(lookup[mask])


def perm_coord(perm: Sequence[int]) -> int:
    return int(perm_rank(np.array([perm], dtype=np.int64))[0])


def ud_edge_coord(ep: Sequence[int]) -> int:
    return perm_coord(ep[:8])


def slice_perm_coord(ep: Sequence[int]) -> int:
    return perm_coord([e - 8 for e in ep[8:]])


# --- 转动表 ---
@lru_cache(maxsize=None)
def twist_move() -> np.ndarray:
    cp, co, _, _ = _move_arrays()
    digits = np.zeros((N_TWIST, 8), dtype=np.int64)
    t = np.arange(N_TWIST)
    for i in range(6, -1, -1):
        digits[:, i] = t % 3
        t = t // 3
    digits[:, 7] = (-digits[:, :7].sum(axis=1)) % 3
    table = np.empty((N_TWIST, N_MOVES), dtype=np.int64)
    weights = 3 ** np.arange(6, -1, -1)
    for m in range(N_MOVES):
        new = (digits[:, cp[m]] + co[m]) % 3
        table[:, m] = new[:, :7] @ weights
    return table


@lru_cache(maxsize=None)
def flip_move() -> np.ndarray:
    _, _, ep, eo = _move_arrays()
    digits = np.zeros((N_FLIP, 12), dtype=np.int64)
    f = np.arange(N_FLIP)
    for i in range(10, -1, -1):
        digits[:, i] = f % 2
        f = f // 2
    digits[:, 11] = digits[:, :11].sum(axis=1) % 2
    table = np.empty((N_FLIP, N_MOVES), dtype=np.int64)
    weights = 2 ** np.arange(10, -1, -1)
    for m in range(N_MOVES):
        new = (digits[:, ep[m]] + eo[m]) % 2
        table[:, m] = new[:, :11] @ weights
    return table


@lru_cache(maxsize=None)
def slice_move() -> np.ndarray:
    _, _, ep, _ = _move_arrays()
    combos, lookup = _slice_combos()
    occ = np.zeros((N_SLICE, 12), dtype=np.int64)
    for idx, combo in enumerate(combos):
        occ[idx, list(combo)] = 1
    bits = 1 << np.arange(12)
    table = np.empty((N_SLICE, N_MOVES), dtype=np.int64)
    for m in range(N_MOVES):
        new = occ[:, ep[m]]
        table[:, m] = lookup[new @ bits]
    return table


@lru_cache(maxsize=None)
def corner_perm_move() -> np.ndarray:
    cp, _, _, _ = _move_arrays()
    perms = all_perms(8)
    table = np.empty((N_PERM8, N_MOVES), dtype=np.int64)
    for m in range(N_MOVES):
        table[:, m] = perm_rank(perms[:, cp[m]])
    return table


@lru_cache(maxsize=None)
def ud_edge_move() -> np.ndarray:
    """Phase-2 only: columns follow PHASE2_MOVES."""
    _, _, ep, _ = _move_arrays()
    perms = all_perms(8)
    table = np.empty((N_PERM8, len(PHASE2_MOVES)), dtype=np.int64)
    for k, m in enumerate(PHASE2_MOVES):
        table[:, k] = perm_rank(perms[:, ep[m][:8]])
    return table


@lru_cache(maxsize=None)
def slice_perm_move() -> np.ndarray:
    _, _, ep, _ = _move_arrays()
    perms = all_perms(4)
    table = np.empty((N_PERM4, len(PHASE2_MOVES)), dtype=np.int64)
    for k, m in enumerate(PHASE2_MOVES):
        table[:, k] = perm_rank(perms[:, ep[m][8:] - 8])
    return table


# --- 剪枝表 ---
def bfs_distances(move_a: np.ndarray, move_b: Optional[np.ndarray], n_b: int,
                  start: int, columns: Iterable[int]) -> np.ndarray:
    """
    Breadth-first distance table over the product coordinate a * n_b + b.
    ``move_b`` may be None for a single coordinate (n_b == 1).
    """
    n_a = move_a.shape[0]
    table = np.full(n_a * n_b, -1, dtype=np.int8)
    table[start] = 0
    frontier = np.array([start], dtype=np.int64)
    columns = list(columns)
    depth = 0
    while frontier.size:
        a = frontier // n_b
        b = frontier % n_b
        found = []
        for col_a, col_b in columns:
            nxt = move_a[a, col_a] * n_b
            if move_b is not None:
                nxt = nxt + move_b[b, col_b]
            nxt = nxt[table[nxt] < 0]
            if nxt.size:
                nxt = np.unique(nxt)
                table[nxt] = depth + 1
                found.append(nxt)
        frontier = np.concatenate(found) if found else np.empty(0, dtype=np.int64)
        depth += 1
    return table


def _cache_path(name: str) -> Optional[str]:
    if not config.TABLE_CACHE_DIR:
        return None
    return os.path.join(config.TABLE_CACHE_DIR, f"{name}.npy")


def cached_table(name: str, build) -> np.ndarray:
    with _lock:
        path = _cache_path(name)
        if path and os.path.exists(path):
            try:
                return np.load(path)
            except (OSError, ValueError) as e:
                logger.warning("剪枝表缓存 %s 无法读取, 重新生成: %s", path, e)
        t0 = time.monotonic()
        table = build()
        logger.info("生成剪枝表 %s: %d 项, 用时 %.0f ms",
                    name, table.size, (time.monotonic() - t0) * 1000)
        if path:
            try:
                os.makedirs(os.path.dirname(path), exist_ok=True)
                np.save(path, table)
            except OSError as e:
                logger.warning("剪枝表缓存 %s 写入失败: %s", path, e)
        return table


def _pairs(moves: Iterable[int]):
    return [(m, m) for m in moves]


@lru_cache(maxsize=None)
def twist_slice_prune() -> bytes:
    table = cached_table("twist_slice", lambda: bfs_distances(
        twist_move(), slice_move(), N_SLICE, solved_slice(), _pairs(range(N_MOVES))))
    return table.astype(np.uint8).tobytes()


@lru_cache(maxsize=None)
def flip_slice_prune() -> bytes:
    table = cached_table("flip_slice", lambda: bfs_distances(
        flip_move(), slice_move(), N_SLICE, solved_slice(), _pairs(range(N_MOVES))))
    return table.astype(np.uint8).tobytes()


@lru_cache(maxsize=None)
def corner_slice_perm_prune() -> bytes:
    cols = [(m, k) for k, m in enumerate(PHASE2_MOVES)]
    table = cached_table("corner_slice_perm", lambda: bfs_distances(
        corner_perm_move(), slice_perm_move(), N_PERM4, 0, cols))
    return table.astype(np.uint8).tobytes()


@lru_cache(maxsize=None)
def edge_slice_perm_prune() -> bytes:
    cols = [(k, k) for k in range(len(PHASE2_MOVES))]
    table = cached_table("edge_slice_perm", lambda: bfs_distances(
        ud_edge_move(), slice_perm_move(), N_PERM4, 0, cols))
    return table.astype(np.uint8).tobytes()


@lru_cache(maxsize=None)
def solved_slice() -> int:
    return slice_coord(tuple(range(12)))


@lru_cache(maxsize=None)
def phase1_lists():
    """Move tables as nested lists for the pure-Python search loops."""
    return twist_move().tolist(), flip_move().tolist(), slice_move().tolist()


@lru_cache(maxsize=None)
def phase2_lists():
    cpm = corner_perm_move()[:, list(PHASE2_MOVES)]
    return cpm.tolist(), ud_edge_move().tolist(), slice_perm_move().tolist()


def warm_up():
    """Build every two-phase table up front."""
    phase1_lists()
    phase2_lists()
    twist_slice_prune()
    flip_slice_prune()
    corner_slice_perm_prune()
    edge_slice_perm_prune()
