"""
2 阶求解器：角块状态空间上的 IDA*
DBL 角块固定后只需 U, R, F 三个面, 状态空间 7! * 3^6 = 3,674,160
"""
import logging
from functools import lru_cache
from typing import List, Tuple

import numpy as np

from ..core import config
from ..core.cubie import DBL, CubieCube, corners_from_state, index_move
from ..core.errors import SolveError, SolveErrorKind
from ..core.moves import Algorithm, apply_algorithm
from ..core.state import CubeState
from . import frames, tables
from .search import Deadline, SearchTimeout
from .solution import SolutionStep

logger = logging.getLogger(__name__)

N_PERM7 = 5040
N_TWIST6 = 729
# U, U2, U', R, R2, R', F, F2, F'
N_MOVES = 9

METHOD = "2 阶 IDA*"


@lru_cache(maxsize=None)
def _coordinate_tables() -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(compact index of each 8-corner permutation, perm move table, twist move table)"""
    perms = tables.all_perms(8)
    fixed = perms[:, DBL] == DBL
    compact = np.full(tables.N_PERM8, -1, dtype=np.int64)
    compact[fixed] = np.arange(N_PERM7)
    perm_move = compact[tables.corner_perm_move()[fixed][:, :N_MOVES]]
    # DBL 的朝向是最后一位三进制数, 固定为 0 时扭转坐标是 3 的倍数
    twist_move = tables.twist_move()[::3][:, :N_MOVES] // 3
    return compact, perm_move, twist_move


@lru_cache(maxsize=None)
def distance_table() -> bytes:
    """Exact distance to solved for every (perm, twist) pair."""
    _, perm_move, twist_move = _coordinate_tables()
    table = tables.cached_table("two_by_two", lambda: tables.bfs_distances(
        perm_move, twist_move, N_TWIST6, 0, [(m, m) for m in range(N_MOVES)]))
    return table.astype(np.uint8).tobytes()


def warm_up():
    distance_table()


class CornerSearch:
    """
    IDA*, 启发函数为模式数据库距离
    Args:
        deadline: 截止时间
        max_depth: 搜索深度上限
    """

    def __init__(self, deadline: Deadline, max_depth: int = config.TWO_BY_TWO_MAX_DEPTH):
        self.deadline = deadline
        self.max_depth = max_depth
        _, perm_move, twist_move = _coordinate_tables()
        self.perm_move = perm_move.tolist()
        self.twist_move = twist_move.tolist()
        self.dist = distance_table()

    def _h(self, perm: int, twist: int) -> int:
        return self.dist[perm * N_TWIST6 + twist]

    def solve(self, cube: CubieCube) -> List[int]:
        compact, _, _ = _coordinate_tables()
        perm = int(compact[tables.perm_coord(cube.cp)])
        twist = tables.twist_coord(cube.co)
        if perm < 0 or twist % 3:
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="DBL 角块不在标准位置")
        twist //= 3
        start = self._h(perm, twist)
        if start > self.max_depth:
            raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                             detail=f"需要 {start} 步, 超过深度上限 {self.max_depth}")
        for depth in range(start, self.max_depth + 1):
            self.deadline.check()
            path: List[int] = []
            if self._search(perm, twist, depth, -1, path):
                logger.debug("2 阶 IDA* 深度 %d, %d 个节点", depth, self.deadline.nodes)
                return path
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"{self.max_depth} 步内无解")

    def _search(self, perm, twist, depth, last_face, path) -> bool:
        self.deadline.tick()
        h = self._h(perm, twist)
        if h > depth:
            return False
        if depth == 0:
            return h == 0
        perm_row = self.perm_move[perm]
        twist_row = self.twist_move[twist]
        for m in range(N_MOVES):
            face = m // 3
            if face == last_face:
                continue
            path.append(m)
            if self._search(perm_row[m], twist_row[m], depth - 1, face, path):
                return True
            path.pop()
        return False


def solve(state: CubeState, solve_config: config.SolveConfig,
          deadline: Deadline) -> Tuple[str, List[SolutionStep]]:
    index, turned = frames.normalize(state)
    cp, co = corners_from_state(turned)
    cube = CubieCube(cp, co)
    search = CornerSearch(deadline, min(solve_config.max_depth, config.TWO_BY_TWO_MAX_DEPTH))
    try:
        moves = search.solve(cube)
    except SearchTimeout:
        raise SolveError(SolveErrorKind.DEADLINE_EXCEEDED,
                         detail=f"2 阶搜索超过 {solve_config.max_time_ms} ms") from None
    # 索引 0..8 与 18 个外层转动的前 9 个一致
    alg = frames.to_original(Algorithm(tuple(index_move(m) for m in moves)), index)
    return METHOD, [SolutionStep("还原角块", alg, apply_algorithm(state, alg),
                                 f"{len(alg)} 步最优解")]
