"""
求解器模块：Kociemba 两阶段搜索
第一阶段把魔方化归到 <U, D, R2, L2, F2, B2> 子群, 第二阶段在子群内还原
找到解后继续加深第一阶段, 每次把总步数上限降到当前最优解以下
"""
import logging
from typing import List, Optional, Tuple

from ..core import config
from ..core.cubie import CubieCube
from . import tables
from .search import Deadline, SearchTimeout

logger = logging.getLogger(__name__)


class TwoPhaseSearch:
    """
    两阶段 IDA* 搜索
    Args:
        deadline: 截止时间（超时抛 SearchTimeout）
        max_length: 总步数上限
        target_length: 解长不超过它时停止改进
    """

    def __init__(self, deadline: Deadline, max_length: int = config.THREE_BY_THREE_MAX_DEPTH,
                 target_length: int = config.TWO_PHASE_TARGET_LENGTH):
        self.deadline = deadline
        self.max_length = max_length
        self.target_length = target_length
        self.twist_move, self.flip_move, self.slice_move = tables.phase1_lists()
        self.corner_move, self.edge_move, self.slice_perm_move = tables.phase2_lists()
        self.twist_slice = tables.twist_slice_prune()
        self.flip_slice = tables.flip_slice_prune()
        self.corner_slice = tables.corner_slice_perm_prune()
        self.edge_slice = tables.edge_slice_perm_prune()
        self.solved_slice = tables.solved_slice()
        self.best: Optional[Tuple[List[int], List[int]]] = None
        self.best_partial: Optional[List[int]] = None
        self._cube: Optional[CubieCube] = None

    def solve(self, cube: CubieCube) -> Optional[Tuple[List[int], List[int]]]:
        """
        Returns the shortest (phase-1 moves, phase-2 moves) found, as move
        indices, or None when nothing fits in ``max_length``. A deadline that
        runs out after the first solution ends the search with that result.
        Raises:
            SearchTimeout: 截止时间已到且还没有任何解
        """
        self._cube = cube
        self.best = None
        twist = tables.twist_coord(cube.co)
        flip = tables.flip_coord(cube.eo)
        slc = tables.slice_coord(cube.ep)
        depth = self._h1(twist, flip, slc)
        try:
            while depth <= self.max_length:
                self.deadline.check()
                logger.debug("phase 1 depth %d, %d nodes", depth, self.deadline.nodes)
                if self._phase1(twist, flip, slc, depth, -1, []):
                    break
                depth += 1
        except SearchTimeout:
            if self.best is None:
                raise
            logger.debug("两阶段搜索到时, 保留 %d 步的解", self.best_length())
        return self.best

    def best_length(self) -> Optional[int]:
        if self.best is None:
            return None
        return len(self.best[0]) + len(self.best[1])

    def _done(self) -> bool:
        # 没有时间和节点预算时不继续缩短, 否则搜索可能很久不结束
        return self.best_length() <= self.target_length or not self.deadline.bounded()

    def _h1(self, twist: int, flip: int, slc: int) -> int:
        return max(self.twist_slice[twist * tables.N_SLICE + slc],
                   self.flip_slice[flip * tables.N_SLICE + slc])

    def _phase1(self, twist, flip, slc, depth, last_face, path) -> bool:
        """True once the search should stop."""
        self.deadline.tick()
        if depth == 0:
            if twist == 0 and flip == 0 and slc == self.solved_slice:
                # 以第二阶段转动结尾的解与更短的解重复
                if path and path[-1] in tables.PHASE2_MOVES:
                    return False
                return self._start_phase2(path)
            return False
        if len(path) + depth > self.max_length or self._h1(twist, flip, slc) > depth:
            return False
        twist_row = self.twist_move[twist]
        flip_row = self.flip_move[flip]
        slice_row = self.slice_move[slc]
        for m in range(18):
            face = m // 3
            if face == last_face or face == last_face - 3:
                continue
            path.append(m)
            if self._phase1(twist_row[m], flip_row[m], slice_row[m], depth - 1, face, path):
                return True
            path.pop()
        return False

    def _start_phase2(self, path) -> bool:
        self.best_partial = list(path)
        cube = self._cube.apply_moves(path)
        corner = tables.perm_coord(cube.cp)
        edge = tables.ud_edge_coord(cube.ep)
        slice_perm = tables.slice_perm_coord(cube.ep)
        limit = min(self.max_length - len(path), config.PHASE2_MAX_DEPTH)
        last_face = path[-1] // 3 if path else -1
        start = self._h2(corner, edge, slice_perm)
        for depth in range(start, limit + 1):
            tail: List[int] = []
            if self._phase2(corner, edge, slice_perm, depth, last_face, tail):
                self.best = (list(path), tail)
                self.max_length = len(path) + len(tail) - 1
                logger.debug("两阶段: %d + %d 步, %d 个节点", len(path), len(tail), self.deadline.nodes)
                return self._done()
        return False

    def _h2(self, corner: int, edge: int, slice_perm: int) -> int:
        return max(self.corner_slice[corner * tables.N_PERM4 + slice_perm],
                   self.edge_slice[edge * tables.N_PERM4 + slice_perm])

    def _phase2(self, corner, edge, slice_perm, depth, last_face, path) -> bool:
        self.deadline.tick()
        if depth == 0:
            return corner == 0 and edge == 0 and slice_perm == 0
        if self._h2(corner, edge, slice_perm) > depth:
            return False
        corner_row = self.corner_move[corner]
        edge_row = self.edge_move[edge]
        slice_row = self.slice_perm_move[slice_perm]
        for k, m in enumerate(tables.PHASE2_MOVES):
            face = m // 3
            if face == last_face or face == last_face - 3:
                continue
            path.append(m)
            if self._phase2(corner_row[k], edge_row[k], slice_row[k], depth - 1, face, path):
                return True
            path.pop()
        return False
