"""
3 阶求解器：两阶段搜索, 超时则用层先法兜底
"""
import logging
from typing import List, Tuple

from ..core import config
from ..core.cubie import CubieCube, PieceError, cubie_from_state
from ..core.errors import InvalidKind, InvalidReason, SolveError, SolveErrorKind
from ..core.moves import Algorithm, apply_algorithm
from ..core.state import CubeState
from . import beginner, frames, tables
from .kociemba import TwoPhaseSearch
from .search import Deadline, SearchTimeout
from .solution import SolutionStep

logger = logging.getLogger(__name__)

METHOD_TWO_PHASE = "两阶段"
METHOD_LAYER_BY_LAYER = "层先法"

PHASE1_DESCRIPTION = "第一阶段：进入 <U, D, R2, L2, F2, B2> 子群"
PHASE2_DESCRIPTION = "第二阶段：子群内还原"


def warm_up():
    tables.warm_up()
    beginner.warm_up()


def solve_cubie(cube: CubieCube, solve_config: config.SolveConfig,
                deadline: Deadline) -> Tuple[str, List[Tuple[str, List[int]]]]:
    """
    在块模型上求解
    Returns:
        (方法名, [(阶段说明, 转动索引列表), ...])
    Raises:
        SolveError: 超时且不允许兜底 (DEADLINE_EXCEEDED) 或深度内无解
    """
    if cube.is_solved():
        return METHOD_TWO_PHASE, []
    if solve_config.allow_fallback:
        search_deadline = deadline.sub(config.TWO_PHASE_BUDGET_SHARE, solve_config.max_nodes)
    else:
        search_deadline = deadline
    search = TwoPhaseSearch(search_deadline, solve_config.max_depth)
    timed_out = False
    try:
        found = search.solve(cube)
    except SearchTimeout:
        found, timed_out = None, True

    if found is not None:
        phase1, phase2 = found
        logger.info("两阶段搜索: %d + %d 步, %d 个节点",
                    len(phase1), len(phase2), search_deadline.nodes)
        return METHOD_TWO_PHASE, [(PHASE1_DESCRIPTION, phase1), (PHASE2_DESCRIPTION, phase2)]

    if not solve_config.allow_fallback:
        if timed_out:
            partial = beginner.to_algorithm(search.best_partial) if search.best_partial else None
            raise SolveError(SolveErrorKind.DEADLINE_EXCEEDED, partial=partial,
                             detail=f"两阶段搜索超过 {solve_config.max_time_ms} ms")
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND,
                         detail=f"{solve_config.max_depth} 步内无解")

    logger.warning("两阶段搜索未完成 (%s), 改用层先法", "超时" if timed_out else "深度内无解")
    # 层先法不受截止时间限制：它保证结束, 预算对它只是软目标
    return METHOD_LAYER_BY_LAYER, beginner.layer_by_layer(cube)


def solve_stages(state: CubeState, solve_config: config.SolveConfig,
                 deadline: Deadline) -> Tuple[str, List[Tuple[str, Algorithm]]]:
    """Solve a 3x3 state; algorithms are expressed in the caller's view."""
    try:
        index, turned = frames.normalize(state)
        cube = cubie_from_state(turned)
    except PieceError as e:
        reason = InvalidReason(InvalidKind.INVALID_PIECE, str(e))
        raise SolveError(SolveErrorKind.INVALID_INPUT, detail=str(e), reason=reason) from e
    try:
        method, stages = solve_cubie(cube, solve_config, deadline)
    except SolveError as e:
        if e.partial is not None:
            e.partial = frames.to_original(e.partial, index)
        raise
    return method, [(name, frames.to_original(beginner.to_algorithm(moves), index))
                    for name, moves in stages]


def solve(state: CubeState, solve_config: config.SolveConfig,
          deadline: Deadline) -> Tuple[str, List[SolutionStep]]:
    method, stages = solve_stages(state, solve_config, deadline)
    steps: List[SolutionStep] = []
    current = state
    for name, alg in stages:
        current = apply_algorithm(current, alg)
        steps.append(SolutionStep(name, alg, current))
    if not current.is_solved():
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="解法执行后魔方未还原")
    return method, steps

