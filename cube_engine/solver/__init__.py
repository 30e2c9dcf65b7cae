"""
求解器入口：校验 -> 预计算表 -> 按阶数分派
"""
import logging
from typing import Optional

from ..core.config import SolveConfig
from ..core.errors import SolveError, SolveErrorKind
from ..core.moves import Algorithm
from ..core.state import CubeState
from ..core.validation import validate
from . import reduction, three_by_three, two_by_two
from .search import Deadline, SearchTimeout
from .solution import Solution, SolutionStep

logger = logging.getLogger(__name__)

METHOD_ALREADY_SOLVED = "已还原"


def warm_up(size: int):
    """
    预先生成某一阶数需要的所有表
    表只生成一次, 截止时间从表就绪之后开始计算
    """
    if size == 2:
        two_by_two.warm_up()
    elif size == 3:
        three_by_three.warm_up()
    else:
        reduction.warm_up()


def solve_detailed(state: CubeState, config: Optional[SolveConfig] = None) -> Solution:
    """
    求解并返回分阶段的结果
    Raises:
        SolveError: INVALID_INPUT（状态不合法）, DEADLINE_EXCEEDED, NO_SOLUTION_FOUND
    """
    size = state.size
    config = (config or SolveConfig()).resolved(size)
    reason = validate(state)
    if reason is not None:
        raise SolveError(SolveErrorKind.INVALID_INPUT, detail=str(reason), reason=reason)

    warm_up(size)
    deadline = Deadline(config.max_time_ms, config.max_nodes)
    if state.is_solved():
        return Solution([], METHOD_ALREADY_SOLVED, deadline.elapsed_ms())

    if size == 2:
        method, steps = two_by_two.solve(state, config, deadline)
    elif size == 3:
        method, steps = three_by_three.solve(state, config, deadline)
    else:
        method, steps = reduction.solve(state, config, deadline)

    solution = Solution(steps, method, deadline.elapsed_ms())
    if solution.time_ms > config.max_time_ms:
        logger.warning("%dx%d 求解用时 %.0f ms, 超过预算 %d ms",
                       size, size, solution.time_ms, config.max_time_ms)
    logger.info("%dx%d %s: %d 步, %.0f ms", size, size, method, solution.move_count, solution.time_ms)
    return solution


def solve(state: CubeState, config: Optional[SolveConfig] = None) -> Algorithm:
    """Return a move sequence that solves ``state``."""
    return solve_detailed(state, config).algorithm.simplified()


__all__ = [
    'Deadline', 'SearchTimeout', 'Solution', 'SolutionStep', 'SolveConfig',
    'solve', 'solve_detailed', 'warm_up',
]
