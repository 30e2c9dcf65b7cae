"""
N 阶求解器 (N >= 4)：降阶法
奇偶预纠正 -> 中心块 -> PLL 奇偶 (偶数阶) -> 翼棱归位 -> 当作 3 阶求解
所有阶段都在标准视角下进行, 最后整体换回调用方的视角
"""
import logging
from typing import List, Tuple

from ..core import config
from ..core.cubie import PieceError, wing_layers
from ..core.errors import InvalidKind, InvalidReason, SolveError, SolveErrorKind
from ..core.moves import Algorithm, apply_algorithm
from ..core.state import CubeState
from ..core.validation import validate
from . import centers, frames, parity, three_by_three, wings
from .search import Deadline, SearchTimeout
from .solution import SolutionStep

logger = logging.getLogger(__name__)

METHOD = "降阶法"


def warm_up():
    three_by_three.warm_up()
    wings.setup_paths()


def reduced_state(state: CubeState) -> CubeState:
    """The 3x3 seen through corners, middle edges and middle centres."""
    size = state.size
    picks = [0, size // 2, size - 1]
    return CubeState(state.stickers[:, picks][:, :, picks])


def _join(algorithms) -> Algorithm:
    total = Algorithm()
    for alg in algorithms:
        total = total + alg
    return total


def _correct(work: CubeState, signatures) -> Tuple[Algorithm, CubeState]:
    alg = _join(parity.correction(s, work.size) for s in signatures)
    return alg, apply_algorithm(work, alg)


def _reduce(work: CubeState, solve_config: config.SolveConfig, deadline: Deadline,
            stages: List[Tuple[str, Algorithm, str]]):
    size = work.size
    hard = not solve_config.allow_fallback
    stage_deadline = deadline if hard else None

    signatures = parity.detect_oll(work)
    if signatures:
        alg, work = _correct(work, signatures)
        layers = ", ".join(str(s.layer) for s in signatures)
        stages.append(("OLL 奇偶纠正", alg, f"第 {layers} 层翼棱为奇排列"))
        logger.info("OLL 奇偶: 第 %s 层", layers)

    alg, work = centers.solve_centers(work, stage_deadline)
    stages.append(("中心块", alg, f"{len(alg)} 步交换子"))

    signatures = parity.detect_pll(work)
    if signatures:
        alg, work = _correct(work, signatures)
        stages.append(("PLL 奇偶纠正", alg, "角块为奇排列"))
        logger.info("PLL 奇偶")

    targets = wings.midge_targets(work) if size % 2 else None
    pairing = Algorithm()
    for layer in wing_layers(size):
        alg, work = wings.place_wings(work, layer, targets, stage_deadline)
        pairing = pairing + alg
    stages.append(("翼棱配对", pairing, f"{len(wing_layers(size))} 层翼棱"))

    # 3 阶阶段的前提：中心与翼棱都已还原
    if not centers.all_done(work) or not wings.all_layers_solved(work, targets):
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="降阶后中心或翼棱未还原")
    reduced = reduced_state(work)
    reason = validate(reduced)
    if reason is not None:
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail=f"降阶结果不是合法 3 阶: {reason}",
                         reason=reason)

    if hard:
        three_deadline = deadline
    else:
        three_deadline = Deadline(config.time_budget_ms(3), solve_config.max_nodes)
    method, three_stages = three_by_three.solve_stages(reduced, solve_config, three_deadline)
    for name, alg in three_stages:
        stages.append((f"3 阶 ({method}): {name}", alg, ""))


def solve(state: CubeState, solve_config: config.SolveConfig,
          deadline: Deadline) -> Tuple[str, List[SolutionStep]]:
    try:
        index, work = frames.normalize(state)
    except PieceError as e:
        reason = InvalidReason(InvalidKind.INVALID_PIECE, str(e))
        raise SolveError(SolveErrorKind.INVALID_INPUT, detail=str(e), reason=reason) from e

    stages: List[Tuple[str, Algorithm, str]] = []
    try:
        _reduce(work, solve_config, deadline, stages)
    except SearchTimeout:
        partial = frames.to_original(_join(alg for _, alg, _ in stages), index)
        raise SolveError(SolveErrorKind.DEADLINE_EXCEEDED, partial=partial,
                         detail=f"降阶超过 {solve_config.max_time_ms} ms") from None
    except SolveError as e:
        if e.kind is SolveErrorKind.DEADLINE_EXCEEDED:
            done = _join(alg for _, alg, _ in stages)
            e.partial = frames.to_original(done + (e.partial or Algorithm()), index)
        raise
    except PieceError as e:
        reason = InvalidReason(InvalidKind.INVALID_PIECE, str(e))
        raise SolveError(SolveErrorKind.INVALID_INPUT, detail=str(e), reason=reason) from e

    steps: List[SolutionStep] = []
    current = state
    for name, alg, explanation in stages:
        alg = frames.to_original(alg, index)
        current = apply_algorithm(current, alg)
        steps.append(SolutionStep(name, alg, current, explanation))
    if not current.is_solved():
        raise SolveError(SolveErrorKind.NO_SOLUTION_FOUND, detail="解法执行后魔方未还原")
    logger.info("%dx%d 降阶完成: %d 步", state.size, state.size, sum(s.move_count for s in steps))
    return METHOD, steps
