"""
校验模块：颜色计数 + 块重建 + 奇偶性 + 朝向和
"""
import logging
from typing import Optional, Tuple

import numpy as np

from .cubie import (CORNER_NAMES, DBL, PieceError, corners_from_state, edges_from_state,
                    permutation_parity, wing_layers, wings_from_state)
from .errors import InvalidKind, InvalidReason, InvalidStateError
from .moves import Algorithm, apply_algorithm, orientation_algorithms
from .state import CubeState

logger = logging.getLogger(__name__)


def normalize_orientation(state: CubeState) -> Tuple[Algorithm, CubeState]:
    """
    整体转体到标准朝向
    奇数阶：中心块回到标准配色；偶数阶：DBL 角块回到 DBL 且朝向为 0
    Raises:
        PieceError: 找不到这样的整体转体
    """
    size = state.size
    if size % 2 == 1:
        mid = size // 2
        for alg in orientation_algorithms(size):
            turned = apply_algorithm(state, alg)
            centers = turned.stickers[:, mid, mid]
            if np.array_equal(centers, np.arange(6)):
                return alg, turned
        raise PieceError("中心块不是标准配色的某个整体转体")
    for alg in orientation_algorithms(size):
        turned = apply_algorithm(state, alg)
        try:
            cp, co = corners_from_state(turned)
        except PieceError:
            continue
        if cp[DBL] == DBL and co[DBL] == 0:
            return alg, turned
    raise PieceError("找不到 DBL 角块")


def validate(state: CubeState) -> Optional[InvalidReason]:
    """
    检查状态是否可由合法转动得到
    Returns:
        None 表示合法, 否则返回第一个违反的不变量
    """
    size = state.size
    counts = state.color_counts()
    expected = size * size
    wrong = {c.code: n for c, n in counts.items() if n != expected}
    if wrong:
        return InvalidReason(InvalidKind.COLOR_COUNT_MISMATCH,
                             f"每种颜色应有 {expected} 个, 实际 {wrong}")

    try:
        _, normal = normalize_orientation(state)
    except PieceError as e:
        kind = InvalidKind.CENTER_ARRANGEMENT if size % 2 == 1 else InvalidKind.INVALID_PIECE
        return InvalidReason(kind, str(e))

    try:
        cp, co = corners_from_state(normal)
        if size % 2 == 1:
            ep, eo = edges_from_state(normal)
        else:
            ep, eo = None, None
        # 每层翼棱必须恰好是 24 个不同的真实翼棱
        for layer in wing_layers(size):
            wings_from_state(normal, layer)
    except PieceError as e:
        return InvalidReason(InvalidKind.INVALID_PIECE, str(e))

    if ep is not None:
        corner_parity = permutation_parity(cp)
        edge_parity = permutation_parity(ep)
        if corner_parity != edge_parity:
            if corner_parity:
                return InvalidReason(InvalidKind.CORNER_PARITY, "角块排列为奇排列而棱块为偶排列")
            return InvalidReason(InvalidKind.EDGE_PARITY, "棱块排列为奇排列而角块为偶排列")

    twist = sum(co) % 3
    if twist:
        twisted = [CORNER_NAMES[i] for i, o in enumerate(co) if o]
        return InvalidReason(InvalidKind.CORNER_ORIENTATION,
                             f"角块朝向和 mod 3 = {twist} ({', '.join(twisted)})")
    if eo is not None and sum(eo) % 2:
        return InvalidReason(InvalidKind.EDGE_ORIENTATION, "棱块朝向和为奇数")
    return None


def is_valid(state: CubeState) -> bool:
    return validate(state) is None


def check_state(state: CubeState) -> CubeState:
    """Raise InvalidStateError unless the state is reachable."""
    reason = validate(state)
    if reason is not None:
        logger.debug("invalid state: %s", reason)
        raise InvalidStateError(reason)
    return state
