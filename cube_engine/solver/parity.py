"""
奇偶模块：N 阶降阶法的奇偶特征与纠正公式对照表

OLL 奇偶：第 k 层翼棱为奇排列, 配对后表现为单条翻转的棱。纠正：第 k 层单层转 90°。
PLL 奇偶（偶数阶）：角块为奇排列而棱块已归位, 表现为两条棱互换。纠正：U。
两种特征在配对过程中保持不变, 所以在降阶开始时检测并纠正。
"""
from enum import Enum
from functools import lru_cache
from typing import Dict, List, NamedTuple

from ..core.cubie import corners_from_state, permutation_parity, wing_layers
from ..core.moves import Algorithm, inner_slice
from ..core.notation import parse
from ..core.state import CubeState, Face
from . import wings


class ParityKind(Enum):
    OLL = "oll"
    PLL = "pll"


class ParitySignature(NamedTuple):
    kind: ParityKind
    layer: int = 0


@lru_cache(maxsize=None)
def parity_table(size: int) -> Dict[ParitySignature, Algorithm]:
    """Every parity signature a ``size`` cube can show, with its corrective algorithm."""
    table = {ParitySignature(ParityKind.OLL, layer): inner_slice(Face.R, layer, 1)
             for layer in wing_layers(size)}
    if size % 2 == 0:
        table[ParitySignature(ParityKind.PLL)] = parse("U")
    return table


def correction(signature: ParitySignature, size: int) -> Algorithm:
    """
    Raises:
        KeyError: 该阶数不会出现这种奇偶特征
    """
    return parity_table(size)[signature]


def detect_oll(state: CubeState) -> List[ParitySignature]:
    """Wing orbits whose permutation is odd; the state must be in the standard view."""
    return [ParitySignature(ParityKind.OLL, layer)
            for layer in wing_layers(state.size)
            if wings.wing_parity(state, layer)]


def detect_pll(state: CubeState) -> List[ParitySignature]:
    """Even sizes only: an odd corner permutation cannot be fixed by edge pairing."""
    if state.size % 2:
        return []
    cp, _ = corners_from_state(state)
    if permutation_parity(cp):
        return [ParitySignature(ParityKind.PLL)]
    return []
