"""
视角模块：在整体转体后的视角里求解, 再把转动换回原视角
整体转体不出现在解法里：视角 T 下的解 S 等价于原视角下按面重标号的 S
"""
from functools import lru_cache
from typing import Dict, Tuple

from ..core.moves import Algorithm, apply_algorithm, orientation_algorithms, orientation_face_maps
from ..core.state import CubeState, Face
from ..core.validation import normalize_orientation


def orientation_index(rotation: Algorithm, size: int) -> int:
    return orientation_algorithms(size).index(rotation)


@lru_cache(maxsize=None)
def _inverse_map(index: int) -> Dict[Face, Face]:
    return {new: old for old, new in orientation_face_maps()[index].items()}


def to_original(algorithm: Algorithm, index: int) -> Algorithm:
    """Translate moves found in view ``index`` back to the caller's view."""
    if index == 0:
        return algorithm
    return algorithm.relabel(_inverse_map(index))


def view(state: CubeState, index: int) -> CubeState:
    if index == 0:
        return state
    return apply_algorithm(state, orientation_algorithms(state.size)[index])


@lru_cache(maxsize=None)
def frame_for(front: Face, up: Face) -> int:
    """The view that shows face ``front`` at F and face ``up`` at U."""
    for index, mapping in enumerate(orientation_face_maps()):
        if mapping[front] == Face.F and mapping[up] == Face.U:
            return index
    raise ValueError(f"{front.name} 与 {up.name} 不相邻")


def normalize(state: CubeState) -> Tuple[int, CubeState]:
    """
    Returns (view index, state seen in the standard view).
    Raises PieceError like normalize_orientation.
    """
    rotation, turned = normalize_orientation(state)
    return orientation_index(rotation, state.size), turned
