"""
状态校验测试
"""
import pytest

from cube_engine import (Color, CubeState, Face, InvalidKind, InvalidStateError, SolveError,
                         SolveErrorKind, check_state, is_valid, parse, solve, validate)
from cube_engine.core.cubie import CubieCube
from cube_engine.core.moves import apply_algorithm, orientation_algorithms
from cube_engine.scramble import scramble


def _swap(state, a, b):
    color_a = state.sticker(*a)
    color_b = state.sticker(*b)
    return state.with_sticker(*a, color_b).with_sticker(*b, color_a)


@pytest.mark.parametrize("size", [2, 3, 5, 10, 20])
def test_solved_is_valid(size):
    assert validate(CubeState.solved(size)) is None


@pytest.mark.parametrize("size", [2, 3, 4, 5, 6, 7])
def test_scrambled_is_valid(size):
    assert is_valid(scramble(size, seed=size).state)


@pytest.mark.parametrize("size", [2, 3, 4, 5])
def test_rotated_cube_is_valid(size):
    state = scramble(size, 15, seed=1).state
    for alg in orientation_algorithms(size):
        assert validate(apply_algorithm(state, alg)) is None


def test_color_count_mismatch():
    state = CubeState.solved(3).with_sticker(Face.D, 0, 0, Color.WHITE)
    reason = validate(state)
    assert reason.kind == InvalidKind.COLOR_COUNT_MISMATCH


def test_twisted_corner():
    state = CubieCube(co=(1,) + (0,) * 7).to_state()
    assert validate(state).kind == InvalidKind.CORNER_ORIENTATION


def test_flipped_edge():
    state = CubieCube(eo=(1,) + (0,) * 11).to_state()
    assert validate(state).kind == InvalidKind.EDGE_ORIENTATION


def test_swapped_edges():
    ep = (1, 0) + tuple(range(2, 12))
    assert validate(CubieCube(ep=ep).to_state()).kind == InvalidKind.EDGE_PARITY


def test_swapped_corners():
    cp = (1, 0) + tuple(range(2, 8))
    assert validate(CubieCube(cp=cp).to_state()).kind == InvalidKind.CORNER_PARITY


def test_two_swapped_pairs_is_valid():
    cp = (1, 0) + tuple(range(2, 8))
    ep = (1, 0) + tuple(range(2, 12))
    assert validate(CubieCube(cp=cp, ep=ep).to_state()) is None


def test_twist_on_scrambled_cube_is_detected():
    scrambled = apply_algorithm(CubeState.solved(3), parse("R U F' L2 D B"))
    # 原地扭转 URF 角块的三个贴纸
    a, b, c = (Face.U, 2, 2), (Face.R, 0, 0), (Face.F, 0, 2)
    colors = [scrambled.sticker(*f) for f in (a, b, c)]
    twisted = (scrambled.with_sticker(*a, colors[1])
               .with_sticker(*b, colors[2])
               .with_sticker(*c, colors[0]))
    assert validate(twisted).kind == InvalidKind.CORNER_ORIENTATION


def test_swapped_centers_on_odd_cube():
    state = _swap(CubeState.solved(3), (Face.U, 1, 1), (Face.F, 1, 1))
    assert validate(state).kind == InvalidKind.CENTER_ARRANGEMENT


def test_impossible_corner_on_even_cube():
    state = _swap(CubeState.solved(4), (Face.U, 3, 3), (Face.D, 0, 3))
    assert validate(state).kind == InvalidKind.INVALID_PIECE


def test_impossible_edge_on_odd_cube():
    # 两块棱的同色贴纸互换后形成不存在的白黄棱
    state = _swap(CubeState.solved(5), (Face.F, 0, 2), (Face.D, 0, 2))
    assert validate(state).kind == InvalidKind.INVALID_PIECE


def test_flipped_midge_on_5x5():
    # 5 阶上翻转 UF 中棱
    state = _swap(CubeState.solved(5), (Face.U, 4, 2), (Face.F, 0, 2))
    assert validate(state).kind == InvalidKind.EDGE_ORIENTATION


@pytest.mark.parametrize("size, a, b", [
    (4, (Face.U, 3, 1), (Face.F, 0, 1)),
    (5, (Face.U, 4, 1), (Face.F, 0, 1)),
    (6, (Face.U, 5, 2), (Face.F, 0, 2)),
    (7, (Face.R, 1, 0), (Face.F, 1, 6)),
])
def test_flipped_wing_is_invalid_piece(size, a, b):
    # 翻转单个翼棱后, 与同棱槽另一侧的镜像翼棱重复
    state = _swap(CubeState.solved(size), a, b)
    reason = validate(state)
    assert reason.kind == InvalidKind.INVALID_PIECE
    assert "翼棱" in reason.detail


def test_flipped_wing_rejected_before_solving():
    state = _swap(CubeState.solved(4), (Face.U, 3, 1), (Face.F, 0, 1))
    with pytest.raises(SolveError) as info:
        solve(state)
    assert info.value.kind == SolveErrorKind.INVALID_INPUT
    assert info.value.reason.kind == InvalidKind.INVALID_PIECE


def test_odd_wing_permutation_is_valid():
    assert validate(apply_algorithm(CubeState.solved(4), parse("Rw R'"))) is None


def test_check_state_raises_with_reason():
    state = CubeState.solved(3).with_sticker(Face.U, 0, 0, Color.RED)
    with pytest.raises(InvalidStateError) as info:
        check_state(state)
    assert info.value.reason.kind == InvalidKind.COLOR_COUNT_MISMATCH
    assert check_state(CubeState.solved(3)) == CubeState.solved(3)
