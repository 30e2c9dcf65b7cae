"""
转动引擎测试
"""
import numpy as np
import pytest

from cube_engine import Algorithm, Color, CubeState, Face, Move, apply, apply_algorithm, parse
from cube_engine.core.moves import (inner_slice, move_permutation, orientation_algorithms,
                                    orientation_face_maps, rotation, slice_move)
from cube_engine.scramble import scramble


def _moves_for(size):
    depths = range(1, min(size - 1, 3) + 1)
    return [Move(face, depth, turns) for face in Face for depth in depths for turns in (1, 2, 3)]


@pytest.mark.parametrize("size", [2, 3, 5, 10, 20])
def test_move_then_inverse_is_identity(size):
    state = scramble(size, 10, seed=size).state
    for move in _moves_for(size):
        assert apply(apply(state, move), move.inverse()) == state


@pytest.mark.parametrize("size", [2, 3, 5, 10, 20])
def test_quarter_turn_has_order_four(size):
    state = scramble(size, 10, seed=size + 1).state
    for face in Face:
        move = Move(face, 1, 1)
        assert apply(state, move) != state
        turned = state
        for _ in range(4):
            turned = apply(turned, move)
        assert turned == state


@pytest.mark.parametrize("size", [3, 4, 5, 8, 20])
def test_wide_quarter_turns_have_order_four(size):
    state = scramble(size, 10, seed=size + 2).state
    for face in Face:
        for depth in range(2, size):
            move = Move(face, depth, 1)
            turned = state
            for _ in range(4):
                turned = apply(turned, move)
            assert turned == state, move


@pytest.mark.parametrize("size", [3, 4, 5, 8, 20])
def test_inner_slice_quarter_turns_have_order_four(size):
    state = scramble(size, 10, seed=size + 3).state
    for face in Face:
        for layer in range(1, size - 1):
            alg = inner_slice(face, layer, 1)
            turned = state
            for _ in range(4):
                turned = apply_algorithm(turned, alg)
            assert turned == state, alg
            assert apply_algorithm(state, alg) != state


@pytest.mark.parametrize("size", [2, 3, 6])
def test_permutation_is_bijection(size):
    for move in _moves_for(size):
        src = move_permutation(size, move.face, move.depth, move.turns)
        assert sorted(src.tolist()) == list(range(6 * size * size))


def test_r_move_on_solved_3x3():
    state = apply(CubeState.solved(3), Move(Face.R))
    # 前面的右列转到上面, 下面的右列转到前面
    assert np.all(state.face(Face.U)[:, 2] == Color.GREEN)
    assert np.all(state.face(Face.F)[:, 2] == Color.YELLOW)
    assert np.all(state.face(Face.D)[:, 2] == Color.BLUE)
    assert np.all(state.face(Face.B)[:, 0] == Color.WHITE)
    assert np.all(state.face(Face.R) == Color.RED)
    assert np.all(state.face(Face.L) == Color.ORANGE)
    assert np.all(state.face(Face.U)[:, :2] == Color.WHITE)


def test_u_move_on_solved_3x3():
    state = apply(CubeState.solved(3), Move(Face.U))
    # 顺时针（从上往下看）：前面的顶行转到左面
    assert np.all(state.face(Face.L)[0] == Color.GREEN)
    assert np.all(state.face(Face.F)[0] == Color.RED)
    assert np.all(state.face(Face.R)[0] == Color.BLUE)
    assert np.all(state.face(Face.B)[0] == Color.ORANGE)


def test_wide_move_turns_two_layers():
    state = apply(CubeState.solved(4), Move(Face.R, 2))
    assert np.all(state.face(Face.U)[:, 2:] == Color.GREEN)
    assert np.all(state.face(Face.U)[:, :2] == Color.WHITE)


def test_inner_slice_leaves_outer_layer():
    state = apply_algorithm(CubeState.solved(5), inner_slice(Face.R, 1, 1))
    up = state.face(Face.U)
    assert np.all(up[:, 3] == Color.GREEN)
    assert np.all(up[:, [0, 1, 2, 4]] == Color.WHITE)
    assert np.all(state.face(Face.R) == Color.RED)


def test_depth_out_of_range():
    with pytest.raises(ValueError):
        apply(CubeState.solved(3), Move(Face.R, 3))
    with pytest.raises(ValueError):
        Move(Face.R, 1, 4)


def test_rotation_x_moves_front_to_up():
    state = apply_algorithm(CubeState.solved(3), rotation('x', 1, 3))
    assert np.all(state.face(Face.U) == Color.GREEN)
    assert np.all(state.face(Face.F) == Color.YELLOW)
    assert np.all(state.face(Face.R) == Color.RED)


def test_rotation_equals_outer_and_slice_moves():
    assert parse("x", 3).equivalent(parse("R M' L'", 3), size=3)
    assert parse("y", 3).equivalent(parse("U E' D'", 3), size=3)
    assert parse("z", 3).equivalent(parse("F S B'", 3), size=3)


def test_m_follows_l_direction():
    state = apply_algorithm(CubeState.solved(5), slice_move('M', 1, 5))
    assert np.all(state.face(Face.F)[:, 2] == Color.WHITE)
    assert np.all(state.face(Face.F)[:, [0, 1, 3, 4]] == Color.GREEN)


def test_slice_move_rejects_even_size():
    with pytest.raises(ValueError):
        slice_move('M', 1, 4)


def test_orientations_are_distinct():
    solved = CubeState.solved(3)
    states = {apply_algorithm(solved, alg) for alg in orientation_algorithms(3)}
    assert len(states) == 24
    maps = orientation_face_maps()
    assert maps[0] == {f: f for f in Face}
    assert len({tuple(m[f] for f in Face) for m in maps}) == 24


def test_algorithm_inverse_restores_state():
    alg = parse("R U2 3Fw' D L' Bw2", 6)
    state = CubeState.solved(6)
    assert apply_algorithm(apply_algorithm(state, alg), alg.inverse()) == state


def test_simplified_cancels_and_merges():
    assert parse("R R").simplified() == parse("R2")
    assert parse("R R'").simplified() == Algorithm()
    assert parse("U R R' U").simplified() == parse("U2")
    assert parse("R Rw").simplified() == parse("R Rw")


def test_equivalent_without_size_is_cancellation_aware():
    assert parse("R U U' R").equivalent(parse("R2"))
    assert not parse("R U").equivalent(parse("U R"))


def test_equivalent_with_size_compares_effect():
    assert parse("R2 L2").equivalent(parse("L2 R2"), size=3)
    assert not parse("R2 L2").equivalent(parse("L2 R2"))
    assert not parse("R U").equivalent(parse("U R"), size=3)


def test_relabel_maps_faces():
    alg = parse("R U' 3Fw2")
    relabeled = alg.relabel({Face.R: Face.F, Face.U: Face.D})
    assert str(relabeled) == "F D' 3Fw2"
