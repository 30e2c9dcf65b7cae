"""
N 阶降阶法测试：中心交换子、翼棱三循环、奇偶与完整求解
"""
import numpy as np
import pytest

from cube_engine import (Algorithm, CubeState, Face, SolveConfig, SolveError, SolveErrorKind,
                         apply_algorithm, parse, solve, solve_detailed)
from cube_engine.core.cubie import wing_layers, wings_from_state
from cube_engine.core.moves import algorithm_permutation, inner_slice, orientation_algorithms
from cube_engine.scramble import scramble
from cube_engine.solver import centers, frames, reduction, three_by_three, wings
from cube_engine.solver.parity import (ParityKind, ParitySignature, correction, detect_oll,
                                       detect_pll, parity_table)


def _inner_positions(size):
    mid = size // 2 if size % 2 else None
    return [(r, c) for r in range(1, size - 1) for c in range(1, size - 1)
            if not (r == mid and c == mid)]


@pytest.mark.parametrize("size", [4, 5, 6, 7])
def test_center_commutators_are_three_cycles(size):
    n2 = size * size
    for r, c in _inner_positions(size):
        perm = algorithm_permutation(size, centers.commutator(size, r, c))
        moved = np.flatnonzero(perm != np.arange(perm.size))
        assert len(moved) == 3
        # F(r, c) 的新贴纸来自 U(r, c)
        assert perm[int(Face.F) * n2 + r * size + c] == int(Face.U) * n2 + r * size + c


@pytest.mark.parametrize("size", [4, 5, 7])
def test_solve_centers(size):
    _, work = frames.normalize(scramble(size, seed=size).state)
    alg, done = centers.solve_centers(work)
    assert centers.all_done(done)
    assert apply_algorithm(work, alg) == done


def test_wing_setup_paths_reach_every_triple():
    assert len(wings.setup_paths()) == 24 * 23 * 22


@pytest.mark.parametrize("size, layer, triple", [
    (4, 1, (0, 5, 9)),
    (4, 1, (23, 1, 12)),
    (6, 2, (3, 17, 8)),
    (7, 1, (10, 11, 0)),
])
def test_wing_cycle_algorithm(size, layer, triple):
    a, t, u = triple
    alg = wings.cycle_algorithm(size, layer, a, t, u)
    dest = wings.position_dest(size, layer, alg)
    expected = list(range(24))
    expected[a], expected[t], expected[u] = t, u, a
    assert dest == expected
    assert np.count_nonzero(algorithm_permutation(size, alg) != np.arange(6 * size * size)) == 6


def test_wings_home_on_solved_cube():
    for size in (4, 5, 8):
        solved = CubeState.solved(size)
        for layer in wing_layers(size):
            assert wings_from_state(solved, layer) == list(range(24))
            assert wings.wing_parity(solved, layer) == 0


def test_wing_layers():
    assert list(wing_layers(3)) == []
    assert list(wing_layers(4)) == [1]
    assert list(wing_layers(5)) == [1]
    assert list(wing_layers(9)) == [1, 2, 3]


def test_oll_parity_detected_from_inner_slice():
    state = apply_algorithm(CubeState.solved(4), parse("Rw R'"))
    assert detect_oll(state) == [ParitySignature(ParityKind.OLL, 1)]
    state = apply_algorithm(CubeState.solved(6), inner_slice(Face.L, 2, 1))
    assert detect_oll(state) == [ParitySignature(ParityKind.OLL, 2)]


def test_pll_parity_detected_on_even_cube():
    assert detect_pll(apply_algorithm(CubeState.solved(4), parse("U"))) == [ParitySignature(ParityKind.PLL)]
    assert detect_pll(CubeState.solved(4)) == []
    assert detect_pll(apply_algorithm(CubeState.solved(5), parse("U"))) == []


def test_parity_table():
    assert correction(ParitySignature(ParityKind.OLL, 1), 4) == inner_slice(Face.R, 1, 1)
    assert correction(ParitySignature(ParityKind.OLL, 3), 8) == inner_slice(Face.R, 3, 1)
    assert correction(ParitySignature(ParityKind.PLL), 6) == parse("U")


def test_parity_table_lists_signatures_per_size():
    assert set(parity_table(4)) == {ParitySignature(ParityKind.OLL, 1), ParitySignature(ParityKind.PLL)}
    assert set(parity_table(7)) == {ParitySignature(ParityKind.OLL, 1), ParitySignature(ParityKind.OLL, 2)}
    with pytest.raises(KeyError):
        correction(ParitySignature(ParityKind.PLL), 5)
    with pytest.raises(KeyError):
        correction(ParitySignature(ParityKind.OLL, 2), 4)


def test_oll_parity_state_is_solved():
    state = apply_algorithm(CubeState.solved(4), parse("Rw R'"))
    solution = solve_detailed(state)
    assert apply_algorithm(state, solution.algorithm).is_solved()
    assert solution.steps[0].description == "OLL 奇偶纠正"


def test_reduced_state_picks_corners_midges_and_centres():
    state = scramble(5, seed=2).state
    reduced = reduction.reduced_state(state)
    assert reduced.size == 3
    assert reduced.sticker(Face.U, 0, 0) == state.sticker(Face.U, 0, 0)
    assert reduced.sticker(Face.F, 1, 2) == state.sticker(Face.F, 2, 4)


@pytest.mark.parametrize("size, seed", [(4, 1), (4, 2), (5, 1), (6, 1), (7, 1)])
def test_reduction_solves(size, seed):
    state = scramble(size, seed=seed).state
    solution = solve_detailed(state)
    assert solution.method == reduction.METHOD
    assert apply_algorithm(state, solution.algorithm).is_solved()
    assert all(m.depth < size for m in solution.algorithm)


def test_reduction_rotated_input():
    state = apply_algorithm(scramble(4, seed=3).state, orientation_algorithms(4)[17])
    alg = solve(state)
    assert apply_algorithm(state, alg).is_solved()


def test_reduction_falls_back_inside_three_by_three_stage():
    state = scramble(4, seed=4).state
    solution = solve_detailed(state, SolveConfig(max_nodes=0))
    assert apply_algorithm(state, solution.algorithm).is_solved()
    assert any(three_by_three.METHOD_LAYER_BY_LAYER in s.description for s in solution.steps)


def test_reduction_hard_deadline_keeps_partial():
    state = scramble(4, seed=5).state
    config = SolveConfig(max_time_ms=0, max_nodes=0, allow_fallback=False)
    with pytest.raises(SolveError) as info:
        solve(state, config)
    assert info.value.kind == SolveErrorKind.DEADLINE_EXCEEDED
    assert isinstance(info.value.partial, Algorithm)


def test_view_translation():
    # 在视角 i 中求得的转动, 换回原视角后效果相同
    state = scramble(5, 20, seed=9).state
    alg = parse("R U' 2Fw D2 L B'")
    for index in (1, 5, 13, 22):
        moved_then_viewed = frames.view(apply_algorithm(state, frames.to_original(alg, index)), index)
        assert moved_then_viewed == apply_algorithm(frames.view(state, index), alg)


def test_frame_for_rejects_opposite_faces():
    with pytest.raises(ValueError):
        frames.frame_for(Face.U, Face.D)
