"""
打乱测试
"""
import random

import pytest

from cube_engine import CubeState, apply_algorithm, scramble
from cube_engine.core.config import scramble_length
from cube_engine.scramble import move_vocabulary


@pytest.mark.parametrize("size", [2, 3, 4, 7])
def test_scramble_is_reproducible(size):
    a = scramble(size, seed=42)
    b = scramble(size, seed=42)
    assert a.algorithm == b.algorithm
    assert a.state == b.state


def test_different_seeds_differ():
    assert scramble(3, seed=1).algorithm != scramble(3, seed=2).algorithm


@pytest.mark.parametrize("size", [2, 3, 4, 5, 8])
def test_default_length_and_rules(size):
    result = scramble(size, seed=size)
    moves = list(result.algorithm)
    assert len(moves) == scramble_length(size)
    for prev, move in zip(moves, moves[1:]):
        assert move.face != prev.face
        assert move != prev.inverse()


def test_state_matches_algorithm():
    result = scramble(5, 30, seed=3)
    assert result.state == apply_algorithm(CubeState.solved(5), result.algorithm)
    assert result.notation == str(result.algorithm)


def test_zero_moves_is_solved():
    result = scramble(3, 0, seed=0)
    assert len(result.algorithm) == 0
    assert result.state.is_solved()


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        scramble(3, -1)


def test_caller_rng_is_used():
    a = scramble(3, 20, rng=random.Random(9))
    b = scramble(3, 20, rng=random.Random(9))
    assert a.algorithm == b.algorithm


def test_vocabulary_depths():
    assert {m.depth for m in move_vocabulary(2)} == {1}
    assert {m.depth for m in move_vocabulary(3)} == {1}
    assert {m.depth for m in move_vocabulary(4)} == {1, 2}
    assert {m.depth for m in move_vocabulary(9)} == {1, 2, 3, 4}
    assert len(move_vocabulary(3)) == 18
