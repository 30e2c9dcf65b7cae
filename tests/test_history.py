"""
撤销/重做与 Cube 封装测试
"""
import pytest

from cube_engine import Color, Cube, CubeState, Face, InvalidKind
from cube_engine.core.history import History


def test_history_undo_redo():
    a, b, c = CubeState.solved(2), CubeState.solved(3), CubeState.solved(4)
    history = History(a)
    history.push(b)
    history.push(c)
    assert history.undo() == b
    assert history.undo() == a
    assert history.undo() is None
    assert history.redo() == b
    history.push(a)
    assert not history.can_redo()
    assert history.past_len() == 2


def test_history_is_bounded():
    history = History(CubeState.solved(2), max_size=3)
    for size in range(3, 8):
        history.push(CubeState.solved(size))
    assert history.past_len() == 3


def test_cube_apply_and_undo():
    cube = Cube(3)
    cube.apply("R U R' U'")
    assert not cube.is_solved()
    assert cube.undo()
    assert cube.is_solved()
    assert not cube.undo()
    assert cube.redo()
    assert not cube.is_solved()


def test_cube_six_sexy_moves_is_identity():
    cube = Cube(4)
    for _ in range(6):
        cube.apply("R U R' U'")
    assert cube.is_solved()


def test_cube_paint_and_validate():
    cube = Cube(3)
    cube.paint(Face.U, 0, 0, Color.RED)
    assert not cube.is_valid()
    assert cube.validate().kind == InvalidKind.COLOR_COUNT_MISMATCH
    assert cube.color_counts()['R'] == 10
    cube.undo()
    assert cube.is_valid()


def test_cube_record_round_trip():
    cube = Cube(5)
    cube.apply("Rw U2 3Fw'")
    copy = Cube.from_record(cube.to_record())
    assert copy.state == cube.state
    assert copy.size == 5


def test_cube_set_state_checks_size():
    cube = Cube(3)
    with pytest.raises(ValueError):
        cube.set_state(CubeState.solved(4))
    cube.apply("F")
    cube.reset()
    assert cube.is_solved()
