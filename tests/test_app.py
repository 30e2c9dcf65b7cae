"""
命令行测试
"""
import yaml

import app
from cube_engine import Color, CubeState, Face, Move, apply_algorithm, parse, serialize
from cube_engine.solver_wrap import Solver, move_to_text


def test_scramble_command(capsys):
    assert app.main(["scramble", "-n", "3", "--seed", "1"]) == 0
    out = capsys.readouterr().out.strip()
    assert len(out.split()) == 20
    parse(out, 3)


def test_scramble_command_with_record(capsys):
    assert app.main(["scramble", "-n", "4", "-m", "10", "--seed", "2", "--record"]) == 0
    lines = capsys.readouterr().out.split("\n", 1)
    record = yaml.safe_load(lines[1])
    assert record["size"] == 4
    assert len(record["faces"]["U"]) == 16


def test_validate_command(capsys):
    assert app.main(["validate", "--scramble", "R U F'"]) == 0
    assert "✅" in capsys.readouterr().out


def test_validate_command_rejects_bad_record(tmp_path, capsys):
    state = CubeState.solved(3).with_sticker(Face.U, 0, 0, Color.RED)
    path = tmp_path / "state.yaml"
    path.write_text(yaml.safe_dump(serialize(state)), encoding="utf-8")
    assert app.main(["validate", "--state", str(path)]) == 1
    assert "color_count_mismatch" in capsys.readouterr().out


def test_solve_command(capsys):
    assert app.main(["solve", "--scramble", "R U R' U'"]) == 0
    out = capsys.readouterr().out.strip()
    state = apply_algorithm(CubeState.solved(3), parse("R U R' U'"))
    assert apply_algorithm(state, parse(out)).is_solved()


def test_solve_command_with_steps(capsys):
    assert app.main(["solve", "-n", "2", "--scramble", "R U F", "--steps", "--explain"]) == 0
    out = capsys.readouterr().out
    assert "2 阶 IDA*" in out
    assert "顺时针" in out or "逆时针" in out or "180°" in out


def test_solve_command_reports_deadline(capsys):
    assert app.main(["solve", "--scramble", "R U F' L2 D B R'", "--max-time-ms", "0",
                     "--no-fallback"]) == 1
    assert "❌" in capsys.readouterr().out


def test_bad_notation_fails(capsys):
    assert app.main(["validate", "--scramble", "R Q"]) == 1
    assert "Q" in capsys.readouterr().out


def test_move_to_text():
    assert move_to_text(Move(Face.R, 1, 3)) == "右面逆时针90°"
    assert move_to_text(Move(Face.U, 1, 2)) == "上面180°"
    assert move_to_text(Move(Face.F, 3, 1)) == "前面外 3 层顺时针90°"


def test_solver_playback():
    state = apply_algorithm(CubeState.solved(3), parse("R U"))
    solver = Solver()
    moves = solver.solve(state)
    played = []
    while not solver.is_solved():
        played.append(solver.next_move())
        solver.advance()
    assert played == moves
    assert apply_algorithm(state, played).is_solved()
    assert solver.next_move() is None
    solver.reset()
    assert solver.solution is None


def test_solve_command_rejects_bad_config(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("solver:\n  max_time_ms: fast\n", encoding="utf-8")
    assert app.main(["solve", "--scramble", "R U", "--config", str(path)]) == 1
    assert "max_time_ms" in capsys.readouterr().out
