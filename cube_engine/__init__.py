"""
cube_engine：2 到 20 阶魔方的状态、转动、校验、打乱与求解
"""
from .core import (Algorithm, Color, ConfigError, CubeError, CubeState, DeserializationError, Face,
                   InvalidKind, InvalidReason, InvalidStateError, Move, ParseError, SolveError,
                   SolveErrorKind, apply, apply_algorithm, check_state, deserialize,
                   format_algorithm, is_valid, parse, serialize, validate)
from .core.config import SolveConfig, load_config
from .cube_state import Cube
from .scramble import ScrambleResult, scramble
from .solver import Solution, SolutionStep, solve, solve_detailed
from .solver_wrap import Solver, move_to_text

__version__ = "0.1.0"
