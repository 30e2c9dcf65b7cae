from .errors import (CubeError, ConfigError, DeserializationError, InvalidKind, InvalidReason,
                     InvalidStateError, ParseError, SolveError, SolveErrorKind)
from .state import Color, CubeState, Face, deserialize, serialize
from .moves import Algorithm, Move, apply, apply_algorithm
from .notation import format_algorithm, parse
from .validation import check_state, is_valid, validate
