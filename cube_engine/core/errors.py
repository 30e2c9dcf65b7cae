"""
错误模块：解析、反序列化、校验与求解的类型化异常
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CubeError(Exception):
    """Base class for every error raised by cube_engine."""


class ConfigError(CubeError):
    pass


class ParseError(CubeError, ValueError):
    """Malformed notation token."""

    def __init__(self, token: str, position: int, message: str = ""):
        self.token = token
        self.position = position
        text = f"无法解析的记号 {token!r} (位置 {position})"
        if message:
            text += f": {message}"
        super().__init__(text)


class DeserializationError(CubeError, ValueError):
    pass


class InvalidKind(Enum):
    COLOR_COUNT_MISMATCH = "color_count_mismatch"
    CORNER_PARITY = "corner_parity"
    EDGE_PARITY = "edge_parity"
    CORNER_ORIENTATION = "corner_orientation"
    EDGE_ORIENTATION = "edge_orientation"
    CENTER_ARRANGEMENT = "center_arrangement"
    INVALID_PIECE = "invalid_piece"


@dataclass(frozen=True)
class InvalidReason:
    kind: InvalidKind
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


class InvalidStateError(CubeError):
    def __init__(self, reason: InvalidReason):
        self.reason = reason
        super().__init__(str(reason))


class SolveErrorKind(Enum):
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NO_SOLUTION_FOUND = "no_solution_found"
    INVALID_INPUT = "invalid_input"


class SolveError(CubeError):
    """
    求解失败
    Args:
        kind: 失败类型
        partial: 超时时已找到的部分解（可能为 None）
        detail: 说明文字
    """

    def __init__(self, kind: SolveErrorKind, partial=None, detail: str = "",
                 reason: Optional[InvalidReason] = None):
        self.kind = kind
        self.partial = partial
        self.detail = detail
        self.reason = reason
        text = kind.value
        if detail:
            text += f": {detail}"
        super().__init__(text)
