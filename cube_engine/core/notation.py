"""
记号模块：标准魔方记号 <-> Algorithm
支持 R R' R2, Rw 3Rw', M E S, x y z
"""
import re
from typing import List, Optional

from .errors import ParseError
from .moves import Algorithm, Move, ROTATION_AXES, SLICE_FACES, rotation, slice_move
from .state import Face

_TOKEN = re.compile(r"(?P<depth>\d+)?(?P<face>[A-Za-z])(?P<w1>w)?(?P<mod>['2’])?(?P<w2>w)?")
_MODIFIER_TURNS = {None: 1, "'": 3, "’": 3, "2": 2}
FACE_LETTERS = frozenset(f.name for f in Face)


def _parse_token(token: str, position: int, size: Optional[int]) -> List[Move]:
    m = _TOKEN.fullmatch(token)
    if not m:
        raise ParseError(token, position, "格式错误")
    letter = m.group('face')
    wide = m.group('w1') is not None or m.group('w2') is not None
    if m.group('w1') and m.group('w2'):
        raise ParseError(token, position, "重复的 w")
    turns = _MODIFIER_TURNS[m.group('mod')]
    depth_text = m.group('depth')

    upper = letter.upper()
    if upper in FACE_LETTERS:
        if depth_text is not None and not wide:
            raise ParseError(token, position, "层数前缀只能用于宽层转动")
        depth = 1
        if wide:
            depth = int(depth_text) if depth_text is not None else 2
            if depth < 1:
                raise ParseError(token, position, "层数必须 >= 1")
        if size is not None and depth >= max(size, 2):
            raise ParseError(token, position, f"层数超出 {size}x{size} 魔方")
        return [Move(Face[upper], depth, turns)]

    if depth_text is not None or wide:
        raise ParseError(token, position, "整体转动/中层转动不能带层数或 w")
    if letter.lower() in ROTATION_AXES:
        if size is None:
            raise ParseError(token, position, "整体转动需要指定 size")
        return list(rotation(letter.lower(), turns, size))
    if upper in SLICE_FACES:
        if size is None:
            raise ParseError(token, position, "中层转动需要指定 size")
        if size % 2 == 0 or size < 3:
            raise ParseError(token, position, f"{upper} 只在奇数阶魔方上有定义")
        return list(slice_move(upper, turns, size))
    raise ParseError(token, position, "未知的面")


def parse(text: str, size: Optional[int] = None) -> Algorithm:
    """
    解析以空白分隔的记号序列
    Args:
        text: 例如 "R U R' U'"
        size: 魔方阶数；给定时检查层数并展开 x/y/z 与 M/E/S
    Returns:
        Algorithm（空串返回空 Algorithm）
    Raises:
        ParseError: 记号非法（不返回部分结果）
    """
    moves: List[Move] = []
    for match in re.finditer(r"\S+", text):
        moves.extend(_parse_token(match.group(), match.start(), size))
    return Algorithm(tuple(moves))


def format_move(move: Move) -> str:
    return str(move)


def format_algorithm(algorithm: Algorithm) -> str:
    return " ".join(format_move(m) for m in algorithm)
