"""
状态模块：不可变的 NxN 魔方贴纸状态 + 序列化
"""
from enum import IntEnum
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from .errors import DeserializationError

MIN_SIZE = 2
MAX_SIZE = 20


class Face(IntEnum):
    U = 0
    R = 1
    F = 2
    D = 3
    L = 4
    B = 5

    def opposite(self) -> "Face":
        return Face((self + 3) % 6)


class Color(IntEnum):
    # 数值等于该颜色在还原状态下所在面的编号
    WHITE = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    ORANGE = 4
    BLUE = 5

    @property
    def code(self) -> str:
        return COLOR_CODES[self]

    def opposite(self) -> "Color":
        return Color((self + 3) % 6)

    @classmethod
    def from_code(cls, code: str) -> "Color":
        try:
            return _CODE_TO_COLOR[code.upper()]
        except (KeyError, AttributeError):
            raise DeserializationError(f"未知的颜色代码: {code!r}")


# 面顺序：U, R, F, D, L, B
FACE_ORDER = ['U', 'R', 'F', 'D', 'L', 'B']
# 序列化记录中的面顺序
RECORD_FACES = ['U', 'D', 'L', 'R', 'F', 'B']
COLOR_CODES = {
    Color.WHITE: 'W',
    Color.RED: 'R',
    Color.GREEN: 'G',
    Color.YELLOW: 'Y',
    Color.ORANGE: 'O',
    Color.BLUE: 'B',
}
_CODE_TO_COLOR = {v: k for k, v in COLOR_CODES.items()}


def home_color(face: Face) -> Color:
    return Color(int(face))


def _check_size(size) -> int:
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise DeserializationError(f"size 必须是整数, 得到 {size!r}")
    size = int(size)
    if not MIN_SIZE <= size <= MAX_SIZE:
        raise DeserializationError(f"size 超出范围 {MIN_SIZE}..{MAX_SIZE}: {size}")
    return size


class CubeState:
    """Immutable NxN sticker state, one N x N grid per face in U R F D L B order."""

    __slots__ = ('_size', '_stickers', '_hash')

    def __init__(self, stickers: np.ndarray):
        arr = np.array(stickers, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[0] != 6 or arr.shape[1] != arr.shape[2]:
            raise ValueError(f"stickers 形状错误: {arr.shape}")
        self._size = _check_size(arr.shape[1])
        if arr.size and int(arr.max()) > 5:
            raise ValueError("stickers 含有非法颜色值")
        arr.setflags(write=False)
        self._stickers = arr
        self._hash = None

    # --- 构造 ---
    @classmethod
    def solved(cls, size: int) -> "CubeState":
        size = _check_size(size)
        arr = np.empty((6, size, size), dtype=np.uint8)
        for face in Face:
            arr[face] = int(home_color(face))
        return cls(arr)

    @classmethod
    def from_faces(cls, faces: Mapping[str, Sequence[Sequence[int]]]) -> "CubeState":
        """Build a state from {face letter: N x N grid of Color values}."""
        grids = [np.asarray(faces[name], dtype=np.uint8) for name in FACE_ORDER]
        return cls(np.stack(grids))

    @classmethod
    def _from_flat(cls, flat: np.ndarray, size: int) -> "CubeState":
        # 内部快速路径：flat 已经是新分配的 uint8 数组
        obj = cls.__new__(cls)
        arr = flat.reshape(6, size, size)
        arr.setflags(write=False)
        obj._size = size
        obj._stickers = arr
        obj._hash = None
        return obj

    @classmethod
    def from_facelet_string(cls, text: str) -> "CubeState":
        """
        从 Kociemba 风格的状态串构建（面序 URFDLB，每个字符是该颜色所属的面）
        """
        text = text.strip()
        n2, rem = divmod(len(text), 6)
        size = int(round(n2 ** 0.5))
        if rem or size * size != n2:
            raise DeserializationError(f"状态串长度非法: {len(text)}")
        size = _check_size(size)
        try:
            values = [FACE_ORDER.index(ch) for ch in text]
        except ValueError:
            raise DeserializationError(f"状态串含有非法字符: {text!r}")
        return cls(np.array(values, dtype=np.uint8).reshape(6, size, size))

    # --- 查询 ---
    @property
    def size(self) -> int:
        return self._size

    @property
    def stickers(self) -> np.ndarray:
        return self._stickers

    def flat(self) -> np.ndarray:
        return self._stickers.reshape(-1)

    def face(self, face: Face) -> np.ndarray:
        return self._stickers[int(face)]

    def sticker(self, face: Face, row: int, col: int) -> Color:
        return Color(int(self._stickers[int(face), row, col]))

    def color_counts(self) -> Dict[Color, int]:
        counts = np.bincount(self._stickers.reshape(-1), minlength=6)
        return {c: int(counts[c]) for c in Color}

    def is_solved(self) -> bool:
        """每个面都是单一颜色即视为还原（不要求朝向）"""
        grids = self._stickers.reshape(6, -1)
        return bool(np.all(grids == grids[:, :1]))

    def center_colors(self) -> Optional[List[Color]]:
        if self._size % 2 == 0:
            return None
        mid = self._size // 2
        return [Color(int(self._stickers[f, mid, mid])) for f in range(6)]

    def to_facelet_string(self) -> str:
        return ''.join(FACE_ORDER[v] for v in self._stickers.reshape(-1))

    def with_sticker(self, face: Face, row: int, col: int, color: Color) -> "CubeState":
        arr = self._stickers.copy()
        arr[int(face), row, col] = int(color)
        return CubeState(arr)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CubeState):
            return NotImplemented
        return self._size == other._size and np.array_equal(self._stickers, other._stickers)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self._size, self._stickers.tobytes()))
        return self._hash

    def __repr__(self) -> str:
        return f"CubeState(size={self._size}, solved={self.is_solved()})"


def serialize(state: CubeState) -> dict:
    faces = {}
    for name in RECORD_FACES:
        grid = state.stickers[FACE_ORDER.index(name)]
        faces[name] = [COLOR_CODES[Color(int(v))] for v in grid.reshape(-1)]
    return {"size": state.size, "faces": faces}


def deserialize(record: Mapping) -> CubeState:
    """
    反序列化；任何结构错误都在校验之前抛出 DeserializationError
    """
    if not isinstance(record, Mapping):
        raise DeserializationError("记录必须是映射")
    if "size" not in record or "faces" not in record:
        raise DeserializationError("记录缺少 size 或 faces")
    size = _check_size(record["size"])
    faces = record["faces"]
    if not isinstance(faces, Mapping):
        raise DeserializationError("faces 必须是映射")
    if set(faces) != set(RECORD_FACES):
        raise DeserializationError(f"faces 必须恰好包含 {RECORD_FACES}, 得到 {sorted(faces)}")
    arr = np.empty((6, size, size), dtype=np.uint8)
    for name in RECORD_FACES:
        codes = faces[name]
        if isinstance(codes, str) or not isinstance(codes, Sequence):
            raise DeserializationError(f"面 {name} 必须是颜色代码列表")
        if len(codes) != size * size:
            raise DeserializationError(
                f"面 {name} 长度应为 {size * size}, 实际为 {len(codes)}")
        values = [int(Color.from_code(c)) for c in codes]
        arr[FACE_ORDER.index(name)] = np.array(values, dtype=np.uint8).reshape(size, size)
    return CubeState(arr)
