"""
配置文件：求解预算、搜索参数和系统配置
"""
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

# 各阶魔方的求解时间预算（毫秒）
TIME_BUDGET_MS = {
    2: 1000,
    3: 2000,
    4: 10000,
    5: 30000,
}
# 6 阶及以上没有硬性预算，作为软目标
LARGE_CUBE_TIME_BUDGET_MS = 120000

# 搜索深度上限
TWO_BY_TWO_MAX_DEPTH = 11
THREE_BY_THREE_MAX_DEPTH = 24
PHASE2_MAX_DEPTH = 18
# 两阶段搜索找到不超过该步数的解即停止, 否则在预算内继续缩短
TWO_PHASE_TARGET_LENGTH = 20

# 两阶段搜索占用总预算的比例，剩余时间留给层先法兜底
TWO_PHASE_BUDGET_SHARE = 0.75

# 每访问多少个节点检查一次截止时间
NODE_CHECK_INTERVAL = 2048

# 节点预算（None 表示不限）
MAX_NODES = None

# 默认打乱步数
SCRAMBLE_LENGTH = {
    2: 11,
    3: 20,
    4: 40,
    5: 60,
}
LARGE_CUBE_SCRAMBLE_PER_LAYER = 20

# 剪枝表缓存目录（None 表示只保存在内存中）
TABLE_CACHE_DIR = os.environ.get("CUBE_ENGINE_TABLE_CACHE")

# 命令行工具读取的配置文件
CONFIG_PATH = "config.yaml"


def time_budget_ms(size: int) -> int:
    return TIME_BUDGET_MS.get(size, LARGE_CUBE_TIME_BUDGET_MS)


def scramble_length(size: int) -> int:
    if size in SCRAMBLE_LENGTH:
        return SCRAMBLE_LENGTH[size]
    return LARGE_CUBE_SCRAMBLE_PER_LAYER * (size // 2) + 20


@dataclass(frozen=True)
class SolveConfig:
    """
    求解配置
    Args:
        max_time_ms: 截止时间（None 表示按阶数取默认预算）
        max_depth: 搜索深度上限（None 表示按阶数取默认值）
        allow_fallback: 两阶段超时后是否使用层先法兜底
        max_nodes: 节点预算
    """
    max_time_ms: Optional[int] = None
    max_depth: Optional[int] = None
    allow_fallback: bool = True
    max_nodes: Optional[int] = MAX_NODES

    @classmethod
    def for_size(cls, size: int, **overrides) -> "SolveConfig":
        return cls(**overrides).resolved(size)

    def resolved(self, size: int) -> "SolveConfig":
        """Fill unset budgets with the per-size defaults."""
        max_time = self.max_time_ms if self.max_time_ms is not None else time_budget_ms(size)
        max_depth = self.max_depth
        if max_depth is None:
            max_depth = TWO_BY_TWO_MAX_DEPTH if size == 2 else THREE_BY_THREE_MAX_DEPTH
        return replace(self, max_time_ms=max_time, max_depth=max_depth)


_CONFIG_KEYS = {f.name for f in fields(SolveConfig)}
_COUNT_KEYS = ('max_time_ms', 'max_depth', 'max_nodes')


def _check_section(section: dict):
    for key in _COUNT_KEYS:
        value = section.get(key)
        if value is None:
            continue
        # bool 是 int 的子类, 需单独排除
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"{key} 必须是非负整数或 null, 实际为 {value!r}")
    if 'allow_fallback' in section and not isinstance(section['allow_fallback'], bool):
        raise ConfigError(f"allow_fallback 必须是 true 或 false, 实际为 {section['allow_fallback']!r}")


def load_config(path: Optional[str] = None) -> SolveConfig:
    """
    从 YAML 读取求解配置；文件不存在时返回默认配置
    YAML 中的 ``solver`` 小节与 SolveConfig 字段同名
    """
    path = path or CONFIG_PATH
    if not os.path.exists(path):
        logger.info("配置文件 %s 不存在，使用默认配置", path)
        return SolveConfig()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件 {path} 顶层必须是映射")
    section = data.get('solver', {}) or {}
    if not isinstance(section, dict):
        raise ConfigError("solver 小节必须是映射")
    unknown = set(section) - _CONFIG_KEYS
    if unknown:
        raise ConfigError(f"未知的配置项: {sorted(unknown)}")
    _check_section(section)
    return SolveConfig(**section)
