"""
搜索工具：截止时间与节点预算
"""
import time
from typing import Optional

from ..core.config import NODE_CHECK_INTERVAL


class SearchTimeout(Exception):
    """Raised inside a search when the deadline or node budget runs out."""


class Deadline:
    """
    单调时钟截止时间 + 节点计数
    搜索循环在每次加深和每 NODE_CHECK_INTERVAL 个节点时调用 check()
    """

    def __init__(self, max_time_ms: Optional[float], max_nodes: Optional[int] = None,
                 interval: int = NODE_CHECK_INTERVAL):
        self.start = time.monotonic()
        self.expires = None if max_time_ms is None else self.start + max_time_ms / 1000.0
        self.max_nodes = max_nodes
        self.interval = interval
        self.nodes = 0
        self._next_check = interval

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start) * 1000.0

    def expired(self) -> bool:
        if self.expires is not None and time.monotonic() > self.expires:
            return True
        return self.max_nodes is not None and self.nodes >= self.max_nodes

    def bounded(self) -> bool:
        return self.expires is not None or self.max_nodes is not None

    def check(self):
        if self.expired():
            raise SearchTimeout()

    def tick(self):
        """Count one node; check the clock every ``interval`` nodes."""
        self.nodes += 1
        if self.nodes >= self._next_check:
            self._next_check = self.nodes + self.interval
            self.check()

    def sub(self, share: float, max_nodes: Optional[int] = None) -> "Deadline":
        """A child deadline ending after ``share`` of the remaining time."""
        if self.expires is None:
            return Deadline(None, max_nodes, self.interval)
        remaining = max(0.0, self.expires - time.monotonic())
        return Deadline(remaining * share * 1000.0, max_nodes, self.interval)
