"""
解法模块：分阶段的求解结果
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.moves import Algorithm
from ..core.notation import format_algorithm
from ..core.state import CubeState


@dataclass(frozen=True)
class SolutionStep:
    """One solver stage: its moves and the state they lead to."""
    description: str
    algorithm: Algorithm
    state: Optional[CubeState] = None
    explanation: str = ""

    @property
    def move_count(self) -> int:
        return len(self.algorithm)

    @property
    def notation(self) -> str:
        return format_algorithm(self.algorithm)


@dataclass(frozen=True)
class Solution:
    steps: List[SolutionStep] = field(default_factory=list)
    method: str = ""
    time_ms: float = 0.0

    @property
    def algorithm(self) -> Algorithm:
        alg = Algorithm()
        for step in self.steps:
            alg = alg + step.algorithm
        return alg

    @property
    def move_count(self) -> int:
        return sum(s.move_count for s in self.steps)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def notation(self) -> str:
        return format_algorithm(self.algorithm)

    def summary(self) -> str:
        lines = [f"{self.method}: {self.move_count} 步, {self.step_count} 个阶段, 用时 {self.time_ms:.0f} ms"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step.description} ({step.move_count} 步): {step.notation}")
        return "\n".join(lines)
