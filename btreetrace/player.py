#!/usr/bin/env python3
"""
Step playback cursor.

Seeking is plain indexing into an immutable step tuple; nothing is
re-executed. Index -1 means "before the first step".
"""

from typing import Iterator, Optional, Sequence

from .errors import StepIndexError
from .node import BTreeNode
from .steps import Step

BASE_INTERVAL_MS = 800


class StepPlayer:
    """Read cursor over a recorded step log"""

    def __init__(self, steps: Sequence[Step] = (), speed: float = 1.0):
        self.steps = tuple(steps)
        self.speed = speed
        self.current = len(self.steps) - 1

    @property
    def interval_ms(self) -> float:
        """Delay between two steps during playback"""
        return BASE_INTERVAL_MS / self.speed

    def load(self, steps: Sequence[Step]) -> None:
        """Replace the log and move the cursor to its last step"""
        self.steps = tuple(steps)
        self.current = len(self.steps) - 1

    def clear(self) -> None:
        self.steps = ()
        self.current = -1

    def at_end(self) -> bool:
        return self.current >= len(self.steps) - 1

    def step_forward(self) -> bool:
        if self.at_end():
            return False
        self.current += 1
        return True

    def step_backward(self) -> bool:
        if self.current < 0:
            return False
        self.current -= 1
        return True

    def seek(self, index: int) -> int:
        """Move the cursor, clamped to [-1, len - 1]"""
        self.current = max(-1, min(index, len(self.steps) - 1))
        return self.current

    def current_step(self) -> Optional[Step]:
        if self.current < 0 or not self.steps:
            return None
        return self.steps[self.current]

    def current_tree(self) -> BTreeNode:
        """Snapshot at the cursor, or an empty leaf before the first step"""
        step = self.current_step()
        return step.snapshot if step is not None else BTreeNode(is_leaf=True)

    def step_at(self, index: int) -> Step:
        if not 0 <= index < len(self.steps):
            raise StepIndexError(f"Step {index} out of range (0..{len(self.steps) - 1})", index, len(self.steps))
        return self.steps[index]

    def play(self) -> Iterator[Step]:
        """Advance to the end, yielding each step reached"""
        while self.step_forward():
            yield self.steps[self.current]

    def position_text(self) -> str:
        if not self.steps:
            return ""
        return f"Step {self.current + 1} of {len(self.steps)}"
