#!/usr/bin/env python3
"""
Step Recording
==============

Every meaningful sub-operation of an insertion appends one immutable Step to
a write-once log. Each Step carries a deep copy of the whole tree taken right
after the sub-operation, so any point of a batch can be inspected by index
without re-running the algorithm.
"""

import logging
from enum import Enum
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .node import BTreeNode

logger = logging.getLogger(__name__)


class StepTag(Enum):
    """Kind of sub-operation a step records"""
    INSERT_START = "insert_start"
    DUPLICATE = "duplicate_ignored"
    ROOT_FULL = "root_full"
    SPLIT_NOTICE = "split_notice"
    SPLIT_START = "split_start"
    PROMOTE = "promote"
    SPLIT_COMPLETE = "split_complete"
    LEAF_INSERT = "leaf_insert"
    COMPLETE = "complete"
    REBUILD_START = "rebuild_start"
    REBUILD_COMPLETE = "rebuild_complete"


# Trace icons, as shown next to each step in the trace panel
STEP_ICONS = {
    StepTag.INSERT_START: "🔵",
    StepTag.DUPLICATE: "⚠️",
    StepTag.ROOT_FULL: "🔀",
    StepTag.SPLIT_NOTICE: "⚠️",
    StepTag.SPLIT_START: "🔀",
    StepTag.PROMOTE: "↑",
    StepTag.SPLIT_COMPLETE: "✅",
    StepTag.LEAF_INSERT: "📍",
    StepTag.COMPLETE: "✅",
    StepTag.REBUILD_START: "🔧",
    StepTag.REBUILD_COMPLETE: "✅",
}


@dataclass(frozen=True)
class Step:
    """One recorded sub-operation and the tree as it stood right after it"""
    tag: StepTag
    description: str
    highlight_keys: Tuple[Any, ...]
    snapshot: BTreeNode
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def icon(self) -> str:
        return STEP_ICONS.get(self.tag, "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "tag": self.tag.value,
            "icon": self.icon,
            "description": self.description,
            "highlightKeys": list(self.highlight_keys),
            "tree": self.snapshot.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


class StepRecorder:
    """Append-only step log for the current operation batch"""

    def __init__(self):
        self._steps: List[Step] = []

    def record(self, tag: StepTag, description: str, root: BTreeNode,
               highlight_keys: Optional[Iterable[Any]] = None) -> Step:
        """Append a step whose snapshot is a deep copy of root"""
        step = Step(
            tag=tag,
            description=description,
            highlight_keys=tuple(highlight_keys or ()),
            snapshot=root.clone(),
        )
        self._steps.append(step)
        logger.debug(f"[{tag.value}] {description}")
        return step

    def clear(self) -> None:
        """Start a new batch"""
        self._steps = []

    def steps(self) -> Tuple[Step, ...]:
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
