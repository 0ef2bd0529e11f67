#!/usr/bin/env python3
"""
Trace Session
=============

Holds everything an interactive front end needs between calls: the live
tree, the step log of the last batch and a playback cursor over it. The
shell and the HTTP server both drive one TraceSession.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .btree import BTree, SplitPolicy
from .config import get_config
from .errors import KeyParseError
from .export import build_export_record, write_export
from .keys import parse_keys
from .node import BTreeNode
from .player import StepPlayer

logger = logging.getLogger(__name__)


class TraceSession:
    """Live tree plus the cursor over its most recent step log"""

    def __init__(self, max_degree: Optional[int] = None,
                 split_policy: Optional[SplitPolicy] = None,
                 speed: Optional[float] = None):
        config = get_config()
        if max_degree is None:
            max_degree = config.max_degree
        self.split_policy = SplitPolicy(split_policy or config.split_policy)
        self.tree = BTree(max_degree, split_policy=self.split_policy)
        self.player = StepPlayer(speed=speed if speed is not None else config.playback_speed)
        self.export_dir = config.export_dir

    @property
    def max_degree(self) -> int:
        return self.tree.max_degree

    def insert_keys(self, keys: List[Any]) -> int:
        """Run one batch: clear the log, insert keys in order, cursor to the last step"""
        self.tree.begin_batch()
        accepted = self.tree.insert_many(keys)
        self.player.load(self.tree.get_steps())
        logger.info(f"Batch of {len(keys)} keys: {accepted} accepted, {len(self.player.steps)} steps")
        return accepted

    def insert_text(self, text: str) -> int:
        """Parse free text into keys and insert them as one batch"""
        keys = parse_keys(text)
        if not keys:
            raise KeyParseError(f"No valid keys in {text!r}", text)
        return self.insert_keys(keys)

    def change_degree(self, new_max_degree: int) -> None:
        """Switch branching factor, replaying existing keys when there are any"""
        if self.tree.get_inserted_keys():
            self.tree = self.tree.rebuild_with_new_max_degree(new_max_degree)
            self.player.load(self.tree.get_steps())
        else:
            self.tree = BTree(new_max_degree, split_policy=self.split_policy)
            self.player.clear()

    def reset(self) -> None:
        """Empty tree of the same degree"""
        self.tree = BTree(self.max_degree, split_policy=self.split_policy)
        self.player.clear()

    def current_tree(self) -> BTreeNode:
        return self.player.current_tree()

    def export_record(self) -> Dict[str, Any]:
        """Export record for the snapshot at the cursor"""
        return build_export_record(self.max_degree, self.current_tree())

    def export(self, directory: Optional[Union[str, Path]] = None) -> Path:
        return write_export(self.export_record(), directory or self.export_dir)

    def header(self) -> str:
        """Status line: degree counters and playback position"""
        tree = self.tree
        text = (f"m = {tree.max_degree} • Max keys = {tree.max_keys} • "
                f"Min children = {tree.min_children} • Min keys = {tree.min_keys}")
        position = self.player.position_text()
        if position:
            text += f" • {position}"
        return text
