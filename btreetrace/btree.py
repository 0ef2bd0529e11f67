#!/usr/bin/env python3
"""
btreetrace B-Tree Engine
========================

An insert-only B-Tree that records every structural sub-step it performs.

Features:
- Top-down insertion with preemptive splitting (no backtracking)
- Bottom-up overflow splitting for odd branching factors
- Deep-copy snapshot after every sub-operation (seekable step log)
- Replay log of accepted keys, used to rebuild under a new branching factor

Notes:
- Duplicate keys are a recorded no-op, never an error
- Deletion is not supported
- The root is exempt from the minimum key count
"""

import logging
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .errors import InvalidDegreeError
from .node import BTreeNode
from .steps import Step, StepRecorder, StepTag

logger = logging.getLogger(__name__)

MIN_DEGREE = 3


class SplitPolicy(Enum):
    """When a node is split during insertion"""
    AUTO = "auto"              # preemptive for even degrees, overflow for odd
    PREEMPTIVE = "preemptive"  # split full nodes on the way down
    OVERFLOW = "overflow"      # split overfull nodes on the way back up


class BTree:
    """
    Step-recording B-Tree

    Properties:
    - All leaves are at the same depth
    - Every node holds at most max_degree - 1 keys
    - Non-root nodes hold at least ceil(max_degree / 2) - 1 keys

    Each insert() appends steps to the current batch log; begin_batch()
    clears that log. Previously returned step tuples are never modified.
    """

    def __init__(self, max_degree: int = 3, split_policy: SplitPolicy = SplitPolicy.AUTO):
        """
        Initialize B-Tree

        Args:
            max_degree: Maximum number of children per node (at least 3)
            split_policy: Split discipline, see SplitPolicy
        """
        if isinstance(max_degree, bool) or not isinstance(max_degree, int):
            raise InvalidDegreeError(f"maxDegree must be an integer, got {max_degree!r}", max_degree)
        if max_degree < MIN_DEGREE:
            raise InvalidDegreeError(f"maxDegree must be at least {MIN_DEGREE}", max_degree)

        self.root = BTreeNode(is_leaf=True)
        self._max_degree = max_degree
        self.split_policy = SplitPolicy(split_policy)
        self._recorder = StepRecorder()
        self._inserted_keys: List[Any] = []

        logger.info(f"Created B-Tree with maxDegree {max_degree} ({self.effective_policy.value} splits)")

    # ------------------------------------------------------------------
    # Degree-derived quantities
    # ------------------------------------------------------------------

    @property
    def max_degree(self) -> int:
        return self._max_degree

    @property
    def max_keys(self) -> int:
        return self._max_degree - 1

    @property
    def min_children(self) -> int:
        return (self._max_degree + 1) // 2

    @property
    def min_keys(self) -> int:
        return self.min_children - 1

    @property
    def effective_policy(self) -> SplitPolicy:
        """Resolve AUTO against the current degree"""
        if self.split_policy is SplitPolicy.AUTO:
            return SplitPolicy.PREEMPTIVE if self._max_degree % 2 == 0 else SplitPolicy.OVERFLOW
        return self.split_policy

    # ------------------------------------------------------------------
    # Step log
    # ------------------------------------------------------------------

    def _record(self, tag: StepTag, description: str, highlight_keys: Iterable[Any] = ()) -> Step:
        return self._recorder.record(tag, description, self.root, highlight_keys)

    def begin_batch(self) -> None:
        """Clear the step log before a new batch of insertions"""
        self._recorder.clear()

    def get_steps(self) -> Tuple[Step, ...]:
        """Ordered, immutable step log of the current batch"""
        return self._recorder.steps()

    def get_inserted_keys(self) -> List[Any]:
        """Copy of the replay log (every accepted key, in order)"""
        return list(self._inserted_keys)

    def clone_tree(self) -> BTreeNode:
        return self.root.clone()

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def contains(self, key: Any) -> bool:
        """Check whether key is already stored, without mutating anything"""
        return self._search_node(self.root, key)

    def _search_node(self, node: BTreeNode, key: Any) -> bool:
        idx = node.find_key_index(key)

        if idx < len(node.keys) and node.keys[idx] == key:
            return True

        if node.is_leaf:
            return False

        return self._search_node(node.children[idx], key)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert(self, key: Any) -> bool:
        """
        Insert a key, recording every sub-step

        Args:
            key: Comparable key to insert

        Returns:
            True if the key was accepted, False if it was a duplicate
        """
        if self.contains(key):
            logger.debug(f"Duplicate key {key} ignored")
            self._record(StepTag.DUPLICATE, f"Key {key} already exists (duplicate ignored)", [key])
            return False

        self._record(StepTag.INSERT_START, f"Insert {key}", [key])

        if self.effective_policy is SplitPolicy.PREEMPTIVE:
            # If root is full, split it before descending
            if self.root.is_full(self.max_keys):
                self._record(
                    StepTag.ROOT_FULL,
                    f"Root is full ({len(self.root.keys)} keys, max {self.max_keys})"
                )
                self._grow_root()
            self._insert_non_full(self.root, key)
        else:
            self._insert_overflow(self.root, key)
            if len(self.root.keys) > self.max_keys:
                self._record(
                    StepTag.ROOT_FULL,
                    f"Root overflowed ({len(self.root.keys)} keys, max {self.max_keys})"
                )
                self._grow_root()

        self._inserted_keys.append(key)
        self._record(StepTag.COMPLETE, f"Insertion of {key} complete")
        return True

    def insert_many(self, keys: Iterable[Any]) -> int:
        """Insert keys in order; returns how many were accepted"""
        return sum(1 for key in keys if self.insert(key))

    def _grow_root(self) -> None:
        """Put a new empty root above the current one and split the old root into it"""
        new_root = BTreeNode(is_leaf=False, children=[self.root])
        self.root = new_root
        self._split_child(new_root, 0)

    def _insert_non_full(self, node: BTreeNode, key: Any) -> None:
        """Insert into a node that is known to have room for one more key"""
        idx = node.find_key_index(key)

        if node.is_leaf:
            node.keys.insert(idx, key)
            self._record(StepTag.LEAF_INSERT, f"Inserted {key} into leaf node {node.describe()}", [key])
            return

        if node.children[idx].is_full(self.max_keys):
            self._record(StepTag.SPLIT_NOTICE, "Child node is full, splitting...")
            self._split_child(node, idx)
            # The promoted key now sits at idx; key may belong to the new right sibling
            if key > node.keys[idx]:
                idx += 1

        self._insert_non_full(node.children[idx], key)

    def _insert_overflow(self, node: BTreeNode, key: Any) -> None:
        """Insert below node, splitting any child left with one key too many"""
        idx = node.find_key_index(key)

        if node.is_leaf:
            node.keys.insert(idx, key)
            self._record(StepTag.LEAF_INSERT, f"Inserted {key} into leaf node {node.describe()}", [key])
            return

        child = node.children[idx]
        self._insert_overflow(child, key)

        if len(child.keys) > self.max_keys:
            self._record(
                StepTag.SPLIT_NOTICE,
                f"Child node overflowed ({len(child.keys)} keys, max {self.max_keys}), splitting..."
            )
            self._split_child(node, idx)

    def _split_child(self, parent: BTreeNode, child_idx: int) -> None:
        """
        Split the child at child_idx around its median

        The key at index min_children - 1 moves up into parent; keys after it
        (and, for internal nodes, children from min_children on) move into a
        new right sibling with the same leaf flag.
        """
        full_child = parent.children[child_idx]
        mid_idx = self.min_children - 1
        mid_key = full_child.keys[mid_idx]

        self._record(StepTag.SPLIT_START, "Splitting node [" + " | ".join(str(k) for k in full_child.keys) + "]")
        self._record(StepTag.PROMOTE, f"Promote {mid_key} to parent", [mid_key])

        new_child = BTreeNode(is_leaf=full_child.is_leaf)
        new_child.keys = full_child.keys[mid_idx + 1:]
        if not full_child.is_leaf:
            new_child.children = full_child.children[self.min_children:]
            full_child.children = full_child.children[:self.min_children]

        # Median is promoted, not duplicated
        full_child.keys = full_child.keys[:mid_idx]

        parent.keys.insert(child_idx, mid_key)
        parent.children.insert(child_idx + 1, new_child)

        logger.debug(f"Split {full_child.describe()} | {mid_key} | {new_child.describe()}")
        self._record(
            StepTag.SPLIT_COMPLETE,
            f"Split complete: left {full_child.describe()}, promoted {mid_key}, right {new_child.describe()}"
        )

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild_with_new_max_degree(self, new_max_degree: int) -> 'BTree':
        """
        Build a fresh tree of another degree by replaying the accepted keys

        The returned tree's get_steps() holds the full replay trace. This tree
        is left untouched.
        """
        keys_to_reinsert = self.get_inserted_keys()
        new_tree = BTree(new_max_degree, split_policy=self.split_policy)

        if keys_to_reinsert:
            new_tree._record(StepTag.REBUILD_START, f"Rebuilding tree with maxDegree={new_max_degree}...")
            for key in keys_to_reinsert:
                new_tree.insert(key)
            new_tree._record(StepTag.REBUILD_COMPLETE, f"Rebuild complete with {len(keys_to_reinsert)} keys")

        logger.info(f"Rebuilt {len(keys_to_reinsert)} keys: maxDegree {self.max_degree} -> {new_max_degree}")
        return new_tree

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        """Return number of accepted keys"""
        return len(self._inserted_keys)

    def __contains__(self, key: Any) -> bool:
        return self.contains(key)

    def traverse(self) -> Iterator[Any]:
        """Yield keys in ascending order"""
        yield from self._traverse_node(self.root)

    def _traverse_node(self, node: BTreeNode) -> Iterator[Any]:
        for i, key in enumerate(node.keys):
            if not node.is_leaf:
                yield from self._traverse_node(node.children[i])
            yield key
        if not node.is_leaf and node.children:
            yield from self._traverse_node(node.children[-1])

    def height(self) -> int:
        """Number of levels from root to leaves"""
        levels = 1
        node = self.root
        while not node.is_leaf and node.children:
            node = node.children[0]
            levels += 1
        return levels

    def leaf_depths(self) -> List[int]:
        """Depth of every leaf, left to right (root is depth 0)"""
        depths: List[int] = []
        self._collect_leaf_depths(self.root, 0, depths)
        return depths

    def _collect_leaf_depths(self, node: BTreeNode, depth: int, depths: List[int]) -> None:
        if node.is_leaf:
            depths.append(depth)
            return
        for child in node.children:
            self._collect_leaf_depths(child, depth + 1, depths)

    def validate(self) -> List[str]:
        """
        Check the structural invariants of the live tree

        Returns:
            List of human-readable violations; empty when the tree is sound
        """
        errors: List[str] = []
        min_keys = self.min_keys
        if self.effective_policy is SplitPolicy.PREEMPTIVE and self._max_degree % 2 == 1:
            # An even-sized full node cannot split into two halves of min_keys each
            min_keys -= 1

        self._validate_node(self.root, None, None, True, min_keys, errors)

        if len(set(self.leaf_depths())) > 1:
            errors.append(f"Leaves at different depths: {self.leaf_depths()}")
        return errors

    def _validate_node(self, node: BTreeNode, low: Optional[Any], high: Optional[Any],
                       is_root: bool, min_keys: int, errors: List[str]) -> None:
        where = node.describe()

        if len(node.keys) > self.max_keys:
            errors.append(f"Node {where} holds more than {self.max_keys} keys")
        if not is_root and len(node.keys) < min_keys:
            errors.append(f"Node {where} holds fewer than {min_keys} keys")

        for a, b in zip(node.keys, node.keys[1:]):
            if not a < b:
                errors.append(f"Node {where} keys not strictly increasing")
                break
        for key in node.keys:
            if (low is not None and not key > low) or (high is not None and not key < high):
                errors.append(f"Key {key} in {where} outside parent bounds ({low}, {high})")

        if node.is_leaf:
            if node.children:
                errors.append(f"Leaf {where} has children")
            return

        if len(node.children) != len(node.keys) + 1:
            errors.append(f"Node {where} has {len(node.children)} children for {len(node.keys)} keys")
            return

        bounds = [low] + list(node.keys) + [high]
        for i, child in enumerate(node.children):
            self._validate_node(child, bounds[i], bounds[i + 1], False, min_keys, errors)
