#!/usr/bin/env python3
"""
B-Tree Node
===========

The recursive structural unit of the trace engine. A node owns its key list
and, when internal, exactly one more child than it has keys. Nodes are never
shared between parents, so ``clone()`` can produce a fully detached copy of a
subtree for step snapshots.
"""

from typing import Any, Dict, List
from dataclasses import dataclass, field


@dataclass
class BTreeNode:
    """
    Node in a B-Tree

    A B-Tree node contains:
    - keys: Sorted list of keys (strictly increasing)
    - children: Child nodes (for internal nodes only)
    - is_leaf: Whether this is a leaf node
    """
    keys: List[Any] = field(default_factory=list)
    children: List['BTreeNode'] = field(default_factory=list)
    is_leaf: bool = True

    def is_full(self, max_keys: int) -> bool:
        """Check if node holds max_keys keys or more"""
        return len(self.keys) >= max_keys

    def find_key_index(self, key: Any) -> int:
        """
        Count the keys strictly less than key

        This is both the insertion position within the node and the index
        of the child that would contain key. Uses binary search.
        """
        left, right = 0, len(self.keys)
        while left < right:
            mid = (left + right) // 2
            if self.keys[mid] < key:
                left = mid + 1
            else:
                right = mid
        return left

    def clone(self) -> 'BTreeNode':
        """Deep copy of this subtree (new key list, new child list, cloned children)"""
        return BTreeNode(
            keys=list(self.keys),
            children=[child.clone() for child in self.children],
            is_leaf=self.is_leaf,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serializable shape: keys / children / isLeaf, recursively"""
        return {
            "keys": list(self.keys),
            "children": [child.to_dict() for child in self.children],
            "isLeaf": self.is_leaf,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BTreeNode':
        """Inverse of to_dict()"""
        return cls(
            keys=list(data.get("keys", [])),
            children=[cls.from_dict(child) for child in data.get("children", [])],
            is_leaf=data.get("isLeaf", True),
        )

    def describe(self) -> str:
        """Compact bracketed key list, e.g. [10, 20]"""
        return "[" + ", ".join(str(k) for k in self.keys) + "]"
