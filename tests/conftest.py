#!/usr/bin/env python3
"""
btreetrace Test Configuration - PyTest Configuration and Fixtures

Shared fixtures: isolated configuration, prebuilt trees and sessions.
"""

import os
import sys
import random
from typing import Any, Dict, List

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from btreetrace.btree import BTree, SplitPolicy
from btreetrace.config import ConfigManager
from btreetrace.node import BTreeNode
from btreetrace.session import TraceSession

SCENARIO_A_KEYS = [10, 20, 30, 40, 50]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test without BTREETRACE_* variables, from an empty directory"""
    for name in list(os.environ):
        if name.startswith("BTREETRACE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    ConfigManager.reset()
    yield
    for name in list(os.environ):
        if name.startswith("BTREETRACE_"):
            del os.environ[name]
    ConfigManager.reset()


@pytest.fixture
def scenario_a_tree() -> BTree:
    """maxDegree 4 with 10, 20, 30, 40, 50 inserted in order"""
    tree = BTree(max_degree=4)
    tree.insert_many(SCENARIO_A_KEYS)
    return tree


@pytest.fixture
def session() -> TraceSession:
    return TraceSession(max_degree=4)


@pytest.fixture
def shuffled_keys() -> List[int]:
    keys = list(range(1, 201))
    random.Random(451).shuffle(keys)
    return keys


def build_tree(max_degree: int, keys, split_policy: SplitPolicy = SplitPolicy.AUTO) -> BTree:
    tree = BTree(max_degree=max_degree, split_policy=split_policy)
    tree.insert_many(keys)
    return tree


def shape(node: BTreeNode) -> Dict[str, Any]:
    """Structural form of a node, for equality checks"""
    return node.to_dict()
