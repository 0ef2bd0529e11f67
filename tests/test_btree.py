#!/usr/bin/env python3
"""
Unit Tests for the step-recording B-Tree
========================================

Insertion, splitting, membership, invariants and rebuild.
"""

import pytest

from btreetrace.btree import BTree, SplitPolicy
from btreetrace.errors import InvalidDegreeError
from btreetrace.steps import StepTag

from conftest import SCENARIO_A_KEYS, build_tree, shape


class TestBTreeBasics:
    """Test construction and degree-derived counters"""

    def test_create_btree(self):
        """Test B-Tree creation"""
        btree = BTree(max_degree=4)
        assert len(btree) == 0
        assert btree.root.keys == []
        assert btree.root.is_leaf
        assert btree.get_steps() == ()

    @pytest.mark.parametrize("degree,max_keys,min_children,min_keys", [
        (3, 2, 2, 1),
        (4, 3, 2, 1),
        (5, 4, 3, 2),
        (6, 5, 3, 2),
        (7, 6, 4, 3),
    ])
    def test_derived_counters(self, degree, max_keys, min_children, min_keys):
        """Test counters derived from maxDegree"""
        btree = BTree(max_degree=degree)
        assert btree.max_degree == degree
        assert btree.max_keys == max_keys
        assert btree.min_children == min_children
        assert btree.min_keys == min_keys

    @pytest.mark.parametrize("degree", [2, 1, 0, -4])
    def test_degree_below_three_rejected(self, degree):
        """Test that construction fails for maxDegree < 3"""
        with pytest.raises(InvalidDegreeError) as exc_info:
            BTree(max_degree=degree)
        assert exc_info.value.details["degree"] == degree

    @pytest.mark.parametrize("degree", [3.5, "4", None, True])
    def test_non_integer_degree_rejected(self, degree):
        """Test that construction fails for non-integer maxDegree"""
        with pytest.raises(InvalidDegreeError):
            BTree(max_degree=degree)

    def test_auto_policy_resolution(self):
        """Test AUTO resolves by degree parity"""
        assert BTree(max_degree=4).effective_policy is SplitPolicy.PREEMPTIVE
        assert BTree(max_degree=3).effective_policy is SplitPolicy.OVERFLOW
        assert BTree(max_degree=5, split_policy="preemptive").effective_policy is SplitPolicy.PREEMPTIVE


class TestBTreeScenarios:
    """Reference insertion scenarios"""

    def test_scenario_a_final_tree(self, scenario_a_tree):
        """maxDegree 4, insert 10..50: root {20}, leaves {10} and {30, 40, 50}"""
        assert shape(scenario_a_tree.root) == {
            "keys": [20],
            "isLeaf": False,
            "children": [
                {"keys": [10], "children": [], "isLeaf": True},
                {"keys": [30, 40, 50], "children": [], "isLeaf": True},
            ],
        }

    def test_scenario_a_step_sequence(self, scenario_a_tree):
        """Test the recorded tags of scenario A"""
        simple = [StepTag.INSERT_START, StepTag.LEAF_INSERT, StepTag.COMPLETE]
        root_split = [
            StepTag.INSERT_START, StepTag.ROOT_FULL, StepTag.SPLIT_START,
            StepTag.PROMOTE, StepTag.SPLIT_COMPLETE, StepTag.LEAF_INSERT, StepTag.COMPLETE,
        ]
        tags = [step.tag for step in scenario_a_tree.get_steps()]
        assert tags == simple * 3 + root_split + simple

    def test_scenario_a_step_descriptions(self, scenario_a_tree):
        """Test narration of the root split"""
        descriptions = [step.description for step in scenario_a_tree.get_steps()]
        assert "Root is full (3 keys, max 3)" in descriptions
        assert "Splitting node [10 | 20 | 30]" in descriptions
        assert "Promote 20 to parent" in descriptions
        assert "Split complete: left [10], promoted 20, right [30]" in descriptions
        assert "Inserted 40 into leaf node [30, 40]" in descriptions
        assert descriptions[-1] == "Insertion of 50 complete"

    def test_scenario_b_duplicate(self, scenario_a_tree):
        """Re-inserting 20 records one duplicate step and changes nothing"""
        before = shape(scenario_a_tree.root)
        scenario_a_tree.begin_batch()

        assert scenario_a_tree.insert(20) is False

        steps = scenario_a_tree.get_steps()
        assert len(steps) == 1
        assert steps[0].tag is StepTag.DUPLICATE
        assert steps[0].highlight_keys == (20,)
        assert steps[0].description == "Key 20 already exists (duplicate ignored)"
        assert shape(scenario_a_tree.root) == before
        assert scenario_a_tree.get_inserted_keys() == SCENARIO_A_KEYS

    def test_scenario_c_rebuild_same_degree(self, scenario_a_tree):
        """Rebuilding with the same degree reproduces the tree"""
        rebuilt = scenario_a_tree.rebuild_with_new_max_degree(4)
        assert shape(rebuilt.root) == shape(scenario_a_tree.root)
        assert rebuilt.get_inserted_keys() == SCENARIO_A_KEYS

    def test_scenario_d_membership(self):
        """maxDegree 3, insert 10 and 20, 15 is absent and nothing changes"""
        btree = build_tree(3, [10, 20])
        before = shape(btree.root)
        steps_before = len(btree.get_steps())

        assert btree.contains(15) is False
        assert 15 not in btree
        assert shape(btree.root) == before
        assert len(btree.get_steps()) == steps_before


class TestBTreeSearch:
    """Test membership descent"""

    def test_contains_existing(self, shuffled_keys):
        btree = build_tree(5, shuffled_keys)
        for key in shuffled_keys:
            assert btree.contains(key)

    def test_contains_missing(self, shuffled_keys):
        btree = build_tree(5, shuffled_keys)
        for key in (0, 201, 1000, -3):
            assert not btree.contains(key)

    def test_contains_empty(self):
        assert not BTree(max_degree=3).contains(1)

    def test_contains_internal_key(self, scenario_a_tree):
        """Keys held by internal nodes are found"""
        assert 20 in scenario_a_tree.root.keys
        assert scenario_a_tree.contains(20)


class TestBTreeInsert:
    """Test insertion and splitting"""

    def test_insert_returns_accepted(self):
        btree = BTree(max_degree=3)
        assert btree.insert(5) is True
        assert btree.insert(5) is False
        assert len(btree) == 1

    def test_insert_many_counts_accepted(self):
        btree = BTree(max_degree=4)
        assert btree.insert_many([3, 1, 3, 2, 1]) == 3
        assert btree.get_inserted_keys() == [3, 1, 2]

    def test_leaf_keys_sorted(self):
        btree = build_tree(5, [30, 10, 20])
        assert btree.root.keys == [10, 20, 30]

    def test_split_notice_on_full_child(self, scenario_a_tree):
        """maxDegree 4: the full right leaf is split before descending"""
        scenario_a_tree.begin_batch()
        scenario_a_tree.insert(60)

        tags = [step.tag for step in scenario_a_tree.get_steps()]
        assert tags == [
            StepTag.INSERT_START, StepTag.SPLIT_NOTICE, StepTag.SPLIT_START,
            StepTag.PROMOTE, StepTag.SPLIT_COMPLETE, StepTag.LEAF_INSERT, StepTag.COMPLETE,
        ]
        assert scenario_a_tree.root.keys == [20, 40]
        assert [c.keys for c in scenario_a_tree.root.children] == [[10], [30], [50, 60]]

    def test_split_shifts_index_for_smaller_key(self, scenario_a_tree):
        """A key below the promoted key lands in the left half"""
        scenario_a_tree.insert(35)
        assert scenario_a_tree.root.keys == [20, 40]
        assert [c.keys for c in scenario_a_tree.root.children] == [[10], [30, 35], [50]]

    def test_overflow_split_odd_degree(self):
        """maxDegree 3 splits overfull leaves on the way back up"""
        btree = build_tree(3, [10, 20, 30])
        tags = [step.tag for step in btree.get_steps()][-7:]
        assert tags == [
            StepTag.INSERT_START, StepTag.LEAF_INSERT, StepTag.ROOT_FULL,
            StepTag.SPLIT_START, StepTag.PROMOTE, StepTag.SPLIT_COMPLETE, StepTag.COMPLETE,
        ]
        assert btree.root.keys == [20]
        assert [c.keys for c in btree.root.children] == [[10], [30]]

    def test_overflow_cascades_to_root(self):
        """maxDegree 3, 10..70: child split promotes into a full root, root splits"""
        btree = build_tree(3, [10, 20, 30, 40, 50, 60, 70])
        root = btree.root
        assert root.keys == [40]
        assert [c.keys for c in root.children] == [[20], [60]]
        assert [g.keys for g in root.children[0].children] == [[10], [30]]
        assert [g.keys for g in root.children[1].children] == [[50], [70]]
        assert btree.validate() == []

    def test_overflow_leaf_snapshot_shows_extra_key(self):
        """The overfull leaf is visible only in the step snapshot"""
        btree = build_tree(3, [10, 20, 30])
        leaf_step = [s for s in btree.get_steps() if s.tag is StepTag.LEAF_INSERT][-1]
        assert leaf_step.snapshot.keys == [10, 20, 30]
        assert len(btree.root.keys) <= btree.max_keys

    def test_preemptive_root_split_snapshot(self):
        """The new empty root is adopted before its child is split"""
        btree = build_tree(4, [1, 2, 3, 4])
        split_start = [s for s in btree.get_steps() if s.tag is StepTag.SPLIT_START][0]
        assert split_start.snapshot.keys == []
        assert not split_start.snapshot.is_leaf
        assert split_start.snapshot.children[0].keys == [1, 2, 3]

    def test_preemptive_policy_keeps_empty_leaf_at_degree_three(self):
        """Legacy splitting at maxDegree 3 can leave an empty leaf"""
        btree = build_tree(3, [20, 30, 10], split_policy=SplitPolicy.PREEMPTIVE)
        assert btree.root.keys == [30]
        assert [c.keys for c in btree.root.children] == [[10, 20], []]
        assert btree.validate() == []

    def test_preemptive_policy_zero_key_internal_node(self):
        """Legacy splitting at maxDegree 3 can produce a keyless internal node"""
        btree = build_tree(3, [10, 20, 30, 40, 50, 60], split_policy=SplitPolicy.PREEMPTIVE)
        right = btree.root.children[1]
        assert btree.root.keys == [40]
        assert right.keys == []
        assert not right.is_leaf
        assert [c.keys for c in right.children] == [[50, 60]]


class TestBTreeInvariants:
    """Order, balance and capacity after every insertion"""

    @pytest.mark.parametrize("degree", [3, 4, 5, 6, 7, 8])
    def test_invariants_hold_after_each_insert(self, degree, shuffled_keys):
        btree = BTree(max_degree=degree)
        inserted = []
        for key in shuffled_keys:
            btree.insert(key)
            inserted.append(key)
            assert btree.validate() == [], f"after inserting {key}"
        assert list(btree.traverse()) == sorted(inserted)

    @pytest.mark.parametrize("degree", [3, 4, 5])
    def test_capacity_bounds(self, degree, shuffled_keys):
        btree = build_tree(degree, shuffled_keys)

        def check(node, is_root):
            assert len(node.keys) <= btree.max_keys
            if not is_root:
                assert len(node.keys) >= btree.min_keys
            for child in node.children:
                check(child, False)

        check(btree.root, True)

    @pytest.mark.parametrize("degree", [3, 4, 5, 6])
    def test_leaves_same_depth(self, degree):
        btree = build_tree(degree, range(100, 0, -1))
        depths = btree.leaf_depths()
        assert len(set(depths)) == 1
        assert depths[0] == btree.height() - 1

    def test_validate_reports_broken_order(self, scenario_a_tree):
        scenario_a_tree.root.children[0].keys = [25]
        errors = scenario_a_tree.validate()
        assert any("outside parent bounds" in e for e in errors)

    def test_validate_reports_child_count(self, scenario_a_tree):
        scenario_a_tree.root.children.pop()
        assert any("children for" in e for e in scenario_a_tree.validate())


class TestBTreeIdempotence:

    def test_duplicate_leaves_tree_and_log(self, shuffled_keys):
        once = build_tree(4, shuffled_keys)
        twice = build_tree(4, shuffled_keys)
        twice.begin_batch()
        twice.insert_many(shuffled_keys[:10])

        assert shape(twice.root) == shape(once.root)
        assert twice.get_inserted_keys() == once.get_inserted_keys()
        assert [s.tag for s in twice.get_steps()] == [StepTag.DUPLICATE] * 10


class TestBTreeRebuild:
    """Replay-based rebuild under a new branching factor"""

    @pytest.mark.parametrize("m1,m2", [(3, 4), (4, 3), (5, 7), (6, 3), (3, 3), (8, 5)])
    def test_replay_equivalence(self, m1, m2, shuffled_keys):
        source = build_tree(m1, shuffled_keys)
        rebuilt = source.rebuild_with_new_max_degree(m2)
        fresh = build_tree(m2, shuffled_keys)

        assert rebuilt.max_degree == m2
        assert shape(rebuilt.root) == shape(fresh.root)
        assert rebuilt.get_inserted_keys() == source.get_inserted_keys()

    def test_rebuild_markers(self, scenario_a_tree):
        rebuilt = scenario_a_tree.rebuild_with_new_max_degree(3)
        steps = rebuilt.get_steps()
        assert steps[0].tag is StepTag.REBUILD_START
        assert steps[0].description == "Rebuilding tree with maxDegree=3..."
        assert steps[-1].tag is StepTag.REBUILD_COMPLETE
        assert steps[-1].description == "Rebuild complete with 5 keys"
        assert sum(1 for s in steps if s.tag is StepTag.COMPLETE) == 5

    def test_rebuild_empty_tree_records_nothing(self):
        rebuilt = BTree(max_degree=3).rebuild_with_new_max_degree(5)
        assert rebuilt.get_steps() == ()
        assert len(rebuilt) == 0

    def test_rebuild_leaves_source_untouched(self, scenario_a_tree):
        before = shape(scenario_a_tree.root)
        steps_before = scenario_a_tree.get_steps()
        scenario_a_tree.rebuild_with_new_max_degree(3)
        assert shape(scenario_a_tree.root) == before
        assert scenario_a_tree.get_steps() == steps_before

    def test_rebuild_keeps_split_policy(self):
        source = build_tree(4, [1, 2, 3], split_policy=SplitPolicy.PREEMPTIVE)
        assert source.rebuild_with_new_max_degree(3).split_policy is SplitPolicy.PREEMPTIVE

    def test_rebuild_rejects_bad_degree(self, scenario_a_tree):
        with pytest.raises(InvalidDegreeError):
            scenario_a_tree.rebuild_with_new_max_degree(2)


class TestBTreeTraversal:

    def test_traverse_ordered(self):
        keys = [30, 10, 50, 20, 40]
        btree = build_tree(3, keys)
        assert list(btree.traverse()) == sorted(keys)

    def test_traverse_empty(self):
        assert list(BTree(max_degree=3).traverse()) == []

    def test_height(self, scenario_a_tree):
        assert BTree(max_degree=3).height() == 1
        assert scenario_a_tree.height() == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
