"""
tests/test_tree.py
==================
Pytest test suite for the PhylogenyTree arena and the naming helpers.

Trees here are assembled by hand.  The recurring shape is

      Root
       ├─C_1─ a
       │       ├─C_2─ b [S_1]
       │       └─C_3─ c [S_2]
       └─C_4─ d [S_3]

built by :func:`small_tree`, with handles Root=0 a=1 b=2 c=3 d=4.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from perfphylo._tree import ROOT_LABEL, PhylogenyTree
from perfphylo._utils import (
    character_index,
    character_name,
    join_chain,
    split_chain,
    taxon_name,
)


# ======================================================================== #
# Helper                                                                    #
# ======================================================================== #


def small_tree() -> PhylogenyTree:
    tree = PhylogenyTree()
    root = tree.add_root()
    a = tree.add_node()
    b = tree.add_node(["S_1"])
    c = tree.add_node(["S_2"])
    d = tree.add_node(["S_3"])
    tree.add_edge(root, a, "C_1")
    tree.add_edge(a, b, "C_2")
    tree.add_edge(a, c, "C_3")
    tree.add_edge(root, d, "C_4")
    return tree


def chain_tree() -> PhylogenyTree:
    """Root -C_1-> x -C_2-> y [S_1], plus Root -C_3-> z [S_2]."""
    tree = PhylogenyTree()
    root = tree.add_root()
    x = tree.add_node()
    y = tree.add_node(["S_1"])
    z = tree.add_node(["S_2"])
    tree.add_edge(root, x, "C_1")
    tree.add_edge(root, z, "C_3")
    tree.add_edge(x, y, "C_2")
    return tree


# ======================================================================== #
# 1. Naming helpers                                                         #
# ======================================================================== #


class TestNames:
    def test_taxon_name_is_one_based(self):
        assert taxon_name(0) == "S_1"
        assert taxon_name(11) == "S_12"

    def test_character_name_is_one_based(self):
        assert character_name(0) == "C_1"
        assert character_name(9) == "C_10"

    def test_character_index_inverts_name(self):
        for j in (0, 3, 27):
            assert character_index(character_name(j)) == j

    @pytest.mark.parametrize("bad", ["S_1", "C_", "C_0", "C_x", "c_1"])
    def test_character_index_rejects(self, bad):
        with pytest.raises(ValueError):
            character_index(bad)

    def test_join_chain(self):
        assert join_chain("C_1", "C_3") == "C_1,C_3"
        assert join_chain("C_1,C_2", "C_5") == "C_1,C_2,C_5"

    def test_join_chain_drops_empty(self):
        assert join_chain("C_1", "") == "C_1"
        assert join_chain("", "C_2") == "C_2"
        assert join_chain("", "") == ""

    def test_split_chain(self):
        assert split_chain("C_1,C_2,C_5") == ["C_1", "C_2", "C_5"]
        assert split_chain("C_4") == ["C_4"]
        assert split_chain("") == []


# ======================================================================== #
# 2. Construction                                                           #
# ======================================================================== #


class TestConstruction:
    def test_empty_tree(self):
        tree = PhylogenyTree()
        assert tree.root is None
        assert tree.is_empty
        assert tree.n_nodes == 0
        assert tree.n_edges == 0
        assert tree.nodes() == []
        assert tree.edges() == []
        assert tree.canonical() is None
        tree.validate()

    def test_counts(self):
        tree = small_tree()
        assert tree.n_nodes == len(tree) == 5
        assert tree.n_edges == 4
        assert not tree.is_empty

    def test_handles_are_sequential(self):
        tree = small_tree()
        assert tree.node_ids() == [0, 1, 2, 3, 4]
        assert tree.root == 0

    def test_second_root_rejected(self):
        tree = small_tree()
        with pytest.raises(RuntimeError, match="already has a root"):
            tree.add_root()

    def test_edge_into_root_rejected(self):
        tree = small_tree()
        with pytest.raises(ValueError, match="root"):
            tree.add_edge(1, tree.root, "C_9")

    def test_second_parent_rejected(self):
        tree = small_tree()
        with pytest.raises(ValueError, match="already has a parent"):
            tree.add_edge(4, 2, "C_9")

    def test_unknown_node(self):
        tree = small_tree()
        with pytest.raises(KeyError):
            tree.taxa(99)
        with pytest.raises(KeyError):
            tree.add_edge(0, 99)

    def test_root_cannot_hold_taxa(self):
        tree = small_tree()
        with pytest.raises(ValueError):
            tree.append_taxon(tree.root, "S_9")
        with pytest.raises(ValueError):
            tree.set_taxa(tree.root, ["S_9"])

    def test_append_and_set_taxa(self):
        tree = small_tree()
        tree.append_taxon(2, "S_4")
        assert tree.taxa(2) == ("S_1", "S_4")
        assert tree.label(2) == "S_1 S_4"
        tree.set_taxa(2, ())
        assert tree.label(2) == ""


# ======================================================================== #
# 3. Queries                                                                #
# ======================================================================== #


class TestQueries:
    def test_root_label(self):
        tree = small_tree()
        assert tree.label(tree.root) == ROOT_LABEL == "Root"
        assert tree.taxa(tree.root) == ()

    def test_nodes(self):
        assert small_tree().nodes() == [
            (0, "Root"), (1, ""), (2, "S_1"), (3, "S_2"), (4, "S_3"),
        ]

    def test_edges_grouped_by_parent(self):
        assert chain_tree().edges() == [
            (0, 1, "C_1"), (0, 3, "C_3"), (1, 2, "C_2"),
        ]

    def test_edge_lookup(self):
        tree = small_tree()
        assert tree.edge(0) == (0, 1, "C_1")
        with pytest.raises(KeyError):
            tree.edge(42)

    def test_children_and_parent(self):
        tree = small_tree()
        assert tree.children(0) == [1, 4]
        assert tree.children(1) == [2, 3]
        assert tree.parent(3) == 1
        assert tree.parent(tree.root) is None

    def test_degrees(self):
        tree = small_tree()
        assert tree.out_degree(1) == 2
        assert tree.in_degree(1) == 1
        assert tree.in_degree(0) == 0
        assert tree.out_edges(0) == [0, 3]
        assert tree.in_edges(2) == [1]

    def test_leaves(self):
        assert small_tree().leaves() == [2, 3, 4]

    def test_lone_root_is_not_a_leaf(self):
        tree = PhylogenyTree()
        tree.add_root()
        assert tree.leaves() == []

    def test_find_child(self):
        tree = small_tree()
        assert tree.find_child(0, "C_4") == 4
        assert tree.find_child(0, "C_2") is None

    def test_find_taxon(self):
        tree = small_tree()
        assert tree.find_taxon("S_2") == 3
        with pytest.raises(KeyError):
            tree.find_taxon("S_9")

    def test_find_taxon_prefers_leaf(self):
        tree = small_tree()
        tree.append_taxon(1, "S_1")
        assert tree.find_taxon("S_1") == 2

    def test_path_characters(self):
        tree = small_tree()
        assert tree.path_characters(3) == ["C_1", "C_3"]
        assert tree.path_characters(tree.root) == []

    def test_canonical_ignores_insertion_order(self):
        other = PhylogenyTree()
        root = other.add_root()
        d = other.add_node(["S_3"])
        a = other.add_node()
        other.add_edge(root, d, "C_4")
        other.add_edge(root, a, "C_1")
        c = other.add_node(["S_2"])
        b = other.add_node(["S_1"])
        other.add_edge(a, c, "C_3")
        other.add_edge(a, b, "C_2")
        assert other.canonical() == small_tree().canonical()

    def test_canonical_sees_labels(self):
        tree = small_tree()
        before = tree.canonical()
        tree.set_taxa(4, ["S_4"])
        assert tree.canonical() != before

    def test_repr(self):
        assert "n_nodes=5" in repr(small_tree())


# ======================================================================== #
# 4. Removal and splicing                                                   #
# ======================================================================== #


class TestSplice:
    def test_splice_joins_labels(self):
        tree = chain_tree()
        tree.splice_node(1)
        assert tree.node_ids() == [0, 2, 3]
        assert tree.n_edges == 2
        assert tree.children(0) == [2, 3]
        assert tree.edges()[0] == (0, 2, "C_1,C_2")

    def test_splice_keeps_child_position(self):
        tree = chain_tree()
        tree.splice_node(1)
        labels = [label for _, _, label in tree.edges()]
        assert labels == ["C_1,C_2", "C_3"]

    def test_splice_with_unlabeled_edge(self):
        tree = PhylogenyTree()
        root = tree.add_root()
        x = tree.add_node()
        y = tree.add_node(["S_1"])
        tree.add_edge(root, x, "C_1")
        tree.add_edge(x, y)
        tree.splice_node(x)
        assert tree.edges() == [(0, 2, "C_1")]

    def test_splice_rejects_branching_node(self):
        tree = small_tree()
        with pytest.raises(ValueError, match="cannot be spliced"):
            tree.splice_node(1)

    def test_handles_stay_stable(self):
        tree = chain_tree()
        tree.splice_node(1)
        assert tree.label(2) == "S_1"
        with pytest.raises(KeyError):
            tree.label(1)
        assert tree.path_characters(2) == ["C_1", "C_2"]

    def test_remove_node_drops_edges(self):
        tree = small_tree()
        tree.remove_node(4)
        assert tree.n_nodes == 4
        assert tree.n_edges == 3
        assert tree.children(0) == [1]

    def test_remove_root(self):
        tree = PhylogenyTree()
        tree.add_root()
        tree.remove_node(0)
        assert tree.root is None
        assert tree.is_empty


# ======================================================================== #
# 5. Freezing and validation                                                #
# ======================================================================== #


class TestFrozen:
    def test_freeze_returns_self(self):
        tree = small_tree()
        assert tree.freeze() is tree
        assert tree.frozen
        assert "frozen" in repr(tree)

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda t: t.add_node(),
            lambda t: t.add_edge(4, t.add_node()),
            lambda t: t.append_taxon(2, "S_9"),
            lambda t: t.set_taxa(2, ()),
            lambda t: t.remove_node(4),
            lambda t: t.splice_node(1),
        ],
    )
    def test_mutation_rejected(self, mutate):
        tree = small_tree().freeze()
        with pytest.raises(RuntimeError, match="frozen"):
            mutate(tree)

    def test_queries_still_work(self):
        tree = small_tree().freeze()
        assert tree.leaves() == [2, 3, 4]


class TestValidate:
    def test_valid(self):
        small_tree().validate()
        chain_tree().validate()

    def test_detached_node(self):
        tree = small_tree()
        tree.add_node(["S_9"])
        with pytest.raises(ValueError, match="incoming edges"):
            tree.validate()

    def test_nodes_without_root(self):
        tree = PhylogenyTree()
        tree.add_node()
        with pytest.raises(ValueError, match="no root"):
            tree.validate()

    def test_cycle_unreachable_from_root(self):
        tree = PhylogenyTree()
        tree.add_root()
        x = tree.add_node()
        y = tree.add_node()
        tree.add_edge(x, y, "C_1")
        tree.add_edge(y, x, "C_2")
        with pytest.raises(ValueError, match="unreachable"):
            tree.validate()
