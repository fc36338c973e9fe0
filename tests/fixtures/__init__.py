"""
Test fixtures package for Lean IMT tests.

This package provides factory functions for creating test objects:
- common.py: leaf/tree factories, readable hashes, reference builder

Usage:
    from fixtures import make_field_tree, reference_levels

    def test_something():
        tree = make_field_tree(7)
        assert tree.levels == reference_levels(tree.leaves, tree.hash_fn)
"""

from .common import (
    label_hash,
    sum_hash,
    make_field_leaves,
    make_byte_leaves,
    make_label_leaves,
    make_field_tree,
    make_byte_tree,
    reference_levels,
    expected_five_leaf_root,
)

__all__ = [
    "label_hash",
    "sum_hash",
    "make_field_leaves",
    "make_byte_leaves",
    "make_label_leaves",
    "make_field_tree",
    "make_byte_tree",
    "reference_levels",
    "expected_five_leaf_root",
]
