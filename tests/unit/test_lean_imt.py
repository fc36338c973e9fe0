"""
Lean IMT Unit Tests
Tests for core/merkle/lean_imt.py

Covers:
1. Construction - argument checks, empty tree, bulk build
2. Depth law - depth == ceil(log2(size)) after every mutation
3. insert / insert_many - same levels as a from-scratch build
4. update - path recomputation including carried nodes
5. Queries - index_of, has, len, in
6. Atomicity - a failing hash leaves the tree untouched
"""
import math

import pytest

from core.crypto.hashing import field_hash
from core.merkle import LeanIMT
from core.schemas.errors import (
    EmptyLeavesException,
    LeafNotFoundException,
    MissingParameterException,
    ParameterTypeException,
)

from fixtures import (
    expected_five_leaf_root,
    label_hash,
    make_label_leaves,
    reference_levels,
    sum_hash,
)


def exploding_hash(left, right):
    """label_hash that refuses to touch the value "boom"."""
    if "boom" in (left, right):
        raise RuntimeError("hash failed")
    return label_hash(left, right)


class TestConstruction:
    """Tests for LeanIMT.__init__."""

    def test_empty_tree(self):
        """A tree without leaves has no root and a single empty level."""
        tree = LeanIMT(sum_hash)

        assert tree.root is None
        assert tree.depth == 0
        assert tree.size == 0
        assert len(tree) == 0
        assert tree.leaves == []
        assert tree.levels == [[]]

    def test_empty_leaf_list_is_empty_tree(self):
        """An explicit empty list behaves like no leaves at all."""
        tree = LeanIMT(sum_hash, [])

        assert tree.root is None
        assert tree.levels == [[]]

    def test_hash_missing_raises(self):
        """hash_fn=None is rejected."""
        with pytest.raises(MissingParameterException, match="Parameter 'hash' is not defined"):
            LeanIMT(None)

    def test_hash_not_callable_raises(self):
        """A non-callable hash is rejected."""
        with pytest.raises(ParameterTypeException, match="Parameter 'hash' is not a function"):
            LeanIMT(1)

    def test_leaves_not_sequence_raises(self):
        """Leaves must be a sequence (strings do not count)."""
        with pytest.raises(ParameterTypeException, match="Parameter 'leaves' is not a sequence"):
            LeanIMT(sum_hash, "uoe")
        with pytest.raises(ParameterTypeException, match="Parameter 'leaves' is not a sequence"):
            LeanIMT(sum_hash, 5)

    def test_errors_are_builtin_kinds(self):
        """Argument errors are also ValueError/TypeError."""
        with pytest.raises(ValueError):
            LeanIMT(None)
        with pytest.raises(TypeError):
            LeanIMT("not a function")

    def test_sum_hash_example(self):
        """[1, 2, 3] under addition: root 6, depth 2."""
        tree = LeanIMT(sum_hash, [1, 2, 3])

        assert tree.root == 6
        assert tree.depth == 2
        assert tree.size == 3
        assert tree.levels == [[1, 2, 3], [3, 3], [6]]

    def test_single_leaf_root_is_leaf(self):
        """One leaf: the leaf is the root and depth is 0."""
        tree = LeanIMT(field_hash, [7])

        assert tree.root == 7
        assert tree.depth == 0

    def test_bulk_build_matches_sequential_inserts(self):
        """Constructor and repeated insert() agree for sizes 100..115."""
        for size in range(100, 116):
            leaves = list(range(size))
            bulk = LeanIMT(field_hash, leaves)

            sequential = LeanIMT(field_hash)
            for leaf in leaves:
                sequential.insert(leaf)

            assert bulk.root == sequential.root, size
            assert bulk.levels == sequential.levels, size
            assert bulk.depth == math.ceil(math.log2(size)), size

    def test_constructor_does_not_alias_input(self):
        """Mutating the caller's list does not affect the tree."""
        leaves = [1, 2, 3]
        tree = LeanIMT(sum_hash, leaves)
        leaves.append(4)

        assert tree.size == 3

    def test_repr(self):
        """repr shows size, depth and root."""
        tree = LeanIMT(sum_hash, [1, 2, 3])

        assert repr(tree) == "LeanIMT(size=3, depth=2, root=6)"


class TestInsert:
    """Tests for LeanIMT.insert()."""

    def test_insert_none_raises(self):
        """None is never a valid leaf."""
        tree = LeanIMT(sum_hash)

        with pytest.raises(MissingParameterException, match="Parameter 'leaf' is not defined"):
            tree.insert(None)

    def test_first_insert(self):
        """Inserting into an empty tree makes the leaf the root."""
        tree = LeanIMT(field_hash)
        tree.insert(1)

        assert tree.root == 1
        assert tree.depth == 0
        assert tree.size == 1

    def test_sum_hash_example(self):
        """Appending 4 to [1, 2, 3] pairs it with 3 at every level."""
        tree = LeanIMT(sum_hash, [1, 2, 3])
        tree.insert(4)

        assert tree.levels == [[1, 2, 3, 4], [3, 7], [10]]
        assert tree.depth == 2

    def test_five_leaf_root(self, field_leaves):
        """Root of 0..4 is h(h(h(0, 1), h(2, 3)), 4)."""
        tree = LeanIMT(field_hash)
        for leaf in field_leaves:
            tree.insert(leaf)

        assert tree.root == expected_five_leaf_root(field_hash, field_leaves)
        assert tree.depth == 3

    def test_depth_grows_past_power_of_two(self):
        """A new root level appears when size goes from 2^k to 2^k + 1."""
        tree = LeanIMT(label_hash, make_label_leaves(4))
        assert tree.depth == 2

        tree.insert("L4")

        assert tree.depth == 3
        assert tree.root == "(((L0,L1),(L2,L3)),L4)"

    def test_depth_law_after_every_insert(self):
        """depth == ceil(log2(size)) after each insert."""
        tree = LeanIMT(field_hash)
        for size in range(1, 70):
            tree.insert(size)
            expected = math.ceil(math.log2(size)) if size > 1 else 0
            assert tree.depth == expected, size

    def test_levels_match_reference_build(self):
        """Incremental levels equal a from-scratch build for 1..33 leaves."""
        leaves = make_label_leaves(33)
        tree = LeanIMT(label_hash)
        for n, leaf in enumerate(leaves, start=1):
            tree.insert(leaf)
            assert tree.levels == reference_levels(leaves[:n], label_hash), n


class TestInsertMany:
    """Tests for LeanIMT.insert_many()."""

    def test_none_raises(self):
        """leaves=None is rejected."""
        tree = LeanIMT(sum_hash)

        with pytest.raises(MissingParameterException, match="Parameter 'leaves' is not defined"):
            tree.insert_many(None)

    def test_not_sequence_raises(self):
        """Non-sequences are rejected."""
        tree = LeanIMT(sum_hash)

        with pytest.raises(ParameterTypeException, match="Parameter 'leaves' is not a sequence"):
            tree.insert_many("uoe")

    def test_empty_raises(self):
        """An empty batch is an error, not a no-op."""
        tree = LeanIMT(sum_hash, [1, 2])

        with pytest.raises(EmptyLeavesException, match="There are no leaves to add"):
            tree.insert_many([])

    def test_none_leaf_rejects_whole_batch(self):
        """One None in the batch aborts it before anything is written."""
        tree = LeanIMT(sum_hash, [1, 2])
        before = tree.levels

        with pytest.raises(MissingParameterException, match="Parameter 'leaf' is not defined"):
            tree.insert_many([3, None, 5])

        assert tree.levels == before

    def test_into_empty_tree(self, field_leaves):
        """insert_many on an empty tree equals the constructor."""
        tree = LeanIMT(field_hash)
        tree.insert_many(field_leaves)

        assert tree.levels == LeanIMT(field_hash, field_leaves).levels
        assert tree.root == expected_five_leaf_root(field_hash, field_leaves)

    def test_matches_reference_at_every_split(self):
        """Any prefix plus insert_many(rest) equals the full build."""
        for n in range(1, 20):
            leaves = make_label_leaves(n)
            expected = reference_levels(leaves, label_hash)
            for k in range(n):
                tree = LeanIMT(label_hash, leaves[:k])
                tree.insert_many(leaves[k:])
                assert tree.levels == expected, (n, k)

    def test_matches_sequential_inserts(self):
        """A batch leaves the tree exactly as repeated insert() would."""
        batched = LeanIMT(field_hash, [0, 1, 2, 3, 4])
        batched.insert_many([5, 6, 7, 8, 9, 10])

        sequential = LeanIMT(field_hash, [0, 1, 2, 3, 4])
        for leaf in [5, 6, 7, 8, 9, 10]:
            sequential.insert(leaf)

        assert batched.levels == sequential.levels

    def test_accepts_tuple(self):
        """Any non-string sequence works."""
        tree = LeanIMT(sum_hash)
        tree.insert_many((1, 2, 3))

        assert tree.root == 6


class TestUpdate:
    """Tests for LeanIMT.update()."""

    def test_index_none_raises(self):
        """index=None is rejected."""
        tree = LeanIMT(sum_hash, [1, 2])

        with pytest.raises(MissingParameterException, match="Parameter 'index' is not defined"):
            tree.update(None, 3)

    def test_new_leaf_none_raises(self):
        """new_leaf=None is rejected."""
        tree = LeanIMT(sum_hash, [1, 2])

        with pytest.raises(MissingParameterException, match="Parameter 'new_leaf' is not defined"):
            tree.update(0, None)

    def test_index_not_integer_raises(self):
        """Non-integer indexes (including bools) are rejected."""
        tree = LeanIMT(sum_hash, [1, 2])

        with pytest.raises(ParameterTypeException, match="Parameter 'index' is not an integer"):
            tree.update("uoe", 3)
        with pytest.raises(ParameterTypeException):
            tree.update(True, 3)

    def test_index_out_of_range_raises(self):
        """Indexes outside [0, size) do not address a leaf."""
        tree = LeanIMT(sum_hash, [1, 2, 3, 4, 5])

        with pytest.raises(
            LeafNotFoundException,
            match="The leaf at index '5' does not exist in this tree",
        ):
            tree.update(5, 0)
        with pytest.raises(IndexError):
            tree.update(-1, 0)

    def test_update_on_empty_tree_raises(self):
        """An empty tree has no leaf 0."""
        tree = LeanIMT(sum_hash)

        with pytest.raises(LeafNotFoundException):
            tree.update(0, 1)

    def test_update_two_leaf_tree(self):
        """Replacing leaf 0 of [0, 1] with 2 gives h(2, 1)."""
        tree = LeanIMT(field_hash, [0, 1])
        tree.update(0, 2)

        assert tree.root == field_hash(2, 1)
        assert tree.leaves == [2, 1]

    def test_update_every_leaf_to_zero(self, field_leaves):
        """After zeroing all five leaves the root is h(h(h(0,0),h(0,0)),0)."""
        tree = LeanIMT(field_hash, field_leaves)
        for index in range(tree.size):
            tree.update(index, 0)

        zero_pair = field_hash(0, 0)
        assert tree.root == field_hash(field_hash(zero_pair, zero_pair), 0)

    def test_update_equals_rebuild(self):
        """Every single-leaf update matches a tree built with the new value."""
        for n in range(1, 18):
            leaves = make_label_leaves(n)
            for index in range(n):
                tree = LeanIMT(label_hash, leaves)
                tree.update(index, "X")

                changed = list(leaves)
                changed[index] = "X"
                assert tree.levels == reference_levels(changed, label_hash), (n, index)

    def test_update_carried_leaf(self):
        """A carried leaf is copied up unchanged until it gets a partner."""
        tree = LeanIMT(label_hash, make_label_leaves(5))
        tree.update(4, "X")

        levels = tree.levels
        assert levels[1][2] == "X"
        assert levels[2][1] == "X"
        assert tree.root == "(((L0,L1),(L2,L3)),X)"

    def test_update_keeps_size_and_depth(self, field_tree):
        """update never changes the shape."""
        field_tree.update(2, 42)

        assert field_tree.size == 5
        assert field_tree.depth == 3


class TestQueries:
    """Tests for index_of, has, __len__ and __contains__."""

    def test_index_of_existing(self):
        """index_of returns the leaf position."""
        tree = LeanIMT(label_hash, make_label_leaves(5))

        assert tree.index_of("L3") == 3

    def test_index_of_missing(self):
        """index_of returns -1 for absent leaves."""
        tree = LeanIMT(label_hash, make_label_leaves(5))

        assert tree.index_of("nope") == -1

    def test_index_of_first_match(self):
        """Duplicates resolve to the lowest index."""
        tree = LeanIMT(sum_hash, [7, 8, 7])

        assert tree.index_of(7) == 0

    def test_index_of_none_raises(self):
        """index_of(None) is an argument error."""
        tree = LeanIMT(sum_hash, [1])

        with pytest.raises(MissingParameterException, match="Parameter 'leaf' is not defined"):
            tree.index_of(None)

    def test_has(self, field_tree):
        """has() mirrors index_of() != -1."""
        assert field_tree.has(4)
        assert not field_tree.has(5)

    def test_has_none_raises(self, field_tree):
        """has(None) is an argument error."""
        with pytest.raises(MissingParameterException):
            field_tree.has(None)

    def test_contains_and_len(self, field_tree):
        """Python protocols work on leaves."""
        assert 3 in field_tree
        assert 9 not in field_tree
        assert None not in field_tree
        assert len(field_tree) == 5

    def test_index_of_after_update(self, field_tree):
        """Queries see the updated leaf, not the old one."""
        field_tree.update(1, 99)

        assert field_tree.index_of(99) == 1
        assert field_tree.index_of(1) == -1


class TestSnapshots:
    """Tests that accessors return copies."""

    def test_leaves_is_a_copy(self, field_tree):
        """Mutating the returned leaf list does not touch the tree."""
        leaves = field_tree.leaves
        leaves.append(100)

        assert field_tree.size == 5

    def test_levels_is_a_deep_copy(self, field_tree):
        """Mutating a returned level does not touch the tree."""
        root = field_tree.root
        levels = field_tree.levels
        levels[0][0] = 123
        levels[-1][0] = 456

        assert field_tree.leaves[0] == 0
        assert field_tree.root == root


class TestAtomicity:
    """A hash failure mid-operation leaves the tree as it was."""

    def test_insert_failure_keeps_levels(self):
        """insert() writes nothing if hashing fails."""
        tree = LeanIMT(exploding_hash, make_label_leaves(3))
        before = tree.levels

        with pytest.raises(RuntimeError, match="hash failed"):
            tree.insert("boom")

        assert tree.levels == before

    def test_insert_many_failure_keeps_levels(self):
        """insert_many() writes nothing if hashing fails partway."""
        tree = LeanIMT(exploding_hash, make_label_leaves(3))
        before = tree.levels

        with pytest.raises(RuntimeError):
            tree.insert_many(["L3", "L4", "L5", "boom"])

        assert tree.levels == before

    def test_update_failure_keeps_levels(self):
        """update() writes nothing if hashing fails."""
        tree = LeanIMT(exploding_hash, make_label_leaves(4))
        before = tree.levels

        with pytest.raises(RuntimeError):
            tree.update(2, "boom")

        assert tree.levels == before

    def test_validation_failure_keeps_levels(self, field_tree):
        """Argument errors are raised before any write."""
        before = field_tree.levels

        with pytest.raises(LeafNotFoundException):
            field_tree.update(10, 1)

        assert field_tree.levels == before
