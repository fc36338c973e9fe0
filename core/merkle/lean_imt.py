"""
Lean Incremental Merkle Tree
Append-and-update binary commitment tree with caller-supplied hashing.

This module provides:
- LeanIMT: level store, mutation engine and query API
- Proof generation and verification bound to the tree's hash
- Export/import of the full level structure

Canonical Tree Rules (Hard Contracts):
1. levels[0] holds the leaves in insertion order; they are never reordered
2. Parent levels follow the pairing rules in core.merkle.levels: pairs are
   hashed, a trailing odd node is carried up unchanged
3. depth = ceil(log2(size)), 0 for empty and single-leaf trees
4. root is the single top node, None for an empty tree
5. Every mutation validates first and computes before it writes, so a
   failed call leaves the levels untouched

Determinism Notes:
- The tree calls hash_fn synchronously and never mutates its inputs
- Leaf equality in index_of/has is Python ==, so leaf types may define
  their own __eq__
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, Optional, Sequence, TypeVar

from core.merkle.lean_imt_proofs import (
    LeanIMTProof,
    build_lean_imt_proof,
    verify_lean_imt_proof,
)
from core.merkle.levels import HashFunction, combine_or_carry, compute_depth
from core.merkle.serialization import export_levels, import_levels
from core.merkle.validation import (
    require_callable,
    require_defined,
    require_leaf_index,
    require_sequence,
)
from core.schemas.errors import EmptyLeavesException


logger = logging.getLogger(__name__)

T = TypeVar("T")


class LeanIMT(Generic[T]):
    """
    Lean Incremental Merkle Tree.

    The tree shape is determined by the leaf count alone. A node without a
    partner at some level is carried to the next level as-is, so no
    padding value and no self-hashing ever occur.

    Example:
        >>> tree = LeanIMT(lambda a, b: a + b, [1, 2, 3])
        >>> tree.root, tree.depth, tree.size
        (6, 2, 3)
        >>> tree.insert(4)
        >>> tree.levels
        [[1, 2, 3, 4], [3, 7], [10]]
    """

    def __init__(self, hash_fn: HashFunction, leaves: Optional[Sequence[T]] = None) -> None:
        """
        Args:
            hash_fn: Pure (T, T) -> T combination function
            leaves: Optional initial leaves, built in one pass

        Raises:
            MissingParameterException: If hash_fn is None
            ParameterTypeException: If hash_fn is not callable or leaves is
                not a sequence
        """
        require_callable(hash_fn, "hash")
        if leaves is not None:
            require_sequence(leaves, "leaves")

        self._hash: HashFunction = hash_fn
        self._levels: list[list[T]] = [[]]

        if leaves is not None and len(leaves) > 0:
            self.insert_many(leaves)

    # ------------------------------------------------------------------
    # Level store
    # ------------------------------------------------------------------

    @property
    def hash_fn(self) -> HashFunction:
        return self._hash

    @property
    def root(self) -> Optional[T]:
        """Top node of the tree, None when empty."""
        top = self._levels[-1]
        return top[0] if top else None

    @property
    def depth(self) -> int:
        """Number of levels above the leaf level."""
        return len(self._levels) - 1

    @property
    def size(self) -> int:
        """Number of leaves."""
        return len(self._levels[0])

    @property
    def leaves(self) -> list[T]:
        """Copy of the leaf level."""
        return list(self._levels[0])

    @property
    def levels(self) -> list[list[T]]:
        """Copy of every level, leaves first."""
        return [list(level) for level in self._levels]

    def __len__(self) -> int:
        return self.size

    def __contains__(self, leaf: object) -> bool:
        return leaf is not None and self.index_of(leaf) != -1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={self.size}, depth={self.depth}, root={self.root!r})"

    def _level(self, depth: int) -> list[T]:
        return self._levels[depth] if depth < len(self._levels) else []

    def _commit(self, writes: Iterable[tuple[int, int, T]]) -> None:
        """Apply (level, index, value) writes, growing levels as needed."""
        for depth, index, value in writes:
            if depth == len(self._levels):
                self._levels.append([])
            level = self._levels[depth]
            if index == len(level):
                level.append(value)
            else:
                level[index] = value

    def _path_writes(self, index: int, node: T, depth: int) -> list[tuple[int, int, T]]:
        """Values along the path from leaf `index` (holding `node`) to the root."""
        writes = [(0, index, node)]
        for level in range(depth):
            node, index = combine_or_carry(self._levels[level], index, node, self._hash)
            writes.append((level + 1, index, node))
        return writes

    # ------------------------------------------------------------------
    # Mutation engine
    # ------------------------------------------------------------------

    def insert(self, leaf: T) -> None:
        """
        Append a leaf and recompute its path to the root.

        When the new size crosses a power of two a new root level is
        created above the old one.

        Raises:
            MissingParameterException: If leaf is None
        """
        require_defined(leaf, "leaf")

        index = self.size
        depth = compute_depth(index + 1)
        writes = self._path_writes(index, leaf, depth)
        self._commit(writes)

        logger.debug("Inserted leaf %d (depth=%d)", index, depth)

    def insert_many(self, leaves: Sequence[T]) -> None:
        """
        Append several leaves, recomputing each level's tail once.

        Produces exactly the levels that repeated insert() calls would.

        Raises:
            MissingParameterException: If leaves (or any leaf) is None
            ParameterTypeException: If leaves is not a sequence
            EmptyLeavesException: If leaves is empty
        """
        require_sequence(leaves, "leaves")
        if len(leaves) == 0:
            raise EmptyLeavesException()
        for leaf in leaves:
            require_defined(leaf, "leaf")

        start = self.size
        depth = compute_depth(start + len(leaves))
        tail: list[T] = list(leaves)
        tails: list[tuple[int, list[T]]] = [(start, tail)]

        for level in range(depth):
            # The first changed parent may pair with one unchanged node
            first = start >> 1
            window = self._level(level)[first << 1:start] + tail
            tail = [
                combine_or_carry(window, i, window[i], self._hash)[0]
                for i in range(0, len(window), 2)
            ]
            start = first
            tails.append((start, tail))

        for level, (offset, values) in enumerate(tails):
            if level == len(self._levels):
                self._levels.append([])
            del self._levels[level][offset:]
            self._levels[level].extend(values)

        logger.debug(
            "Inserted %d leaves (size=%d, depth=%d)", len(leaves), self.size, self.depth
        )

    def update(self, index: int, new_leaf: T) -> None:
        """
        Replace the leaf at `index` and recompute its path to the root.

        A carried node on the path takes the new value unchanged; it is
        only hashed where it has a partner.

        Raises:
            MissingParameterException: If index or new_leaf is None
            ParameterTypeException: If index is not an int
            LeafNotFoundException: If index is outside [0, size)
        """
        require_defined(index, "index")
        require_defined(new_leaf, "new_leaf")
        require_leaf_index(index, self.size)

        writes = self._path_writes(index, new_leaf, self.depth)
        self._commit(writes)

        logger.debug("Updated leaf %d", index)

    # ------------------------------------------------------------------
    # Query engine
    # ------------------------------------------------------------------

    def index_of(self, leaf: T) -> int:
        """
        Position of the first leaf equal to `leaf`, or -1.

        Raises:
            MissingParameterException: If leaf is None
        """
        require_defined(leaf, "leaf")
        for position, value in enumerate(self._levels[0]):
            if value == leaf:
                return position
        return -1

    def has(self, leaf: T) -> bool:
        """
        Whether some leaf equals `leaf`.

        Raises:
            MissingParameterException: If leaf is None
        """
        return self.index_of(leaf) != -1

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def generate_proof(self, index: int) -> LeanIMTProof[T]:
        """
        Membership proof for the leaf at `index`.

        Raises:
            MissingParameterException: If index is None
            ParameterTypeException: If index is not an int
            LeafNotFoundException: If index does not address a leaf
        """
        return build_lean_imt_proof(self._levels, index)

    def verify_proof(self, proof: Any) -> bool:
        """
        Verify a proof with this tree's hash function.

        Same algorithm as verify_lean_imt_proof; the proof does not need
        to come from this tree.
        """
        return verify_lean_imt_proof(proof, self._hash)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def export(self, indent: Optional[int] = None) -> str:
        """Serialize every level (leaves included) to a JSON string."""
        return export_levels(self._levels, indent=indent)

    @classmethod
    def import_(
        cls,
        hash_fn: HashFunction,
        nodes: str,
        map_fn: Optional[Callable[[Any], T]] = None,
    ) -> "LeanIMT[T]":
        """
        Rebuild a tree from export() output without re-hashing.

        Args:
            hash_fn: Hash used for subsequent mutations
            nodes: Exported payload
            map_fn: Converts raw parsed values to T (default: identity)

        Raises:
            MissingParameterException: If hash_fn or nodes is None
            ParameterTypeException: If hash_fn/map_fn is not callable or
                nodes is not a str
            MalformedNodesException: If the payload does not describe a tree
        """
        require_callable(hash_fn, "hash")
        levels = import_levels(nodes, map_fn)

        tree: LeanIMT[T] = cls(hash_fn)
        tree._levels = levels
        return tree


__all__ = [
    "LeanIMT",
]
