"""
Lean IMT Level Recurrence
Shape and pairing rules shared by tree mutation, proofs and import checks.

Pairing Rules (Hard Contracts):
1. A level of length m has a parent level of length ceil(m / 2)
2. parent[j] = hash(level[2j], level[2j + 1]) when 2j + 1 < m
3. parent[j] = level[2j] otherwise (carried, never hashed with itself)
4. The tree shape depends only on the leaf count

Everything that needs to know "does this node have a partner here" asks
this module, so insertion, update, proof generation and proof
verification cannot drift apart.
"""
from __future__ import annotations

from typing import Callable, NamedTuple, Optional, Sequence, TypeVar


T = TypeVar("T")

HashFunction = Callable[[T, T], T]


class PathStep(NamedTuple):
    """
    One level of a leaf-to-root walk.

    Attributes:
        level: Distance from the leaf level
        position: Index of the path node within that level
        sibling: Index of its partner, or None when the node is carried
    """
    level: int
    position: int
    sibling: Optional[int]

    @property
    def is_carry(self) -> bool:
        return self.sibling is None

    @property
    def is_right(self) -> bool:
        """True when the path node is the right operand of the hash."""
        return self.position % 2 == 1


def parent_length(length: int) -> int:
    """Number of nodes in the level above a level of `length` nodes."""
    return (length + 1) // 2


def compute_depth(size: int) -> int:
    """
    Number of levels above the leaves for a tree of `size` leaves.

    Equals ceil(log2(size)) for size >= 1 and 0 for an empty tree.

    Example:
        >>> [compute_depth(n) for n in (0, 1, 2, 3, 4, 5, 8, 9)]
        [0, 0, 1, 2, 2, 3, 3, 4]
    """
    if size < 0:
        raise ValueError(f"Tree size must be non-negative, got {size}")
    return (size - 1).bit_length() if size > 1 else 0


def level_lengths(size: int) -> list[int]:
    """
    Lengths of every level, leaves first.

    Example:
        >>> level_lengths(5)
        [5, 3, 2, 1]
    """
    lengths = [size]
    for _ in range(compute_depth(size)):
        lengths.append(parent_length(lengths[-1]))
    return lengths


def sibling_position(position: int, length: int) -> Optional[int]:
    """Index of the partner of `position` in a level of `length` nodes, if any."""
    if position % 2 == 1:
        return position - 1
    if position + 1 < length:
        return position + 1
    return None


def combine_or_carry(
    level: Sequence[T],
    index: int,
    node: T,
    hash_fn: HashFunction,
) -> tuple[T, int]:
    """
    Compute the parent of the node at `index`.

    `node` is the value to use at `index`; it may differ from level[index]
    (an update in progress) or lie one past the end of the level (an
    append in progress). Partners are always read from `level`.

    Args:
        level: Current values of the level
        index: Position of the path node
        node: Value of the path node
        hash_fn: Combination function

    Returns:
        Tuple of (parent value, parent index)
    """
    if index % 2 == 1:
        return hash_fn(level[index - 1], node), index >> 1
    if index + 1 < len(level):
        return hash_fn(node, level[index + 1]), index >> 1
    return node, index >> 1


def path_steps(index: int, size: int) -> list[PathStep]:
    """
    The combine/carry schedule for the leaf at `index` in a tree of `size` leaves.

    Returns one PathStep per level below the root.

    Raises:
        IndexError: If index is outside [0, size)

    Example:
        >>> [s.sibling for s in path_steps(4, 5)]
        [None, None, 0]
    """
    if not 0 <= index < size:
        raise IndexError(f"Leaf index {index} out of range for {size} leaves")

    steps: list[PathStep] = []
    position = index
    for level, length in enumerate(level_lengths(size)[:-1]):
        steps.append(PathStep(level, position, sibling_position(position, length)))
        position >>= 1
    return steps


__all__ = [
    "HashFunction",
    "PathStep",
    "parent_length",
    "compute_depth",
    "level_lengths",
    "sibling_position",
    "combine_or_carry",
    "path_steps",
]
