"""
Common test fixtures shared by all modules.

Provides factory functions for Lean IMT tests:
- Leaf sequences (field elements, byte digests, labels)
- Readable hash functions whose output shows the tree structure
- A straightforward reference build of the level recurrence

These are the foundational building blocks used by the unit tests.
"""

from typing import Any, Callable, Sequence

from core.crypto.hashing import field_hash, hash_concat, sha256
from core.merkle import LeanIMT


# =============================================================================
# Hash Functions
# =============================================================================

def label_hash(left: str, right: str) -> str:
    """Non-commutative string hash whose output spells out the pairing."""
    return f"({left},{right})"


def sum_hash(left: int, right: int) -> int:
    """Commutative toy hash; only for tests that need plain integers."""
    return left + right


# =============================================================================
# Leaf Factories
# =============================================================================

def make_field_leaves(count: int = 5) -> list[int]:
    """Field elements 0..count-1."""
    return list(range(count))


def make_byte_leaves(count: int = 5) -> list[bytes]:
    """SHA-256 digests of b"leaf0", b"leaf1", ..."""
    return [sha256(f"leaf{i}".encode()) for i in range(count)]


def make_label_leaves(count: int = 5) -> list[str]:
    """Single-letter-ish labels: "L0", "L1", ..."""
    return [f"L{i}" for i in range(count)]


# =============================================================================
# Tree Factories
# =============================================================================

def make_field_tree(count: int = 5) -> LeanIMT[int]:
    """Tree over field elements 0..count-1 hashed with field_hash."""
    return LeanIMT(field_hash, make_field_leaves(count))


def make_byte_tree(count: int = 5) -> LeanIMT[bytes]:
    """Tree over byte digests hashed with hash_concat."""
    return LeanIMT(hash_concat, make_byte_leaves(count))


# =============================================================================
# Reference Implementation
# =============================================================================

def reference_levels(
    leaves: Sequence[Any],
    hash_fn: Callable[[Any, Any], Any],
) -> list[list[Any]]:
    """
    Build all levels directly from the recurrence, level by level.

    Deliberately naive: used as the oracle for incremental algorithms.
    """
    levels = [list(leaves)]
    while len(levels[-1]) > 1:
        current = levels[-1]
        parent = []
        for j in range(0, len(current), 2):
            if j + 1 < len(current):
                parent.append(hash_fn(current[j], current[j + 1]))
            else:
                parent.append(current[j])
        levels.append(parent)
    return levels


def expected_five_leaf_root(hash_fn: Callable[[Any, Any], Any], leaves: Sequence[Any]) -> Any:
    """Root of a 5-leaf tree: h(h(h(l0, l1), h(l2, l3)), l4)."""
    n1_0 = hash_fn(leaves[0], leaves[1])
    n1_1 = hash_fn(leaves[2], leaves[3])
    n2_0 = hash_fn(n1_0, n1_1)
    return hash_fn(n2_0, leaves[4])
