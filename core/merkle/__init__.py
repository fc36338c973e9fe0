"""
Lean Incremental Merkle Tree and Commitments
Append-and-update Merkle tree with caller-supplied hashing, membership
proofs and export/import.

This module provides:
- LeanIMT: The tree (insert, insert_many, update, index_of, has,
  generate_proof, verify_proof, export, import_)
- LeanIMTProof: Pydantic model of a membership proof
- verify_lean_imt_proof: Stand-alone proof verification
- LeanIMTProver / LeanIMTVerifier: Convenience wrappers
- Level recurrence helpers (compute_depth, level_lengths, path_steps)

Canonical Commitment Rules:
1. Leaves are kept in insertion order
2. Parent = hash(left, right) when a pair exists
3. Odd trailing node is carried up unchanged (no padding, no self-hash)
4. Empty tree: root is None, depth 0
5. Single leaf: root = leaf

Usage:
    from core.merkle import LeanIMT, verify_lean_imt_proof
    from core.crypto import hash_concat

    tree = LeanIMT(hash_concat, leaves)
    tree.insert(new_leaf)

    proof = tree.generate_proof(2)
    assert verify_lean_imt_proof(proof, hash_concat)

    payload = tree.export()
    restored = LeanIMT.import_(hash_concat, payload, from_hex)
"""
from .levels import (
    HashFunction,
    PathStep,
    combine_or_carry,
    compute_depth,
    level_lengths,
    parent_length,
    path_steps,
    sibling_position,
)

from .lean_imt_proofs import (
    LeanIMTProof,
    LeanIMTProver,
    LeanIMTVerifier,
    build_lean_imt_proof,
    verify_lean_imt_proof,
)

from .lean_imt import LeanIMT

from .serialization import (
    export_levels,
    import_levels,
)


__all__ = [
    # Core types
    "LeanIMT",
    "LeanIMTProof",
    "HashFunction",
    "PathStep",
    # Level recurrence
    "combine_or_carry",
    "compute_depth",
    "level_lengths",
    "parent_length",
    "path_steps",
    "sibling_position",
    # Proofs
    "build_lean_imt_proof",
    "verify_lean_imt_proof",
    # Serialization
    "export_levels",
    "import_levels",
    # Convenience classes
    "LeanIMTProver",
    "LeanIMTVerifier",
]
