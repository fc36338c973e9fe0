"""
Lean IMT Proofs
Membership proof generation and verification for Lean incremental trees.

Proof Rules (Hard Contracts):
1. siblings holds one entry per level where the path node had a partner,
   ordered from the leaf level to the root
2. Carry levels contribute no sibling; the path value passes through
3. path_indices[i] is 1 when the path node is the right operand at the
   i-th combining step, 0 when it is the left operand
4. size records the leaf count at generation time; the combine/carry
   schedule is a function of (index, size) and nothing else
5. A proof whose path_indices or sibling count disagrees with the schedule
   derived from (index, size) does not verify

Verification returns False for any well-formed proof that fails to
reproduce its root, and raises only for malformed proof objects.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator

from core.merkle.levels import HashFunction, PathStep, path_steps
from core.merkle.validation import (
    is_integer,
    is_sequence,
    require_callable,
    require_defined,
    require_leaf_index,
    require_sequence,
)
from core.schemas.canonical import to_canonical_json_dict
from core.schemas.errors import (
    MalformedProofException,
    MissingParameterException,
    ParameterTypeException,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class LeanIMTProof(BaseModel, Generic[T]):
    """
    A membership proof for a single leaf of a Lean IMT.

    Attributes:
        root: The tree root this proof is against
        leaf: The leaf value being proven
        index: 0-based position of the leaf when the proof was generated
        size: Number of leaves in the tree when the proof was generated
        siblings: Partner values at each combining level, leaf to root
        path_indices: 0 (path node on the left) or 1 (on the right), one
            per sibling
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    root: T
    leaf: T
    index: StrictInt = Field(..., ge=0)
    size: StrictInt = Field(..., ge=1)
    siblings: list[T] = Field(default_factory=list)
    path_indices: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_shape(self) -> "LeanIMTProof[T]":
        if self.index >= self.size:
            raise ValueError(
                f"Leaf index {self.index} out of range for {self.size} leaves"
            )
        if len(self.path_indices) != len(self.siblings):
            raise ValueError(
                f"path_indices has {len(self.path_indices)} entries "
                f"but siblings has {len(self.siblings)}"
            )
        if any(bit not in (0, 1) for bit in self.path_indices):
            raise ValueError("path_indices entries must be 0 or 1")
        return self

    @property
    def depth(self) -> int:
        """Number of combining steps between leaf and root."""
        return len(self.siblings)

    def to_dict(self) -> dict[str, Any]:
        """
        JSON-ready representation (bytes become 0x hex).

        The layout matches what circuit input generators consume:
        root, leaf, siblings and path_indices side by side.
        """
        return to_canonical_json_dict(
            {
                "root": self.root,
                "leaf": self.leaf,
                "index": self.index,
                "size": self.size,
                "siblings": list(self.siblings),
                "path_indices": list(self.path_indices),
            },
            exclude_none=False,
        )

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        map_fn: Optional[Callable[[Any], Any]] = None,
    ) -> "LeanIMTProof[Any]":
        """
        Rebuild a proof from `to_dict` output.

        Args:
            data: Parsed proof mapping
            map_fn: Converts each raw root/leaf/sibling value (default: identity)

        Raises:
            MissingParameterException: If data or a required field is None
            ParameterTypeException: If data or a field has the wrong kind
            MalformedProofException: If the fields do not form a valid proof
                (e.g. index outside [0, size))
        """
        require_defined(data, "proof")
        if not isinstance(data, Mapping):
            raise ParameterTypeException("proof", "a mapping")
        if map_fn is not None:
            require_callable(map_fn, "map")
        convert = map_fn or (lambda value: value)

        fields = _read_proof_fields(data)
        path_indices = fields["path_indices"]
        if path_indices is None:
            path_indices = _expected_path_indices(fields["index"], fields["size"]) or []

        try:
            return cls(
                root=convert(fields["root"]),
                leaf=convert(fields["leaf"]),
                index=fields["index"],
                size=fields["size"],
                siblings=[convert(s) for s in fields["siblings"]],
                path_indices=list(path_indices),
            )
        except ValidationError as e:
            raise MalformedProofException(
                f"Proof fields are not a valid proof: {e.error_count()} error(s)",
                details={
                    "errors": [
                        {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                    ]
                },
            ) from e


def _expected_path_indices(index: int, size: int) -> Optional[list[int]]:
    """Path bits of the combining steps, or None if index is outside [0, size)."""
    if not 0 <= index < size:
        return None
    return [int(step.is_right) for step in path_steps(index, size) if not step.is_carry]


def _read_proof_fields(proof: Any) -> dict[str, Any]:
    """
    Extract and structurally validate proof fields.

    Accepts a LeanIMTProof (including ones altered via model_copy) or a
    plain mapping with the same keys.

    Raises:
        MissingParameterException: If proof or a required field is None
        ParameterTypeException: If a field has the wrong kind
    """
    require_defined(proof, "proof")

    if isinstance(proof, LeanIMTProof):
        source: Mapping[str, Any] = dict(proof)
    elif isinstance(proof, Mapping):
        source = proof
    else:
        raise ParameterTypeException("proof", "a LeanIMTProof or mapping")

    fields = {
        name: source.get(name)
        for name in ("root", "leaf", "index", "size", "siblings", "path_indices")
    }

    for name in ("root", "leaf", "siblings", "index", "size"):
        if fields[name] is None:
            raise MissingParameterException(f"proof.{name}")

    if not is_sequence(fields["siblings"]):
        raise ParameterTypeException("proof.siblings", "a sequence")
    if not is_integer(fields["index"]):
        raise ParameterTypeException("proof.index", "an integer")
    if not is_integer(fields["size"]):
        raise ParameterTypeException("proof.size", "an integer")

    path_indices = fields["path_indices"]
    if path_indices is not None:
        if not is_sequence(path_indices):
            raise ParameterTypeException("proof.path_indices", "a sequence")
        if len(path_indices) != len(fields["siblings"]):
            raise ParameterTypeException(
                "proof.path_indices", "a sequence as long as proof.siblings"
            )
        if not all(is_integer(bit) and bit in (0, 1) for bit in path_indices):
            raise ParameterTypeException("proof.path_indices", "a sequence of 0/1 integers")

    return fields


def build_lean_imt_proof(levels: Sequence[Sequence[T]], index: int) -> LeanIMTProof[T]:
    """
    Generate a proof for the leaf at `index` from a snapshot of tree levels.

    Args:
        levels: Level values, leaves first, root level last
        index: 0-based index of the leaf to prove

    Returns:
        LeanIMTProof for the specified leaf

    Raises:
        MissingParameterException: If index is None
        ParameterTypeException: If index is not an int
        LeafNotFoundException: If index does not address an existing leaf
    """
    require_sequence(levels, "levels")
    size = len(levels[0]) if levels else 0
    require_leaf_index(index, size)

    siblings: list[T] = []
    path_indices: list[int] = []
    steps: list[PathStep] = path_steps(index, size)

    for step in steps:
        if step.is_carry:
            continue
        siblings.append(levels[step.level][step.sibling])
        path_indices.append(int(step.is_right))

    return LeanIMTProof(
        root=levels[len(steps)][0],
        leaf=levels[0][index],
        index=index,
        size=size,
        siblings=siblings,
        path_indices=path_indices,
    )


def verify_lean_imt_proof(proof: Any, hash_fn: HashFunction) -> bool:
    """
    Verify a Lean IMT proof with the given hash function.

    Algorithm:
    1. Validate the proof structure (raises on malformed input)
    2. Derive the combine/carry schedule from (index, size)
    3. Reject if the claimed path_indices or sibling count disagree
    4. Starting from the leaf, fold each sibling in on the recorded side
    5. Compare the result with the claimed root

    Args:
        proof: LeanIMTProof or mapping with the same keys
        hash_fn: The (T, T) -> T combination function

    Returns:
        True if the proof reproduces its root, False otherwise
    """
    require_callable(hash_fn, "hash")
    fields = _read_proof_fields(proof)

    index, size = fields["index"], fields["size"]
    siblings = fields["siblings"]

    expected = _expected_path_indices(index, size)
    if expected is None:
        logger.debug("Proof index %d outside declared size %d", index, size)
        return False

    claimed = fields["path_indices"]
    if claimed is not None and list(claimed) != expected:
        logger.debug("Proof path_indices disagree with schedule for index %d", index)
        return False
    if len(siblings) != len(expected):
        logger.debug(
            "Proof has %d siblings, schedule needs %d", len(siblings), len(expected)
        )
        return False

    node = fields["leaf"]
    for sibling, is_right in zip(siblings, expected):
        if is_right:
            node = hash_fn(sibling, node)
        else:
            node = hash_fn(node, sibling)

    return bool(node == fields["root"])


class LeanIMTProver:
    """
    Convenience class for generating proofs without keeping a tree around.

    Example:
        >>> proof = LeanIMTProver.prove(hash_concat, leaves, index=1)
        >>> LeanIMTVerifier.verify(proof, hash_concat)
        True
    """

    @staticmethod
    def prove(hash_fn: HashFunction, leaves: Sequence[T], index: int) -> LeanIMTProof[T]:
        """Build a tree over `leaves` and prove the leaf at `index`."""
        from core.merkle.lean_imt import LeanIMT

        return LeanIMT(hash_fn, leaves).generate_proof(index)

    @staticmethod
    def compute_root(hash_fn: HashFunction, leaves: Sequence[T]) -> Optional[T]:
        """Root of a tree over `leaves` (None when empty)."""
        from core.merkle.lean_imt import LeanIMT

        return LeanIMT(hash_fn, leaves).root


class LeanIMTVerifier:
    """Convenience class for verifying proofs."""

    @staticmethod
    def verify(proof: Any, hash_fn: HashFunction) -> bool:
        """Verify a proof; see verify_lean_imt_proof."""
        return verify_lean_imt_proof(proof, hash_fn)

    @staticmethod
    def verify_leaf_in_root(
        hash_fn: HashFunction,
        leaf: Any,
        index: int,
        size: int,
        siblings: Sequence[Any],
        root: Any,
    ) -> bool:
        """
        Verify a leaf is included in a root using raw components.

        The path indices are derived from (index, size).
        """
        return verify_lean_imt_proof(
            {
                "root": root,
                "leaf": leaf,
                "index": index,
                "size": size,
                "siblings": list(siblings),
            },
            hash_fn,
        )


__all__ = [
    "LeanIMTProof",
    "build_lean_imt_proof",
    "verify_lean_imt_proof",
    "LeanIMTProver",
    "LeanIMTVerifier",
]
