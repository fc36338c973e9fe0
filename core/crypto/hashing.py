"""
Hashing Utilities
Ready-made combination functions and leaf codecs for Lean IMT instances.

This module provides:
- SHA-256 hashing for raw bytes
- Canonical hashing for objects (via dumps_canonical)
- Hex encoding/decoding with 0x prefix
- Two tree hash functions: hash_concat over bytes, field_hash over
  BN254 scalar field elements
- A small registry of named hash schemes used by the CLI and config

The tree itself never imports from here; any pure (T, T) -> T callable
works as a tree hash.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import UnknownHashSchemeException


# Order of the BN254 scalar field; circuit inputs live in [0, p)
SNARK_SCALAR_FIELD: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    This is the standard way to derive a bytes leaf from a record.

    Rule: leaf = sha256(dumps_canonical(obj).encode("utf-8"))

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not isinstance(hex_string, str) or not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {str(hex_string)[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    parent = sha256(left + right)
    """
    return sha256(left + right)


def _field_bytes(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Field element must be an int, got {type(value).__name__}")
    if not 0 <= value < SNARK_SCALAR_FIELD:
        raise ValueError(f"Value {value} is not a BN254 scalar field element")
    return value.to_bytes(32, "big")


def field_hash(left: int, right: int) -> int:
    """
    Combine two field elements into one.

    parent = int(sha256(be32(left) || be32(right))) mod p

    Raises:
        TypeError: If either operand is not an int
        ValueError: If either operand is outside [0, p)
    """
    digest = sha256(_field_bytes(left) + _field_bytes(right))
    return int.from_bytes(digest, "big") % SNARK_SCALAR_FIELD


def parse_field_element(text: str) -> int:
    """Parse a decimal (or 0x-prefixed) field element."""
    value = int(text, 0)
    _field_bytes(value)
    return value


def _map_field_element(raw: Any) -> int:
    if isinstance(raw, str):
        return parse_field_element(raw)
    _field_bytes(raw)
    return raw


# =============================================================================
# Hash Schemes
# =============================================================================


@dataclass(frozen=True)
class HashScheme:
    """
    A named tree hash together with the conversions its values need.

    Attributes:
        name: Registry name
        hash_fn: The (T, T) -> T combination function
        parse_leaf: Converts command-line text into a leaf value
        map_value: Converts a raw exported JSON value back into T
    """
    name: str
    hash_fn: Callable[[Any, Any], Any]
    parse_leaf: Callable[[str], Any]
    map_value: Callable[[Any], Any]


HASH_SCHEMES: dict[str, HashScheme] = {
    "sha256": HashScheme(
        name="sha256",
        hash_fn=hash_concat,
        parse_leaf=from_hex,
        map_value=from_hex,
    ),
    "field": HashScheme(
        name="field",
        hash_fn=field_hash,
        parse_leaf=parse_field_element,
        map_value=_map_field_element,
    ),
}


def get_hash_scheme(name: str) -> HashScheme:
    """
    Look up a registered hash scheme.

    Raises:
        UnknownHashSchemeException: If no scheme has that name
    """
    try:
        return HASH_SCHEMES[name]
    except KeyError:
        raise UnknownHashSchemeException(name, sorted(HASH_SCHEMES)) from None


__all__ = [
    "SNARK_SCALAR_FIELD",
    "sha256",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "hash_concat",
    "field_hash",
    "parse_field_element",
    "HashScheme",
    "HASH_SCHEMES",
    "get_hash_scheme",
]
