"""
Core cryptographic utilities.

Hash functions and leaf codecs that callers can hand to a Lean IMT.
"""
from .hashing import (
    SNARK_SCALAR_FIELD,
    sha256,
    hash_canonical,
    to_hex,
    from_hex,
    hash_concat,
    field_hash,
    parse_field_element,
    HashScheme,
    HASH_SCHEMES,
    get_hash_scheme,
)

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
