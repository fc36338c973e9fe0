"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
    to_canonical_json_dict,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    EmptyLeavesException,
    ErrorCodes,
    LeafNotFoundException,
    LeanIMTError,
    LeanIMTException,
    MalformedNodesException,
    MalformedProofException,
    MissingParameterException,
    ParameterTypeException,
    UnknownHashSchemeException,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    "to_canonical_json_dict",
    # Errors
    "CanonicalizationException",
    "EmptyLeavesException",
    "ErrorCodes",
    "LeafNotFoundException",
    "LeanIMTError",
    "LeanIMTException",
    "MalformedNodesException",
    "MalformedProofException",
    "MissingParameterException",
    "ParameterTypeException",
    "UnknownHashSchemeException",
]
