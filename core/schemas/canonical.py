"""
Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization utilities for tree exports, proofs
and leaf hashing.

CRITICAL: All outputs from this module MUST be deterministic across runs.
"""

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def _validate_float(value: float, path: str = "") -> None:
    """
    Validate that a float is finite (not NaN or Infinity).

    Args:
        value: The float to validate.
        path: Path for error reporting.

    Raises:
        CanonicalizationException: If the float is NaN or Infinity.
    """
    if not math.isfinite(value):
        raise CanonicalizationException(
            message=f"Non-finite float value encountered: {value}",
            details={"path": path, "value": str(value)},
        )


def canonicalize_value(value: Any, path: str = "", exclude_none: bool = True) -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Integers are kept as JSON integers of arbitrary size, so field elements
    survive a round trip without a string detour. Bytes become 0x-prefixed
    hex strings.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.
        exclude_none: Drop None-valued dict keys and model fields. Tree
            payloads pass False so structured leaves keep every key.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        CanonicalizationException: If the value cannot be canonicalized
            (e.g., contains NaN/Infinity floats).
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        _validate_float(value, path)
        return value

    if isinstance(value, str):
        return value

    if isinstance(value, Enum):
        # Represent enums as their string values
        return value.value

    if isinstance(value, BaseModel):
        dumped = value.model_dump(
            mode="python",
            by_alias=True,
            exclude_none=exclude_none,
        )
        return canonicalize_value(dumped, path, exclude_none)

    if isinstance(value, dict):
        # Keys will be sorted during JSON serialization
        return {
            str(k): canonicalize_value(v, f"{path}.{k}" if path else str(k), exclude_none)
            for k, v in value.items()
            if v is not None or not exclude_none
        }

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]", exclude_none)
            for i, item in enumerate(value)
        ]

    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def to_canonical_json_dict(obj: Any, exclude_none: bool = True) -> dict[str, Any]:
    """
    Convert an object to a canonical JSON-serializable dictionary.

    Raises:
        CanonicalizationException: If the object does not serialize to a dict.
    """
    canonicalized = canonicalize_value(obj, exclude_none=exclude_none)

    if not isinstance(canonicalized, dict):
        raise CanonicalizationException(
            message="to_canonical_json_dict expects an object that serializes to a dict",
            details={"type": type(obj).__name__, "result_type": type(canonicalized).__name__},
        )

    return canonicalized


def dumps_canonical(
    obj: Any,
    indent: int | None = None,
    exclude_none: bool = True,
) -> str:
    """
    Serialize an object to canonical JSON string.

    Args:
        obj: A Pydantic model, dict, list or primitive.
        indent: Optional pretty-print indent. Only for human-facing output;
            hashed payloads must use the default compact form.
        exclude_none: Drop None-valued dict keys and model fields.

    Returns:
        A canonical JSON string with:
            - Sorted keys
            - No extra whitespace
            - None fields excluded (unless exclude_none is False)
            - Bytes as 0x-prefixed hex
            - No NaN/Infinity floats

    Raises:
        CanonicalizationException: If serialization fails.

    Example:
        >>> dumps_canonical({"b": 2, "a": b"\\x01"})
        '{"a":"0x01","b":2}'
    """
    try:
        canonicalized = canonicalize_value(obj, exclude_none=exclude_none)
        return json.dumps(
            canonicalized,
            sort_keys=True,
            separators=CANONICAL_JSON_SEPARATORS if indent is None else None,
            indent=indent,
            ensure_ascii=False,
        )
    except CanonicalizationException:
        raise
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def loads_canonical(json_str: str) -> Any:
    """
    Parse a canonical JSON string.

    Note: Hex strings are NOT turned back into bytes; callers map raw
    values to their own types.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
    """
    return json.loads(json_str)
