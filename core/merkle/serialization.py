"""
Lean IMT Serialization
Export tree levels to a JSON string and parse them back.

Payload Format:
- A JSON array of arrays, leaf level first, root level last
- Values go through canonical JSON rules: ints stay integers of any size,
  bytes become 0x-prefixed hex strings, str/bool pass through, dict
  values keep every key (None included)
- An empty tree is [[]]

Trust Boundary:
- Import checks the payload shape against the level recurrence but never
  re-hashes; values are trusted verbatim
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Sequence

from core.merkle.levels import level_lengths
from core.merkle.validation import require_callable, require_string
from core.schemas.canonical import dumps_canonical, loads_canonical
from core.schemas.errors import MalformedNodesException


logger = logging.getLogger(__name__)


def export_levels(levels: Sequence[Sequence[Any]], indent: Optional[int] = None) -> str:
    """
    Serialize tree levels to a JSON string.

    Args:
        levels: Level values, leaves first
        indent: Optional pretty-print indent

    Returns:
        JSON text preserving level order and within-level order

    Raises:
        CanonicalizationException: If a value has no canonical JSON form
    """
    return dumps_canonical(
        [list(level) for level in levels], indent=indent, exclude_none=False
    )


def _check_shape(raw: Any) -> list[list[Any]]:
    if not isinstance(raw, list) or not raw:
        raise MalformedNodesException(
            "Parameter 'nodes' must encode a non-empty list of levels",
            details={"type": type(raw).__name__},
        )

    for depth, level in enumerate(raw):
        if not isinstance(level, list):
            raise MalformedNodesException(
                f"Level {depth} is not a list",
                details={"level": depth, "type": type(level).__name__},
            )
        if any(value is None for value in level):
            raise MalformedNodesException(
                f"Level {depth} contains null values",
                details={"level": depth},
            )

    expected = level_lengths(len(raw[0]))
    actual = [len(level) for level in raw]
    if actual != expected:
        raise MalformedNodesException(
            "Level lengths do not match the tree shape for "
            f"{len(raw[0])} leaves",
            details={"expected": expected, "actual": actual},
        )
    return raw


def import_levels(
    nodes: str,
    map_fn: Optional[Callable[[Any], Any]] = None,
) -> list[list[Any]]:
    """
    Parse an exported payload into tree levels.

    Args:
        nodes: Output of export_levels
        map_fn: Converts each raw parsed value into the tree's value type
            (default: identity)

    Returns:
        Fresh level lists, leaves first

    Raises:
        MissingParameterException: If nodes is None
        ParameterTypeException: If nodes is not a str or map_fn is not callable
        MalformedNodesException: If the payload is not valid JSON or its
            shape does not follow the level recurrence
    """
    require_string(nodes, "nodes")
    if map_fn is not None:
        require_callable(map_fn, "map")

    try:
        raw = loads_canonical(nodes)
    except json.JSONDecodeError as e:
        raise MalformedNodesException(
            f"Parameter 'nodes' is not valid JSON: {e.msg}",
            details={"line": e.lineno, "column": e.colno},
        ) from e

    levels = _check_shape(raw)
    if map_fn is None:
        parsed = [list(level) for level in levels]
    else:
        parsed = [[map_fn(value) for value in level] for level in levels]

    logger.debug(
        "Imported %d levels (%d leaves)", len(parsed), len(parsed[0])
    )
    return parsed


__all__ = [
    "export_levels",
    "import_levels",
]
