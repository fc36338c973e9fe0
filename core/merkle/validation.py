"""
Argument checks shared by the tree, the proof codec and the serializer.

Every public operation validates its arguments with these helpers before
touching any state.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from core.schemas.errors import (
    LeafNotFoundException,
    MissingParameterException,
    ParameterTypeException,
)


def require_defined(value: Any, name: str) -> None:
    if value is None:
        raise MissingParameterException(name)


def require_callable(value: Any, name: str) -> None:
    require_defined(value, name)
    if not callable(value):
        raise ParameterTypeException(name, "a function")


def is_integer(value: Any) -> bool:
    # bool is an int subclass but never a valid index
    return isinstance(value, int) and not isinstance(value, bool)


def require_integer(value: Any, name: str) -> None:
    require_defined(value, name)
    if not is_integer(value):
        raise ParameterTypeException(name, "an integer")


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def require_sequence(value: Any, name: str) -> None:
    require_defined(value, name)
    if not is_sequence(value):
        raise ParameterTypeException(name, "a sequence")


def require_string(value: Any, name: str) -> None:
    require_defined(value, name)
    if not isinstance(value, str):
        raise ParameterTypeException(name, "a string")


def require_leaf_index(index: Any, size: int, name: str = "index") -> None:
    """Check that `index` addresses an existing leaf of a tree of `size` leaves."""
    require_integer(index, name)
    if not 0 <= index < size:
        raise LeafNotFoundException(index, size)
