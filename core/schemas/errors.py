"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the Lean IMT.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the package."""

    LEAN_IMT_ERROR = "LEAN_IMT_ERROR"

    # Argument Errors
    PARAMETER_MISSING = "PARAMETER_MISSING"
    PARAMETER_TYPE_INVALID = "PARAMETER_TYPE_INVALID"
    NO_LEAVES_TO_ADD = "NO_LEAVES_TO_ADD"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"

    # Serialization Errors
    NODES_MALFORMED = "NODES_MALFORMED"
    PROOF_MALFORMED = "PROOF_MALFORMED"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Configuration Errors
    UNKNOWN_HASH_SCHEME = "UNKNOWN_HASH_SCHEME"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class LeanIMTError(BaseModel):
    """
    Base error model for structured error communication.

    Used where errors are reported rather than raised, e.g. in the
    machine-readable CLI output.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.PARAMETER_MISSING],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class LeanIMTException(Exception):
    """
    Base exception for all Lean IMT errors.

    This exception carries structured error information and can be
    converted to a LeanIMTError model.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.LEAN_IMT_ERROR,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> LeanIMTError:
        """Convert this exception to a LeanIMTError model."""
        return LeanIMTError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class MissingParameterException(LeanIMTException, ValueError):
    """Exception raised when a required argument is None."""

    def __init__(self, parameter: str) -> None:
        super().__init__(
            message=f"Parameter '{parameter}' is not defined",
            code=ErrorCodes.PARAMETER_MISSING,
            details={"parameter": parameter},
        )
        self.parameter = parameter


class ParameterTypeException(LeanIMTException, TypeError):
    """Exception raised when an argument has the wrong kind."""

    def __init__(self, parameter: str, expected: str) -> None:
        super().__init__(
            message=f"Parameter '{parameter}' is not {expected}",
            code=ErrorCodes.PARAMETER_TYPE_INVALID,
            details={"parameter": parameter, "expected": expected},
        )
        self.parameter = parameter


class EmptyLeavesException(LeanIMTException, ValueError):
    """Exception raised when a batch insert receives no leaves."""

    def __init__(self) -> None:
        super().__init__(
            message="There are no leaves to add",
            code=ErrorCodes.NO_LEAVES_TO_ADD,
        )


class LeafNotFoundException(LeanIMTException, IndexError):
    """Exception raised when an index does not address an existing leaf."""

    def __init__(self, index: int, size: int | None = None) -> None:
        details: dict[str, Any] = {"index": index}
        if size is not None:
            details["size"] = size
        super().__init__(
            message=f"The leaf at index '{index}' does not exist in this tree",
            code=ErrorCodes.LEAF_NOT_FOUND,
            details=details,
        )
        self.index = index


class MalformedNodesException(LeanIMTException, ValueError):
    """Exception raised when an exported node payload cannot be imported."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.NODES_MALFORMED,
            details=details,
            retryable=False,
        )


class MalformedProofException(LeanIMTException, ValueError):
    """Exception raised when proof data does not form a valid LeanIMTProof."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_MALFORMED,
            details=details,
            retryable=False,
        )


class CanonicalizationException(LeanIMTException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class UnknownHashSchemeException(LeanIMTException, KeyError):
    """Exception raised when a hash scheme name is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            message=f"Unknown hash scheme '{name}' (available: {', '.join(available)})",
            code=ErrorCodes.UNKNOWN_HASH_SCHEME,
            details={"name": name, "available": available},
        )

    def __str__(self) -> str:
        return self.message
