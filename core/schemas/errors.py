"""
Module 01 - Schemas & Errors
File: errors.py

Purpose: Standard error taxonomy for allow-list commitments and proofs.
Defines both Pydantic models for structured error communication
(returned as values across component boundaries) and Python exceptions
for control flow inside a component.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Leaf & Input Validation Errors
    LEAF_VALIDATION_ERROR = "LEAF_VALIDATION_ERROR"
    EMPTY_LEAF_SET = "EMPTY_LEAF_SET"
    INVALID_LEAF_ENCODING = "INVALID_LEAF_ENCODING"

    # Lookup Errors
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    DUPLICATE_INDEX = "DUPLICATE_INDEX"

    # Merkle & Commitment Errors
    INVALID_MERKLE_NODE = "INVALID_MERKLE_NODE"
    INVALID_TREE = "INVALID_TREE"
    INVALID_MULTIPROOF = "INVALID_MULTIPROOF"
    ROOT_MISMATCH = "ROOT_MISMATCH"

    # Dump Errors
    DUMP_IO_ERROR = "DUMP_IO_ERROR"
    UNSUPPORTED_DUMP_FORMAT = "UNSUPPORTED_DUMP_FORMAT"

    # Signature Errors
    SIGNATURE_ERROR = "SIGNATURE_ERROR"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class AllowlistError(BaseModel):
    """
    Base error model for structured error communication.

    Used to hand validation and lookup failures back to callers
    without raising, so batch scripts and services can decide per case
    whether a failure is fatal.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.LEAF_VALIDATION_ERROR],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "AllowlistException":
        """Convert this error model to a raisable exception."""
        exc_type = _EXCEPTIONS_BY_CODE.get(self.code, AllowlistException)
        exc = exc_type.__new__(exc_type)
        AllowlistException.__init__(
            exc,
            message=self.message,
            code=self.code,
            details=dict(self.details),
        )
        return exc


class ValidationError(AllowlistError):
    """Error model for malformed, empty or mistyped leaf input."""

    code: str = Field(default=ErrorCodes.LEAF_VALIDATION_ERROR)
    field_path: str | None = Field(
        default=None,
        description="Leaf/field position that failed validation (e.g. 'leaves[2][0]')",
    )
    expected: str | None = Field(
        default=None,
        description="Expected type tag or shape",
    )
    actual: str | None = Field(
        default=None,
        description="Actual value received",
    )


class NotFoundError(AllowlistError):
    """Error model for a queried leaf that is not in the tree."""

    code: str = Field(default=ErrorCodes.LEAF_NOT_FOUND)
    leaf: list[Any] | None = Field(
        default=None,
        description="The leaf value that was looked up",
    )


class OutOfRangeError(AllowlistError):
    """Error model for an index outside the stored value sequence."""

    code: str = Field(default=ErrorCodes.INDEX_OUT_OF_RANGE)
    index: int | None = Field(default=None)
    size: int | None = Field(default=None)


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AllowlistException(Exception):
    """
    Base exception for all allow-list commitment errors.

    Carries structured error information and can be converted
    to an AllowlistError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "ALLOWLIST_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> AllowlistError:
        """Convert this exception to an AllowlistError model."""
        return AllowlistError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class LeafValidationException(AllowlistException, ValueError):
    """Exception raised when leaf input or leaf encoding is invalid."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        code: str = ErrorCodes.LEAF_VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(message=message, code=code, details=full_details)

    @property
    def field_path(self) -> str | None:
        return self.details.get("field_path")

    def to_error_model(self) -> ValidationError:
        return ValidationError(
            code=self.code,
            message=self.message,
            details=self.details,
            field_path=self.field_path,
            expected=self.details.get("expected"),
            actual=self.details.get("actual"),
        )


class LeafNotFoundException(AllowlistException, LookupError):
    """Exception raised when a leaf value is not present in the tree."""

    def __init__(
        self,
        message: str,
        leaf: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf is not None:
            full_details["leaf"] = leaf
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_NOT_FOUND,
            details=full_details,
        )

    @property
    def leaf(self) -> list[Any] | None:
        return self.details.get("leaf")

    def to_error_model(self) -> NotFoundError:
        return NotFoundError(message=self.message, details=self.details, leaf=self.leaf)


class IndexOutOfRangeException(AllowlistException, IndexError):
    """Exception raised when an index is outside the stored values or tree."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        size: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        if size is not None:
            full_details["size"] = size
        super().__init__(
            message=message,
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details=full_details,
        )

    @property
    def index(self) -> int | None:
        return self.details.get("index")

    @property
    def size(self) -> int | None:
        return self.details.get("size")

    def to_error_model(self) -> OutOfRangeError:
        return OutOfRangeError(
            message=self.message,
            details=self.details,
            index=self.index,
            size=self.size,
        )


class InvalidTreeException(AllowlistException, ValueError):
    """Exception raised when tree nodes, proofs or multiproofs are malformed."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INVALID_TREE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class DumpIOException(AllowlistException, OSError):
    """Exception raised when a dump, proof or allow-list file cannot be read or written."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if path:
            full_details["path"] = path
        super().__init__(
            message=message,
            code=ErrorCodes.DUMP_IO_ERROR,
            details=full_details,
        )

    @property
    def path(self) -> str | None:
        return self.details.get("path")


class FormatVersionException(AllowlistException, ValueError):
    """Exception raised when a dump was written with an unsupported tree format."""

    def __init__(
        self,
        found: str,
        supported: frozenset[str],
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["found"] = found
        full_details["supported"] = sorted(supported)
        super().__init__(
            message=(
                f"Unsupported dump format: '{found}'. "
                f"Supported formats: {sorted(supported)}"
            ),
            code=ErrorCodes.UNSUPPORTED_DUMP_FORMAT,
            details=full_details,
        )
        self.found = found
        self.supported = supported


class SignatureException(AllowlistException):
    """Exception raised when typed-data signing or recovery fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SIGNATURE_ERROR,
            details=details,
        )


class ConfigurationException(AllowlistException):
    """Exception raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if setting:
            full_details["setting"] = setting
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[AllowlistException]] = {
    ErrorCodes.LEAF_VALIDATION_ERROR: LeafValidationException,
    ErrorCodes.EMPTY_LEAF_SET: LeafValidationException,
    ErrorCodes.INVALID_LEAF_ENCODING: LeafValidationException,
    ErrorCodes.LEAF_NOT_FOUND: LeafNotFoundException,
    ErrorCodes.INDEX_OUT_OF_RANGE: IndexOutOfRangeException,
    ErrorCodes.DUPLICATE_INDEX: InvalidTreeException,
    ErrorCodes.INVALID_MERKLE_NODE: InvalidTreeException,
    ErrorCodes.INVALID_TREE: InvalidTreeException,
    ErrorCodes.INVALID_MULTIPROOF: InvalidTreeException,
    ErrorCodes.SIGNATURE_ERROR: SignatureException,
    ErrorCodes.CONFIGURATION_ERROR: ConfigurationException,
}
