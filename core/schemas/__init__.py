"""
Module 01 - Schemas & Errors
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Error models and exceptions
from .errors import (
    AllowlistError,
    AllowlistException,
    ConfigurationException,
    DumpIOException,
    ErrorCodes,
    FormatVersionException,
    IndexOutOfRangeException,
    InvalidTreeException,
    LeafNotFoundException,
    LeafValidationException,
    NotFoundError,
    OutOfRangeError,
    SignatureException,
    ValidationError,
)

# Version constants
from .versioning import (
    API_VERSION,
    DUMP_FORMAT,
    SUPPORTED_DUMP_FORMATS,
    assert_supported_dump_format,
)

# Tree dump
from .dump import (
    DumpValue,
    TreeDump,
)

# Proof payloads and results
from .proof import (
    LeafProof,
    MultiProofPayload,
    OperationResult,
)


__all__ = [
    # Errors
    "AllowlistError",
    "AllowlistException",
    "ConfigurationException",
    "DumpIOException",
    "ErrorCodes",
    "FormatVersionException",
    "IndexOutOfRangeException",
    "InvalidTreeException",
    "LeafNotFoundException",
    "LeafValidationException",
    "NotFoundError",
    "OutOfRangeError",
    "SignatureException",
    "ValidationError",
    # Versioning
    "API_VERSION",
    "DUMP_FORMAT",
    "SUPPORTED_DUMP_FORMATS",
    "assert_supported_dump_format",
    # Dump
    "DumpValue",
    "TreeDump",
    # Proofs
    "LeafProof",
    "MultiProofPayload",
    "OperationResult",
]
