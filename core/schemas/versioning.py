"""
Module 01 - Schemas & Errors
File: versioning.py

Purpose: Centralize dump format and API version constants.
This file must remain tiny and import nothing from other schema files
except the error taxonomy.
"""

from .errors import FormatVersionException

# Tree dump format written by the builder. The format name pins the
# hashing rules (double-hashed ABI leaves, sorted pairs, array layout).
DUMP_FORMAT: str = "standard-v1"

# API/wire version for HTTP responses
API_VERSION: str = "v1"

SUPPORTED_DUMP_FORMATS: frozenset[str] = frozenset({DUMP_FORMAT})


def assert_supported_dump_format(fmt: str) -> None:
    """
    Validate that the given dump format is supported.

    Args:
        fmt: The ``format`` field of a dump document.

    Raises:
        FormatVersionException: If the format is not supported.
    """
    if fmt not in SUPPORTED_DUMP_FORMATS:
        raise FormatVersionException(fmt, SUPPORTED_DUMP_FORMATS)
