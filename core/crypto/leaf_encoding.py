"""
Module 02 - Leaf Encoding
Deterministic ABI encoding and hashing of typed leaf tuples.

Owner: Protocol/Crypto Engineer
Module ID: M02

Canonical Leaf Rules (Hard Contracts):
1. A leaf is an ordered tuple of values, one per ABI type tag
   (e.g. ["address"] or ["address", "uint256"])
2. Values are normalized before storage: addresses checksummed,
   integers as int, byte strings as 0x-hex, bools as bool
3. Encoding: abi.encode(types, values) (standard, not packed)
4. Leaf hash: keccak256(keccak256(encoding)) - the double hash keeps
   a 64-byte internal node from ever being replayed as a leaf

Two tuples that differ only in representation (address case, int given
as "0x10" vs 16) normalize, encode and hash identically.
"""
from __future__ import annotations

import re
from typing import Any, Sequence

from eth_abi import encode as abi_encode
from eth_abi import is_encodable, is_encodable_type
from eth_utils import is_address, to_checksum_address

from core.crypto.hashing import from_hex, keccak256, to_hex
from core.schemas.errors import ErrorCodes, LeafValidationException


_INT_TYPE = re.compile(r"^u?int(\d*)$")
_BYTES_TYPE = re.compile(r"^bytes(\d*)$")


def validate_leaf_encoding(leaf_encoding: Sequence[str]) -> list[str]:
    """
    Validate a list of ABI type tags.

    Args:
        leaf_encoding: Ordered type tags, one per leaf field

    Returns:
        The type tags as a list

    Raises:
        LeafValidationException: If the list is empty or a tag is not
            an encodable ABI type
    """
    if isinstance(leaf_encoding, str) or not leaf_encoding:
        raise LeafValidationException(
            "Leaf encoding must be a non-empty list of ABI types",
            code=ErrorCodes.INVALID_LEAF_ENCODING,
            details={"actual": repr(leaf_encoding)},
        )

    types = list(leaf_encoding)
    for position, typ in enumerate(types):
        if not isinstance(typ, str) or not is_encodable_type(typ):
            raise LeafValidationException(
                f"Unknown ABI type {typ!r} in leaf encoding",
                field_path=f"leafEncoding[{position}]",
                code=ErrorCodes.INVALID_LEAF_ENCODING,
                details={"actual": repr(typ)},
            )
    return types


def _invalid(typ: str, value: Any, path: str, reason: str) -> LeafValidationException:
    return LeafValidationException(
        f"Invalid {typ} value at {path}: {reason}",
        field_path=path,
        details={"expected": typ, "actual": repr(value)},
    )


def _normalize_field(typ: str, value: Any, path: str) -> Any:
    """Normalize one field to its canonical, JSON-friendly form."""
    if typ == "address":
        if isinstance(value, (bytes, bytearray)) and len(value) == 20:
            return to_checksum_address(bytes(value))
        if not isinstance(value, str) or not is_address(value):
            raise _invalid(typ, value, path, "expected a 20-byte hex address")
        return to_checksum_address(value)

    if _INT_TYPE.match(typ):
        if isinstance(value, bool):
            raise _invalid(typ, value, path, "booleans are not integers")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                if text.lower().startswith(("0x", "-0x")):
                    return int(text, 16)
                return int(text, 10)
            except ValueError:
                raise _invalid(typ, value, path, "not an integer") from None
        raise _invalid(typ, value, path, "expected an integer")

    if typ == "bool":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise _invalid(typ, value, path, "expected a boolean")

    bytes_match = _BYTES_TYPE.match(typ)
    if bytes_match:
        if isinstance(value, (bytes, bytearray)):
            data = bytes(value)
        elif isinstance(value, str):
            try:
                data = from_hex(value)
            except ValueError as e:
                raise _invalid(typ, value, path, str(e)) from None
        else:
            raise _invalid(typ, value, path, "expected bytes or a 0x-hex string")
        # bytesN must be exactly N bytes; eth-abi would right-pad short values
        size = bytes_match.group(1)
        if size and len(data) != int(size):
            raise _invalid(typ, value, path, f"expected exactly {size} bytes, got {len(data)}")
        return to_hex(data)

    if typ == "string":
        if not isinstance(value, str):
            raise _invalid(typ, value, path, "expected a string")
        return value

    # Arrays and tuples are handed to eth-abi as given
    return value


def _to_abi_value(typ: str, value: Any) -> Any:
    if _BYTES_TYPE.match(typ) and isinstance(value, str):
        return from_hex(value)
    return value


def normalize_leaf(
    leaf: Sequence[Any],
    leaf_encoding: Sequence[str],
    *,
    position: int | None = None,
) -> list[Any]:
    """
    Validate a leaf against its type tags and return its canonical form.

    Args:
        leaf: Ordered field values
        leaf_encoding: ABI type tags (already validated)
        position: Index of the leaf in its input list, for error messages

    Returns:
        Normalized field values

    Raises:
        LeafValidationException: On arity mismatch or invalid field value
    """
    prefix = f"leaves[{position}]" if position is not None else "leaf"

    if isinstance(leaf, (str, bytes)) or not isinstance(leaf, Sequence):
        raise LeafValidationException(
            f"Leaf at {prefix} must be a list of {len(leaf_encoding)} value(s)",
            field_path=prefix,
            details={"expected": repr(list(leaf_encoding)), "actual": repr(leaf)},
        )

    if len(leaf) != len(leaf_encoding):
        raise LeafValidationException(
            f"Leaf at {prefix} has {len(leaf)} field(s), "
            f"expected {len(leaf_encoding)} for {list(leaf_encoding)}",
            field_path=prefix,
            details={"expected": repr(list(leaf_encoding)), "actual": repr(list(leaf))},
        )

    normalized: list[Any] = []
    for i, (typ, value) in enumerate(zip(leaf_encoding, leaf)):
        path = f"{prefix}[{i}]"
        canonical = _normalize_field(typ, value, path)
        if not is_encodable(typ, _to_abi_value(typ, canonical)):
            raise _invalid(typ, value, path, "value cannot be ABI-encoded")
        normalized.append(canonical)
    return normalized


def encode_leaf(leaf_encoding: Sequence[str], leaf: Sequence[Any]) -> bytes:
    """
    ABI-encode a leaf (abi.encode semantics).

    Args:
        leaf_encoding: ABI type tags
        leaf: Field values (normalized or raw)

    Returns:
        ABI-encoded bytes
    """
    types = list(leaf_encoding)
    values = normalize_leaf(leaf, types)
    return abi_encode(types, [_to_abi_value(t, v) for t, v in zip(types, values)])


def standard_leaf_hash(leaf_encoding: Sequence[str], leaf: Sequence[Any]) -> bytes:
    """
    Compute the leaf hash: keccak256(keccak256(abi.encode(types, leaf))).

    Same value as OpenZeppelin ``standardLeafHash`` and the Solidity
    expression ``keccak256(bytes.concat(keccak256(abi.encode(...))))``.
    """
    return keccak256(keccak256(encode_leaf(leaf_encoding, leaf)))


__all__ = [
    "validate_leaf_encoding",
    "normalize_leaf",
    "encode_leaf",
    "standard_leaf_hash",
]
