"""
Module 02 - Hashing Utilities
Keccak-256 hashing and hex helpers for Merkle commitments.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Keccak-256 hashing for raw bytes (EVM-compatible, via eth-utils)
- Sorted-pair hashing used for internal tree nodes
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Keccak-256 here is the pre-standard Keccak used by the EVM, not
  NIST SHA3-256
- Pair hashing sorts its operands, so proofs carry no left/right flags
- All operations are deterministic
"""
from __future__ import annotations

from eth_utils import keccak

HASH_SIZE: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two nodes in sorted order.

    parent = keccak256(min(a, b) + max(a, b))

    Matches OpenZeppelin ``MerkleProof._hashPair`` so roots and proofs
    can be checked by ``MerkleProof.verify`` on-chain.
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Args:
        data: Raw bytes

    Returns:
        Lowercase hex string with 0x prefix (e.g., "0x1234abcd")

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + bytes(data).hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not isinstance(hex_string, str) or not hex_string.startswith(("0x", "0X")):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {str(hex_string)[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def is_hash(value: object) -> bool:
    """Check whether a value is a 32-byte digest."""
    return isinstance(value, (bytes, bytearray)) and len(value) == HASH_SIZE


__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hash_pair",
    "to_hex",
    "from_hex",
    "is_hash",
]
