"""
Module 02 - Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
1. keccak256 matches known EVM digests
2. hash_pair is order-independent
3. to_hex / from_hex round-trip and reject malformed input
"""
import pytest

from core.crypto.hashing import (
    HASH_SIZE,
    from_hex,
    hash_pair,
    is_hash,
    keccak256,
    to_hex,
)


class TestKeccak256:
    """Tests for keccak256."""

    def test_empty_input(self):
        """keccak256(b"") is the well-known EVM empty hash."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_not_sha3(self):
        """Pre-standard Keccak differs from NIST SHA3-256."""
        import hashlib
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()

    def test_digest_size(self):
        assert len(keccak256(b"allow-list")) == HASH_SIZE


class TestHashPair:
    """Tests for sorted-pair hashing."""

    def test_commutative(self):
        a = keccak256(b"a")
        b = keccak256(b"b")
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_sorts_before_hashing(self):
        a = keccak256(b"a")
        b = keccak256(b"b")
        low, high = sorted([a, b])
        assert hash_pair(a, b) == keccak256(low + high)


class TestHexHelpers:
    """Tests for to_hex / from_hex."""

    def test_to_hex_lowercase_prefixed(self):
        assert to_hex(bytes.fromhex("DEADBEEF")) == "0xdeadbeef"

    def test_from_hex_roundtrip(self):
        digest = keccak256(b"x")
        assert from_hex(to_hex(digest)) == digest

    def test_from_hex_accepts_uppercase_prefix(self):
        assert from_hex("0XABCD") == b"\xab\xcd"

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_invalid_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")

    def test_is_hash(self):
        assert is_hash(keccak256(b""))
        assert not is_hash(b"\x00" * 31)
        assert not is_hash("0x" + "00" * 32)
