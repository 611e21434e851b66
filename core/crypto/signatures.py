"""
Module 04 - Transfer Signatures
EIP-712 typed-data signing and signer recovery for custody transfers.

Owner: Protocol/Crypto Engineer
Module ID: M04

This module provides:
- SigningDomain: the EIP-712 domain (name, version, chainId, verifyingContract)
- sign_typed_data / recover_typed_data_signer: generic typed-data helpers
- generate_transfer_signature / verify_transfer_signature: the
  Transfer(address from,address to,uint256 tokenId,uint256 timestamp) message
- prepare_transfer: sign a transfer from the key holder, stamped now

Chain id and verifying contract have no defaults; callers supply them
(see core.config.runtime.SigningDomainConfig).
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import is_address, to_checksum_address

from core.crypto.hashing import from_hex, to_hex
from core.schemas.errors import SignatureException


TRANSFER_TYPES: dict[str, list[dict[str, str]]] = {
    "Transfer": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "tokenId", "type": "uint256"},
        {"name": "timestamp", "type": "uint256"},
    ]
}

DEFAULT_DOMAIN_NAME = "MedicineSupplyChain"
DEFAULT_DOMAIN_VERSION = "1.0"


@dataclass(frozen=True)
class SigningDomain:
    """EIP-712 domain separator parameters."""
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def __post_init__(self) -> None:
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int) or self.chain_id <= 0:
            raise SignatureException(
                f"chain_id must be a positive integer, got {self.chain_id!r}",
                details={"field": "chain_id"},
            )
        if not isinstance(self.verifying_contract, str) or not is_address(self.verifying_contract):
            raise SignatureException(
                f"verifying_contract is not an address: {self.verifying_contract!r}",
                details={"field": "verifying_contract"},
            )

    def to_eip712(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": to_checksum_address(self.verifying_contract),
        }


@dataclass(frozen=True)
class TypedDataSignature:
    """
    A 65-byte secp256k1 signature split into its components.

    Attributes:
        signature: 0x-hex r || s || v
        v: Recovery byte (27 or 28)
        r: 0x-hex 32-byte r value
        s: 0x-hex 32-byte s value
        message_hash: 0x-hex EIP-712 digest that was signed
    """
    signature: str
    v: int
    r: str
    s: str
    message_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "v": self.v,
            "r": self.r,
            "s": self.s,
            "message_hash": self.message_hash,
        }


@dataclass(frozen=True)
class SignedTransfer:
    """A transfer message together with its signature."""
    from_address: str
    to_address: str
    token_id: int
    timestamp: int
    signature: TypedDataSignature

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.signature.to_dict(),
            "from": self.from_address,
            "to": self.to_address,
            "tokenId": self.token_id,
            "timestamp": self.timestamp,
        }


def _signable(domain: SigningDomain, types: Mapping[str, Any], message: Mapping[str, Any]):
    try:
        return encode_typed_data(
            domain_data=domain.to_eip712(),
            message_types=dict(types),
            message_data=dict(message),
        )
    except (TypeError, ValueError, KeyError) as e:
        raise SignatureException(
            f"Cannot encode typed data: {e}",
            details={"types": list(types)},
        ) from e


def _uint(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise SignatureException(f"{name} must be an unsigned integer, got {value!r}")
    try:
        number = int(value, 0) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise SignatureException(f"{name} must be an unsigned integer, got {value!r}") from None
    if number < 0 or number >= 2**256:
        raise SignatureException(f"{name} is out of uint256 range: {number}")
    return number


def _address(name: str, value: Any) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise SignatureException(f"{name} is not an address: {value!r}")
    return to_checksum_address(value)


def transfer_message(
    from_address: str,
    to_address: str,
    token_id: int,
    timestamp: int,
) -> dict[str, Any]:
    """Build a validated Transfer message."""
    return {
        "from": _address("from", from_address),
        "to": _address("to", to_address),
        "tokenId": _uint("tokenId", token_id),
        "timestamp": _uint("timestamp", timestamp),
    }


def address_of(private_key: str | bytes) -> str:
    """Checksummed address of a private key."""
    try:
        return Account.from_key(private_key).address
    except (TypeError, ValueError) as e:
        raise SignatureException("Invalid private key") from e


def sign_typed_data(
    domain: SigningDomain,
    types: Mapping[str, Any],
    message: Mapping[str, Any],
    private_key: str | bytes,
) -> TypedDataSignature:
    """
    Sign an EIP-712 message.

    Args:
        domain: Domain separator parameters
        types: Struct definitions, without EIP712Domain
        message: Values of the primary struct
        private_key: 32-byte secp256k1 key (hex or bytes)

    Raises:
        SignatureException: If the data cannot be encoded or the key is invalid
    """
    signable = _signable(domain, types, message)
    try:
        signed = Account.sign_message(signable, private_key=private_key)
    except (TypeError, ValueError) as e:
        raise SignatureException("Invalid private key") from e

    return TypedDataSignature(
        signature=to_hex(bytes(signed.signature)),
        v=int(signed.v),
        r=to_hex(int(signed.r).to_bytes(32, "big")),
        s=to_hex(int(signed.s).to_bytes(32, "big")),
        message_hash=to_hex(bytes(signed.message_hash)),
    )


def recover_typed_data_signer(
    domain: SigningDomain,
    types: Mapping[str, Any],
    message: Mapping[str, Any],
    signature: str | bytes,
) -> str:
    """
    Recover the address that signed an EIP-712 message.

    Raises:
        SignatureException: If the signature is malformed or unrecoverable
    """
    signable = _signable(domain, types, message)
    try:
        raw = from_hex(signature) if isinstance(signature, str) else bytes(signature)
        return Account.recover_message(signable, signature=raw)
    except Exception as e:
        raise SignatureException(
            f"Cannot recover signer: {e}",
            details={"signature": signature if isinstance(signature, str) else to_hex(signature)},
        ) from e


def generate_transfer_signature(
    private_key: str | bytes,
    from_address: str,
    to_address: str,
    token_id: int,
    timestamp: int,
    domain: SigningDomain,
) -> TypedDataSignature:
    """Sign a Transfer message with the given key."""
    message = transfer_message(from_address, to_address, token_id, timestamp)
    return sign_typed_data(domain, TRANSFER_TYPES, message, private_key)


def verify_transfer_signature(
    from_address: str,
    to_address: str,
    token_id: int,
    timestamp: int,
    signature: str | bytes,
    domain: SigningDomain,
) -> str:
    """
    Recover the signer of a Transfer message.

    Returns:
        Checksummed recovered address; compare it to ``from_address`` to
        accept the transfer
    """
    message = transfer_message(from_address, to_address, token_id, timestamp)
    return recover_typed_data_signer(domain, TRANSFER_TYPES, message, signature)


def prepare_transfer(
    private_key: str | bytes,
    to_address: str,
    token_id: int,
    domain: SigningDomain,
    timestamp: Optional[int] = None,
) -> SignedTransfer:
    """
    Sign a transfer from the key holder (e.g. manufacturer to distributor).

    The timestamp defaults to the current UNIX time in seconds.
    """
    if timestamp is None:
        timestamp = int(time.time())
    from_address = address_of(private_key)
    message = transfer_message(from_address, to_address, token_id, timestamp)

    return SignedTransfer(
        from_address=message["from"],
        to_address=message["to"],
        token_id=message["tokenId"],
        timestamp=message["timestamp"],
        signature=sign_typed_data(domain, TRANSFER_TYPES, message, private_key),
    )


__all__ = [
    "TRANSFER_TYPES",
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "SigningDomain",
    "TypedDataSignature",
    "SignedTransfer",
    "transfer_message",
    "address_of",
    "sign_typed_data",
    "recover_typed_data_signer",
    "generate_transfer_signature",
    "verify_transfer_signature",
    "prepare_transfer",
]
