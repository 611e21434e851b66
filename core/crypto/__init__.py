"""
Core cryptographic utilities.

Module 02 provides Keccak-256 hashing and leaf encoding.
Module 04 provides EIP-712 transfer signatures.
"""
from .hashing import (
    HASH_SIZE,
    keccak256,
    hash_pair,
    to_hex,
    from_hex,
    is_hash,
)
from .leaf_encoding import (
    validate_leaf_encoding,
    normalize_leaf,
    encode_leaf,
    standard_leaf_hash,
)
from .signatures import (
    TRANSFER_TYPES,
    SigningDomain,
    TypedDataSignature,
    SignedTransfer,
    sign_typed_data,
    recover_typed_data_signer,
    generate_transfer_signature,
    verify_transfer_signature,
    prepare_transfer,
)

__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hash_pair",
    "to_hex",
    "from_hex",
    "is_hash",
    "validate_leaf_encoding",
    "normalize_leaf",
    "encode_leaf",
    "standard_leaf_hash",
    "TRANSFER_TYPES",
    "SigningDomain",
    "TypedDataSignature",
    "SignedTransfer",
    "sign_typed_data",
    "recover_typed_data_signer",
    "generate_transfer_signature",
    "verify_transfer_signature",
    "prepare_transfer",
]
