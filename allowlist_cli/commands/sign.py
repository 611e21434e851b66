"""
Module 06 - CLI Signature Commands

Sign a custody transfer with EIP-712 and recover the signer of one.

Usage:
    allowlist sign --to 0x7099... --token-id 1 [--timestamp 1700000000] [--key 0x...] [--json]
    allowlist recover --from 0xf39F... --to 0x7099... --token-id 1 --timestamp 1700000000 --signature 0x...

The domain's chain id and verifying contract come from configuration
(ALLOWLIST_CHAIN_ID, ALLOWLIST_VERIFYING_CONTRACT); there are no defaults.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace

from core.crypto.signatures import prepare_transfer, verify_transfer_signature
from core.schemas.errors import ConfigurationException, SignatureException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def sign_cmd(args: Namespace) -> int:
    """
    Execute the sign command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    signing = args.runtime_config.signing
    try:
        domain = signing.require_domain()
        private_key = args.key or signing.require_private_key()
        signed = prepare_transfer(
            private_key,
            args.to,
            args.token_id,
            domain,
            timestamp=args.timestamp,
        )
    except (ConfigurationException, SignatureException) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps(signed.to_dict(), indent=2))
    else:
        print("Transfer Signature Generated:")
        print(f"From: {signed.from_address}")
        print(f"To: {signed.to_address}")
        print(f"Token ID: {signed.token_id}")
        print(f"Timestamp: {signed.timestamp}")
        print(f"v: {signed.signature.v}")
        print(f"r: {signed.signature.r}")
        print(f"s: {signed.signature.s}")
        print(f"signature: {signed.signature.signature}")
    return EXIT_SUCCESS


def recover_cmd(args: Namespace) -> int:
    """
    Execute the recover command.

    Returns:
        EXIT_SUCCESS if the recovered signer is --from, else
        EXIT_VERIFICATION_FAILED
    """
    try:
        domain = args.runtime_config.signing.require_domain()
        recovered = verify_transfer_signature(
            args.from_address,
            args.to,
            args.token_id,
            args.timestamp,
            args.signature,
            domain,
        )
    except (ConfigurationException, SignatureException) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    matches = recovered.lower() == args.from_address.lower()
    if args.json:
        print(json.dumps({"recovered": recovered, "matches_from": matches}, indent=2))
    else:
        print(f"recovered: {recovered}")
        print(f"matches_from: {str(matches).lower()}")

    if not matches:
        logger.warning(f"Signature was made by {recovered}, not {args.from_address}")
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS
