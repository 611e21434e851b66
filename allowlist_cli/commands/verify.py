"""
Module 06 - CLI Verify Command

Check a proof for a leaf value against a root.

Usage:
    allowlist verify 0x6CA6... --proof Target/proof.json
    allowlist verify 0x6CA6... --proof-hex 0x166a... 0xe3e3... --root 0xd7c2...
    allowlist verify 0x1111... 5000000000000000000 --proof proof.json --root 0x... --types address,uint256

The root comes from --root, or else from the tree dump (--tree or the
configured path). The leaf encoding comes from --types, then the tree
dump when the root was read from it, then the configuration.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, asdict
from typing import Any

from core.merkle.merkle_proofs import verify_proof
from core.schemas.errors import AllowlistException

from orchestrator.artifacts.io import load_proof, load_tree

from allowlist_cli.commands.build import parse_types
from allowlist_cli.commands.prove import tree_path


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    value: list[Any]
    root: str
    leaf_encoding: list[str]
    proof_length: int
    ok: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: VerifySummary) -> None:
    print(f"value: {summary.value}")
    print(f"root: {summary.root}")
    print(f"proof_length: {summary.proof_length}")
    print(f"valid: {str(summary.ok).lower()}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    types = parse_types(args.types)

    try:
        if args.proof_hex:
            proof = list(args.proof_hex)
        else:
            proof = load_proof(args.proof or config.storage.proof_path)

        root = args.root
        if root is None:
            tree = load_tree(tree_path(args))
            root = tree.root
            types = types or tree.leaf_encoding
        types = types or list(config.tree.leaf_encoding)
    except AllowlistException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    ok = verify_proof(root, list(args.values), proof, types)
    summary = VerifySummary(
        value=list(args.values),
        root=root,
        leaf_encoding=list(types),
        proof_length=len(proof),
        ok=ok,
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if ok:
        logger.info("Proof verified")
        return EXIT_SUCCESS
    logger.warning("Proof did not verify")
    return EXIT_VERIFICATION_FAILED
