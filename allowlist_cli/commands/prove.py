"""
Module 06 - CLI Prove Command

Produce an inclusion proof from a tree dump and hand it off as a file.

Usage:
    allowlist prove 0x6CA6d1e2D5347Bfab1d91e883F1915560e09129D
    allowlist prove --index 2
    allowlist prove --multi 0x6CA6... 0x7099... [--out Target/multiproof.json]
    allowlist prove 0x1111... 5000000000000000000 --tree Target/tree.json --json

Without --multi, the VALUE arguments are the fields of one leaf. With
--multi, each VALUE is one leaf whose fields are separated by commas.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.merkle.merkle_proofs import ProofService
from core.schemas.errors import AllowlistException
from core.schemas.proof import LeafProof

from orchestrator.artifacts.io import load_tree, save_proof


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_NOT_FOUND = 3


def tree_path(args: Namespace) -> Path:
    """Dump path from --tree, falling back to the configured one."""
    return Path(getattr(args, "tree", None) or args.runtime_config.storage.tree_path)


def print_proof_human(proof: LeafProof) -> None:
    print(f"Value: {proof.value}")
    print(f"Proof: {proof.proof}")


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config

    try:
        service = ProofService(load_tree(tree_path(args)))
    except AllowlistException as e:
        print(f"Error loading tree: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.index is not None:
        result = service.prove_index(args.index)
    elif not args.values:
        print("Error: give a value to prove or --index", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    elif args.multi:
        result = service.prove_values([v.split(",") for v in args.values])
    else:
        result = service.prove_value(list(args.values))

    if result.not_found:
        print(f"Not found: {result.error.message}", file=sys.stderr)
        return EXIT_NOT_FOUND
    if not result.ok:
        print(f"Error: {result.error.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    out_path = None
    if not args.no_write:
        out_path = save_proof(result.output, args.out or config.storage.proof_path)

    if args.json:
        data = result.output.model_dump(mode="json")
        if result.metadata.get("matches"):
            data["matches"] = result.metadata["matches"]
        if out_path is not None:
            data["proof_path"] = str(out_path)
        print(json.dumps(data, indent=2))
    elif isinstance(result.output, LeafProof):
        print_proof_human(result.output)
        matches = result.metadata.get("matches", [])
        if len(matches) > 1:
            print(f"Note: value stored at indices {matches}; proved index {result.output.index}")
    else:
        print(f"Leaves: {result.output.leaves}")
        print(f"Proof: {result.output.proof}")
        print(f"Proof flags: {result.output.proof_flags}")

    return EXIT_SUCCESS
