"""
Module 06 - CLI Build Command

Build a tree from an allow-list file and write its dump.

Usage:
    allowlist build --allowlist allowlist.json [--types address] [--out Target/tree.json] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace

from orchestrator.builder import BuildSummary, CommitmentBuilder
from core.schemas.errors import DumpIOException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def parse_types(raw: str | None) -> list[str] | None:
    """Split a comma-separated type list ("address,uint256")."""
    if not raw:
        return None
    return [t.strip() for t in raw.split(",") if t.strip()]


def print_summary_human(summary: BuildSummary) -> None:
    print(f"Merkle Root: {summary.root}")
    print(f"leaves: {summary.leaf_count}")
    print(f"leaf_encoding: {','.join(summary.leaf_encoding)}")
    print(f"tree: {summary.tree_path}")
    if summary.duplicates:
        print(f"\nduplicates ({len(summary.duplicates)}):")
        for leaf_hash, indices in summary.duplicates.items():
            print(f"  {leaf_hash}: indices {indices}")


def print_summary_json(summary: BuildSummary) -> None:
    print(json.dumps(summary.to_dict(), indent=2))


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    allowlist_path = args.allowlist or config.storage.allowlist_path
    if not allowlist_path:
        print("Error: no allow-list given (--allowlist or storage.allowlist_path)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    builder = CommitmentBuilder(config)
    try:
        result = builder.build_from_file(
            allowlist_path,
            field_types=parse_types(args.types),
            out_path=args.out,
        )
    except DumpIOException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if not result.ok:
        print(f"Error: {result.error.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print_summary_json(result.output)
    else:
        print_summary_human(result.output)
    return EXIT_SUCCESS
