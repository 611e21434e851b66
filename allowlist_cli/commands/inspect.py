"""
Module 06 - CLI Inspect Command

Show a tree dump's root and shape, and optionally check its integrity.

Usage:
    allowlist inspect [--tree Target/tree.json] [--validate] [--render] [--entries] [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from typing import Any

from core.merkle.merkle_tree import compute_tree_depth
from core.schemas.errors import AllowlistException, InvalidTreeException
from core.schemas.versioning import DUMP_FORMAT

from orchestrator.artifacts.io import load_tree

from allowlist_cli.commands.prove import tree_path


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class InspectSummary:
    """Summary of a tree dump for CLI output."""
    tree_path: str = ""
    format: str = DUMP_FORMAT
    root: str = ""
    leaf_encoding: list[str] = field(default_factory=list)
    leaf_count: int = 0
    depth: int = 0
    valid: bool | None = None
    errors: list[str] = field(default_factory=list)
    entries: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.valid is None:
            del d["valid"]
        if not d["errors"]:
            del d["errors"]
        if not d["entries"]:
            del d["entries"]
        return d


def print_summary_human(summary: InspectSummary) -> None:
    print(f"tree: {summary.tree_path}")
    print(f"format: {summary.format}")
    print(f"root: {summary.root}")
    print(f"leaf_encoding: {','.join(summary.leaf_encoding)}")
    print(f"leaves: {summary.leaf_count}")
    print(f"depth: {summary.depth}")
    if summary.valid is not None:
        print(f"valid: {str(summary.valid).lower()}")
    for err in summary.errors:
        print(f"  ✗ {err}")
    if summary.entries:
        print(f"\nentries ({len(summary.entries)}):")
        for entry in summary.entries:
            print(f"  {entry['index']}: {entry['value']} (node {entry['tree_index']})")


def inspect_cmd(args: Namespace) -> int:
    """
    Execute the inspect command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    path = tree_path(args)
    try:
        tree = load_tree(path)
    except AllowlistException as e:
        print(f"Error loading tree: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = InspectSummary(
        tree_path=str(path),
        root=tree.root,
        leaf_encoding=tree.leaf_encoding,
        leaf_count=len(tree),
        depth=compute_tree_depth(len(tree)),
    )

    if args.validate:
        try:
            tree.validate()
            summary.valid = True
        except InvalidTreeException as e:
            summary.valid = False
            summary.errors.append(e.message)

    if args.entries:
        summary.entries = [
            {"index": i, "value": value, "tree_index": tree.tree_index_of(i)}
            for i, value in tree.entries()
        ]

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)
        if args.render:
            print()
            print(tree.render())

    if summary.valid is False:
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS
