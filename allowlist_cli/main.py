"""
Module 06 - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m allowlist_cli build --allowlist FILE [--types T,..] [--out PATH] [--json]
    python -m allowlist_cli prove VALUE.. [--tree PATH] [--index N] [--multi] [--out PATH] [--json]
    python -m allowlist_cli verify VALUE.. (--proof FILE | --proof-hex H..) [--root R | --tree PATH]
    python -m allowlist_cli inspect [--tree PATH] [--validate] [--render] [--entries] [--json]
    python -m allowlist_cli sign --to ADDR --token-id N [--timestamp T] [--key K]
    python -m allowlist_cli recover --from A --to B --token-id N --timestamp T --signature S
    python -m allowlist_cli config --init | --show

Environment Variables:
    ALLOWLIST_TREE_PATH             Tree dump path (default: Target/tree.json)
    ALLOWLIST_PROOF_PATH            Proof output path (default: Target/proof.json)
    ALLOWLIST_LEAF_ENCODING         Comma-separated ABI types (default: address)
    ALLOWLIST_CHAIN_ID              EIP-712 chain id (required for signing)
    ALLOWLIST_VERIFYING_CONTRACT    EIP-712 verifying contract (required for signing)
    ALLOWLIST_SIGNER_PRIVATE_KEY    Transfer signer key
    ALLOWLIST_LOG_LEVEL             Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from allowlist_cli import __version__
from allowlist_cli.commands import build, prove, verify, inspect, sign
from allowlist_cli.config import load_config, get_default_config_template
from core.schemas.errors import AllowlistException


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2
EXIT_NOT_FOUND = 3


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _uint(raw: str) -> int:
    """argparse type for decimal or 0x-hex unsigned integers."""
    try:
        value = int(raw, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {raw!r}")
    return value


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="allowlist",
        description="Allow-list Merkle commitments - build trees, produce and verify proofs, sign transfers.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./allowlist.json or ~/.config/allowlist/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree from an allow-list file",
        description="Build the Merkle commitment for an allow-list and write the tree dump.",
    )
    build_parser.add_argument(
        "--allowlist", "-a",
        type=str,
        default=None,
        help="Allow-list file (.json, .csv, or one address per line)",
    )
    build_parser.add_argument(
        "--types", "-t",
        type=str,
        default=None,
        help="Comma-separated ABI types of each leaf (default: from file or config)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Tree dump path (default: from config)",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Produce an inclusion proof",
        description="Look up a value (or index) in the tree dump and write its proof.",
    )
    prove_parser.add_argument(
        "values",
        nargs="*",
        help="Leaf field values (or, with --multi, one comma-separated leaf per argument)",
    )
    prove_parser.add_argument("--tree", type=str, default=None, help="Tree dump path")
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        default=None,
        help="Prove the value at this position of the original allow-list",
    )
    prove_parser.add_argument(
        "--multi",
        action="store_true",
        default=False,
        help="Build one multiproof for several leaves",
    )
    prove_parser.add_argument("--out", "-o", type=str, default=None, help="Proof output path")
    prove_parser.add_argument(
        "--no-write",
        action="store_true",
        default=False,
        help="Print the proof without writing a proof file",
    )
    prove_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof against a root",
        description="Recompute the root from a leaf value and proof and compare it.",
    )
    verify_parser.add_argument("values", nargs="+", help="Leaf field values")
    proof_source = verify_parser.add_mutually_exclusive_group()
    proof_source.add_argument("--proof", type=str, default=None, help="Proof file (default: from config)")
    proof_source.add_argument("--proof-hex", nargs="+", default=None, help="Proof digests")
    root_source = verify_parser.add_mutually_exclusive_group()
    root_source.add_argument("--root", type=str, default=None, help="Expected 0x-hex root")
    root_source.add_argument("--tree", type=str, default=None, help="Read the root from this tree dump")
    verify_parser.add_argument("--types", "-t", type=str, default=None, help="Comma-separated ABI types")
    verify_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- inspect command ---
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show a tree dump's root and shape",
        description="Print the root, encoding and leaf count; optionally re-hash and render the tree.",
    )
    inspect_parser.add_argument("--tree", type=str, default=None, help="Tree dump path")
    inspect_parser.add_argument(
        "--validate",
        action="store_true",
        default=False,
        help="Re-hash every value and internal node",
    )
    inspect_parser.add_argument("--render", action="store_true", default=False, help="Print the tree")
    inspect_parser.add_argument("--entries", action="store_true", default=False, help="List stored values")
    inspect_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    inspect_parser.set_defaults(func=inspect.inspect_cmd)

    # --- sign command ---
    sign_parser = subparsers.add_parser(
        "sign",
        help="Sign a custody transfer (EIP-712)",
        description="Sign Transfer(from, to, tokenId, timestamp) with the configured key.",
    )
    sign_parser.add_argument("--to", type=str, required=True, help="Recipient address")
    sign_parser.add_argument("--token-id", type=_uint, required=True, help="Token id")
    sign_parser.add_argument(
        "--timestamp",
        type=_uint,
        default=None,
        help="UNIX timestamp (default: now)",
    )
    sign_parser.add_argument("--key", type=str, default=None, help="Signer private key (default: from config)")
    sign_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    sign_parser.set_defaults(func=sign.sign_cmd)

    # --- recover command ---
    recover_parser = subparsers.add_parser(
        "recover",
        help="Recover the signer of a custody transfer",
        description="Recover the address that signed a Transfer and compare it to --from.",
    )
    recover_parser.add_argument("--from", dest="from_address", type=str, required=True, help="Claimed sender")
    recover_parser.add_argument("--to", type=str, required=True, help="Recipient address")
    recover_parser.add_argument("--token-id", type=_uint, required=True, help="Token id")
    recover_parser.add_argument("--timestamp", type=_uint, required=True, help="UNIX timestamp")
    recover_parser.add_argument("--signature", type=str, required=True, help="0x-hex 65-byte signature")
    recover_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    recover_parser.set_defaults(func=sign.recover_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="allowlist.json",
        help="Path for config file (default: allowlist.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (ALLOWLIST_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: allowlist config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed, 3=not found)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except AllowlistException as e:
        if log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
