"""
CLI command modules.
"""

from allowlist_cli.commands import build, prove, verify, inspect, sign

__all__ = ["build", "prove", "verify", "inspect", "sign"]
