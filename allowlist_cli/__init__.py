"""
Module 06 - Allow-list CLI

Command-line interface for allow-list commitments and transfer signatures.

Usage:
    python -m allowlist_cli build --allowlist allowlist.json
    python -m allowlist_cli prove 0x6CA6d1e2D5347Bfab1d91e883F1915560e09129D
    python -m allowlist_cli verify 0x6CA6... --proof Target/proof.json
    python -m allowlist_cli inspect --validate
    python -m allowlist_cli sign --to 0x7099... --token-id 1
"""

__version__ = "0.1.0"
