"""
Module 05B - Artifact IO

Reads allow-lists and reads/writes tree dumps and proof files.
"""

from orchestrator.artifacts.io import (
    AllowlistFile,
    dump_json,
    save_dump,
    load_dump,
    load_tree,
    save_proof,
    load_proof,
    load_allowlist,
)

__all__ = [
    "AllowlistFile",
    "dump_json",
    "save_dump",
    "load_dump",
    "load_tree",
    "save_proof",
    "load_proof",
    "load_allowlist",
]
