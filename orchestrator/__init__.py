"""
Module 05 - Commitment Builder & Artifacts

Wires the core tree into file-based workflows: read an allow-list, build
the commitment, write the dump, and hand proofs off to verifiers.

Public API:
- CommitmentBuilder: Build trees from leaves or allow-list files
- BuildSummary: Root, leaf count and dump path of a build
- save_dump / load_tree: Tree dump persistence
- save_proof / load_proof: Proof hand-off files
- load_allowlist: Read JSON, CSV or text allow-lists
"""

from orchestrator.builder import (
    BuildSummary,
    CommitmentBuilder,
)
from orchestrator.artifacts.io import (
    AllowlistFile,
    load_allowlist,
    load_dump,
    load_proof,
    load_tree,
    save_dump,
    save_proof,
)


__all__ = [
    "BuildSummary",
    "CommitmentBuilder",
    "AllowlistFile",
    "load_allowlist",
    "load_dump",
    "load_proof",
    "load_tree",
    "save_dump",
    "save_proof",
]
