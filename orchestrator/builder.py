"""
Module 05A - Commitment Builder

Builds an allow-list tree, persists its dump, and reports the root.

Key features:
- Validation failures (empty set, arity/type mismatch) come back as
  OperationResult errors, not exceptions
- Dump I/O failures are raised as DumpIOException
- Duplicate leaves are kept; each is hashed independently
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from core.config.runtime import RuntimeConfig, get_default_config
from core.merkle.standard_tree import StandardMerkleTree
from core.schemas.errors import LeafValidationException
from core.schemas.proof import OperationResult

from orchestrator.artifacts.io import load_allowlist, save_dump


logger = logging.getLogger(__name__)


# =============================================================================
# Build Summary
# =============================================================================

@dataclass
class BuildSummary:
    """Outcome of a successful build."""
    root: str
    leaf_count: int
    leaf_encoding: list[str]
    tree_path: Optional[str] = None
    duplicates: dict[str, list[int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "leaf_count": self.leaf_count,
            "leaf_encoding": self.leaf_encoding,
            "tree_path": self.tree_path,
            "duplicates": self.duplicates,
        }


def _find_duplicates(tree: StandardMerkleTree) -> dict[str, list[int]]:
    seen: dict[str, list[int]] = {}
    for i, _ in tree.entries():
        node = tree.nodes[tree.tree_index_of(i)].hex()
        seen.setdefault(node, []).append(i)
    return {
        "0x" + node: indices
        for node, indices in seen.items()
        if len(indices) > 1
    }


# =============================================================================
# Builder
# =============================================================================

class CommitmentBuilder:
    """
    Builds trees from leaf values.

    Example:
        >>> builder = CommitmentBuilder()
        >>> result = builder.build([["0x6CA6d1e2D5347Bfab1d91e883F1915560e09129D"]], ["address"])
        >>> result.ok
        True
    """

    def __init__(self, config: Optional[RuntimeConfig] = None) -> None:
        self.config = config or get_default_config()

    def build(
        self,
        leaves: Sequence[Sequence[Any]],
        field_types: Optional[Sequence[str]] = None,
    ) -> OperationResult[StandardMerkleTree]:
        """
        Build a tree in memory.

        Args:
            leaves: Leaf tuples in input order
            field_types: ABI type tags; defaults to the configured leaf encoding

        Returns:
            Result with the tree, or a ValidationError
        """
        types = list(field_types) if field_types else list(self.config.tree.leaf_encoding)
        try:
            tree = StandardMerkleTree.of(leaves, types)
        except LeafValidationException as e:
            logger.debug(f"Build rejected: {e.message}")
            return OperationResult.failure(e.to_error_model())

        duplicates = _find_duplicates(tree)
        if duplicates:
            logger.warning(
                f"Allow-list contains {len(duplicates)} duplicated leaf value(s); "
                f"all copies are kept"
            )
        logger.info(f"Built tree of {len(tree)} leaves with root {tree.root}")
        return OperationResult.success(tree, duplicates=duplicates)

    def build_and_save(
        self,
        leaves: Sequence[Sequence[Any]],
        field_types: Optional[Sequence[str]] = None,
        out_path: Optional[str | Path] = None,
    ) -> OperationResult[BuildSummary]:
        """
        Build a tree and write its dump.

        Raises:
            DumpIOException: If the dump cannot be written
        """
        result = self.build(leaves, field_types)
        if not result.ok:
            return OperationResult.failure(result.error)

        tree = result.output
        path = save_dump(tree, out_path or self.config.storage.tree_path)
        return OperationResult.success(
            BuildSummary(
                root=tree.root,
                leaf_count=len(tree),
                leaf_encoding=tree.leaf_encoding,
                tree_path=str(path),
                duplicates=result.metadata.get("duplicates", {}),
            )
        )

    def build_from_file(
        self,
        allowlist_path: str | Path,
        field_types: Optional[Sequence[str]] = None,
        out_path: Optional[str | Path] = None,
    ) -> OperationResult[BuildSummary]:
        """
        Read an allow-list file, build, and write the dump.

        Type tags are taken from the argument, then the file (JSON
        allow-lists may carry "leafEncoding"), then the configuration.

        Raises:
            DumpIOException: If a file cannot be read or written
        """
        try:
            allowlist = load_allowlist(allowlist_path)
        except LeafValidationException as e:
            return OperationResult.failure(e.to_error_model())

        types = field_types or allowlist.leaf_encoding
        return self.build_and_save(allowlist.values, types, out_path)


__all__ = [
    "BuildSummary",
    "CommitmentBuilder",
]
