"""
Module 03 - Proof Service
Answers inclusion-proof queries against one loaded tree.

Owner: Protocol/Crypto Engineer
Module ID: M03

This module provides:
- ProofService: holds a loaded StandardMerkleTree and proves values,
  indices and batches of values
- verify_proof: stateless check of a (root, leaf, proof) triple

Lookup failures (unknown value, bad index, malformed leaf) come back as
OperationResult values carrying an error model; they are not raised.
Dump I/O and format errors are raised by the loader.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from core.crypto.hashing import to_hex
from core.merkle.standard_tree import StandardMerkleTree
from core.schemas.dump import TreeDump
from core.schemas.errors import (
    AllowlistException,
    IndexOutOfRangeException,
    InvalidTreeException,
    LeafNotFoundException,
    LeafValidationException,
)
from core.schemas.proof import LeafProof, MultiProofPayload, OperationResult


logger = logging.getLogger(__name__)


def verify_proof(
    root: str | bytes,
    leaf: Sequence[Any],
    proof: Sequence[str | bytes],
    leaf_encoding: Sequence[str] = ("address",),
) -> bool:
    """
    Check a proof by folding it into the leaf hash and comparing roots.

    Returns False for a malformed leaf or proof node rather than raising,
    so a verifier never mistakes bad input for a valid proof.
    """
    try:
        return StandardMerkleTree.verify_leaf(root, leaf_encoding, leaf, proof)
    except (LeafValidationException, InvalidTreeException, ValueError) as e:
        logger.debug(f"Proof rejected: {e}")
        return False


class ProofService:
    """
    Proof queries over one loaded tree.

    The service owns its tree; there is no module-level tree. Queries do
    not mutate state, so one instance can serve concurrent readers.

    Example:
        >>> service = ProofService.from_dump(dump)
        >>> result = service.prove_value(["0x70997970C51812dc3A010C7d01b50e0d17dc79C8"])
        >>> result.ok, result.output.proof
    """

    def __init__(self, tree: StandardMerkleTree | None = None) -> None:
        self._tree = tree

    @classmethod
    def from_dump(cls, dump: TreeDump | Mapping[str, Any]) -> "ProofService":
        """Create a service from a dump document."""
        service = cls()
        service.init(dump)
        return service

    def init(self, dump: TreeDump | Mapping[str, Any]) -> None:
        """
        Load a dump, replacing any tree already held.

        Raises:
            FormatVersionException: If the dump format is not supported
            InvalidTreeException: If the dump is structurally inconsistent
        """
        self._tree = StandardMerkleTree.load(dump)
        logger.info(f"Proof service loaded tree {self._tree.root} ({len(self._tree)} leaves)")

    @property
    def loaded(self) -> bool:
        return self._tree is not None

    @property
    def tree(self) -> StandardMerkleTree:
        if self._tree is None:
            raise InvalidTreeException("No tree loaded; call init() with a dump first")
        return self._tree

    @property
    def root(self) -> str:
        return self.tree.root

    def _leaf_proof(self, value_index: int) -> LeafProof:
        tree = self.tree
        value = tree.at(value_index)
        tree_index = tree.tree_index_of(value_index)
        return LeafProof(
            value=value,
            index=value_index,
            tree_index=tree_index,
            leaf=to_hex(tree.nodes[tree_index]),
            proof=tree.get_proof(value_index),
            root=tree.root,
        )

    def prove_index(self, index: int) -> OperationResult[LeafProof]:
        """
        Prove the value stored at a position of the original input.

        Returns:
            Result with a LeafProof, or an OutOfRangeError when index is
            not in [0, len(tree))
        """
        try:
            proof = self._leaf_proof(index)
        except (IndexOutOfRangeException, LeafValidationException) as e:
            logger.debug(f"prove_index({index!r}) failed: {e.message}")
            return OperationResult.failure(e.to_error_model())

        logger.debug(f"Proved index {index} ({len(proof.proof)} siblings)")
        return OperationResult.success(proof)

    def prove_value(self, leaf: Sequence[Any]) -> OperationResult[LeafProof]:
        """
        Prove a value by exact encoded equality.

        When the value is stored more than once, the lowest index is
        proven and every matching index is reported in
        ``metadata["matches"]``.

        Returns:
            Result with a LeafProof, a NotFoundError, or a ValidationError
            when the value does not fit the tree's leaf encoding
        """
        tree = self.tree
        try:
            matches = tree.find_indices(leaf)
        except LeafValidationException as e:
            return OperationResult.failure(e.to_error_model())

        if not matches:
            logger.debug(f"Value {list(leaf)} not in tree {tree.root}")
            return OperationResult.failure(
                LeafNotFoundException(
                    f"Value {list(leaf)} is not in the tree",
                    leaf=list(leaf),
                ).to_error_model()
            )

        if len(matches) > 1:
            logger.warning(
                f"Value {list(leaf)} is stored {len(matches)} times (indices {matches}); "
                f"proving index {matches[0]}"
            )

        return OperationResult.success(self._leaf_proof(matches[0]), matches=matches)

    def prove_values(self, leaves: Sequence[Sequence[Any]]) -> OperationResult[MultiProofPayload]:
        """
        Build one multiproof for several values.

        Returns:
            Result with a MultiProofPayload, or the first lookup error
        """
        tree = self.tree
        try:
            payload = tree.get_multi_proof([list(leaf) for leaf in leaves])
        except AllowlistException as e:
            return OperationResult.failure(e.to_error_model())
        return OperationResult.success(payload)

    def verify(
        self,
        root: str | bytes,
        leaf: Sequence[Any],
        proof: Sequence[str | bytes],
    ) -> bool:
        """Check a proof against an explicit root using this tree's leaf encoding."""
        return verify_proof(root, leaf, proof, self.tree.leaf_encoding)

    def verify_multi(
        self,
        payload: MultiProofPayload,
        root: str | bytes | None = None,
    ) -> bool:
        """
        Check a multiproof against a root, by default this tree's root.

        The root carried in the payload is never trusted; a payload that
        names a different root than the one checked is rejected.
        """
        tree = self.tree
        expected = tree.root if root is None else root
        if isinstance(expected, bytes):
            expected = to_hex(expected)
        if payload.root.lower() != expected.lower():
            logger.debug(f"Multiproof names root {payload.root}, expected {expected}")
            return False
        try:
            return StandardMerkleTree.verify_multi(expected, tree.leaf_encoding, payload)
        except (LeafValidationException, InvalidTreeException, ValueError) as e:
            logger.debug(f"Multiproof rejected: {e}")
            return False


__all__ = [
    "ProofService",
    "verify_proof",
]
