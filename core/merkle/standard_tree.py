"""
Module 02 - Standard Merkle Tree
Merkle tree over typed, ABI-encoded leaf values.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- StandardMerkleTree.of: build from leaf values and ABI type tags
- StandardMerkleTree.load / dump: lossless snapshot round-trip
- Proofs and multiproofs by value or by value index
- Static verification against a published root

Determinism Notes:
- Leaf hashes are sorted before the tree is built, so the root depends
  only on the multiset of leaves, never on input order
- Values keep their input order; each records the tree node holding
  its hash
- Duplicated values are hashed independently and all kept
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from core.crypto.hashing import from_hex, to_hex
from core.crypto.leaf_encoding import (
    normalize_leaf,
    standard_leaf_hash,
    validate_leaf_encoding,
)
from core.merkle.merkle_tree import (
    MultiProof,
    get_multi_proof,
    get_proof,
    is_leaf_node,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
)
from core.schemas.dump import DumpValue, TreeDump
from core.schemas.errors import (
    ErrorCodes,
    IndexOutOfRangeException,
    InvalidTreeException,
    LeafNotFoundException,
    LeafValidationException,
)
from core.schemas.proof import MultiProofPayload
from core.schemas.versioning import DUMP_FORMAT, assert_supported_dump_format


logger = logging.getLogger(__name__)

LeafOrIndex = Union[int, Sequence[Any]]


class StandardMerkleTree:
    """
    Merkle tree over ABI-encoded leaf tuples.

    Example:
        >>> tree = StandardMerkleTree.of([["0x1111111111111111111111111111111111111111"]], ["address"])
        >>> tree.verify(0, tree.get_proof(0))
        True
    """

    def __init__(
        self,
        tree: Sequence[bytes],
        values: Sequence[tuple[list[Any], int]],
        leaf_encoding: Sequence[str],
    ) -> None:
        self._tree: list[bytes] = [bytes(node) for node in tree]
        self._values: list[tuple[list[Any], int]] = [(list(v), int(i)) for v, i in values]
        self._leaf_encoding: list[str] = list(leaf_encoding)

        # leaf hash -> all value indices whose leaf node holds that hash
        self._hash_lookup: dict[bytes, list[int]] = {}
        for value_index, (_, tree_index) in enumerate(self._values):
            self._hash_lookup.setdefault(self._tree[tree_index], []).append(value_index)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        values: Sequence[Sequence[Any]],
        leaf_encoding: Sequence[str],
    ) -> "StandardMerkleTree":
        """
        Build a tree from leaf values.

        Args:
            values: Leaf tuples, one value per type tag
            leaf_encoding: ABI type tags (e.g. ["address"])

        Returns:
            The built tree

        Raises:
            LeafValidationException: If values is empty, the encoding is
                unknown, or any leaf fails type/arity validation
        """
        types = validate_leaf_encoding(leaf_encoding)

        if len(values) == 0:
            raise LeafValidationException(
                "Cannot build a tree from an empty leaf set",
                code=ErrorCodes.EMPTY_LEAF_SET,
            )

        normalized = [normalize_leaf(v, types, position=i) for i, v in enumerate(values)]
        hashed = [
            (standard_leaf_hash(types, value), value_index)
            for value_index, value in enumerate(normalized)
        ]
        # Stable sort by hash; equal hashes keep input order
        hashed.sort(key=lambda item: item[0])

        tree = make_merkle_tree([leaf_hash for leaf_hash, _ in hashed])

        tree_indices = [0] * len(normalized)
        for leaf_position, (_, value_index) in enumerate(hashed):
            tree_indices[value_index] = len(tree) - 1 - leaf_position

        logger.debug(f"Built tree of {len(normalized)} leaves, root {to_hex(tree[0])}")

        return cls(
            tree,
            list(zip(normalized, tree_indices)),
            types,
        )

    @classmethod
    def load(cls, data: TreeDump | Mapping[str, Any]) -> "StandardMerkleTree":
        """
        Reconstruct a tree from a dump without re-hashing its nodes.

        Raises:
            FormatVersionException: If the dump format is not supported
            InvalidTreeException: If the dump shape is inconsistent
            LeafValidationException: If the leaf encoding is unknown
        """
        if not isinstance(data, TreeDump):
            if not isinstance(data, Mapping):
                raise InvalidTreeException(f"Dump must be an object, got {type(data).__name__}")
            assert_supported_dump_format(str(data.get("format", "")))
            try:
                data = TreeDump.model_validate(data)
            except PydanticValidationError as e:
                raise InvalidTreeException(
                    f"Malformed dump: {e.error_count()} schema error(s)",
                    details={"errors": [err["msg"] for err in e.errors()]},
                ) from e
        else:
            assert_supported_dump_format(data.format)

        types = validate_leaf_encoding(data.leaf_encoding)
        tree = [from_hex(node) for node in data.tree]

        if len(tree) != 2 * len(data.values) - 1:
            raise InvalidTreeException(
                f"Dump has {len(tree)} nodes for {len(data.values)} values, "
                f"expected {2 * len(data.values) - 1}",
                details={"nodes": len(tree), "values": len(data.values)},
            )

        seen: set[int] = set()
        for i, entry in enumerate(data.values):
            if not is_leaf_node(tree, entry.tree_index):
                raise InvalidTreeException(
                    f"values[{i}].treeIndex {entry.tree_index} is not a leaf node",
                    details={"value_index": i, "tree_index": entry.tree_index},
                )
            if entry.tree_index in seen:
                raise InvalidTreeException(
                    f"values[{i}].treeIndex {entry.tree_index} is used twice",
                    details={"value_index": i, "tree_index": entry.tree_index},
                )
            seen.add(entry.tree_index)

        return cls(
            tree,
            [(entry.value, entry.tree_index) for entry in data.values],
            types,
        )

    def dump(self) -> TreeDump:
        """Snapshot the tree for persistence."""
        return TreeDump(
            format=DUMP_FORMAT,
            leaf_encoding=list(self._leaf_encoding),
            tree=[to_hex(node) for node in self._tree],
            values=[
                DumpValue(value=list(value), tree_index=tree_index)
                for value, tree_index in self._values
            ],
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def root(self) -> str:
        """0x-hex Merkle root."""
        return to_hex(self._tree[0])

    @property
    def root_bytes(self) -> bytes:
        return self._tree[0]

    @property
    def leaf_encoding(self) -> list[str]:
        return list(self._leaf_encoding)

    @property
    def nodes(self) -> list[bytes]:
        return list(self._tree)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StandardMerkleTree):
            return NotImplemented
        return (
            self._tree == other._tree
            and self._values == other._values
            and self._leaf_encoding == other._leaf_encoding
        )

    def __repr__(self) -> str:
        return f"StandardMerkleTree(root={self.root}, leaves={len(self)}, encoding={self._leaf_encoding})"

    def entries(self) -> Iterator[tuple[int, list[Any]]]:
        """Yield (value index, value) in original input order."""
        for i, (value, _) in enumerate(self._values):
            yield i, list(value)

    def at(self, index: int) -> list[Any]:
        """Return the stored value at a value index."""
        self._check_value_index(index)
        return list(self._values[index][0])

    def tree_index_of(self, index: int) -> int:
        """Return the tree node index holding the hash of a stored value."""
        self._check_value_index(index)
        return self._values[index][1]

    def leaf_hash(self, leaf: Sequence[Any]) -> bytes:
        """Hash a leaf value with this tree's encoding."""
        return standard_leaf_hash(self._leaf_encoding, leaf)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _check_value_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise LeafValidationException(
                f"Value index must be an integer, got {index!r}",
                details={"expected": "int", "actual": repr(index)},
            )
        if index < 0 or index >= len(self._values):
            raise IndexOutOfRangeException(
                f"Index {index} out of range for {len(self._values)} values",
                index=index,
                size=len(self._values),
            )

    def find_indices(self, leaf: Sequence[Any]) -> list[int]:
        """
        Return every value index whose encoded leaf equals the given one.

        Raises:
            LeafValidationException: If the leaf does not match the encoding
        """
        return list(self._hash_lookup.get(self.leaf_hash(leaf), []))

    def leaf_lookup(self, leaf: Sequence[Any]) -> int:
        """
        Return the lowest value index holding the given leaf.

        Raises:
            LeafNotFoundException: If the leaf is not in the tree
        """
        indices = self.find_indices(leaf)
        if not indices:
            raise LeafNotFoundException(
                f"Leaf {list(leaf)} is not in tree",
                leaf=list(leaf),
            )
        return indices[0]

    def _resolve(self, leaf: LeafOrIndex) -> int:
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            self._check_value_index(leaf)
            return leaf
        return self.leaf_lookup(leaf)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def get_proof(self, leaf: LeafOrIndex) -> list[str]:
        """
        Build an inclusion proof for a value (or value index).

        Returns:
            0x-hex sibling digests, leaf level first
        """
        value_index = self._resolve(leaf)
        tree_index = self._values[value_index][1]
        return [to_hex(node) for node in get_proof(self._tree, tree_index)]

    def get_multi_proof(self, leaves: Sequence[LeafOrIndex]) -> MultiProofPayload:
        """
        Build a multiproof for several values (or value indices).

        Raises:
            InvalidTreeException: If the same value index is requested twice
        """
        value_indices = [self._resolve(leaf) for leaf in leaves]
        tree_indices = [self._values[i][1] for i in value_indices]
        multiproof = get_multi_proof(self._tree, tree_indices)

        value_by_hash = {self._tree[self._values[i][1]]: self._values[i][0] for i in value_indices}
        return MultiProofPayload(
            leaves=[list(value_by_hash[node]) for node in multiproof.leaves],
            proof=[to_hex(node) for node in multiproof.proof],
            proof_flags=list(multiproof.proof_flags),
            root=self.root,
        )

    def verify(self, leaf: LeafOrIndex, proof: Sequence[str]) -> bool:
        """Verify a proof for a value (or value index) against this tree's root."""
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            value = self.at(leaf)
        else:
            value = leaf
        return self.verify_leaf(self.root, self._leaf_encoding, value, proof)

    def verify_multi_proof(self, multiproof: MultiProofPayload) -> bool:
        """Verify a multiproof against this tree's root."""
        return self.verify_multi(self.root, self._leaf_encoding, multiproof)

    @staticmethod
    def verify_leaf(
        root: str | bytes,
        leaf_encoding: Sequence[str],
        leaf: Sequence[Any],
        proof: Sequence[str | bytes],
    ) -> bool:
        """
        Check that a leaf belongs to the tree with the given root.

        Raises:
            LeafValidationException: If the leaf does not match the encoding
            InvalidTreeException: If a proof node is not a 32-byte digest
        """
        root_bytes = from_hex(root) if isinstance(root, str) else bytes(root)
        leaf_hash = standard_leaf_hash(validate_leaf_encoding(leaf_encoding), leaf)
        nodes = [from_hex(p) if isinstance(p, str) else bytes(p) for p in proof]
        return process_proof(leaf_hash, nodes) == root_bytes

    @staticmethod
    def verify_multi(
        root: str | bytes,
        leaf_encoding: Sequence[str],
        multiproof: MultiProofPayload,
    ) -> bool:
        """
        Check a multiproof against the given root.

        Raises:
            InvalidTreeException: If the multiproof is malformed
        """
        root_bytes = from_hex(root) if isinstance(root, str) else bytes(root)
        leaf_encoding = validate_leaf_encoding(leaf_encoding)
        implied = process_multi_proof(
            MultiProof(
                leaves=[standard_leaf_hash(leaf_encoding, leaf) for leaf in multiproof.leaves],
                proof=[from_hex(p) for p in multiproof.proof],
                proof_flags=list(multiproof.proof_flags),
            )
        )
        return implied == root_bytes

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Re-hash every stored value and every internal node.

        Raises:
            InvalidTreeException: If a stored value does not hash to its
                leaf node or the node array is inconsistent
        """
        for i, (value, tree_index) in enumerate(self._values):
            if not is_leaf_node(self._tree, tree_index):
                raise InvalidTreeException(
                    f"values[{i}] points at non-leaf node {tree_index}",
                    details={"value_index": i, "tree_index": tree_index},
                )
            if self.leaf_hash(value) != self._tree[tree_index]:
                raise InvalidTreeException(
                    f"values[{i}] does not hash to tree[{tree_index}]",
                    code=ErrorCodes.ROOT_MISMATCH,
                    details={"value_index": i, "tree_index": tree_index},
                )

        if not is_valid_merkle_tree(self._tree):
            raise InvalidTreeException("Merkle tree is invalid")

    def render(self) -> str:
        """ASCII rendering of the node array."""
        return render_merkle_tree(self._tree)


__all__ = [
    "StandardMerkleTree",
    "LeafOrIndex",
]
