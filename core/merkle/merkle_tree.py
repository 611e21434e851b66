"""
Module 02 - Merkle Tree Implementation
Array-backed Merkle tree construction, proof generation, and verification.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Deterministic tree construction over sorted leaf hashes
- Single-leaf proofs and multiproofs
- Proof verification by folding sorted pairs
- Structural validation and ASCII rendering

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing happens upstream (core.crypto.leaf_encoding)
2. Parent hashing: parent = keccak256(sort(left, right))
3. Layout: a complete binary tree of 2n-1 nodes stored in an array;
   node i has children 2i+1 and 2i+2, the root is tree[0], and
   leaves fill the tail of the array
4. Odd leaf counts need no padding: every internal node of the
   array layout has exactly two children
5. Single leaf: root = leaf
6. Empty leaves: rejected

These rules match OpenZeppelin's merkle-tree library and the
MerkleProof.sol verifier.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.crypto.hashing import HASH_SIZE, hash_pair, is_hash, to_hex
from core.schemas.errors import (
    ErrorCodes,
    IndexOutOfRangeException,
    InvalidTreeException,
    LeafValidationException,
)


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        siblings: Sibling hashes from the leaf level up to the root
        root: The Merkle root this proof is against
    """
    leaf: bytes
    siblings: list[bytes]
    root: bytes


@dataclass(frozen=True)
class MultiProof:
    """
    A proof that several leaves belong to the same tree.

    Attributes:
        leaves: Leaf hashes being proven, in the order the verifier consumes them
        proof: Sibling hashes that are not derivable from the leaves
        proof_flags: For each hashing step, True to take the next value
            from the leaves/stack, False to take the next proof hash
    """
    leaves: list[bytes]
    proof: list[bytes]
    proof_flags: list[bool] = field(default_factory=list)


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Children are sorted before hashing, so merkle_parent(a, b) ==
    merkle_parent(b, a).
    """
    return hash_pair(left, right)


def left_child_index(i: int) -> int:
    return 2 * i + 1


def right_child_index(i: int) -> int:
    return 2 * i + 2


def parent_index(i: int) -> int:
    if i <= 0:
        raise IndexOutOfRangeException("Root has no parent", index=i)
    return (i - 1) // 2


def sibling_index(i: int) -> int:
    if i <= 0:
        raise IndexOutOfRangeException("Root has no siblings", index=i)
    return i + 1 if i % 2 == 1 else i - 1


def is_tree_node(tree: Sequence[bytes], i: int) -> bool:
    return 0 <= i < len(tree)


def is_internal_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, left_child_index(i))


def is_leaf_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, i) and not is_internal_node(tree, i)


def check_valid_merkle_node(node: object) -> None:
    """Raise if a node is not a 32-byte digest."""
    if not is_hash(node):
        raise InvalidTreeException(
            f"Merkle tree nodes must be {HASH_SIZE}-byte digests",
            code=ErrorCodes.INVALID_MERKLE_NODE,
            details={"actual": repr(node)[:80]},
        )


def _check_leaf_node(tree: Sequence[bytes], i: int) -> None:
    if not is_leaf_node(tree, i):
        raise IndexOutOfRangeException(
            f"Index {i} is not a leaf of a tree with {len(tree)} nodes",
            index=i,
            size=len(tree),
        )


def make_merkle_tree(leaves: Sequence[bytes]) -> list[bytes]:
    """
    Build the node array for a sequence of leaf hashes.

    Leaves are placed in the order given; callers that need an
    order-independent root sort them first.

    Algorithm:
    1. Allocate 2n-1 slots
    2. Store leaf i at slot len-1-i (leaves fill the tail in reverse)
    3. Walk the internal slots from the last to 0, hashing each node's
       two children

    Args:
        leaves: Leaf hashes (32 bytes each)

    Returns:
        Node array with the root at index 0

    Raises:
        LeafValidationException: If leaves is empty
        InvalidTreeException: If a leaf is not a 32-byte digest
    """
    if len(leaves) == 0:
        raise LeafValidationException(
            "Expected non-zero number of leaves",
            code=ErrorCodes.EMPTY_LEAF_SET,
        )
    for leaf in leaves:
        check_valid_merkle_node(leaf)

    tree: list[bytes] = [b""] * (2 * len(leaves) - 1)

    for i, leaf in enumerate(leaves):
        tree[len(tree) - 1 - i] = bytes(leaf)

    for i in range(len(tree) - 1 - len(leaves), -1, -1):
        tree[i] = merkle_parent(tree[left_child_index(i)], tree[right_child_index(i)])

    return tree


def get_proof(tree: Sequence[bytes], index: int) -> list[bytes]:
    """
    Collect sibling hashes from a leaf up to the root.

    Args:
        tree: Node array from make_merkle_tree
        index: Tree index of the leaf (not its position in the input)

    Returns:
        Sibling hashes, leaf level first

    Raises:
        IndexOutOfRangeException: If index is not a leaf node
    """
    _check_leaf_node(tree, index)

    proof: list[bytes] = []
    while index > 0:
        proof.append(tree[sibling_index(index)])
        index = parent_index(index)
    return proof


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """
    Recompute a root by folding the proof into the leaf.

    Args:
        leaf: Leaf hash
        proof: Sibling hashes, leaf level first

    Returns:
        The implied root

    Raises:
        InvalidTreeException: If any node is not a 32-byte digest
    """
    check_valid_merkle_node(leaf)
    for node in proof:
        check_valid_merkle_node(node)

    computed = bytes(leaf)
    for sibling in proof:
        computed = merkle_parent(computed, sibling)
    return computed


def build_merkle_proof(tree: Sequence[bytes], index: int) -> MerkleProof:
    """Generate a MerkleProof for the leaf at the given tree index."""
    siblings = get_proof(tree, index)
    return MerkleProof(leaf=tree[index], siblings=siblings, root=tree[0])


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """
    Verify a Merkle proof against its claimed root.

    Returns:
        True if folding the siblings into the leaf reproduces the root
        bit-exactly, False otherwise (including malformed nodes)
    """
    try:
        return process_proof(proof.leaf, proof.siblings) == proof.root
    except InvalidTreeException:
        return False


def get_multi_proof(tree: Sequence[bytes], indices: Sequence[int]) -> MultiProof:
    """
    Build a multiproof for several leaves at once.

    The leaves are proven in descending tree-index order. Siblings that
    can be recomputed from other proven leaves are flagged instead of
    being included in the proof.

    Args:
        tree: Node array from make_merkle_tree
        indices: Tree indices of the leaves to prove

    Returns:
        MultiProof for the given leaves

    Raises:
        IndexOutOfRangeException: If any index is not a leaf node
        InvalidTreeException: If an index is repeated
    """
    for i in indices:
        _check_leaf_node(tree, i)

    ordered = sorted(indices, reverse=True)
    if any(a == b for a, b in zip(ordered, ordered[1:])):
        raise InvalidTreeException(
            "Cannot prove duplicated index",
            code=ErrorCodes.DUPLICATE_INDEX,
            details={"indices": list(indices)},
        )

    stack = list(ordered)
    proof: list[bytes] = []
    proof_flags: list[bool] = []

    while stack and stack[0] > 0:
        j = stack.pop(0)
        s = sibling_index(j)
        p = parent_index(j)

        if stack and s == stack[0]:
            proof_flags.append(True)
            stack.pop(0)
        else:
            proof_flags.append(False)
            proof.append(tree[s])
        stack.append(p)

    if not ordered:
        proof.append(tree[0])

    return MultiProof(
        leaves=[tree[i] for i in ordered],
        proof=proof,
        proof_flags=proof_flags,
    )


def process_multi_proof(multiproof: MultiProof) -> bytes:
    """
    Recompute the root implied by a multiproof.

    Raises:
        InvalidTreeException: If the multiproof is malformed
    """
    for node in multiproof.leaves:
        check_valid_merkle_node(node)
    for node in multiproof.proof:
        check_valid_merkle_node(node)

    if len(multiproof.proof) < sum(1 for flag in multiproof.proof_flags if not flag):
        raise InvalidTreeException(
            "Invalid multiproof format",
            code=ErrorCodes.INVALID_MULTIPROOF,
        )
    if len(multiproof.leaves) + len(multiproof.proof) != len(multiproof.proof_flags) + 1:
        raise InvalidTreeException(
            "Provided leaves and multiproof are not compatible",
            code=ErrorCodes.INVALID_MULTIPROOF,
        )

    stack = list(multiproof.leaves)
    proof = list(multiproof.proof)

    for flag in multiproof.proof_flags:
        a = stack.pop(0)
        b = stack.pop(0) if flag else proof.pop(0)
        stack.append(merkle_parent(a, b))

    if stack:
        return stack.pop()
    return proof.pop(0)


def is_valid_merkle_tree(tree: Sequence[bytes]) -> bool:
    """
    Check that every node is a digest and every internal node hashes
    its two children.
    """
    for i, node in enumerate(tree):
        if not is_hash(node):
            return False

        left = left_child_index(i)
        right = right_child_index(i)

        if right >= len(tree):
            if left < len(tree):
                return False
        elif node != merkle_parent(tree[left], tree[right]):
            return False

    return len(tree) > 0


def render_merkle_tree(tree: Sequence[bytes]) -> str:
    """
    Render the node array as an indented ASCII tree.

    Example output for three leaves:
        0) 0x...
        ├─ 1) 0x...
        │  ├─ 3) 0x...
        │  └─ 4) 0x...
        └─ 2) 0x...
    """
    if len(tree) == 0:
        raise InvalidTreeException("Expected non-zero number of nodes")

    stack: list[tuple[int, list[int]]] = [(0, [])]
    lines: list[str] = []

    while stack:
        i, path = stack.pop()

        indent = "".join("   " if p == 0 else "│  " for p in path[:-1])
        branch = "".join("└─ " if p == 0 else "├─ " for p in path[-1:])
        lines.append(f"{indent}{branch}{i}) {to_hex(tree[i])}")

        if right_child_index(i) < len(tree):
            stack.append((right_child_index(i), path + [0]))
            stack.append((left_child_index(i), path + [1]))

    return "\n".join(lines)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the number of levels of a tree with the given leaf count.

    A single leaf has depth 1, two leaves have depth 2, three or four
    leaves have depth 3 (the deepest leaf is that many levels down).
    """
    if num_leaves <= 0:
        return 0
    return (2 * num_leaves - 1).bit_length()


__all__ = [
    "MerkleProof",
    "MultiProof",
    "merkle_parent",
    "left_child_index",
    "right_child_index",
    "parent_index",
    "sibling_index",
    "is_tree_node",
    "is_internal_node",
    "is_leaf_node",
    "check_valid_merkle_node",
    "make_merkle_tree",
    "get_proof",
    "process_proof",
    "build_merkle_proof",
    "verify_merkle_proof",
    "get_multi_proof",
    "process_multi_proof",
    "is_valid_merkle_tree",
    "render_merkle_tree",
    "compute_tree_depth",
]
