"""
Module 02 - Merkle Tree and Commitments
Deterministic allow-list commitments and inclusion proofs.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- StandardMerkleTree: build, dump/load, prove and verify typed leaves
- ProofService: proof queries over one loaded tree (Module 03)
- Array-level helpers for trees over raw 32-byte leaf hashes

Canonical Commitment Rules:
1. Leaf hashing: keccak256(keccak256(abi.encode(types, values)))
2. Parent hashing: keccak256(sort(left, right))
3. Leaf hashes are sorted before the tree is built
4. Layout: 2n-1 node array, root at index 0, no odd-node padding
5. Empty leaf set: rejected

Usage:
    from core.merkle import StandardMerkleTree, ProofService

    tree = StandardMerkleTree.of([[addr] for addr in addresses], ["address"])
    service = ProofService(tree)

    result = service.prove_value([addresses[2]])
    assert service.verify(tree.root, [addresses[2]], result.output.proof)
"""
from .merkle_tree import (
    MerkleProof,
    MultiProof,
    merkle_parent,
    make_merkle_tree,
    get_proof,
    process_proof,
    build_merkle_proof,
    verify_merkle_proof,
    get_multi_proof,
    process_multi_proof,
    is_valid_merkle_tree,
    render_merkle_tree,
    compute_tree_depth,
)

from .standard_tree import StandardMerkleTree

from .merkle_proofs import (
    ProofService,
    verify_proof,
)


__all__ = [
    # Core types
    "MerkleProof",
    "MultiProof",
    "StandardMerkleTree",
    # Core functions
    "merkle_parent",
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
    # Proof service
    "ProofService",
    "verify_proof",
]
