"""
Module 02 - Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Tests:
1. Array layout - 2n-1 nodes, leaves in the tail, root at index 0
2. Odd leaf counts need no padding
3. Proof verification for every leaf
4. Tamper detection - tampered sibling/leaf/root fails verification
5. Empty leaves - rejected
6. Single leaf - root equals leaf
7. Multiproofs
"""
import pytest

from core.crypto.hashing import from_hex, keccak256
from core.merkle.merkle_proofs import verify_proof
from core.merkle.merkle_tree import (
    MerkleProof,
    MultiProof,
    build_merkle_proof,
    compute_tree_depth,
    get_multi_proof,
    get_proof,
    is_leaf_node,
    is_valid_merkle_tree,
    make_merkle_tree,
    merkle_parent,
    parent_index,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
    sibling_index,
    verify_merkle_proof,
)
from core.schemas.errors import (
    ErrorCodes,
    IndexOutOfRangeException,
    InvalidTreeException,
    LeafValidationException,
)

from fixtures.common import ADDR_C, PROOF_C, ROOT_A, TREE_A


def leaves(n: int) -> list[bytes]:
    return [keccak256(f"leaf-{i}".encode()) for i in range(n)]


class TestEmptyAndSingle:
    """Tests for degenerate trees."""

    def test_empty_leaves_rejected(self):
        with pytest.raises(LeafValidationException) as exc_info:
            make_merkle_tree([])
        assert exc_info.value.code == ErrorCodes.EMPTY_LEAF_SET

    def test_single_leaf_root_equals_leaf(self):
        leaf = keccak256(b"only")
        tree = make_merkle_tree([leaf])
        assert tree == [leaf]

    def test_single_leaf_proof_empty(self):
        leaf = keccak256(b"only")
        proof = build_merkle_proof(make_merkle_tree([leaf]), 0)
        assert proof.siblings == []
        assert proof.root == leaf
        assert verify_merkle_proof(proof)

    def test_non_digest_leaf_rejected(self):
        with pytest.raises(InvalidTreeException):
            make_merkle_tree([b"short"])


class TestArrayLayout:
    """Tests for the 2n-1 node array."""

    @pytest.mark.parametrize("n", [2, 3, 5, 8, 13])
    def test_node_count(self, n):
        assert len(make_merkle_tree(leaves(n))) == 2 * n - 1

    def test_leaves_fill_tail_in_reverse(self):
        ls = leaves(5)
        tree = make_merkle_tree(ls)
        for i, leaf in enumerate(ls):
            assert tree[len(tree) - 1 - i] == leaf

    def test_root_hashes_children(self):
        tree = make_merkle_tree(leaves(5))
        assert tree[0] == merkle_parent(tree[1], tree[2])

    def test_known_five_leaf_tree(self):
        nodes = [from_hex(n) for n in TREE_A]
        tail = nodes[4:]
        # make_merkle_tree places leaf i at len-1-i
        rebuilt = make_merkle_tree(list(reversed(tail)))
        assert rebuilt == nodes

    def test_index_helpers(self):
        assert parent_index(3) == 1
        assert parent_index(4) == 1
        assert sibling_index(3) == 4
        assert sibling_index(4) == 3
        with pytest.raises(IndexOutOfRangeException):
            parent_index(0)
        with pytest.raises(IndexOutOfRangeException):
            sibling_index(0)

    def test_is_leaf_node(self):
        tree = make_merkle_tree(leaves(3))
        assert not is_leaf_node(tree, 0)
        assert not is_leaf_node(tree, 1)
        assert all(is_leaf_node(tree, i) for i in (2, 3, 4))
        assert not is_leaf_node(tree, 5)

    @pytest.mark.parametrize("n,depth", [(0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4)])
    def test_compute_tree_depth(self, n, depth):
        assert compute_tree_depth(n) == depth


class TestProofs:
    """Tests for single-leaf proofs."""

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 16])
    def test_every_leaf_verifies(self, n):
        tree = make_merkle_tree(leaves(n))
        for i in range(len(tree) - n, len(tree)):
            assert process_proof(tree[i], get_proof(tree, i)) == tree[0]

    def test_internal_node_cannot_be_proven(self):
        tree = make_merkle_tree(leaves(4))
        with pytest.raises(IndexOutOfRangeException):
            get_proof(tree, 0)

    def test_tampered_sibling_fails(self):
        tree = make_merkle_tree(leaves(4))
        proof = build_merkle_proof(tree, 3)
        bad = MerkleProof(
            leaf=proof.leaf,
            siblings=[keccak256(b"evil")] + proof.siblings[1:],
            root=proof.root,
        )
        assert not verify_merkle_proof(bad)

    def test_tampered_leaf_fails(self):
        tree = make_merkle_tree(leaves(4))
        proof = build_merkle_proof(tree, 3)
        bad = MerkleProof(leaf=keccak256(b"evil"), siblings=proof.siblings, root=proof.root)
        assert not verify_merkle_proof(bad)

    def test_tampered_root_fails(self):
        tree = make_merkle_tree(leaves(4))
        proof = build_merkle_proof(tree, 3)
        bad = MerkleProof(leaf=proof.leaf, siblings=proof.siblings, root=keccak256(b"evil"))
        assert not verify_merkle_proof(bad)

    @pytest.mark.parametrize("node", range(len(PROOF_C)))
    @pytest.mark.parametrize("byte", [0, 15, 31])
    def test_single_byte_flip_fails(self, node, byte):
        assert verify_proof(ROOT_A, [ADDR_C], PROOF_C)
        raw = bytearray(from_hex(PROOF_C[node]))
        raw[byte] ^= 0x01
        mutated = list(PROOF_C)
        mutated[node] = "0x" + raw.hex()
        assert verify_proof(ROOT_A, [ADDR_C], mutated) is False

    def test_malformed_sibling_is_false_not_error(self):
        proof = MerkleProof(leaf=keccak256(b"a"), siblings=[b"xx"], root=keccak256(b"b"))
        assert verify_merkle_proof(proof) is False


class TestMultiProof:
    """Tests for multiproofs."""

    def test_multiproof_reproduces_root(self):
        tree = make_merkle_tree(leaves(7))
        mp = get_multi_proof(tree, [6, 8, 11])
        assert process_multi_proof(mp) == tree[0]

    def test_leaves_in_descending_index_order(self):
        tree = make_merkle_tree(leaves(7))
        mp = get_multi_proof(tree, [6, 12, 8])
        assert mp.leaves == [tree[12], tree[8], tree[6]]

    def test_all_leaves_need_no_proof(self):
        tree = make_merkle_tree(leaves(4))
        mp = get_multi_proof(tree, [3, 4, 5, 6])
        assert mp.proof == []
        assert all(mp.proof_flags)
        assert process_multi_proof(mp) == tree[0]

    def test_empty_selection_carries_root(self):
        tree = make_merkle_tree(leaves(3))
        mp = get_multi_proof(tree, [])
        assert mp.proof == [tree[0]]
        assert process_multi_proof(mp) == tree[0]

    def test_duplicate_index_rejected(self):
        tree = make_merkle_tree(leaves(4))
        with pytest.raises(InvalidTreeException) as exc_info:
            get_multi_proof(tree, [3, 3])
        assert exc_info.value.code == ErrorCodes.DUPLICATE_INDEX

    def test_incompatible_multiproof_rejected(self):
        tree = make_merkle_tree(leaves(4))
        mp = get_multi_proof(tree, [3, 5])
        broken = MultiProof(leaves=mp.leaves, proof=mp.proof + [tree[0]], proof_flags=mp.proof_flags)
        with pytest.raises(InvalidTreeException) as exc_info:
            process_multi_proof(broken)
        assert exc_info.value.code == ErrorCodes.INVALID_MULTIPROOF


class TestValidationAndRender:
    """Tests for structural validation and rendering."""

    def test_valid_tree(self):
        assert is_valid_merkle_tree(make_merkle_tree(leaves(6)))

    def test_tampered_internal_node(self):
        tree = make_merkle_tree(leaves(6))
        tree[1] = keccak256(b"evil")
        assert not is_valid_merkle_tree(tree)

    def test_empty_tree_invalid(self):
        assert not is_valid_merkle_tree([])

    def test_render_three_leaves(self):
        tree = make_merkle_tree(leaves(3))
        lines = render_merkle_tree(tree).splitlines()
        assert len(lines) == 5
        assert lines[0].startswith("0) 0x")
        assert lines[1].startswith("├─ 1) ")
        assert lines[2].startswith("│  ├─ 3) ")
        assert lines[3].startswith("│  └─ 4) ")
        assert lines[4].startswith("└─ 2) ")

    def test_render_empty_rejected(self):
        with pytest.raises(InvalidTreeException):
            render_merkle_tree([])
