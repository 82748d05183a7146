"""Tests for the account Merkle tree and the in-circuit path hashing."""

import pytest

from gadgets import merkle
from primitives.merkle_tree import EMPTY_LEAF, MerkleProof, MerkleTree
from primitives.mimc import hash_two


class TestMerkleTree:
    """Native tree operations."""

    def test_empty_tree_root(self) -> None:
        """Depth-1 empty tree is H(0, 0)."""
        tree = MerkleTree(1)
        assert tree.get_root() == hash_two(EMPTY_LEAF, EMPTY_LEAF)

    def test_merkelize_root(self) -> None:
        tree = MerkleTree(2)
        tree.merkelize([1, 2, 3, 4])
        expected = hash_two(hash_two(1, 2), hash_two(3, 4))
        assert tree.get_root() == expected

    def test_short_leaf_list_is_padded(self) -> None:
        a, b = MerkleTree(2), MerkleTree(2)
        a.merkelize([7])
        b.merkelize([7, 0, 0, 0])
        assert a.get_root() == b.get_root()

    def test_too_many_leaves(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree(1).merkelize([1, 2, 3])

    def test_invalid_depth(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree(0)

    @pytest.mark.parametrize("index", [0, 1, 5, 15])
    def test_proof_verifies(self, index: int) -> None:
        tree = MerkleTree(4)
        tree.merkelize(list(range(100, 116)))
        proof = tree.get_proof(index)
        assert proof.depth == 4
        assert proof.verify(tree.get_root(), tree.get_leaf(index))
        assert not proof.verify(tree.get_root(), tree.get_leaf(index) + 1)

    def test_update_matches_merkelize(self) -> None:
        """Incremental update gives the same root as a full rebuild."""
        leaves = list(range(1, 9))
        tree = MerkleTree(3)
        tree.merkelize(leaves)
        new_root = tree.update(5, 999)

        leaves[5] = 999
        rebuilt = MerkleTree(3)
        rebuilt.merkelize(leaves)
        assert new_root == rebuilt.get_root()

    def test_proof_survives_sibling_update(self) -> None:
        """Updating a leaf changes the path of its sibling but not its own."""
        tree = MerkleTree(2)
        before = tree.get_proof(0)
        tree.update(0, 42)
        assert tree.get_proof(0) == before
        assert tree.get_proof(1).siblings[0] == 42

    def test_index_out_of_range(self) -> None:
        tree = MerkleTree(2)
        with pytest.raises(IndexError):
            tree.get_proof(4)
        with pytest.raises(IndexError):
            tree.update(-1, 0)


class TestMerkleGadget:
    """In-circuit path hashing."""

    @pytest.mark.parametrize("index", [0, 3, 6])
    def test_compute_root_matches_native(self, run_gadget, index: int) -> None:
        tree = MerkleTree(3)
        tree.merkelize([11 * i for i in range(8)])
        proof = tree.get_proof(index)

        def build(api, leaf, idx, *siblings):
            return merkle.compute_root(api, leaf, api.to_binary(idx, 3), siblings)

        satisfied, root = run_gadget(build, tree.get_leaf(index), index, *proof.siblings)
        assert satisfied
        assert root == tree.get_root()

    def test_inclusion_rejects_wrong_leaf(self, run_gadget) -> None:
        tree = MerkleTree(2)
        tree.merkelize([1, 2, 3, 4])
        proof = tree.get_proof(2)

        def build(api, root, leaf, idx, *siblings):
            merkle.assert_inclusion(api, root, leaf, api.to_binary(idx, 2), siblings)

        ok, _ = run_gadget(build, tree.get_root(), 3, 2, *proof.siblings)
        bad, _ = run_gadget(build, tree.get_root(), 4, 2, *proof.siblings)
        assert ok
        assert not bad

    def test_inclusion_rejects_wrong_index(self, run_gadget) -> None:
        """The path bits bind the leaf position."""
        tree = MerkleTree(2)
        tree.merkelize([1, 2, 3, 4])
        proof = tree.get_proof(2)

        def build(api, root, leaf, idx, *siblings):
            merkle.assert_inclusion(api, root, leaf, api.to_binary(idx, 2), siblings)

        bad, _ = run_gadget(build, tree.get_root(), 3, 3, *proof.siblings)
        assert not bad

    def test_length_mismatch(self) -> None:
        from constraints.builder import R1CSBuilder

        builder = R1CSBuilder()
        leaf = builder.secret_input("leaf")
        with pytest.raises(ValueError):
            merkle.compute_root(builder, leaf, [0, 1], [5])

    def test_proof_dataclass(self) -> None:
        proof = MerkleProof(index=1, siblings=(7,))
        assert proof.compute_root(3) == hash_two(7, 3)
