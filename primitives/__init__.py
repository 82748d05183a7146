"""Primitives - Low-level cryptographic and mathematical building blocks."""

from primitives.field import (
    FF,
    P,
    BN254_SCALAR_ORDER,
    FIELD_BITS,
    get_omega,
    get_omega_inv,
    inv_mod,
)
from primitives.merkle_tree import (
    MerkleProof,
    MerkleRoot,
    MerkleTree,
)
from primitives.mimc import hash_two, mimc_hash
from primitives.ntt import NTT
from primitives.eddsa import PrivateKey, PublicKey, Signature

__all__ = [
    # Field
    "FF",
    "P",
    "BN254_SCALAR_ORDER",
    "FIELD_BITS",
    "get_omega",
    "get_omega_inv",
    "inv_mod",
    # NTT
    "NTT",
    # Hash
    "mimc_hash",
    "hash_two",
    # Merkle Tree
    "MerkleTree",
    "MerkleRoot",
    "MerkleProof",
    # Signatures
    "PrivateKey",
    "PublicKey",
    "Signature",
]
