"""MiMC hash over the BN254 scalar field.

MiMC-x^5 block cipher in Miyaguchi-Preneel mode. Exponent 5 is a permutation
of the field because gcd(5, P - 1) = 1. The same round function is expressed
in-circuit by gadgets/mimc.py; both must agree bit for bit.
"""

import hashlib
from typing import List

from primitives.field import P

# --- Parameters ---

N_ROUNDS = 110
EXPONENT = 5
SEED = b"rollup.mimc.bn254"


def _round_constants(n_rounds: int, seed: bytes) -> List[int]:
    """Derive round constants by iterated SHA-256 of the seed."""
    constants = []
    digest = hashlib.sha256(seed).digest()
    for _ in range(n_rounds):
        digest = hashlib.sha256(digest).digest()
        constants.append(int.from_bytes(digest, "big") % P)
    return constants


ROUND_CONSTANTS: List[int] = _round_constants(N_ROUNDS, SEED)


# --- Cipher and Hash ---

def encrypt(message: int, key: int) -> int:
    """MiMC permutation keyed by `key`."""
    m = message % P
    for c in ROUND_CONSTANTS:
        m = pow((m + key + c) % P, EXPONENT, P)
    return (m + key) % P


def mimc_hash(data: List[int]) -> int:
    """Hash a sequence of field elements to one field element.

    h_0 = 0, h_{i+1} = E_{h_i}(m_i) + h_i + m_i
    """
    h = 0
    for x in data:
        x = int(x) % P
        h = (encrypt(x, h) + h + x) % P
    return h


def hash_two(left: int, right: int) -> int:
    """2-to-1 compression used for Merkle tree nodes."""
    return mimc_hash([left, right])
