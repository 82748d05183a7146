"""EdDSA signatures on Baby Jubjub with MiMC challenges.

    A = k * B8                      public key
    R = r * B8                      r derived from (k, M) with SHA-512
    h = MiMC(R.x, R.y, A.x, A.y, M)
    S = r + h * k  mod l

Verification is cofactor-cleared: [8][S]B8 == [8]R + [8][h]A. The
in-circuit verifier lives in gadgets/eddsa.py.
"""

import hashlib
import secrets
from dataclasses import dataclass
from typing import List

from primitives import babyjubjub as bjj
from primitives.babyjubjub import Point
from primitives.mimc import mimc_hash


@dataclass(frozen=True)
class Signature:
    """Signature (R, S) with R a curve point and S < SUBGROUP_ORDER."""
    r: Point
    s: int

    def to_list(self) -> List[int]:
        return [self.r.x, self.r.y, self.s]


@dataclass(frozen=True)
class PublicKey:
    point: Point

    @property
    def x(self) -> int:
        return self.point.x

    @property
    def y(self) -> int:
        return self.point.y

    def verify(self, message: List[int], signature: Signature) -> bool:
        return verify(self, message, signature)


@dataclass(frozen=True)
class PrivateKey:
    scalar: int

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(1 + secrets.randbelow(bjj.SUBGROUP_ORDER - 1))

    @classmethod
    def from_seed(cls, seed: bytes) -> "PrivateKey":
        """Deterministic key for tests and demos."""
        digest = hashlib.sha512(seed).digest()
        return cls(1 + int.from_bytes(digest, "big") % (bjj.SUBGROUP_ORDER - 1))

    def public_key(self) -> PublicKey:
        return PublicKey(bjj.multiply(bjj.BASE8, self.scalar))

    def sign(self, message: List[int]) -> Signature:
        """Sign a list of field elements."""
        m = mimc_hash(message)
        nonce_input = self.scalar.to_bytes(32, "big") + m.to_bytes(32, "big")
        r = int.from_bytes(hashlib.sha512(nonce_input).digest(), "big") % bjj.SUBGROUP_ORDER
        r_point = bjj.multiply(bjj.BASE8, r)
        a = self.public_key().point
        h = challenge(r_point, a, m)
        s = (r + h * self.scalar) % bjj.SUBGROUP_ORDER
        return Signature(r_point, s)

    def sign_transfer(self, nonce: int, receiver_index: int, amount: int) -> Signature:
        """Sign the transfer message (sender nonce, receiver index, amount)."""
        return self.sign(transfer_message(nonce, receiver_index, amount))


def transfer_message(nonce: int, receiver_index: int, amount: int) -> List[int]:
    return [nonce, receiver_index, amount]


def challenge(r: Point, a: Point, m: int) -> int:
    return mimc_hash([r.x, r.y, a.x, a.y, m])


def verify(public_key: PublicKey, message: List[int], signature: Signature) -> bool:
    r, s = signature.r, signature.s
    if not (bjj.is_on_curve(r) and bjj.is_on_curve(public_key.point)):
        return False
    if not 0 <= s < bjj.SUBGROUP_ORDER:
        return False
    m = mimc_hash(message)
    h = challenge(r, public_key.point, m)
    lhs = bjj.mul_cofactor(bjj.multiply(bjj.BASE8, s))
    rhs = bjj.mul_cofactor(bjj.add(r, bjj.multiply(public_key.point, h)))
    return lhs == rhs


__all__ = [
    "PrivateKey",
    "PublicKey",
    "Signature",
    "challenge",
    "transfer_message",
    "verify",
]
