"""In-circuit EdDSA verification on Baby Jubjub, matching primitives/eddsa.py."""

from typing import Sequence

from constraints.base import API, Operand
from gadgets import twisted_edwards as te
from gadgets.mimc import mimc_hash
from gadgets.twisted_edwards import PointVar
from primitives import babyjubjub as bjj
from primitives.field import FIELD_BITS

# 2^i * BASE8, shared by every verification in a circuit
_BASE_POWERS = bjj.base_powers(bjj.SCALAR_BITS)


def verify(api: API, public_key: PointVar, r: PointVar, s: Operand, message: Sequence[Operand]) -> None:
    """Assert (r, s) is a valid signature of `message` under `public_key`.

    Checks [8][s]B8 == [8](R + [h]A) with h = MiMC(R.x, R.y, A.x, A.y, MiMC(message)).
    s is range checked to SCALAR_BITS; h is decomposed strictly so its bits
    are the canonical integer the native signer used.
    """
    with api.scope("on_curve"):
        te.assert_on_curve(api, public_key)
        te.assert_on_curve(api, r)

    with api.scope("challenge"):
        m = mimc_hash(api, *message)
        h = mimc_hash(api, r.x, r.y, public_key.x, public_key.y, m)

    with api.scope("lhs"):
        s_bits = api.to_binary(s, bjj.SCALAR_BITS)
        lhs = te.mul_cofactor(api, te.fixed_base_mul(api, s_bits, _BASE_POWERS))

    with api.scope("rhs"):
        h_bits = api.to_binary(h, FIELD_BITS, strict=True)
        h_a = te.scalar_mul(api, public_key, h_bits)
        rhs = te.mul_cofactor(api, te.add(api, r, h_a))

    te.assert_points_equal(api, lhs, rhs)
