"""In-circuit Baby Jubjub point arithmetic.

Points are pairs of Variables. Constant points (such as the precomputed
multiples of BASE8) fold into linear terms, so operations against them
cost fewer rows than the general case.
"""

from typing import List, NamedTuple, Sequence

from constraints.base import API, Operand, Variable
from primitives import babyjubjub as bjj


class PointVar(NamedTuple):
    x: Operand
    y: Operand


IDENTITY = PointVar(0, 1)


def constant_point(p: bjj.Point) -> PointVar:
    return PointVar(p.x, p.y)


# --- Group Law ---

def assert_on_curve(api: API, p: PointVar) -> None:
    """a*x^2 + y^2 == 1 + d*x^2*y^2"""
    x2 = api.mul(p.x, p.x)
    y2 = api.mul(p.y, p.y)
    x2y2 = api.mul(x2, y2)
    api.assert_is_equal(api.add(api.scale(x2, bjj.A), y2), api.add(1, api.scale(x2y2, bjj.D)))


def add(api: API, p: PointVar, q: PointVar) -> PointVar:
    """Complete addition in six rows.

        beta  = x1*y2          gamma = y1*x2
        delta = (y1 - a*x1) * (x2 + y2)
        tau   = beta*gamma
        x3 = (beta + gamma) / (1 + d*tau)
        y3 = (delta + a*beta - gamma) / (1 - d*tau)
    """
    beta = api.mul(p.x, q.y)
    gamma = api.mul(p.y, q.x)
    delta = api.mul(api.sub(p.y, api.scale(p.x, bjj.A)), api.add(q.x, q.y))
    tau = api.mul(beta, gamma)
    dtau = api.scale(tau, bjj.D)
    x3 = api.div(api.add(beta, gamma), api.add(1, dtau))
    y3 = api.div(api.add(delta, api.scale(beta, bjj.A), api.neg(gamma)), api.sub(1, dtau))
    return PointVar(x3, y3)


def double(api: API, p: PointVar) -> PointVar:
    return add(api, p, p)


def mul_cofactor(api: API, p: PointVar) -> PointVar:
    for _ in range(3):
        p = double(api, p)
    return p


def select(api: API, bit: Operand, if_true: PointVar, if_false: PointVar) -> PointVar:
    return PointVar(api.select(bit, if_true.x, if_false.x), api.select(bit, if_true.y, if_false.y))


def assert_points_equal(api: API, p: PointVar, q: PointVar) -> None:
    api.assert_is_equal(p.x, q.x)
    api.assert_is_equal(p.y, q.y)


# --- Scalar Multiplication ---

def scalar_mul(api: API, p: PointVar, bits: Sequence[Variable]) -> PointVar:
    """Variable-base double-and-add over little-endian scalar bits."""
    acc = IDENTITY
    cur = p
    for i, bit in enumerate(bits):
        acc = select(api, bit, add(api, acc, cur), acc)
        if i + 1 < len(bits):
            cur = double(api, cur)
    return acc


def fixed_base_mul(api: API, bits: Sequence[Variable], powers: List[bjj.Point]) -> PointVar:
    """Multiply a constant base given its doublings powers[i] = 2^i * base."""
    if len(powers) < len(bits):
        raise ValueError(f"Need {len(bits)} base powers, got {len(powers)}")
    acc = IDENTITY
    for bit, power in zip(bits, powers):
        # bit ? power : identity, linear in bit
        term = select(api, bit, constant_point(power), IDENTITY)
        acc = add(api, acc, term)
    return acc
