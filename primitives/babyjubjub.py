"""Baby Jubjub twisted Edwards curve.

    a*x^2 + y^2 = 1 + d*x^2*y^2   over the BN254 scalar field

The curve order is 8 * SUBGROUP_ORDER. BASE8 generates the prime-order
subgroup. The addition law is complete (d is a non-square), so the same
formula handles doubling and the identity (0, 1).
"""

from typing import List, NamedTuple

from primitives.field import P, inv_mod

# --- Curve Parameters ---

A = 168700
D = 168696

CURVE_ORDER = 21888242871839275222246405745257275088614511777268538073601725287587578984328
COFACTOR = 8
SUBGROUP_ORDER = CURVE_ORDER // COFACTOR

# Bits needed for scalars reduced mod SUBGROUP_ORDER
SCALAR_BITS = SUBGROUP_ORDER.bit_length()


class Point(NamedTuple):
    """Affine point (x, y)."""
    x: int
    y: int


IDENTITY = Point(0, 1)

BASE8 = Point(
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)


# --- Group Law ---

def is_on_curve(p: Point) -> bool:
    x2 = p.x * p.x % P
    y2 = p.y * p.y % P
    return (A * x2 + y2) % P == (1 + D * x2 * y2) % P


def add(p: Point, q: Point) -> Point:
    """Complete twisted Edwards addition."""
    x1x2 = p.x * q.x % P
    y1y2 = p.y * q.y % P
    dxy = D * x1x2 * y1y2 % P
    x3 = (p.x * q.y + p.y * q.x) * inv_mod(1 + dxy) % P
    y3 = (y1y2 - A * x1x2) * inv_mod(1 - dxy) % P
    return Point(x3, y3)


def double(p: Point) -> Point:
    return add(p, p)


def negate(p: Point) -> Point:
    return Point((-p.x) % P, p.y)


def multiply(p: Point, scalar: int) -> Point:
    """Double-and-add scalar multiplication, LSB first."""
    if scalar < 0:
        return multiply(negate(p), -scalar)
    acc = IDENTITY
    cur = p
    while scalar:
        if scalar & 1:
            acc = add(acc, cur)
        cur = double(cur)
        scalar >>= 1
    return acc


def mul_cofactor(p: Point) -> Point:
    """[8]P via three doublings."""
    for _ in range(3):
        p = double(p)
    return p


def base_powers(n_bits: int) -> List[Point]:
    """Return [2^i * BASE8 for i in range(n_bits)]."""
    powers = [BASE8]
    for _ in range(1, n_bits):
        powers.append(double(powers[-1]))
    return powers
