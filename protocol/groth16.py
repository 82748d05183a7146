"""Groth16 over BN254 (py_ecc optimized_bn128).

QAP construction:
    Rows of the constraint system are interpolated over a multiplicative
    subgroup H of size N (power of two). For wire i, u_i/v_i/w_i are the
    polynomials taking A[j][i]/B[j][i]/C[j][i] at omega^j. Each public wire
    (and the constant one) gets an extra binding row  x_i * 0 = 0  so its
    u_i is linearly independent of the others.

Setup evaluates everything at a random tau via the Lagrange basis
    L_j(tau) = Z(tau)/N * omega^j / (tau - omega^j),   Z(x) = x^N - 1

Prove computes H = (A*B - C)/Z on the coset g*H with NTTs, where Z is the
constant g^N - 1, then interpolates back to coefficients.

Verify checks  e(A, B) == e(alpha, beta) * e(IC(x), gamma) * e(C, delta).
"""

import secrets
from typing import List, Sequence, Tuple

from py_ecc.optimized_bn128 import (
    G1,
    G2,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    pairing,
)

from constraints.builder import ConstraintSystem, Row
from primitives.field import FF, P, batch_inverse, get_omega, inv_mod
from primitives.ntt import NTT
from protocol.proof import G1Point, G2Point, Proof, ProvingKey, VerifyingKey

assert curve_order == P, "BN254 group order must equal the scalar field"


# --- QAP Helpers ---

def qap_rows(cs: ConstraintSystem) -> List[Row]:
    """Constraint rows followed by one binding row per public wire."""
    binding = [({i: 1}, {}, {}) for i in range(cs.n_public + 1)]
    return list(cs.rows) + binding


def domain_size(n_rows: int) -> int:
    n = 2
    while n < n_rows:
        n <<= 1
    return n


def _random_scalar() -> int:
    return 1 + secrets.randbelow(P - 1)


def _lagrange_at(tau: int, n: int) -> List[int]:
    """[L_j(tau) for j < n] over the size-n subgroup."""
    omega = get_omega(n.bit_length() - 1)
    points = [pow(omega, j, P) for j in range(n)]
    z_tau = (pow(tau, n, P) - 1) % P
    scale = z_tau * inv_mod(n) % P
    inverses = batch_inverse(FF([(tau - x) % P for x in points]))
    return [scale * x % P * int(inv) % P for x, inv in zip(points, inverses)]


def _msm(points: Sequence, scalars: Sequence[int], zero):
    """Naive multi-scalar multiplication, skipping zero scalars."""
    acc = zero
    for point, scalar in zip(points, scalars):
        scalar %= P
        if scalar:
            acc = add(acc, multiply(point, scalar))
    return acc


def _g1(scalar: int) -> G1Point:
    return multiply(G1, scalar) if scalar % P else Z1


def _g2(scalar: int) -> G2Point:
    return multiply(G2, scalar) if scalar % P else Z2


# --- Setup ---

def setup(cs: ConstraintSystem) -> Tuple[ProvingKey, VerifyingKey]:
    """Generate keys from fresh toxic waste (discarded on return)."""
    rows = qap_rows(cs)
    n = domain_size(len(rows))
    tau, alpha, beta, gamma, delta = (_random_scalar() for _ in range(5))

    # tau must lie outside H for the Lagrange formula
    while pow(tau, n, P) == 1:
        tau = _random_scalar()

    lagrange = _lagrange_at(tau, n)
    m = cs.n_wires
    u, v, w = [0] * m, [0] * m, [0] * m
    for j, (a_row, b_row, c_row) in enumerate(rows):
        for wire, coeff in a_row.items():
            u[wire] = (u[wire] + coeff * lagrange[j]) % P
        for wire, coeff in b_row.items():
            v[wire] = (v[wire] + coeff * lagrange[j]) % P
        for wire, coeff in c_row.items():
            w[wire] = (w[wire] + coeff * lagrange[j]) % P

    gamma_inv = inv_mod(gamma)
    delta_inv = inv_mod(delta)
    n_public_wires = cs.n_public + 1
    combined = [(beta * u[i] + alpha * v[i] + w[i]) % P for i in range(m)]

    ic = tuple(_g1(combined[i] * gamma_inv) for i in range(n_public_wires))
    k_query = tuple(_g1(combined[i] * delta_inv) for i in range(n_public_wires, m))

    z_tau = (pow(tau, n, P) - 1) % P
    h_query = tuple(_g1(pow(tau, k, P) * z_tau % P * delta_inv) for k in range(n - 1))

    pk = ProvingKey(
        n_wires=m,
        n_public=cs.n_public,
        domain_size=n,
        alpha_g1=_g1(alpha),
        beta_g1=_g1(beta),
        beta_g2=_g2(beta),
        delta_g1=_g1(delta),
        delta_g2=_g2(delta),
        a_query=tuple(_g1(x) for x in u),
        b_g1_query=tuple(_g1(x) for x in v),
        b_g2_query=tuple(_g2(x) for x in v),
        k_query=k_query,
        h_query=h_query,
    )
    vk = VerifyingKey(
        alpha_g1=pk.alpha_g1,
        beta_g2=pk.beta_g2,
        gamma_g2=_g2(gamma),
        delta_g2=pk.delta_g2,
        ic=ic,
    )
    return pk, vk


# --- Prove ---

def compute_h(cs: ConstraintSystem, wires: Sequence[int], n: int) -> List[int]:
    """Coefficients of H = (A*B - C) / Z for a satisfying assignment."""
    rows = qap_rows(cs)
    a_evals = [sum(c * wires[i] for i, c in a.items()) % P for a, _, _ in rows]
    b_evals = [sum(c * wires[i] for i, c in b_.items()) % P for _, b_, _ in rows]
    c_evals = [sum(c * wires[i] for i, c in c_.items()) % P for _, _, c_ in rows]

    ntt = NTT(n)
    a_coset = ntt.coset_ntt(ntt.intt(FF(a_evals)))
    b_coset = ntt.coset_ntt(ntt.intt(FF(b_evals)))
    c_coset = ntt.coset_ntt(ntt.intt(FF(c_evals)))

    z_inv = FF(inv_mod(ntt.vanishing_on_coset()))
    h_coset = (a_coset * b_coset - c_coset) * z_inv
    h_coeffs = ntt.coset_intt(h_coset)
    # deg H <= N - 2; the top coefficient is zero for a satisfying assignment
    return [int(x) for x in h_coeffs[: n - 1]]


def prove(cs: ConstraintSystem, pk: ProvingKey, wires: Sequence[int]) -> Proof:
    """Prove knowledge of `wires`. The caller checks satisfiability first."""
    r, s = _random_scalar(), _random_scalar()
    n_public_wires = pk.n_public + 1

    a = add(add(pk.alpha_g1, _msm(pk.a_query, wires, Z1)), multiply(pk.delta_g1, r))
    b_g2 = add(add(pk.beta_g2, _msm(pk.b_g2_query, wires, Z2)), multiply(pk.delta_g2, s))
    b_g1 = add(add(pk.beta_g1, _msm(pk.b_g1_query, wires, Z1)), multiply(pk.delta_g1, s))

    h = compute_h(cs, wires, pk.domain_size)
    c = _msm(pk.k_query, wires[n_public_wires:], Z1)
    c = add(c, _msm(pk.h_query, h, Z1))
    c = add(c, multiply(a, s))
    c = add(c, multiply(b_g1, r))
    c = add(c, neg(multiply(pk.delta_g1, r * s % P)))
    return Proof(a=a, b=b_g2, c=c)


# --- Verify ---

def check_proof_points(proof: Proof) -> None:
    """Raise ValueError if a proof point is not on its curve or B is outside the r-torsion."""
    if not is_on_curve(proof.a, b):
        raise ValueError("Proof point A is not on G1")
    if not is_on_curve(proof.b, b2):
        raise ValueError("Proof point B is not on G2")
    if not is_inf(multiply(proof.b, curve_order)):
        raise ValueError("Proof point B is not in the G2 subgroup")
    if not is_on_curve(proof.c, b):
        raise ValueError("Proof point C is not on G1")


def verify(vk: VerifyingKey, public_values: Sequence[int], proof: Proof) -> bool:
    """Check the pairing equation.

    Raises:
        ValueError: If the proof is malformed or the input count is wrong
    """
    if len(public_values) != vk.n_public:
        raise ValueError(f"Expected {vk.n_public} public inputs, got {len(public_values)}")
    check_proof_points(proof)

    vk_x = _msm(vk.ic[1:], public_values, vk.ic[0])

    lhs = pairing(proof.b, proof.a)
    rhs = pairing(vk.beta_g2, vk.alpha_g1) * pairing(vk.gamma_g2, vk_x) * pairing(vk.delta_g2, proof.c)
    if lhs != rhs:
        print("ERROR: Groth16 pairing check failed")
        return False
    return True


__all__ = ["compute_h", "domain_size", "prove", "qap_rows", "setup", "verify"]
