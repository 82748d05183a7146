"""BN254 scalar field GF(r).

Uses galois library for vectorized field arithmetic. FF is the field type.

The circuit frontend and native primitives work on plain Python ints reduced
mod P (large-prime galois arrays use object dtype, so per-element work is
cheaper on ints). FF arrays are used where whole vectors are combined: the
QAP evaluation, NTTs and satisfiability checks.
"""

import galois
from typing import List

# --- Field Construction ---

BN254_SCALAR_ORDER = 21888242871839275222246405745257275088548364400416034343698204186575808495617
P = BN254_SCALAR_ORDER

MULTIPLICATIVE_GENERATOR = 5

FF = galois.GF(P, primitive_element=MULTIPLICATIVE_GENERATOR, verify=False)
"""Scalar field of BN254 (also the base field of Baby Jubjub)."""

# Number of bits needed to represent any element
FIELD_BITS = P.bit_length()

# --- 2-adic Roots of Unity ---

# Largest k with 2^k dividing P - 1
TWO_ADICITY = ((P - 1) & -(P - 1)).bit_length() - 1


def get_omega(n_bits: int) -> int:
    """Return primitive 2^n_bits-th root of unity."""
    if not 0 <= n_bits <= TWO_ADICITY:
        raise ValueError(f"n_bits must be in [0, {TWO_ADICITY}], got {n_bits}")
    return pow(MULTIPLICATIVE_GENERATOR, (P - 1) >> n_bits, P)


def get_omega_inv(n_bits: int) -> int:
    """Return inverse of primitive 2^n_bits-th root of unity."""
    return inv_mod(get_omega(n_bits))


# Coset shift for quotient computation (any non-root of unity works)
SHIFT = MULTIPLICATIVE_GENERATOR


# --- Scalar Helpers ---

def inv_mod(a: int) -> int:
    """Modular inverse via Fermat. Zero maps to zero."""
    return pow(a % P, P - 2, P)


def to_bits(value: int, n_bits: int) -> List[int]:
    """Little-endian bit decomposition of a non-negative integer."""
    return [(value >> i) & 1 for i in range(n_bits)]


# --- Montgomery Batch Inversion ---

def batch_inverse(values):
    """Montgomery batch inversion for any galois array.

    Converts N field inversions into 3N-3 multiplications + 1 inversion.

    Args:
        values: Galois FieldArray to invert (must all be non-zero)

    Returns:
        Galois FieldArray where result[i] = values[i]^(-1)

    Raises:
        ZeroDivisionError: If any element is zero
    """
    n = len(values)
    if n == 0:
        return values
    if n == 1:
        return values ** -1

    field_type = type(values)

    # Forward pass: compute prefix products
    cumprods = field_type.Zeros(n)
    cumprods[0] = values[0]
    for i in range(1, n):
        cumprods[i] = cumprods[i - 1] * values[i]

    inv_total = cumprods[n - 1] ** -1

    # Backward pass: extract individual inverses
    results = field_type.Zeros(n)
    z = inv_total
    for i in range(n - 1, 0, -1):
        results[i] = z * cumprods[i - 1]
        z = z * values[i]
    results[0] = z

    return results
