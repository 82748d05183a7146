"""Groth16 keys and proofs, with JSON serialization.

Points are py_ecc optimized_bn128 projective triples. On disk they use the
snarkjs layout: decimal strings, G1 as [x, y, "1"] and G2 as
[[x0, x1], [y0, y1], ["1", "0"]], with the point at infinity as z = 0.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Tuple

from py_ecc.optimized_bn128 import FQ, FQ2, Z1, Z2, is_inf, normalize

# --- Type Aliases ---
G1Point = Tuple[FQ, FQ, FQ]
G2Point = Tuple[FQ2, FQ2, FQ2]


# --- Key and Proof Data Structures ---

@dataclass(frozen=True)
class Proof:
    """Groth16 proof (A in G1, B in G2, C in G1)."""
    a: G1Point
    b: G2Point
    c: G1Point


@dataclass(frozen=True)
class VerifyingKey:
    """Verifying key. ic[0] pairs with the constant one, ic[i] with public input i."""
    alpha_g1: G1Point
    beta_g2: G2Point
    gamma_g2: G2Point
    delta_g2: G2Point
    ic: Tuple[G1Point, ...]

    @property
    def n_public(self) -> int:
        return len(self.ic) - 1


@dataclass(frozen=True)
class ProvingKey:
    """Proving key for one constraint system shape.

    Attributes:
        n_wires: Wire count of the constraint system
        n_public: Public input count (excluding the constant one)
        domain_size: Evaluation domain size (power of two)
        a_query, b_g1_query, b_g2_query: [u_i(tau)], [v_i(tau)] per wire
        k_query: [(beta*u_i + alpha*v_i + w_i)/delta] for secret and internal wires
        h_query: [tau^k * Z(tau)/delta] for k < domain_size - 1
    """
    n_wires: int
    n_public: int
    domain_size: int
    alpha_g1: G1Point
    beta_g1: G1Point
    beta_g2: G2Point
    delta_g1: G1Point
    delta_g2: G2Point
    a_query: Tuple[G1Point, ...]
    b_g1_query: Tuple[G1Point, ...]
    b_g2_query: Tuple[G2Point, ...]
    k_query: Tuple[G1Point, ...]
    h_query: Tuple[G1Point, ...]


# --- Point Encoding ---

def g1_to_json(p: G1Point) -> List[str]:
    if is_inf(p):
        return ["0", "1", "0"]
    x, y = normalize(p)
    return [str(int(x)), str(int(y)), "1"]


def g1_from_json(data: List[str]) -> G1Point:
    if len(data) != 3:
        raise ValueError(f"G1 point needs 3 coordinates, got {len(data)}")
    if int(data[2]) == 0:
        return Z1
    return (FQ(int(data[0])), FQ(int(data[1])), FQ(int(data[2])))


def g2_to_json(p: G2Point) -> List[List[str]]:
    if is_inf(p):
        return [["0", "0"], ["1", "0"], ["0", "0"]]
    x, y = normalize(p)
    return [[str(int(c)) for c in x.coeffs], [str(int(c)) for c in y.coeffs], ["1", "0"]]


def g2_from_json(data: List[List[str]]) -> G2Point:
    if len(data) != 3 or any(len(c) != 2 for c in data):
        raise ValueError("G2 point needs 3 coordinates of 2 limbs each")
    if all(int(c) == 0 for c in data[2]):
        return Z2
    x, y, z = ([int(c) for c in coord] for coord in data)
    return (FQ2(x), FQ2(y), FQ2(z))


# --- JSON Serialization ---

def proof_to_json(proof: Proof) -> dict[str, Any]:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "pi_a": g1_to_json(proof.a),
        "pi_b": g2_to_json(proof.b),
        "pi_c": g1_to_json(proof.c),
    }


def proof_from_json(data: dict[str, Any]) -> Proof:
    """Parse a proof dict. Raises ValueError/KeyError on malformed input."""
    return Proof(
        a=g1_from_json(data["pi_a"]),
        b=g2_from_json(data["pi_b"]),
        c=g1_from_json(data["pi_c"]),
    )


def verifying_key_to_json(vk: VerifyingKey) -> dict[str, Any]:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": vk.n_public,
        "vk_alpha_1": g1_to_json(vk.alpha_g1),
        "vk_beta_2": g2_to_json(vk.beta_g2),
        "vk_gamma_2": g2_to_json(vk.gamma_g2),
        "vk_delta_2": g2_to_json(vk.delta_g2),
        "IC": [g1_to_json(p) for p in vk.ic],
    }


def verifying_key_from_json(data: dict[str, Any]) -> VerifyingKey:
    ic = tuple(g1_from_json(p) for p in data["IC"])
    if "nPublic" in data and int(data["nPublic"]) != len(ic) - 1:
        raise ValueError(f"nPublic={data['nPublic']} does not match {len(ic)} IC points")
    return VerifyingKey(
        alpha_g1=g1_from_json(data["vk_alpha_1"]),
        beta_g2=g2_from_json(data["vk_beta_2"]),
        gamma_g2=g2_from_json(data["vk_gamma_2"]),
        delta_g2=g2_from_json(data["vk_delta_2"]),
        ic=ic,
    )


def proving_key_to_json(pk: ProvingKey) -> dict[str, Any]:
    return {
        "nWires": pk.n_wires,
        "nPublic": pk.n_public,
        "domainSize": pk.domain_size,
        "alpha_1": g1_to_json(pk.alpha_g1),
        "beta_1": g1_to_json(pk.beta_g1),
        "beta_2": g2_to_json(pk.beta_g2),
        "delta_1": g1_to_json(pk.delta_g1),
        "delta_2": g2_to_json(pk.delta_g2),
        "A": [g1_to_json(p) for p in pk.a_query],
        "B1": [g1_to_json(p) for p in pk.b_g1_query],
        "B2": [g2_to_json(p) for p in pk.b_g2_query],
        "K": [g1_to_json(p) for p in pk.k_query],
        "H": [g1_to_json(p) for p in pk.h_query],
    }


def proving_key_from_json(data: dict[str, Any]) -> ProvingKey:
    return ProvingKey(
        n_wires=int(data["nWires"]),
        n_public=int(data["nPublic"]),
        domain_size=int(data["domainSize"]),
        alpha_g1=g1_from_json(data["alpha_1"]),
        beta_g1=g1_from_json(data["beta_1"]),
        beta_g2=g2_from_json(data["beta_2"]),
        delta_g1=g1_from_json(data["delta_1"]),
        delta_g2=g2_from_json(data["delta_2"]),
        a_query=tuple(g1_from_json(p) for p in data["A"]),
        b_g1_query=tuple(g1_from_json(p) for p in data["B1"]),
        b_g2_query=tuple(g2_from_json(p) for p in data["B2"]),
        k_query=tuple(g1_from_json(p) for p in data["K"]),
        h_query=tuple(g1_from_json(p) for p in data["H"]),
    )


# --- Files ---

def save_proof(proof: Proof, path: str) -> None:
    with open(path, "w") as f:
        json.dump(proof_to_json(proof), f, indent=2)


def load_proof(path: str) -> Proof:
    with open(path) as f:
        return proof_from_json(json.load(f))


def export_verifying_key(vk: VerifyingKey, path: str) -> None:
    """Write a snarkjs-style verification_key.json for external verifiers."""
    with open(path, "w") as f:
        json.dump(verifying_key_to_json(vk), f, indent=2)


def load_verifying_key(path: str) -> VerifyingKey:
    with open(path) as f:
        return verifying_key_from_json(json.load(f))
