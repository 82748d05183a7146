"""Proof pipeline: compile, setup, prove, verify.

Each stage is synchronous and all-or-nothing. Failures surface as the
PipelineError subclass of the stage; a proof that does not check out is the
ordinary False result of verify().

Example:
    cs = compile(RollupCircuit.shape(config))
    pk, vk = setup(cs)
    assignment = RollupCircuit.assign(config, batch)
    proof = prove(cs, pk, new_witness(assignment))
    ok = verify(proof, vk, new_witness(assignment, public_only=True))
"""

from typing import List, Tuple

from constraints.builder import ConstraintSystem
from constraints.schema import Circuit, compile_circuit
from protocol import groth16
from protocol.errors import (
    CompileError,
    ProveError,
    SetupError,
    UnsatisfiedWitnessError,
    VerifyError,
)
from protocol.proof import Proof, ProvingKey, VerifyingKey
from protocol.witness import Witness


def compile(circuit: Circuit) -> ConstraintSystem:
    """Compile a circuit definition into a constraint system.

    Raises:
        CompileError: If define() fails or a constant assertion is false
    """
    try:
        return compile_circuit(circuit)
    except Exception as exc:
        raise CompileError(f"Failed to compile {type(circuit).__name__}: {exc}") from exc


def setup(cs: ConstraintSystem) -> Tuple[ProvingKey, VerifyingKey]:
    """Run the one-time key generation for `cs`.

    Raises:
        SetupError: If key generation fails
    """
    if cs.n_wires < 1 + cs.n_public + cs.n_secret:
        raise SetupError("Constraint system has fewer wires than inputs")
    try:
        return groth16.setup(cs)
    except Exception as exc:
        raise SetupError(f"Setup failed: {exc}") from exc


def solve(cs: ConstraintSystem, witness: Witness) -> List[int]:
    """Compute the full wire assignment and check every constraint.

    Raises:
        ProveError: If the witness does not match the constraint system
        UnsatisfiedWitnessError: If any constraint fails
    """
    if witness.is_public_only:
        raise ProveError("A full witness is required, got a public-only witness")
    if witness.public_names != cs.public_names or witness.secret_names != cs.secret_names:
        raise ProveError(_shape_mismatch(cs, witness))

    try:
        wires = cs.solve(witness.public_values, witness.secret_values)
    except (ValueError, ArithmeticError) as exc:
        raise ProveError(f"Solving failed: {exc}") from exc

    index = cs.first_unsatisfied(wires)
    if index is not None:
        raise UnsatisfiedWitnessError(index, cs.labels[index])
    return wires


def prove(cs: ConstraintSystem, pk: ProvingKey, witness: Witness) -> Proof:
    """Prove that `witness` satisfies `cs`.

    Raises:
        ProveError: If the key or witness does not match `cs`
        UnsatisfiedWitnessError: If any constraint fails
    """
    if pk.n_wires != cs.n_wires or pk.n_public != cs.n_public:
        raise ProveError(
            f"Proving key is for {pk.n_wires} wires / {pk.n_public} publics, "
            f"constraint system has {cs.n_wires} / {cs.n_public}"
        )
    wires = solve(cs, witness)
    try:
        return groth16.prove(cs, pk, wires)
    except Exception as exc:
        raise ProveError(f"Proof generation failed: {exc}") from exc


def verify(proof: Proof, vk: VerifyingKey, public_witness: Witness) -> bool:
    """Check `proof` against the public inputs.

    Returns:
        True if the proof verifies, False on a legitimate mismatch
        (tampered proof, different public inputs, other circuit)

    Raises:
        VerifyError: If the witness is not public-only, the input count does
            not match the key, or the proof is malformed
    """
    if not public_witness.is_public_only:
        raise VerifyError("verify expects a public-only witness; call Witness.public()")
    try:
        return groth16.verify(vk, public_witness.public_values, proof)
    except (ValueError, TypeError, AssertionError) as exc:
        raise VerifyError(f"Malformed verification input: {exc}") from exc


def _shape_mismatch(cs: ConstraintSystem, witness: Witness) -> str:
    for kind, expected, got in (
        ("public", cs.public_names, witness.public_names),
        ("secret", cs.secret_names, witness.secret_names),
    ):
        if len(expected) != len(got):
            return f"Witness has {len(got)} {kind} inputs, constraint system expects {len(expected)}"
        for e, g in zip(expected, got):
            if e != g:
                return f"Witness {kind} input {g!r} does not match expected {e!r}"
    return "Witness does not match constraint system"
