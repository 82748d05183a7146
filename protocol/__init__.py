"""Protocol - Groth16 proof pipeline over BN254."""

from protocol.errors import (
    CompileError,
    PipelineError,
    ProveError,
    SetupError,
    UnsatisfiedWitnessError,
    VerifyError,
)
from protocol.proof import (
    Proof,
    ProvingKey,
    VerifyingKey,
    export_verifying_key,
    load_proof,
    load_verifying_key,
    save_proof,
)
from protocol.witness import Witness, new_witness
from protocol.pipeline import compile, prove, setup, solve, verify

__all__ = [
    # Pipeline
    "compile",
    "setup",
    "prove",
    "verify",
    "solve",
    # Witness
    "Witness",
    "new_witness",
    # Keys and proofs
    "Proof",
    "ProvingKey",
    "VerifyingKey",
    "export_verifying_key",
    "load_proof",
    "load_verifying_key",
    "save_proof",
    # Errors
    "PipelineError",
    "CompileError",
    "SetupError",
    "ProveError",
    "UnsatisfiedWitnessError",
    "VerifyError",
]
