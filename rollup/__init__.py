"""Rollup batch circuit: data model, transition constraints and operator ledger."""

from .config import ReceiverNoncePolicy, RollupConfig, StructuralError
from .model import Account, Batch, BatchSlot, Transfer, apply_transfer
from .circuit import RollupCircuit
from .ledger import Ledger
from .transition import TransitionConstraints

__all__ = [
    "Account",
    "Batch",
    "BatchSlot",
    "Ledger",
    "ReceiverNoncePolicy",
    "RollupCircuit",
    "RollupConfig",
    "StructuralError",
    "Transfer",
    "TransitionConstraints",
    "apply_transfer",
]
