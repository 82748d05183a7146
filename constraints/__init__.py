"""Constraint frontend.

Circuits are dataclasses whose fields carry a public/secret visibility tag
(see schema.py) and whose `define` method is written against the API in
base.py. R1CSBuilder is the API implementation that records rank-1
constraints at compile time.
"""

from .base import API, ONE_WIRE, Operand, Variable
from .builder import ConstraintSystem, Instruction, R1CSBuilder
from .schema import (
    Circuit,
    Visibility,
    compile_circuit,
    flatten,
    inputs,
    partition,
    public,
    secret,
)

__all__ = [
    "API",
    "ONE_WIRE",
    "Operand",
    "Variable",
    "ConstraintSystem",
    "Instruction",
    "R1CSBuilder",
    "Circuit",
    "Visibility",
    "compile_circuit",
    "flatten",
    "inputs",
    "partition",
    "public",
    "secret",
]
