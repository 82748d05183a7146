"""Circuit input schema: per-field public/secret visibility.

A circuit is a dataclass whose fields are tagged with `public()`, `secret()`
or `inputs()` (a nested input struct, or a list of them). Each struct class
may set `__schema__`, the name used for visibility overrides:

    @dataclass
    class Account:
        __schema__ = "account"
        index: Any = secret()
        balance: Any = public()

    overrides = {"account.balance": "secret"}

The same walk serves compilation (allocating a wire per input) and witness
construction (flattening concrete values), so both always agree on the input
order: public inputs first, then secret inputs, each in declaration order.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import field, fields
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from constraints.base import API
from constraints.builder import ConstraintSystem, R1CSBuilder


class Visibility(str, Enum):
    PUBLIC = "public"
    SECRET = "secret"


_VISIBILITY = "visibility"
_NESTED = "inputs"


# --- Field Helpers ---

def public(default_factory: Optional[Callable[[], Any]] = None) -> Any:
    """Input visible to the verifier. A list value declares one input per element."""
    return _leaf(Visibility.PUBLIC, default_factory)


def secret(default_factory: Optional[Callable[[], Any]] = None) -> Any:
    """Input known only to the prover. A list value declares one input per element."""
    return _leaf(Visibility.SECRET, default_factory)


def inputs(default_factory: Optional[Callable[[], Any]] = None) -> Any:
    """Nested input struct (or list of structs). A None value declares nothing."""
    if default_factory is None:
        return field(default=None, metadata={_NESTED: True})
    return field(default_factory=default_factory, metadata={_NESTED: True})


def _leaf(visibility: Visibility, default_factory: Optional[Callable[[], Any]]) -> Any:
    if default_factory is None:
        return field(default=None, metadata={_VISIBILITY: visibility})
    return field(default_factory=default_factory, metadata={_VISIBILITY: visibility})


# --- Circuit Base ---

class Circuit(ABC):
    """Base class for circuit definitions (used as dataclasses)."""

    @abstractmethod
    def define(self, api: API) -> None:
        """Emit the circuit's constraints. Input fields hold Variables here."""
        pass

    def visibility_overrides(self) -> Mapping[str, str]:
        """Map of "schema.field" -> "public" | "secret"."""
        return {}


# --- Walker ---

Visit = Callable[[str, Visibility, Any], Any]


def walk(obj: Any, overrides: Mapping[str, str], visit: Visit, rewrite: bool = False, prefix: str = "") -> None:
    """Visit every input leaf of `obj` in declaration order.

    Args:
        obj: Circuit or input struct
        overrides: Visibility overrides keyed by "schema.field"
        visit: Called as visit(path, visibility, value)
        rewrite: If True, each leaf is replaced by visit's return value
        prefix: Path prefix for nested structs
    """
    schema = getattr(type(obj), "__schema__", type(obj).__name__)
    for f in fields(obj):
        value = getattr(obj, f.name)
        path = f"{prefix}{f.name}"

        if _VISIBILITY in f.metadata:
            visibility = Visibility(overrides.get(f"{schema}.{f.name}", f.metadata[_VISIBILITY]))
            if isinstance(value, list):
                new_value = [visit(f"{path}[{i}]", visibility, item) for i, item in enumerate(value)]
            else:
                new_value = visit(path, visibility, value)
            if rewrite:
                object.__setattr__(obj, f.name, new_value)

        elif f.metadata.get(_NESTED):
            if value is None:
                continue
            if isinstance(value, list):
                for i, item in enumerate(value):
                    walk(item, overrides, visit, rewrite, f"{path}[{i}].")
            else:
                walk(value, overrides, visit, rewrite, f"{path}.")


def flatten(obj: Any, overrides: Mapping[str, str]) -> List[Tuple[str, Visibility, Any]]:
    """Return (path, visibility, value) for every input leaf, in walk order."""
    leaves: List[Tuple[str, Visibility, Any]] = []

    def record(path: str, visibility: Visibility, value: Any) -> Any:
        leaves.append((path, visibility, value))
        return value

    walk(obj, overrides, record)
    return leaves


def partition(leaves: List[Tuple[str, Visibility, Any]]) -> Tuple[List[Tuple[str, Any]], List[Tuple[str, Any]]]:
    """Split flattened leaves into (public, secret) lists of (path, value)."""
    public_leaves = [(p, v) for p, vis, v in leaves if vis is Visibility.PUBLIC]
    secret_leaves = [(p, v) for p, vis, v in leaves if vis is Visibility.SECRET]
    return public_leaves, secret_leaves


# --- Compilation ---

def compile_circuit(circuit: Circuit) -> ConstraintSystem:
    """Allocate a wire per input leaf, run define() and return the R1CS.

    `circuit` is not modified; a deep copy receives the Variables.
    """
    shape = copy.deepcopy(circuit)
    overrides = dict(circuit.visibility_overrides())
    public_leaves, secret_leaves = partition(flatten(shape, overrides))

    builder = R1CSBuilder()
    variables: Dict[str, Any] = {}
    for path, _ in public_leaves:
        variables[path] = builder.public_input(path)
    for path, _ in secret_leaves:
        variables[path] = builder.secret_input(path)

    walk(shape, overrides, lambda path, _vis, _value: variables[path], rewrite=True)
    shape.define(builder)
    return builder.build()


__all__ = [
    "Circuit",
    "Visibility",
    "compile_circuit",
    "flatten",
    "inputs",
    "partition",
    "public",
    "secret",
    "walk",
]
