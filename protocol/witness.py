"""Witness: the concrete input values of a circuit, split by visibility."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from constraints.schema import Circuit, flatten, partition
from primitives.field import P


@dataclass(frozen=True)
class Witness:
    """Input values in wire order.

    A public-only witness (secret_values is None) is what a verifier holds.
    """
    public_names: Tuple[str, ...]
    public_values: Tuple[int, ...]
    secret_names: Tuple[str, ...] = ()
    secret_values: Optional[Tuple[int, ...]] = None

    @property
    def is_public_only(self) -> bool:
        return self.secret_values is None

    def public(self) -> "Witness":
        """Drop the secret part."""
        return Witness(self.public_names, self.public_values)

    def get(self, name: str) -> int:
        if name in self.public_names:
            return self.public_values[self.public_names.index(name)]
        if self.secret_values is not None and name in self.secret_names:
            return self.secret_values[self.secret_names.index(name)]
        raise KeyError(f"No input named {name!r} in witness")

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        j: Dict[str, Any] = {"public": {n: str(v) for n, v in zip(self.public_names, self.public_values)}}
        if self.secret_values is not None:
            j["secret"] = {n: str(v) for n, v in zip(self.secret_names, self.secret_values)}
        return j

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Witness":
        public = data.get("public", {})
        if "secret" not in data:
            return cls(tuple(public), tuple(int(v) for v in public.values()))
        secret = data["secret"]
        return cls(
            tuple(public),
            tuple(int(v) for v in public.values()),
            tuple(secret),
            tuple(int(v) for v in secret.values()),
        )


def new_witness(assignment: Circuit, public_only: bool = False) -> Witness:
    """Flatten an assigned circuit into a witness.

    Values are reduced into [0, P). Visibility follows the assignment's
    overrides, so the order matches the compiled constraint system.

    Raises:
        ValueError: If an input is unassigned or not an integer
    """
    leaves = flatten(assignment, assignment.visibility_overrides())
    public_leaves, secret_leaves = partition(leaves)

    public_values = tuple(_to_value(path, v) for path, v in public_leaves)
    public_names = tuple(path for path, _ in public_leaves)
    if public_only:
        return Witness(public_names, public_values)

    return Witness(
        public_names,
        public_values,
        tuple(path for path, _ in secret_leaves),
        tuple(_to_value(path, v) for path, v in secret_leaves),
    )


def _to_value(path: str, value: Any) -> int:
    if value is None:
        raise ValueError(f"Input {path!r} is not assigned")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Input {path!r} must be an int, got {type(value).__name__}")
    return value % P
