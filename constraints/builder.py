"""R1CS builder: the API implementation used at compile time.

Every multiplicative relation becomes one row A * B = C over the wire vector

    w = [1, public inputs..., secret inputs..., internal wires...]

Internal wires are filled in by an ordered list of solver instructions, so a
compiled ConstraintSystem can compute a full wire assignment from its inputs
alone (see ConstraintSystem.solve).
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from constraints.base import API, HintFunction, Operand, Variable, as_variable
from primitives.field import P, inv_mod

# --- Type Aliases ---

Row = Tuple[Dict[int, int], Dict[int, int], Dict[int, int]]


# --- Compiled Artifact ---

@dataclass(frozen=True)
class Instruction:
    """Computes `outputs` wires from `inputs` during solving."""
    outputs: Tuple[int, ...]
    inputs: Tuple[Variable, ...]
    solve: Callable[[List[int]], List[int]]


@dataclass(frozen=True)
class ConstraintSystem:
    """Compiled rank-1 constraint system.

    Attributes:
        n_wires: Total wire count including the constant-one wire
        public_names: Input paths of the public wires, in wire order
        secret_names: Input paths of the secret wires, in wire order
        rows: (A, B, C) sparse rows; A.w * B.w == C.w must hold for each
        labels: Scope label per row
        instructions: Solver program for the internal wires
    """
    n_wires: int
    public_names: Tuple[str, ...]
    secret_names: Tuple[str, ...]
    rows: Tuple[Row, ...]
    labels: Tuple[str, ...]
    instructions: Tuple[Instruction, ...] = field(repr=False)

    @property
    def n_public(self) -> int:
        return len(self.public_names)

    @property
    def n_secret(self) -> int:
        return len(self.secret_names)

    @property
    def n_constraints(self) -> int:
        return len(self.rows)

    def solve(self, public_values: Sequence[int], secret_values: Sequence[int]) -> List[int]:
        """Compute the full wire assignment from input values.

        Does not check the rows; use first_unsatisfied() for that.

        Raises:
            ValueError: If the input counts do not match
        """
        if len(public_values) != self.n_public:
            raise ValueError(f"Expected {self.n_public} public values, got {len(public_values)}")
        if len(secret_values) != self.n_secret:
            raise ValueError(f"Expected {self.n_secret} secret values, got {len(secret_values)}")

        n_inputs = 1 + self.n_public + self.n_secret
        wires = [1] + [int(v) % P for v in public_values] + [int(v) % P for v in secret_values]
        wires += [0] * (self.n_wires - n_inputs)

        for instr in self.instructions:
            args = [v.evaluate(wires) for v in instr.inputs]
            results = instr.solve(args)
            for wire, value in zip(instr.outputs, results):
                wires[wire] = int(value) % P
        return wires

    def first_unsatisfied(self, wires: Sequence[int]) -> Optional[int]:
        """Return the index of the first failing row, or None."""
        for i, (a, b, c) in enumerate(self.rows):
            if _dot(a, wires) * _dot(b, wires) % P != _dot(c, wires):
                return i
        return None

    def is_satisfied(self, wires: Sequence[int]) -> bool:
        return self.first_unsatisfied(wires) is None


def _dot(row: Dict[int, int], wires: Sequence[int]) -> int:
    return sum(c * wires[w] for w, c in row.items()) % P


# --- Builder ---

class R1CSBuilder(API):
    """Records rows, row labels and solver instructions."""

    def __init__(self) -> None:
        self.n_wires = 1  # wire 0 is the constant one
        self.public_names: List[str] = []
        self.secret_names: List[str] = []
        self.rows: List[Row] = []
        self.labels: List[str] = []
        self.instructions: List[Instruction] = []
        self._scopes: List[str] = []
        self._sealed_inputs = False

    # --- Inputs ---

    def public_input(self, name: str) -> Variable:
        if self.secret_names or self._sealed_inputs:
            raise ValueError(f"Public input {name!r} allocated after secret inputs")
        self.public_names.append(name)
        return self._new_wire()

    def secret_input(self, name: str) -> Variable:
        if self._sealed_inputs:
            raise ValueError(f"Secret input {name!r} allocated after internal wires")
        self.secret_names.append(name)
        return self._new_wire()

    def _new_wire(self) -> Variable:
        index = self.n_wires
        self.n_wires += 1
        return Variable.wire(index)

    # --- API Primitives ---

    def mul(self, a: Operand, b: Operand) -> Variable:
        a, b = as_variable(a), as_variable(b)
        if a.is_constant():
            return self.scale(b, a.constant_value())
        if b.is_constant():
            return self.scale(a, b.constant_value())
        (out,) = self.hint(lambda v: [v[0] * v[1] % P], [a, b], 1)
        self._emit(a, b, out)
        return out

    def div(self, a: Operand, b: Operand) -> Variable:
        a, b = as_variable(a), as_variable(b)
        if b.is_constant():
            if b.constant_value() == 0:
                raise ZeroDivisionError("Division by constant zero")
            return self.scale(a, inv_mod(b.constant_value()))
        (out,) = self.hint(lambda v: [v[0] * inv_mod(v[1]) % P], [a, b], 1)
        self._emit(b, out, a)
        return out

    def assert_product(self, a: Operand, b: Operand, c: Operand) -> None:
        a, b, c = as_variable(a), as_variable(b), as_variable(c)
        if a.is_constant() or b.is_constant():
            lhs = self.mul(a, b)
            diff = self.sub(lhs, c)
            if diff.is_constant():
                if diff.constant_value() != 0:
                    raise ValueError(f"Constant assertion fails in scope {self._label()!r}")
                return
            self._emit(diff, Variable.constant(1), Variable({}))
            return
        self._emit(a, b, c)

    def hint(self, fn: HintFunction, inputs: Sequence[Operand], n_outputs: int) -> List[Variable]:
        self._sealed_inputs = True
        outputs = [self._new_wire() for _ in range(n_outputs)]
        self.instructions.append(Instruction(
            outputs=tuple(next(iter(v.terms)) for v in outputs),
            inputs=tuple(as_variable(x) for x in inputs),
            solve=fn,
        ))
        return outputs

    @contextmanager
    def scope(self, name: str) -> Iterator[None]:
        self._scopes.append(name)
        try:
            yield
        finally:
            self._scopes.pop()

    # --- Output ---

    def build(self) -> ConstraintSystem:
        return ConstraintSystem(
            n_wires=self.n_wires,
            public_names=tuple(self.public_names),
            secret_names=tuple(self.secret_names),
            rows=tuple(self.rows),
            labels=tuple(self.labels),
            instructions=tuple(self.instructions),
        )

    def _emit(self, a: Variable, b: Variable, c: Variable) -> None:
        self.rows.append((dict(a.terms), dict(b.terms), dict(c.terms)))
        self.labels.append(self._label())

    def _label(self) -> str:
        return "/".join(self._scopes) or "<root>"


__all__ = ["ConstraintSystem", "Instruction", "R1CSBuilder"]
