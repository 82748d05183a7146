"""Base classes for circuit definition.

API provides the uniform interface a circuit's `define` is written against.
Values are `Variable`s: sparse linear combinations of wires, where wire 0 is
the constant one. Linear operations never emit constraints; multiplication,
division and assertions do.

Example:
    def define(self, api: API) -> None:
        x3 = api.mul(api.mul(self.x, self.x), self.x)
        api.assert_is_equal(self.y, api.add(x3, self.x, 5))

The derived operations (bit decomposition, range checks, comparators,
selection) are written once here in terms of the abstract primitives, so any
API implementation gets them for free.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Sequence, Union

from primitives.field import FIELD_BITS, P, inv_mod, to_bits

ONE_WIRE = 0


class Variable:
    """Linear combination sum(coeff * wire) over the field."""

    __slots__ = ("terms",)

    def __init__(self, terms: Dict[int, int]) -> None:
        self.terms = {w: c % P for w, c in terms.items() if c % P}

    @classmethod
    def constant(cls, value: int) -> "Variable":
        return cls({ONE_WIRE: value})

    @classmethod
    def wire(cls, index: int) -> "Variable":
        return cls({index: 1})

    def is_constant(self) -> bool:
        return all(w == ONE_WIRE for w in self.terms)

    def constant_value(self) -> int:
        return self.terms.get(ONE_WIRE, 0)

    def evaluate(self, wires: Sequence[int]) -> int:
        return sum(c * wires[w] for w, c in self.terms.items()) % P

    def __repr__(self) -> str:
        body = " + ".join(f"{c}*w{w}" if w else str(c) for w, c in sorted(self.terms.items()))
        return f"Variable({body or '0'})"


Operand = Union[Variable, int]

HintFunction = Callable[[List[int]], List[int]]


def as_variable(value: Operand) -> Variable:
    if isinstance(value, Variable):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected Variable or int, got {type(value).__name__}")
    return Variable.constant(value)


class API(ABC):
    """Uniform constraint-building interface used by circuits and gadgets."""

    # --- Primitives ---

    @abstractmethod
    def mul(self, a: Operand, b: Operand) -> Variable:
        """Return a * b (one constraint unless an operand is constant)."""
        pass

    @abstractmethod
    def div(self, a: Operand, b: Operand) -> Variable:
        """Return a / b. The constraint is unsatisfiable when b == 0."""
        pass

    @abstractmethod
    def assert_product(self, a: Operand, b: Operand, c: Operand) -> None:
        """Assert a * b == c."""
        pass

    @abstractmethod
    def hint(self, fn: HintFunction, inputs: Sequence[Operand], n_outputs: int) -> List[Variable]:
        """Allocate unconstrained wires computed by `fn` at solve time.

        The caller must constrain every output; a hint on its own proves
        nothing.
        """
        pass

    @abstractmethod
    @contextmanager
    def scope(self, name: str) -> Iterator[None]:
        """Label the constraints emitted inside the block (for diagnostics)."""
        yield

    # --- Linear Operations ---

    def add(self, a: Operand, b: Operand, *more: Operand) -> Variable:
        terms = dict(as_variable(a).terms)
        for operand in (b, *more):
            for w, c in as_variable(operand).terms.items():
                terms[w] = terms.get(w, 0) + c
        return Variable(terms)

    def neg(self, a: Operand) -> Variable:
        return self.scale(a, -1)

    def sub(self, a: Operand, b: Operand) -> Variable:
        return self.add(a, self.neg(b))

    def scale(self, a: Operand, k: int) -> Variable:
        return Variable({w: c * k for w, c in as_variable(a).terms.items()})

    def inverse(self, a: Operand) -> Variable:
        return self.div(1, a)

    # --- Assertions ---

    def assert_is_equal(self, a: Operand, b: Operand) -> None:
        self.assert_product(self.sub(a, b), 1, 0)

    def assert_is_boolean(self, a: Operand) -> None:
        self.assert_product(a, self.sub(a, 1), 0)

    # --- Binary Decomposition ---

    def to_binary(self, a: Operand, n_bits: int, strict: bool = False) -> List[Variable]:
        """Decompose `a` into `n_bits` little-endian boolean wires.

        Enforces a == sum(b_i * 2^i). With n_bits >= FIELD_BITS two
        decompositions may exist; `strict` additionally enforces that the
        bits encode an integer below P.
        """
        if n_bits < 1:
            raise ValueError(f"n_bits must be >= 1, got {n_bits}")
        if n_bits > FIELD_BITS:
            raise ValueError(f"n_bits must be <= {FIELD_BITS}, got {n_bits}")
        a = as_variable(a)

        if a.is_constant():
            value = a.constant_value()
            if value >> n_bits:
                raise ValueError(f"Constant {value} does not fit in {n_bits} bits")
            return [Variable.constant(bit) for bit in to_bits(value, n_bits)]

        bits = self.hint(lambda v: to_bits(v[0], n_bits), [a], n_bits)
        for bit in bits:
            self.assert_is_boolean(bit)
        self.assert_is_equal(self.from_binary(bits), a)
        if strict and n_bits == FIELD_BITS:
            self.assert_bits_le_constant(bits, P - 1)
        return bits

    def from_binary(self, bits: Sequence[Operand]) -> Variable:
        return self.add(0, 0, *(self.scale(bit, 1 << i) for i, bit in enumerate(bits)))

    def assert_bits_le_constant(self, bits: Sequence[Variable], bound: int) -> None:
        """Assert the integer encoded by `bits` is <= `bound`.

        Scans from the most significant bit, tracking whether every higher bit
        equals the bound's. Where the bound has a 0, the prefix may only
        continue if the bit is 0 as well.
        """
        if bound >> len(bits):
            return
        equal: Operand = 1
        for i in reversed(range(len(bits))):
            if (bound >> i) & 1:
                equal = self.mul(equal, bits[i])
            else:
                self.assert_product(equal, bits[i], 0)

    # --- Range Checks and Comparison ---

    def range_check(self, a: Operand, n_bits: int) -> None:
        """Assert 0 <= a < 2^n_bits as an integer."""
        self.to_binary(a, n_bits)

    def assert_is_less_or_equal(self, a: Operand, b: Operand, n_bits: int) -> None:
        """Assert a <= b as integers, for a and b in [0, 2^n_bits).

        Both operands are range checked, then b - a must also fit in n_bits.
        If a > b the difference wraps to P - (a - b), which needs more than
        n_bits bits as long as n_bits < FIELD_BITS - 1.
        """
        if n_bits >= FIELD_BITS - 1:
            raise ValueError(f"n_bits must be < {FIELD_BITS - 1} for a sound comparison")
        self.range_check(a, n_bits)
        self.range_check(b, n_bits)
        self.range_check(self.sub(b, a), n_bits)

    def is_less_or_equal(self, a: Operand, b: Operand, n_bits: int) -> Variable:
        """Return 1 if a <= b as integers else 0, for a and b in [0, 2^n_bits)."""
        if n_bits >= FIELD_BITS - 1:
            raise ValueError(f"n_bits must be < {FIELD_BITS - 1} for a sound comparison")
        self.range_check(a, n_bits)
        self.range_check(b, n_bits)
        return self._le_bit(a, b, n_bits)

    def cmp(self, a: Operand, b: Operand, n_bits: int) -> Variable:
        """Return 1 if a > b, 0 if a == b and -1 (P - 1) if a < b.

        Operands are range checked to n_bits, so the result follows integer
        order rather than the order of field representatives.
        """
        if n_bits >= FIELD_BITS - 1:
            raise ValueError(f"n_bits must be < {FIELD_BITS - 1} for a sound comparison")
        self.range_check(a, n_bits)
        self.range_check(b, n_bits)
        greater = self.sub(1, self._le_bit(a, b, n_bits))
        less = self.sub(1, self._le_bit(b, a, n_bits))
        return self.sub(greater, less)

    def _le_bit(self, a: Operand, b: Operand, n_bits: int) -> Variable:
        # b - a + 2^n_bits lies in [1, 2^(n_bits+1)); the top bit is set iff a <= b
        bits = self.to_binary(self.add(self.sub(b, a), 1 << n_bits), n_bits + 1)
        return as_variable(bits[n_bits])

    # --- Selection ---

    def select(self, cond: Operand, if_true: Operand, if_false: Operand) -> Variable:
        """Return cond ? if_true : if_false. `cond` must be boolean."""
        return self.add(if_false, self.mul(cond, self.sub(if_true, if_false)))

    def is_zero(self, a: Operand) -> Variable:
        """Return 1 if a == 0 else 0."""
        a = as_variable(a)
        if a.is_constant():
            return Variable.constant(int(a.constant_value() == 0))
        (inv,) = self.hint(lambda v: [inv_mod(v[0])], [a], 1)
        out = self.sub(1, self.mul(a, inv))
        self.assert_product(a, out, 0)
        return out
