"""Tests for the constraint API, the R1CS builder and the input schema."""

from dataclasses import dataclass
from typing import Any, List, Optional

import pytest

from constraints import (
    Circuit,
    R1CSBuilder,
    Variable,
    Visibility,
    compile_circuit,
    flatten,
    inputs,
    partition,
    public,
    secret,
)
from constraints.base import ONE_WIRE, as_variable
from primitives.field import FIELD_BITS, P


# --- Test Circuits ---

@dataclass
class CubicCircuit(Circuit):
    """x^3 + x + 5 == y"""
    __schema__ = "cubic"
    x: Any = secret()
    y: Any = public()

    def define(self, api) -> None:
        x3 = api.mul(api.mul(self.x, self.x), self.x)
        with api.scope("equation"):
            api.assert_is_equal(self.y, api.add(x3, self.x, 5))


@dataclass
class ScoreUpCircuit(Circuit):
    """x > y"""
    __schema__ = "score_up"
    x: Any = secret()
    y: Any = public()

    def define(self, api) -> None:
        api.assert_is_equal(api.cmp(self.x, self.y, 32), 1)


@dataclass
class Pair:
    __schema__ = "pair"
    left: Any = secret()
    right: Any = public()


@dataclass
class NestedCircuit(Circuit):
    __schema__ = "nested"
    total: Any = public()
    pairs: List[Pair] = inputs(default_factory=list)
    extra: Optional[Pair] = inputs()
    weights: List[Any] = secret(default_factory=list)

    def define(self, api) -> None:
        terms = [api.add(p.left, p.right) for p in self.pairs]
        api.assert_is_equal(api.add(0, 0, *terms, *self.weights), self.total)


@dataclass
class OverriddenCubic(CubicCircuit):
    def visibility_overrides(self):
        return {"cubic.x": "public", "cubic.y": "secret"}


class TestVariable:
    """Linear combinations."""

    def test_constant(self) -> None:
        v = Variable.constant(7)
        assert v.is_constant()
        assert v.constant_value() == 7
        assert v.terms == {ONE_WIRE: 7}

    def test_zero_terms_dropped(self) -> None:
        v = Variable({1: P, 2: 3})
        assert v.terms == {2: 3}
        assert Variable({}).is_constant()
        assert Variable({}).constant_value() == 0

    def test_evaluate(self) -> None:
        v = Variable({0: 2, 1: 3, 2: P - 1})
        assert v.evaluate([1, 10, 4]) == 2 + 30 - 4

    def test_as_variable_rejects_non_ints(self) -> None:
        assert as_variable(5).constant_value() == 5
        with pytest.raises(TypeError):
            as_variable(True)
        with pytest.raises(TypeError):
            as_variable(1.5)


class TestLinearOperations:
    """Linear operations never emit rows."""

    def test_constant_folding(self) -> None:
        api = R1CSBuilder()
        v = api.sub(api.add(3, 4, 5), api.scale(2, 3))
        assert v.is_constant()
        assert v.constant_value() == 6
        assert api.build().n_constraints == 0

    def test_negation_wraps(self) -> None:
        api = R1CSBuilder()
        assert api.neg(1).constant_value() == P - 1

    def test_terms_cancel(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        assert api.sub(x, x).is_constant()


class TestBuilder:
    """Row emission and input ordering."""

    def test_mul_by_constant_is_free(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        out = api.mul(x, 3)
        assert out.terms == {x_wire(x): 3}
        assert api.build().n_constraints == 0

    def test_mul_emits_one_row(self) -> None:
        api = R1CSBuilder()
        x, y = api.secret_input("x"), api.secret_input("y")
        api.mul(x, y)
        cs = api.build()
        assert cs.n_constraints == 1
        assert cs.n_wires == 4

    def test_div(self, run_gadget) -> None:
        satisfied, out = run_gadget(lambda api, a, b: api.div(a, b), 6, 3)
        assert satisfied
        assert out == 2

    def test_div_by_zero_wire_is_unsatisfiable(self, run_gadget) -> None:
        satisfied, _ = run_gadget(lambda api, a, b: api.div(a, b), 6, 0)
        assert not satisfied

    def test_div_by_constant_zero(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        with pytest.raises(ZeroDivisionError):
            api.div(x, 0)

    def test_false_constant_assertion(self) -> None:
        api = R1CSBuilder()
        with pytest.raises(ValueError):
            api.assert_is_equal(1, 2)

    def test_true_constant_assertion_is_free(self) -> None:
        api = R1CSBuilder()
        api.assert_is_equal(api.add(1, 1), 2)
        assert api.build().n_constraints == 0

    def test_public_after_secret(self) -> None:
        api = R1CSBuilder()
        api.secret_input("s")
        with pytest.raises(ValueError):
            api.public_input("p")

    def test_input_after_hint(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        api.mul(x, x)
        with pytest.raises(ValueError):
            api.secret_input("late")

    def test_scope_labels(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        api.mul(x, x)
        with api.scope("outer"):
            with api.scope("inner"):
                api.mul(x, x)
            api.assert_is_boolean(x)
        assert api.build().labels == ("<root>", "outer/inner", "outer")

    def test_solve_rejects_wrong_input_count(self) -> None:
        api = R1CSBuilder()
        api.secret_input("x")
        cs = api.build()
        with pytest.raises(ValueError):
            cs.solve([], [1, 2])
        with pytest.raises(ValueError):
            cs.solve([1], [1])

    def test_first_unsatisfied(self) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        api.assert_is_boolean(x)
        api.assert_is_equal(x, 1)
        cs = api.build()
        assert cs.first_unsatisfied(cs.solve([], [1])) is None
        assert cs.first_unsatisfied(cs.solve([], [0])) == 1
        assert cs.first_unsatisfied(cs.solve([], [2])) == 0


def x_wire(v: Variable) -> int:
    return next(iter(v.terms))


class TestBinary:
    """Bit decomposition, range checks and comparison."""

    def test_to_binary(self, run_gadget) -> None:
        satisfied, bits = run_gadget(lambda api, a: api.to_binary(a, 4), 6)
        assert satisfied
        assert bits == [0, 1, 1, 0]

    def test_to_binary_overflow(self, run_gadget) -> None:
        satisfied, _ = run_gadget(lambda api, a: api.to_binary(a, 3), 8)
        assert not satisfied

    def test_to_binary_constant(self) -> None:
        api = R1CSBuilder()
        bits = api.to_binary(5, 3)
        assert [b.constant_value() for b in bits] == [1, 0, 1]
        with pytest.raises(ValueError):
            api.to_binary(8, 3)

    @pytest.mark.parametrize("n_bits", [0, FIELD_BITS + 1])
    def test_to_binary_width(self, n_bits: int) -> None:
        api = R1CSBuilder()
        x = api.secret_input("x")
        with pytest.raises(ValueError):
            api.to_binary(x, n_bits)

    def test_strict_decomposition(self, run_gadget) -> None:
        """Strict mode accepts the canonical bits of P - 1 and costs extra rows."""
        satisfied, _ = run_gadget(lambda api, a: api.to_binary(a, FIELD_BITS, strict=True), P - 1)
        assert satisfied

        loose, strict = R1CSBuilder(), R1CSBuilder()
        loose.to_binary(loose.secret_input("x"), FIELD_BITS)
        strict.to_binary(strict.secret_input("x"), FIELD_BITS, strict=True)
        assert strict.build().n_constraints > loose.build().n_constraints

    @pytest.mark.parametrize("value,ok", [(0, True), (100, True), (101, False), (255, False)])
    def test_bits_le_constant(self, run_gadget, value: int, ok: bool) -> None:
        satisfied, _ = run_gadget(lambda api, a: api.assert_bits_le_constant(api.to_binary(a, 8), 100), value)
        assert satisfied is ok

    @pytest.mark.parametrize("a,b,ok", [
        (3, 5, True),
        (5, 5, True),
        (0, 255, True),
        (6, 5, False),
        (300, 400, False),  # operands must fit in 8 bits
        (P - 1, 5, False),
    ])
    def test_less_or_equal(self, run_gadget, a: int, b: int, ok: bool) -> None:
        satisfied, _ = run_gadget(lambda api, x, y: api.assert_is_less_or_equal(x, y, 8), a, b)
        assert satisfied is ok

    def test_less_or_equal_width_limit(self) -> None:
        api = R1CSBuilder()
        x, y = api.secret_input("x"), api.secret_input("y")
        with pytest.raises(ValueError):
            api.assert_is_less_or_equal(x, y, FIELD_BITS - 1)

    @pytest.mark.parametrize("a,b,expected", [
        (3, 5, 1),
        (5, 5, 1),
        (6, 5, 0),
        (0, 255, 1),
        (255, 0, 0),
    ])
    def test_is_less_or_equal(self, run_gadget, a: int, b: int, expected: int) -> None:
        satisfied, out = run_gadget(lambda api, x, y: api.is_less_or_equal(x, y, 8), a, b)
        assert satisfied
        assert out == expected

    @pytest.mark.parametrize("a,b,expected", [(2, 1, 1), (7, 7, 0), (1, 2, P - 1), (0, 255, P - 1)])
    def test_cmp(self, run_gadget, a: int, b: int, expected: int) -> None:
        """cmp follows integer order: 1, 0 or -1."""
        satisfied, out = run_gadget(lambda api, x, y: api.cmp(x, y, 8), a, b)
        assert satisfied
        assert out == expected

    def test_cmp_rejects_wide_operands(self, run_gadget) -> None:
        """A wrapped field value does not compare as a small integer."""
        satisfied, _ = run_gadget(lambda api, x, y: api.cmp(x, y, 8), P - 1, 5)
        assert not satisfied

    def test_cmp_constants(self) -> None:
        api = R1CSBuilder()
        assert api.cmp(9, 4, 8).constant_value() == 1
        assert api.cmp(4, 9, 8).constant_value() == P - 1

    @pytest.mark.parametrize("value,expected", [(0, 1), (1, 0), (P - 1, 0)])
    def test_is_zero(self, run_gadget, value: int, expected: int) -> None:
        satisfied, out = run_gadget(lambda api, a: api.is_zero(a), value)
        assert satisfied
        assert out == expected

    @pytest.mark.parametrize("cond,expected", [(1, 10), (0, 20)])
    def test_select(self, run_gadget, cond: int, expected: int) -> None:
        satisfied, out = run_gadget(lambda api, c, a, b: api.select(c, a, b), cond, 10, 20)
        assert satisfied
        assert out == expected


class TestSchema:
    """Visibility tags, walk order and compilation."""

    def test_compile_orders_public_first(self) -> None:
        cs = compile_circuit(CubicCircuit())
        assert cs.public_names == ("y",)
        assert cs.secret_names == ("x",)
        assert cs.n_constraints == 3

    def test_compile_does_not_mutate(self) -> None:
        circuit = CubicCircuit()
        compile_circuit(circuit)
        assert circuit.x is None and circuit.y is None

    def test_compiled_cubic_solves(self) -> None:
        cs = compile_circuit(CubicCircuit())
        assert cs.is_satisfied(cs.solve([35], [3]))
        wires = cs.solve([36], [3])
        assert cs.labels[cs.first_unsatisfied(wires)] == "equation"

    @pytest.mark.parametrize("score,threshold,ok", [(2, 1, True), (1, 1, False), (1, 2, False), (1 << 32, 1, False)])
    def test_score_above_threshold(self, score: int, threshold: int, ok: bool) -> None:
        """A secret score proven strictly greater than a public threshold."""
        cs = compile_circuit(ScoreUpCircuit())
        assert cs.public_names == ("y",)
        assert cs.is_satisfied(cs.solve([threshold], [score])) is ok

    def test_visibility_overrides(self) -> None:
        cs = compile_circuit(OverriddenCubic())
        assert cs.public_names == ("x",)
        assert cs.secret_names == ("y",)

    def test_nested_paths(self) -> None:
        circuit = NestedCircuit(total=10, pairs=[Pair(1, 2), Pair(3, 4)], weights=[0])
        leaves = flatten(circuit, {})
        assert [path for path, _, _ in leaves] == [
            "total",
            "pairs[0].left",
            "pairs[0].right",
            "pairs[1].left",
            "pairs[1].right",
            "weights[0]",
        ]
        public_leaves, secret_leaves = partition(leaves)
        assert public_leaves == [("total", 10), ("pairs[0].right", 2), ("pairs[1].right", 4)]
        assert secret_leaves == [("pairs[0].left", 1), ("pairs[1].left", 3), ("weights[0]", 0)]

    def test_nested_override_by_schema(self) -> None:
        circuit = NestedCircuit(pairs=[Pair(), Pair()])
        leaves = flatten(circuit, {"pair.right": "secret"})
        assert all(vis is Visibility.SECRET for path, vis, _ in leaves if path != "total")

    def test_nested_compile(self) -> None:
        cs = compile_circuit(NestedCircuit(pairs=[Pair(), Pair()], weights=[None]))
        wires = cs.solve([10, 2, 4], [1, 3, 0])
        assert cs.is_satisfied(wires)
        assert not cs.is_satisfied(cs.solve([11, 2, 4], [1, 3, 0]))
