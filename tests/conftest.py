"""Pytest configuration and shared fixtures for the rollup circuit tests."""

import sys
from pathlib import Path

import pytest

# tests/ sits at the repository root, so parent is the import root
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from constraints.base import Variable  # noqa: E402
from constraints.builder import R1CSBuilder  # noqa: E402


def _resolve(out, wires):
    if isinstance(out, Variable):
        return out.evaluate(wires)
    if isinstance(out, (list, tuple)):
        return [_resolve(o, wires) for o in out]
    return out


@pytest.fixture
def run_gadget():
    """Run a gadget over secret inputs.

    Usage:
        satisfied, outputs = run_gadget(lambda api, a, b: api.mul(a, b), 3, 4)

    Returns (satisfied, outputs) where outputs mirrors what the gadget
    returned with every Variable replaced by its solved value.
    """
    def _run(build, *values):
        builder = R1CSBuilder()
        args = [builder.secret_input(f"x{i}") for i in range(len(values))]
        out = build(builder, *args)
        cs = builder.build()
        wires = cs.solve([], list(values))
        return cs.is_satisfied(wires), _resolve(out, wires)
    return _run
