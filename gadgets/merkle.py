"""In-circuit Merkle path hashing, matching primitives/merkle_tree.py."""

from typing import Sequence

from constraints.base import API, Operand, Variable
from gadgets.mimc import hash_two


def compute_root(api: API, leaf: Operand, path_bits: Sequence[Operand], siblings: Sequence[Operand]) -> Variable:
    """Hash `leaf` up the tree. Bit i set means the node is a right child at level i."""
    if len(path_bits) != len(siblings):
        raise ValueError(f"Path has {len(path_bits)} bits but {len(siblings)} siblings")
    node: Operand = leaf
    for bit, sibling in zip(path_bits, siblings):
        # one row for both children: left = node + swap, right = sibling - swap
        swap = api.mul(bit, api.sub(sibling, node))
        left = api.add(node, swap)
        right = api.sub(sibling, swap)
        node = hash_two(api, left, right)
    return api.add(node, 0)


def assert_inclusion(
    api: API,
    root: Operand,
    leaf: Operand,
    path_bits: Sequence[Operand],
    siblings: Sequence[Operand],
) -> None:
    api.assert_is_equal(compute_root(api, leaf, path_bits, siblings), root)
