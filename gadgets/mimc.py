"""In-circuit MiMC, matching primitives/mimc.py.

Each round costs three constraints (t^2, t^4, t^5), so hashing k elements
costs 3 * N_ROUNDS * k.
"""

from typing import List

from constraints.base import API, Operand, Variable
from primitives.mimc import ROUND_CONSTANTS


def encrypt(api: API, message: Operand, key: Operand) -> Variable:
    m = message
    for c in ROUND_CONSTANTS:
        t = api.add(m, key, c)
        t2 = api.mul(t, t)
        t4 = api.mul(t2, t2)
        m = api.mul(t4, t)
    return api.add(m, key)


class MiMC:
    """Incremental hasher: write() inputs, then sum()."""

    def __init__(self, api: API) -> None:
        self.api = api
        self.data: List[Operand] = []

    def write(self, *values: Operand) -> None:
        self.data.extend(values)

    def reset(self) -> None:
        self.data = []

    def sum(self) -> Variable:
        api = self.api
        h: Operand = 0
        for x in self.data:
            h = api.add(encrypt(api, x, h), h, x)
        return api.add(h, 0)


def mimc_hash(api: API, *values: Operand) -> Variable:
    hasher = MiMC(api)
    hasher.write(*values)
    return hasher.sum()


def hash_two(api: API, left: Operand, right: Operand) -> Variable:
    return mimc_hash(api, left, right)
