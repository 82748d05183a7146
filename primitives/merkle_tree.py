"""Fixed-depth binary Merkle tree of account leaves using MiMC."""

from dataclasses import dataclass, field
from typing import List, Sequence

from primitives.field import P
from primitives.mimc import hash_two

# --- Type Aliases ---

MerkleRoot = int
LeafHash = int

EMPTY_LEAF = 0


# --- Data Classes ---

@dataclass(frozen=True)
class MerkleProof:
    """Authentication path for one leaf.

    Attributes:
        index: Leaf position; bit i selects whether the node at level i is a
            right child (1) or a left child (0)
        siblings: Sibling hash per level, from leaf to root
    """
    index: int
    siblings: tuple = field(default_factory=tuple)

    @property
    def depth(self) -> int:
        return len(self.siblings)

    def compute_root(self, leaf: LeafHash) -> MerkleRoot:
        """Hash `leaf` up the path."""
        node = leaf
        for level, sibling in enumerate(self.siblings):
            if (self.index >> level) & 1:
                node = hash_two(sibling, node)
            else:
                node = hash_two(node, sibling)
        return node

    def verify(self, root: MerkleRoot, leaf: LeafHash) -> bool:
        return self.compute_root(leaf) == root


# --- Merkle Tree ---

class MerkleTree:
    """Binary Merkle tree with 2^depth leaves, empty leaves hashed as zero."""

    def __init__(self, depth: int) -> None:
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        self.depth = depth
        self.n_leaves = 1 << depth

        # levels[0] are leaves, levels[depth] is [root]
        self.levels: List[List[int]] = []
        self.merkelize([EMPTY_LEAF] * self.n_leaves)

    # --- Core Operations ---

    def merkelize(self, leaves: Sequence[LeafHash]) -> None:
        """Build the tree from a full list of leaves."""
        if len(leaves) > self.n_leaves:
            raise ValueError(f"Tree of depth {self.depth} holds {self.n_leaves} leaves, got {len(leaves)}")
        level = [int(x) % P for x in leaves] + [EMPTY_LEAF] * (self.n_leaves - len(leaves))
        self.levels = [level]
        while len(level) > 1:
            level = [hash_two(level[i], level[i + 1]) for i in range(0, len(level), 2)]
            self.levels.append(level)

    def update(self, index: int, leaf: LeafHash) -> MerkleRoot:
        """Replace one leaf and rehash its path. Returns the new root."""
        self._check_index(index)
        self.levels[0][index] = int(leaf) % P
        node_idx = index
        for level in range(self.depth):
            parent = node_idx >> 1
            left = self.levels[level][parent * 2]
            right = self.levels[level][parent * 2 + 1]
            self.levels[level + 1][parent] = hash_two(left, right)
            node_idx = parent
        return self.get_root()

    # --- Queries ---

    def get_root(self) -> MerkleRoot:
        return self.levels[self.depth][0]

    def get_leaf(self, index: int) -> LeafHash:
        self._check_index(index)
        return self.levels[0][index]

    def get_proof(self, index: int) -> MerkleProof:
        """Return the authentication path of leaf `index`."""
        self._check_index(index)
        siblings = []
        node_idx = index
        for level in range(self.depth):
            siblings.append(self.levels[level][node_idx ^ 1])
            node_idx >>= 1
        return MerkleProof(index=index, siblings=tuple(siblings))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.n_leaves:
            raise IndexError(f"Leaf index {index} out of range [0, {self.n_leaves})")
