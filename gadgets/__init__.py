"""In-circuit counterparts of the native primitives."""

from .mimc import MiMC, hash_two, mimc_hash
from .twisted_edwards import PointVar
from . import eddsa, merkle, twisted_edwards

__all__ = [
    "MiMC",
    "PointVar",
    "eddsa",
    "hash_two",
    "merkle",
    "mimc_hash",
    "twisted_edwards",
]
