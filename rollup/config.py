"""Rollup circuit configuration."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from constraints.schema import Visibility
from primitives.field import FIELD_BITS

SUPPORTED_CURVES = ("bn254",)


class StructuralError(ValueError):
    """Batch or circuit shape is malformed (wrong slot count, missing members)."""
    pass


class ReceiverNoncePolicy(str, Enum):
    """How a transfer affects the receiver's nonce."""
    INCREMENT = "increment"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class RollupConfig:
    """Shape and policy of a batch circuit.

    Fields:
        batch_size: Transfers per proof
        tree_depth: Sibling levels per Merkle path (2^tree_depth accounts)
        balance_bits: Bit width of balances and amounts
        receiver_nonce_policy: Whether receiving a transfer bumps the nonce
        check_signatures: Verify the sender's EdDSA signature in-circuit
        check_inclusion: Verify Merkle membership and thread the account root
        assert_conservation: Assert sum(before balances) == sum(after balances)
        visibility: Overrides keyed by "schema.field", e.g. {"account.balance": "secret"}
        curve: Proving curve, delegated to the pipeline
    """
    batch_size: int = 1
    tree_depth: int = 4
    balance_bits: int = 64
    receiver_nonce_policy: ReceiverNoncePolicy = ReceiverNoncePolicy.INCREMENT
    check_signatures: bool = True
    check_inclusion: bool = True
    assert_conservation: bool = True
    visibility: Dict[str, str] = field(default_factory=dict)
    curve: str = "bn254"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise StructuralError(f"batch_size must be >= 1, got {self.batch_size}")
        if not 1 <= self.tree_depth <= 32:
            raise ValueError(f"tree_depth must be in [1, 32], got {self.tree_depth}")
        # a receiver balance sums batch_size amounts; keep clear of the modulus
        if not 1 <= self.balance_bits <= FIELD_BITS - 8:
            raise ValueError(f"balance_bits must be in [1, {FIELD_BITS - 8}], got {self.balance_bits}")
        if self.curve not in SUPPORTED_CURVES:
            raise ValueError(f"Unsupported curve {self.curve!r}, expected one of {SUPPORTED_CURVES}")
        object.__setattr__(self, "receiver_nonce_policy", ReceiverNoncePolicy(self.receiver_nonce_policy))
        for key, value in self.visibility.items():
            if "." not in key:
                raise ValueError(f"Visibility key {key!r} must be 'schema.field'")
            Visibility(value)

    @property
    def n_accounts(self) -> int:
        return 1 << self.tree_depth

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchSize": self.batch_size,
            "treeDepth": self.tree_depth,
            "balanceBits": self.balance_bits,
            "receiverNoncePolicy": self.receiver_nonce_policy.value,
            "checkSignatures": self.check_signatures,
            "checkInclusion": self.check_inclusion,
            "assertConservation": self.assert_conservation,
            "visibility": dict(self.visibility),
            "curve": self.curve,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RollupConfig":
        defaults = cls()
        return cls(
            batch_size=data.get("batchSize", defaults.batch_size),
            tree_depth=data.get("treeDepth", defaults.tree_depth),
            balance_bits=data.get("balanceBits", defaults.balance_bits),
            receiver_nonce_policy=data.get("receiverNoncePolicy", defaults.receiver_nonce_policy),
            check_signatures=data.get("checkSignatures", defaults.check_signatures),
            check_inclusion=data.get("checkInclusion", defaults.check_inclusion),
            assert_conservation=data.get("assertConservation", defaults.assert_conservation),
            visibility=dict(data.get("visibility", {})),
            curve=data.get("curve", defaults.curve),
        )

    @classmethod
    def from_json(cls, path: str) -> "RollupConfig":
        """Load from a rollup config JSON file.

        Example JSON structure:
        {
          "batchSize": 2,
          "treeDepth": 4,
          "balanceBits": 64,
          "receiverNoncePolicy": "increment",
          "checkSignatures": true,
          "checkInclusion": true,
          "assertConservation": true,
          "visibility": {"account.balance": "secret"},
          "curve": "bn254"
        }
        """
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_json(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
