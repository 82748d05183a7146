"""Accounts, transfers and batches as the operator sees them (native values)."""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from primitives.babyjubjub import IDENTITY, Point
from primitives.eddsa import Signature
from primitives.mimc import mimc_hash
from rollup.config import ReceiverNoncePolicy, RollupConfig, StructuralError


# --- Accounts and Transfers ---

@dataclass(frozen=True)
class Account:
    """One ledger entry at a point in time.

    The leaf committed in the account tree is MiMC(index, nonce, balance, pk.x, pk.y).
    """
    index: int
    nonce: int = 0
    balance: int = 0
    public_key: Point = IDENTITY

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Account index must be non-negative, got {self.index}")
        if self.nonce < 0:
            raise ValueError(f"Account nonce must be non-negative, got {self.nonce}")
        if self.balance < 0:
            raise ValueError(f"Account balance must be non-negative, got {self.balance}")

    def leaf(self) -> int:
        return mimc_hash([self.index, self.nonce, self.balance, self.public_key.x, self.public_key.y])

    def debited(self, amount: int) -> "Account":
        """State after originating a transfer of `amount`.

        Raises:
            ValueError: If the amount is negative or exceeds the balance
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        if amount > self.balance:
            raise ValueError(f"Insufficient balance: account {self.index} has {self.balance}, needs {amount}")
        return replace(self, nonce=self.nonce + 1, balance=self.balance - amount)

    def credited(self, amount: int, policy: ReceiverNoncePolicy = ReceiverNoncePolicy.INCREMENT) -> "Account":
        """State after receiving `amount`."""
        nonce = self.nonce + 1 if policy is ReceiverNoncePolicy.INCREMENT else self.nonce
        return replace(self, nonce=nonce, balance=self.balance + amount)


@dataclass(frozen=True)
class Transfer:
    """One intended balance movement plus its authorization and inclusion data.

    Merkle proofs are sibling lists, leaf to root. The receiver's proof is
    taken against the tree after the sender's update in the same slot.
    """
    amount: int
    sender_public_key: Optional[Point] = None
    receiver_public_key: Optional[Point] = None
    signature: Optional[Signature] = None
    merkle_proof_sender_before: Optional[Tuple[int, ...]] = None
    merkle_proof_receiver_before: Optional[Tuple[int, ...]] = None


def apply_transfer(
    sender: Account,
    receiver: Account,
    amount: int,
    policy: ReceiverNoncePolicy = ReceiverNoncePolicy.INCREMENT,
) -> Tuple[Account, Account]:
    """Return (sender_after, receiver_after) for a transfer between distinct accounts."""
    return sender.debited(amount), receiver.credited(amount, policy)


# --- Batches ---

@dataclass(frozen=True)
class BatchSlot:
    sender_before: Account
    receiver_before: Account
    sender_after: Account
    receiver_after: Account
    transfer: Transfer

    def accounts(self) -> Tuple[Account, Account, Account, Account]:
        return (self.sender_before, self.receiver_before, self.sender_after, self.receiver_after)


@dataclass(frozen=True)
class Batch:
    """Fixed-size sequence of slots plus the account roots around it."""
    slots: Tuple[BatchSlot, ...]
    root_before: Optional[int] = None
    root_after: Optional[int] = None

    def validate(self, config: RollupConfig) -> None:
        """Check the batch has the shape `config` expects.

        Raises:
            StructuralError: On a wrong slot count, a missing slot member, or
                missing/misshapen authorization or inclusion data
        """
        if len(self.slots) != config.batch_size:
            raise StructuralError(f"Batch has {len(self.slots)} slots, expected {config.batch_size}")

        if config.check_inclusion and (self.root_before is None or self.root_after is None):
            raise StructuralError("Batch is missing root_before/root_after")

        for i, slot in enumerate(self.slots):
            if not isinstance(slot, BatchSlot):
                raise StructuralError(f"Slot {i} is {type(slot).__name__}, expected BatchSlot")
            for name in ("sender_before", "receiver_before", "sender_after", "receiver_after"):
                if not isinstance(getattr(slot, name), Account):
                    raise StructuralError(f"Slot {i} is missing account {name}")
            if not isinstance(slot.transfer, Transfer):
                raise StructuralError(f"Slot {i} is missing its transfer")
            _validate_transfer(i, slot.transfer, config)

    def balances_conserved(self) -> bool:
        before = sum(s.sender_before.balance + s.receiver_before.balance for s in self.slots)
        after = sum(s.sender_after.balance + s.receiver_after.balance for s in self.slots)
        return before == after


def _validate_transfer(i: int, transfer: Transfer, config: RollupConfig) -> None:
    if config.check_signatures:
        if transfer.signature is None:
            raise StructuralError(f"Slot {i} transfer is missing its signature")
        if transfer.sender_public_key is None or transfer.receiver_public_key is None:
            raise StructuralError(f"Slot {i} transfer is missing sender/receiver public keys")
    if config.check_inclusion:
        for name in ("merkle_proof_sender_before", "merkle_proof_receiver_before"):
            proof = getattr(transfer, name)
            if proof is None:
                raise StructuralError(f"Slot {i} transfer is missing {name}")
            if len(proof) != config.tree_depth:
                raise StructuralError(
                    f"Slot {i} {name} has {len(proof)} siblings, expected {config.tree_depth}"
                )
