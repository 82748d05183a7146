"""Batch circuit: batch_size transition slots plus batch-level invariants.

Input structs and their default visibility:

    account   index, nonce secret; balance public; public_key (point) secret
    transfer  amount public; keys, signature and Merkle siblings secret
    roots     before, after public

Overrides from RollupConfig.visibility are applied per "schema.field".

Example:
    config = RollupConfig(batch_size=2)
    cs = pipeline.compile(RollupCircuit.shape(config))
    witness = new_witness(RollupCircuit.assign(config, batch))
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from constraints.base import API
from constraints.schema import Circuit, inputs, public, secret
from primitives.babyjubjub import Point
from primitives.eddsa import Signature
from rollup.config import RollupConfig
from rollup.model import Account, Batch, BatchSlot, Transfer
from rollup.transition import TransitionConstraints


# --- Input Structs ---

@dataclass
class PointInputs:
    __schema__ = "point"
    x: Any = secret()
    y: Any = secret()

    @classmethod
    def of(cls, p: Optional[Point]) -> "PointInputs":
        return cls() if p is None else cls(p.x, p.y)


@dataclass
class SignatureInputs:
    __schema__ = "signature"
    r_x: Any = secret()
    r_y: Any = secret()
    s: Any = secret()

    @classmethod
    def of(cls, sig: Optional[Signature]) -> "SignatureInputs":
        return cls() if sig is None else cls(sig.r.x, sig.r.y, sig.s)


@dataclass
class AccountInputs:
    __schema__ = "account"
    index: Any = secret()
    nonce: Any = secret()
    balance: Any = public()
    public_key: Optional[PointInputs] = inputs()


@dataclass
class TransferInputs:
    __schema__ = "transfer"
    amount: Any = public()
    sender_public_key: Optional[PointInputs] = inputs()
    receiver_public_key: Optional[PointInputs] = inputs()
    signature: Optional[SignatureInputs] = inputs()
    merkle_proof_sender_before: List[Any] = secret(default_factory=list)
    merkle_proof_receiver_before: List[Any] = secret(default_factory=list)


@dataclass
class SlotInputs:
    __schema__ = "slot"
    sender_before: AccountInputs = inputs()
    receiver_before: AccountInputs = inputs()
    sender_after: AccountInputs = inputs()
    receiver_after: AccountInputs = inputs()
    transfer: TransferInputs = inputs()


@dataclass
class RootInputs:
    __schema__ = "roots"
    before: Any = public()
    after: Any = public()


# --- Circuit ---

@dataclass
class RollupCircuit(Circuit):
    """Proves a batch of transfers was applied to the committed account tree."""
    __schema__ = "rollup"
    config: RollupConfig = field(default_factory=RollupConfig)
    roots: Optional[RootInputs] = inputs()
    slots: List[SlotInputs] = inputs(default_factory=list)

    @classmethod
    def shape(cls, config: RollupConfig) -> "RollupCircuit":
        """Unassigned circuit for compilation."""
        slots = [_slot_shape(config) for _ in range(config.batch_size)]
        roots = RootInputs() if config.check_inclusion else None
        return cls(config=config, roots=roots, slots=slots)

    @classmethod
    def assign(cls, config: RollupConfig, batch: Batch) -> "RollupCircuit":
        """Concrete assignment of `batch`.

        Raises:
            StructuralError: If the batch does not match `config`
        """
        batch.validate(config)
        slots = [_slot_values(config, slot) for slot in batch.slots]
        roots = RootInputs(batch.root_before, batch.root_after) if config.check_inclusion else None
        return cls(config=config, roots=roots, slots=slots)

    def visibility_overrides(self) -> Mapping[str, str]:
        return self.config.visibility

    def define(self, api: API) -> None:
        config = self.config
        transition = TransitionConstraints(api, config)

        root = self.roots.before if self.roots is not None else 0
        for i, slot in enumerate(self.slots):
            with api.scope(f"slot[{i}]"):
                root = transition.define(slot, root)

        if config.check_inclusion:
            with api.scope("root_after"):
                api.assert_is_equal(root, self.roots.after)

        if config.assert_conservation:
            with api.scope("conservation"):
                before = [b for s in self.slots for b in (s.sender_before.balance, s.receiver_before.balance)]
                after = [b for s in self.slots for b in (s.sender_after.balance, s.receiver_after.balance)]
                api.assert_is_equal(api.add(0, 0, *before), api.add(0, 0, *after))


# --- Construction Helpers ---

def _has_keys(config: RollupConfig) -> bool:
    return config.check_signatures or config.check_inclusion


def _account_shape(config: RollupConfig) -> AccountInputs:
    return AccountInputs(public_key=PointInputs() if _has_keys(config) else None)


def _slot_shape(config: RollupConfig) -> SlotInputs:
    depth = config.tree_depth if config.check_inclusion else 0
    transfer = TransferInputs(
        sender_public_key=PointInputs() if config.check_signatures else None,
        receiver_public_key=PointInputs() if config.check_signatures else None,
        signature=SignatureInputs() if config.check_signatures else None,
        merkle_proof_sender_before=[None] * depth,
        merkle_proof_receiver_before=[None] * depth,
    )
    return SlotInputs(
        sender_before=_account_shape(config),
        receiver_before=_account_shape(config),
        sender_after=_account_shape(config),
        receiver_after=_account_shape(config),
        transfer=transfer,
    )


def _account_values(config: RollupConfig, account: Account) -> AccountInputs:
    key = PointInputs.of(account.public_key) if _has_keys(config) else None
    return AccountInputs(index=account.index, nonce=account.nonce, balance=account.balance, public_key=key)


def _slot_values(config: RollupConfig, slot: BatchSlot) -> SlotInputs:
    t: Transfer = slot.transfer
    if config.check_signatures:
        sender_key = PointInputs.of(t.sender_public_key)
        receiver_key = PointInputs.of(t.receiver_public_key)
        signature = SignatureInputs.of(t.signature)
    else:
        sender_key = receiver_key = signature = None
    if config.check_inclusion:
        sender_path = list(t.merkle_proof_sender_before)
        receiver_path = list(t.merkle_proof_receiver_before)
    else:
        sender_path, receiver_path = [], []
    return SlotInputs(
        sender_before=_account_values(config, slot.sender_before),
        receiver_before=_account_values(config, slot.receiver_before),
        sender_after=_account_values(config, slot.sender_after),
        receiver_after=_account_values(config, slot.receiver_after),
        transfer=TransferInputs(
            amount=t.amount,
            sender_public_key=sender_key,
            receiver_public_key=receiver_key,
            signature=signature,
            merkle_proof_sender_before=sender_path,
            merkle_proof_receiver_before=receiver_path,
        ),
    )
