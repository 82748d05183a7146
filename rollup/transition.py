"""Transition constraints for one batch slot.

For a slot (sender_before, receiver_before, sender_after, receiver_after,
transfer) the builder asserts:

    1. sender nonce advances by exactly one
    2. receiver nonce follows the configured policy (+1 or unchanged)
    3. indices and public keys are unchanged by the update
    4. amount <= sender_before.balance (range-checked comparator)
    5. sender_after.balance == sender_before.balance - amount
    6. receiver_after.balance == receiver_before.balance + amount
    7. the sender signed (sender nonce, receiver index, amount)
    8. both before-leaves are members of the account tree

Item 8 threads the tree root through the slot: the sender is checked against
the incoming root, the sender's after-leaf produces an intermediate root, the
receiver is checked against that, and the receiver's after-leaf produces the
outgoing root. Reusing an account in later slots is therefore sound.

The builder only emits constraints; it never inspects witness values.
"""

from typing import TYPE_CHECKING, List

from constraints.base import API, Operand, Variable
from gadgets import eddsa, merkle
from gadgets.mimc import mimc_hash
from gadgets.twisted_edwards import PointVar
from rollup.config import ReceiverNoncePolicy, RollupConfig

if TYPE_CHECKING:
    from rollup.circuit import AccountInputs, SlotInputs


class TransitionConstraints:
    """Emits the constraints of one slot against an API."""

    def __init__(self, api: API, config: RollupConfig) -> None:
        self.api = api
        self.config = config

    def define(self, slot: "SlotInputs", root: Operand) -> Operand:
        """Constrain `slot` and return the account root after it."""
        api = self.api
        with api.scope("nonce"):
            self._check_nonces(slot)
        with api.scope("index"):
            self._check_indices(slot)
        if slot.sender_before.public_key is not None:
            with api.scope("public_key"):
                self._check_public_keys(slot)
        with api.scope("solvency"):
            self._check_solvency(slot)
        with api.scope("balance"):
            self._check_balances(slot)
        if self.config.check_signatures:
            with api.scope("signature"):
                self._check_signature(slot)
        if self.config.check_inclusion:
            with api.scope("inclusion"):
                return self._check_inclusion(slot, root)
        return root

    # --- Per-Item Constraints ---

    def _check_nonces(self, slot: "SlotInputs") -> None:
        api = self.api
        api.assert_is_equal(slot.sender_after.nonce, api.add(slot.sender_before.nonce, 1))
        if self.config.receiver_nonce_policy is ReceiverNoncePolicy.INCREMENT:
            api.assert_is_equal(slot.receiver_after.nonce, api.add(slot.receiver_before.nonce, 1))
        else:
            api.assert_is_equal(slot.receiver_after.nonce, slot.receiver_before.nonce)

    def _check_indices(self, slot: "SlotInputs") -> None:
        api = self.api
        api.assert_is_equal(slot.sender_after.index, slot.sender_before.index)
        api.assert_is_equal(slot.receiver_after.index, slot.receiver_before.index)
        if not self.config.check_inclusion:
            # with inclusion on, the Merkle path bits range check the index
            api.range_check(slot.sender_before.index, self.config.tree_depth)
            api.range_check(slot.receiver_before.index, self.config.tree_depth)

    def _check_public_keys(self, slot: "SlotInputs") -> None:
        api = self.api
        for before, after in ((slot.sender_before, slot.sender_after), (slot.receiver_before, slot.receiver_after)):
            api.assert_is_equal(after.public_key.x, before.public_key.x)
            api.assert_is_equal(after.public_key.y, before.public_key.y)

        transfer = slot.transfer
        if transfer.sender_public_key is not None:
            api.assert_is_equal(transfer.sender_public_key.x, slot.sender_before.public_key.x)
            api.assert_is_equal(transfer.sender_public_key.y, slot.sender_before.public_key.y)
        if transfer.receiver_public_key is not None:
            api.assert_is_equal(transfer.receiver_public_key.x, slot.receiver_before.public_key.x)
            api.assert_is_equal(transfer.receiver_public_key.y, slot.receiver_before.public_key.y)

    def _check_solvency(self, slot: "SlotInputs") -> None:
        self.api.assert_is_less_or_equal(slot.transfer.amount, slot.sender_before.balance, self.config.balance_bits)

    def _check_balances(self, slot: "SlotInputs") -> None:
        api = self.api
        amount = slot.transfer.amount
        api.assert_is_equal(slot.sender_after.balance, api.sub(slot.sender_before.balance, amount))
        api.assert_is_equal(slot.receiver_after.balance, api.add(slot.receiver_before.balance, amount))
        # receiver side must not wrap around the modulus
        api.range_check(slot.receiver_before.balance, self.config.balance_bits)
        api.range_check(slot.receiver_after.balance, self.config.balance_bits)

    def _check_signature(self, slot: "SlotInputs") -> None:
        transfer = slot.transfer
        sender_key = PointVar(transfer.sender_public_key.x, transfer.sender_public_key.y)
        r = PointVar(transfer.signature.r_x, transfer.signature.r_y)
        message = [slot.sender_before.nonce, slot.receiver_before.index, transfer.amount]
        eddsa.verify(self.api, sender_key, r, transfer.signature.s, message)

    def _check_inclusion(self, slot: "SlotInputs", root: Operand) -> Operand:
        api = self.api
        depth = self.config.tree_depth
        transfer = slot.transfer

        with api.scope("sender"):
            bits = api.to_binary(slot.sender_before.index, depth)
            siblings = transfer.merkle_proof_sender_before
            merkle.assert_inclusion(api, root, self.account_leaf(slot.sender_before), bits, siblings)
            intermediate = merkle.compute_root(api, self.account_leaf(slot.sender_after), bits, siblings)

        with api.scope("receiver"):
            bits = api.to_binary(slot.receiver_before.index, depth)
            siblings = transfer.merkle_proof_receiver_before
            merkle.assert_inclusion(api, intermediate, self.account_leaf(slot.receiver_before), bits, siblings)
            return merkle.compute_root(api, self.account_leaf(slot.receiver_after), bits, siblings)

    # --- Helpers ---

    def account_leaf(self, account: "AccountInputs") -> Variable:
        """MiMC(index, nonce, balance, pk.x, pk.y), as in Account.leaf()."""
        key = account.public_key
        values: List[Operand] = [account.index, account.nonce, account.balance, key.x, key.y]
        return mimc_hash(self.api, *values)
