"""Operator ledger: account state in a Merkle tree, assembled into batches.

The ledger applies transfers one at a time, recording for each the before
and after accounts, the sender's Merkle path in the current tree and the
receiver's path in the tree after the sender's update. That is exactly the
root threading the circuit checks, so any sequence of accepted transfers
(including repeated accounts within a batch) yields a satisfiable batch.

Example:
    ledger = Ledger(RollupConfig(batch_size=1))
    alice, bob = PrivateKey.generate(), PrivateKey.generate()
    ledger.open_account(0, balance=100, public_key=alice.public_key().point)
    ledger.open_account(1, public_key=bob.public_key().point)
    sig = alice.sign_transfer(nonce=0, receiver_index=1, amount=20)
    ledger.transfer(0, 1, 20, signature=sig)
    batch = ledger.seal_batch()
"""

from typing import Dict, List, Optional

from primitives.babyjubjub import IDENTITY, Point
from primitives.eddsa import PublicKey, Signature, transfer_message, verify
from primitives.merkle_tree import MerkleRoot, MerkleTree
from rollup.config import RollupConfig
from rollup.model import Account, Batch, BatchSlot, Transfer


class Ledger:
    """Operator-side account state and batch assembly."""

    def __init__(self, config: RollupConfig) -> None:
        self.config = config
        self.tree = MerkleTree(config.tree_depth)
        self.accounts: Dict[int, Account] = {}
        self._pending: List[BatchSlot] = []
        self._batch_root = self.tree.get_root()

    @property
    def root(self) -> MerkleRoot:
        return self.tree.get_root()

    # --- Accounts ---

    def open_account(self, index: int, balance: int = 0, public_key: Point = IDENTITY) -> Account:
        """Create an account outside of any batch (genesis or deposit).

        Raises:
            ValueError: If the index is taken, outside the tree or a batch is in progress
        """
        if self._pending:
            raise ValueError("Cannot open accounts while a batch is in progress")
        if not 0 <= index < self.tree.n_leaves:
            raise ValueError(f"Account index {index} outside tree of {self.tree.n_leaves} leaves")
        if index in self.accounts:
            raise ValueError(f"Account {index} already exists")
        if balance >> self.config.balance_bits:
            raise ValueError(f"Balance {balance} exceeds {self.config.balance_bits} bits")
        account = Account(index=index, balance=balance, public_key=public_key)
        self._store(account)
        self._batch_root = self.root
        return account

    def get_account(self, index: int) -> Account:
        if index not in self.accounts:
            raise KeyError(f"No account at index {index}")
        return self.accounts[index]

    # --- Transfers ---

    def transfer(
        self,
        sender_index: int,
        receiver_index: int,
        amount: int,
        signature: Optional[Signature] = None,
    ) -> BatchSlot:
        """Apply one transfer and append it to the pending batch.

        Raises:
            KeyError: If either account does not exist
            ValueError: If the batch is full, the signature is missing or
                invalid, the sender is insolvent or the receiver would overflow
        """
        config = self.config
        if len(self._pending) >= config.batch_size:
            raise ValueError(f"Batch is full ({config.batch_size} transfers); seal it first")

        sender_before = self.get_account(sender_index)
        receiver_current = self.get_account(receiver_index)

        if config.check_signatures:
            if signature is None:
                raise ValueError("Transfer requires a signature")
            message = transfer_message(sender_before.nonce, receiver_index, amount)
            if not verify(PublicKey(sender_before.public_key), message, signature):
                raise ValueError(f"Invalid signature for transfer from account {sender_index}")

        sender_after = sender_before.debited(amount)
        if receiver_index != sender_index and (receiver_current.balance + amount) >> config.balance_bits:
            raise ValueError(f"Receiver balance would exceed {config.balance_bits} bits")
        sender_path = self.tree.get_proof(sender_index).siblings
        self._store(sender_after)

        # a self-transfer sees the debited state here
        receiver_before = self.get_account(receiver_index)
        receiver_after = receiver_before.credited(amount, config.receiver_nonce_policy)
        receiver_path = self.tree.get_proof(receiver_index).siblings
        self._store(receiver_after)

        slot = BatchSlot(
            sender_before=sender_before,
            receiver_before=receiver_before,
            sender_after=sender_after,
            receiver_after=receiver_after,
            transfer=Transfer(
                amount=amount,
                sender_public_key=sender_before.public_key,
                receiver_public_key=receiver_before.public_key,
                signature=signature,
                merkle_proof_sender_before=sender_path,
                merkle_proof_receiver_before=receiver_path,
            ),
        )
        self._pending.append(slot)
        return slot

    def seal_batch(self) -> Batch:
        """Close the pending transfers into a Batch.

        Raises:
            ValueError: If fewer than batch_size transfers are pending
        """
        if len(self._pending) != self.config.batch_size:
            raise ValueError(f"Batch has {len(self._pending)} transfers, expected {self.config.batch_size}")
        batch = Batch(slots=tuple(self._pending), root_before=self._batch_root, root_after=self.root)
        self._pending = []
        self._batch_root = self.root
        return batch

    def _store(self, account: Account) -> None:
        self.tree.update(account.index, account.leaf())
        self.accounts[account.index] = account
