#!/usr/bin/env python3
"""Build a batch of signed transfers, prove it and verify the proof.

Usage:
    python prove_batch.py --batch-size 1 --balance-bits 16 --no-signatures --no-inclusion
    python prove_batch.py --config rollup.json --export-vk verification_key.json --proof-out proof.json

Steps:
    1. Open 2^tree_depth accounts with deterministic keys
    2. Apply batch_size signed transfers through the operator ledger
    3. Compile the batch circuit and run setup
    4. Prove the batch and verify the proof against its public inputs

Groth16 in pure Python is slow; the full circuit (signatures and inclusion)
has tens of thousands of constraints per slot. --solve-only stops after
checking the witness against the constraint system.
"""

import argparse
import sys
import time
from dataclasses import replace

from primitives.eddsa import PrivateKey
from protocol import compile, export_verifying_key, new_witness, prove, save_proof, setup, solve, verify
from rollup import Ledger, RollupCircuit, RollupConfig

INITIAL_BALANCE = 100
TRANSFER_AMOUNT = 20


def build_config(args: argparse.Namespace) -> RollupConfig:
    config = RollupConfig.from_json(args.config) if args.config else RollupConfig()
    overrides = {}
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.tree_depth is not None:
        overrides["tree_depth"] = args.tree_depth
    if args.balance_bits is not None:
        overrides["balance_bits"] = args.balance_bits
    if args.no_signatures:
        overrides["check_signatures"] = False
    if args.no_inclusion:
        overrides["check_inclusion"] = False
    return replace(config, **overrides)


def build_batch(config: RollupConfig):
    """Ledger of n_accounts funded accounts; account i pays account i + 1."""
    ledger = Ledger(config)
    keys = [PrivateKey.from_seed(f"account-{i}".encode()) for i in range(config.n_accounts)]
    for i, key in enumerate(keys):
        ledger.open_account(i, balance=INITIAL_BALANCE, public_key=key.public_key().point)

    for k in range(config.batch_size):
        sender = k % config.n_accounts
        receiver = (sender + 1) % config.n_accounts
        nonce = ledger.get_account(sender).nonce
        signature = keys[sender].sign_transfer(nonce, receiver, TRANSFER_AMOUNT)
        ledger.transfer(sender, receiver, TRANSFER_AMOUNT, signature=signature)
    return ledger.seal_batch()


def main() -> None:
    parser = argparse.ArgumentParser(description="Prove and verify a rollup transfer batch.")
    parser.add_argument("--config", help="Path to a rollup config JSON file")
    parser.add_argument("--batch-size", type=int, help="Transfers per proof")
    parser.add_argument("--tree-depth", type=int, help="Merkle path length (2^depth accounts)")
    parser.add_argument("--balance-bits", type=int, help="Bit width of balances and amounts")
    parser.add_argument("--no-signatures", action="store_true", help="Skip in-circuit signature checks")
    parser.add_argument("--no-inclusion", action="store_true", help="Skip in-circuit Merkle inclusion")
    parser.add_argument("--solve-only", action="store_true", help="Check the witness without proving")
    parser.add_argument("--export-vk", help="Write the verifying key (snarkjs JSON) to this path")
    parser.add_argument("--proof-out", help="Write the proof JSON to this path")
    args = parser.parse_args()

    config = build_config(args)
    print("Configuration:")
    for key, value in config.to_dict().items():
        print(f"  {key}: {value}")

    print("\nBuilding batch...")
    batch = build_batch(config)
    assignment = RollupCircuit.assign(config, batch)

    print("Compiling circuit...")
    start = time.time()
    cs = compile(RollupCircuit.shape(config))
    print(f"  {cs.n_constraints} constraints, {cs.n_public} public / {cs.n_secret} secret inputs "
          f"({time.time() - start:.1f}s)")

    witness = new_witness(assignment)
    if args.solve_only:
        solve(cs, witness)
        print("Witness satisfies every constraint")
        return

    print("Running setup...")
    start = time.time()
    pk, vk = setup(cs)
    print(f"  done ({time.time() - start:.1f}s)")
    if args.export_vk:
        export_verifying_key(vk, args.export_vk)
        print(f"  verifying key written to {args.export_vk}")

    print("Proving...")
    start = time.time()
    proof = prove(cs, pk, witness)
    print(f"  done ({time.time() - start:.1f}s)")
    if args.proof_out:
        save_proof(proof, args.proof_out)
        print(f"  proof written to {args.proof_out}")

    print("Verifying...")
    if verify(proof, vk, witness.public()):
        print("verification succeeded")
    else:
        print("verification failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
