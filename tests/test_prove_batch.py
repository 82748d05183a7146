"""Tests for the prove_batch command-line driver."""

import argparse
import sys

import pytest

import prove_batch
from rollup import RollupCircuit, RollupConfig


def namespace(**kwargs) -> argparse.Namespace:
    defaults = dict(
        config=None,
        batch_size=None,
        tree_depth=None,
        balance_bits=None,
        no_signatures=False,
        no_inclusion=False,
    )
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestBuildConfig:
    """Flags override the config file, which overrides defaults."""

    def test_defaults(self) -> None:
        assert prove_batch.build_config(namespace()) == RollupConfig()

    def test_flags(self) -> None:
        config = prove_batch.build_config(namespace(batch_size=3, balance_bits=32, no_signatures=True))
        assert config.batch_size == 3
        assert config.balance_bits == 32
        assert not config.check_signatures
        assert config.check_inclusion

    def test_config_file_then_flags(self, tmp_path) -> None:
        path = tmp_path / "rollup.json"
        RollupConfig(batch_size=2, tree_depth=3).to_json(str(path))
        config = prove_batch.build_config(namespace(config=str(path), tree_depth=5))
        assert config.batch_size == 2
        assert config.tree_depth == 5


class TestBuildBatch:

    def test_batch_matches_config(self) -> None:
        config = RollupConfig(batch_size=2, tree_depth=2)
        batch = prove_batch.build_batch(config)
        batch.validate(config)
        assert batch.balances_conserved()
        assert batch.slots[0].sender_after.balance == prove_batch.INITIAL_BALANCE - prove_batch.TRANSFER_AMOUNT
        RollupCircuit.assign(config, batch)


class TestMain:

    def test_solve_only(self, monkeypatch, capsys) -> None:
        argv = ["prove_batch.py", "--no-signatures", "--no-inclusion", "--balance-bits", "16", "--solve-only"]
        monkeypatch.setattr(sys, "argv", argv)
        prove_batch.main()
        out = capsys.readouterr().out
        assert "Witness satisfies every constraint" in out

    @pytest.mark.slow
    def test_prove_and_export(self, monkeypatch, capsys, tmp_path) -> None:
        vk_path = tmp_path / "verification_key.json"
        proof_path = tmp_path / "proof.json"
        argv = [
            "prove_batch.py", "--no-signatures", "--no-inclusion", "--balance-bits", "16",
            "--export-vk", str(vk_path), "--proof-out", str(proof_path),
        ]
        monkeypatch.setattr(sys, "argv", argv)
        prove_batch.main()
        assert "verification succeeded" in capsys.readouterr().out
        assert vk_path.exists() and proof_path.exists()
