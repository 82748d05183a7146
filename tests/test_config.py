"""Tests for RollupConfig validation and JSON loading."""

import json

import pytest

from rollup import ReceiverNoncePolicy, RollupConfig, StructuralError


class TestRollupConfig:
    """Defaults, validation and serialization."""

    def test_defaults(self) -> None:
        config = RollupConfig()
        assert config.batch_size == 1
        assert config.tree_depth == 4
        assert config.n_accounts == 16
        assert config.receiver_nonce_policy is ReceiverNoncePolicy.INCREMENT
        assert config.check_signatures and config.check_inclusion and config.assert_conservation
        assert config.curve == "bn254"

    @pytest.mark.parametrize("kwargs", [
        {"tree_depth": 0},
        {"tree_depth": 33},
        {"balance_bits": 0},
        {"balance_bits": 250},
        {"curve": "bls12-381"},
        {"receiver_nonce_policy": "decrement"},
        {"visibility": {"balance": "public"}},
        {"visibility": {"account.balance": "hidden"}},
    ])
    def test_invalid(self, kwargs) -> None:
        with pytest.raises(ValueError):
            RollupConfig(**kwargs)

    def test_structural_error_is_value_error(self) -> None:
        with pytest.raises(StructuralError):
            RollupConfig(batch_size=0)
        assert issubclass(StructuralError, ValueError)

    def test_dict_roundtrip(self) -> None:
        config = RollupConfig(
            batch_size=3,
            tree_depth=6,
            balance_bits=32,
            receiver_nonce_policy=ReceiverNoncePolicy.UNCHANGED,
            check_signatures=False,
            visibility={"account.balance": "secret"},
        )
        data = config.to_dict()
        assert data["batchSize"] == 3
        assert data["receiverNoncePolicy"] == "unchanged"
        assert RollupConfig.from_dict(data) == config

    def test_from_json(self, tmp_path) -> None:
        path = tmp_path / "rollup.json"
        path.write_text(json.dumps({"batchSize": 2, "checkInclusion": False}))
        config = RollupConfig.from_json(str(path))
        assert config.batch_size == 2
        assert not config.check_inclusion
        assert config.tree_depth == 4

    def test_to_json(self, tmp_path) -> None:
        path = tmp_path / "rollup.json"
        config = RollupConfig(batch_size=4)
        config.to_json(str(path))
        assert RollupConfig.from_json(str(path)) == config
