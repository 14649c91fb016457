from pathlib import Path

import pytest
import yaml

from otcswap.config import load_config


def test_load_config(tmp_path: Path):
    cfg = {
        "ledger": {"rpc_url": "http://node:8545", "contract_address": "0xabc"},
        "events": {"block_chunk_size": 1000},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))

    loaded = load_config(path)
    assert loaded["ledger"]["rpc_url"] == "http://node:8545"
    assert loaded["events"]["block_chunk_size"] == 1000
    assert loaded["expiry"]["order_lifetime"] == 7 * 24 * 60 * 60
    assert loaded["ledger"]["rate_limit"]["capacity"] == 20
    assert loaded["ledger"]["rate_limit"]["log_query_cost"] == 1.0


def test_env_fills_missing_values(monkeypatch, tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"ledger": {"rpc_url": "http://node:8545"}}))
    monkeypatch.setenv("OTC_CONTRACT_ADDRESS", "0xdef")
    monkeypatch.setenv("OTC_PRIVATE_KEY", "0xkey")
    monkeypatch.setenv("OTC_RPC_URL", "http://ignored")
    loaded = load_config(path)
    assert loaded["ledger"]["contract_address"] == "0xdef"
    assert loaded["ledger"]["private_key"] == "0xkey"
    assert loaded["ledger"]["rpc_url"] == "http://node:8545"


def test_invalid_config(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"events": {"block_chunk_size": 0}}))
    with pytest.raises(ValueError):
        load_config(path)


def test_missing_config(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_log_query_cost_must_fit_bucket(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"ledger": {"rate_limit": {"capacity": 4, "log_query_cost": 5}}}))
    with pytest.raises(ValueError):
        load_config(path)
