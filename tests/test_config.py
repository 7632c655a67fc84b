from __future__ import annotations

import json
import logging

import pytest

from conftest import P2WPKH_MAINNET
from hmm_stratum.config import CONFIG_PATH_ENV, JobBuilderConfig, load_config
from hmm_stratum.errors import ConfigError, PayoutConfigError, StratumJobError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in (CONFIG_PATH_ENV, "STRATUM_NETWORK", "STRATUM_EXTRANONCE1_SIZE", "STRATUM_EXTRANONCE2_SIZE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == JobBuilderConfig()
    assert cfg.hrp == "bc"
    assert cfg.extranonce_size == 8
    assert cfg.extranonce_placeholder() == b"\x00" * 8
    assert cfg.payouts == []


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("STRATUM_NETWORK", " Regtest ")
    monkeypatch.setenv("STRATUM_EXTRANONCE1_SIZE", "2")
    monkeypatch.setenv("STRATUM_EXTRANONCE2_SIZE", "8")

    cfg = load_config()
    assert cfg.network == "regtest"
    assert cfg.hrp == "bcrt"
    assert cfg.extranonce_size == 10


def test_invalid_environment_values_fall_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv("STRATUM_NETWORK", "dogecoin")
    monkeypatch.setenv("STRATUM_EXTRANONCE1_SIZE", "four")
    monkeypatch.setenv("STRATUM_EXTRANONCE2_SIZE", "-3")

    with caplog.at_level(logging.WARNING, logger="hmm_stratum.config"):
        cfg = load_config()

    assert cfg.network == "bitcoin"
    assert cfg.extranonce1_size == 4
    assert cfg.extranonce2_size == 4
    assert "Unknown network" in caplog.text
    assert "Invalid STRATUM_EXTRANONCE1_SIZE" in caplog.text
    assert "Negative STRATUM_EXTRANONCE2_SIZE" in caplog.text


def test_json_file_overrides_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("STRATUM_EXTRANONCE1_SIZE", "2")
    path = tmp_path / "jobs.json"
    path.write_text(
        json.dumps(
            {
                "network": "bitcoin",
                "extranonce1_size": 8,
                "coinbase_version": 1,
                "payouts": [{"address": P2WPKH_MAINNET, "percent": 100}],
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(path)
    assert cfg.extranonce1_size == 8
    assert cfg.extranonce2_size == 4
    assert cfg.coinbase_version == 1
    assert [p.address for p in cfg.payouts] == [P2WPKH_MAINNET]


def test_config_path_from_environment(tmp_path, monkeypatch) -> None:
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps({"network": "testnet"}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

    assert load_config().hrp == "tb"


def test_bad_overrides_are_ignored_with_warning(tmp_path, caplog) -> None:
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps({"extranonce2_size": "big", "extranonce1_size": -1}), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="hmm_stratum.config"):
        cfg = load_config(path)

    assert cfg.extranonce1_size == 4
    assert cfg.extranonce2_size == 4
    assert "Invalid extranonce2_size override" in caplog.text
    assert "Negative extranonce1_size override ignored" in caplog.text


def test_missing_and_non_object_files(tmp_path, caplog) -> None:
    array_file = tmp_path / "list.json"
    array_file.write_text("[1, 2]", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="hmm_stratum.config"):
        assert load_config(tmp_path / "absent.json") == JobBuilderConfig()
        assert load_config(array_file) == JobBuilderConfig()

    assert "not found" in caplog.text
    assert "not a JSON object" in caplog.text


def test_invalid_payouts_in_file_raise(tmp_path) -> None:
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps({"payouts": [{"address": P2WPKH_MAINNET}]}), encoding="utf-8")
    with pytest.raises(PayoutConfigError):
        load_config(path)


def test_unknown_network_on_direct_config_raises_config_error() -> None:
    cfg = JobBuilderConfig(network="mainnet")
    with pytest.raises(ConfigError, match="mainnet"):
        cfg.hrp
    assert issubclass(ConfigError, StratumJobError)
