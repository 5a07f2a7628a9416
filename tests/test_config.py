from __future__ import annotations

import json

import pytest

from rollup_demo_setup.config import ClusterConfig, Settings, load_bridge_addresses
from rollup_demo_setup.errors import ConfigError, ParseError

from fakes import BRIDGE_UTILS_ADDRESS, VALIDATOR_UTILS_ADDRESS, WALLET_CREATOR_ADDRESS, address


def test_default_settings_follow_repository_layout(tmp_path):
    settings = Settings(repo_root=tmp_path)

    assert settings.eth_url == "http://localhost:7545"
    assert settings.root_account_index == 0
    assert settings.bridge_dir == tmp_path / "packages" / "arb-bridge-eth"
    assert settings.addresses_path == settings.bridge_dir / "bridge_eth_addresses.json"
    assert settings.artifact_path == settings.bridge_dir / "rollup-local_development.json"
    assert settings.validators_dir == tmp_path / "rollups" / "local"
    assert settings.password == "pass"


def test_settings_from_env(tmp_path):
    settings = Settings.from_env(
        {
            "ETH_URL": "http://127.0.0.1:8545",
            "ROOT_ACCOUNT_INDEX": "2",
            "ARB_REPO_ROOT": str(tmp_path),
            "ARB_TOOL_COMMAND": "npx hardhat",
            "RECEIPT_TIMEOUT": "30",
        }
    )

    assert settings.eth_url == "http://127.0.0.1:8545"
    assert settings.root_account_index == 2
    assert settings.repo_root == tmp_path.resolve()
    assert settings.rollups_dir == tmp_path.resolve() / "rollups"
    assert settings.tool_command == ("npx", "hardhat")
    assert settings.receipt_timeout == 30


def test_settings_from_env_rejects_bad_integer():
    with pytest.raises(ConfigError, match="ROOT_ACCOUNT_INDEX"):
        Settings.from_env({"ROOT_ACCOUNT_INDEX": "first"})


def test_settings_from_env_loads_dotenv_file(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("ETH_URL=http://dotenv:9545\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ETH_URL", "")
    monkeypatch.delenv("ETH_URL")

    assert Settings.from_env().eth_url == "http://dotenv:9545"


def test_with_overrides_rebases_derived_paths(tmp_path):
    settings = Settings(repo_root=tmp_path / "a").with_overrides(repo_root=tmp_path / "b", eth_url=None)

    assert settings.rollups_dir == tmp_path / "b" / "rollups"
    assert settings.eth_url == "http://localhost:7545"


def test_with_overrides_keeps_explicit_directories(tmp_path):
    env = {"ARB_BRIDGE_DIR": str(tmp_path / "custom-bridge"), "ARB_ROLLUPS_DIR": str(tmp_path / "custom-rollups")}

    settings = Settings.from_env(env).with_overrides(repo_root=tmp_path / "repo")

    assert settings.repo_root == tmp_path / "repo"
    assert settings.bridge_dir == (tmp_path / "custom-bridge").resolve()
    assert settings.rollups_dir == (tmp_path / "custom-rollups").resolve()
    assert settings.validators_dir == (tmp_path / "custom-rollups").resolve() / "local"


def test_load_bridge_addresses(settings):
    bridge = load_bridge_addresses(settings.addresses_path)

    assert bridge.validator_utils == VALIDATOR_UTILS_ADDRESS
    assert bridge.validator_wallet_creator == WALLET_CREATOR_ADDRESS
    assert bridge.bridge_utils == BRIDGE_UTILS_ADDRESS


def test_load_bridge_addresses_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_bridge_addresses(tmp_path / "missing.json")


def test_load_bridge_addresses_rejects_undecodable_file(tmp_path):
    path = tmp_path / "addresses.json"
    path.write_bytes(b"\xff\xfe{not utf8")

    with pytest.raises(ConfigError, match="not valid JSON"):
        load_bridge_addresses(path)


def test_load_bridge_addresses_unreadable_path(tmp_path):
    path = tmp_path / "addresses.json"
    path.mkdir()

    with pytest.raises(ConfigError, match="Unable to read"):
        load_bridge_addresses(path)


def test_load_bridge_addresses_missing_contract(tmp_path):
    path = tmp_path / "addresses.json"
    path.write_text(json.dumps({"contracts": {"ValidatorUtils": {"address": address("30")}}}))

    with pytest.raises(ConfigError, match="ValidatorWalletCreator"):
        load_bridge_addresses(path)


def test_load_bridge_addresses_rejects_bad_address(tmp_path):
    path = tmp_path / "addresses.json"
    contracts = {name: {"address": address("30")} for name in ("ValidatorUtils", "ValidatorWalletCreator", "BridgeUtils")}
    contracts["BridgeUtils"]["address"] = "not-an-address"
    path.write_text(json.dumps({"contracts": contracts}))

    with pytest.raises(ParseError):
        load_bridge_addresses(path)


def test_cluster_config_key_order():
    config = ClusterConfig("r", "i", "vu", "vwf", "bu", "http://localhost:7545", "pass", 2)

    assert list(config.as_dict()) == [
        "rollup_address",
        "inbox_address",
        "validator_utils_address",
        "validator_wallet_factory_address",
        "bridge_utils_address",
        "eth_url",
        "password",
        "blocktime",
    ]
