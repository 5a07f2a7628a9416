"""Shared fixtures: an isolated repository root with a bridge address registry."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from rollup_demo_setup.config import Settings

from fakes import (
    BRIDGE_UTILS_ADDRESS,
    VALIDATOR_UTILS_ADDRESS,
    WALLET_CREATOR_ADDRESS,
    FakeChain,
    FakeRunner,
)


def write_bridge_registry(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "contracts": {
                    "ValidatorUtils": {"address": VALIDATOR_UTILS_ADDRESS},
                    "ValidatorWalletCreator": {"address": WALLET_CREATOR_ADDRESS.lower()},
                    "BridgeUtils": {"address": BRIDGE_UTILS_ADDRESS},
                }
            }
        ),
        encoding="utf-8",
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    # Cheap key derivation keeps the keystore tests fast.
    resolved = Settings(repo_root=tmp_path, keystore_kdf="pbkdf2", keystore_iterations=2)
    write_bridge_registry(resolved.addresses_path)
    return resolved


@pytest.fixture
def chain(settings: Settings) -> FakeChain:
    return FakeChain(settings)


@pytest.fixture
def runner(settings: Settings) -> FakeRunner:
    return FakeRunner(settings)
