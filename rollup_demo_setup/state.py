"""On-disk layout read by the validator processes.

::

    rollups/<folder>/
        config.json
        validator0/wallets/<address>
        validator1/wallets/<address>
        validator1/chainState.json
        ...
"""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from .config import ClusterConfig, Settings
from .errors import ConfigError, KeystoreError, StateExistsError
from .keys import ValidatorIdentity

_LOGGER = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
CHAIN_STATE_FILE = "chainState.json"
WALLETS_DIR = "wallets"


def validator_dir(settings: Settings, index: int) -> Path:
    return settings.validators_dir / f"validator{index}"


def prepare_output_root(settings: Settings, force: bool) -> None:
    """Make sure ``rollups/`` exists and ``rollups/<folder>/`` does not."""

    target = settings.validators_dir
    try:
        Path(settings.rollups_dir).mkdir(parents=True, exist_ok=True)
        if target.exists():
            if not force:
                raise StateExistsError(f"{target} already exists. First manually delete it or run with --force")
            _LOGGER.warning("Removing existing state in %s", target)
            shutil.rmtree(target)
    except OSError as exc:
        raise KeystoreError(f"Unable to prepare {target}: {exc}") from exc


def setup_validator_states(count: int, folder: str, config: ClusterConfig, settings: Settings) -> Path:
    """Write the cluster config and create one directory per validator."""

    if count < 1:
        raise ConfigError("must create at least 1 validator")

    rollup_path = Path(settings.rollups_dir) / folder
    try:
        rollup_path.mkdir(parents=True, exist_ok=True)
        (rollup_path / CONFIG_FILE).write_text(json.dumps(config.as_dict()), encoding="utf-8")
        for index in range(count):
            (rollup_path / f"validator{index}").mkdir(exist_ok=True)
    except OSError as exc:
        raise KeystoreError(f"Unable to write validator states under {rollup_path}: {exc}") from exc
    _LOGGER.debug("Wrote %s", rollup_path / CONFIG_FILE)
    return rollup_path


def write_keystore(directory: Path, identity: ValidatorIdentity) -> Path:
    """Store the encrypted key of ``identity`` as ``wallets/<address>``."""

    wallets = Path(directory) / WALLETS_DIR
    path = wallets / identity.address
    try:
        wallets.mkdir(parents=True, exist_ok=True)
        path.write_text(identity.encrypted_blob, encoding="utf-8")
    except OSError as exc:
        raise KeystoreError(f"Unable to write keystore {path}: {exc}") from exc
    return path


def write_chain_state(directory: Path, proxy_address: str) -> Path:
    path = Path(directory) / CHAIN_STATE_FILE
    try:
        path.write_text(json.dumps({"validatorWallet": proxy_address}), encoding="utf-8")
    except OSError as exc:
        raise KeystoreError(f"Unable to write {path}: {exc}") from exc
    return path


__all__ = [
    "CHAIN_STATE_FILE",
    "CONFIG_FILE",
    "WALLETS_DIR",
    "prepare_output_root",
    "setup_validator_states",
    "validator_dir",
    "write_chain_state",
    "write_keystore",
]
