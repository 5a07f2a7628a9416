"""Run configuration, the bridge address registry and the cluster config document."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

from .errors import ConfigError, ParseError

DEFAULT_ETH_URL = "http://localhost:7545"
DEFAULT_NETWORK = "local_development"
DEFAULT_FOLDER = "local"
DEFAULT_PASSWORD = "pass"
DEFAULT_TOOL_COMMAND: Tuple[str, ...] = ("yarn", "workspace", "arb-bridge-eth", "hardhat")
DEFAULT_RECEIPT_TIMEOUT = 120


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _path_setting(env: Mapping[str, str], name: str, default: Optional[Path] = None) -> Optional[Path]:
    raw = env.get(name)
    if not raw:
        return default
    return Path(raw).expanduser().resolve()


@dataclass(frozen=True)
class Settings:
    """Everything a setup run needs to know about its surroundings."""

    eth_url: str = DEFAULT_ETH_URL
    root_account_index: int = 0
    repo_root: Path = field(default_factory=Path.cwd)
    bridge_dir: Optional[Path] = None
    addresses_path: Optional[Path] = None
    rollups_dir: Optional[Path] = None
    network: str = DEFAULT_NETWORK
    folder: str = DEFAULT_FOLDER
    password: str = DEFAULT_PASSWORD
    tool_command: Tuple[str, ...] = DEFAULT_TOOL_COMMAND
    receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT
    keystore_kdf: str = "scrypt"
    keystore_iterations: Optional[int] = None

    def __post_init__(self) -> None:
        root = Path(self.repo_root)
        object.__setattr__(self, "repo_root", root)
        if self.bridge_dir is None:
            object.__setattr__(self, "bridge_dir", root / "packages" / "arb-bridge-eth")
        if self.addresses_path is None:
            object.__setattr__(self, "addresses_path", Path(self.bridge_dir) / "bridge_eth_addresses.json")
        if self.rollups_dir is None:
            object.__setattr__(self, "rollups_dir", root / "rollups")

    @property
    def validators_dir(self) -> Path:
        """Directory holding one ``validator<i>`` folder per validator."""

        return Path(self.rollups_dir) / self.folder

    @property
    def artifact_path(self) -> Path:
        return Path(self.bridge_dir) / f"rollup-{self.network}.json"

    def with_overrides(self, **changes: Any) -> "Settings":
        """Return a copy with the non-``None`` entries of ``changes`` applied."""

        applied = {key: value for key, value in changes.items() if value is not None}
        if "repo_root" in applied:
            # Paths still at their defaults follow the new root; explicit ones stay.
            defaults = Settings(repo_root=self.repo_root)
            for derived in ("bridge_dir", "addresses_path", "rollups_dir"):
                if getattr(self, derived) == getattr(defaults, derived):
                    applied.setdefault(derived, None)
        return replace(self, **applied)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        When ``env`` is omitted a ``.env`` file in the working directory is
        loaded into ``os.environ`` first; variables that are already set win.
        """

        if env is None:
            load_dotenv(Path.cwd() / ".env", override=False)
            env = os.environ

        repo_root = _path_setting(env, "ARB_REPO_ROOT", Path.cwd())
        bridge_dir = _path_setting(env, "ARB_BRIDGE_DIR")
        rollups_dir = _path_setting(env, "ARB_ROLLUPS_DIR")
        tool_command = tuple(env.get("ARB_TOOL_COMMAND", "").split()) or DEFAULT_TOOL_COMMAND

        return cls(
            eth_url=env.get("ETH_URL") or DEFAULT_ETH_URL,
            root_account_index=_int_setting(env, "ROOT_ACCOUNT_INDEX", 0),
            repo_root=repo_root,
            bridge_dir=bridge_dir,
            rollups_dir=rollups_dir,
            tool_command=tool_command,
            receipt_timeout=_int_setting(env, "RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT),
        )


def normalize_address(value: Any, what: str) -> str:
    """Return ``value`` as a checksummed address or raise :class:`ParseError`."""

    if not isinstance(value, str) or not is_address(value):
        raise ParseError(f"{what} is not a valid address: {value!r}")
    return to_checksum_address(value)


@dataclass(frozen=True)
class BridgeAddresses:
    """Shared contracts deployed ahead of any rollup."""

    validator_utils: str
    validator_wallet_creator: str
    bridge_utils: str


_BRIDGE_CONTRACTS = {
    "validator_utils": "ValidatorUtils",
    "validator_wallet_creator": "ValidatorWalletCreator",
    "bridge_utils": "BridgeUtils",
}


def load_bridge_addresses(path: Path) -> BridgeAddresses:
    """Read ``contracts.<Name>.address`` entries from the registry at ``path``."""

    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Bridge address registry not found at {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read bridge address registry at {path}: {exc}") from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Bridge address registry at {path} is not valid JSON") from exc

    contracts = payload.get("contracts") if isinstance(payload, dict) else None
    if not isinstance(contracts, dict):
        raise ConfigError(f"Bridge address registry at {path} has no 'contracts' section")

    resolved: Dict[str, str] = {}
    for attr, name in _BRIDGE_CONTRACTS.items():
        entry = contracts.get(name)
        if not isinstance(entry, dict) or "address" not in entry:
            raise ConfigError(f"Bridge address registry at {path} is missing contracts.{name}.address")
        resolved[attr] = normalize_address(entry["address"], f"contracts.{name}.address")
    return BridgeAddresses(**resolved)


@dataclass(frozen=True)
class ClusterConfig:
    """Addresses and parameters the validator processes read at startup."""

    rollup_address: str
    inbox_address: str
    validator_utils_address: str
    validator_wallet_factory_address: str
    bridge_utils_address: str
    eth_url: str
    password: str
    blocktime: int

    @classmethod
    def build(cls, artifact: Any, bridge: BridgeAddresses, settings: Settings, blocktime: int) -> "ClusterConfig":
        return cls(
            rollup_address=artifact.rollup_address,
            inbox_address=artifact.inbox_address,
            validator_utils_address=bridge.validator_utils,
            validator_wallet_factory_address=bridge.validator_wallet_creator,
            bridge_utils_address=bridge.bridge_utils,
            eth_url=settings.eth_url,
            password=settings.password,
            blocktime=blocktime,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "rollup_address": self.rollup_address,
            "inbox_address": self.inbox_address,
            "validator_utils_address": self.validator_utils_address,
            "validator_wallet_factory_address": self.validator_wallet_factory_address,
            "bridge_utils_address": self.bridge_utils_address,
            "eth_url": self.eth_url,
            "password": self.password,
            "blocktime": self.blocktime,
        }


__all__ = [
    "BridgeAddresses",
    "ClusterConfig",
    "DEFAULT_ETH_URL",
    "DEFAULT_NETWORK",
    "Settings",
    "load_bridge_addresses",
    "normalize_address",
]
