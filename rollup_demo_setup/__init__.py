"""Bootstrap a local demo rollup: validator keys, rollup, proxy wallets and funded clients."""
from __future__ import annotations

from .chain import ChainClient, Signer
from .clients import DEMO_CLIENT_KEYS, demo_client_addresses, fund_clients
from .config import BridgeAddresses, ClusterConfig, Settings, load_bridge_addresses
from .errors import (
    ConfigError,
    DeploymentError,
    KeystoreError,
    ParseError,
    RPCError,
    SetupError,
    StateExistsError,
    WhitelistError,
)
from .keys import ValidatorIdentity, create_validator_identities
from .orchestrator import SetupResult, setup_validators
from .tools import RollupArtifact, deploy_rollup, register_validators
from .wallets import ValidatorProxy, create_validator_wallet

__all__ = [
    "BridgeAddresses",
    "ChainClient",
    "ClusterConfig",
    "ConfigError",
    "DEMO_CLIENT_KEYS",
    "DeploymentError",
    "KeystoreError",
    "ParseError",
    "RPCError",
    "RollupArtifact",
    "SetupError",
    "SetupResult",
    "Settings",
    "Signer",
    "StateExistsError",
    "ValidatorIdentity",
    "ValidatorProxy",
    "WhitelistError",
    "create_validator_identities",
    "create_validator_wallet",
    "demo_client_addresses",
    "deploy_rollup",
    "fund_clients",
    "load_bridge_addresses",
    "register_validators",
    "setup_validators",
]
