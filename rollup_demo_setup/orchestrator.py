"""End-to-end provisioning of a local demo rollup and its validators."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .chain import ChainClient
from .clients import demo_client_addresses, fund_clients
from .config import ClusterConfig, Settings, load_bridge_addresses
from .errors import ConfigError
from .keys import ValidatorIdentity, create_validator_identities
from .state import (
    prepare_output_root,
    setup_validator_states,
    validator_dir,
    write_chain_state,
    write_keystore,
)
from .tools import RollupArtifact, ToolRunner, deploy_rollup, register_validators
from .wallets import ValidatorProxy, create_validator_wallet

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupResult:
    identities: List[ValidatorIdentity]
    artifact: RollupArtifact
    proxies: List[ValidatorProxy]
    output_dir: Path

    @property
    def sequencer(self) -> ValidatorIdentity:
        return self.identities[0]


def setup_validators(
    count: int,
    blocktime: int,
    force: bool,
    *,
    settings: Settings,
    chain: Optional[ChainClient] = None,
    runner=None,
) -> SetupResult:
    """Provision ``count`` validators (the sequencer included) on a new rollup.

    The output tree is checked before anything touches the chain, so a
    refused run leaves no rollup behind. Any failure aborts the run without
    undoing what was already done on chain.
    """

    if count < 2:
        raise ConfigError("must create at least 1 validator")

    bridge = load_bridge_addresses(settings.addresses_path)
    prepare_output_root(settings, force)

    if chain is None:
        chain = ChainClient.connect(settings)
    if runner is None:
        runner = ToolRunner(settings.repo_root)

    identities = create_validator_identities(chain, count, settings)
    sequencer = identities[0]
    _LOGGER.info("Sequencer is %s", sequencer.address)

    artifact = deploy_rollup(runner, settings, sequencer.address, demo_client_addresses())
    _LOGGER.info("Created rollup %s (inbox %s)", artifact.rollup_address, artifact.inbox_address)

    config = ClusterConfig.build(artifact, bridge, settings, blocktime)
    output_dir = setup_validator_states(count, settings.folder, config, settings)

    proxies: List[ValidatorProxy] = []
    for identity in identities:
        directory = validator_dir(settings, identity.index)
        write_keystore(directory, identity)
        if identity.is_sequencer:
            continue
        proxy = create_validator_wallet(chain, bridge.validator_wallet_creator, identity)
        write_chain_state(directory, proxy.proxy_address)
        proxies.append(proxy)

    register_validators(runner, settings, artifact.rollup_address, [proxy.proxy_address for proxy in proxies])
    fund_clients(chain, artifact.inbox_address)

    _LOGGER.info("Validator state written to %s", output_dir)
    return SetupResult(identities=identities, artifact=artifact, proxies=proxies, output_dir=output_dir)


__all__ = ["SetupResult", "setup_validators"]
