"""Per-validator proxy wallets minted through ``ValidatorWalletCreator``."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .abi import VALIDATOR_WALLET_CREATOR_ABI, WALLET_CREATED_EVENT
from .chain import ChainClient
from .config import normalize_address
from .errors import ConfigError
from .keys import ValidatorIdentity

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatorProxy:
    owning_validator_index: int
    proxy_address: str


def create_validator_wallet(chain: ChainClient, creator_address: str, identity: ValidatorIdentity) -> ValidatorProxy:
    """Mint a proxy wallet owned by ``identity`` and return its address."""

    if identity.is_sequencer:
        raise ConfigError("The sequencer does not get a validator wallet")

    creator = chain.contract(creator_address, VALIDATOR_WALLET_CREATOR_ABI)
    tx = {"to": creator.address, "data": creator.encode_abi("createWallet", args=[])}
    tx_hash = chain.send_transaction(identity.signer, tx)
    receipt = chain.wait_for_receipt(tx_hash, f"createWallet for validator{identity.index}")

    event = chain.parse_event(receipt, creator, WALLET_CREATED_EVENT)
    # The wallet address is the event's first argument.
    first_input = next(item for item in creator.abi if item.get("name") == WALLET_CREATED_EVENT)["inputs"][0]["name"]
    proxy_address = normalize_address(event["args"][first_input], f"{WALLET_CREATED_EVENT}.{first_input}")

    _LOGGER.info("validator%d wallet: %s", identity.index, proxy_address)
    return ValidatorProxy(owning_validator_index=identity.index, proxy_address=proxy_address)


__all__ = ["ValidatorProxy", "create_validator_wallet"]
