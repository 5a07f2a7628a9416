"""Fresh validator identities, funded from the root signer."""
from __future__ import annotations

import concurrent.futures as cf
import json
import logging
from dataclasses import dataclass
from typing import List

from eth_account import Account
from web3 import Web3

from .chain import ChainClient, Signer
from .config import Settings
from .errors import KeystoreError

_LOGGER = logging.getLogger(__name__)

VALIDATOR_FUNDING_WEI = Web3.to_wei(5, "ether")


@dataclass(frozen=True)
class ValidatorIdentity:
    """Signing identity of one validator. Index 0 is the sequencer."""

    index: int
    address: str
    private_key: str
    encrypted_blob: str

    @property
    def is_sequencer(self) -> bool:
        return self.index == 0

    @property
    def signer(self) -> Signer:
        return Signer(address=self.address, private_key=self.private_key, label=f"validator{self.index}")

    def __repr__(self) -> str:
        return f"ValidatorIdentity(index={self.index}, address={self.address!r})"


def encrypt_key(private_key: str, settings: Settings) -> str:
    """Return the passphrase-protected keystore JSON for ``private_key``."""

    kwargs = {"kdf": settings.keystore_kdf}
    if settings.keystore_iterations is not None:
        kwargs["iterations"] = settings.keystore_iterations
    try:
        keystore = Account.encrypt(private_key, settings.password, **kwargs)
    except (ValueError, TypeError) as exc:
        raise KeystoreError(f"Unable to encrypt validator key: {exc}") from exc
    return json.dumps(keystore)


def create_validator_identities(chain: ChainClient, count: int, settings: Settings) -> List[ValidatorIdentity]:
    """Generate ``count`` random keys and fund each from the root signer.

    Transfers are submitted one at a time because the root signer has a
    single nonce sequence; their receipts are then awaited together.
    """

    root = chain.root_signer()
    accounts = [Account.create() for _ in range(count)]

    pending: List[str] = []
    for index, account in enumerate(accounts):
        tx_hash = chain.transfer(root, account.address, VALIDATOR_FUNDING_WEI)
        _LOGGER.debug("Funding validator%d at %s (%s)", index, account.address, tx_hash)
        pending.append(tx_hash)

    with cf.ThreadPoolExecutor(max_workers=max(1, len(pending))) as pool:
        futures = [
            pool.submit(chain.wait_for_receipt, tx_hash, f"funding validator{index}")
            for index, tx_hash in enumerate(pending)
        ]
        for future in futures:
            future.result()

    identities: List[ValidatorIdentity] = []
    for index, account in enumerate(accounts):
        private_key = Web3.to_hex(account.key)
        identities.append(
            ValidatorIdentity(
                index=index,
                address=account.address,
                private_key=private_key,
                encrypted_blob=encrypt_key(private_key, settings),
            )
        )
    _LOGGER.info("Created and funded %d validator keys", len(identities))
    return identities


__all__ = ["VALIDATOR_FUNDING_WEI", "ValidatorIdentity", "create_validator_identities", "encrypt_key"]
