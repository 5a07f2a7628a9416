"""Demo client accounts that are funded and pre-deposited into the new inbox.

The keys below are fixed so every demo chain exposes the same clients. They
are for local development only.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from eth_account import Account
from web3 import Web3

from .abi import INBOX_ABI
from .chain import ChainClient, Signer

_LOGGER = logging.getLogger(__name__)

CLIENT_FUNDING_WEI = Web3.to_wei(100, "ether")
CLIENT_DEPOSIT_WEI = Web3.to_wei(100, "ether")

DEMO_CLIENT_KEYS = (
    "0x979f020f6f6f71577c09db93ba944c89945f10fade64cfc7eb26137d5816fb76",
    "0xd26a199ae5b6bed1992439d1840f7cb400d0a55a0c9f796fa67d7c571fbb180e",
    "0xaf5c2984cb1e2f668ae3fd5bbfe0471f68417efd012493538dcd42692299155b",
    "0x9af1e691e3db692cc9cad4e87b6490e099eb291e3b434a0d3f014dfd2bb747cc",
    "0x27e926925fb5903ee038c894d9880f74d3dd6518e23ab5e5651de93327c7dffa",
)


def demo_client_signers() -> List[Signer]:
    return [
        Signer(address=Account.from_key(key).address, private_key=key, label=f"client{index}")
        for index, key in enumerate(DEMO_CLIENT_KEYS)
    ]


def demo_client_addresses() -> List[str]:
    return [signer.address for signer in demo_client_signers()]


def fund_clients(
    chain: ChainClient,
    inbox_address: str,
    clients: Optional[Sequence[Signer]] = None,
    *,
    funder: Optional[Signer] = None,
) -> None:
    """Fund each client from the root signer, then deposit from the client into the inbox.

    Clients are handled one after another; each deposit is paid from the
    transfer that precedes it.
    """

    if clients is None:
        clients = demo_client_signers()
    if funder is None:
        funder = chain.root_signer()
    inbox = chain.contract(inbox_address, INBOX_ABI)

    for client in clients:
        tx_hash = chain.transfer(funder, client.address, CLIENT_FUNDING_WEI)
        chain.wait_for_receipt(tx_hash, f"funding {client.label or client.address}")

        deposit = {
            "to": inbox.address,
            "value": CLIENT_DEPOSIT_WEI,
            "data": inbox.encode_abi("depositEth", args=[0]),
        }
        tx_hash = chain.send_transaction(client, deposit)
        chain.wait_for_receipt(tx_hash, f"depositEth from {client.label or client.address}")
        _LOGGER.info("Funded %s and deposited into inbox %s", client.address, inbox.address)


__all__ = [
    "CLIENT_DEPOSIT_WEI",
    "CLIENT_FUNDING_WEI",
    "DEMO_CLIENT_KEYS",
    "demo_client_addresses",
    "demo_client_signers",
    "fund_clients",
]
