"""Thin adapter over the L1 JSON-RPC endpoint.

Every signer, whether it is an unlocked node account or a key held in
memory, goes through the same :class:`ChainClient` methods. Locally held keys
are signed with ``eth_account`` and submitted raw; node accounts are sent
with ``eth_sendTransaction``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from eth_abi.exceptions import DecodingError
from eth_account import Account
from eth_utils import event_abi_to_log_topic
from hexbytes import HexBytes
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import ContractLogicError, MismatchedABI, TimeExhausted, Web3Exception

from .config import Settings
from .errors import ConfigError, ParseError, RPCError

_LOGGER = logging.getLogger(__name__)

_NODE_ERRORS = (Web3Exception, RequestException, ValueError)


@dataclass(frozen=True)
class Signer:
    """An account able to originate transactions.

    ``private_key`` is ``None`` for accounts the node signs for.
    """

    address: str
    private_key: Optional[str] = None
    label: str = ""

    @property
    def node_managed(self) -> bool:
        return self.private_key is None

    def __repr__(self) -> str:  # keep keys out of logs and tracebacks
        return f"Signer(address={self.address!r}, label={self.label!r})"


class ChainClient:
    """Send transactions, wait for receipts and decode event logs."""

    def __init__(self, web3: Web3, settings: Settings) -> None:
        self.web3 = web3
        self.settings = settings

    @classmethod
    def connect(cls, settings: Settings) -> "ChainClient":
        web3 = Web3(Web3.HTTPProvider(settings.eth_url))
        if not web3.is_connected():
            raise RPCError(f"Unable to connect to RPC endpoint {settings.eth_url}")
        _LOGGER.debug("Connected to %s", settings.eth_url)
        return cls(web3, settings)

    def root_signer(self) -> Signer:
        """Return the pre-funded node account used to pay for the run."""

        try:
            accounts = self.web3.eth.accounts
        except _NODE_ERRORS as exc:
            raise RPCError(f"Unable to list node accounts: {exc}") from exc
        index = self.settings.root_account_index
        if not 0 <= index < len(accounts):
            raise ConfigError(f"Root account index {index} is out of range; the node exposes {len(accounts)} accounts")
        return Signer(address=Web3.to_checksum_address(accounts[index]), label=f"root[{index}]")

    def contract(self, address: str, abi: Sequence[Mapping[str, Any]]) -> Any:
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def _complete_transaction(self, signer: Signer, tx: Dict[str, Any]) -> Dict[str, Any]:
        eth = self.web3.eth
        tx.setdefault("nonce", eth.get_transaction_count(signer.address, "pending"))
        tx.setdefault("chainId", eth.chain_id)
        tx.setdefault("gas", eth.estimate_gas(tx))
        if "maxFeePerGas" not in tx:
            tx.setdefault("gasPrice", eth.gas_price)
        return tx

    def send_transaction(self, signer: Signer, tx: Mapping[str, Any]) -> str:
        """Submit ``tx`` from ``signer`` and return its hash."""

        payload: Dict[str, Any] = dict(tx)
        payload["from"] = signer.address
        try:
            if signer.node_managed:
                tx_hash = self.web3.eth.send_transaction(payload)
            else:
                payload = self._complete_transaction(signer, payload)
                signed = Account.sign_transaction(payload, signer.private_key)
                tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except _NODE_ERRORS as exc:
            raise RPCError(f"Failed to submit transaction from {signer.address}: {exc}") from exc
        tx_hash_hex = Web3.to_hex(tx_hash)
        _LOGGER.debug("Submitted %s from %s", tx_hash_hex, signer.address)
        return tx_hash_hex

    def transfer(self, signer: Signer, to: str, amount_wei: int) -> str:
        return self.send_transaction(signer, {"to": Web3.to_checksum_address(to), "value": amount_wei})

    def _revert_reason(self, tx_hash: str, block_number: Any) -> str:
        try:
            tx = self.web3.eth.get_transaction(tx_hash)
            call = {key: tx[key] for key in ("from", "to", "value", "input") if tx.get(key) is not None}
            if "input" in call:
                call["data"] = call.pop("input")
            self.web3.eth.call(call, block_number)
        except ContractLogicError as exc:
            return str(exc)
        except _NODE_ERRORS as exc:
            return f"unknown reason ({exc})"
        return "unknown reason"

    def wait_for_receipt(self, tx_hash: str, description: str = "transaction") -> Mapping[str, Any]:
        """Block until ``tx_hash`` is mined and check that it succeeded."""

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.settings.receipt_timeout)
        except TimeExhausted as exc:
            raise RPCError(f"Timed out waiting for {description} {tx_hash}", tx_hash=tx_hash) from exc
        except _NODE_ERRORS as exc:
            raise RPCError(f"Failed to fetch receipt for {description} {tx_hash}: {exc}", tx_hash=tx_hash) from exc

        if receipt.get("status") != 1:
            _LOGGER.warning("%s %s failed", description, tx_hash)
            reason = self._revert_reason(tx_hash, receipt.get("blockNumber"))
            raise RPCError(f"transaction {description} failed with tx {tx_hash}: {reason}", tx_hash=tx_hash)
        return receipt

    def parse_event(self, receipt: Mapping[str, Any], contract: Any, event_name: str) -> Any:
        """Decode the last ``event_name`` log that ``contract`` emitted in ``receipt``.

        Logs are matched on emitter address and event topic; when several
        match, the final one wins.
        """

        event_abi = next(
            (item for item in contract.abi if item.get("type") == "event" and item.get("name") == event_name),
            None,
        )
        if event_abi is None:
            raise ParseError(f"Contract ABI does not declare event {event_name}")
        topic = HexBytes(event_abi_to_log_topic(event_abi))
        emitter = str(contract.address).lower()

        matching = [
            log
            for log in receipt.get("logs", [])
            if str(log.get("address", "")).lower() == emitter
            and log.get("topics")
            and HexBytes(log["topics"][0]) == topic
        ]
        if not matching:
            raise ParseError(f"No {event_name} log from {contract.address} in receipt {receipt.get('transactionHash')}")

        try:
            return getattr(contract.events, event_name)().process_log(matching[-1])
        except (MismatchedABI, DecodingError, ValueError, KeyError) as exc:
            raise ParseError(f"Unable to decode {event_name} log: {exc}") from exc


__all__ = ["ChainClient", "Signer"]
