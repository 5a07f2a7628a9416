"""ABI fragments for the contracts the bootstrap talks to."""
from __future__ import annotations

VALIDATOR_WALLET_CREATOR_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "walletAddress", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "userAddress", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "adminProxy", "type": "address"},
        ],
        "name": "WalletCreated",
        "type": "event",
    },
    {
        "inputs": [],
        "name": "createWallet",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

WALLET_CREATED_EVENT = "WalletCreated"

INBOX_ABI = [
    {
        "inputs": [{"internalType": "uint256", "name": "maxSubmissionCost", "type": "uint256"}],
        "name": "depositEth",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
]
