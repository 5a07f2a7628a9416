"""Exception hierarchy for the validator demo bootstrap."""
from __future__ import annotations

from typing import Optional, Sequence


class SetupError(RuntimeError):
    """Base class for every failure that aborts a setup run."""


class ConfigError(SetupError):
    """Raised for invalid arguments or unusable configuration."""


class StateExistsError(SetupError):
    """Raised when the output tree already exists and ``force`` is not set."""


class RPCError(SetupError):
    """Raised when the node rejects a transaction or a receipt reports failure."""

    def __init__(self, message: str, tx_hash: Optional[str] = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class ToolError(SetupError):
    """Failure of an external command, with its captured output."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        details = (self.stderr or self.stdout or "").strip()
        if details:
            return f"{message}\n{details}"
        return message


class DeploymentError(ToolError):
    """Raised when rollup creation fails or its artifact cannot be read."""


class WhitelistError(ToolError):
    """Raised when registering validator wallets on the rollup fails."""


class KeystoreError(SetupError):
    """Raised when a key cannot be encrypted or written to disk."""


class ParseError(SetupError):
    """Raised for an unexpected event log or artifact shape."""


__all__ = [
    "ConfigError",
    "DeploymentError",
    "KeystoreError",
    "ParseError",
    "RPCError",
    "SetupError",
    "StateExistsError",
    "ToolError",
    "WhitelistError",
]
