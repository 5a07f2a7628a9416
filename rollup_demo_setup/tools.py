"""Drivers for the external rollup deployment and whitelist commands."""
from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import Settings, normalize_address
from .errors import DeploymentError, ParseError, WhitelistError

_LOGGER = logging.getLogger(__name__)


class ToolRunner:
    """Run a command from the repository root and capture its output."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = Path(cwd)

    def __call__(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        _LOGGER.debug("$ %s", " ".join(args))
        return subprocess.run(list(args), cwd=self.cwd, capture_output=True, text=True, check=False)


@dataclass(frozen=True)
class RollupArtifact:
    rollup_address: str
    inbox_address: str


def _mtime(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def read_rollup_artifact(path: Path, previous_mtime: Optional[int] = None) -> RollupArtifact:
    """Parse the artifact written by the deployment command.

    ``previous_mtime`` is the artifact's modification time before the command
    ran; an artifact that was not rewritten since is rejected as stale.
    """

    path = Path(path)
    current_mtime = _mtime(path)
    if current_mtime is None:
        raise DeploymentError(f"Rollup artifact {path} was not written")
    if previous_mtime is not None and current_mtime <= previous_mtime:
        raise DeploymentError(f"Rollup artifact {path} was not refreshed by the deployment")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DeploymentError(f"Unable to read rollup artifact {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ParseError(f"Rollup artifact {path} is not a JSON object")

    try:
        rollup_address = payload["rollupAddress"]
        inbox_address = payload["inboxAddress"]
    except KeyError as exc:
        raise ParseError(f"Rollup artifact {path} is missing {exc.args[0]}") from exc

    return RollupArtifact(
        rollup_address=normalize_address(rollup_address, "rollupAddress"),
        inbox_address=normalize_address(inbox_address, "inboxAddress"),
    )


def deploy_rollup(
    runner,
    settings: Settings,
    sequencer: str,
    whitelist: Optional[Sequence[str]] = None,
) -> RollupArtifact:
    """Create a new rollup with ``sequencer`` and the inbox ``whitelist``."""

    args = [*settings.tool_command, "create-chain", "--sequencer", sequencer]
    if whitelist:
        args += ["--whitelist", ",".join(whitelist)]
    args += ["--network", settings.network]

    artifact_path = settings.artifact_path
    previous_mtime = _mtime(artifact_path)
    try:
        result = runner(args)
    except OSError as exc:
        raise DeploymentError(f"Unable to run rollup deployment: {exc}", command=args) from exc
    if result.returncode != 0:
        raise DeploymentError(
            f"Rollup deployment exited with status {result.returncode}",
            command=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    try:
        return read_rollup_artifact(artifact_path, previous_mtime)
    except (DeploymentError, ParseError) as exc:
        raise DeploymentError(
            str(exc),
            command=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        ) from exc


def register_validators(runner, settings: Settings, rollup_address: str, wallet_addresses: Sequence[str]) -> None:
    """Whitelist ``wallet_addresses`` as validators of ``rollup_address``."""

    args = [*settings.tool_command, "whitelist-validators", rollup_address, ",".join(wallet_addresses)]
    try:
        result = runner(args)
    except OSError as exc:
        raise WhitelistError(f"Unable to run validator whitelisting: {exc}", command=args) from exc
    if result.returncode != 0:
        raise WhitelistError(
            f"Validator whitelisting exited with status {result.returncode}",
            command=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
    _LOGGER.info("Whitelisted %d validator wallets on %s", len(wallet_addresses), rollup_address)


__all__ = ["RollupArtifact", "ToolRunner", "deploy_rollup", "read_rollup_artifact", "register_validators"]
