from __future__ import annotations

import json
import subprocess

import pytest

from rollup_demo_setup.errors import DeploymentError, ParseError, WhitelistError
from rollup_demo_setup.tools import ToolRunner, deploy_rollup, read_rollup_artifact, register_validators

from fakes import INBOX_ADDRESS, ROLLUP_ADDRESS, FakeRunner, address


def test_deploy_rollup_builds_command_and_reads_artifact(settings, runner):
    artifact = deploy_rollup(runner, settings, address("a1"), [address("b1"), address("b2")])

    assert runner.calls == [
        [
            "yarn", "workspace", "arb-bridge-eth", "hardhat", "create-chain",
            "--sequencer", address("a1"),
            "--whitelist", f"{address('b1')},{address('b2')}",
            "--network", "local_development",
        ]
    ]
    assert artifact.rollup_address == ROLLUP_ADDRESS
    assert artifact.inbox_address == INBOX_ADDRESS


def test_deploy_rollup_without_whitelist_omits_flag(settings, runner):
    deploy_rollup(runner, settings, address("a1"))

    assert "--whitelist" not in runner.calls[0]


def test_deploy_rollup_surfaces_tool_output_on_failure(settings):
    runner = FakeRunner(settings, deploy_returncode=2)

    with pytest.raises(DeploymentError) as excinfo:
        deploy_rollup(runner, settings, address("a1"))

    assert excinfo.value.returncode == 2
    assert excinfo.value.stderr == "Error HH108: cannot connect"
    assert "HH108" in str(excinfo.value)


def test_deploy_rollup_requires_artifact(settings):
    runner = FakeRunner(settings, write_artifact=False)

    with pytest.raises(DeploymentError, match="was not written"):
        deploy_rollup(runner, settings, address("a1"))


def test_deploy_rollup_rejects_stale_artifact(settings):
    path = settings.artifact_path
    path.write_text(json.dumps({"rollupAddress": ROLLUP_ADDRESS, "inboxAddress": INBOX_ADDRESS}))
    runner = FakeRunner(settings, write_artifact=False)

    with pytest.raises(DeploymentError, match="not refreshed"):
        deploy_rollup(runner, settings, address("a1"))


def test_deploy_rollup_wraps_malformed_artifact(settings):
    class BrokenArtifactRunner(FakeRunner):
        def __call__(self, args):
            result = super().__call__(args)
            self.settings.artifact_path.write_text(json.dumps({"rollupAddress": ROLLUP_ADDRESS}))
            return result

    with pytest.raises(DeploymentError, match="inboxAddress"):
        deploy_rollup(BrokenArtifactRunner(settings), settings, address("a1"))


def test_deploy_rollup_wraps_undecodable_artifact(settings):
    class BinaryArtifactRunner(FakeRunner):
        def __call__(self, args):
            result = super().__call__(args)
            self.settings.artifact_path.write_bytes(b"\xff\xfe{not utf8")
            return result

    with pytest.raises(DeploymentError, match="Unable to read rollup artifact"):
        deploy_rollup(BinaryArtifactRunner(settings), settings, address("a1"))


def test_deploy_rollup_reports_missing_executable(settings):
    def missing(args):
        raise FileNotFoundError(2, "No such file or directory", "yarn")

    with pytest.raises(DeploymentError, match="Unable to run"):
        deploy_rollup(missing, settings, address("a1"))


def test_read_rollup_artifact_validates_addresses(tmp_path):
    path = tmp_path / "rollup-local_development.json"
    path.write_text(json.dumps({"rollupAddress": "0x1234", "inboxAddress": INBOX_ADDRESS}))

    with pytest.raises(ParseError, match="rollupAddress"):
        read_rollup_artifact(path)


def test_read_rollup_artifact_requires_object(tmp_path):
    path = tmp_path / "rollup.json"
    path.write_text("[]")

    with pytest.raises(ParseError):
        read_rollup_artifact(path)


def test_read_rollup_artifact_checksums_addresses(tmp_path):
    path = tmp_path / "rollup.json"
    path.write_text(json.dumps({"rollupAddress": address("ab").lower(), "inboxAddress": INBOX_ADDRESS}))

    artifact = read_rollup_artifact(path)

    assert artifact.rollup_address == address("ab")


def test_register_validators_passes_positional_arguments(settings, runner):
    register_validators(runner, settings, ROLLUP_ADDRESS, [address("c1"), address("c2")])

    assert runner.calls == [
        [
            "yarn", "workspace", "arb-bridge-eth", "hardhat", "whitelist-validators",
            ROLLUP_ADDRESS, f"{address('c1')},{address('c2')}",
        ]
    ]


def test_register_validators_failure(settings):
    runner = FakeRunner(settings, whitelist_returncode=1)

    with pytest.raises(WhitelistError) as excinfo:
        register_validators(runner, settings, ROLLUP_ADDRESS, [address("c1")])

    assert excinfo.value.command[-2:] == [ROLLUP_ADDRESS, address("c1")]
    assert "reverted" in str(excinfo.value)


def test_tool_runner_runs_in_repository_root(tmp_path, monkeypatch):
    captured = {}

    def fake_run(args, **kwargs):
        captured.update(args=args, **kwargs)
        return subprocess.CompletedProcess(args, 0, "ok", "")

    monkeypatch.setattr("rollup_demo_setup.tools.subprocess.run", fake_run)

    result = ToolRunner(tmp_path)(("yarn", "--version"))

    assert result.stdout == "ok"
    assert captured["args"] == ["yarn", "--version"]
    assert captured["cwd"] == tmp_path
    assert captured["capture_output"] is True
    assert captured["text"] is True
