"""
Tests for launchpad.cli
=========================

The command is driven through click's CliRunner. The orchestrator it builds
is swapped for one wired to MockCommandRunner, so every stage runs without
external tools.
"""

import pytest
import structlog
from click.testing import CliRunner

import launchpad.cli as cli_module
from launchpad.cli import main
from launchpad.orchestration.orchestrator import DeploymentOrchestrator


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI configures structlog against CliRunner's stderr; undo that."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def ambient(monkeypatch):
    monkeypatch.setenv("LAUNCHPAD_ACCOUNT_ID", "123456789012")
    monkeypatch.setenv("LAUNCHPAD_REGION", "us-east-1")


@pytest.fixture
def cli_runner(monkeypatch, project_root):
    monkeypatch.chdir(project_root)
    return CliRunner()


@pytest.fixture
def patched_orchestrator(monkeypatch, scripted_runner, no_sleep):
    """Make the CLI build its orchestrator around the scripted runner."""

    def build(config):
        return DeploymentOrchestrator(config, runner=scripted_runner, sleep=no_sleep)

    monkeypatch.setattr(cli_module, "DeploymentOrchestrator", build)
    return scripted_runner


def _invoke(cli_runner, project_root, *args):
    return cli_runner.invoke(main, [*args, "--project-root", str(project_root)])


class TestCli:
    """Tests for the launchpad command."""

    def test_defaults_to_dev_without_destroy(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        result = _invoke(cli_runner, project_root)

        assert result.exit_code == 0, result.output
        assert ("terraform", "workspace", "select", "dev") in patched_orchestrator.commands
        assert patched_orchestrator.index_of(["terraform", "destroy"]) == -1
        assert "Deployment complete: twin / dev" in result.output

    def test_destroy_true_tears_down_first(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        result = _invoke(cli_runner, project_root, "prod", "true")

        assert result.exit_code == 0, result.output
        destroy = patched_orchestrator.index_of(["terraform", "destroy"])
        assert -1 < destroy < patched_orchestrator.index_of(["terraform", "apply"])

    @pytest.mark.parametrize("flag", ["yes", "1", "TRUE", ""])
    def test_other_destroy_values_do_not_tear_down(
        self, cli_runner, project_root, ambient, patched_orchestrator, flag
    ) -> None:
        result = _invoke(cli_runner, project_root, "prod", flag)

        assert result.exit_code == 0, result.output
        assert patched_orchestrator.index_of(["terraform", "destroy"]) == -1

    def test_exit_code_of_failed_command_is_propagated(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        patched_orchestrator.on(["terraform", "apply"], exit_code=3)

        result = _invoke(cli_runner, project_root, "staging")

        assert result.exit_code == 3
        assert "Deployment FAILED" in result.output

    def test_missing_ambient_configuration_exits_2(
        self, cli_runner, project_root, monkeypatch, patched_orchestrator
    ) -> None:
        monkeypatch.delenv("LAUNCHPAD_ACCOUNT_ID", raising=False)
        monkeypatch.delenv("LAUNCHPAD_REGION", raising=False)

        result = _invoke(cli_runner, project_root, "staging")

        assert result.exit_code == 2
        assert "LAUNCHPAD_ACCOUNT_ID" in result.output
        assert patched_orchestrator.calls == []

    def test_invalid_environment_exits_2(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        result = _invoke(cli_runner, project_root, "../prod")

        assert result.exit_code == 2
        assert "Invalid environment name" in result.output
        assert patched_orchestrator.calls == []

    def test_missing_config_file_exits_2(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        result = _invoke(cli_runner, project_root, "--config", "missing.yaml")
        assert result.exit_code == 2

    def test_config_file_is_used(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        config_file = project_root / "deploy.yaml"
        config_file.write_text("project_name: digital-twin\n")

        result = _invoke(cli_runner, project_root, "staging", "--config", str(config_file))

        assert result.exit_code == 0, result.output
        init = patched_orchestrator.calls_matching(["terraform", "init"])[0].args
        assert "-backend-config=key=digital-twin/staging/terraform.tfstate" in init

    def test_config_file_in_project_root_is_detected(
        self, cli_runner, project_root, ambient, patched_orchestrator, tmp_path_factory, monkeypatch
    ) -> None:
        (project_root / "launchpad.yaml").write_text("project_name: digital-twin\n")
        monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))

        result = _invoke(cli_runner, project_root, "staging")

        assert result.exit_code == 0, result.output
        init = patched_orchestrator.calls_matching(["terraform", "init"])[0].args
        assert "-backend-config=key=digital-twin/staging/terraform.tfstate" in init

    def test_explicit_config_beats_project_root_file(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        (project_root / "launchpad.yaml").write_text("project_name: digital-twin\n")
        override = project_root / "deploy.yaml"
        override.write_text("project_name: other-twin\n")

        result = _invoke(cli_runner, project_root, "staging", "--config", str(override))

        assert result.exit_code == 0, result.output
        init = patched_orchestrator.calls_matching(["terraform", "init"])[0].args
        assert "-backend-config=key=other-twin/staging/terraform.tfstate" in init

    def test_environment_with_dot_is_accepted(
        self, cli_runner, project_root, ambient, patched_orchestrator
    ) -> None:
        result = _invoke(cli_runner, project_root, "feature.x")

        assert result.exit_code == 0, result.output
        assert ("terraform", "workspace", "select", "feature.x") in patched_orchestrator.commands

    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
