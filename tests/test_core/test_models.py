"""
Tests for launchpad.core.models and launchpad.core.exceptions
===============================================================

What's Being Tested:
    - parse_destroy_flag: only the literal "true" requests teardown
    - DeploymentRequest: defaults and environment name validation
    - DeploymentArtifact size formatting
    - RunOutcome: executed stages, failed stage, exit code derivation
    - Exception context (error codes, details, to_dict)
"""

import pytest

from launchpad.core.enums import StageName, StageStatus
from launchpad.core.exceptions import (
    CommandError,
    ConfigurationError,
    LaunchpadError,
    OutputError,
    StageFailedError,
)
from launchpad.core.models import (
    CommandResult,
    DeploymentArtifact,
    DeploymentRequest,
    RunOutcome,
    StageResult,
    parse_destroy_flag,
)


# =============================================================================
# Test: Destroy Flag
# =============================================================================
class TestParseDestroyFlag:
    """Only the exact string "true" triggers teardown."""

    def test_true(self) -> None:
        assert parse_destroy_flag("true") is True

    @pytest.mark.parametrize("value", ["false", "", "1", "yes", "TRUE", "True", " true", None])
    def test_anything_else_is_false(self, value) -> None:
        assert parse_destroy_flag(value) is False


# =============================================================================
# Test: DeploymentRequest
# =============================================================================
class TestDeploymentRequest:
    """Tests for the invocation parameters model."""

    def test_defaults(self) -> None:
        request = DeploymentRequest()
        assert request.environment == "dev"
        assert request.destroy is False

    @pytest.mark.parametrize("name", ["dev", "staging", "prod", "feature-42", "qa_eu", "feature.x", "v1.2"])
    def test_valid_names(self, name) -> None:
        assert DeploymentRequest(environment=name).environment == name

    @pytest.mark.parametrize("name", ["", "prod/eu", "../prod", "my env", "prod;rm", ".", "..", "a..b"])
    def test_invalid_names_raise_configuration_error(self, name) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            DeploymentRequest(environment=name)
        assert exc_info.value.error_code == "INVALID_ENVIRONMENT"


# =============================================================================
# Test: CommandResult / DeploymentArtifact
# =============================================================================
class TestCommandResult:
    def test_ok(self) -> None:
        assert CommandResult(args=["true"], exit_code=0).ok
        assert not CommandResult(args=["false"], exit_code=1).ok


class TestDeploymentArtifact:
    """Artifact sizes read like ``du -h``."""

    @pytest.mark.parametrize(
        "size_bytes, expected",
        [(512, "512B"), (2048, "2.0K"), (5 * 1024 * 1024, "5.0M"), (3 * 1024 ** 3, "3.0G")],
    )
    def test_size_human(self, tmp_path, size_bytes, expected) -> None:
        artifact = DeploymentArtifact(path=tmp_path / "a.zip", size_bytes=size_bytes, file_count=1)
        assert artifact.size_human == expected


# =============================================================================
# Test: RunOutcome
# =============================================================================
class TestRunOutcome:
    """Tests for the per-run stage record."""

    def _outcome(self, *results: StageResult) -> RunOutcome:
        outcome = RunOutcome(environment="staging")
        for result in results:
            outcome.record(result)
        return outcome

    def test_empty_outcome_succeeds(self) -> None:
        outcome = RunOutcome(environment="dev")
        assert outcome.succeeded
        assert outcome.exit_code == 0
        assert outcome.executed_stages == []

    def test_executed_stages_exclude_skipped(self) -> None:
        outcome = self._outcome(
            StageResult(stage=StageName.BUILD, status=StageStatus.COMPLETED),
            StageResult(stage=StageName.BACKEND_BOOTSTRAP, status=StageStatus.SKIPPED, attempts=0),
            StageResult(stage=StageName.INFRA_INIT, status=StageStatus.COMPLETED),
        )
        assert outcome.executed_stages == [StageName.BUILD, StageName.INFRA_INIT]

    def test_tolerated_failure_still_succeeds(self) -> None:
        outcome = self._outcome(
            StageResult(stage=StageName.DESTROY, status=StageStatus.TOLERATED_FAILURE, exit_code=1),
            StageResult(stage=StageName.APPLY, status=StageStatus.COMPLETED),
        )
        assert outcome.succeeded
        assert outcome.exit_code == 0

    def test_exit_code_comes_from_failed_command(self) -> None:
        outcome = self._outcome(
            StageResult(stage=StageName.BUILD, status=StageStatus.COMPLETED),
            StageResult(stage=StageName.APPLY, status=StageStatus.FAILED, exit_code=3),
        )
        assert not outcome.succeeded
        assert outcome.failed_stage.stage == StageName.APPLY
        assert outcome.exit_code == 3

    def test_exit_code_is_one_without_command_exit(self) -> None:
        outcome = self._outcome(
            StageResult(stage=StageName.OUTPUTS, status=StageStatus.FAILED),
        )
        assert outcome.exit_code == 1

    def test_result_for(self) -> None:
        outcome = self._outcome(StageResult(stage=StageName.BUILD, status=StageStatus.COMPLETED))
        assert outcome.result_for(StageName.BUILD).status == StageStatus.COMPLETED
        assert outcome.result_for(StageName.APPLY) is None


# =============================================================================
# Test: Exceptions
# =============================================================================
class TestExceptions:
    """Every Launchpad exception carries an error code and details."""

    def test_hierarchy(self) -> None:
        for cls in (ConfigurationError, CommandError, OutputError, StageFailedError):
            assert issubclass(cls, LaunchpadError)

    def test_command_error_context(self) -> None:
        error = CommandError(
            message="terraform apply failed",
            args=["terraform", "apply", "-auto-approve"],
            exit_code=1,
            stderr="Error: creating bucket\n",
        )
        assert error.exit_code == 1
        assert error.args_list == ["terraform", "apply", "-auto-approve"]
        assert error.details["command"] == "terraform apply -auto-approve"
        assert error.details["stderr"] == "Error: creating bucket"
        assert error.error_code == "COMMAND_FAILED"

    def test_output_error_records_name(self) -> None:
        error = OutputError(message="missing", output_name="api_url")
        assert error.details["output_name"] == "api_url"
        assert error.error_code == "OUTPUT_MISSING"

    def test_stage_failed_error(self) -> None:
        cause = CommandError(message="boom", args=["terraform"], exit_code=2)
        error = StageFailedError(message="apply failed", stage="apply", exit_code=2, cause=cause)
        assert error.stage == "apply"
        assert error.cause is cause
        assert error.details == {"stage": "apply", "exit_code": 2}

    def test_to_dict(self) -> None:
        data = ConfigurationError(message="bad", details={"field": "region"}).to_dict()
        assert data == {
            "error_type": "ConfigurationError",
            "message": "bad",
            "error_code": "CONFIG_ERROR",
            "details": {"field": "region"},
        }
