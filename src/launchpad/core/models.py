"""
launchpad.core.models - Core Data Models
==========================================

Pydantic models that flow between the CLI, the orchestrator and the
external-tool clients.

Model Overview:
    DeploymentRequest  → What to deploy (environment, destroy flag)
    CommandResult      → What an external command did
    DeploymentArtifact → The Lambda bundle built this run
    DeploymentOutputs  → Values read back from infrastructure state
    StageResult        → What happened to one stage
    RunOutcome         → Ordered stage results for one invocation

Lifecycle:
    The artifact is rebuilt and overwritten on every run. Infrastructure
    state lives outside this process and is only touched through the
    provisioning tool. RunOutcome exists for the duration of one run and is
    never persisted.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from launchpad.core.enums import BootstrapOutcome, StageName, StageStatus
from launchpad.core.exceptions import ConfigurationError


def _now() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(timezone.utc)


# Workspace names double as a path segment of the state key, so "." and
# any ".." are rejected on top of the character set.
_ENVIRONMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_destroy_flag(value: Optional[str]) -> bool:
    """Interpret the destroy flag exactly as the CLI contract defines it.

    Only the literal string ``"true"`` requests teardown. Everything else,
    including ``""``, ``"1"``, ``"yes"`` and ``"TRUE"``, does not.
    """
    return value == "true"


# =============================================================================
# Deployment Request
# =============================================================================
class DeploymentRequest(BaseModel):
    """Invocation parameters for one deployment run.

    Attributes:
        environment: Selects the workspace and the state key. Never mutated.
        destroy: Whether to tear down the workspace before applying.

    Example:
        >>> DeploymentRequest(environment="prod", destroy=parse_destroy_flag("true"))
    """

    environment: str = Field(default="dev")
    destroy: bool = Field(default=False)

    @field_validator("environment")
    @classmethod
    def _validate_environment(cls, value: str) -> str:
        if not _ENVIRONMENT_PATTERN.match(value) or value == "." or ".." in value:
            raise ConfigurationError(
                message=(
                    f"Invalid environment name {value!r}: use letters, digits, "
                    f"'-', '_' or '.' (no '..')"
                ),
                error_code="INVALID_ENVIRONMENT",
                details={"environment": value},
            )
        return value


# =============================================================================
# Command Result
# =============================================================================
class CommandResult(BaseModel):
    """Exit status and (optionally captured) output of an external command."""

    args: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


# =============================================================================
# Deployment Artifact
# =============================================================================
class DeploymentArtifact(BaseModel):
    """The packaged backend bundle.

    Identified only by its path: there is no content hash or version, and
    every run overwrites the previous file.
    """

    path: Path
    size_bytes: int = Field(ge=0)
    file_count: int = Field(ge=0)

    @property
    def size_human(self) -> str:
        """Size formatted the way ``du -h`` would print it."""
        size = float(self.size_bytes)
        for unit in ("B", "K", "M"):
            if size < 1024:
                return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
            size /= 1024
        return f"{size:.1f}G"


# =============================================================================
# Deployment Outputs
# =============================================================================
class DeploymentOutputs(BaseModel):
    """Named values read back from the current infrastructure state."""

    bucket_name: str
    distribution_id: str
    frontend_url: str
    api_url: str
    raw: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Stage Result
# =============================================================================
class StageResult(BaseModel):
    """Outcome of one stage.

    Attributes:
        stage: Which stage this is.
        status: COMPLETED, FAILED, TOLERATED_FAILURE or SKIPPED.
        attempts: How many times the stage action ran (retries included).
        exit_code: Exit status of the failing command, if any.
        error: Error message when the stage failed.
        detail: Free-form human note (skip reason, artifact size, ...).
    """

    stage: StageName
    status: StageStatus
    started_at: datetime = Field(default_factory=_now)
    completed_at: datetime = Field(default_factory=_now)
    attempts: int = Field(default=1, ge=0)
    exit_code: Optional[int] = None
    error: Optional[str] = None
    detail: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


# =============================================================================
# Run Outcome
# =============================================================================
class RunOutcome(BaseModel):
    """Ordered record of stage results for one invocation.

    Example:
        >>> outcome = await orchestrator.run(DeploymentRequest(environment="staging"))
        >>> [s.stage.value for s in outcome.stages]
        ['build', 'backend_bootstrap', 'infra_init', 'apply', ...]
        >>> outcome.exit_code
        0
    """

    environment: str
    destroy_requested: bool = False
    stages: list[StageResult] = Field(default_factory=list)
    backend_bootstrap: Optional[BootstrapOutcome] = None
    artifact: Optional[DeploymentArtifact] = None
    outputs: Optional[DeploymentOutputs] = None
    started_at: datetime = Field(default_factory=_now)
    completed_at: Optional[datetime] = None

    def record(self, result: StageResult) -> None:
        """Append a stage result in execution order."""
        self.stages.append(result)

    def result_for(self, stage: StageName) -> Optional[StageResult]:
        """Return the recorded result for ``stage``, or None if it never ran."""
        for result in self.stages:
            if result.stage == stage:
                return result
        return None

    @property
    def executed_stages(self) -> list[StageName]:
        """Stages whose action actually ran (skipped stages excluded)."""
        return [s.stage for s in self.stages if s.status != StageStatus.SKIPPED]

    @property
    def failed_stage(self) -> Optional[StageResult]:
        """The fatal failure that ended the run, if any."""
        for result in self.stages:
            if result.status == StageStatus.FAILED:
                return result
        return None

    @property
    def succeeded(self) -> bool:
        return self.failed_stage is None

    @property
    def exit_code(self) -> int:
        """Process exit status for this run.

        0 on success; otherwise the exit status of the first fatal failing
        command, or 1 when the fatal failure was not a command exit.
        """
        failed = self.failed_stage
        if failed is None:
            return 0
        return failed.exit_code or 1
