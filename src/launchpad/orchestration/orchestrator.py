"""
launchpad.orchestration.orchestrator - Deployment Orchestrator
================================================================

The top-level orchestrator: sequences build, backend provisioning,
infrastructure apply and frontend publish for one environment.

Stage Sequence (each depends on the previous one succeeding):

     1. build               Lambda artifact, rebuilt from scratch
     2. backend_bootstrap   state bucket + lock table, only if the dir exists
     3. infra_init          backend pointer for {project}/{env}, select-or-create workspace
     4. destroy             only when requested; failure tolerated
     5. apply               plan, then apply -auto-approve
     6. outputs             bucket, distribution id, URLs (retried, read-only)
     7. frontend_build      static site with the API URL baked in
     8. frontend_publish    mirror to the bucket (--delete)
     9. cache_invalidation  "/*" on the distribution, not awaited
    10. summary             URLs and per-stage status

Failure Semantics:
    Fatal/tolerated is decided by the StagePolicyTable, interpreted by the
    StageRunner. A fatal failure ends the run immediately; later stages never
    execute and infrastructure is left as terraform left it. There is no
    rollback, no timeout, and no coordination beyond terraform's own lock
    table: one deployment per environment at a time is assumed.

Usage:
    >>> config = load_config()
    >>> orchestrator = DeploymentOrchestrator(config)   # validates ambient config
    >>> outcome = await orchestrator.run(DeploymentRequest(environment="prod", destroy=True))
    >>> outcome.exit_code
    0
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click
import structlog

from launchpad.build.frontend import FrontendBuilder
from launchpad.build.packaging import LambdaPackager
from launchpad.core.config import DeployConfig
from launchpad.core.enums import BootstrapOutcome, StageName
from launchpad.core.exceptions import LaunchpadError, OutputError, StageFailedError
from launchpad.core.models import (
    DeploymentArtifact,
    DeploymentOutputs,
    DeploymentRequest,
    RunOutcome,
)
from launchpad.integrations.aws import AwsCli
from launchpad.integrations.runner import CommandRunner, SubprocessRunner
from launchpad.integrations.terraform import TerraformClient
from launchpad.orchestration.policy import StagePolicyTable
from launchpad.orchestration.retry import RetryPolicy
from launchpad.orchestration.stage_runner import StageRunner
from launchpad.orchestration.summary import format_failure, format_summary


logger = structlog.get_logger()

# Var file used by every environment that has no {environment}.tfvars.
DEFAULT_VAR_FILE = "terraform.tfvars"


class DeploymentOrchestrator:
    """Runs the deployment stage sequence for one environment.

    Attributes:
        _config: Validated DeployConfig.
        _runner: CommandRunner shared by every external-tool client.
        _policies: Declarative stage policy table.
        _echo: Where summary lines are printed (click.echo by default).
        _sleep: Awaitable sleep used for retry backoff.
    """

    def __init__(
        self,
        config: DeployConfig,
        runner: Optional[CommandRunner] = None,
        policies: Optional[StagePolicyTable] = None,
        echo: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Build the orchestrator and validate its ambient configuration.

        Raises:
            ConfigurationError: If the account id or region is missing.
        """
        config.validate_ambient()

        self._config = config
        self._runner = runner or SubprocessRunner()
        self._policies = policies or StagePolicyTable.default(
            output_retry=RetryPolicy(
                max_retries=config.output_retry_attempts,
                initial_delay=config.output_retry_initial_delay,
            )
        )
        self._echo = echo or click.echo
        self._sleep = sleep

        layout = config.layout
        self._packager = LambdaPackager(config, self._runner)
        self._frontend = FrontendBuilder(config, self._runner)
        self._terraform = TerraformClient(self._runner, layout.terraform_path)
        self._backend_terraform = TerraformClient(self._runner, layout.backend_bootstrap_path)
        self._aws = AwsCli(self._runner, region=config.region)

        self._logger = logger.bind(component="orchestrator", project=config.project_name)

    @property
    def config(self) -> DeployConfig:
        return self._config

    @property
    def policies(self) -> StagePolicyTable:
        return self._policies

    # =========================================================================
    # Main Entry Point
    # =========================================================================

    async def run(self, request: DeploymentRequest) -> RunOutcome:
        """Execute the full stage sequence for ``request``.

        Never raises for stage failures: a fatal failure is recorded in the
        returned RunOutcome, whose ``exit_code`` carries the failing command's
        exit status.
        """
        outcome = RunOutcome(environment=request.environment, destroy_requested=request.destroy)
        stages = StageRunner(self._policies, outcome, sleep=self._sleep)
        log = self._logger.bind(environment=request.environment)

        log.info(
            "deployment_starting",
            destroy=request.destroy,
            state_key=self._config.state_key(request.environment),
        )

        try:
            await self._execute(request, stages)
        except StageFailedError as e:
            log.error("deployment_failed", stage=e.stage, exit_code=e.exit_code)
            for line in format_failure(outcome, self._config.project_name):
                self._echo(line)
        else:
            log.info("deployment_completed", stages=len(outcome.stages))

        outcome.completed_at = datetime.now(timezone.utc)
        return outcome

    async def _execute(self, request: DeploymentRequest, stages: StageRunner) -> None:
        outcome = stages.outcome
        environment = request.environment

        # --- 1. Backend artifact ---
        outcome.artifact = await stages.run(
            StageName.BUILD,
            self._packager.build,
            detail=_describe_artifact,
        )

        # --- 2. Remote state backend (conditional) ---
        await self._bootstrap_backend(stages)

        # --- 3. Backend pointer + workspace ---
        await stages.run(
            StageName.INFRA_INIT,
            lambda: self._init_infrastructure(environment),
            detail=lambda created: (
                f"workspace '{environment}' created" if created
                else f"workspace '{environment}' selected"
            ),
        )

        # --- 4. Teardown (conditional, best-effort) ---
        if request.destroy:
            await stages.run(StageName.DESTROY, lambda: self._destroy(environment))
        else:
            stages.skip(StageName.DESTROY, "destroy not requested")

        # --- 5. Plan + apply ---
        await stages.run(StageName.APPLY, lambda: self._apply(environment))

        # --- 6. Outputs ---
        outputs = await stages.run(StageName.OUTPUTS, self._read_outputs)
        outcome.outputs = outputs
        if outputs is None:
            for stage in (
                StageName.FRONTEND_BUILD,
                StageName.FRONTEND_PUBLISH,
                StageName.CACHE_INVALIDATION,
            ):
                stages.skip(stage, "infrastructure outputs unavailable")
        else:
            # --- 7-9. Frontend ---
            await self._publish_frontend(stages, outputs)

        # --- 10. Summary ---
        await stages.run(StageName.SUMMARY, lambda: self._print_summary(outcome))

    # =========================================================================
    # Stage Actions
    # =========================================================================

    async def _bootstrap_backend(self, stages: StageRunner) -> None:
        outcome = stages.outcome
        bootstrap_dir = self._config.layout.backend_bootstrap_path

        if not bootstrap_dir.is_dir():
            self._logger.warning(
                "backend_bootstrap_absent",
                path=str(bootstrap_dir),
                assumption="remote state bucket and lock table already exist",
            )
            outcome.backend_bootstrap = BootstrapOutcome.ABSENT_SKIPPED
            stages.skip(
                StageName.BACKEND_BOOTSTRAP,
                "no backend-definition directory; existing backend assumed",
            )
            return

        # Stays FAILED unless the apply below succeeds.
        outcome.backend_bootstrap = BootstrapOutcome.FAILED
        applied = await stages.run(StageName.BACKEND_BOOTSTRAP, self._apply_backend_bootstrap)
        if applied:
            outcome.backend_bootstrap = BootstrapOutcome.APPLIED

    async def _apply_backend_bootstrap(self) -> bool:
        await self._backend_terraform.init()
        await self._backend_terraform.apply()
        return True

    async def _init_infrastructure(self, environment: str) -> bool:
        config = self._config
        await self._terraform.init(
            reconfigure=True,
            backend_config={
                "bucket": config.state_bucket(),
                "key": config.state_key(environment),
                "region": config.region,
                "dynamodb_table": config.lock_table(),
                "encrypt": config.backend.encrypt,
            },
        )
        return await self._terraform.select_or_create_workspace(environment)

    async def _destroy(self, environment: str) -> None:
        if self._config.empty_buckets_before_destroy:
            await self._empty_frontend_bucket()

        var_file = self._var_file(environment) if self._config.destroy_uses_var_file else None
        await self._terraform.destroy(self._variables(environment), var_file)

    async def _empty_frontend_bucket(self) -> None:
        bucket_output = self._config.outputs.bucket
        try:
            bucket = (await self._terraform.outputs()).get(bucket_output)
            if bucket:
                await self._aws.empty_bucket(str(bucket))
            else:
                self._logger.info("bucket_empty_skipped", output=bucket_output)
        except LaunchpadError as e:
            # Teardown is best-effort; destroy still runs.
            self._logger.warning("bucket_empty_failed", output=bucket_output, error=e.to_dict())

    async def _apply(self, environment: str) -> None:
        variables = self._variables(environment)
        var_file = self._var_file(environment)
        await self._terraform.plan(variables, var_file)
        await self._terraform.apply(variables, var_file)

    async def _read_outputs(self) -> DeploymentOutputs:
        values = await self._terraform.outputs()
        names = self._config.outputs

        def require(name: str) -> str:
            value = values.get(name)
            if value is None or value == "":
                raise OutputError(
                    message=f"Infrastructure output '{name}' is not defined",
                    output_name=name,
                    details={"available": sorted(values)},
                )
            return str(value)

        outputs = DeploymentOutputs(
            bucket_name=require(names.bucket),
            distribution_id=require(names.distribution_id),
            frontend_url=require(names.frontend_url),
            api_url=require(names.api_url),
            raw=values,
        )
        self._logger.info(
            "deployment_outputs",
            bucket=outputs.bucket_name,
            distribution_id=outputs.distribution_id,
            frontend_url=outputs.frontend_url,
            api_url=outputs.api_url,
        )
        return outputs

    async def _publish_frontend(self, stages: StageRunner, outputs: DeploymentOutputs) -> None:
        output_dir = await stages.run(
            StageName.FRONTEND_BUILD,
            lambda: self._frontend.build(api_url=outputs.api_url),
        )
        if output_dir is None:
            stages.skip(StageName.FRONTEND_PUBLISH, "frontend build unavailable")
            stages.skip(StageName.CACHE_INVALIDATION, "frontend build unavailable")
            return

        await stages.run(
            StageName.FRONTEND_PUBLISH,
            lambda: self._aws.sync(output_dir, outputs.bucket_name, delete=True),
            detail=lambda _: f"s3://{outputs.bucket_name}/",
        )
        await stages.run(
            StageName.CACHE_INVALIDATION,
            lambda: self._aws.create_invalidation(outputs.distribution_id),
            detail=lambda _: f"{outputs.distribution_id} /*",
        )

    async def _print_summary(self, outcome: RunOutcome) -> None:
        for line in format_summary(outcome, self._config.project_name):
            self._echo(line)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _variables(self, environment: str) -> dict[str, str]:
        return {"project_name": self._config.project_name, "environment": environment}

    def _var_file(self, environment: str) -> Optional[Path]:
        """``{environment}.tfvars`` if present, else terraform.tfvars, else None.

        Returned relative to the terraform directory, where commands run.
        """
        terraform_dir = self._config.layout.terraform_path
        for name in (f"{environment}.tfvars", DEFAULT_VAR_FILE):
            if (terraform_dir / name).is_file():
                return Path(name)
        return None


def _describe_artifact(artifact: DeploymentArtifact) -> str:
    return f"{artifact.path.name} ({artifact.size_human})"
