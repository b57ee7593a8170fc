"""
launchpad.integrations.terraform - Provisioning Tool Client
=============================================================

Thin wrapper around the ``terraform`` CLI. Each method builds one argument
vector and hands it to the CommandRunner; resource graphs, state locking and
transactionality stay entirely inside terraform.

Operations Used By The Orchestrator:
    init                       backend bootstrap, infra init (-reconfigure)
    select_or_create_workspace infra init
    destroy                    optional teardown
    plan / apply               infra apply
    outputs                    output retrieval (read-only, safe to retry)

Every command runs with ``-input=false`` so a missing variable fails the
stage instead of blocking on a prompt.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog

from launchpad.core.exceptions import OutputError
from launchpad.core.models import CommandResult
from launchpad.integrations.runner import CommandRunner


logger = structlog.get_logger()


class TerraformClient:
    """Runs terraform commands inside one configuration directory.

    Example:
        >>> tf = TerraformClient(runner, Path("terraform"))
        >>> await tf.init(reconfigure=True, backend_config={"bucket": "state"})
        >>> await tf.select_or_create_workspace("staging")
        >>> await tf.apply({"environment": "staging"})
        >>> (await tf.outputs())["api_url"]
        'https://abc.execute-api.us-east-1.amazonaws.com'
    """

    def __init__(
        self,
        runner: CommandRunner,
        working_dir: Path,
        binary: str = "terraform",
    ) -> None:
        self._runner = runner
        self._working_dir = Path(working_dir)
        self._binary = binary
        self._logger = logger.bind(component="terraform", working_dir=str(working_dir))

    @property
    def working_dir(self) -> Path:
        return self._working_dir

    # =========================================================================
    # Init & Workspaces
    # =========================================================================

    async def init(
        self,
        reconfigure: bool = False,
        backend_config: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        """Initialize the working directory.

        Args:
            reconfigure: Ignore any previously saved backend pointer.
            backend_config: Partial backend settings, passed as
                ``-backend-config=key=value`` pairs in insertion order.
        """
        args = [self._binary, "init", "-input=false"]
        if reconfigure:
            args.append("-reconfigure")
        for key, value in (backend_config or {}).items():
            args.append(f"-backend-config={key}={_format_value(value)}")
        return await self._run(args)

    async def select_or_create_workspace(self, name: str) -> bool:
        """Select workspace ``name``, creating it when selection fails.

        A failed select is the expected result for a new environment and is
        never fatal on its own; only a failed ``workspace new`` raises.

        Returns:
            True if the workspace was created, False if it already existed.

        Raises:
            CommandError: If creating the workspace fails.
        """
        selected = await self._runner.run(
            [self._binary, "workspace", "select", name],
            cwd=self._working_dir,
            capture=True,
            check=False,
        )
        if selected.ok:
            self._logger.info("workspace_selected", workspace=name)
            return False

        self._logger.info(
            "workspace_not_found_creating",
            workspace=name,
            select_exit_code=selected.exit_code,
        )
        await self._run([self._binary, "workspace", "new", name])
        return True

    # =========================================================================
    # Plan / Apply / Destroy
    # =========================================================================

    async def plan(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        var_file: Optional[Path] = None,
    ) -> CommandResult:
        """Compute and display the change plan."""
        args = [self._binary, "plan", "-input=false"]
        args += _variable_args(variables, var_file)
        return await self._run(args)

    async def apply(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        var_file: Optional[Path] = None,
    ) -> CommandResult:
        """Apply changes non-interactively."""
        args = [self._binary, "apply", "-input=false", "-auto-approve"]
        args += _variable_args(variables, var_file)
        return await self._run(args)

    async def destroy(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        var_file: Optional[Path] = None,
    ) -> CommandResult:
        """Destroy every resource in the current workspace, non-interactively."""
        args = [self._binary, "destroy", "-input=false", "-auto-approve"]
        args += _variable_args(variables, var_file)
        return await self._run(args)

    # =========================================================================
    # Outputs
    # =========================================================================

    async def outputs(self) -> dict[str, Any]:
        """Read every output of the current workspace.

        Returns:
            Mapping of output name to its value.

        Raises:
            CommandError: If ``terraform output`` fails.
            OutputError: If its JSON cannot be parsed.
        """
        result = await self._runner.run(
            [self._binary, "output", "-json"],
            cwd=self._working_dir,
            capture=True,
        )
        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise OutputError(
                message=f"Could not parse terraform output: {e}",
                error_code="OUTPUT_UNPARSEABLE",
            ) from e
        if not isinstance(payload, dict):
            raise OutputError(
                message="terraform output did not return a JSON object",
                error_code="OUTPUT_UNPARSEABLE",
            )

        return {
            name: entry.get("value") if isinstance(entry, dict) else entry
            for name, entry in payload.items()
        }

    async def output_raw(self, name: str) -> str:
        """Read a single output as a raw string."""
        result = await self._runner.run(
            [self._binary, "output", "-raw", name],
            cwd=self._working_dir,
            capture=True,
        )
        return result.stdout.strip()

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _run(self, args: list[str]) -> CommandResult:
        self._logger.debug("terraform_command", command=" ".join(args[1:]))
        return await self._runner.run(args, cwd=self._working_dir)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _variable_args(
    variables: Optional[Mapping[str, Any]],
    var_file: Optional[Path],
) -> list[str]:
    args: list[str] = []
    if var_file is not None:
        args.append(f"-var-file={var_file}")
    for key, value in (variables or {}).items():
        args.append(f"-var={key}={_format_value(value)}")
    return args
