"""
launchpad.integrations.runner - External Command Execution
============================================================

Every external tool Launchpad drives (uv, docker, terraform, npm, the aws
CLI) is invoked through a CommandRunner. The orchestrator never spawns
processes directly, which keeps the stage logic testable without any of
those tools installed.

    ┌────────────────┐   run(args)   ┌────────────────────┐
    │ TerraformClient│ ────────────→ │   CommandRunner     │
    │ AwsCli         │               │   (abstract)        │
    │ LambdaPackager │ ←──────────── │                     │
    └────────────────┘ CommandResult └─────────┬──────────┘
                                               │
                                  ┌────────────┴───────────┐
                                  │                        │
                          SubprocessRunner        MockCommandRunner
                          (real processes)        (scripted, tests)

Execution Model:
    One command at a time, awaited to completion. No timeouts are applied:
    a hung tool hangs the run until it is interrupted from outside.

Output Handling:
    capture=False inherits the terminal so tool output streams live.
    capture=True pipes stdout/stderr back for parsing (terraform output -json).
"""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional, Sequence

import structlog

from launchpad.core.exceptions import CommandError
from launchpad.core.models import CommandResult


logger = structlog.get_logger()


# Exit status shells use for "command not found".
EXIT_COMMAND_NOT_FOUND = 127


# =============================================================================
# Abstract Base Class: CommandRunner
# =============================================================================
class CommandRunner(ABC):
    """Contract for running an external command to completion."""

    @abstractmethod
    async def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        capture: bool = False,
        check: bool = True,
    ) -> CommandResult:
        """Run ``args`` and wait for it to exit.

        Args:
            args: Argument vector; args[0] is the executable.
            cwd: Working directory for the process.
            env: Variables layered on top of the current environment.
            capture: Capture stdout/stderr instead of inheriting the terminal.
            check: Raise CommandError on a non-zero exit status.

        Returns:
            The CommandResult (also returned for non-zero exits when check=False).

        Raises:
            CommandError: On non-zero exit with check=True, or when the
                executable cannot be found.
        """


# =============================================================================
# SubprocessRunner
# =============================================================================
class SubprocessRunner(CommandRunner):
    """Runs commands as real child processes via asyncio."""

    def __init__(self) -> None:
        self._logger = logger.bind(component="subprocess_runner")

    async def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        capture: bool = False,
        check: bool = True,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        process_env = os.environ.copy()
        if env:
            process_env.update(env)

        self._logger.debug("command_starting", command=" ".join(argv), cwd=str(cwd or "."))

        pipe = asyncio.subprocess.PIPE if capture else None
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd) if cwd is not None else None,
                env=process_env,
                stdout=pipe,
                stderr=pipe,
            )
        except FileNotFoundError as e:
            raise CommandError(
                message=f"Executable not found: {argv[0]}",
                args=argv,
                exit_code=EXIT_COMMAND_NOT_FOUND,
                stderr=str(e),
                error_code="COMMAND_NOT_FOUND",
            ) from e

        stdout, stderr = await process.communicate()
        result = CommandResult(
            args=argv,
            exit_code=process.returncode if process.returncode is not None else 1,
            stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
            stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        )

        self._logger.debug(
            "command_finished",
            command=" ".join(argv),
            exit_code=result.exit_code,
        )

        if check and not result.ok:
            raise CommandError(
                message=f"Command failed with exit code {result.exit_code}: {argv[0]}",
                args=argv,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result
