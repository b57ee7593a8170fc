"""
launchpad.integrations.mock - Scripted Command Runner for Testing
===================================================================

A CommandRunner that never spawns a process. It records every invocation
and answers from a table of scripted results, so orchestrator tests can
drive every branch (workspace not found, teardown failure, apply failure)
without terraform, docker, npm or the aws CLI installed.

Matching:
    Commands are matched by argument prefix; the longest matching prefix
    wins. A test can script ``["terraform"]`` broadly and
    ``["terraform", "apply"]`` specifically. Unscripted commands succeed
    with empty output.

    For one prefix, responses scripted with ``times`` are used up first, in
    the order they were scripted. After that the most recently scripted
    standing response answers, so a test can override a fixture default
    or inject a single transient failure in front of it.

Usage:
    >>> runner = MockCommandRunner()
    >>> runner.on(["terraform", "workspace", "select"], exit_code=1)
    >>> runner.on(["terraform", "output", "-json"], stdout='{"api_url": {"value": "x"}}')
    >>> await runner.run(["terraform", "workspace", "select", "dev"], check=False)
    >>> runner.commands[-1]
    ('terraform', 'workspace', 'select', 'dev')
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from launchpad.core.exceptions import CommandError
from launchpad.core.models import CommandResult
from launchpad.integrations.runner import CommandRunner


class CommandInvocation:
    """A single recorded call to MockCommandRunner.run()."""

    def __init__(
        self,
        args: list[str],
        cwd: Optional[Path],
        env: Optional[dict[str, str]],
        capture: bool,
    ) -> None:
        self.args = args
        self.cwd = cwd
        self.env = env
        self.capture = capture

    def __repr__(self) -> str:
        return f"CommandInvocation({' '.join(self.args)!r}, cwd={self.cwd!r})"


class _ScriptedResponse:
    def __init__(
        self,
        exit_code: int,
        stdout: str,
        stderr: str,
        side_effect: Optional[Callable[[CommandInvocation], None]],
        times: Optional[int],
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.side_effect = side_effect
        self.remaining = times


class MockCommandRunner(CommandRunner):
    """Scripted CommandRunner for tests.

    Attributes:
        _responses: prefix → queue of scripted responses.
        _calls: Every invocation, in order.
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, ...], list[_ScriptedResponse]] = {}
        self._calls: list[CommandInvocation] = []

    # =========================================================================
    # Scripting
    # =========================================================================

    def on(
        self,
        prefix: Sequence[str],
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        side_effect: Optional[Callable[[CommandInvocation], None]] = None,
        times: Optional[int] = None,
    ) -> None:
        """Script the result for commands starting with ``prefix``.

        Args:
            prefix: Leading arguments to match.
            exit_code: Exit status to report.
            stdout: Output returned to the caller.
            stderr: Error output returned to the caller.
            side_effect: Called with the invocation before the result is
                returned (for example to create the files a build would write).
            times: Use this response this many times, then fall through to
                the standing response for the same prefix. None means forever.
        """
        self._responses.setdefault(tuple(prefix), []).append(
            _ScriptedResponse(exit_code, stdout, stderr, side_effect, times)
        )

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def calls(self) -> list[CommandInvocation]:
        return self._calls

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [tuple(call.args) for call in self._calls]

    def calls_matching(self, prefix: Sequence[str]) -> list[CommandInvocation]:
        """Recorded calls whose arguments start with ``prefix``."""
        wanted = tuple(prefix)
        return [c for c in self._calls if tuple(c.args[: len(wanted)]) == wanted]

    def index_of(self, prefix: Sequence[str]) -> int:
        """Position of the first call starting with ``prefix`` (-1 if none)."""
        wanted = tuple(prefix)
        for i, call in enumerate(self._calls):
            if tuple(call.args[: len(wanted)]) == wanted:
                return i
        return -1

    # =========================================================================
    # CommandRunner
    # =========================================================================

    async def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        capture: bool = False,
        check: bool = True,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        invocation = CommandInvocation(argv, cwd, dict(env) if env else None, capture)
        self._calls.append(invocation)

        exit_code, stdout, stderr = 0, "", ""
        response = self._take(argv)
        if response is not None:
            if response.side_effect is not None:
                response.side_effect(invocation)
            exit_code, stdout, stderr = response.exit_code, response.stdout, response.stderr

        result = CommandResult(args=argv, exit_code=exit_code, stdout=stdout, stderr=stderr)
        if check and not result.ok:
            raise CommandError(
                message=f"Command failed with exit code {exit_code}: {argv[0]}",
                args=argv,
                exit_code=exit_code,
                stderr=stderr,
            )
        return result

    def _take(self, argv: list[str]) -> Optional[_ScriptedResponse]:
        best: Optional[tuple[str, ...]] = None
        for prefix, queue in self._responses.items():
            if not queue or tuple(argv[: len(prefix)]) != prefix:
                continue
            if best is None or len(prefix) > len(best):
                best = prefix
        if best is None:
            return None

        queue = self._responses[best]
        # One-off responses first, in order; then the latest standing one.
        limited = [r for r in queue if r.remaining is not None]
        response = limited[0] if limited else queue[-1]
        if response.remaining is not None:
            response.remaining -= 1
            if response.remaining <= 0:
                queue.remove(response)
        return response
