"""
Tests for launchpad.integrations.runner
=========================================

SubprocessRunner is exercised against the Python interpreter running the
tests, so no external tool needs to be installed.

What's Being Tested:
    - Exit status, captured output, cwd and env handling
    - check=True raises CommandError carrying the exit code
    - A missing executable maps to exit code 127
"""

import sys

import pytest

from launchpad.core.exceptions import CommandError
from launchpad.integrations.runner import EXIT_COMMAND_NOT_FOUND, SubprocessRunner


@pytest.fixture
def runner():
    return SubprocessRunner()


class TestSubprocessRunner:
    """Tests for the real child-process runner."""

    async def test_captures_stdout(self, runner) -> None:
        result = await runner.run(
            [sys.executable, "-c", "print('hello')"],
            capture=True,
        )
        assert result.ok
        assert result.stdout.strip() == "hello"

    async def test_uncaptured_output_is_empty(self, runner) -> None:
        result = await runner.run([sys.executable, "-c", "pass"])
        assert result.exit_code == 0
        assert result.stdout == ""

    async def test_non_zero_exit_raises_with_exit_code(self, runner) -> None:
        with pytest.raises(CommandError) as exc_info:
            await runner.run(
                [sys.executable, "-c", "import sys; sys.stderr.write('nope'); sys.exit(3)"],
                capture=True,
            )
        error = exc_info.value
        assert error.exit_code == 3
        assert error.stderr == "nope"
        assert error.args_list[0] == sys.executable

    async def test_check_false_returns_result(self, runner) -> None:
        result = await runner.run(
            [sys.executable, "-c", "import sys; sys.exit(4)"],
            check=False,
        )
        assert result.exit_code == 4
        assert not result.ok

    async def test_runs_in_cwd(self, runner, tmp_path) -> None:
        result = await runner.run(
            [sys.executable, "-c", "import os; print(os.getcwd())"],
            cwd=tmp_path,
            capture=True,
        )
        assert result.stdout.strip() == str(tmp_path.resolve())

    async def test_env_is_layered_on_current_environment(self, runner, monkeypatch) -> None:
        monkeypatch.setenv("LAUNCHPAD_TEST_INHERITED", "kept")
        result = await runner.run(
            [
                sys.executable,
                "-c",
                "import os; print(os.environ['LAUNCHPAD_TEST_INHERITED'], os.environ['EXTRA'])",
            ],
            env={"EXTRA": "added"},
            capture=True,
        )
        assert result.stdout.split() == ["kept", "added"]

    async def test_missing_executable(self, runner) -> None:
        with pytest.raises(CommandError) as exc_info:
            await runner.run(["launchpad-no-such-tool-xyz", "--version"])
        assert exc_info.value.exit_code == EXIT_COMMAND_NOT_FOUND
        assert exc_info.value.error_code == "COMMAND_NOT_FOUND"
