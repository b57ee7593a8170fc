"""
launchpad.build.frontend - Static Frontend Build
==================================================

Installs frontend dependencies and produces the static build directory that
the publish stage mirrors into object storage. The API URL read from the
infrastructure outputs is written to the frontend's env file first, so the
static bundle points at the backend deployed by this run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog

from launchpad.core.config import DeployConfig
from launchpad.core.exceptions import BuildError
from launchpad.integrations.runner import CommandRunner


logger = structlog.get_logger()


class FrontendBuilder:
    """Builds the static frontend."""

    def __init__(self, config: DeployConfig, runner: CommandRunner) -> None:
        self._frontend = config.frontend
        self._runner = runner
        self._frontend_dir = config.layout.frontend_path
        self._logger = logger.bind(component="frontend_builder")

    @property
    def output_dir(self) -> Path:
        return self._frontend_dir / self._frontend.output_dir

    async def build(self, api_url: Optional[str] = None) -> Path:
        """Install, build, and return the static output directory.

        Args:
            api_url: Backend URL to bake into the bundle. Ignored when no
                api_url_env_var is configured.

        Raises:
            BuildError: If the frontend directory or the build output is missing.
            CommandError: If install or build fails.
        """
        if not self._frontend_dir.is_dir():
            raise BuildError(
                message=f"Frontend directory not found: {self._frontend_dir}",
                error_code="FRONTEND_MISSING",
            )

        if api_url and self._frontend.api_url_env_var:
            self._write_env_file(api_url)

        await self._runner.run(self._frontend.install_command, cwd=self._frontend_dir)
        await self._runner.run(self._frontend.build_command, cwd=self._frontend_dir)

        if not self.output_dir.is_dir():
            raise BuildError(
                message=f"Frontend build did not produce {self.output_dir}",
                error_code="FRONTEND_OUTPUT_MISSING",
                details={"output_dir": str(self.output_dir)},
            )

        self._logger.info("frontend_build_completed", output_dir=str(self.output_dir))
        return self.output_dir

    def _write_env_file(self, api_url: str) -> None:
        env_file = self._frontend_dir / self._frontend.env_file
        env_file.write_text(f"{self._frontend.api_url_env_var}={api_url}\n")
        self._logger.debug("frontend_env_written", env_file=str(env_file))
