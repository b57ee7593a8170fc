"""
launchpad.build.packaging - Lambda Deployment Artifact
========================================================

Builds the backend bundle from scratch on every run.

Build Steps:
    1. (optional) upgrade pip and uv with the host python3
    2. resolve requirements into an isolated virtualenv (uv venv + uv pip)
    3. wipe package/ and install a second copy of the requirements into it
       from inside the runtime-matched container image, so compiled wheels
       match the Lambda execution platform rather than the build host
       (run as the invoking user, so the next wipe never hits root-owned files)
    4. copy application source (*.py, *.txt) and data directories into package/
    5. archive package/ into lambda-deployment.zip, replacing the old one

The artifact has no content hash or version. Its path is its identity and
each run overwrites it.
"""

from __future__ import annotations

import os
import shutil
import zipfile
from pathlib import Path

import structlog

from launchpad.core.config import DeployConfig
from launchpad.core.exceptions import BuildError
from launchpad.core.models import DeploymentArtifact
from launchpad.integrations.runner import CommandRunner


logger = structlog.get_logger()

# Mount point of the backend directory inside the runtime container.
CONTAINER_TASK_ROOT = "/var/task"


class LambdaPackager:
    """Builds the backend deployment artifact.

    Example:
        >>> packager = LambdaPackager(config, SubprocessRunner())
        >>> artifact = await packager.build()
        >>> artifact.path
        PosixPath('/srv/twin/backend/lambda-deployment.zip')
    """

    def __init__(self, config: DeployConfig, runner: CommandRunner) -> None:
        self._config = config
        self._build = config.build
        self._runner = runner
        self._backend_dir = config.layout.backend_path
        self._logger = logger.bind(component="lambda_packager")

    @property
    def package_dir(self) -> Path:
        return self._backend_dir / self._build.package_dir

    @property
    def artifact_path(self) -> Path:
        return self._backend_dir / self._build.artifact_name

    async def build(self) -> DeploymentArtifact:
        """Run every build step and return the fresh artifact.

        Raises:
            BuildError: If the backend directory or requirements file is missing.
            CommandError: If any external install step fails.
        """
        requirements = self._backend_dir / self._build.requirements_file
        if not requirements.is_file():
            raise BuildError(
                message=f"Requirements file not found: {requirements}",
                error_code="REQUIREMENTS_MISSING",
                details={"path": str(requirements)},
            )

        self._logger.info("backend_build_starting", backend_dir=str(self._backend_dir))

        await self._install_isolated()
        self._reset_package_dir()
        await self._install_for_runtime()
        copied = self._copy_application_files()
        artifact = self._archive()

        self._logger.info(
            "backend_build_completed",
            artifact=str(artifact.path),
            size=artifact.size_human,
            files=artifact.file_count,
            application_files=copied,
        )
        return artifact

    # =========================================================================
    # Build Steps
    # =========================================================================

    async def _install_isolated(self) -> None:
        if self._build.upgrade_installer:
            await self._runner.run(
                [self._build.installer_python, "-m", "pip", "install", "--upgrade", "pip", "uv"],
                cwd=self._backend_dir,
            )
        await self._runner.run(
            ["uv", "venv", "--allow-existing", self._build.venv_dir],
            cwd=self._backend_dir,
        )
        await self._runner.run(
            [
                "uv", "pip", "install",
                "--python", self._build.venv_dir,
                "-r", self._build.requirements_file,
            ],
            cwd=self._backend_dir,
        )

    def _reset_package_dir(self) -> None:
        if self.package_dir.exists():
            shutil.rmtree(self.package_dir)
        self.package_dir.mkdir(parents=True)

    async def _install_for_runtime(self) -> None:
        target = f"{CONTAINER_TASK_ROOT}/{self._build.package_dir}"
        requirements = f"{CONTAINER_TASK_ROOT}/{self._build.requirements_file}"
        await self._runner.run(
            [
                "docker", "run", "--rm",
                "--platform", self._build.runtime_platform,
                "--entrypoint", "",
                *_host_user_args(),
                "-v", f"{self._backend_dir}:{CONTAINER_TASK_ROOT}",
                self._build.runtime_image,
                "/bin/sh", "-c",
                f"pip install --target {target} -r {requirements} --upgrade",
            ],
            cwd=self._backend_dir,
        )

    def _copy_application_files(self) -> int:
        copied = 0
        for pattern in self._build.source_patterns:
            for path in sorted(self._backend_dir.glob(pattern)):
                if path.is_file():
                    shutil.copy2(path, self.package_dir / path.name)
                    copied += 1

        for name in self._build.data_dirs:
            source = self._backend_dir / name
            if source.is_dir():
                shutil.copytree(source, self.package_dir / name, dirs_exist_ok=True)
                copied += sum(1 for p in source.rglob("*") if p.is_file())
        return copied

    def _archive(self) -> DeploymentArtifact:
        artifact_path = self.artifact_path
        if artifact_path.exists():
            artifact_path.unlink()

        file_count = 0
        with zipfile.ZipFile(artifact_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            for file_path in sorted(self.package_dir.rglob("*")):
                if file_path.is_file():
                    zipf.write(file_path, file_path.relative_to(self.package_dir))
                    file_count += 1

        return DeploymentArtifact(
            path=artifact_path,
            size_bytes=artifact_path.stat().st_size,
            file_count=file_count,
        )


def _host_user_args() -> list[str]:
    """Run the container as the invoking user so package/ stays removable.

    HOME points somewhere writable because the host uid has no home in the image.
    """
    if not hasattr(os, "getuid"):
        return []
    return ["--user", f"{os.getuid()}:{os.getgid()}", "-e", "HOME=/tmp"]
