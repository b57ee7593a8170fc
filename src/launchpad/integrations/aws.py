"""
launchpad.integrations.aws - Object Storage and CDN Client
============================================================

Wraps the two ``aws`` CLI calls the publish path needs. The sync client and
the invalidation API are opaque: Launchpad only looks at the exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import structlog

from launchpad.core.models import CommandResult
from launchpad.integrations.runner import CommandRunner


logger = structlog.get_logger()


class AwsCli:
    """Object storage sync and CDN invalidation via the aws CLI."""

    def __init__(
        self,
        runner: CommandRunner,
        region: Optional[str] = None,
        binary: str = "aws",
    ) -> None:
        self._runner = runner
        self._region = region
        self._binary = binary
        self._logger = logger.bind(component="aws_cli")

    async def sync(
        self,
        source_dir: Path,
        bucket: str,
        delete: bool = True,
    ) -> CommandResult:
        """Mirror ``source_dir`` into ``bucket``.

        With ``delete`` set, objects that no longer exist locally are removed
        from the bucket.
        """
        args = [self._binary, "s3", "sync", f"{source_dir}/", f"s3://{bucket}/"]
        if delete:
            args.append("--delete")
        self._logger.info("bucket_sync", source=str(source_dir), bucket=bucket, delete=delete)
        return await self._runner.run(self._with_region(args))

    async def empty_bucket(self, bucket: str) -> CommandResult:
        """Remove every object from ``bucket``."""
        self._logger.info("bucket_empty", bucket=bucket)
        return await self._runner.run(
            self._with_region([self._binary, "s3", "rm", f"s3://{bucket}/", "--recursive"])
        )

    async def create_invalidation(
        self,
        distribution_id: str,
        paths: Sequence[str] = ("/*",),
    ) -> CommandResult:
        """Request cache invalidation; completion is not awaited."""
        self._logger.info("cache_invalidation", distribution_id=distribution_id, paths=list(paths))
        return await self._runner.run(
            [
                self._binary,
                "cloudfront",
                "create-invalidation",
                "--distribution-id",
                distribution_id,
                "--paths",
                *paths,
            ]
        )

    def _with_region(self, args: list[str]) -> list[str]:
        if self._region:
            return args + ["--region", self._region]
        return args
