"""
launchpad.core.exceptions - Custom Exception Hierarchy
========================================================

This module defines the structured exception hierarchy for Launchpad.
Components raise and catch specific exception types that carry context
about the failing command or stage instead of bare strings.

Exception Hierarchy:
    LaunchpadError (base)
        ├── ConfigurationError   - Missing ambient config, bad environment name
        ├── CommandError         - External tool exited non-zero (or is missing)
        ├── OutputError          - Infrastructure output missing or unparseable
        ├── BuildError           - Expected build product not produced
        └── StageFailedError     - A fatal stage failed; the run stops here

Failure Taxonomy:
    Fatal stage failure   → StageFailedError propagates, no retry, no cleanup
    Tolerated failure     → teardown only; recorded and logged, run continues
    Precondition missing  → no bootstrap directory; warning, run continues

Usage:
    >>> from launchpad.core.exceptions import CommandError
    >>> raise CommandError(
    ...     message="terraform apply failed",
    ...     args=["terraform", "apply", "-auto-approve"],
    ...     exit_code=1,
    ...     stderr="Error: creating S3 bucket ...",
    ... )
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


# =============================================================================
# Base Exception
# =============================================================================
# All Launchpad exceptions inherit from this base class, so callers can catch
# every orchestrator-specific failure with one except clause:
#
#   try:
#       await orchestrator.run(request)
#   except LaunchpadError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class LaunchpadError(Exception):
    """Base exception for all Launchpad errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary for structured logging.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
# Raised before any stage runs when the ambient configuration is incomplete
# or the requested environment name is unusable. The run must not start.
# =============================================================================
class ConfigurationError(LaunchpadError):
    """Raised when Launchpad configuration is invalid or missing.

    Common Causes:
        - Account identifier or region not set in the environment
        - Environment name that is not a valid workspace identifier
        - Malformed launchpad.yaml

    Example:
        >>> raise ConfigurationError(
        ...     message="Missing required configuration: account_id, region",
        ...     error_code="MISSING_CONFIGURATION",
        ...     details={"missing": ["account_id", "region"]},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Command Error
# =============================================================================
# Raised by a CommandRunner when an external tool exits non-zero. The exit
# code is preserved so the CLI can propagate it as its own exit status.
# =============================================================================
class CommandError(LaunchpadError):
    """Raised when an external command fails.

    Attributes:
        args_list: The argument vector that was executed.
        exit_code: The process exit status (127 when the executable is missing).
        stderr: Captured standard error, empty when output was not captured.
    """

    def __init__(
        self,
        message: str,
        args: Sequence[str],
        exit_code: int,
        stderr: str = "",
        error_code: str = "COMMAND_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["command"] = " ".join(args)
        enriched_details["exit_code"] = exit_code
        if stderr:
            enriched_details["stderr"] = stderr.strip()

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr


# =============================================================================
# Output Error
# =============================================================================
class OutputError(LaunchpadError):
    """Raised when a named infrastructure output is missing or unreadable.

    Later stages (publish, invalidation) depend on these values, so the
    outputs stage treats this as fatal.
    """

    def __init__(
        self,
        message: str,
        output_name: Optional[str] = None,
        error_code: str = "OUTPUT_MISSING",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if output_name:
            enriched_details["output_name"] = output_name

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.output_name = output_name


# =============================================================================
# Build Error
# =============================================================================
class BuildError(LaunchpadError):
    """Raised when a build step finishes but its expected product is absent."""

    def __init__(
        self,
        message: str,
        error_code: str = "BUILD_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Stage Failed Error
# =============================================================================
# Raised by the StageRunner when a stage whose policy is fatal fails. The
# orchestrator catches it once, at the top of the run, and finalizes the
# RunOutcome. Nothing after the failing stage executes.
# =============================================================================
class StageFailedError(LaunchpadError):
    """Raised when a fatal stage fails and the run must stop.

    Attributes:
        stage: Value of the StageName that failed.
        exit_code: Exit status of the failing external command, or 1 when
            the failure was not a command exit.
        cause: The original exception.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        exit_code: int = 1,
        cause: Optional[BaseException] = None,
        error_code: str = "STAGE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["stage"] = stage
        enriched_details["exit_code"] = exit_code

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.stage = stage
        self.exit_code = exit_code
        self.cause = cause
