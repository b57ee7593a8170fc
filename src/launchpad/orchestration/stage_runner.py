"""
launchpad.orchestration.stage_runner - Generic Stage Execution
================================================================

One runner executes every stage the same way: run the action, apply the
stage's retry policy, record a StageResult in the RunOutcome, and then
either return the action's value, swallow a tolerated failure, or raise
StageFailedError for a fatal one.

Decision Tree:

    action() raises
        │
        ├─ retry policy allows another attempt? ──YES──> sleep(backoff), rerun
        │
        ├─ policy.fatal? ──YES──> record FAILED, raise StageFailedError
        │
        └─ NO ──> record TOLERATED_FAILURE, log warning, return None

Stage Lifecycle Events (structlog):
    stage_starting, stage_retrying, stage_completed, stage_skipped,
    stage_failure_tolerated, stage_failed
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from launchpad.core.enums import StageName, StageStatus
from launchpad.core.exceptions import CommandError, LaunchpadError, StageFailedError
from launchpad.core.models import RunOutcome, StageResult
from launchpad.orchestration.policy import StagePolicyTable


logger = structlog.get_logger()

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StageRunner:
    """Runs stages under a StagePolicyTable and records their results.

    Attributes:
        _policies: The declarative policy table.
        _outcome: The RunOutcome results are recorded into.
        _sleep: Awaitable sleep used between retries (injectable for tests).
    """

    def __init__(
        self,
        policies: StagePolicyTable,
        outcome: RunOutcome,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._policies = policies
        self._outcome = outcome
        self._sleep = sleep
        self._logger = logger.bind(component="stage_runner", environment=outcome.environment)

    @property
    def outcome(self) -> RunOutcome:
        return self._outcome

    async def run(
        self,
        stage: StageName,
        action: Callable[[], Awaitable[T]],
        detail: Optional[Callable[[T], Optional[str]]] = None,
    ) -> Optional[T]:
        """Execute one stage.

        Args:
            stage: Which stage this is; selects the policy.
            action: Zero-argument coroutine factory. Called again for each retry.
            detail: Optional formatter turning the action's result into a
                human note for the summary.

        Returns:
            The action's result, or None when a non-fatal stage failed.

        Raises:
            StageFailedError: When a fatal stage fails.
        """
        policy = self._policies.policy_for(stage)
        started_at = _now()
        attempt = 0

        self._logger.info("stage_starting", stage=stage.value)

        while True:
            try:
                value = await action()
            except Exception as error:
                if policy.retry is not None and policy.retry.should_retry(error, attempt):
                    delay = policy.retry.calculate_delay(attempt)
                    self._logger.warning(
                        "stage_retrying",
                        stage=stage.value,
                        attempt=attempt + 1,
                        delay_seconds=round(delay, 2),
                        error=str(error),
                    )
                    attempt += 1
                    await self._sleep(delay)
                    continue
                return self._handle_failure(stage, error, started_at, attempt + 1)
            break

        note = detail(value) if detail is not None else None
        self._outcome.record(
            StageResult(
                stage=stage,
                status=StageStatus.COMPLETED,
                started_at=started_at,
                completed_at=_now(),
                attempts=attempt + 1,
                detail=note,
            )
        )
        self._logger.info("stage_completed", stage=stage.value, attempts=attempt + 1)
        return value

    def skip(self, stage: StageName, reason: str) -> None:
        """Record that a conditional stage did not run."""
        now = _now()
        self._outcome.record(
            StageResult(
                stage=stage,
                status=StageStatus.SKIPPED,
                started_at=now,
                completed_at=now,
                attempts=0,
                detail=reason,
            )
        )
        self._logger.info("stage_skipped", stage=stage.value, reason=reason)

    def _handle_failure(
        self,
        stage: StageName,
        error: Exception,
        started_at: datetime,
        attempts: int,
    ) -> None:
        exit_code = error.exit_code if isinstance(error, CommandError) else None
        fatal = self._policies.is_fatal(stage)

        self._outcome.record(
            StageResult(
                stage=stage,
                status=StageStatus.FAILED if fatal else StageStatus.TOLERATED_FAILURE,
                started_at=started_at,
                completed_at=_now(),
                attempts=attempts,
                exit_code=exit_code,
                error=str(error),
            )
        )

        expected = isinstance(error, LaunchpadError)
        log_context = error.to_dict() if expected else {
            "error_type": type(error).__name__,
            "message": str(error),
        }
        # Unexpected errors keep their traceback.
        exc_info = None if expected else error

        if not fatal:
            self._logger.warning(
                "stage_failure_tolerated",
                stage=stage.value,
                exit_code=exit_code,
                error=log_context,
                exc_info=exc_info,
            )
            return None

        self._logger.error(
            "stage_failed",
            stage=stage.value,
            exit_code=exit_code,
            error=log_context,
            exc_info=exc_info,
        )
        raise StageFailedError(
            message=f"Stage '{stage.value}' failed: {error}",
            stage=stage.value,
            exit_code=exit_code or 1,
            cause=error,
        ) from error
