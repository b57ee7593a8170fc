"""
launchpad.orchestration.policy - Declarative Stage Policies
=============================================================

Which stages may fail without stopping the run, and which may be retried,
is declared in one table instead of being scattered through the stage code.
The StageRunner interprets the table; the orchestrator never decides on its
own whether a failure is fatal.

Default Table:

    stage               fatal   mutates   retry
    ------------------  ------  --------  -----------------
    build               yes     no        -
    backend_bootstrap   yes     yes       -
    infra_init          yes     no        -
    destroy             NO      yes       -
    apply               yes     yes       -
    outputs             yes     no        bounded backoff
    frontend_build      yes     no        -
    frontend_publish    yes     yes       -
    cache_invalidation  yes     yes       -
    summary             yes     no        -

Invariant:
    A stage that mutates infrastructure never carries a retry policy.
    Retrying a partially applied change is unsafe, so StagePolicy rejects
    that combination at construction time.
"""

from __future__ import annotations

from typing import Optional

import structlog
from pydantic import BaseModel, Field, model_validator

from launchpad.core.enums import StageName
from launchpad.orchestration.retry import RetryPolicy


logger = structlog.get_logger()


# =============================================================================
# StagePolicy
# =============================================================================
class StagePolicy(BaseModel):
    """How the runner treats one stage.

    Attributes:
        fatal: A failure stops the run. When False the failure is recorded
            as tolerated and the run continues.
        mutates_infrastructure: The stage changes remote state or bucket
            contents. Such stages are never retried automatically.
        retry: Optional bounded retry for idempotent stages.
    """

    fatal: bool = Field(default=True)
    mutates_infrastructure: bool = Field(default=False)
    retry: Optional[RetryPolicy] = Field(default=None)

    @model_validator(mode="after")
    def _no_retry_on_mutation(self) -> "StagePolicy":
        if self.mutates_infrastructure and self.retry is not None and self.retry.max_retries > 0:
            raise ValueError(
                "Stages that mutate infrastructure cannot be retried automatically"
            )
        return self


# =============================================================================
# StagePolicyTable
# =============================================================================
class StagePolicyTable:
    """Maps every StageName to its StagePolicy.

    Example:
        >>> table = StagePolicyTable.default(output_retry=RetryPolicy(max_retries=5))
        >>> table.policy_for(StageName.DESTROY).fatal
        False
        >>> table.override(StageName.BACKEND_BOOTSTRAP, StagePolicy(fatal=False, mutates_infrastructure=True))
    """

    def __init__(self, policies: dict[StageName, StagePolicy]) -> None:
        missing = [stage.value for stage in StageName if stage not in policies]
        if missing:
            raise ValueError(f"No policy declared for stages: {', '.join(missing)}")
        self._policies = dict(policies)

    @classmethod
    def default(cls, output_retry: Optional[RetryPolicy] = None) -> "StagePolicyTable":
        """The standard table: everything fatal except teardown."""
        return cls(
            {
                StageName.BUILD: StagePolicy(),
                StageName.BACKEND_BOOTSTRAP: StagePolicy(mutates_infrastructure=True),
                StageName.INFRA_INIT: StagePolicy(),
                StageName.DESTROY: StagePolicy(fatal=False, mutates_infrastructure=True),
                StageName.APPLY: StagePolicy(mutates_infrastructure=True),
                StageName.OUTPUTS: StagePolicy(retry=output_retry or RetryPolicy()),
                StageName.FRONTEND_BUILD: StagePolicy(),
                StageName.FRONTEND_PUBLISH: StagePolicy(mutates_infrastructure=True),
                StageName.CACHE_INVALIDATION: StagePolicy(mutates_infrastructure=True),
                StageName.SUMMARY: StagePolicy(),
            }
        )

    def policy_for(self, stage: StageName) -> StagePolicy:
        return self._policies[stage]

    def override(self, stage: StageName, policy: StagePolicy) -> None:
        """Replace the policy for one stage."""
        logger.debug("stage_policy_overridden", stage=stage.value, fatal=policy.fatal)
        self._policies[stage] = policy

    def is_fatal(self, stage: StageName) -> bool:
        return self._policies[stage].fatal

    def items(self) -> list[tuple[StageName, StagePolicy]]:
        """Policies in stage execution order."""
        return [(stage, self._policies[stage]) for stage in StageName]
