"""
Tests for launchpad.orchestration.policy
==========================================

What's Being Tested:
    - The default table: everything fatal except teardown
    - Only the read-only outputs stage is retried
    - Mutating stages can never carry a retry policy
"""

import pytest
from pydantic import ValidationError

from launchpad.core.enums import StageName
from launchpad.orchestration.policy import StagePolicy, StagePolicyTable
from launchpad.orchestration.retry import RetryPolicy


class TestStagePolicy:
    def test_defaults(self) -> None:
        policy = StagePolicy()
        assert policy.fatal is True
        assert policy.mutates_infrastructure is False
        assert policy.retry is None

    def test_mutating_stage_cannot_retry(self) -> None:
        with pytest.raises(ValidationError, match="cannot be retried"):
            StagePolicy(mutates_infrastructure=True, retry=RetryPolicy(max_retries=2))

    def test_mutating_stage_with_zero_retries_allowed(self) -> None:
        policy = StagePolicy(mutates_infrastructure=True, retry=RetryPolicy(max_retries=0))
        assert policy.retry.max_retries == 0


class TestStagePolicyTable:
    """Tests for the declarative policy table."""

    def test_only_destroy_is_tolerated(self) -> None:
        table = StagePolicyTable.default()
        tolerated = [stage for stage, policy in table.items() if not policy.fatal]
        assert tolerated == [StageName.DESTROY]

    def test_only_outputs_is_retried(self) -> None:
        table = StagePolicyTable.default(output_retry=RetryPolicy(max_retries=5))
        retried = [stage for stage, policy in table.items() if policy.retry is not None]
        assert retried == [StageName.OUTPUTS]
        assert table.policy_for(StageName.OUTPUTS).retry.max_retries == 5

    def test_apply_and_destroy_mutate_infrastructure(self) -> None:
        table = StagePolicyTable.default()
        assert table.policy_for(StageName.APPLY).mutates_infrastructure
        assert table.policy_for(StageName.DESTROY).mutates_infrastructure
        assert not table.policy_for(StageName.OUTPUTS).mutates_infrastructure

    def test_items_in_stage_order(self) -> None:
        assert [stage for stage, _ in StagePolicyTable.default().items()] == list(StageName)

    def test_every_stage_must_be_declared(self) -> None:
        with pytest.raises(ValueError, match="apply"):
            StagePolicyTable({stage: StagePolicy() for stage in StageName if stage != StageName.APPLY})

    def test_override(self) -> None:
        table = StagePolicyTable.default()
        table.override(StageName.DESTROY, StagePolicy(fatal=True, mutates_infrastructure=True))
        assert table.is_fatal(StageName.DESTROY)
