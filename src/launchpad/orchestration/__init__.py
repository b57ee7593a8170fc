"""
launchpad.orchestration - Orchestration Layer
===============================================

Sequences the deployment stages and decides what a failure means.

Components:
    - RetryPolicy:            Bounded backoff for read-only stages
    - StagePolicy/Table:      Declarative fatal/tolerated/retry rules per stage
    - StageRunner:            Executes one stage under its policy, records results
    - DeploymentOrchestrator: The ten-stage build-provision-publish sequence
"""

from launchpad.orchestration.orchestrator import DeploymentOrchestrator
from launchpad.orchestration.policy import StagePolicy, StagePolicyTable
from launchpad.orchestration.retry import RetryPolicy
from launchpad.orchestration.stage_runner import StageRunner
from launchpad.orchestration.summary import (
    format_failure,
    format_stage_table,
    format_summary,
)

__all__ = [
    # Retry
    "RetryPolicy",
    # Policies
    "StagePolicy",
    "StagePolicyTable",
    # Execution
    "StageRunner",
    "DeploymentOrchestrator",
    # Reporting
    "format_summary",
    "format_failure",
    "format_stage_table",
]
