"""
launchpad.core.enums - Type-Safe Enumerations
===============================================

All enums inherit from both ``str`` and ``Enum`` so they serialize to plain
strings in logs and pydantic models, and compare equal to their values:
``StageName.APPLY == "apply"``.
"""

from enum import Enum


# =============================================================================
# Stage Name Enumeration
# =============================================================================
# The ten stages of a deployment run, declared in execution order. Each stage
# hard-depends on the previous one succeeding, except where its policy says
# a failure is tolerated (see orchestration/policy.py).
#
#   BUILD → BACKEND_BOOTSTRAP → INFRA_INIT → [DESTROY] → APPLY → OUTPUTS
#         → FRONTEND_BUILD → FRONTEND_PUBLISH → CACHE_INVALIDATION → SUMMARY
# =============================================================================
class StageName(str, Enum):
    """Stages of a deployment run, in execution order."""

    BUILD = "build"                             # Lambda artifact
    BACKEND_BOOTSTRAP = "backend_bootstrap"     # Remote state bucket + lock table
    INFRA_INIT = "infra_init"                   # Backend pointer + workspace
    DESTROY = "destroy"                         # Optional teardown
    APPLY = "apply"                             # Plan + apply
    OUTPUTS = "outputs"                         # Read named outputs
    FRONTEND_BUILD = "frontend_build"           # Static site build
    FRONTEND_PUBLISH = "frontend_publish"       # Mirror to object storage
    CACHE_INVALIDATION = "cache_invalidation"   # CDN wildcard invalidation
    SUMMARY = "summary"                         # Print URLs


# =============================================================================
# Stage Status Enumeration
# =============================================================================
class StageStatus(str, Enum):
    """Result of a single stage within one run.

    COMPLETED and SKIPPED let the run continue. TOLERATED_FAILURE means the
    stage failed but its policy is non-fatal. FAILED always ends the run.
    """

    COMPLETED = "completed"
    FAILED = "failed"
    TOLERATED_FAILURE = "tolerated_failure"
    SKIPPED = "skipped"


# =============================================================================
# Backend Bootstrap Outcome
# =============================================================================
# Tri-state result of the conditional backend bootstrap stage, surfaced in
# the run summary so an operator can tell "bootstrapped now" from "assumed to
# exist already".
# =============================================================================
class BootstrapOutcome(str, Enum):
    """What happened to the remote-state backend during this run."""

    APPLIED = "applied"                 # Directory present, init + apply succeeded
    ABSENT_SKIPPED = "absent_skipped"   # No directory; existing backend assumed
    FAILED = "failed"                   # Directory present, init or apply failed
