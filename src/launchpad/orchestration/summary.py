"""
launchpad.orchestration.summary - Human-Readable Run Summary
==============================================================

Formats a RunOutcome for the terminal: the URLs to verify by hand, the
backend bootstrap outcome, and one line per stage.

Example (success):

    Deployment complete: twin / staging
      Frontend URL: https://d111111abcdef8.cloudfront.net
      API URL:      https://abc123.execute-api.us-east-1.amazonaws.com
      Backend:      absent_skipped
      Stages:
        build               completed          lambda-deployment.zip (14.2M)
        backend_bootstrap   skipped            no backend-definition directory ...
        ...
"""

from __future__ import annotations

from launchpad.core.enums import StageStatus
from launchpad.core.models import RunOutcome


_STATUS_WIDTH = max(len(s.value) for s in StageStatus) + 2


def format_stage_table(outcome: RunOutcome) -> list[str]:
    """One line per recorded stage, in execution order."""
    lines = []
    for result in outcome.stages:
        note = result.detail or result.error or ""
        if result.status == StageStatus.FAILED and result.exit_code is not None:
            note = f"exit {result.exit_code}: {note}"
        line = f"    {result.stage.value:<20}{result.status.value:<{_STATUS_WIDTH}}{note}"
        lines.append(line.rstrip())
    return lines


def format_summary(outcome: RunOutcome, project_name: str) -> list[str]:
    """Full summary for a run that reached the summary stage."""
    lines = [f"Deployment complete: {project_name} / {outcome.environment}"]
    if outcome.outputs is not None:
        lines.append(f"  Frontend URL: {outcome.outputs.frontend_url}")
        lines.append(f"  API URL:      {outcome.outputs.api_url}")
    if outcome.backend_bootstrap is not None:
        lines.append(f"  Backend:      {outcome.backend_bootstrap.value}")
    lines.append("  Stages:")
    lines.extend(format_stage_table(outcome))
    return lines


def format_failure(outcome: RunOutcome, project_name: str) -> list[str]:
    """Summary for a run stopped by a fatal stage failure."""
    failed = outcome.failed_stage
    stage = failed.stage.value if failed is not None else "unknown"
    lines = [
        f"Deployment FAILED: {project_name} / {outcome.environment} "
        f"(stage '{stage}', exit code {outcome.exit_code})"
    ]
    if outcome.backend_bootstrap is not None:
        lines.append(f"  Backend:      {outcome.backend_bootstrap.value}")
    lines.append("  Stages:")
    lines.extend(format_stage_table(outcome))
    return lines
