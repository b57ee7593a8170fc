"""
Launchpad - Full-Stack Deployment Orchestrator
================================================

Launchpad builds a serverless backend artifact, provisions cloud
infrastructure with Terraform into a per-environment workspace, and
publishes a static frontend to object storage behind a CDN:

    Build  →  Backend Bootstrap  →  Init/Workspace  →  (Destroy)  →  Apply
           →  Outputs  →  Frontend Build  →  Publish  →  Invalidate  →  Summary

Architecture Layers (top to bottom):
    1. CLI            - launchpad [ENVIRONMENT] [DESTROY]
    2. Orchestration  - DeploymentOrchestrator, StageRunner, stage policies
    3. Build          - Lambda packaging, frontend build
    4. Integrations   - Command runner, Terraform and AWS CLI wrappers
    5. Core           - Config, models, enums, exceptions, logging

Quick Start:
    >>> from launchpad import DeploymentOrchestrator, DeploymentRequest, load_config
    >>> orchestrator = DeploymentOrchestrator(load_config())
    >>> outcome = await orchestrator.run(DeploymentRequest(environment="staging"))
"""

# =============================================================================
# Package Version
# =============================================================================
# Single source of truth for the package version.
#   from launchpad import __version__
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
# For specific components, import from submodules directly:
#   from launchpad.core.config import DeployConfig
#   from launchpad.integrations.terraform import TerraformClient
# =============================================================================
from launchpad.core.config import DeployConfig, load_config
from launchpad.core.models import DeploymentRequest, RunOutcome
from launchpad.orchestration.orchestrator import DeploymentOrchestrator

__all__ = [
    "DeployConfig",
    "DeploymentOrchestrator",
    "DeploymentRequest",
    "RunOutcome",
    "load_config",
    "__version__",
]
