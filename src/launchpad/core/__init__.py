"""
launchpad.core - Foundation Layer
=================================

Configuration, enums, models and the exception hierarchy that every other
package in Launchpad depends on.

Dependency Rule:
    core/ depends on NOTHING else in the launchpad package.
    integrations/, build/ and orchestration/ all depend on core/.
"""

from launchpad.core.config import (
    BackendConfig,
    BuildConfig,
    DeployConfig,
    FrontendConfig,
    OutputNames,
    ProjectLayout,
)
from launchpad.core.enums import BootstrapOutcome, StageName, StageStatus
from launchpad.core.exceptions import (
    BuildError,
    CommandError,
    ConfigurationError,
    LaunchpadError,
    OutputError,
    StageFailedError,
)
from launchpad.core.models import (
    CommandResult,
    DeploymentArtifact,
    DeploymentOutputs,
    DeploymentRequest,
    RunOutcome,
    StageResult,
    parse_destroy_flag,
)

__all__ = [
    # Config
    "DeployConfig",
    "ProjectLayout",
    "BackendConfig",
    "BuildConfig",
    "FrontendConfig",
    "OutputNames",
    # Enums
    "StageName",
    "StageStatus",
    "BootstrapOutcome",
    # Models
    "CommandResult",
    "DeploymentArtifact",
    "DeploymentOutputs",
    "DeploymentRequest",
    "RunOutcome",
    "StageResult",
    "parse_destroy_flag",
    # Exceptions
    "LaunchpadError",
    "ConfigurationError",
    "CommandError",
    "OutputError",
    "BuildError",
    "StageFailedError",
]
