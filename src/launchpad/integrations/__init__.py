"""
launchpad.integrations - External Tool Layer
==============================================

Clients for the external collaborators a deployment drives. Each one is an
opaque command with an exit status and, for terraform outputs, a
machine-readable result.

    - CommandRunner / SubprocessRunner: run a command to completion
    - MockCommandRunner:                scripted runner for tests
    - TerraformClient:                  init, workspaces, plan/apply/destroy, outputs
    - AwsCli:                           bucket sync/empty, CDN invalidation
"""

from launchpad.integrations.aws import AwsCli
from launchpad.integrations.mock import CommandInvocation, MockCommandRunner
from launchpad.integrations.runner import CommandRunner, SubprocessRunner
from launchpad.integrations.terraform import TerraformClient

__all__ = [
    "CommandRunner",
    "SubprocessRunner",
    "MockCommandRunner",
    "CommandInvocation",
    "TerraformClient",
    "AwsCli",
]
