"""
Shared Test Fixtures for Launchpad
====================================

This module provides reusable pytest fixtures used across the entire
test suite. Fixtures are organized by layer:

    1. Project tree (a throwaway backend/terraform/frontend layout)
    2. Configuration
    3. Command runner (MockCommandRunner with realistic outputs scripted)
    4. Orchestration (no-op sleep, captured summary output, orchestrator)
"""

from __future__ import annotations

import json

import pytest

from launchpad.core.config import DeployConfig, ProjectLayout
from launchpad.integrations.mock import MockCommandRunner
from launchpad.orchestration.orchestrator import DeploymentOrchestrator


ACCOUNT_ID = "123456789012"
REGION = "us-east-1"

TERRAFORM_OUTPUTS = {
    "frontend_bucket_name": "twin-staging-frontend-123456789012",
    "cloudfront_distribution_id": "E2EXAMPLE123",
    "cloudfront_url": "https://d111111abcdef8.cloudfront.net",
    "api_url": "https://abc123.execute-api.us-east-1.amazonaws.com",
}


def terraform_output_json(values: dict) -> str:
    """Render values the way ``terraform output -json`` prints them."""
    return json.dumps(
        {
            name: {"sensitive": False, "type": "string", "value": value}
            for name, value in values.items()
        }
    )


# =============================================================================
# Project Tree
# =============================================================================

@pytest.fixture
def project_root(tmp_path):
    """A minimal project: backend source, terraform dir, built frontend."""
    backend = tmp_path / "backend"
    backend.mkdir()
    (backend / "requirements.txt").write_text("fastapi\nmangum\n")
    (backend / "server.py").write_text("def handler(event, context):\n    return {}\n")
    (backend / "context.py").write_text("PROMPT = 'hello'\n")
    data = backend / "data"
    data.mkdir()
    (data / "facts.json").write_text('{"name": "twin"}')

    (tmp_path / "terraform").mkdir()

    frontend = tmp_path / "frontend"
    (frontend / "out").mkdir(parents=True)
    (frontend / "out" / "index.html").write_text("<html></html>")

    return tmp_path


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config(project_root):
    """DeployConfig with ambient values set and the layout rooted in tmp_path."""
    return DeployConfig(
        account_id=ACCOUNT_ID,
        region=REGION,
        layout=ProjectLayout(root=project_root),
    )


# =============================================================================
# Command Runner
# =============================================================================

@pytest.fixture
def mock_runner():
    """Fresh MockCommandRunner with nothing scripted."""
    return MockCommandRunner()


@pytest.fixture
def scripted_runner(mock_runner):
    """MockCommandRunner that answers ``terraform output -json``."""
    mock_runner.on(
        ["terraform", "output", "-json"],
        stdout=terraform_output_json(TERRAFORM_OUTPUTS),
    )
    return mock_runner


@pytest.fixture
def tf_outputs():
    """The output values scripted_runner reports."""
    return dict(TERRAFORM_OUTPUTS)


@pytest.fixture
def render_outputs():
    """Renderer for custom ``terraform output -json`` payloads."""
    return terraform_output_json


# =============================================================================
# Orchestration
# =============================================================================

@pytest.fixture
def sleeps():
    """Delays requested by retry backoff, in order."""
    return []


@pytest.fixture
def no_sleep(sleeps):
    """Awaitable sleep replacement that records instead of waiting."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def echoed():
    """Lines the orchestrator printed as its summary."""
    return []


@pytest.fixture
def orchestrator(config, scripted_runner, no_sleep, echoed):
    """DeploymentOrchestrator wired to the scripted runner."""
    return DeploymentOrchestrator(
        config,
        runner=scripted_runner,
        echo=echoed.append,
        sleep=no_sleep,
    )

