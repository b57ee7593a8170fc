"""
Launchpad Test Suite
====================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → launchpad.core (config, models, exceptions)
    ├── test_integrations/  → launchpad.integrations (runner, terraform, aws)
    ├── test_build/         → launchpad.build (lambda packaging, frontend)
    ├── test_orchestration/ → launchpad.orchestration (policies, runner, orchestrator)
    ├── test_cli.py         → the launchpad command
    └── conftest.py         → Shared pytest fixtures

No test spawns terraform, docker, npm or the aws CLI: every external
command goes through MockCommandRunner.

Running Tests:
    pytest                              # Run all tests
    pytest tests/test_orchestration/    # Run only orchestration tests
"""
