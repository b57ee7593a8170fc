"""
launchpad.cli - Command-Line Entry Point
==========================================

    launchpad [ENVIRONMENT] [DESTROY]

ENVIRONMENT defaults to "dev". It names the terraform workspace and a
segment of the state key, so it is limited to letters, digits, "-", "_"
and "." (no ".."). DESTROY requests teardown before apply only when it is
exactly the string "true"; anything else (or nothing) means "do not
destroy".

launchpad.yaml is looked up in --project-root when that option is given
and no --config is passed, otherwise in the current directory.

Exit Status:
    0    every stage succeeded (a tolerated teardown failure still counts)
    2    configuration error, detected before any stage runs
    N    exit status of the command that made a fatal stage fail
         (1 when the failure was not a command exit)

Examples:
    launchpad                     # deploy dev
    launchpad staging             # deploy staging
    launchpad prod true           # tear down prod, then redeploy it
    launchpad prod --log-level DEBUG --config deploy/launchpad.yaml
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from launchpad import __version__
from launchpad.core.config import load_config
from launchpad.core.exceptions import ConfigurationError
from launchpad.core.logging import configure_logging
from launchpad.core.models import DeploymentRequest, parse_destroy_flag
from launchpad.orchestration.orchestrator import DeploymentOrchestrator


EXIT_CONFIGURATION_ERROR = 2
DEFAULT_CONFIG_NAME = "launchpad.yaml"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("environment", required=False, default="dev")
@click.argument("destroy", required=False, default="false")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file (default: launchpad.yaml in the project root if present)",
)
@click.option(
    "--log-level",
    default=None,
    help="Logging level (DEBUG, INFO, WARNING, ERROR)",
)
@click.option(
    "--project-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project root containing backend/, terraform/ and frontend/",
)
@click.version_option(__version__, prog_name="launchpad")
def main(
    environment: str,
    destroy: str,
    config_path: Optional[str],
    log_level: Optional[str],
    project_root: Optional[str],
) -> None:
    """Build, provision and publish one environment of the project.

    ENVIRONMENT may use letters, digits, '-', '_' and '.' but not '..'.
    """
    if config_path is None and project_root is not None:
        candidate = Path(project_root) / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            config_path = str(candidate)

    try:
        request = DeploymentRequest(
            environment=environment,
            destroy=parse_destroy_flag(destroy),
        )
        config = load_config(config_path, log_level=log_level)
        if project_root is not None:
            config.layout = config.layout.model_copy(update={"root": Path(project_root)})
        configure_logging(config.log_level, config.log_format)
        orchestrator = DeploymentOrchestrator(config)
    except (ConfigurationError, FileNotFoundError, ValidationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIGURATION_ERROR)

    outcome = asyncio.run(orchestrator.run(request))
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
