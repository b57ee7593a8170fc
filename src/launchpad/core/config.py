"""
launchpad.core.config - Configuration Management
==================================================

This module provides the configuration system for Launchpad. Configuration
is loaded from multiple sources with the following priority (highest first):

    1. Explicit constructor arguments (CLI overrides land here)
    2. YAML configuration file (launchpad.yaml), passed in as arguments
    3. Environment variables (prefixed with LAUNCHPAD_)
    4. Default values defined in the models below

Architecture Context:
    The top-level DeployConfig is created once by the CLI, validated, and
    passed to the orchestrator, which hands the relevant sections to each
    collaborator:

        DeployConfig
            ├── ProjectLayout   → every stage (where things live)
            ├── BackendConfig   → infra init (remote state location)
            ├── BuildConfig     → LambdaPackager
            ├── FrontendConfig  → FrontendBuilder
            └── OutputNames     → outputs stage

Ambient Configuration:
    The account identifier and region have no defaults. They are read from
    the environment and checked once by ``validate_ambient()`` before any
    stage runs, so a missing value fails the run up front instead of deep
    inside the infra init stage.

Environment Variables:
    LAUNCHPAD_ACCOUNT_ID=123456789012
    LAUNCHPAD_REGION=us-east-1
    LAUNCHPAD_PROJECT_NAME=twin
    LAUNCHPAD_LOG_LEVEL=DEBUG
    LAUNCHPAD_BACKEND__LOCK_TABLE=shared-terraform-locks
    LAUNCHPAD_LAYOUT__ROOT=/srv/twin
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from launchpad.core.exceptions import ConfigurationError


# =============================================================================
# Project Layout
# =============================================================================
# Where each part of the project lives. All directories are relative to
# ``root`` unless given as absolute paths.
# =============================================================================
class ProjectLayout(BaseModel):
    """Directory layout of the project being deployed.

    Attributes:
        root: Project root. Every other directory is resolved against it.
        backend_dir: Lambda source, requirements file and data files.
        backend_bootstrap_dir: Optional provisioning config that creates the
            remote state bucket and lock table. Absent means "already exists".
        terraform_dir: Provisioning config for the application infrastructure.
        frontend_dir: Static frontend project.
    """

    root: Path = Field(default=Path("."), description="Project root directory")
    backend_dir: str = Field(default="backend")
    backend_bootstrap_dir: str = Field(default="terraform-backend")
    terraform_dir: str = Field(default="terraform")
    frontend_dir: str = Field(default="frontend")

    def resolve(self, relative: str) -> Path:
        """Resolve a layout directory against the project root."""
        return (Path(self.root) / relative).resolve()

    @property
    def backend_path(self) -> Path:
        return self.resolve(self.backend_dir)

    @property
    def backend_bootstrap_path(self) -> Path:
        return self.resolve(self.backend_bootstrap_dir)

    @property
    def terraform_path(self) -> Path:
        return self.resolve(self.terraform_dir)

    @property
    def frontend_path(self) -> Path:
        return self.resolve(self.frontend_dir)


# =============================================================================
# Remote State Backend
# =============================================================================
class BackendConfig(BaseModel):
    """Remote state location used by the infra init stage.

    ``bucket`` and ``lock_table`` default to names derived from the project
    name and account id (see DeployConfig.state_bucket / lock_table).
    """

    bucket: Optional[str] = Field(
        default=None,
        description="State bucket (default: {project}-terraform-state-{account_id})",
    )
    lock_table: Optional[str] = Field(
        default=None,
        description="Lock table (default: {project}-terraform-locks)",
    )
    state_file_name: str = Field(default="terraform.tfstate")
    encrypt: bool = Field(default=True)


# =============================================================================
# Backend Build
# =============================================================================
class BuildConfig(BaseModel):
    """Settings for building the Lambda deployment artifact."""

    requirements_file: str = Field(default="requirements.txt")
    package_dir: str = Field(default="package")
    artifact_name: str = Field(default="lambda-deployment.zip")
    venv_dir: str = Field(default=".venv")
    runtime_image: str = Field(
        default="public.ecr.aws/lambda/python:3.12",
        description="Container image matching the Lambda execution runtime",
    )
    runtime_platform: str = Field(default="linux/amd64")
    upgrade_installer: bool = Field(
        default=True,
        description="Run 'pip install --upgrade pip uv' before building",
    )
    installer_python: str = Field(
        default="python3",
        description="Interpreter on PATH whose pip upgrades pip and uv",
    )
    source_patterns: list[str] = Field(default_factory=lambda: ["*.py", "*.txt"])
    data_dirs: list[str] = Field(default_factory=lambda: ["data"])


# =============================================================================
# Frontend Build
# =============================================================================
class FrontendConfig(BaseModel):
    """Settings for building the static frontend."""

    install_command: list[str] = Field(default_factory=lambda: ["npm", "install"])
    build_command: list[str] = Field(default_factory=lambda: ["npm", "run", "build"])
    output_dir: str = Field(default="out")
    env_file: str = Field(default=".env.production")
    api_url_env_var: Optional[str] = Field(
        default="NEXT_PUBLIC_API_URL",
        description="Variable the API URL is written to before building (None disables)",
    )


# =============================================================================
# Infrastructure Output Names
# =============================================================================
class OutputNames(BaseModel):
    """Names of the infrastructure outputs the later stages read."""

    bucket: str = Field(default="frontend_bucket_name")
    distribution_id: str = Field(default="cloudfront_distribution_id")
    frontend_url: str = Field(default="cloudfront_url")
    api_url: str = Field(default="api_url")


# =============================================================================
# Main Configuration
# =============================================================================
class DeployConfig(BaseSettings):
    """Top-level configuration for a Launchpad deployment.

    Attributes:
        project_name: Namespaces the state key, bucket and lock table names.
        account_id: Cloud account identifier (ambient, required).
        region: Default region (ambient, required).
        log_level: Logging level for structlog output.
        log_format: "console" for humans, "json" for log collectors.
        destroy_uses_var_file: Whether teardown passes the same var file as
            apply. When False, teardown only passes the project/environment vars.
        empty_buckets_before_destroy: Best-effort empty of the frontend bucket
            before teardown (non-empty buckets block deletion).
        output_retry_attempts: Retries for the read-only outputs stage.
        output_retry_initial_delay: First backoff delay for those retries.
    """

    # -------------------------------------------------------------------------
    # General Settings
    # -------------------------------------------------------------------------
    project_name: str = Field(default="twin", min_length=1)
    account_id: Optional[str] = Field(default=None)
    region: Optional[str] = Field(default=None)
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")
    destroy_uses_var_file: bool = Field(default=True)
    empty_buckets_before_destroy: bool = Field(default=True)
    output_retry_attempts: int = Field(default=3, ge=0, le=10)
    output_retry_initial_delay: float = Field(default=1.0, gt=0, le=30.0)

    # -------------------------------------------------------------------------
    # Nested Configurations
    # -------------------------------------------------------------------------
    layout: ProjectLayout = Field(default_factory=ProjectLayout)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    frontend: FrontendConfig = Field(default_factory=FrontendConfig)
    outputs: OutputNames = Field(default_factory=OutputNames)

    model_config = {
        "env_prefix": "LAUNCHPAD_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------
    def validate_ambient(self) -> None:
        """Check that the ambient configuration needed by a run is present.

        Raises:
            ConfigurationError: Listing every missing field, so the operator
                can fix them all in one go.
        """
        missing = [
            name for name in ("account_id", "region")
            if not getattr(self, name)
        ]
        if missing:
            env_vars = ", ".join(f"LAUNCHPAD_{name.upper()}" for name in missing)
            raise ConfigurationError(
                message=(
                    f"Missing required configuration: {', '.join(missing)}. "
                    f"Set {env_vars} or add them to launchpad.yaml."
                ),
                error_code="MISSING_CONFIGURATION",
                details={"missing": missing},
            )

    # -------------------------------------------------------------------------
    # Derived Backend Names
    # -------------------------------------------------------------------------
    def state_bucket(self) -> str:
        """Bucket holding the remote state for every environment."""
        if self.backend.bucket:
            return self.backend.bucket
        return f"{self.project_name}-terraform-state-{self.account_id}"

    def lock_table(self) -> str:
        """Lock table shared by every environment of the project."""
        if self.backend.lock_table:
            return self.backend.lock_table
        return f"{self.project_name}-terraform-locks"

    def state_key(self, environment: str) -> str:
        """Object key of the state file for ``environment``.

        Always ``{project}/{environment}/{state_file_name}``: the same
        environment name maps to the same state location on every run.
        """
        return f"{self.project_name}/{environment}/{self.backend.state_file_name}"


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None, **overrides: Any) -> DeployConfig:
    """Load Launchpad configuration from a YAML file and environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'launchpad.yaml' in the current directory and falls back to
            defaults + environment variables when it does not exist.
        **overrides: Explicit top-level values that win over the YAML file.
            None values are ignored.

    YAML values are passed as constructor arguments, so they take
    precedence over LAUNCHPAD_* environment variables for the same field.

    Returns:
        A validated DeployConfig. Ambient values are not checked here; see
        DeployConfig.validate_ambient().

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigurationError: If the YAML file cannot be parsed.
    """
    if path is None:
        default_path = Path("launchpad.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    message=f"Invalid YAML in {path}: {e}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": str(path)},
                ) from e
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    yaml_data.update({k: v for k, v in overrides.items() if v is not None})
    return DeployConfig(**yaml_data)
