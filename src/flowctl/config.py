"""Configuration management for flowctl using Pydantic."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flowctl.core.exceptions import ConfigError
from flowctl.core.output import OutputFormat
from flowctl.core.logging import LogLevel
from flowctl.core.utils import merge_dicts

# Later files win, so credentials/.env overrides a top-level .env
DEFAULT_ENV_FILES: tuple[str, ...] = (".env", "credentials/.env")

# Environment variables that feed each named instance
INSTANCE_ENV_VARS: dict[str, tuple[str, str]] = {
    "default": ("N8N_BASE_URL", "N8N_API_KEY"),
    "test": ("N8N_TEST_BASE_URL", "N8N_TEST_API_KEY"),
}

DRY_RUN_BASE_URL = "http://localhost:5678"
DRY_RUN_API_KEY = "dry-run-test-key"


class FlowCtlSettings(BaseSettings):
    """Environment-backed settings, including values from dotenv files."""

    model_config = SettingsConfigDict(
        env_file=DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    n8n_base_url: str | None = None
    n8n_api_key: str | None = None
    n8n_test_base_url: str | None = None
    n8n_test_api_key: str | None = None
    dry_run: bool = False
    flowctl_workflows_dir: str | None = None


class InstanceConfig(BaseModel):
    """Connection settings for one n8n instance."""

    base_url: str | None = None
    api_key: str | None = None
    timeout: int = 30
    connect_timeout: int = 10

    @field_validator("timeout", "connect_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    def get_base_url(self) -> str | None:
        """Get the instance base URL without a trailing slash."""
        if not self.base_url:
            return None
        return self.base_url.rstrip("/")

    def get_api_key(self) -> str | None:
        """Get the API key, treating the 'from_env' placeholder as unset."""
        if self.api_key == "from_env":
            return None
        return self.api_key or None

    def require(self, name: str = "default") -> "InstanceConfig":
        """Ensure base URL and API key are configured.

        Args:
            name: Instance name, used to name the missing variables

        Returns:
            This config, for chaining

        Raises:
            ConfigError: If either value is missing
        """
        url_var, key_var = INSTANCE_ENV_VARS.get(name, ("base_url", "api_key"))
        missing = []
        if not self.get_api_key():
            missing.append(key_var)
        if not self.get_base_url():
            missing.append(url_var)
        if missing:
            raise ConfigError(
                f"{', '.join(missing)} not set for instance '{name}'. "
                "Set it in your environment or in credentials/.env"
            )
        return self

    def with_dry_run_defaults(self) -> "InstanceConfig":
        """Return a copy with placeholder values filled in for dry runs."""
        return self.model_copy(
            update={
                "base_url": self.get_base_url() or DRY_RUN_BASE_URL,
                "api_key": self.get_api_key() or DRY_RUN_API_KEY,
            }
        )


class ValidationConfig(BaseModel):
    """Workflow validation rules."""

    webhook_node_type: str = "n8n-nodes-base.webhook"
    error_trigger_node_type: str = "n8n-nodes-base.errorTrigger"
    expression_marker: str = "={{"
    webhook_path_pattern: str = r"^[a-z0-9/-]+$"


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING
    dry_run: bool = False
    workflows_dir: str = "workflows"
    fixture: str = "tests/fixtures/test-workflow.json"

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


def _default_instances() -> dict[str, InstanceConfig]:
    return {"default": InstanceConfig(), "test": InstanceConfig()}


class FlowCtlConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    instances: dict[str, InstanceConfig] = Field(default_factory=_default_instances)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)

    def get_instance(self, name: str | None = None) -> InstanceConfig:
        """Get an instance by name, defaulting to 'default'."""
        instance_name = name or "default"
        if instance_name not in self.instances:
            raise ConfigError(f"Instance '{instance_name}' not found")
        return self.instances[instance_name]


class ConfigLoader:
    """Loads and merges configuration from YAML files and the environment."""

    CONFIG_FILENAMES = ["flowctl.yaml", "flowctl.yml", ".flowctl.yaml", ".flowctl.yml"]

    def __init__(self):
        self._config: FlowCtlConfig | None = None

    def load(
        self,
        config_file: str | Path | None = None,
        env_file: str | tuple[str, ...] | None = DEFAULT_ENV_FILES,
    ) -> FlowCtlConfig:
        """Load configuration from files and environment.

        Priority (highest to lowest):
        1. Environment variables (and credentials/.env, .env)
        2. Explicitly specified config file
        3. Project config (./flowctl.yaml)
        4. User config (~/.flowctl/config.yaml)

        Args:
            config_file: Optional explicit config file path
            env_file: Dotenv file(s) to read; None disables dotenv loading

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".flowctl" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged: dict[str, Any] = {}
        for config in configs:
            merged = merge_dicts(merged, config)

        try:
            config = FlowCtlConfig(**merged)
            settings = FlowCtlSettings(_env_file=env_file)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")

        self._config = self._apply_environment(config, settings)
        return self._config

    def _apply_environment(
        self,
        config: FlowCtlConfig,
        settings: FlowCtlSettings,
    ) -> FlowCtlConfig:
        """Overlay environment settings on top of file configuration."""
        default = config.instances.setdefault("default", InstanceConfig())
        if settings.n8n_base_url:
            default.base_url = settings.n8n_base_url
        if settings.n8n_api_key:
            default.api_key = settings.n8n_api_key

        # The test instance falls back to the default instance
        test = config.instances.setdefault("test", InstanceConfig())
        test.base_url = (
            settings.n8n_test_base_url or test.get_base_url() or default.get_base_url()
        )
        test.api_key = (
            settings.n8n_test_api_key or test.get_api_key() or default.get_api_key()
        )

        if settings.dry_run:
            config.global_settings.dry_run = True
        if settings.flowctl_workflows_dir:
            config.global_settings.workflows_dir = settings.flowctl_workflows_dir

        return config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        return content


def load_config(
    config_file: str | Path | None = None,
    env_file: str | tuple[str, ...] | None = DEFAULT_ENV_FILES,
) -> FlowCtlConfig:
    """Load flowctl configuration.

    Args:
        config_file: Optional explicit config file path
        env_file: Dotenv file(s) to read

    Returns:
        Loaded configuration
    """
    return ConfigLoader().load(config_file, env_file)


def get_default_config() -> FlowCtlConfig:
    """Get default configuration without loading from files."""
    return FlowCtlConfig()
