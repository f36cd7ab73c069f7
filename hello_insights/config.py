"""
Hello Insights Configuration
============================
Resolves service settings from a YAML file, with environment variables
taking precedence over file values.

File keys are flat and hyphenated (``app-name``, ``azure-connection-string``);
section mappings (``app: {name: ...}``) are accepted as well. Environment
variables use the upper-case underscored form (``APP_NAME``,
``AZURE_CONNECTION_STRING``).

Usage:
    from hello_insights.config import load_settings

    settings = load_settings()            # ./config.yml or $HELLO_INSIGHTS_CONFIG
    settings.azure.connection_string
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "HELLO_INSIGHTS_CONFIG"
DEFAULT_CONFIG_PATH = "config.yml"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
LOG_FORMATS = ("text", "json")

# flat file key -> (section, field)
FLAT_KEYS: Dict[str, Tuple[str, str]] = {
    "app-name": ("app", "name"),
    "app-version": ("app", "version"),
    "azure-connection-string": ("azure", "connection_string"),
    "logging-level": ("logging", "level"),
    "logging-format": ("logging", "format"),
    "server-host": ("server", "host"),
    "server-port": ("server", "port"),
    "telemetry-queue-size": ("telemetry", "queue_size"),
    "telemetry-batch-size": ("telemetry", "batch_size"),
    "telemetry-flush-interval": ("telemetry", "flush_interval"),
    "telemetry-flush-timeout": ("telemetry", "flush_timeout"),
}

SECTIONS = ("app", "azure", "logging", "server", "telemetry")


class AppSettings(BaseModel):
    name: str = "hello-insights"
    version: str = "0.0.0"

    @field_validator("name", "version", mode="before")
    @classmethod
    def coerce_scalar(cls, v: Any) -> Any:
        # YAML reads ``app-version: 1.0`` as a float
        if isinstance(v, (int, float)):
            return str(v)
        return v

    class Config:
        frozen = True


class AzureSettings(BaseModel):
    """Connection descriptor for the monitoring backend. Empty disables telemetry."""
    connection_string: str = ""

    class Config:
        frozen = True


class LoggingSettings(BaseModel):
    level: str = "info"
    format: str = "text"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"logging level must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"logging format must be one of {', '.join(LOG_FORMATS)}")
        return v

    class Config:
        frozen = True


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    class Config:
        frozen = True


class TelemetrySettings(BaseModel):
    """applicationinsights queue and sender tuning. Only used when telemetry is enabled."""
    queue_size: int = Field(default=2048, ge=1, description="Queued items that wake the sender early")
    batch_size: int = Field(default=64, ge=1, description="Envelopes per POST")
    flush_interval: float = Field(default=2.0, gt=0, description="Seconds between background sends")
    flush_timeout: float = Field(default=5.0, ge=0)

    class Config:
        frozen = True


class Settings(BaseModel):
    """Resolved, immutable service settings."""
    app: AppSettings = Field(default_factory=AppSettings)
    azure: AzureSettings = Field(default_factory=AzureSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    class Config:
        frozen = True

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """
        Build settings from a parsed config document plus environment overrides.

        Raises:
            ConfigError: if a value fails validation
        """
        sections = _collect_sections(data)
        _apply_env_overrides(sections, os.environ if environ is None else environ)
        try:
            return cls(**sections)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def _collect_sections(data: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    sections: Dict[str, Dict[str, Any]] = {name: {} for name in SECTIONS}
    for key, value in data.items():
        if value is None:
            continue
        key = str(key)
        if key in SECTIONS and isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    sections[key][str(sub_key).replace("-", "_")] = sub_value
        elif key in FLAT_KEYS:
            section, field = FLAT_KEYS[key]
            sections[section][field] = value
        else:
            logger.debug(f"Ignoring unknown configuration key: {key}")
    return sections


def _apply_env_overrides(
    sections: Dict[str, Dict[str, Any]],
    environ: Mapping[str, str],
) -> None:
    for key, (section, field) in FLAT_KEYS.items():
        env_name = key.upper().replace("-", "_")
        if env_name in environ:
            sections[section][field] = environ[env_name]


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        path: Config file path. Defaults to $HELLO_INSIGHTS_CONFIG, then ./config.yml
        environ: Environment mapping used for overrides (defaults to os.environ)

    Returns:
        Resolved Settings

    Raises:
        ConfigError: if the file is missing, unparsable or invalid
    """
    env = os.environ if environ is None else environ
    config_path = Path(path or env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    if not config_path.is_file():
        raise ConfigError(f"Configuration file not found: {config_path}", path=str(config_path))

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error reading configuration file: {e}", path=str(config_path)) from e

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(
            f"Configuration file must contain a mapping, got {type(data).__name__}",
            path=str(config_path),
        )

    settings = Settings.from_mapping(data, environ=env)
    logger.info(f"Configuration loaded: {settings.app.name} v{settings.app.version}")
    return settings
