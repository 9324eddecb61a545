"""
Configuration settings for the haproxyStats package.

Configuration can be set via:
1. Environment variables (highest priority, also read from a .env file)
2. Configuration files (INI/YAML/JSON)
3. Default values (lowest priority)

The loaded values are validated once into an immutable RunConfig.
"""

import os
import json
import logging
import configparser
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from haproxyStats.errors import ConfigurationError

# Set up logger
logger = logging.getLogger(__name__)

# Default configuration paths, first existing file wins
DEFAULT_CONFIG_PATHS = [
    Path("haproxy-stats.ini"),
    Path("haproxy-stats.yml"),
    Path("haproxy-stats.yaml"),
    Path("haproxy-stats.json"),
    Path.home() / ".config" / "haproxy-stats.ini",
    Path.home() / ".config" / "haproxy-stats.yml",
    Path.home() / ".config" / "haproxy-stats.yaml",
    Path.home() / ".config" / "haproxy-stats.json",
]

ENV_PREFIX = "HAPROXY_STATS_"

# Recognized configuration keys
CONFIG_KEYS = ("output", "elasticsearch", "username", "password", "timeout")

# Output modes that deliver over HTTP
HTTP_OUTPUTS = ("elasticsearch", "metricbeat")

# Default HTTP headers for indexing requests
DEFAULT_HEADERS = {
    "Content-Type": "application/json",
}

DEFAULT_TIMEOUT = 30.0

CSV_ENCODING = "utf-8-sig"


class RunConfig(BaseModel):
    """Immutable run configuration, validated once at startup."""
    model_config = ConfigDict(frozen=True)

    output: Optional[str] = Field(None, description="Output mode: elasticsearch, metricbeat or unset")
    elasticsearch: Optional[str] = Field(None, description="Base URL of the indexing endpoint")
    username: Optional[str] = Field(None, description="HTTP basic auth user")
    password: Optional[str] = Field(None, description="HTTP basic auth password")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds")

    @field_validator("output")
    @classmethod
    def normalize_output(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip().lower()
        return value or None

    @field_validator("elasticsearch")
    @classmethod
    def strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip().rstrip("/")
        return value or None

    @model_validator(mode="after")
    def require_endpoint(self) -> "RunConfig":
        """HTTP outputs need somewhere to send to."""
        if self.output in HTTP_OUTPUTS and not self.elasticsearch:
            raise ValueError(f"output '{self.output}' requires the 'elasticsearch' base URL")
        return self

    @property
    def credentials(self) -> Optional[tuple[str, str]]:
        """Basic auth pair, only when both parts are non-empty."""
        if self.username and self.password:
            return (self.username, self.password)
        return None


class ConfigManager:
    """
    Configuration manager that loads the optional key-value source
    and overlays environment variables on top of it.
    """

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        env_prefix: str = ENV_PREFIX
    ):
        """
        Initialize the configuration manager.

        Args:
            config_file: Optional path to a configuration file
            env_prefix: Prefix for environment variables

        Raises:
            ConfigurationError: If an explicit config file is missing, or any file is unreadable
        """
        self.config_file = config_file
        self.env_prefix = env_prefix
        self.config_path: Optional[Path] = None
        self.config_data: dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from the first available configuration file."""
        if self.config_file:
            config_path = Path(self.config_file)
            if not config_path.exists():
                raise ConfigurationError(f"Specified config file not found: {config_path}")
            self._load_config_file(config_path)
            return

        for path in DEFAULT_CONFIG_PATHS:
            if path.exists():
                logger.debug("Loading configuration from: %s", path)
                self._load_config_file(path)
                return

        logger.debug("No configuration file found, using defaults")

    def _load_config_file(self, config_path: Path) -> None:
        """
        Load configuration from a file.

        Args:
            config_path: Path to configuration file (INI, YAML or JSON)
        """
        extension = config_path.suffix.lower()
        try:
            text = config_path.read_text(encoding="utf-8")

            if extension in ('.yml', '.yaml'):
                config_data = yaml.safe_load(text)
            elif extension == '.json':
                config_data = json.loads(text)
            else:
                config_data = parse_ini(text)
        except (OSError, ValueError, yaml.YAMLError, configparser.Error) as e:
            raise ConfigurationError(f"Error loading config file {config_path}: {e}") from e

        if not config_data:
            logger.warning("Empty configuration file: %s", config_path)
            return
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain key-value pairs")

        self.config_path = config_path
        self.config_data = {str(key).lower(): value for key, value in config_data.items()}
        logger.debug("Successfully loaded configuration from %s", config_path)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value with fallback to environment and default.

        Args:
            key: Configuration key
            default: Default value if not found in config or environment

        Returns:
            Configuration value
        """
        env_value = os.getenv(f"{self.env_prefix}{key.upper()}")
        if env_value is not None:
            return env_value

        if key in self.config_data:
            return self.config_data[key]

        return default

    def get_dict(self) -> dict[str, Any]:
        """Recognized configuration values that are actually set."""
        result = {}
        for key in CONFIG_KEYS:
            value = self.get(key)
            if value is None:
                continue
            # YAML and JSON sources may hand back numbers for passwords or users
            result[key] = value if key == "timeout" else str(value)
        return result

    def run_config(self) -> RunConfig:
        """
        Validate the loaded values into a RunConfig.

        Raises:
            ConfigurationError: On invalid option values
        """
        try:
            return RunConfig(**self.get_dict())
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(loc) for loc in error["loc"])
            where = f" at '{location}'" if location else ""
            raise ConfigurationError(f"Invalid configuration{where}: {error['msg']}") from e


def parse_ini(text: str) -> dict[str, str]:
    """
    Parse an INI-like source where keys may appear with or without a section header.

    Args:
        text: Raw file contents

    Returns:
        Flat mapping of every key found, later sections overriding earlier ones
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.read_string(f"[{parser.default_section}]\n{text}")

    values = dict(parser.defaults())
    for section in parser.sections():
        values.update(parser.items(section))
    return values


def load_run_config(config_file: Optional[Union[str, Path]] = None) -> RunConfig:
    """Load and validate the run configuration."""
    return ConfigManager(config_file=config_file).run_config()
