"""
Configuration loader reading ``HOSTSTAT_*`` environment variables.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from ..const import ENV_PREFIX
from ..models.report import InvalidNameError, validate_name
from .schema import Config, ConfigValueError


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Loads and validates configuration from the environment.

    Usage:
        loader = ConfigLoader()
        config = loader.load_env()
        # or, with an env file underneath the process environment
        config = loader.load_file("/etc/hoststat/hoststat.env")
    """

    # Variables that must be present (without the prefix)
    REQUIRED = ("HOST", "USERNAME", "PASSWORD", "DEVICE_NAME")

    KNOWN_VARIABLES = {
        "HOST",
        "PORT",
        "USERNAME",
        "PASSWORD",
        "CLIENT_ID",
        "KEEPALIVE",
        "QOS",
        "RETAIN_DISCOVERY",
        "DEVICE_NAME",
        "DISCOVERY_PREFIX",
        "INTERVAL",
        "SENSORS",
        "BATTERIES",
        "PSI",
        "POWER_SUPPLY_DIR",
        "PSI_DIR",
        "DEBUG",
        "LOG_LEVEL",
        "LOG_FILE",
        "LOG_COLORS",
    }

    def __init__(self):
        self.last_environment: dict[str, str] = {}

    def load_env(self, environ: Mapping[str, str] | None = None) -> Config:
        """
        Load configuration from environment variables.

        Args:
            environ: Variables to read (defaults to ``os.environ``)

        Returns:
            Validated Config object

        Raises:
            ConfigError: If a required variable is missing or a value is invalid
        """
        env = dict(os.environ if environ is None else environ)
        self.last_environment = env

        missing = [
            f"{ENV_PREFIX}{key}"
            for key in self.REQUIRED
            if not env.get(f"{ENV_PREFIX}{key}", "").strip()
        ]
        if missing:
            raise ConfigError(f"Required environment variable(s) not set: {', '.join(missing)}")

        try:
            config = Config.from_env(env)
        except ConfigValueError as e:
            raise ConfigError(str(e)) from e

        try:
            validate_name(config.device_name)
        except InvalidNameError as e:
            raise ConfigError(f"{ENV_PREFIX}DEVICE_NAME is invalid: {e}") from e

        return config

    def load_file(self, path: str | Path, environ: Mapping[str, str] | None = None) -> Config:
        """
        Load configuration from a ``KEY=VALUE`` env file.

        Variables already present in the environment take precedence
        over the file.

        Raises:
            ConfigError: If the file cannot be read or a value is invalid
        """
        merged = read_env_file(path)
        merged.update(os.environ if environ is None else environ)
        return self.load_env(merged)

    def validate(self, config: Config) -> list[str]:
        """
        Validate configuration and return list of warnings.

        Args:
            config: Configuration to validate

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        for name in sorted(self.last_environment):
            if name.startswith(ENV_PREFIX) and name[len(ENV_PREFIX):] not in self.KNOWN_VARIABLES:
                warnings.append(f"Unknown configuration variable '{name}'")

        if config.collectors.update_interval < 10:
            warnings.append(
                f"Update interval of {config.collectors.update_interval:g}s is very short"
            )

        if not config.mqtt.retain_discovery:
            warnings.append(
                "Discovery messages are not retained; entities vanish after a hub restart"
            )
        return warnings


def read_env_file(path: str | Path) -> dict[str, str]:
    """
    Read ``KEY=VALUE`` pairs from an env file with python-dotenv.

    Keys without a value are dropped.

    Raises:
        ConfigError: If the file does not exist or cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file {path} does not exist")

    try:
        values = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    return {key: value for key, value in values.items() if value is not None}


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Convenience function to load configuration from the environment."""
    return ConfigLoader().load_env(environ)
