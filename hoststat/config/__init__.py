"""
Configuration loading from HOSTSTAT_* environment variables.
"""

from .loader import ConfigError, ConfigLoader, load_config
from .schema import Config

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "load_config",
]
