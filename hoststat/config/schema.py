"""
Configuration schema with dataclasses for validation and type safety.

Every section is built from a flat mapping of environment variables
(``HOSTSTAT_*``). Values are parsed and range checked here; missing
required values are reported by the loader.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..const import (
    DEFAULT_DISCOVERY_PREFIX,
    DEFAULT_MQTT_KEEPALIVE,
    DEFAULT_MQTT_PORT,
    DEFAULT_QOS,
    DEFAULT_UPDATE_INTERVAL,
    ENV_PREFIX,
    POWER_SUPPLY_DIR,
    PSI_DIR,
)


class ConfigValueError(ValueError):
    """A configuration variable holds a value that cannot be used."""

    def __init__(self, key: str, value: str, reason: str):
        self.key = key
        self.value = value
        super().__init__(f"{ENV_PREFIX}{key} is invalid ({reason}): {value!r}")


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get(env: Mapping[str, str], key: str) -> str | None:
    """Return the stripped value of ``HOSTSTAT_<key>``, treating empty as unset."""
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_str(env: Mapping[str, str], key: str, default: str | None = None) -> str | None:
    value = _get(env, key)
    return default if value is None else value


def get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = _get(env, key)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigValueError(key, value, "expected on/off")


def get_int(
    env: Mapping[str, str],
    key: str,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    value = _get(env, key)
    if value is None:
        return default
    try:
        number = int(value, 10)
    except ValueError:
        raise ConfigValueError(key, value, "not an integer") from None
    if minimum is not None and number < minimum:
        raise ConfigValueError(key, value, f"must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise ConfigValueError(key, value, f"must be <= {maximum}")
    return number


def get_float(env: Mapping[str, str], key: str, default: float, minimum: float = 0.0) -> float:
    value = _get(env, key)
    if value is None:
        return default
    try:
        number = float(value)
    except ValueError:
        raise ConfigValueError(key, value, "not a number") from None
    if number <= minimum:
        raise ConfigValueError(key, value, f"must be > {minimum:g}")
    return number


@dataclass
class MQTTConfig:
    """MQTT connection configuration."""

    host: str = "localhost"
    port: int = DEFAULT_MQTT_PORT
    username: str | None = None
    password: str | None = None
    client_id: str | None = None
    keepalive: int = DEFAULT_MQTT_KEEPALIVE
    qos: int = DEFAULT_QOS
    retain_discovery: bool = True

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "MQTTConfig":
        """Create MQTTConfig from ``HOSTSTAT_*`` variables."""
        return cls(
            host=get_str(env, "HOST", "localhost"),
            port=get_int(env, "PORT", DEFAULT_MQTT_PORT, minimum=1, maximum=65535),
            username=get_str(env, "USERNAME"),
            password=get_str(env, "PASSWORD"),
            client_id=get_str(env, "CLIENT_ID"),
            keepalive=get_int(env, "KEEPALIVE", DEFAULT_MQTT_KEEPALIVE, minimum=1),
            qos=get_int(env, "QOS", DEFAULT_QOS, minimum=0, maximum=2),
            retain_discovery=get_bool(env, "RETAIN_DISCOVERY", True),
        )


@dataclass
class HomeAssistantConfig:
    """Home Assistant discovery configuration and device identity."""

    device_name: str = ""
    discovery_prefix: str = DEFAULT_DISCOVERY_PREFIX

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "HomeAssistantConfig":
        return cls(
            device_name=get_str(env, "DEVICE_NAME", ""),
            discovery_prefix=get_str(env, "DISCOVERY_PREFIX", DEFAULT_DISCOVERY_PREFIX).strip("/"),
        )


@dataclass
class CollectorsConfig:
    """Which optional collectors run, and where they read from."""

    sensors: bool = True
    batteries: bool = True
    psi: bool = True
    update_interval: float = DEFAULT_UPDATE_INTERVAL

    power_supply_dir: str = POWER_SUPPLY_DIR
    psi_dir: str = PSI_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "CollectorsConfig":
        return cls(
            sensors=get_bool(env, "SENSORS", True),
            batteries=get_bool(env, "BATTERIES", True),
            psi=get_bool(env, "PSI", True),
            update_interval=get_float(env, "INTERVAL", DEFAULT_UPDATE_INTERVAL),
            power_supply_dir=get_str(env, "POWER_SUPPLY_DIR", POWER_SUPPLY_DIR),
            psi_dir=get_str(env, "PSI_DIR", PSI_DIR),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    file: str | None = None
    colors: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "LoggingConfig":
        debug = get_bool(env, "DEBUG", False)
        level = get_str(env, "LOG_LEVEL", "info").lower()
        if level not in ("debug", "info", "warning", "warn", "error", "critical"):
            raise ConfigValueError("LOG_LEVEL", level, "unknown level")
        return cls(
            level="debug" if debug else level,
            file=get_str(env, "LOG_FILE"),
            colors=get_bool(env, "LOG_COLORS", True),
            debug=debug,
        )


@dataclass
class Config:
    """Complete application configuration."""

    mqtt: MQTTConfig = field(default_factory=MQTTConfig)
    homeassistant: HomeAssistantConfig = field(default_factory=HomeAssistantConfig)
    collectors: CollectorsConfig = field(default_factory=CollectorsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def device_name(self) -> str:
        return self.homeassistant.device_name

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "Config":
        """Create Config from a mapping of environment variables."""
        config = cls(
            mqtt=MQTTConfig.from_env(env),
            homeassistant=HomeAssistantConfig.from_env(env),
            collectors=CollectorsConfig.from_env(env),
            logging=LoggingConfig.from_env(env),
        )
        # Broker client id defaults to the device name
        if config.mqtt.client_id is None:
            config.mqtt.client_id = config.homeassistant.device_name or None
        return config
