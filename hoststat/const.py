"""
Application constants and metadata.
"""

# Application info
APP_NAME = "hoststat"
APP_VERSION = "0.1.0"

# Environment variable prefix for configuration
ENV_PREFIX = "HOSTSTAT_"

# Default values
DEFAULT_MQTT_PORT = 1883
DEFAULT_MQTT_KEEPALIVE = 90
DEFAULT_QOS = 0
DEFAULT_DISCOVERY_PREFIX = "homeassistant"
DEFAULT_UPDATE_INTERVAL = 60.0

# Reserved state document member telling consumers the reporter is alive
RUNNING_ENTITY_NAME = "running"

# sysfs / procfs locations
POWER_SUPPLY_DIR = "/sys/class/power_supply"
PSI_DIR = "/proc/pressure"
PSI_KINDS = ("cpu", "memory", "io")
