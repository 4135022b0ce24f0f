"""
hoststat - host telemetry reporter for Home Assistant via MQTT.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
