"""
MQTT client and Home Assistant discovery integration.
"""

from .client import MQTTClient, PublishError
from .homeassistant import HomeAssistantDiscovery

__all__ = [
    "MQTTClient",
    "PublishError",
    "HomeAssistantDiscovery",
]
