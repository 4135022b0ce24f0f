"""
Home Assistant MQTT Discovery integration.

Handles:
- Topic and identifier naming
- Discovery document generation
- State document generation
- Liveness (last will) payloads
- Announcing entities once per process

All entities of one device share a single state topic; each discovery
document tells Home Assistant which member of the shared JSON object
holds the entity's value.
"""

import json
from collections.abc import Iterable
from typing import Any

from ..const import DEFAULT_DISCOVERY_PREFIX, RUNNING_ENTITY_NAME
from ..logging import get_logger
from ..models.report import InvalidNameError, Report, sanitize_name, validate_name
from .client import MQTTClient

logger = get_logger("homeassistant")

__all__ = [
    "HomeAssistantDiscovery",
    "InvalidNameError",
    "build_discovery_payload",
    "build_state_payload",
    "discovery_topic",
    "sanitize_name",
    "state_topic",
    "unique_id",
    "validate_name",
    "value_template",
    "will_payload",
]


def state_topic(device_name: str, prefix: str = DEFAULT_DISCOVERY_PREFIX) -> str:
    """Shared state topic of a device: ``<prefix>/sensor/<device>/state``."""
    validate_name(device_name)
    return f"{prefix}/sensor/{device_name}/state"


def discovery_topic(
    device_name: str,
    entity_name: str,
    prefix: str = DEFAULT_DISCOVERY_PREFIX,
) -> str:
    """Discovery topic of an entity: ``<prefix>/sensor/<device>/<entity>/config``."""
    validate_name(device_name)
    validate_name(entity_name)
    return f"{prefix}/sensor/{device_name}/{entity_name}/config"


def unique_id(device_name: str, entity_name: str) -> str:
    return f"{device_name}_{entity_name}"


def value_template(entity_name: str) -> str:
    """Template selecting the entity's member from the shared state document."""
    return f"{{{{ value_json['{entity_name}'] }}}}"


def build_discovery_payload(
    device_name: str,
    entity_name: str,
    device_class: str | None = None,
    unit: str | None = None,
    prefix: str = DEFAULT_DISCOVERY_PREFIX,
) -> dict[str, Any]:
    """
    Build the discovery document for one entity.

    Args:
        device_name: Device the entity belongs to
        entity_name: Entity (report) name
        device_class: Home Assistant device class
        unit: Unit of measurement
        prefix: Discovery topic prefix

    Returns:
        Discovery payload dictionary
    """
    payload: dict[str, Any] = {
        "name": entity_name,
        "state_topic": state_topic(device_name, prefix),
        "unique_id": unique_id(device_name, entity_name),
        "value_template": value_template(entity_name),
    }

    if device_class is not None:
        payload["device_class"] = device_class

    if unit is not None:
        payload["unit_of_measurement"] = unit

    payload["device"] = {
        "name": device_name,
        "identifiers": [device_name],
    }

    return payload


def build_state_payload(reports: Iterable[Report]) -> dict[str, Any]:
    """
    Build the state document for one cycle.

    The liveness member comes first, followed by one member per report.
    """
    payload: dict[str, Any] = {RUNNING_ENTITY_NAME: True}
    for report in reports:
        key, value = report.to_json_member()
        payload[key] = value
    return payload


def will_payload() -> str:
    """Last-will payload, delivered by the broker if the reporter vanishes."""
    return json.dumps({RUNNING_ENTITY_NAME: False})


class HomeAssistantDiscovery:
    """
    Home Assistant MQTT Discovery handler.

    Publishes discovery documents for entities not announced yet in
    this process, and the shared state document every cycle.
    """

    def __init__(
        self,
        mqtt_client: MQTTClient,
        device_name: str,
        discovery_prefix: str = DEFAULT_DISCOVERY_PREFIX,
        retain_discovery: bool = True,
    ):
        """
        Initialize Home Assistant Discovery.

        Args:
            mqtt_client: MQTT client for publishing
            device_name: Device identity used in topics and device grouping
            discovery_prefix: Discovery topic prefix
            retain_discovery: Publish discovery documents with the retain flag
        """
        self.mqtt = mqtt_client
        self.device_name = validate_name(device_name)
        self.discovery_prefix = discovery_prefix
        self.retain_discovery = retain_discovery

        # Entity names announced during this process
        self._announced: set[str] = set()

    @property
    def state_topic(self) -> str:
        return state_topic(self.device_name, self.discovery_prefix)

    @property
    def announced(self) -> frozenset[str]:
        return frozenset(self._announced)

    def is_announced(self, entity_name: str) -> bool:
        return entity_name in self._announced

    async def announce_entity(
        self,
        entity_name: str,
        device_class: str | None = None,
        unit: str | None = None,
    ) -> bool:
        """
        Publish the discovery document for one entity unless already done.

        Returns:
            True if a discovery document was published
        """
        if entity_name in self._announced:
            return False

        topic = discovery_topic(self.device_name, entity_name, self.discovery_prefix)
        payload = build_discovery_payload(
            self.device_name,
            entity_name,
            device_class=device_class,
            unit=unit,
            prefix=self.discovery_prefix,
        )

        await self.mqtt.publish(topic, payload, retain=self.retain_discovery)
        self._announced.add(entity_name)

        logger.debug(f"Announced entity: {entity_name}")
        return True

    async def announce_liveness(self) -> bool:
        """Announce the synthetic "running" entity."""
        return await self.announce_entity(RUNNING_ENTITY_NAME)

    async def announce(self, reports: Iterable[Report]) -> int:
        """
        Announce every report not seen before.

        Returns:
            Number of discovery documents published
        """
        count = 0
        for report in reports:
            if await self.announce_entity(report.name, report.device_class, report.unit):
                count += 1

        if count:
            logger.info(f"Announced {count} new entities")
        return count

    async def publish_state(self, reports: Iterable[Report]) -> dict[str, Any]:
        """
        Publish the state document for one cycle.

        Returns:
            The published payload
        """
        payload = build_state_payload(reports)
        await self.mqtt.publish(self.state_topic, payload)
        return payload

    async def publish_offline(self) -> None:
        """Publish the liveness member as false (clean shutdown)."""
        await self.mqtt.publish(self.state_topic, will_payload())
