"""
MQTT client wrapper using aiomqtt.

Features:
- Last Will and Testament (LWT) registered before connecting
- QoS configuration
- Publish failures surface as PublishError (no buffering, no retry)
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aiomqtt

from ..config.schema import MQTTConfig
from ..logging import get_logger

logger = get_logger("mqtt.client")


class PublishError(Exception):
    """Connecting to the broker or publishing a message failed."""


class MQTTClient:
    """
    Async MQTT client wrapper.

    Messages are published immediately; a failed publish raises
    PublishError and leaves the decision to the caller.
    """

    def __init__(
        self,
        config: MQTTConfig,
        will_topic: str | None = None,
        will_payload: str | None = None,
        log_payloads: bool = False,
    ):
        """
        Initialize MQTT client.

        Args:
            config: MQTT configuration
            will_topic: Topic of the last-will message
            will_payload: Payload delivered by the broker on unclean disconnect
            log_payloads: Log full payloads at debug level
        """
        self.config = config
        self.will_topic = will_topic
        self.will_payload = will_payload
        self.log_payloads = log_payloads

        self._client: aiomqtt.Client | None = None
        self._connected = False

    @property
    def connected(self) -> bool:
        """Check if client is connected."""
        return self._connected

    def _create_client(self) -> aiomqtt.Client:
        """Create a new aiomqtt client instance."""
        will = None
        if self.will_topic is not None and self.will_payload is not None:
            will = aiomqtt.Will(
                topic=self.will_topic,
                payload=self.will_payload,
                qos=self.config.qos,
                retain=False,
            )

        return aiomqtt.Client(
            hostname=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=self.config.password,
            identifier=self.config.client_id,
            keepalive=self.config.keepalive,
            will=will,
        )

    async def connect(self) -> None:
        """
        Connect to the MQTT broker.

        Raises:
            PublishError: If the connection fails
        """
        logger.debug(f"Connecting to MQTT broker {self.config.host}:{self.config.port}")
        logger.debug(f"Client ID: {self.config.client_id}")

        client = self._create_client()
        try:
            await client.__aenter__()
        except aiomqtt.MqttError as e:
            raise PublishError(
                f"Failed to connect to MQTT broker {self.config.host}:{self.config.port}: {e}"
            ) from e

        self._client = client
        self._connected = True
        logger.info(f"Connected to MQTT broker at {self.config.host}:{self.config.port}")
        if self.will_topic:
            logger.debug(f"Last will registered on {self.will_topic}")

    async def disconnect(self) -> None:
        """Disconnect from the MQTT broker."""
        if self._client and self._connected:
            try:
                await self._client.__aexit__(None, None, None)
            except aiomqtt.MqttError as e:
                logger.warning(f"Error while disconnecting: {e}")
            finally:
                self._connected = False
                self._client = None
            logger.info("Disconnected from MQTT broker")

    async def publish(
        self,
        topic: str,
        payload: Any,
        qos: int | None = None,
        retain: bool = False,
    ) -> None:
        """
        Publish a message to a topic.

        Args:
            topic: MQTT topic
            payload: Message payload (JSON encoded if not a string)
            qos: QoS level (default from config)
            retain: Retain flag

        Raises:
            PublishError: If not connected or the broker rejects the message
        """
        if qos is None:
            qos = self.config.qos

        payload_str = payload if isinstance(payload, str) else json.dumps(payload)

        if not self._client or not self._connected:
            raise PublishError(f"Cannot publish to {topic}: not connected")

        if self.log_payloads or len(payload_str) <= 100:
            logger.debug(f"Publishing to {topic}: {payload_str}")
        else:
            logger.debug(f"Publishing to {topic}: {payload_str[:100]}...")

        try:
            await self._client.publish(topic, payload_str, qos=qos, retain=retain)
        except aiomqtt.MqttError as e:
            raise PublishError(f"Failed to publish to {topic}: {e}") from e

    @asynccontextmanager
    async def session(self) -> AsyncIterator["MQTTClient"]:
        """Context manager for an MQTT session."""
        await self.connect()
        try:
            yield self
        finally:
            await self.disconnect()
