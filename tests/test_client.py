"""
Tests for the MQTT client wrapper.
"""

import asyncio
import json

import aiomqtt
import pytest

from hoststat.mqtt.client import MQTTClient, PublishError


class FakeAiomqttClient:
    """Stands in for aiomqtt.Client, recording construction and publishes."""

    instances: list["FakeAiomqttClient"] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.published: list[tuple[str, str, int, bool]] = []
        self.entered = False
        self.exited = False
        self.fail_connect = False
        self.fail_publish = False
        FakeAiomqttClient.instances.append(self)

    async def __aenter__(self):
        if self.fail_connect:
            raise aiomqtt.MqttError("connection refused")
        self.entered = True
        return self

    async def __aexit__(self, *exc_info):
        self.exited = True

    async def publish(self, topic, payload, qos=0, retain=False):
        if self.fail_publish:
            raise aiomqtt.MqttError("broker went away")
        self.published.append((topic, payload, qos, retain))


@pytest.fixture
def fake_aiomqtt(monkeypatch):
    FakeAiomqttClient.instances = []
    monkeypatch.setattr(aiomqtt, "Client", FakeAiomqttClient)
    return FakeAiomqttClient


@pytest.fixture
def client(config) -> MQTTClient:
    return MQTTClient(
        config.mqtt,
        will_topic="homeassistant/sensor/host1/state",
        will_payload='{"running": false}',
    )


def test_client_is_configured_with_will(client: MQTTClient, fake_aiomqtt) -> None:
    async def scenario():
        async with client.session():
            pass

    asyncio.run(scenario())

    kwargs = fake_aiomqtt.instances[0].kwargs
    assert kwargs["hostname"] == "broker.local"
    assert kwargs["port"] == 1883
    assert kwargs["username"] == "user"
    assert kwargs["password"] == "secret"
    assert kwargs["identifier"] == "host1"
    assert kwargs["keepalive"] == 90
    assert kwargs["will"].topic == "homeassistant/sensor/host1/state"
    assert kwargs["will"].payload == '{"running": false}'
    assert kwargs["will"].retain is False


def test_publish_encodes_json(client: MQTTClient, fake_aiomqtt) -> None:
    async def scenario():
        async with client.session():
            await client.publish("t/state", {"running": True, "load1": 0.5})
            await client.publish("t/config", "raw", retain=True)

    asyncio.run(scenario())

    fake = fake_aiomqtt.instances[0]
    assert fake.published[0] == ("t/state", json.dumps({"running": True, "load1": 0.5}), 0, False)
    assert fake.published[1] == ("t/config", "raw", 0, True)
    assert fake.exited
    assert not client.connected


def test_publish_requires_connection(client: MQTTClient) -> None:
    with pytest.raises(PublishError):
        asyncio.run(client.publish("t/state", {}))


def test_connect_failure(client: MQTTClient, fake_aiomqtt, monkeypatch) -> None:
    def failing_client(**kwargs):
        fake = FakeAiomqttClient(**kwargs)
        fake.fail_connect = True
        return fake

    monkeypatch.setattr(aiomqtt, "Client", failing_client)

    with pytest.raises(PublishError, match="broker.local:1883"):
        asyncio.run(client.connect())

    assert not client.connected


def test_publish_failure(client: MQTTClient, fake_aiomqtt) -> None:
    async def scenario():
        async with client.session():
            fake_aiomqtt.instances[0].fail_publish = True
            await client.publish("t/state", {})

    with pytest.raises(PublishError, match="t/state"):
        asyncio.run(scenario())
