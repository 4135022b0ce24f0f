"""
Pytest configuration and fixtures.
"""

import json
from collections import namedtuple
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest

from hoststat.config.loader import ConfigLoader
from hoststat.config.schema import Config
from hoststat.mqtt.client import PublishError


class FakeMQTTClient:
    """Records published messages instead of talking to a broker."""

    def __init__(self):
        self.messages: list[tuple[str, str, bool]] = []
        self.connected = False
        self.sessions = 0
        self.fail_topics: set[str] = set()

    async def publish(self, topic: str, payload: Any, qos: int | None = None, retain: bool = False):
        if not self.connected:
            raise PublishError(f"Cannot publish to {topic}: not connected")
        if topic in self.fail_topics:
            raise PublishError(f"Failed to publish to {topic}")
        payload_str = payload if isinstance(payload, str) else json.dumps(payload)
        self.messages.append((topic, payload_str, retain))

    @asynccontextmanager
    async def session(self):
        self.connected = True
        self.sessions += 1
        try:
            yield self
        finally:
            self.connected = False

    def topics(self) -> list[str]:
        return [topic for topic, _, _ in self.messages]

    def payloads(self, topic: str) -> list[str]:
        return [payload for t, payload, _ in self.messages if t == topic]


@pytest.fixture
def env() -> dict[str, str]:
    """Minimal valid environment."""
    return {
        "HOSTSTAT_HOST": "broker.local",
        "HOSTSTAT_USERNAME": "user",
        "HOSTSTAT_PASSWORD": "secret",
        "HOSTSTAT_DEVICE_NAME": "host1",
    }


@pytest.fixture
def config(env: dict[str, str]) -> Config:
    return ConfigLoader().load_env(env)


@pytest.fixture
def fake_mqtt() -> FakeMQTTClient:
    return FakeMQTTClient()


@pytest.fixture
def psi_dir(tmp_path: Path) -> Path:
    """Pressure directory with well-formed cpu, memory and io files."""
    root = tmp_path / "pressure"
    root.mkdir()
    (root / "cpu").write_text("some avg10=0.50 avg60=0.25 avg300=0.10 total=1000\n")
    (root / "memory").write_text(
        "some avg10=1.50 avg60=2.25 avg300=0.10 total=500\n"
        "full avg10=0.00 avg60=0.00 avg300=0.00 total=0\n"
    )
    (root / "io").write_text(
        "some avg10=3.00 avg60=2.00 avg300=1.00 total=123456\n"
        "full avg10=1.00 avg60=0.50 avg300=0.25 total=65432\n"
    )
    return root


@pytest.fixture
def power_supply_dir(tmp_path: Path) -> Path:
    """Power supply tree with one battery and one AC adapter."""
    root = tmp_path / "power_supply"
    (root / "BAT0").mkdir(parents=True)
    (root / "BAT0" / "capacity").write_text("42\n")
    (root / "BAT0" / "type").write_text("Battery\n")
    (root / "AC").mkdir()
    (root / "AC" / "online").write_text("1\n")
    (root / "AC" / "type").write_text("Mains\n")
    return root


# Same shape as psutil's shwtemp / sfan named tuples
TempReading = namedtuple("TempReading", ["label", "current", "high", "critical"])
FanReading = namedtuple("FanReading", ["label", "current"])


@pytest.fixture
def sensor_temperatures() -> dict[str, list[TempReading]]:
    """psutil.sensors_temperatures() result for a CPU package and an NVMe drive."""
    return {
        "coretemp": [
            TempReading("Package id 0", 45.0, 100.0, 100.0),
            TempReading("Core 0", 43.5, 100.0, 100.0),
        ],
        "nvme": [TempReading("Composite", 38.85, 84.85, 84.85)],
    }


@pytest.fixture
def sensor_fans() -> dict[str, list[FanReading]]:
    """psutil.sensors_fans() result for a ThinkPad fan."""
    return {"thinkpad": [FanReading("", 2100)]}
