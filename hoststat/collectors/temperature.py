"""
Temperature collector for hwmon sensors.

Uses psutil's sensors_temperatures(), which walks /sys/class/hwmon the
way lm-sensors does: every chip key groups its temperature features.
Fan features (psutil's sensors_fans()) are observed and skipped.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import psutil

from ..logging import get_logger
from ..models.report import Report, new_report, sanitize_name
from ..models.value import MetricValue
from .base import Collector

TEMPERATURE = "temperature"
CELSIUS = "°C"

logger = get_logger("collectors.temperature")


@dataclass
class Feature:
    """One sensor feature of a chip (e.g. temp1)."""

    kind: str  # temp, fan
    index: int
    label: str
    current: float | None = None


@dataclass
class Chip:
    """A hardware monitoring chip as reported by psutil."""

    name: str
    features: list[Feature] = field(default_factory=list)


def _build_features(kind: str, entries: list[Any]) -> list[Feature]:
    features: list[Feature] = []
    seen: set[str] = set()

    for i, entry in enumerate(entries):
        index = i + 1
        label = entry.label or f"{kind}{index}"
        # Chips sharing a driver name are merged by psutil; keep labels distinct
        if label in seen:
            label = f"{label}_{index}"
        seen.add(label)

        current = entry.current
        features.append(
            Feature(
                kind=kind,
                index=index,
                label=label,
                current=None if current is None else float(current),
            )
        )

    return features


def iter_chips(
    sensors_temperatures: Callable[[], dict[str, list[Any]]] | None = None,
    sensors_fans: Callable[[], dict[str, list[Any]]] | None = None,
) -> Iterator[Chip]:
    """
    Iterate over detected chips with their temperature and fan features.

    Args:
        sensors_temperatures: Temperature source (defaults to psutil)
        sensors_fans: Fan source (defaults to psutil where available)

    Yields:
        Chip per chip key, temperature features first
    """
    if sensors_temperatures is None:
        sensors_temperatures = psutil.sensors_temperatures
    if sensors_fans is None:
        sensors_fans = getattr(psutil, "sensors_fans", None)

    temps = sensors_temperatures()

    fans: dict[str, list[Any]] = {}
    if sensors_fans is not None:
        try:
            fans = sensors_fans()
        except OSError as e:
            logger.debug(f"Fan sensors unavailable: {e}")

    for name in sorted(set(temps) | set(fans)):
        features = _build_features("temp", temps.get(name, []))
        features.extend(_build_features("fan", fans.get(name, [])))
        yield Chip(name=name, features=features)


class TemperatureCollector(Collector):
    """Collector for hwmon temperature sensors."""

    SOURCE_TYPE = "temperature"

    def __init__(
        self,
        sensors_temperatures: Callable[[], dict[str, list[Any]]] | None = None,
        sensors_fans: Callable[[], dict[str, list[Any]]] | None = None,
    ):
        super().__init__()
        # Not every platform provides sensor functions
        self._sensors_temperatures = sensors_temperatures or getattr(
            psutil, "sensors_temperatures", None
        )
        self._sensors_fans = sensors_fans or getattr(psutil, "sensors_fans", None)

    def sensor_name(self, chip: Chip, feature: Feature) -> str:
        """Entity name for a chip feature: ``<chip>_<label>``."""
        return sanitize_name(f"{chip.name}_{feature.label}")

    async def collect(self) -> list[Report]:
        if self._sensors_temperatures is None:
            self.logger.debug("Temperature sensors are not supported on this platform")
            return []

        reports: list[Report] = []

        for chip in iter_chips(self._sensors_temperatures, self._sensors_fans):
            for feature in chip.features:
                name = self.sensor_name(chip, feature)
                if not name:
                    continue

                if feature.kind != "temp":
                    self.logger.debug(f"{name}: unsupported feature type {feature.kind}")
                    continue

                if feature.current is None:
                    self.logger.debug(f"{name}: no temperature input")
                    continue

                self.logger.debug(f"Found sensor {name} = {feature.current}")
                reports.append(
                    new_report(name, MetricValue.double(feature.current), TEMPERATURE, CELSIUS)
                )

        return reports
