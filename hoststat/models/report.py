"""
Reports: named measurements collected during one reporting cycle.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .value import MetricValue

# Characters that would break an MQTT topic level
_FORBIDDEN_NAME_CHARS = ("/", "+", "#", "\0")


class InvalidNameError(ValueError):
    """A device or entity name cannot be used as a topic level."""


class DuplicateReportError(ValueError):
    """A report with the same name is already part of the collection."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"duplicate report name: {name!r}")


def validate_name(value: str) -> str:
    """
    Check that a device or entity name is usable as a single topic level.

    Returns:
        The name unchanged

    Raises:
        InvalidNameError: If the name is empty or contains '/', '+', '#' or NUL
    """
    if not value:
        raise InvalidNameError("name must not be empty")
    for char in _FORBIDDEN_NAME_CHARS:
        if char in value:
            raise InvalidNameError(f"name {value!r} must not contain {char!r}")
    return value


def sanitize_name(value: str) -> str:
    """
    Turn a free-form label into an entity name.

    Characters outside [A-Za-z0-9_-] become '_', runs of '_' collapse
    and leading/trailing '_' are dropped.
    """
    result = []
    for char in value.strip():
        if char.isascii() and (char.isalnum() or char in "_-"):
            result.append(char)
        else:
            result.append("_")

    sanitized = "".join(result)
    while "__" in sanitized:
        sanitized = sanitized.replace("__", "_")

    return sanitized.strip("_")


@dataclass(frozen=True)
class Report:
    """
    One named measurement for the current cycle.

    The name is both the key in the state document and the suffix of
    every topic and identifier derived for the entity.
    """

    name: str
    value: MetricValue
    device_class: str | None = None
    unit: str | None = None

    def __post_init__(self) -> None:
        validate_name(self.name)
        if not isinstance(self.value, MetricValue):
            raise TypeError(f"report value must be a MetricValue, got {self.value!r}")

    def to_json_member(self) -> tuple[str, Any]:
        """Return the ``(key, value)`` pair this report contributes to the state document."""
        return self.name, self.value.to_json()


def new_report(
    name: str,
    value: MetricValue | float | int | str,
    device_class: str | None = None,
    unit: str | None = None,
) -> Report:
    """
    Create a report, wrapping plain values with MetricValue.of().

    Args:
        name: Entity name
        value: Typed value, or a plain float/int/str
        device_class: Home Assistant device class hint
        unit: Unit of measurement
    """
    return Report(name=name, value=MetricValue.of(value), device_class=device_class, unit=unit)


class ReportCollection:
    """
    Ordered, append-only set of reports for one cycle.

    Names are unique; adding a second report with an existing name
    raises DuplicateReportError and leaves the collection unchanged.
    """

    def __init__(self, reports: Iterable[Report] = ()):
        self._reports: list[Report] = []
        self._names: set[str] = set()
        for report in reports:
            self.add(report)

    def add(self, report: Report) -> None:
        if report.name in self._names:
            raise DuplicateReportError(report.name)
        self._reports.append(report)
        self._names.add(report.name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[Report]:
        return iter(self._reports)

    def __len__(self) -> int:
        return len(self._reports)

    def get(self, name: str) -> Report | None:
        for report in self._reports:
            if report.name == name:
                return report
        return None

    @property
    def names(self) -> list[str]:
        return [report.name for report in self._reports]

    def __repr__(self) -> str:
        return f"ReportCollection({len(self._reports)} reports)"
