"""
Typed metric values.

A MetricValue carries exactly one of the supported kinds. The kind decides
how the value is written into the JSON state document: doubles always keep a
fractional part, integers never have one, text becomes a JSON string.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ValueType(Enum):
    """Kinds of value a report can carry."""

    DOUBLE = "double"
    LONG = "long"  # signed 64-bit
    UNSIGNED_LONG = "unsigned_long"  # unsigned 64-bit
    INT = "int"  # signed 32-bit
    STR = "str"


# Inclusive integer ranges per integer kind
_INT_RANGES = {
    ValueType.LONG: (-(2**63), 2**63 - 1),
    ValueType.UNSIGNED_LONG: (0, 2**64 - 1),
    ValueType.INT: (-(2**31), 2**31 - 1),
}


@dataclass(frozen=True)
class MetricValue:
    """A single typed measurement value."""

    type: ValueType
    raw: float | int | str

    def __post_init__(self) -> None:
        if self.type is ValueType.DOUBLE:
            if isinstance(self.raw, bool) or not isinstance(self.raw, (int, float)):
                raise TypeError(f"double value must be a number, got {self.raw!r}")
            object.__setattr__(self, "raw", float(self.raw))
        elif self.type is ValueType.STR:
            if not isinstance(self.raw, str):
                raise TypeError(f"text value must be a str, got {self.raw!r}")
        else:
            if isinstance(self.raw, bool) or not isinstance(self.raw, int):
                raise TypeError(f"{self.type.value} value must be an int, got {self.raw!r}")
            low, high = _INT_RANGES[self.type]
            if not low <= self.raw <= high:
                raise ValueError(f"{self.raw} is out of range for {self.type.value}")

    @classmethod
    def double(cls, value: float) -> "MetricValue":
        return cls(ValueType.DOUBLE, value)

    @classmethod
    def long(cls, value: int) -> "MetricValue":
        return cls(ValueType.LONG, value)

    @classmethod
    def unsigned_long(cls, value: int) -> "MetricValue":
        return cls(ValueType.UNSIGNED_LONG, value)

    @classmethod
    def int32(cls, value: int) -> "MetricValue":
        return cls(ValueType.INT, value)

    @classmethod
    def text(cls, value: str) -> "MetricValue":
        return cls(ValueType.STR, value)

    @classmethod
    def of(cls, value: "MetricValue | float | int | str") -> "MetricValue":
        """
        Wrap a plain Python value.

        float -> double, int -> signed 64-bit, str -> text.
        Existing MetricValue instances are returned unchanged.
        """
        if isinstance(value, MetricValue):
            return value
        if isinstance(value, bool):
            raise TypeError("bool values are not supported")
        if isinstance(value, float):
            return cls.double(value)
        if isinstance(value, int):
            return cls.long(value)
        if isinstance(value, str):
            return cls.text(value)
        raise TypeError(f"unsupported metric value: {value!r}")

    def to_json(self) -> Any:
        """Return the JSON-native Python object for this value."""
        match self.type:
            case ValueType.DOUBLE:
                return float(self.raw)
            case ValueType.LONG | ValueType.UNSIGNED_LONG | ValueType.INT:
                return int(self.raw)
            case ValueType.STR:
                return str(self.raw)
        raise AssertionError(f"unhandled value type {self.type}")

    def __str__(self) -> str:
        return str(self.raw)
