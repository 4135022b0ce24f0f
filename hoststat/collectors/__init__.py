"""
Metric collectors for host telemetry.
"""

from .base import Collector
from .battery import BatteryCollector
from .pressure import PressureCollector
from .system import LoadCollector, MemoryCollector, MemoryStatsError
from .temperature import TemperatureCollector

__all__ = [
    "Collector",
    "LoadCollector",
    "MemoryCollector",
    "MemoryStatsError",
    "TemperatureCollector",
    "BatteryCollector",
    "PressureCollector",
]
