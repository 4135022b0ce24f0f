"""
System-wide metrics collectors.

Collects:
- Load average (1, 5, 15 minutes)
- Uptime
- Physical memory used/total
"""

import time
from collections.abc import Callable
from typing import Any

import psutil

from ..models.report import Report, new_report
from ..models.value import MetricValue
from .base import Collector


class MemoryStatsError(RuntimeError):
    """Memory statistics could not be obtained (fatal)."""


class LoadCollector(Collector):
    """
    Collector for load average and uptime.

    Uses psutil to read /proc/loadavg and the boot time.
    """

    SOURCE_TYPE = "load"

    def __init__(
        self,
        loadavg: Callable[[], tuple[float, float, float]] = psutil.getloadavg,
        boot_time: Callable[[], float] = psutil.boot_time,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__()
        self._loadavg = loadavg
        self._boot_time = boot_time
        self._clock = clock

    async def collect(self) -> list[Report]:
        load1, load5, load15 = self._loadavg()
        uptime = max(self._clock() - self._boot_time(), 0.0)

        return [
            new_report("load1", MetricValue.double(load1), "power_factor"),
            new_report("load5", MetricValue.double(load5), "power_factor"),
            new_report("load15", MetricValue.double(load15), "power_factor"),
            new_report("uptime", MetricValue.double(uptime), "duration", "s"),
        ]


class MemoryCollector(Collector):
    """
    Collector for physical memory usage, in kilobytes.

    Used memory is total minus available, matching what free(1) reports.
    Memory statistics are mandatory: a failure stops the reporter.
    """

    SOURCE_TYPE = "memory"

    def __init__(self, virtual_memory: Callable[[], Any] = psutil.virtual_memory):
        super().__init__(required=True)
        self._virtual_memory = virtual_memory

    async def collect(self) -> list[Report]:
        try:
            mem = self._virtual_memory()
            total = int(mem.total)
            available = int(mem.available)
        except (OSError, AttributeError, ValueError, TypeError) as e:
            raise MemoryStatsError(f"Failed to read memory statistics: {e}") from e

        if total <= 0 or available < 0:
            raise MemoryStatsError(
                f"Implausible memory statistics: total={total} available={available}"
            )

        used_kb = max(total - available, 0) // 1024
        total_kb = total // 1024

        return [
            new_report("used_memory", MetricValue.unsigned_long(used_kb), "data_size", "kB"),
            new_report("total_memory", MetricValue.unsigned_long(total_kb), "data_size", "kB"),
        ]
