"""
Pressure stall information (PSI) collector.

Reads /proc/pressure/{cpu,memory,io}. Each kind is decoded on its own:
a missing or malformed file only drops that kind's reports.
"""

from collections.abc import Iterable
from pathlib import Path

from ..const import PSI_DIR, PSI_KINDS
from ..models.report import Report, new_report
from ..models.value import MetricValue
from ..utils.psi import PsiDecodeError, PsiReading, PsiUnavailableError, read_psi
from .base import Collector

PERCENT = "%"
MICROSECONDS = "μs"


def psi_reports(kind: str, reading: PsiReading) -> list[Report]:
    """
    Build reports for one decoded pressure kind.

    Names follow ``psi_<kind>_<category>_<field>``. A category whose
    line was absent contributes nothing rather than zeros.
    """
    reports: list[Report] = []
    for category, metrics in reading.categories():
        prefix = f"psi_{kind}_{category}"
        for field in ("avg10", "avg60", "avg300"):
            value = MetricValue.double(getattr(metrics, field))
            reports.append(new_report(f"{prefix}_{field}", value, "power_factor", PERCENT))
        reports.append(
            new_report(
                f"{prefix}_total",
                MetricValue.unsigned_long(metrics.total),
                "duration",
                MICROSECONDS,
            )
        )
    return reports


class PressureCollector(Collector):
    """
    Collector for cpu, memory and io pressure.

    A kind that cannot be read or decoded contributes no reports. A kind
    missing one category (cpu has no "full" line on older kernels) still
    reports the category it has: four reports instead of eight, and never
    zero-filled values for the missing one.
    """

    SOURCE_TYPE = "pressure"

    def __init__(self, root: str | Path = PSI_DIR, kinds: Iterable[str] = PSI_KINDS):
        super().__init__()
        self.root = Path(root)
        self.kinds = tuple(kinds)

    async def collect(self) -> list[Report]:
        reports: list[Report] = []

        for kind in self.kinds:
            try:
                reading = read_psi(kind, self.root)
            except PsiUnavailableError as e:
                # PSI may be compiled out of the kernel
                self.logger.debug(f"PSI {kind} unavailable: {e}")
                continue
            except PsiDecodeError as e:
                self.logger.warning(f"Failed to parse PSI {kind}: {e}")
                continue

            if not reading.complete:
                present = ", ".join(category for category, _ in reading.categories())
                self.logger.debug(f"PSI {kind}: only {present} reported")

            reports.extend(psi_reports(kind, reading))

        return reports
