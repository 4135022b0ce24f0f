"""
Base collector interface for metric collection.

All collectors inherit from the abstract Collector class and implement
the collect() method, mapping one OS data source into reports.
"""

from abc import ABC, abstractmethod

from ..logging import get_logger
from ..models.report import Report


class Collector(ABC):
    """
    Abstract base class for metric collectors.

    Collectors are independent of each other and may run in any order.
    A failing optional collector contributes no reports for the cycle;
    a failing required collector aborts the process.
    """

    # Source type used in log messages (override in subclasses)
    SOURCE_TYPE: str = "unknown"

    def __init__(self, name: str | None = None, required: bool = False):
        """
        Initialize collector.

        Args:
            name: Human-readable collector name (defaults to SOURCE_TYPE)
            required: Whether a collection failure is fatal
        """
        self.name = name or self.SOURCE_TYPE
        self.required = required
        self.logger = get_logger(f"collectors.{self.SOURCE_TYPE}")
        self._last_count = 0

    @abstractmethod
    async def collect(self) -> list[Report]:
        """
        Collect reports from the source.

        Returns:
            Reports produced in this cycle (possibly empty)
        """
        pass

    async def safe_collect(self) -> list[Report]:
        """
        Collect reports, isolating failures of optional collectors.

        Returns:
            Collected reports, or an empty list if an optional collector failed

        Raises:
            Exception: Whatever collect() raised, for required collectors
        """
        try:
            reports = await self.collect()
        except Exception as e:
            if self.required:
                raise
            self.logger.error(f"Collector {self.name} failed: {e}")
            self._last_count = 0
            return []

        self._last_count = len(reports)
        return reports

    @property
    def last_count(self) -> int:
        """Number of reports produced by the last collection."""
        return self._last_count

    def __repr__(self) -> str:
        kind = "required" if self.required else "optional"
        return f"{self.__class__.__name__}({self.name!r}, {kind})"
