"""
Battery capacity collector.

Reads /sys/class/power_supply/*/capacity. Power supplies without a
capacity attribute (AC adapters, USB ports) are not batteries and are
skipped silently; a capacity that cannot be parsed is skipped with a
warning.
"""

from dataclasses import dataclass
from pathlib import Path

from ..const import POWER_SUPPLY_DIR
from ..logging import get_logger
from ..models.report import InvalidNameError, Report, new_report, validate_name
from ..models.value import MetricValue
from ..utils.sysfs import SysfsParseError, read_attribute_int
from .base import Collector

CAPACITY_ATTRIBUTE = "capacity"

# "100\n" fits easily; anything larger is not a percentage
CAPACITY_MAX_SIZE = 16

logger = get_logger("collectors.battery")


@dataclass(frozen=True)
class Battery:
    """A power supply exposing a capacity percentage."""

    name: str
    capacity: int


def read_capacity(supply_dir: Path) -> int:
    """
    Read the capacity percentage of a power supply.

    Raises:
        FileNotFoundError: If the supply has no capacity attribute
        OSError: If the attribute cannot be read
        SysfsParseError: If the value is oversized, not an integer or outside 0..100
    """
    path = supply_dir / CAPACITY_ATTRIBUTE
    capacity = read_attribute_int(path, max_size=CAPACITY_MAX_SIZE)
    if not 0 <= capacity <= 100:
        raise SysfsParseError(path, f"capacity {capacity} is outside 0..100")
    return capacity


def discover_batteries(root: str | Path = POWER_SUPPLY_DIR) -> list[Battery]:
    """
    Enumerate power supplies that report a capacity.

    Args:
        root: Power supply class directory

    Returns:
        Batteries sorted by name; empty if the directory is missing
    """
    root = Path(root)
    batteries: list[Battery] = []

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        logger.debug(f"{root} does not exist")
        return batteries
    except OSError as e:
        logger.warning(f"Could not open {root}: {e}")
        return batteries

    for supply in entries:
        if supply.name.startswith("."):
            continue

        try:
            validate_name(supply.name)
        except InvalidNameError as e:
            logger.warning(f"Skipping power supply {supply.name!r}: {e}")
            continue

        try:
            capacity = read_capacity(supply)
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"Skipping power supply {supply.name}: not a battery")
            continue
        except SysfsParseError as e:
            logger.warning(f"Failed to parse battery capacity of {supply.name}: {e}")
            continue
        except OSError as e:
            logger.warning(f"Could not read battery capacity of {supply.name}: {e}")
            continue

        batteries.append(Battery(name=supply.name, capacity=capacity))

    return batteries


class BatteryCollector(Collector):
    """
    Collector for battery capacity.

    One report per battery, named after the power supply (BAT0, ...).
    """

    SOURCE_TYPE = "battery"

    def __init__(self, root: str | Path = POWER_SUPPLY_DIR):
        super().__init__()
        self.root = Path(root)

    async def collect(self) -> list[Report]:
        return [
            new_report(battery.name, MetricValue.int32(battery.capacity), "battery", "%")
            for battery in discover_batteries(self.root)
        ]
