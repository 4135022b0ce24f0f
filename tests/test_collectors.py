"""
Tests for collectors.
"""

import asyncio
from pathlib import Path
from types import SimpleNamespace

import psutil
import pytest

from conftest import TempReading

from hoststat.collectors import (
    BatteryCollector,
    LoadCollector,
    MemoryCollector,
    MemoryStatsError,
    PressureCollector,
    TemperatureCollector,
)
from hoststat.collectors.base import Collector
from hoststat.collectors.battery import discover_batteries
from hoststat.collectors.temperature import iter_chips
from hoststat.models.value import ValueType


def collect(collector: Collector):
    return asyncio.run(collector.safe_collect())


class TestLoadCollector:
    def test_reports_load_and_uptime(self) -> None:
        collector = LoadCollector(
            loadavg=lambda: (0.5, 0.25, 0.125),
            boot_time=lambda: 1000.0,
            clock=lambda: 1123.4,
        )

        reports = {report.name: report for report in collect(collector)}

        assert list(reports) == ["load1", "load5", "load15", "uptime"]
        assert reports["load1"].value.to_json() == 0.5
        assert reports["load15"].value.type is ValueType.DOUBLE
        assert reports["load5"].device_class == "power_factor"
        assert reports["uptime"].value.to_json() == pytest.approx(123.4)
        assert reports["uptime"].device_class == "duration"
        assert reports["uptime"].unit == "s"

    def test_uptime_never_negative(self) -> None:
        collector = LoadCollector(
            loadavg=lambda: (0.0, 0.0, 0.0),
            boot_time=lambda: 2000.0,
            clock=lambda: 1000.0,
        )

        reports = {report.name: report for report in collect(collector)}

        assert reports["uptime"].value.to_json() == 0.0

    def test_failure_is_isolated(self) -> None:
        def broken():
            raise OSError("no /proc/loadavg")

        collector = LoadCollector(loadavg=broken)

        assert collect(collector) == []
        assert collector.last_count == 0


class TestMemoryCollector:
    def test_reports_used_and_total_kilobytes(self) -> None:
        stats = SimpleNamespace(total=4096 * 1024, available=2048 * 1024)
        collector = MemoryCollector(virtual_memory=lambda: stats)

        reports = {report.name: report for report in collect(collector)}

        assert reports["used_memory"].value.to_json() == 2048
        assert reports["total_memory"].value.to_json() == 4096
        assert reports["used_memory"].value.type is ValueType.UNSIGNED_LONG
        assert reports["total_memory"].device_class == "data_size"
        assert reports["total_memory"].unit == "kB"

    def test_is_required(self) -> None:
        assert MemoryCollector().required

    def test_failure_is_fatal(self) -> None:
        def broken():
            raise OSError("no /proc/meminfo")

        collector = MemoryCollector(virtual_memory=broken)

        with pytest.raises(MemoryStatsError):
            collect(collector)

    def test_implausible_total_is_fatal(self) -> None:
        stats = SimpleNamespace(total=0, available=0)
        collector = MemoryCollector(virtual_memory=lambda: stats)

        with pytest.raises(MemoryStatsError):
            collect(collector)


class TestTemperatureCollector:
    def test_reports_temperature_features(self, sensor_temperatures, sensor_fans) -> None:
        collector = TemperatureCollector(
            sensors_temperatures=lambda: sensor_temperatures,
            sensors_fans=lambda: sensor_fans,
        )

        reports = collect(collector)

        assert [report.name for report in reports] == [
            "coretemp_Package_id_0",
            "coretemp_Core_0",
            "nvme_Composite",
        ]
        assert [report.value.to_json() for report in reports] == [45.0, 43.5, 38.85]
        assert all(report.device_class == "temperature" for report in reports)
        assert all(report.unit == "°C" for report in reports)

    def test_fans_are_observed_not_reported(self, sensor_fans) -> None:
        chips = list(iter_chips(lambda: {}, lambda: sensor_fans))

        assert [chip.name for chip in chips] == ["thinkpad"]
        assert chips[0].features[0].kind == "fan"
        assert chips[0].features[0].label == "fan1"
        assert collect(TemperatureCollector(lambda: {}, lambda: sensor_fans)) == []

    def test_feature_without_label_uses_feature_name(self) -> None:
        temps = {"acpitz": [TempReading("", 27.8, None, None)]}

        reports = collect(TemperatureCollector(lambda: temps, lambda: {}))

        assert [report.name for report in reports] == ["acpitz_temp1"]

    def test_merged_chips_keep_labels_distinct(self) -> None:
        # psutil merges chips sharing a driver name under one key
        temps = {
            "nvme": [
                TempReading("Composite", 30.0, None, None),
                TempReading("Composite", 31.0, None, None),
            ]
        }

        reports = collect(TemperatureCollector(lambda: temps, lambda: {}))

        assert [report.name for report in reports] == ["nvme_Composite", "nvme_Composite_2"]

    def test_missing_reading_is_skipped(self) -> None:
        temps = {
            "acpitz": [TempReading("", None, None, None), TempReading("", 40.0, None, None)]
        }

        reports = collect(TemperatureCollector(lambda: temps, lambda: {}))

        assert [report.name for report in reports] == ["acpitz_temp2"]

    def test_reads_psutil_by_default(self, monkeypatch) -> None:
        # psutil also finds chips whose inputs live under hwmonN/device/
        temps = {"it87": [TempReading("", 41.0, None, None)]}
        monkeypatch.setattr(psutil, "sensors_temperatures", lambda: temps, raising=False)
        monkeypatch.setattr(psutil, "sensors_fans", lambda: {}, raising=False)

        reports = collect(TemperatureCollector())

        assert [report.name for report in reports] == ["it87_temp1"]
        assert reports[0].value.to_json() == 41.0

    def test_unsupported_platform(self, monkeypatch) -> None:
        monkeypatch.delattr(psutil, "sensors_temperatures", raising=False)

        assert collect(TemperatureCollector()) == []


class TestBatteryCollector:
    def test_discovers_batteries_only(self, power_supply_dir: Path) -> None:
        batteries = discover_batteries(power_supply_dir)

        assert len(batteries) == 1
        assert batteries[0].name == "BAT0"
        assert batteries[0].capacity == 42

    def test_reports_capacity(self, power_supply_dir: Path) -> None:
        reports = collect(BatteryCollector(power_supply_dir))

        assert len(reports) == 1
        report = reports[0]
        assert report.name == "BAT0"
        assert report.value.type is ValueType.INT
        assert report.value.to_json() == 42
        assert report.device_class == "battery"
        assert report.unit == "%"

    @pytest.mark.parametrize("content", ["abc\n", "101\n", "-1\n", "4" * 40])
    def test_invalid_capacity_is_skipped(self, power_supply_dir: Path, content: str) -> None:
        (power_supply_dir / "BAT1").mkdir()
        (power_supply_dir / "BAT1" / "capacity").write_text(content)

        reports = collect(BatteryCollector(power_supply_dir))

        assert [report.name for report in reports] == ["BAT0"]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert collect(BatteryCollector(tmp_path / "missing")) == []

    @pytest.mark.parametrize("name", ["BAT+1", "BAT#1"])
    def test_unusable_name_skips_only_that_battery(
        self, power_supply_dir: Path, name: str
    ) -> None:
        (power_supply_dir / name).mkdir()
        (power_supply_dir / name / "capacity").write_text("50\n")

        reports = collect(BatteryCollector(power_supply_dir))

        assert [report.name for report in reports] == ["BAT0"]


class TestPressureCollector:
    def test_reports_all_kinds(self, psi_dir: Path) -> None:
        reports = collect(PressureCollector(psi_dir))
        names = [report.name for report in reports]

        # cpu has no "full" line
        assert len(reports) == 4 + 8 + 8
        assert "psi_cpu_full_avg10" not in names
        assert names[:4] == [
            "psi_cpu_some_avg10",
            "psi_cpu_some_avg60",
            "psi_cpu_some_avg300",
            "psi_cpu_some_total",
        ]

    def test_memory_reports(self, psi_dir: Path) -> None:
        reports = {
            report.name: report
            for report in collect(PressureCollector(psi_dir, kinds=["memory"]))
        }

        assert len(reports) == 8
        assert reports["psi_memory_some_avg60"].value.to_json() == 2.25
        assert reports["psi_memory_some_avg60"].device_class == "power_factor"
        assert reports["psi_memory_some_avg60"].unit == "%"
        assert reports["psi_memory_some_total"].value.to_json() == 500
        assert reports["psi_memory_some_total"].value.type is ValueType.UNSIGNED_LONG
        assert reports["psi_memory_full_total"].device_class == "duration"
        assert reports["psi_memory_full_total"].unit == "μs"

    def test_malformed_kind_does_not_affect_others(self, psi_dir: Path) -> None:
        (psi_dir / "cpu").write_text("xyz avg10=0.00\n")

        names = [report.name for report in collect(PressureCollector(psi_dir))]

        assert not any(name.startswith("psi_cpu_") for name in names)
        assert "psi_memory_some_avg10" in names
        assert "psi_io_full_total" in names

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert collect(PressureCollector(tmp_path / "missing")) == []

    def test_non_finite_value_drops_only_that_kind(self, psi_dir: Path) -> None:
        (psi_dir / "memory").write_text("some avg10=nan avg60=0.00 avg300=0.00 total=0\n")

        names = [report.name for report in collect(PressureCollector(psi_dir))]

        assert not any(name.startswith("psi_memory_") for name in names)
        assert "psi_cpu_some_avg10" in names
        assert "psi_io_full_total" in names
