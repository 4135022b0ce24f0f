"""
Main application orchestrator.

Handles:
- Collector management
- Announcing entities to Home Assistant
- Periodic state publishing
- Graceful shutdown
"""

import asyncio
import signal
from enum import Enum

from .collectors.base import Collector
from .collectors.battery import BatteryCollector
from .collectors.pressure import PressureCollector
from .collectors.system import LoadCollector, MemoryCollector
from .collectors.temperature import TemperatureCollector
from .config.schema import Config
from .const import RUNNING_ENTITY_NAME
from .logging import get_logger
from .models.report import DuplicateReportError, ReportCollection
from .mqtt.client import MQTTClient, PublishError
from .mqtt.homeassistant import HomeAssistantDiscovery, state_topic, will_payload

logger = get_logger("app")


class CycleState(Enum):
    """Reporting lifecycle."""

    ANNOUNCING = "announcing"
    REPORTING = "reporting"


class Application:
    """
    Main application class.

    Runs every collector in a fixed order, merges their reports into one
    collection and publishes a single state document per cycle.
    """

    def __init__(
        self,
        config: Config,
        mqtt: MQTTClient | None = None,
        collectors: list[Collector] | None = None,
    ):
        """
        Initialize application.

        Args:
            config: Application configuration
            mqtt: MQTT client (created from config if omitted)
            collectors: Collectors to run (created from config if omitted)
        """
        self.config = config
        prefix = config.homeassistant.discovery_prefix

        self.mqtt = mqtt or MQTTClient(
            config.mqtt,
            will_topic=state_topic(config.device_name, prefix),
            will_payload=will_payload(),
            log_payloads=config.logging.debug,
        )

        self.ha = HomeAssistantDiscovery(
            self.mqtt,
            config.device_name,
            discovery_prefix=prefix,
            retain_discovery=config.mqtt.retain_discovery,
        )

        self.collectors = collectors if collectors is not None else self._create_collectors()

        self.state = CycleState.ANNOUNCING
        self.cycles = 0
        self._shutdown_event = asyncio.Event()

    def _create_collectors(self) -> list[Collector]:
        """Create all configured collectors, in reporting order."""
        cfg = self.config.collectors
        collectors: list[Collector] = [LoadCollector(), MemoryCollector()]

        if cfg.sensors:
            collectors.append(TemperatureCollector())

        if cfg.batteries:
            collectors.append(BatteryCollector(cfg.power_supply_dir))

        if cfg.psi:
            collectors.append(PressureCollector(cfg.psi_dir))

        return collectors

    @property
    def update_interval(self) -> float:
        return self.config.collectors.update_interval

    async def collect_reports(self) -> ReportCollection:
        """
        Run every collector and merge the results.

        A report whose name is already taken (or clashes with the
        liveness member) is dropped with a warning; the first one wins.
        """
        collection = ReportCollection()

        for collector in self.collectors:
            reports = await collector.safe_collect()
            logger.debug(f"Collector {collector.name} produced {len(reports)} reports")

            for report in reports:
                if report.name == RUNNING_ENTITY_NAME:
                    logger.warning(
                        f"Collector {collector.name} produced reserved name {report.name!r}"
                    )
                    continue
                try:
                    collection.add(report)
                except DuplicateReportError as e:
                    logger.warning(f"Collector {collector.name}: {e}, keeping the first one")

        return collection

    async def announce(self) -> ReportCollection:
        """
        ANNOUNCING: publish discovery for the liveness entity and every
        entity the collectors currently produce, then switch to REPORTING.
        """
        logger.info(f"Announcing device {self.config.device_name}")

        await self.ha.announce_liveness()
        reports = await self.collect_reports()
        await self.ha.announce(reports)

        self.state = CycleState.REPORTING
        return reports

    async def run_cycle(self) -> ReportCollection:
        """
        REPORTING: collect, announce entities that appeared since the
        last cycle, publish the state document.
        """
        reports = await self.collect_reports()
        await self.ha.announce(reports)
        await self.ha.publish_state(reports)

        self.cycles += 1
        logger.debug(f"Cycle {self.cycles}: published {len(reports)} reports")
        return reports

    async def _wait_interval(self) -> None:
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.update_interval)
        except asyncio.TimeoutError:
            pass

    async def run_loop(self, max_cycles: int | None = None) -> None:
        """
        Announce once, then report until shutdown.

        Args:
            max_cycles: Stop after this many reporting cycles (None = forever)
        """
        if self.state is CycleState.ANNOUNCING:
            await self.announce()

        while not self._shutdown_event.is_set():
            await self.run_cycle()

            if max_cycles is not None and self.cycles >= max_cycles:
                break

            await self._wait_interval()

    def request_shutdown(self) -> None:
        """Stop the loop after the current cycle."""
        self._shutdown_event.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

    def _signal_handler(self) -> None:
        logger.info("Received shutdown signal")
        self.request_shutdown()

    async def run(self, max_cycles: int | None = None, handle_signals: bool = True) -> None:
        """
        Connect, run the reporting loop, disconnect.

        The liveness member is published as false before disconnecting,
        after a signal and when the loop fails. The broker's last will only
        covers a connection that drops without a disconnect.
        """
        logger.info(f"Starting hoststat for device {self.config.device_name}")
        logger.info(f"Collectors: {', '.join(c.name for c in self.collectors)}")

        async with self.mqtt.session():
            if handle_signals:
                self._setup_signal_handlers()

            try:
                await self.run_loop(max_cycles=max_cycles)
            except BaseException:
                # A clean disconnect discards the last will; say it ourselves
                await self._publish_offline_after_error()
                raise

            if self.shutdown_requested:
                await self.ha.publish_offline()

        logger.info("hoststat stopped")

    async def _publish_offline_after_error(self) -> None:
        try:
            await self.ha.publish_offline()
        except PublishError as e:
            logger.warning(f"Could not publish offline state: {e}")


async def run_app(config: Config, max_cycles: int | None = None) -> None:
    """
    Run the application with a loaded configuration.

    Args:
        config: Application configuration
        max_cycles: Stop after this many reporting cycles (None = forever)
    """
    logger.debug(f"MQTT: {config.mqtt.host}:{config.mqtt.port}")
    logger.debug(f"Discovery prefix: {config.homeassistant.discovery_prefix}")

    app = Application(config)
    await app.run(max_cycles=max_cycles)
