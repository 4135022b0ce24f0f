"""
Entry point for hoststat.

Usage:
    python -m hoststat
    python -m hoststat --env-file /etc/hoststat/hoststat.env
    python -m hoststat --help
"""

import argparse
import asyncio
import sys

from . import __version__
from .app import run_app
from .collectors.system import MemoryStatsError
from .config.loader import ConfigError, ConfigLoader
from .config.schema import Config
from .logging import LogConfig, get_logger, setup_logging
from .mqtt.client import PublishError

logger = get_logger("main")


def print_summary(config: Config, warnings: list[str]) -> None:
    """Print configuration warnings and a summary."""
    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    cfg = config.collectors
    print("\nConfiguration summary:")
    print(f"  MQTT: {config.mqtt.host}:{config.mqtt.port} (client id {config.mqtt.client_id})")
    print(f"  Device name: {config.device_name}")
    print(f"  Discovery prefix: {config.homeassistant.discovery_prefix}")
    print(f"  Update interval: {cfg.update_interval:g}s")
    print(f"  Sensors: {'enabled' if cfg.sensors else 'disabled'}")
    print(f"  Batteries: {'enabled' if cfg.batteries else 'disabled'}")
    print(f"  PSI: {'enabled' if cfg.psi else 'disabled'}")
    print(f"  Logging level: {config.logging.level}")
    if config.logging.file:
        print(f"  Log file: {config.logging.file}")


def build_log_config(config: Config, args: argparse.Namespace) -> LogConfig:
    """Merge logging settings; command line flags win over the environment."""
    log_config = LogConfig(
        console_level=config.logging.level,
        console_colors=config.logging.colors,
    )

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"

    if args.no_color:
        log_config.console_colors = False

    log_file = args.log_file or config.logging.file
    if log_file:
        log_config.file_path = log_file

    return log_config


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="hoststat",
        description="Host telemetry reporter for Home Assistant via MQTT",
    )

    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Read HOSTSTAT_* variables from a KEY=VALUE file (environment wins)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Announce, publish a single state document and exit",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()

    # Minimal logging until the configuration is known
    setup_logging(LogConfig(console_level="debug" if args.debug else "warning"))

    loader = ConfigLoader()
    try:
        config = loader.load_file(args.env_file) if args.env_file else loader.load_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    warnings = loader.validate(config)

    if args.validate:
        print_summary(config, warnings)
        print("\nConfiguration is valid!")
        return 0

    setup_logging(build_log_config(config, args))
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    try:
        asyncio.run(run_app(config, max_cycles=1 if args.once else None))
        return 0
    except PublishError as e:
        logger.error(f"MQTT error: {e}")
        return 1
    except MemoryStatsError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
