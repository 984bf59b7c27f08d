#!/usr/bin/env python3
"""Pulse Keys — Entry point.

Turns pulse sensors wired to an MCP3208 into touch keys. Each press is
logged with the pitch assigned to its channel.

Usage:
    python3 main.py              # Normal mode (reads real hardware)
    python3 main.py --demo       # Simulated ADC, no wiring needed
    python3 main.py --log-level DEBUG   # Verbose logging

Stop with Ctrl+C.
"""

__version__ = "1.0.0"

import argparse
import logging
import sys

from config import load_config
from core.instrument import build_adc, build_channels
from core.poll_loop import PollLoop
from sensors.errors import PinAcquisitionFailure

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Pulse Keys — pulse sensors as touch keys via MCP3208",
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Use a simulated ADC instead of real hardware",
    )
    parser.add_argument(
        "--config", default="instrument.yaml",
        help="Path to instrument YAML config (default: instrument.yaml)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"Pulse Keys {__version__}",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    """Configure root logger with a consistent format."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def log_press(channel: int, pitch: str) -> None:
    """Default press action."""
    logger.info("Press: ch%d -> %s", channel, pitch)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger.info("Pulse Keys v%s starting", __version__)

    try:
        cfg = load_config(args.config)
        adc = build_adc(cfg, demo=args.demo)
    except (PinAcquisitionFailure, KeyError, TypeError, ValueError) as exc:
        logger.error("Cannot start: %s", exc)
        return 1

    try:
        try:
            channels = build_channels(adc, cfg)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Cannot start: bad key config - %s", exc)
            return 1
        PollLoop(channels, log_press).run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        adc.close()
        logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
