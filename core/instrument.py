"""Builds the ADC and touch keys from configuration."""

import logging
from typing import Any, Dict, List

from sensors.gpio_utils import GpioController
from sensors.mcp3208 import MCP3208, SpiPins, check_channel
from sensors.simulated import SimulatedMCP3208
from sensors.touch import TouchChannel

logger = logging.getLogger(__name__)


def build_adc(cfg: Dict[str, Any], demo: bool = False, controller=None):
    """Create the converter driver, or a simulated one in demo mode.

    Raises:
        PinAcquisitionFailure if any of the four SPI lines is unavailable.
    """
    if demo:
        logger.info("ADC: demo mode, using simulated MCP3208")
        return SimulatedMCP3208()

    adc_cfg = cfg["adc"]
    pins = SpiPins(**adc_cfg["pins"])
    if controller is None:
        controller = GpioController(chip_path=adc_cfg.get("chip"))
    return MCP3208(
        pins,
        controller=controller,
        half_period_ns=adc_cfg.get("half_period_ns", 500),
    )


def build_channels(adc, cfg: Dict[str, Any]) -> List[TouchChannel]:
    """One TouchChannel per configured key, in configured order."""
    th = cfg["thresholds"]
    channels = []
    for key in cfg["channels"]:
        check_channel(key["channel"])
        channels.append(TouchChannel(
            adc,
            key["channel"],
            label=str(key.get("pitch", "")),
            press_threshold=th["press"],
            release_low=th["release_low"],
            release_high=th["release_high"],
        ))
    logger.info(
        "Keys: %s",
        ", ".join(f"ch{c.channel}={c.label}" for c in channels),
    )
    return channels
