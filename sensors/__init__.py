"""Hardware modules for Pulse Keys.

    gpio_utils  — GpioController / GpioLine over libgpiod
    mcp3208     — bit-banged driver for the MCP3208 ADC
    simulated   — stand-in ADC for demo mode
    touch       — TouchChannel: one debounced touch key per ADC channel
    errors      — InvalidChannel, PinAcquisitionFailure, LineReleased

Both ADC classes expose:
    read_channel(channel)  — one fresh 12-bit sample (0-4095)
    close()                — release hardware resources
"""

from sensors.errors import AdcError, InvalidChannel, LineReleased, PinAcquisitionFailure
from sensors.mcp3208 import MCP3208, SpiPins
from sensors.simulated import SimulatedMCP3208
from sensors.touch import TouchChannel, TouchState

__all__ = [
    "AdcError",
    "InvalidChannel",
    "LineReleased",
    "PinAcquisitionFailure",
    "MCP3208",
    "SpiPins",
    "SimulatedMCP3208",
    "TouchChannel",
    "TouchState",
]
