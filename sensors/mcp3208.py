"""MCP3208 12-bit, 8-channel ADC over bit-banged SPI.

How it works:
  The Pi has no spare SPI peripheral for the converter, so the protocol
  is driven by hand on four ordinary GPIO lines:

    CS   (out)  LOW while a conversion is in progress, HIGH when idle
    CLK  (out)  the converter latches MOSI on the rising edge and shifts
                its next result bit out on the falling edge
    MOSI (out)  Pi -> converter DIN
    MISO (in)   converter DOUT -> Pi

  One conversion is 18 clock pulses:

    1  start bit (always 1)
    4  command: single-ended flag (1) + 3-bit channel, MSB first
    1  null bit while the converter samples
    12 result bits, MSB first

Timing:
  The datasheet asks for at least 500ns high and 500ns low per clock at
  2.7V. Each edge is preceded by a busy-wait on the monotonic clock so
  that minimum holds no matter how fast the GPIO writes are. CS is held
  HIGH for the same time after each conversion (tCSH).

Ownership:
  The driver claims its four lines on the controller. A second driver
  asking for any of them fails with PinAcquisitionFailure.
"""

import logging
import time
from typing import NamedTuple, Optional

from sensors.errors import InvalidChannel, PinAcquisitionFailure
from sensors.gpio_utils import GpioController

logger = logging.getLogger(__name__)

CHANNELS = 8
RESOLUTION_BITS = 12
MAX_VALUE = (1 << RESOLUTION_BITS) - 1

START_BIT = 1
SINGLE_ENDED = 0b1000
COMMAND_BITS = 4

# Minimum CLK high/low time (tHI/tLO) at VDD = 2.7V
CLOCK_HALF_PERIOD_NS = 500


class SpiPins(NamedTuple):
    """BCM GPIO numbers for the four SPI lines."""
    cs: int
    clk: int
    mosi: int
    miso: int


def check_channel(channel) -> None:
    """Raise InvalidChannel unless channel is an int in 0-7."""
    if isinstance(channel, bool) or not isinstance(channel, int):
        raise InvalidChannel(channel)
    if not 0 <= channel < CHANNELS:
        raise InvalidChannel(channel)


def command_for(channel: int) -> int:
    """The 4-bit command field for a single-ended read of channel."""
    check_channel(channel)
    return SINGLE_ENDED | channel


class MCP3208:
    """Bit-banged driver for one MCP3208 on four dedicated GPIO lines."""

    def __init__(self, pins: SpiPins,
                 controller: Optional[GpioController] = None,
                 half_period_ns: int = CLOCK_HALF_PERIOD_NS):
        if len(set(pins)) != len(pins):
            raise ValueError(f"SPI pins must be distinct: {pins}")

        self.pins = pins
        self._half_period_ns = half_period_ns
        self._controller = controller or GpioController.get_instance()

        # CS starts HIGH: LOW would tell the converter to start listening
        ctl = self._controller
        try:
            self._cs = ctl.acquire_output(pins.cs, initial=True, owner=self)
            self._clk = ctl.acquire_output(pins.clk, owner=self)
            self._mosi = ctl.acquire_output(pins.mosi, owner=self)
            self._miso = ctl.acquire_input(pins.miso, owner=self)
        except PinAcquisitionFailure:
            ctl.release_owned(self)
            raise
        self._closed = False

        logger.info(
            "MCP3208: ready on GPIO cs=%d clk=%d mosi=%d miso=%d",
            pins.cs, pins.clk, pins.mosi, pins.miso,
        )

    def read_channel(self, channel: int) -> int:
        """Run one conversion and return the 12-bit result (0-4095).

        Raises:
            InvalidChannel before any line is touched if channel is not 0-7.
            LineReleased if the driver has been closed.
        """
        command = command_for(channel)

        self._cs.set_low()

        self._write_bit(START_BIT)
        for shift in range(COMMAND_BITS - 1, -1, -1):
            self._write_bit((command >> shift) & 1)

        # Null bit: the converter is sampling, MOSI is don't-care
        self._clock_pulse()

        result = 0
        for _ in range(RESOLUTION_BITS):
            self._clock_pulse()
            result = (result << 1) | (1 if self._miso.read() else 0)

        self._cs.set_high()
        # tCSH: CS stays HIGH at least one half period before the next read
        self._hold()
        return result

    def _write_bit(self, bit: int) -> None:
        if bit:
            self._mosi.set_high()
        else:
            self._mosi.set_low()
        self._clock_pulse()

    def _clock_pulse(self) -> None:
        self._hold()
        self._clk.set_high()
        self._hold()
        self._clk.set_low()

    def _hold(self) -> None:
        deadline = time.perf_counter_ns() + self._half_period_ns
        while time.perf_counter_ns() < deadline:
            pass

    def close(self) -> None:
        """Leave CS idle and give the lines back to the controller."""
        if self._closed:
            return
        self._closed = True
        self._cs.set_high()
        self._controller.release_owned(self)

    def __repr__(self) -> str:
        return f"<MCP3208 cs={self.pins.cs} clk={self.pins.clk}>"
