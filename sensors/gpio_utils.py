"""GPIO utilities for Pulse Keys.

Raspberry Pi GPIO pins are accessed through the gpiod library, which talks
to the kernel's GPIO character device (/dev/gpiochipN).

Each Pi model has one or more GPIO chips:
  Pi 3B/3B+/4  ->  /dev/gpiochip0  (BCM2835/BCM2711, 54 lines)
  Pi 5         ->  /dev/gpiochip4  (RP1, 54 lines)

We auto-detect the correct chip so the code works across Pi models.

Lines are handed out by a GpioController, which remembers every line it
has requested. Asking for the same pin twice returns the line that is
already held instead of requesting it from the kernel again. A driver can
claim the lines it acquires; another owner asking for a claimed pin is
refused.
"""

import logging
from typing import Dict, Optional

from sensors.errors import LineReleased, PinAcquisitionFailure

logger = logging.getLogger(__name__)

_gpiod_available = False
try:
    import gpiod
    from gpiod.line import Direction, Bias, Value
    _gpiod_available = True
except ImportError:
    pass

CONSUMER = "pulse-keys"


def get_chip_path():
    """Find the main Broadcom GPIO chip (the one with 54 lines)."""
    # Try common paths; pick the first chip with >= 28 GPIO lines
    for path in ["/dev/gpiochip0", "/dev/gpiochip4"]:
        try:
            with gpiod.Chip(path) as chip:
                if chip.get_info().num_lines >= 28:
                    return path
        except (OSError, PermissionError):
            continue

    # Fallback
    return "/dev/gpiochip0"


class GpioLine:
    """One requested GPIO line, either an input or an output."""

    def __init__(self, request, pin: int, output: bool):
        self._request = request
        self.pin = pin
        self.output = output

    @property
    def released(self) -> bool:
        return self._request is None

    def _live_request(self):
        if self._request is None:
            raise LineReleased(self.pin)
        return self._request

    def set_high(self) -> None:
        self._live_request().set_value(self.pin, Value.ACTIVE)

    def set_low(self) -> None:
        self._live_request().set_value(self.pin, Value.INACTIVE)

    def read(self) -> bool:
        """Return True for HIGH / ACTIVE, False for LOW / INACTIVE."""
        return self._live_request().get_value(self.pin) == Value.ACTIVE

    def release(self) -> None:
        if self._request is not None:
            self._request.release()
            self._request = None

    def __repr__(self) -> str:
        kind = "out" if self.output else "in"
        return f"<GpioLine {self.pin} {kind}>"


class GpioController:
    """Provisions GPIO lines on one chip and caches them per pin."""

    _instance = None

    @classmethod
    def get_instance(cls):
        """Get or create the process-wide controller."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self, chip_path: Optional[str] = None):
        self._chip_path = chip_path
        self._lines: Dict[int, GpioLine] = {}
        self._owners: Dict[int, object] = {}

    @property
    def chip_path(self) -> str:
        if self._chip_path is None:
            self._chip_path = get_chip_path()
        return self._chip_path

    def acquire_output(self, pin: int, initial: bool = False,
                       owner=None) -> GpioLine:
        """Get an output line, requesting it only if not already held.

        Args:
            pin:     BCM GPIO number
            initial: level driven when the line is first requested
            owner:   claims the line for this object; None leaves it unclaimed

        Raises:
            PinAcquisitionFailure if the line cannot be requested, the pin
            is already held as an input, or another owner has claimed it.
        """
        return self._acquire(pin, True, owner, initial=initial)

    def acquire_input(self, pin: int, pull_down: bool = True,
                      owner=None) -> GpioLine:
        """Get an input line, requesting it only if not already held."""
        return self._acquire(pin, False, owner, pull_down=pull_down)

    def owner_of(self, pin: int):
        return self._owners.get(pin)

    def _acquire(self, pin, output, owner, initial=False, pull_down=True):
        held_by = self._owners.get(pin)
        if owner is not None and held_by is not None and held_by is not owner:
            raise PinAcquisitionFailure(pin, "held by another driver")

        line = self._lines.get(pin)
        if line is not None:
            if line.output != output:
                raise PinAcquisitionFailure(
                    pin, "already held with the opposite direction"
                )
            logger.debug("GPIO %d: reusing existing line", pin)
        else:
            line = self._provision(pin, output, initial, pull_down)
            self._lines[pin] = line
            logger.debug("GPIO %d: requested as %s", pin, "output" if output else "input")

        if owner is not None:
            self._owners[pin] = owner
        return line

    def _provision(self, pin, output, initial, pull_down) -> GpioLine:
        """Request a single line from the kernel."""
        if not _gpiod_available:
            raise PinAcquisitionFailure(pin, "gpiod not installed")

        if output:
            settings = gpiod.LineSettings(
                direction=Direction.OUTPUT,
                output_value=Value.ACTIVE if initial else Value.INACTIVE,
            )
        else:
            settings = gpiod.LineSettings(
                direction=Direction.INPUT,
                bias=Bias.PULL_DOWN if pull_down else Bias.DISABLED,
            )

        try:
            req = gpiod.request_lines(
                self.chip_path,
                consumer=CONSUMER,
                config={pin: settings},
            )
        except (OSError, ValueError) as exc:
            raise PinAcquisitionFailure(pin, f"request failed - {exc}") from exc
        return GpioLine(req, pin, output)

    def release(self, pin: int) -> None:
        """Release one line so it can be requested again."""
        self._owners.pop(pin, None)
        line = self._lines.pop(pin, None)
        if line is not None:
            line.release()

    def release_owned(self, owner) -> None:
        """Release every line claimed by owner."""
        for pin in [p for p, o in self._owners.items() if o is owner]:
            self.release(pin)

    def release_all(self) -> None:
        for pin in list(self._lines):
            self.release(pin)
