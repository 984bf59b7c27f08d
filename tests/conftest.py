"""Shared fakes: GPIO lines that model an MCP3208 on the other end."""

import time
from types import SimpleNamespace

import pytest

from sensors import gpio_utils
from sensors.errors import LineReleased, PinAcquisitionFailure
from sensors.gpio_utils import GpioController, GpioLine


class FakeBus:
    """Records what the driver does to the four SPI lines.

    MISO plays back the bits of `sample`, MSB first, one per read().
    """

    def __init__(self):
        self.cs = True
        self.mosi = False
        self.clk = False
        self.sample = 0
        self.sent = []          # MOSI level at each rising CLK edge
        self.clk_edges = []     # (perf_counter_ns, level)
        self.cs_edges = []      # (perf_counter_ns, level)
        self.miso_reads = 0
        self.io = 0

    @property
    def pulses(self):
        return len(self.sent)

    def _next_bit(self):
        bit = (self.sample >> (11 - self.miso_reads % 12)) & 1
        self.miso_reads += 1
        return bool(bit)


class FakeLine:
    def __init__(self, bus, name, output, pin):
        self.bus = bus
        self.name = name
        self.bus_pin = pin
        self.output = output
        self.released = False

    def _set(self, level):
        if self.released:
            raise LineReleased(self.bus_pin)
        bus = self.bus
        bus.io += 1
        if self.name == "clk":
            if level and not bus.clk:
                bus.sent.append(int(bus.mosi))
            bus.clk_edges.append((time.perf_counter_ns(), level))
        elif self.name == "cs":
            bus.cs_edges.append((time.perf_counter_ns(), level))
        setattr(bus, self.name, level)

    def set_high(self):
        self._set(True)

    def set_low(self):
        self._set(False)

    def read(self):
        if self.released:
            raise LineReleased(self.bus_pin)
        self.bus.io += 1
        return self.bus._next_bit()

    def release(self):
        self.released = True


class FakeController:
    """Hands out FakeLines by pin, in the order cs, clk, mosi, miso."""

    NAMES = {5: "cs", 6: "clk", 13: "mosi", 19: "miso"}

    def __init__(self, bus):
        self.bus = bus
        self.lines = {}
        self.owners = {}
        self.released = []

    def _claim(self, pin, owner):
        if owner is not None and self.owners.get(pin, owner) is not owner:
            raise PinAcquisitionFailure(pin, "held by another driver")
        if owner is not None:
            self.owners[pin] = owner

    def acquire_output(self, pin, initial=False, owner=None):
        self._claim(pin, owner)
        line = FakeLine(self.bus, self.NAMES[pin], True, pin)
        setattr(self.bus, line.name, initial)
        self.lines[pin] = line
        return line

    def acquire_input(self, pin, pull_down=True, owner=None):
        self._claim(pin, owner)
        line = FakeLine(self.bus, self.NAMES[pin], False, pin)
        self.lines[pin] = line
        return line

    def release(self, pin):
        self.owners.pop(pin, None)
        self.released.append(pin)
        self.lines[pin].release()

    def release_owned(self, owner):
        for pin in [p for p, o in self.owners.items() if o is owner]:
            self.release(pin)


class FakeRequest:
    """Stands in for a gpiod LineRequest; remembers the last value per pin."""

    def __init__(self):
        self.values = {}
        self.released = False

    def set_value(self, pin, value):
        self.values[pin] = value

    def get_value(self, pin):
        return self.values.get(pin, gpio_utils.Value.INACTIVE)

    def release(self):
        self.released = True


class KernelFreeController(GpioController):
    """Real caching and ownership, with FakeRequests instead of the kernel."""

    def __init__(self, fail_on=()):
        super().__init__(chip_path="/dev/null")
        self.fail_on = set(fail_on)
        self.made = []

    def _provision(self, pin, output, initial, pull_down):
        if pin in self.fail_on:
            raise PinAcquisitionFailure(pin, "request failed - busy")
        line = GpioLine(FakeRequest(), pin, output)
        self.made.append(line)
        return line


class ScriptedAdc:
    """ADC that returns a fixed list of samples, then repeats the last one."""

    def __init__(self, samples):
        self.samples = list(samples)
        self.reads = []

    def read_channel(self, channel):
        self.reads.append(channel)
        if len(self.samples) > 1:
            return self.samples.pop(0)
        return self.samples[0]


@pytest.fixture
def bus():
    return FakeBus()


@pytest.fixture
def controller(bus):
    return FakeController(bus)


@pytest.fixture
def pins():
    from sensors.mcp3208 import SpiPins
    return SpiPins(cs=5, clk=6, mosi=13, miso=19)


@pytest.fixture
def gpio_values(monkeypatch):
    """gpiod's Value enum, or a stand-in when gpiod is not installed."""
    if not gpio_utils._gpiod_available:
        monkeypatch.setattr(
            gpio_utils, "Value",
            SimpleNamespace(ACTIVE="active", INACTIVE="inactive"),
            raising=False,
        )
    return gpio_utils.Value


@pytest.fixture
def kernel_free(gpio_values):
    return KernelFreeController
