"""Simulated MCP3208 for demo mode.

Produces what a pulse sensor at rest looks like through the converter: a
baseline around mid-scale with a little noise. Every so often a channel
gets "touched" and the reading drops well below the press threshold for a
few dozen samples before recovering.
"""

import random

from sensors.mcp3208 import MAX_VALUE, check_channel

BASELINE = 2000
NOISE = 25
TOUCH_LEVEL = 600
TOUCH_PROB = 0.0005      # chance per read that an idle channel is touched
TOUCH_SAMPLES = (40, 120)


class SimulatedMCP3208:
    """Stand-in ADC with the same read_channel() contract as MCP3208."""

    def __init__(self, seed=None):
        self._rng = random.Random(seed)
        self._touch_left = {}

    def read_channel(self, channel: int) -> int:
        check_channel(channel)

        left = self._touch_left.get(channel, 0)
        if left == 0 and self._rng.random() < TOUCH_PROB:
            left = self._rng.randint(*TOUCH_SAMPLES)

        if left > 0:
            self._touch_left[channel] = left - 1
            level = TOUCH_LEVEL
        else:
            level = BASELINE

        value = int(round(level + self._rng.gauss(0, NOISE)))
        return max(0, min(MAX_VALUE, value))

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return "<SimulatedMCP3208>"
