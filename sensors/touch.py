"""Pulse sensor used as a touch key (via MCP3208 ADC).

How it works:
  A pulse sensor sits around mid-scale when nothing is on it. Pressing a
  finger onto the pad pulls the reading down hard. We call that a press
  when the sample drops below PRESS_THRESHOLD.

  The raw signal is noisy, so a single threshold would fire over and over
  while the finger settles. Instead the key latches PRESSED and ignores
  every sample until the reading comes back into the resting band
  (RELEASE_LOW, RELEASE_HIGH). Only then can the next press fire.

        4095 ─┐
              │  (no re-arm above the band)
        2100 ─┤  RELEASE_HIGH  ┐
              │                ├─ resting band: PRESSED -> RELEASED
        1900 ─┤  RELEASE_LOW   ┘
              │  dead zone
         900 ─┤  PRESS_THRESHOLD  (below: RELEASED -> PRESSED, fires)
           0 ─┘

Hardware: sensor signal on one MCP3208 channel (0-7).
"""

import enum
import logging

logger = logging.getLogger(__name__)

PRESS_THRESHOLD = 900
RELEASE_LOW = 1900
RELEASE_HIGH = 2100


class TouchState(enum.Enum):
    RELEASED = "released"
    PRESSED = "pressed"


class TouchChannel:
    """One touch key on one ADC channel, debounced with hysteresis."""

    def __init__(self, adc, channel: int, label: str = "",
                 press_threshold: int = PRESS_THRESHOLD,
                 release_low: int = RELEASE_LOW,
                 release_high: int = RELEASE_HIGH):
        if not press_threshold < release_low < release_high:
            raise ValueError(
                "thresholds must satisfy press < release_low < release_high, "
                f"got {press_threshold}, {release_low}, {release_high}"
            )
        self._adc = adc
        self.channel = channel
        self.label = label
        self.press_threshold = press_threshold
        self.release_low = release_low
        self.release_high = release_high
        self._state = TouchState.RELEASED
        self.press_count = 0

    @property
    def state(self) -> TouchState:
        return self._state

    @property
    def pressed(self) -> bool:
        return self._state is TouchState.PRESSED

    def poll(self) -> bool:
        """Take one sample and report whether it started a new press.

        Returns True only on the sample that moves the key from RELEASED
        to PRESSED. Returning to RELEASED is silent, and the sample that
        re-arms the key is not also checked for a press.
        """
        sample = self._adc.read_channel(self.channel)

        if self._state is TouchState.PRESSED:
            if self.release_low < sample < self.release_high:
                self._state = TouchState.RELEASED
                logger.debug("Ch%d %s: released (%d)", self.channel, self.label, sample)
            return False

        if sample < self.press_threshold:
            self._state = TouchState.PRESSED
            self.press_count += 1
            logger.debug("Ch%d %s: pressed (%d)", self.channel, self.label, sample)
            return True
        return False

    def __repr__(self) -> str:
        return f"<TouchChannel ch={self.channel} {self.label!r} {self._state.value}>"
