"""Round-robin polling of touch keys.

The loop walks the keys in the order it was given, over and over, and
calls the press action synchronously for every key that reports a new
press. Nothing is queued: if the action blocks, the keys after it in that
pass wait. Touches are far slower than one pass, so that is fine.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence

from sensors.touch import TouchChannel

logger = logging.getLogger(__name__)

PressAction = Callable[[int, str], None]


class PollLoop:
    """Polls TouchChannels in a fixed order and dispatches presses."""

    def __init__(self, channels: Sequence[TouchChannel], on_press: PressAction):
        self._channels = tuple(channels)
        self._on_press = on_press
        self._stop = threading.Event()
        self.passes = 0

    @property
    def channels(self):
        return self._channels

    def poll_once(self) -> List[int]:
        """Poll every channel once. Returns the channel numbers that fired."""
        fired = []
        for ch in self._channels:
            if ch.poll():
                fired.append(ch.channel)
                self._dispatch(ch)
        self.passes += 1
        return fired

    def _dispatch(self, ch: TouchChannel) -> None:
        try:
            self._on_press(ch.channel, ch.label)
        except Exception:
            logger.exception("Press action failed for ch%d (%s)", ch.channel, ch.label)

    def run(self, max_passes: Optional[int] = None) -> None:
        """Poll until stop() is called (or max_passes passes have run)."""
        logger.info("Polling %d channel(s)", len(self._channels))
        done = 0
        while not self._stop.is_set():
            if max_passes is not None and done >= max_passes:
                break
            self.poll_once()
            done += 1
        logger.info("Polling stopped after %d pass(es)", self.passes)

    def stop(self) -> None:
        """Ask run() to return after the current pass. Thread-safe.

        The flag stays set, so a later run() returns immediately.
        """
        self._stop.set()


def run(channels: Sequence[TouchChannel], on_press: PressAction) -> None:
    """Poll channels forever, calling on_press(channel, label) per press."""
    PollLoop(channels, on_press).run()
