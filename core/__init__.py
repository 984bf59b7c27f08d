"""Polling and wiring for Pulse Keys.

Architecture:
    PollLoop    -- polls touch keys round-robin, calls the press action
    instrument  -- builds the ADC and keys from config
"""

from core.poll_loop import PollLoop, run
from core.instrument import build_adc, build_channels

__all__ = [
    "PollLoop",
    "run",
    "build_adc",
    "build_channels",
]
