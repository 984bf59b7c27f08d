"""Pulse Keys - Configuration

Pin numbers use BCM (Broadcom) numbering scheme.
Physical pin numbers noted in comments for cross-reference.

BCM-to-Physical pin mapping for pins we use:
  BCM 5  = Physical Pin 29  (MCP3208 CS/SHDN)
  BCM 6  = Physical Pin 31  (MCP3208 CLK)
  BCM 13 = Physical Pin 33  (MCP3208 DIN  <- Pi MOSI)
  BCM 19 = Physical Pin 35  (MCP3208 DOUT -> Pi MISO)

The hardware SPI pins (BCM 7-11) are left free; the converter is driven
by bit-banging ordinary GPIOs.

Everything here can be overridden from instrument.yaml (see load_config).
"""

import copy
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ADC wiring
# ---------------------------------------------------------------------------
ADC = {
    "chip": None,           # None = auto-detect /dev/gpiochip0 or 4
    "pins": {
        "cs": 5,            # BCM 5  = Physical Pin 29
        "clk": 6,           # BCM 6  = Physical Pin 31
        "mosi": 13,         # BCM 13 = Physical Pin 33
        "miso": 19,         # BCM 19 = Physical Pin 35
    },
    "half_period_ns": 500,  # MCP3208 tHI/tLO minimum at 2.7V
}

# ---------------------------------------------------------------------------
# Touch thresholds (raw 12-bit counts)
# ---------------------------------------------------------------------------
THRESHOLDS = {
    "press": 900,           # below this = finger on the pad
    "release_low": 1900,    # resting band the signal must return to
    "release_high": 2100,   # before the key can fire again
}

# ---------------------------------------------------------------------------
# Keys: ADC channel -> pitch, polled in this order
# ---------------------------------------------------------------------------
# C major scale, C4 to C5
CHANNELS = [
    {"channel": 0, "pitch": "C4"},
    {"channel": 1, "pitch": "D4"},
    {"channel": 2, "pitch": "E4"},
    {"channel": 3, "pitch": "F4"},
    {"channel": 4, "pitch": "G4"},
    {"channel": 5, "pitch": "A4"},
    {"channel": 6, "pitch": "B4"},
    {"channel": 7, "pitch": "C5"},
]


def defaults() -> Dict[str, Any]:
    """Return a fresh copy of the built-in configuration."""
    return {
        "adc": copy.deepcopy(ADC),
        "thresholds": dict(THRESHOLDS),
        "channels": copy.deepcopy(CHANNELS),
    }


def _merge(base: Dict, override: Dict) -> Dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: str) -> Dict[str, Any]:
    """Load instrument config from a YAML file, layered over the defaults.

    Mappings merge key by key; anything else (including the channel list)
    replaces the default outright. A missing file is not an error.
    """
    import yaml

    cfg = defaults()
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file not found: %s (using built-in config)", path)
        return cfg

    if data is None:
        return cfg
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return _merge(cfg, data)
