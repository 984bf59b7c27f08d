"""Exceptions raised by the ADC and GPIO layers."""


class AdcError(Exception):
    """Base class for converter and pin errors."""


class InvalidChannel(AdcError, ValueError):
    """Requested ADC channel is outside 0-7."""

    def __init__(self, channel):
        self.channel = channel
        super().__init__(f"ADC channel {channel!r} does not exist (valid: 0-7)")


class PinAcquisitionFailure(AdcError, RuntimeError):
    """A GPIO line could not be provisioned. Fatal at startup."""

    def __init__(self, pin, reason):
        self.pin = pin
        self.reason = reason
        super().__init__(f"GPIO {pin}: {reason}")


class LineReleased(AdcError, RuntimeError):
    """A GPIO line was used after it was released."""

    def __init__(self, pin):
        self.pin = pin
        super().__init__(f"GPIO {pin}: line used after release")
