# file: pwmfan/errors.py
"""
Exception hierarchy for the fan controller.

Every failure the controller can hit is fatal to the process; these classes
only exist so the entry point can name the failing operation and so the
metrics layer can count errors by kind.
"""


class FanControlError(Exception):
    """Base class for all controller failures."""

    kind = "error"


class DiscoveryError(FanControlError):
    """A named hwmon device was not found, or the registry could not be read."""

    kind = "discovery"


class ConfigError(FanControlError):
    """Invalid or missing numeric configuration."""

    kind = "config"


class ChannelIOError(FanControlError):
    """Open, read or write failure on a register file."""

    kind = "io"

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class ParseError(FanControlError):
    """Register content that is not a number."""

    kind = "parse"

    def __init__(self, message, text=None):
        super().__init__(message)
        self.text = text


class SensorRangeError(FanControlError):
    """Temperature reading outside the sensor's plausible physical bounds."""

    kind = "range"
