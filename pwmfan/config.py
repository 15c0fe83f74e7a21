# file: pwmfan/config.py
"""
Controller configuration.

Everything comes from the command line; there is no config file. Values are
validated up front so a bad range fails before any register is opened.
"""

import math
from dataclasses import dataclass

from pwmfan.channel import MAX_FAN_SPEED, MIN_FAN_SPEED
from pwmfan.errors import ConfigError

DEFAULT_INTERVAL = 10.0


def parse_float(value, name: str) -> float:
    """Parse a finite float, raising ConfigError naming the argument otherwise."""
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid {name}: {value!r} is not a number") from exc
    if not math.isfinite(result):
        raise ConfigError(f"invalid {name}: {value!r} is not finite")
    return result


@dataclass(frozen=True)
class ControllerConfig:
    """Thresholds of the linear ramp plus loop pacing."""

    min_temp: float
    max_temp: float
    min_fan_speed: float = 0.0
    interval: float = DEFAULT_INTERVAL


def validate_config(min_temp, max_temp, min_fan_speed=None, interval=DEFAULT_INTERVAL):
    """
    Build a ControllerConfig from raw values.

    Args:
        min_temp: Lower ramp threshold, in sensor units.
        max_temp: Upper ramp threshold; must be greater than `min_temp`.
        min_fan_speed (optional): Ramp floor in [0, 255]. Defaults to 0.
        interval (optional): Seconds between polls; must be positive.

    Returns:
        ControllerConfig: The validated configuration.

    Raises:
        ConfigError: On non-numeric, non-finite or inconsistent values.
    """
    min_temp = parse_float(min_temp, "min_temp")
    max_temp = parse_float(max_temp, "max_temp")
    if max_temp <= min_temp:
        raise ConfigError(
            f"max_temp ({max_temp:g}) must be greater than min_temp ({min_temp:g})"
        )

    floor = MIN_FAN_SPEED
    if min_fan_speed is not None:
        floor = parse_float(min_fan_speed, "min_fan_speed")
        if not MIN_FAN_SPEED <= floor <= MAX_FAN_SPEED:
            raise ConfigError(
                f"min_fan_speed ({floor:g}) must be within "
                f"[{MIN_FAN_SPEED:.0f}, {MAX_FAN_SPEED:.0f}]"
            )

    interval = parse_float(interval, "interval")
    if interval <= 0:
        raise ConfigError(f"interval ({interval:g}) must be positive")

    return ControllerConfig(min_temp, max_temp, floor, interval)
