# file: pwmfan/policy.py
"""
Temperature to duty-cycle mapping.

A linear ramp between two temperature thresholds, with an optional floor:

    temp <= min_temp   -> min_fan_speed
    temp >= max_temp   -> 255
    otherwise          -> linear between the two
"""

from pwmfan.channel import MAX_FAN_SPEED

# Smallest duty-cycle change worth writing to the PWM register.
HYSTERESIS = 1.0


def speed(temp, min_temp, max_temp, min_fan_speed=0.0):
    """
    Compute the target fan speed for a temperature reading.

    Args:
        temp (float): Current reading, in sensor units.
        min_temp (float): Reading at or below which the fan runs at the floor.
        max_temp (float): Reading at or above which the fan runs flat out.
            Must be greater than `min_temp`; ControllerConfig enforces this.
        min_fan_speed (float, optional): Floor of the ramp. Defaults to 0.

    Returns:
        float: Target duty cycle in [min_fan_speed, 255].
    """
    if temp <= min_temp:
        return min_fan_speed
    if temp >= max_temp:
        return MAX_FAN_SPEED
    span = MAX_FAN_SPEED - min_fan_speed
    return min_fan_speed + span * (temp - min_temp) / (max_temp - min_temp)


def needs_update(target, current, hysteresis=HYSTERESIS):
    """Return True when `target` differs from `current` by at least `hysteresis`."""
    return abs(target - current) >= hysteresis
