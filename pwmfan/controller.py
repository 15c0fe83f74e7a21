# file: pwmfan/controller.py
"""
The fan control loop.

    STARTING  open the sensor and PWM channels, read the current PWM value
    RUNNING   read temperature, check it, map it to a duty cycle, write it if
              it moved by at least one unit, sleep, repeat until SIGTERM
    DRAINING  write 255 unconditionally, even after an error
    STOPPED   channels closed; the first error (if any) is re-raised

The fan is never left at a low speed once the controller is no longer
running to raise it again.
"""

import logging
import time

from pwmfan.channel import MAX_FAN_SPEED, ValueChannel
from pwmfan.errors import FanControlError
from pwmfan.hwmon import PWM_REGISTER, TEMP_REGISTER
from pwmfan.metrics import (
    CONTROLLER_STATE,
    ERRORS_TOTAL,
    FAN_SPEED,
    FAN_WRITES_TOTAL,
    TEMPERATURE_RAW,
)
from pwmfan.policy import needs_update, speed
from pwmfan.safety import SensorGuard
from pwmfan.shutdown import ShutdownFlag

STARTING = "STARTING"
RUNNING = "RUNNING"
DRAINING = "DRAINING"
STOPPED = "STOPPED"

controller_logger = logging.getLogger("pwmfan.controller")


def _count_error(exc):
    try:
        ERRORS_TOTAL.labels(kind=getattr(exc, "kind", "io")).inc()
    except Exception:
        pass


class FanController:
    """
    Drives one PWM fan from one temperature sensor.

    The controller owns both channels for its whole run: it opens them on
    entry to STARTING and closes them before reaching STOPPED, on every path.
    """

    def __init__(self, config, sensor, fan, shutdown=None, guard=None, sleep=time.sleep):
        """
        Initialize the controller.

        Args:
            config (ControllerConfig): Ramp thresholds and poll interval.
            sensor (ValueChannel): Read-only temperature register.
            fan (ValueChannel): Read-write PWM register.
            shutdown (ShutdownFlag, optional): Polled once per iteration.
            guard (SensorGuard, optional): Plausibility check for readings.
            sleep (callable, optional): Pacing primitive. Defaults to time.sleep.
        """
        self.config = config
        self.sensor = sensor
        self.fan = fan
        self.shutdown = shutdown if shutdown is not None else ShutdownFlag()
        self.guard = guard if guard is not None else SensorGuard()
        self.sleep = sleep

        self.state = None
        self.speed_old = None
        self.iterations = 0
        self.writes = 0
        self._set_state(STARTING)

    @classmethod
    def from_devices(cls, config, sensor_device, fan_device, **kwargs):
        """Build a controller from discovered hwmon devices."""
        sensor = ValueChannel(sensor_device.register(TEMP_REGISTER))
        fan = ValueChannel(fan_device.register(PWM_REGISTER), writable=True)
        return cls(config, sensor, fan, **kwargs)

    def _set_state(self, new_state):
        if self.state != new_state:
            controller_logger.info(f"state_transition: {self.state} -> {new_state}")
        self.state = new_state
        try:
            CONTROLLER_STATE.state(new_state)
        except Exception:
            pass

    def _write(self, value):
        written = self.fan.write_value(value)
        self.writes += 1
        FAN_WRITES_TOTAL.inc()
        FAN_SPEED.set(written)
        return written

    def step(self):
        """
        Run one poll: read, check, map, and write if the target moved.

        Returns:
            float: The target speed computed for this reading.
        """
        temp = self.guard.check(self.sensor.read_value())
        TEMPERATURE_RAW.set(temp)

        cfg = self.config
        target = speed(temp, cfg.min_temp, cfg.max_temp, cfg.min_fan_speed)
        if needs_update(target, self.speed_old):
            self.speed_old = self._write(target)
            controller_logger.debug("temp %.0f -> fan speed %.1f", temp, target)
        self.iterations += 1
        return target

    def fail_safe(self):
        """
        Force the fan to full speed.

        Returns:
            Exception or None: The failure, if the write did not go through.
        """
        try:
            self._write(MAX_FAN_SPEED)
        except (FanControlError, OSError) as exc:
            controller_logger.error("fail-safe write of %.0f failed: %s", MAX_FAN_SPEED, exc)
            _count_error(exc)
            return exc
        controller_logger.info("fan set to %.0f", MAX_FAN_SPEED)
        return None

    def run(self):
        """
        Run until shutdown is requested or an error occurs.

        Raises:
            FanControlError or OSError: The first error hit, after the
                fail-safe write has been attempted and channels closed.
        """
        self._set_state(STARTING)
        error = None
        try:
            with self.sensor, self.fan:
                try:
                    self.speed_old = self.fan.read_value()
                    self._set_state(RUNNING)
                    while not self.shutdown.is_set():
                        self.step()
                        self.sleep(self.config.interval)
                except (FanControlError, OSError) as exc:
                    controller_logger.error("control loop failed: %s", exc)
                    _count_error(exc)
                    error = exc
                finally:
                    self._set_state(DRAINING)
                    drain_error = self.fail_safe()
                    if error is None:
                        error = drain_error
        except (FanControlError, OSError) as exc:
            # Open failures, or a channel that failed to close.
            _count_error(exc)
            if error is None:
                error = exc
            else:
                controller_logger.error("%s", exc)
        finally:
            self._set_state(STOPPED)

        if error is not None:
            raise error
