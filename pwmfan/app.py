# file: pwmfan/app.py
"""
Command-line entry point for the fan controller.

    pwmfan MIN_TEMP MAX_TEMP [MIN_FAN_SPEED]

Temperatures are in sensor units (millidegrees Celsius for temp1_input).
The process runs until SIGTERM, then leaves the fan at full speed.
"""

import argparse
import logging
import sys

from prometheus_client import start_http_server

from pwmfan.config import DEFAULT_INTERVAL, validate_config
from pwmfan.controller import FanController
from pwmfan.errors import DiscoveryError, FanControlError
from pwmfan.hwmon import HWMON_NAME_CPU, HWMON_NAME_FAN, HWMON_ROOT, find_device, list_devices
from pwmfan.shutdown import ShutdownFlag, install_sigterm_handler

app_logger = logging.getLogger("pwmfan.app")

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pwmfan",
        description="Drive a hwmon PWM fan from a hwmon temperature sensor.",
    )
    parser.add_argument("min_temp", help="temperature at or below which the fan runs at its floor")
    parser.add_argument("max_temp", help="temperature at or above which the fan runs at 255")
    parser.add_argument("min_fan_speed", nargs="?", default=None,
                        help="lowest duty cycle while running (0-255, default 0)")
    parser.add_argument("--hwmon-root", default=HWMON_ROOT,
                        help=f"hwmon registry directory (default {HWMON_ROOT})")
    parser.add_argument("--sensor-name", default=HWMON_NAME_CPU,
                        help=f"name of the temperature device (default {HWMON_NAME_CPU})")
    parser.add_argument("--fan-name", default=HWMON_NAME_FAN,
                        help=f"name of the PWM fan device (default {HWMON_NAME_FAN})")
    parser.add_argument("--interval", default=DEFAULT_INTERVAL,
                        help=f"seconds between polls (default {DEFAULT_INTERVAL:g})")
    parser.add_argument("--metrics-port", type=int, default=None,
                        help="serve prometheus metrics on this port")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def _log_available_devices(root):
    try:
        names = [device.name for device in list_devices(root)]
    except DiscoveryError:
        return
    app_logger.error("hwmon devices under %s: %s", root, ", ".join(names) or "none")


def main(argv=None):
    """
    Parse arguments, locate the devices and run the controller.

    Returns:
        int: Process exit status. Argument count errors exit via argparse.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    shutdown = ShutdownFlag()
    install_sigterm_handler(shutdown)

    try:
        config = validate_config(args.min_temp, args.max_temp, args.min_fan_speed, args.interval)
    except FanControlError as exc:
        app_logger.error("configuration failed: %s", exc)
        return EXIT_FAILURE

    try:
        sensor_device = find_device(args.sensor_name, args.hwmon_root)
        fan_device = find_device(args.fan_name, args.hwmon_root)
    except DiscoveryError as exc:
        app_logger.error("device discovery failed: %s", exc)
        _log_available_devices(args.hwmon_root)
        return EXIT_FAILURE

    app_logger.info(
        "sensor %s at %s, fan %s at %s",
        sensor_device.name, sensor_device.path, fan_device.name, fan_device.path,
    )

    if args.metrics_port is not None:
        try:
            start_http_server(args.metrics_port)
        except OSError as exc:
            app_logger.error("failed to start metrics server on port %d: %s", args.metrics_port, exc)
            return EXIT_FAILURE

    controller = FanController.from_devices(config, sensor_device, fan_device, shutdown=shutdown)
    try:
        controller.run()
    except (FanControlError, OSError) as exc:
        app_logger.error("fan control failed: %s", exc)
        return EXIT_FAILURE

    app_logger.info("shut down cleanly")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
