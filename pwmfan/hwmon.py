# file: pwmfan/hwmon.py
"""
Hardware-monitor registry lookup.

The kernel exposes one directory per hwmon device under /sys/class/hwmon,
each holding a `name` attribute and the device's register files:

    /sys/class/hwmon/hwmon0/name         -> "cpu\n"
    /sys/class/hwmon/hwmon0/temp1_input  -> "48250\n"
    /sys/class/hwmon/hwmon3/name         -> "pwmfan\n"
    /sys/class/hwmon/hwmon3/pwm1         -> "128\n"

The numbering is not stable across boots, so devices are located by name.
"""

import logging
import os
from dataclasses import dataclass

from pwmfan.errors import DiscoveryError

HWMON_ROOT = "/sys/class/hwmon"
HWMON_NAME_CPU = "cpu"
HWMON_NAME_FAN = "pwmfan"
TEMP_REGISTER = "temp1_input"
PWM_REGISTER = "pwm1"

hwmon_logger = logging.getLogger("pwmfan.hwmon")


@dataclass(frozen=True)
class HwmonDevice:
    """A discovered hwmon entry: its `name` attribute and its directory."""

    name: str
    path: str

    def register(self, register_name: str) -> str:
        """Return the path of one of the device's register files."""
        return os.path.join(self.path, register_name)


def _read_name(name_path: str) -> str:
    """Read the first line of a `name` attribute file, minus the newline."""
    try:
        with open(name_path, "r", encoding="utf-8") as f:
            return f.readline().rstrip("\n")
    except (OSError, UnicodeDecodeError) as exc:
        raise DiscoveryError(f"failed to read {name_path}: {exc}") from exc


def find_hwmon_path(name: str, root: str = HWMON_ROOT) -> str:
    """
    Scan the hwmon registry for the device whose `name` attribute equals `name`.

    Every call performs a fresh directory scan. Hidden entries are skipped and
    the remaining entries are visited in sorted order, so the first match is
    deterministic when several devices share a name.

    Args:
        name (str): Device label to look for, e.g. "cpu" or "pwmfan".
        root (str, optional): Registry directory. Defaults to /sys/class/hwmon.

    Returns:
        str: Path of the matching device directory.

    Raises:
        DiscoveryError: If the registry cannot be listed, a `name` attribute
            cannot be read, or no entry matches.
    """
    try:
        entries = sorted(os.listdir(root))
    except OSError as exc:
        raise DiscoveryError(f"failed to list hwmon registry {root}: {exc}") from exc

    for entry in entries:
        if entry.startswith("."):
            continue
        device_path = os.path.join(root, entry)
        if _read_name(os.path.join(device_path, "name")) == name:
            hwmon_logger.debug("hwmon device %r resolved to %s", name, device_path)
            return device_path

    raise DiscoveryError(f"no hwmon device named {name!r} under {root}")


def find_device(name: str, root: str = HWMON_ROOT) -> HwmonDevice:
    """Locate a device by name and wrap the result as an HwmonDevice."""
    return HwmonDevice(name=name, path=find_hwmon_path(name, root))


def list_devices(root: str = HWMON_ROOT):
    """
    Return every readable device in the registry, in scan order.

    Entries whose `name` attribute is missing are skipped with a debug log;
    this is diagnostic output only and is never used to pick a device.
    """
    devices = []
    try:
        entries = sorted(os.listdir(root))
    except OSError as exc:
        raise DiscoveryError(f"failed to list hwmon registry {root}: {exc}") from exc
    for entry in entries:
        if entry.startswith("."):
            continue
        device_path = os.path.join(root, entry)
        try:
            devices.append(HwmonDevice(_read_name(os.path.join(device_path, "name")), device_path))
        except DiscoveryError as exc:
            hwmon_logger.debug("skipping %s: %s", device_path, exc)
    return devices
