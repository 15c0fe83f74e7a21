# file: pwmfan/channel.py
"""
Value channels over hwmon register files.

A register is a tiny single-line decimal file. A channel opens it once and
keeps it open for the life of the controller, re-reading from offset zero on
every poll. The PWM register is written with a fixed 5-byte record: the
integer duty cycle, a newline, and NUL padding (e.g. b"128\\n\\x00"), which is
what the pwm-fan driver accepts.
"""

import logging
import math

from pwmfan.errors import ChannelIOError, ParseError

MIN_FAN_SPEED = 0.0
MAX_FAN_SPEED = 255.0
RECORD_SIZE = 5
READ_SIZE = 128

channel_logger = logging.getLogger("pwmfan.channel")


def clamp_fan_speed(value: float) -> float:
    """
    Clamp a duty cycle into [0, 255], warning when it had to be adjusted.

    NaN has no place on the ramp and is forced to full speed.
    """
    if math.isnan(value):
        channel_logger.warning("can't set fan speed to NaN, setting %.0f", MAX_FAN_SPEED)
        return MAX_FAN_SPEED
    if value < MIN_FAN_SPEED:
        channel_logger.warning(
            "can't set fan speed lower than %.0f, setting %.0f", MIN_FAN_SPEED, MIN_FAN_SPEED
        )
        return MIN_FAN_SPEED
    if value > MAX_FAN_SPEED:
        channel_logger.warning(
            "can't set fan speed higher than %.0f, setting %.0f", MAX_FAN_SPEED, MAX_FAN_SPEED
        )
        return MAX_FAN_SPEED
    return value


def format_fan_speed(value: float) -> bytes:
    """
    Encode a duty cycle as the fixed-width PWM record.

    The value must already be clamped; 0-255 plus the newline never exceeds
    four bytes, the fifth is always padding.
    """
    text = ("%.0f\n" % value).encode("ascii")[: RECORD_SIZE - 1]
    return text.ljust(RECORD_SIZE, b"\x00")


def parse_value(raw: bytes, path=None) -> float:
    """Parse register content (decimal text, optional newline/NUL padding)."""
    text = raw.decode("ascii", errors="replace").strip().strip("\x00").strip()
    try:
        value = float(text)
    except ValueError as exc:
        raise ParseError(f"non-numeric content in {path}: {text!r}", text=text) from exc
    if not math.isfinite(value):
        raise ParseError(f"non-finite content in {path}: {text!r}", text=text)
    return value


class ValueChannel:
    """
    A register file held open for repeated reads and (optionally) writes.

    Use as a context manager so the descriptor is released on every exit path:

        with ValueChannel(temp_path) as sensor, ValueChannel(pwm_path, writable=True) as fan:
            ...
    """

    def __init__(self, path: str, writable: bool = False):
        self.path = path
        self.writable = writable
        self._file = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
            return False
        try:
            self.close()
        except ChannelIOError as close_exc:
            channel_logger.warning("%s", close_exc)
        return False

    @property
    def closed(self) -> bool:
        return self._file is None

    def open(self):
        """Open the register unbuffered, read-only or read-write."""
        if self._file is not None:
            return
        mode = "r+b" if self.writable else "rb"
        try:
            self._file = open(self.path, mode, buffering=0)
        except OSError as exc:
            raise ChannelIOError(f"failed to open {self.path}: {exc}", path=self.path) from exc

    def close(self):
        """
        Close the register. Safe to call more than once.

        Raises:
            ChannelIOError: If the close itself fails; the channel is
                considered closed either way.
        """
        if self._file is None:
            return
        handle, self._file = self._file, None
        try:
            handle.close()
        except OSError as exc:
            raise ChannelIOError(f"failed to close {self.path}: {exc}", path=self.path) from exc

    def _require_open(self):
        if self._file is None:
            raise ChannelIOError(f"channel {self.path} is not open", path=self.path)
        return self._file

    def read_value(self) -> float:
        """Read the register from offset zero and parse it as a float."""
        handle = self._require_open()
        try:
            handle.seek(0)
            raw = handle.read(READ_SIZE)
        except OSError as exc:
            raise ChannelIOError(f"failed to read {self.path}: {exc}", path=self.path) from exc
        if not raw:
            raise ParseError(f"empty read from {self.path}", text="")
        return parse_value(raw, self.path)

    def write_value(self, value: float) -> float:
        """
        Clamp `value`, write it as a full PWM record and return the clamped value.

        Raises:
            ChannelIOError: If the channel is read-only, or the write fails or
                is short.
        """
        handle = self._require_open()
        if not self.writable:
            raise ChannelIOError(f"channel {self.path} is read-only", path=self.path)

        value = clamp_fan_speed(float(value))
        record = format_fan_speed(value)
        try:
            handle.seek(0)
            written = handle.write(record)
            if written is None or written < len(record):
                raise ChannelIOError(
                    f"short write to {self.path}: {written or 0} of {len(record)} bytes",
                    path=self.path,
                )
        except OSError as exc:
            raise ChannelIOError(f"failed to write {self.path}: {exc}", path=self.path) from exc
        return value
