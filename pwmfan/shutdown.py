# file: pwmfan/shutdown.py
"""
SIGTERM handling.

The handler only flips a boolean; the control loop polls it between
iterations. A pending shutdown can therefore take up to one poll interval to
be observed.
"""

import logging
import signal

shutdown_logger = logging.getLogger("pwmfan.shutdown")


class ShutdownFlag:
    """One-way flag: once requested, it stays set for the life of the process."""

    def __init__(self):
        self._requested = False

    def request(self):
        self._requested = True

    def is_set(self) -> bool:
        return self._requested

    def handle_signal(self, signum, frame):
        # Runs in signal context: no I/O, no locks, just the store.
        self._requested = True


def install_sigterm_handler(flag: ShutdownFlag):
    """Route SIGTERM to `flag`. Returns the previously installed handler."""
    previous = signal.signal(signal.SIGTERM, flag.handle_signal)
    shutdown_logger.debug("SIGTERM handler installed")
    return previous
