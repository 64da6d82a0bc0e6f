"""Infrared transmitter backed by a LIRC character device."""

from __future__ import annotations

import fcntl
import logging
import os
import struct
import threading
from array import array
from pathlib import Path
from typing import Optional

from ..core.models import PulseSequence

LOGGER = logging.getLogger(__name__)

# _IOW('i', 0x13, __u32) from <linux/lirc.h>
LIRC_SET_SEND_CARRIER = 0x40046913


class TransmitterError(RuntimeError):
    """Raised when the infrared device cannot be opened or written."""


class LircTransmitter:
    """Writes pulse trains to ``/dev/lirc*`` in LIRC pulse mode.

    The kernel expects an odd number of native unsigned 32-bit durations in
    microseconds, starting and ending with a pulse.
    """

    def __init__(self, device: Path, *, carrier_hz: Optional[int] = None) -> None:
        self.device = Path(device)
        self.carrier_hz = carrier_hz
        self._fd: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    def open(self) -> None:
        if self._fd is not None:
            return

        try:
            fd = os.open(self.device, os.O_WRONLY)
        except OSError as exc:
            raise TransmitterError(
                f"Unable to open infrared device {self.device}: {exc}"
            ) from exc

        if self.carrier_hz:
            try:
                fcntl.ioctl(fd, LIRC_SET_SEND_CARRIER, struct.pack("I", self.carrier_hz))
            except OSError as exc:
                os.close(fd)
                raise TransmitterError(
                    f"Unable to set carrier {self.carrier_hz}Hz on {self.device}: {exc}"
                ) from exc

        self._fd = fd
        LOGGER.info("Opened infrared device %s", self.device)

    def close(self) -> None:
        fd, self._fd = self._fd, None
        if fd is None:
            return
        try:
            os.close(fd)
        except OSError:
            LOGGER.debug("Error closing infrared device %s", self.device, exc_info=True)

    def transmit(self, pulses: PulseSequence) -> None:
        data = _pack_pulses(pulses)
        with self._lock:
            if self._fd is None:
                raise TransmitterError(f"Infrared device {self.device} is not open")
            try:
                written = os.write(self._fd, data)
            except OSError as exc:
                raise TransmitterError(
                    f"Failed to write pulses to {self.device}: {exc}"
                ) from exc

        if written != len(data):
            raise TransmitterError(
                f"Short write to {self.device}: {written} of {len(data)} bytes"
            )
        LOGGER.debug("Transmitted %d durations via %s", len(data) // 4, self.device)


def _pack_pulses(pulses: PulseSequence) -> bytes:
    values = [int(value) for value in pulses]
    if len(values) % 2 == 0:
        # trailing space carries no signal
        values = values[:-1]
    if not values:
        raise TransmitterError("Pulse sequence is empty")
    if any(value <= 0 for value in values):
        raise TransmitterError("Pulse durations must be positive")
    return array("I", values).tobytes()
