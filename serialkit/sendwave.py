"""Build the binary frames that the oscilloscope view decodes.

A point frame carries one sample for one channel. A sync frame gathers
samples for several channels that belong to the same instant. An info
frame carries a timestamp and the sample rate.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

CHANNEL_COUNT = 16
FRAME_MAX_BYTES = 80
FRAME_HEAD = 0xA3
POINT_MODE = 0xA8
SYNC_MODE = 0xA9
INFO_MODE = 0xAA
FORMAT_INT8 = 0x10
FORMAT_INT16 = 0x20
FORMAT_INT32 = 0x30
FORMAT_FLOAT = 0x00

_FORMATS = {
    "int8": (FORMAT_INT8, ">b"),
    "int16": (FORMAT_INT16, ">h"),
    "int32": (FORMAT_INT32, ">i"),
    "float": (FORMAT_FLOAT, ">f"),
}


class FrameFullError(ValueError):
    """Raised when a sync frame has no room left for another sample."""


def _sample(channel: int, kind: str, value: int | float) -> bytes:
    """Encode the channel/format byte followed by the big-endian value."""
    if not 0 <= channel < CHANNEL_COUNT:
        raise ValueError(f"channel must be in 0..{CHANNEL_COUNT - 1}, got {channel}")
    code, fmt = _FORMATS[kind]
    try:
        packed = struct.pack(fmt, value)
    except (struct.error, OverflowError) as exc:
        raise ValueError(f"value {value!r} does not fit {kind}") from exc
    return bytes([channel | code]) + packed


def _point(channel: int, kind: str, value: int | float) -> bytes:
    return bytes([FRAME_HEAD, POINT_MODE]) + _sample(channel, kind, value)


def point_int8(channel: int, value: int) -> bytes:
    """Point frame holding a signed 8-bit value (4 bytes)."""
    return _point(channel, "int8", value)


def point_int16(channel: int, value: int) -> bytes:
    """Point frame holding a signed 16-bit value (5 bytes)."""
    return _point(channel, "int16", value)


def point_int32(channel: int, value: int) -> bytes:
    """Point frame holding a signed 32-bit value (7 bytes)."""
    return _point(channel, "int32", value)


def point_float(channel: int, value: float) -> bytes:
    """Point frame holding a single precision float (7 bytes)."""
    return _point(channel, "float", value)


_TIMESTAMP_RANGES = {
    "year": (0, 99),
    "month": (1, 12),
    "day": (1, 31),
    "hour": (0, 23),
    "minute": (0, 59),
    "second": (0, 59),
    "msec": (0, 999),
    "sample_rate": (0, 2_000_000),
}


@dataclass(frozen=True)
class Timestamp:
    """Start time of a recording and its sample rate in Hz.

    ``year`` counts from 2000.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    msec: int
    sample_rate: int

    def __post_init__(self) -> None:
        for name, (low, high) in _TIMESTAMP_RANGES.items():
            value = getattr(self, name)
            if not low <= value <= high:
                raise ValueError(f"{name} must be in {low}..{high}, got {value}")

    def encode(self) -> bytes:
        """Return the 10-byte info frame for this timestamp."""
        fields = (
            (self.year << 1) | ((self.month >> 3) & 0x01),
            (self.month << 5) | (self.day & 0x1F),
            (self.hour << 3) | ((self.minute >> 3) & 0x07),
            (self.minute << 5) | ((self.second >> 1) & 0x1F),
            (self.second << 7) | ((self.msec >> 3) & 0x7F),
            (self.msec << 5) | ((self.sample_rate >> 16) & 0x1F),
            self.sample_rate >> 8,
            self.sample_rate,
        )
        return bytes([FRAME_HEAD, INFO_MODE, *(b & 0xFF for b in fields)])


class SyncFrame:
    """A frame of samples taken at the same instant on several channels."""

    def __init__(self) -> None:
        self._payload = bytearray()

    def _add(self, channel: int, kind: str, value: int | float) -> None:
        sample = _sample(channel, kind, value)
        if len(self._payload) + len(sample) > FRAME_MAX_BYTES:
            raise FrameFullError(
                f"sync frame payload limited to {FRAME_MAX_BYTES} bytes"
            )
        self._payload += sample

    def add_int8(self, channel: int, value: int) -> None:
        """Append a signed 8-bit sample."""
        self._add(channel, "int8", value)

    def add_int16(self, channel: int, value: int) -> None:
        """Append a signed 16-bit sample."""
        self._add(channel, "int16", value)

    def add_int32(self, channel: int, value: int) -> None:
        """Append a signed 32-bit sample."""
        self._add(channel, "int32", value)

    def add_float(self, channel: int, value: float) -> None:
        """Append a single precision float sample."""
        self._add(channel, "float", value)

    def to_bytes(self) -> bytes:
        """Return the whole frame: header, payload length and payload."""
        return bytes([FRAME_HEAD, SYNC_MODE, len(self._payload)]) + bytes(self._payload)

    def __len__(self) -> int:
        return len(self._payload) + 3