"""Monochrome 80x60 images streamed by the device.

A frame is the two bytes ``0B BB`` followed by 600 bytes: 60 rows of 10
bytes, most significant bit first, a set bit being a black pixel.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from PIL import Image

from .toolbox import ToolBox

FRAME_HEADER = b"\x0b\xbb"
WIDTH = 80
HEIGHT = 60
ROW_BYTES = WIDTH // 8
IMAGE_BYTES = ROW_BYTES * HEIGHT
FRAME_BYTES = len(FRAME_HEADER) + IMAGE_BYTES


class VideoBox(ToolBox):
    """Show the latest image received and export it."""

    title = "Video Box"

    def __init__(self) -> None:
        super().__init__()
        self.file_path = "."
        self._pending = bytearray()
        self._image_data: bytes | None = None

    @property
    def image_data(self) -> bytes | None:
        """The 600 bytes of the latest image, or None before the first one."""
        return self._image_data

    def receive_data(self, data: bytes) -> None:
        """Buffer ``data`` and take one complete image from it if present."""
        self._pending += data
        start = self._pending.find(FRAME_HEADER)
        if start > 0:
            del self._pending[:start]
        if self._pending.startswith(FRAME_HEADER) and len(self._pending) >= FRAME_BYTES:
            self._image_data = bytes(self._pending[len(FRAME_HEADER):FRAME_BYTES])
            del self._pending[:FRAME_BYTES]

    def set_file_path(self, path: str) -> None:
        """Set the folder for saved images; empty means the current folder."""
        self.file_path = path or "."

    def _require_image(self) -> bytes:
        if self._image_data is None:
            raise ValueError("no image has been received")
        return self._image_data

    def pixels(self) -> list[list[bool]]:
        """Return 60 rows of 80 pixels, True where the pixel is black."""
        data = self._require_image()
        rows = []
        for y in range(HEIGHT):
            row = data[y * ROW_BYTES:(y + 1) * ROW_BYTES]
            rows.append([bool(byte & (0x80 >> bit)) for byte in row for bit in range(8)])
        return rows

    def image(self) -> Image.Image:
        """Return the latest image as a bilevel picture."""
        data = self._require_image()
        return Image.frombytes("1", (WIDTH, HEIGHT), bytes(b ^ 0xFF for b in data))

    def c_array_text(self) -> str:
        """Return the image bytes written as a C array definition."""
        data = self._require_image()
        rows = [
            ", ".join(f"0x{b:02X}" for b in data[y * ROW_BYTES:(y + 1) * ROW_BYTES])
            for y in range(HEIGHT)
        ]
        return (
            f"const unsigned char image_data[{IMAGE_BYTES}] = {{\n    "
            + ",\n    ".join(rows)
            + "\n};\n"
        )

    def save_image(self) -> Path:
        """Save the image as a BMP named after the current time; return its path."""
        picture = self.image()
        now = datetime.now()
        name = f"{now:%y%m%d%H%M%S}{now.microsecond // 1000}.bmp"
        path = Path(os.fspath(self.file_path), name)
        picture.save(path, "BMP")
        return path