"""Table of named values reported by the device in text lines.

A line ``vdisp <id> <value> [extra words...]`` sets the row of ``<id>``.
"""

from __future__ import annotations

import re

from .toolbox import ToolBox

_WHITESPACE = re.compile(r"\s+")


class ValueDisplay(ToolBox):
    """Keep the latest value of every id announced with ``vdisp``."""

    title = "Value Display"

    def __init__(self) -> None:
        super().__init__()
        self._pending = bytearray()
        self._rows: dict[str, tuple[str, str]] = {}

    def receive_data(self, data: bytes) -> None:
        """Buffer ``data`` and handle every complete line."""
        self._pending += data
        while True:
            end = self._pending.find(b"\n")
            if end < 0:
                break
            line = bytes(self._pending[: end + 1])
            del self._pending[: end + 1]
            self._handle_line(line.decode("utf-8", errors="replace"))

    def _handle_line(self, line: str) -> None:
        words = [w for w in _WHITESPACE.split(line) if w]
        if len(words) < 2 or words[0].lower() != "vdisp":
            return
        ident = words[1]
        value = words[2] if len(words) > 2 else ""
        additional = "".join(word + " " for word in words[3:])
        self._rows[ident] = (value, additional)

    def rows(self) -> list[tuple[str, str, str]]:
        """Return ``(id, value, additional)`` rows in order of first appearance."""
        return [(ident, value, extra) for ident, (value, extra) in self._rows.items()]