"""Base class of the tool boxes that watch received data."""

from __future__ import annotations

from typing import Callable

TransmitCallback = Callable[[bytes], None]


class ToolBox:
    """A tool that receives port data and may send data back.

    Subclasses override :meth:`receive_data`; they send with
    :meth:`transmit`, which hands the bytes to every listener registered
    with :meth:`on_transmit`.
    """

    title = "Tool Box"

    def __init__(self) -> None:
        self.file_path = ""
        self._transmit_callbacks: list[TransmitCallback] = []

    def receive_data(self, data: bytes) -> None:
        """Handle bytes received from the port; the base class ignores them."""

    def set_file_path(self, path: str) -> None:
        """Set the folder where the tool stores files."""
        self.file_path = path

    def retranslate(self) -> None:
        """Refresh translated texts; the base class has none."""

    def on_transmit(self, callback: TransmitCallback) -> TransmitCallback:
        """Call ``callback(data)`` whenever the tool sends data."""
        self._transmit_callbacks.append(callback)
        return callback

    def transmit(self, data: bytes) -> None:
        """Send ``data`` to every transmit listener."""
        data = bytes(data)
        for callback in list(self._transmit_callbacks):
            callback(data)