"""Traffic between the active port and the tools that use its data."""

from __future__ import annotations

from typing import Callable

from .port import Port
from .toolboxmanager import ToolBoxManager

ReceiveCallback = Callable[[bytes], None]


class Controller:
    """Move data between a port and the tool boxes and count the bytes.

    Received data goes to the tool boxes and to every listener registered
    with :meth:`on_receive`; data the tool boxes send goes to the port.
    While paused, received data stays in the port.
    """

    def __init__(self, port_manager: Port, toolboxes: ToolBoxManager | None = None) -> None:
        self.port = port_manager
        self.toolboxes = toolboxes if toolboxes is not None else ToolBoxManager()
        self.paused = False
        self._rx_count = 0
        self._tx_count = 0
        self._receivers: list[ReceiveCallback] = []
        self.port.on_ready_read(self.read_port_data)
        self.toolboxes.on_transmit(self.write_port_data)

    @property
    def rx_count(self) -> int:
        """Bytes received since the last :meth:`clear`."""
        return self._rx_count

    @property
    def tx_count(self) -> int:
        """Bytes sent since the last :meth:`clear`."""
        return self._tx_count

    def on_receive(self, callback: ReceiveCallback) -> ReceiveCallback:
        """Call ``callback(data)`` with every chunk read from the port."""
        self._receivers.append(callback)
        return callback

    def read_port_data(self) -> bytes:
        """Read what the port holds and hand it on; return the bytes read."""
        if self.paused:
            return b""
        data = self.port.read_all()
        if data:
            self._rx_count += len(data)
            for callback in list(self._receivers):
                callback(data)
            self.toolboxes.receive_data(data)
        return data

    def write_port_data(self, data: bytes) -> None:
        """Send ``data`` through the port and count it."""
        data = bytes(data)
        self._tx_count += len(data)
        self.port.write(data)

    def clear(self) -> None:
        """Reset the byte counters."""
        self._rx_count = 0
        self._tx_count = 0

    def set_pause(self, paused: bool) -> None:
        """Stop or resume reading from the port."""
        self.paused = bool(paused)