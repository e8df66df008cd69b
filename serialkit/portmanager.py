"""Selection of the active port among the available port types."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .port import Port
from .serialport import SerialPort
from .tcpudpport import TcpUdpPort

PortFactory = Callable[[], Port]

DEFAULT_FACTORIES: dict[str, PortFactory] = {
    "Serial Port": SerialPort,
    "TCP/UDP": TcpUdpPort,
}


class PortManager(Port):
    """Hold the current port and forward every operation to it.

    ``factories`` maps a port type name to a callable that creates a port;
    the first entry is the initial port type. Events of the current port
    are passed on to the manager's own listeners.
    """

    def __init__(self, factories: Mapping[str, PortFactory] | None = None) -> None:
        super().__init__()
        self._factories = dict(DEFAULT_FACTORIES if factories is None else factories)
        if not self._factories:
            raise ValueError("at least one port type is required")
        self._current_type, factory = next(iter(self._factories.items()))
        self._port = self._setup_port(factory())

    @property
    def current_type(self) -> str:
        """Name of the active port type."""
        return self._current_type

    @property
    def port(self) -> Port:
        """The active port."""
        return self._port

    @property
    def port_types(self) -> list[str]:
        """Names of the available port types, in order."""
        return list(self._factories)

    def _setup_port(self, port: Port) -> Port:
        def forward(notify: Callable[[], None]) -> Callable[[], None]:
            def callback() -> None:
                if port is self._port:
                    notify()

            return callback

        port.on_ready_read(forward(self._notify_ready_read))
        port.on_error(forward(self._notify_error))
        port.on_changed(forward(self._notify_changed))
        return port

    def load_config(self, config: Any) -> None:
        """Restore the active port's settings."""
        self._port.load_config(config)

    def save_config(self, config: Any) -> None:
        """Store the active port's settings."""
        self._port.save_config(config)

    def load_settings(self, config: Any) -> None:
        """Switch to the port type named by ``Settings/PortType``.

        An open port is closed first and listeners hear of it as an error.
        The old port's settings are saved and the new port loads them.
        Unknown names and the current type leave everything unchanged.
        """
        kind = config.value("Settings", "PortType", "")
        if kind not in self._factories or kind == self._current_type:
            return
        old = self._port
        if old.is_open():
            old.close()
            self._notify_error()
        old.save_config(config)
        self._current_type = kind
        self._port = self._setup_port(self._factories[kind]())
        self._port.load_config(config)
        self._notify_changed()

    def open(self) -> None:
        """Open the active port."""
        self._port.open()

    def close(self) -> None:
        """Close the active port."""
        self._port.close()

    def read_all(self) -> bytes:
        """Return and drop everything the active port received."""
        return self._port.read_all()

    def write(self, data: bytes) -> None:
        """Send ``data`` through the active port."""
        self._port.write(data)

    def port_status(self) -> tuple[bool, str]:
        """Return the active port's status."""
        return self._port.port_status()

    def is_open(self) -> bool:
        """Return True while the active port is open."""
        return self._port.is_open()