"""The interface shared by every kind of communication port."""

from __future__ import annotations

import abc
from types import TracebackType
from typing import Any, Callable

Callback = Callable[[], None]


class PortError(Exception):
    """Raised when a port cannot be opened or used."""


class Port(abc.ABC):
    """A byte stream the application reads from and writes to.

    Listeners register with :meth:`on_ready_read`, :meth:`on_error` and
    :meth:`on_changed`. Implementations call the matching ``_notify_*``
    helper when new data arrives, when the connection fails, or when the
    port's identity or status text changes.
    """

    def __init__(self) -> None:
        self._ready_read_callbacks: list[Callback] = []
        self._error_callbacks: list[Callback] = []
        self._changed_callbacks: list[Callback] = []

    @abc.abstractmethod
    def open(self) -> None:
        """Open the port; raise PortError when that is not possible."""

    @abc.abstractmethod
    def close(self) -> None:
        """Close the port if it is open."""

    @abc.abstractmethod
    def read_all(self) -> bytes:
        """Return and drop every byte received so far."""

    @abc.abstractmethod
    def write(self, data: bytes) -> None:
        """Send ``data``; raise PortError when the port is not usable."""

    @abc.abstractmethod
    def port_status(self) -> tuple[bool, str]:
        """Return whether the port is open and a one-line description."""

    @abc.abstractmethod
    def is_open(self) -> bool:
        """Return True while the port is open."""

    @abc.abstractmethod
    def load_config(self, config: Any) -> None:
        """Restore the port's settings from ``config``."""

    @abc.abstractmethod
    def save_config(self, config: Any) -> None:
        """Store the port's settings in ``config``."""

    def on_ready_read(self, callback: Callback) -> Callback:
        """Call ``callback`` whenever new data can be read."""
        self._ready_read_callbacks.append(callback)
        return callback

    def on_error(self, callback: Callback) -> Callback:
        """Call ``callback`` when the open port fails."""
        self._error_callbacks.append(callback)
        return callback

    def on_changed(self, callback: Callback) -> Callback:
        """Call ``callback`` when the port's identity or status changes."""
        self._changed_callbacks.append(callback)
        return callback

    def _notify_ready_read(self) -> None:
        for callback in list(self._ready_read_callbacks):
            callback()

    def _notify_error(self) -> None:
        for callback in list(self._error_callbacks):
            callback()

    def _notify_changed(self) -> None:
        for callback in list(self._changed_callbacks):
            callback()

    def __enter__(self) -> "Port":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.is_open():
            self.close()