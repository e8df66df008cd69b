"""Creation of the tool boxes and delivery of port data to them."""

from __future__ import annotations

from typing import Callable, Sequence

from .toolbox import ToolBox, TransmitCallback
from .valuedisplay import ValueDisplay
from .videobox import VideoBox

ToolBoxFactory = Callable[[], ToolBox]

DEFAULT_FACTORIES: tuple[ToolBoxFactory, ...] = (ValueDisplay, VideoBox)


class ToolBoxManager:
    """Open tool boxes on demand, at most one of each kind.

    ``factories`` are callables that create a tool box; their ``title``
    attribute names the tool. Data received from the port goes to every
    open tool box, and data a tool box sends goes to every listener
    registered with :meth:`on_transmit`.
    """

    def __init__(
        self,
        doc_path: str = "",
        factories: Sequence[ToolBoxFactory] | None = None,
    ) -> None:
        self.doc_path = doc_path
        self._factories = list(DEFAULT_FACTORIES if factories is None else factories)
        self._products: list[ToolBox | None] = [None] * len(self._factories)
        self._callbacks: list[TransmitCallback] = []

    def titles(self) -> list[str]:
        """Return the title of every tool, in order."""
        return [getattr(factory, "title", ToolBox.title) for factory in self._factories]

    def _check(self, index: int) -> int:
        if not 0 <= index < len(self._factories):
            raise IndexError(f"no tool box at index {index}")
        return index

    def open(self, index: int) -> ToolBox:
        """Return the tool box at ``index``, creating it if it is not open."""
        self._check(index)
        product = self._products[index]
        if product is None:
            product = self._factories[index]()
            product.set_file_path(self.doc_path)
            product.on_transmit(self._forwarder(product))
            self._products[index] = product
        return product

    def _forwarder(self, product: ToolBox) -> TransmitCallback:
        def forward(data: bytes) -> None:
            if any(p is product for p in self._products):
                for callback in list(self._callbacks):
                    callback(data)

        return forward

    def close(self, index: int) -> bool:
        """Close the tool box at ``index``; return whether it was open."""
        self._check(index)
        was_open = self._products[index] is not None
        self._products[index] = None
        return was_open

    @property
    def open_toolboxes(self) -> list[ToolBox]:
        """The tool boxes that are open now."""
        return [p for p in self._products if p is not None]

    def retranslate(self) -> None:
        """Refresh the texts of every open tool box."""
        for product in self.open_toolboxes:
            product.retranslate()

    def receive_data(self, data: bytes) -> None:
        """Hand received ``data`` to every open tool box."""
        data = bytes(data)
        for product in self.open_toolboxes:
            product.receive_data(data)

    def on_transmit(self, callback: TransmitCallback) -> TransmitCallback:
        """Call ``callback(data)`` whenever an open tool box sends data."""
        self._callbacks.append(callback)
        return callback