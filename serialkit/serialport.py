"""Serial port access built on pyserial."""

from __future__ import annotations

import re
import sys
import threading
from typing import Any

import serial
from serial.tools import list_ports

from .port import Port, PortError

DEFAULT_BAUD_RATE = 9600

DATA_BITS = (serial.FIVEBITS, serial.SIXBITS, serial.SEVENBITS, serial.EIGHTBITS)
PARITIES = (
    (serial.PARITY_NONE, "None"),
    (serial.PARITY_EVEN, "Even"),
    (serial.PARITY_ODD, "Odd"),
    (serial.PARITY_SPACE, "Space"),
    (serial.PARITY_MARK, "Mark"),
)
STOP_BITS = (
    (serial.STOPBITS_ONE, "1"),
    (serial.STOPBITS_ONE_POINT_FIVE, "1.5"),
    (serial.STOPBITS_TWO, "2"),
)
FLOW_CONTROLS = ("None", "RTS/CTS", "XON/XOFF")

_BAUD_RE = re.compile(r"\d{2,7}")
_READ_TIMEOUT = 0.05
_OPEN_ERROR = (
    "Can not open the port!\nPort may be occupied or configured incorrectly!"
)


def available_ports() -> list[str]:
    """List the serial ports present, as ``"name (description)"``."""
    return [
        f"{info.name or info.device} ({info.description})"
        for info in list_ports.comports()
    ]


def _check_index(index: int, size: int, what: str) -> int:
    if not 0 <= index < size:
        raise ValueError(f"{what} index must be in 0..{size - 1}, got {index}")
    return index


class SerialPort(Port):
    """A serial port whose received bytes are gathered by a reader thread.

    ``port_name`` may be an entry of :func:`available_ports`; only the text
    before the first space is used. pyserial URLs such as ``loop://`` work
    too. In text mode, carriage returns are dropped from received data.
    """

    def __init__(self, port_name: str = "") -> None:
        super().__init__()
        self._port_name = port_name or ""
        self.text_mode = True
        self._baud_rate = DEFAULT_BAUD_RATE
        self._data_bits = len(DATA_BITS) - 1
        self._parity = 0
        self._stop_bits = 0
        self._flow_control = 0
        self._serial: Any = None
        self._reader: threading.Thread | None = None
        self._stop = threading.Event()
        self._buffer = bytearray()
        self._lock = threading.Lock()

    @property
    def port_name(self) -> str:
        """The selected port; it cannot change while the port is open."""
        return self._port_name

    @port_name.setter
    def port_name(self, name: str) -> None:
        if self.is_open():
            raise PortError("cannot change the port while it is open")
        name = name or ""
        if name != self._port_name:
            self._port_name = name
            self._notify_changed()

    def _label(self) -> str:
        return self._port_name.split(" ")[0]

    def _device_name(self) -> str:
        name = self._label()
        if (
            name
            and sys.platform.startswith("linux")
            and "://" not in name
            and not name.startswith("/dev/")
        ):
            name = "/dev/" + name
        return name

    def load_config(self, config: Any) -> None:
        """Restore the baud rate from the ``SerialPort`` group."""
        text = config.value("SerialPort", "BaudRate", "")
        text = str(text).strip() if text is not None else ""
        if _BAUD_RE.fullmatch(text):
            self.set_baud_rate(text)

    def save_config(self, config: Any) -> None:
        """Store the baud rate in the ``SerialPort`` group."""
        config.set_value("SerialPort", "BaudRate", str(self._baud_rate))

    def set_baud_rate(self, text: str | int) -> None:
        """Set the baud rate from a string of 2 to 7 digits."""
        text = str(text).strip()
        if not _BAUD_RE.fullmatch(text):
            raise ValueError(f"invalid baud rate: {text!r}")
        self._baud_rate = int(text)
        self._reconfigure()

    def set_data_bits(self, index: int) -> None:
        """Select 5, 6, 7 or 8 data bits by index 0..3."""
        self._data_bits = _check_index(index, len(DATA_BITS), "data bits")
        self._reconfigure()

    def set_parity(self, index: int) -> None:
        """Select none, even, odd, space or mark parity by index 0..4."""
        self._parity = _check_index(index, len(PARITIES), "parity")
        self._reconfigure()

    def set_stop_bits(self, index: int) -> None:
        """Select 1, 1.5 or 2 stop bits by index 0..2."""
        self._stop_bits = _check_index(index, len(STOP_BITS), "stop bits")
        self._reconfigure()

    def set_flow_control(self, index: int) -> None:
        """Select no, hardware or software flow control by index 0..2."""
        self._flow_control = _check_index(
            index, len(FLOW_CONTROLS), "flow control"
        )
        self._reconfigure()

    def _apply(self, ser: Any) -> None:
        ser.baudrate = self._baud_rate
        ser.bytesize = DATA_BITS[self._data_bits]
        ser.parity = PARITIES[self._parity][0]
        ser.stopbits = STOP_BITS[self._stop_bits][0]
        ser.rtscts = self._flow_control == 1
        ser.xonxoff = self._flow_control == 2

    def _reconfigure(self) -> None:
        if self.is_open():
            try:
                self._apply(self._serial)
            except (serial.SerialException, ValueError) as exc:
                raise PortError(f"cannot apply port settings: {exc}") from exc

    def open(self) -> None:
        """Open the selected port with the current settings."""
        if self.is_open():
            raise PortError("port is already open")
        name = self._device_name()
        if not name:
            raise PortError(_OPEN_ERROR)
        try:
            ser = serial.serial_for_url(name, do_not_open=True)
            self._apply(ser)
            ser.timeout = _READ_TIMEOUT
            ser.open()
        except (serial.SerialException, ValueError, OSError) as exc:
            raise PortError(_OPEN_ERROR) from exc
        self._serial = ser
        with self._lock:
            self._buffer.clear()
        self._stop = threading.Event()
        self._reader = threading.Thread(
            target=self._read_loop, args=(ser, self._stop), daemon=True
        )
        self._reader.start()
        self._notify_changed()

    def _read_loop(self, ser: Any, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                chunk = ser.read(max(1, ser.in_waiting))
            except (serial.SerialException, OSError, TypeError):
                if not stop.is_set():
                    self._notify_error()
                return
            if chunk and not stop.is_set():
                with self._lock:
                    self._buffer += chunk
                self._notify_ready_read()

    def close(self) -> None:
        """Close the port and stop reading."""
        if self._serial is None:
            return
        self._stop.set()
        reader = self._reader
        if reader is not None and reader is not threading.current_thread():
            reader.join()
        try:
            self._serial.close()
        finally:
            self._serial = None
            self._reader = None
            with self._lock:
                self._buffer.clear()
        self._notify_changed()

    def read_all(self) -> bytes:
        """Return and drop every byte received so far."""
        with self._lock:
            data = bytes(self._buffer)
            self._buffer.clear()
        if self.text_mode:
            data = data.replace(b"\r", b"")
        return data

    def write(self, data: bytes) -> None:
        """Send ``data`` through the open port."""
        if not self.is_open():
            raise PortError("port is not open")
        data = bytes(data)
        if self.text_mode and sys.platform == "win32":
            data = data.replace(b"\n", b"\r\n")
        try:
            self._serial.write(data)
        except serial.SerialException as exc:
            raise PortError(f"write failed: {exc}") from exc

    def port_status(self) -> tuple[bool, str]:
        """Return whether the port is open and a description of it."""
        label = self._label()
        text = f"{label} " if label else "COM Port "
        if not self.is_open():
            return False, text + "CLOSED"
        text += (
            f"OPEND, {self._baud_rate}bps, {DATA_BITS[self._data_bits]}bit, "
            f"{PARITIES[self._parity][1]}, {STOP_BITS[self._stop_bits][1]}, "
            f"{FLOW_CONTROLS[self._flow_control]}"
        )
        return True, text

    def is_open(self) -> bool:
        """Return True while the port is open."""
        return self._serial is not None and bool(self._serial.is_open)