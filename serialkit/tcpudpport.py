"""Network port speaking TCP (client or server) or UDP.

The port does no work in the background: call :meth:`TcpUdpPort.poll`
regularly to accept connections and gather received data.
"""

from __future__ import annotations

import re
import select
import socket
import sys
from enum import Enum
from typing import Any

from .port import Port, PortError

_OCTET = r"(25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])"
_IP_RE = re.compile(rf"localhost|({_OCTET}\.){{3}}{_OCTET}")
_PORT_RE = re.compile(
    r"6553[0-5]|655[0-2][0-9]|65[0-4][0-9]{2}|6[0-4][0-9]{3}"
    r"|[1-5][0-9]{4}|[1-9][0-9]{3}|[1-9][0-9]{2}|[1-9][0-9]|[0-9]"
)

_CONNECT_TIMEOUT = 1.0
_RECV_SIZE = 65536

_MISSING_ADDRESS = "Please enter a valid IP address and port number.\n"
_MISSING_PORT = "Please enter a valid port number!\n"
_CONNECT_ERROR = (
    "Can not connect to server!\n"
    "Please check the network, IP address and port number."
)
_SERVER_ERROR = "Can not create server!\nPlease check the port number."
_UDP_ERROR = "The port is occupied, Please re-enter it."


class Protocol(str, Enum):
    """The network protocols a :class:`TcpUdpPort` can use."""

    TCP_CLIENT = "TCP Client"
    TCP_SERVER = "TCP Server"
    UDP = "UDP"


def is_valid_ip(text: str) -> bool:
    """Return True for ``localhost`` or a dotted IPv4 address."""
    return _IP_RE.fullmatch(text) is not None


def is_valid_port(text: str) -> bool:
    """Return True for a port number 0..65535 written without leading zeros."""
    return _PORT_RE.fullmatch(text) is not None


def local_host() -> str:
    """Return an IPv4 address of this host, or an empty string."""
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        return ""
    addresses = [info[4][0] for info in infos]
    return addresses[-1] if addresses else ""


def _protocol_from(name: Protocol | str) -> Protocol:
    if isinstance(name, Protocol):
        return name
    try:
        return Protocol(name)
    except ValueError:
        raise ValueError(f"unknown protocol: {name!r}") from None


class TcpUdpPort(Port):
    """A port that exchanges data over TCP or UDP.

    As a TCP client it connects to the configured address. As a TCP server
    it listens on the configured port and sends to every connected client.
    With UDP it binds the configured port and sends datagrams to the
    configured address and the same port number.
    """

    def __init__(self) -> None:
        super().__init__()
        self.protocol = Protocol.TCP_CLIENT
        self.server_ip = ""
        self.port_number = ""
        self._client: socket.socket | None = None
        self._server: socket.socket | None = None
        self._udp: socket.socket | None = None
        self._clients: list[socket.socket] = []
        self._buffer = bytearray()

    @property
    def address(self) -> str:
        """The address shown for the port: this host's in server mode."""
        if self.protocol is Protocol.TCP_SERVER:
            return local_host()
        return self.server_ip

    def load_config(self, config: Any) -> None:
        """Restore address, port number and protocol from ``TcpUdpPort``."""
        self.server_ip = str(config.value("TcpUdpPort", "ServerAddress", "") or "")
        self.port_number = str(config.value("TcpUdpPort", "PortNumber", "") or "")
        name = str(config.value("TcpUdpPort", "PortProtocol", "") or "")
        if name in {p.value for p in Protocol} and not self.is_open():
            self.protocol = Protocol(name)
        self._notify_changed()

    def save_config(self, config: Any) -> None:
        """Store address, port number and protocol in ``TcpUdpPort``."""
        config.set_value("TcpUdpPort", "ServerAddress", self.server_ip)
        config.set_value("TcpUdpPort", "PortNumber", self.port_number)
        config.set_value("TcpUdpPort", "PortProtocol", self.protocol.value)

    def set_protocol(self, name: Protocol | str) -> None:
        """Select the protocol by member or by its display name."""
        protocol = _protocol_from(name)
        if self.is_open():
            raise PortError("cannot change the protocol while the port is open")
        self.protocol = protocol
        self._notify_changed()

    def set_address(self, address: str) -> None:
        """Set the remote address: ``localhost`` or a dotted IPv4 address."""
        if self.is_open():
            raise PortError("cannot change the address while the port is open")
        address = address.strip()
        if address and not is_valid_ip(address):
            raise ValueError(f"invalid IP address: {address!r}")
        self.server_ip = address

    def set_port_number(self, number: str | int) -> None:
        """Set the port number, 0..65535."""
        if self.is_open():
            raise PortError("cannot change the port number while the port is open")
        text = str(number).strip()
        if text and not is_valid_port(text):
            raise ValueError(f"invalid port number: {text!r}")
        self.port_number = text

    def _host_address(self) -> str:
        if self.server_ip == "localhost":
            return local_host() or "127.0.0.1"
        return self.server_ip

    def _open_tcp_client(self) -> None:
        if not self.server_ip or not self.port_number:
            raise PortError(_MISSING_ADDRESS)
        try:
            sock = socket.create_connection(
                (self._host_address(), int(self.port_number)),
                timeout=_CONNECT_TIMEOUT,
            )
        except (OSError, ValueError) as exc:
            raise PortError(_CONNECT_ERROR) from exc
        sock.settimeout(None)
        self._client = sock

    def _open_tcp_server(self) -> None:
        if not self.port_number:
            raise PortError(_MISSING_PORT)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            if sys.platform != "win32":
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", int(self.port_number)))
            sock.listen()
        except (OSError, ValueError) as exc:
            sock.close()
            raise PortError(_SERVER_ERROR) from exc
        self._server = sock

    def _open_udp(self) -> None:
        if not self.server_ip or not self.port_number:
            raise PortError(_MISSING_ADDRESS)
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(("", int(self.port_number)))
        except (OSError, ValueError) as exc:
            sock.close()
            raise PortError(_UDP_ERROR) from exc
        sock.setblocking(False)
        self._udp = sock

    def open(self) -> None:
        """Connect, listen or bind according to the protocol."""
        if self.is_open():
            raise PortError("port is already open")
        openers = {
            Protocol.TCP_CLIENT: self._open_tcp_client,
            Protocol.TCP_SERVER: self._open_tcp_server,
            Protocol.UDP: self._open_udp,
        }
        openers[self.protocol]()
        self._notify_changed()

    def close(self) -> None:
        """Close every socket of the port."""
        was_open = self.is_open()
        for sock in (self._client, self._server, self._udp, *self._clients):
            if sock is not None:
                sock.close()
        self._client = self._server = self._udp = None
        self._clients.clear()
        if was_open:
            self._notify_changed()

    def _sockets(self) -> list[socket.socket]:
        sockets = [s for s in (self._client, self._server, self._udp) if s is not None]
        return sockets + self._clients

    def poll(self, timeout: float = 0.0) -> int:
        """Wait up to ``timeout`` seconds for network events and handle them.

        Accepts pending connections, drops clients that left, and gathers
        received data. Returns the number of bytes received.
        """
        sockets = self._sockets()
        if not sockets:
            return 0
        try:
            readable, _, _ = select.select(sockets, [], [], timeout)
        except OSError:
            return 0
        received = 0
        for sock in readable:
            if sock is self._server:
                self._accept()
            elif sock is self._udp:
                received += self._read_datagrams()
            elif sock is self._client or sock in self._clients:
                received += self._read_stream(sock)
        if received:
            self._notify_ready_read()
        return received

    def _accept(self) -> None:
        try:
            conn, _ = self._server.accept()
        except OSError:
            return
        conn.setblocking(True)
        self._clients.append(conn)

    def _read_stream(self, sock: socket.socket) -> int:
        try:
            data = sock.recv(_RECV_SIZE)
        except OSError:
            data = b""
        if data:
            self._buffer += data
            return len(data)
        if sock is self._client:
            self.close()
            self._notify_error()
        else:
            sock.close()
            self._clients.remove(sock)
        return 0

    def _read_datagrams(self) -> int:
        received = 0
        while self._udp is not None:
            try:
                datagram, _ = self._udp.recvfrom(_RECV_SIZE)
            except (BlockingIOError, InterruptedError):
                break
            except ConnectionResetError:
                continue
            except OSError:
                break
            self._buffer += datagram
            received += len(datagram)
        return received

    def read_all(self) -> bytes:
        """Return and drop every byte received so far."""
        data = bytes(self._buffer)
        self._buffer.clear()
        return data

    def write(self, data: bytes) -> None:
        """Send ``data`` to the server, to every client, or as a datagram."""
        if not self.is_open():
            raise PortError("port is not open")
        data = bytes(data)
        if self._client is not None:
            try:
                self._client.sendall(data)
            except OSError as exc:
                raise PortError(f"write failed: {exc}") from exc
        elif self._server is not None:
            for conn in list(self._clients):
                try:
                    conn.sendall(data)
                except OSError:
                    conn.close()
                    self._clients.remove(conn)
        elif self._udp is not None:
            try:
                self._udp.sendto(data, (self._host_address(), int(self.port_number)))
            except OSError as exc:
                raise PortError(f"write failed: {exc}") from exc

    def is_open(self) -> bool:
        """Return True while connected, listening or bound."""
        if self.protocol is Protocol.TCP_CLIENT:
            return self._client is not None
        if self.protocol is Protocol.TCP_SERVER:
            return self._server is not None
        return self._udp is not None

    def port_status(self) -> tuple[bool, str]:
        """Return whether the port is open and a description of it."""
        text = f"{self.protocol.value} "
        if self.is_open():
            return True, text + f"OPEND @{self.address}:{self.port_number}"
        return False, text + "CLOSED"