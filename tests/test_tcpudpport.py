import socket
import time

import pytest

from serialkit.config import Config
from serialkit.port import PortError
from serialkit.tcpudpport import (
    Protocol,
    TcpUdpPort,
    is_valid_ip,
    is_valid_port,
    local_host,
)


def _free_port(kind=socket.SOCK_STREAM):
    with socket.socket(socket.AF_INET, kind) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _poll_until(port, predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        port.poll(0.05)
        if predicate():
            return True
    return predicate()


@pytest.fixture
def listener():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen()
    yield server
    server.close()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("localhost", True),
        ("192.168.1.1", True),
        ("0.0.0.0", True),
        ("255.255.255.255", True),
        ("256.1.1.1", False),
        ("01.2.3.4", False),
        ("1.2.3", False),
        ("", False),
    ],
)
def test_is_valid_ip(text, expected):
    assert is_valid_ip(text) is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", True),
        ("80", True),
        ("65535", True),
        ("65536", False),
        ("080", False),
        ("", False),
        ("abc", False),
    ],
)
def test_is_valid_port(text, expected):
    assert is_valid_port(text) is expected


def test_local_host_is_ipv4_or_empty():
    address = local_host()
    assert address == "" or is_valid_ip(address)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("TCP Client", Protocol.TCP_CLIENT),
        ("TCP Server", Protocol.TCP_SERVER),
        ("UDP", Protocol.UDP),
    ],
)
def test_protocol_display_names(name, expected):
    port = TcpUdpPort()
    port.set_protocol(name)
    assert port.protocol is expected
    assert port.port_status() == (False, f"{name} CLOSED")


def test_config_round_trip(tmp_path):
    config = Config(tmp_path / "c.ini")
    port = TcpUdpPort()
    port.set_protocol("UDP")
    port.set_address("10.0.0.5")
    port.set_port_number(4000)
    port.save_config(config)
    assert config.value("TcpUdpPort", "PortProtocol") == "UDP"

    restored = TcpUdpPort()
    restored.load_config(config)
    assert restored.protocol is Protocol.UDP
    assert restored.server_ip == "10.0.0.5"
    assert restored.port_number == "4000"


def test_load_config_keeps_protocol_for_unknown_name(tmp_path):
    config = Config(tmp_path / "c.ini")
    config.set_value("TcpUdpPort", "PortProtocol", "Carrier Pigeon")
    port = TcpUdpPort()
    port.set_protocol(Protocol.UDP)
    port.load_config(config)
    assert port.protocol is Protocol.UDP


def test_invalid_inputs_are_rejected():
    port = TcpUdpPort()
    with pytest.raises(ValueError):
        port.set_protocol("SCTP")
    with pytest.raises(ValueError):
        port.set_address("300.1.1.1")
    with pytest.raises(ValueError):
        port.set_port_number("70000")


def test_set_protocol_notifies_change():
    port = TcpUdpPort()
    changes = []
    port.on_changed(lambda: changes.append(port.protocol))
    port.set_protocol("TCP Server")
    assert changes == [Protocol.TCP_SERVER]


def test_closed_status():
    port = TcpUdpPort()
    assert port.port_status() == (False, "TCP Client CLOSED")
    port.set_protocol(Protocol.UDP)
    assert port.port_status() == (False, "UDP CLOSED")


def test_open_without_address_fails():
    port = TcpUdpPort()
    port.set_port_number("1234")
    with pytest.raises(PortError, match="valid IP address"):
        port.open()
    assert not port.is_open()


def test_server_without_port_number_fails():
    port = TcpUdpPort()
    port.set_protocol(Protocol.TCP_SERVER)
    with pytest.raises(PortError, match="valid port number"):
        port.open()


def test_write_on_closed_port_fails():
    with pytest.raises(PortError):
        TcpUdpPort().write(b"x")


def test_client_connect_refused():
    port = TcpUdpPort()
    port.set_address("127.0.0.1")
    port.set_port_number(_free_port())
    with pytest.raises(PortError, match="Can not connect"):
        port.open()
    assert not port.is_open()


def test_tcp_client_exchange(listener):
    number = listener.getsockname()[1]
    port = TcpUdpPort()
    port.set_address("127.0.0.1")
    port.set_port_number(number)
    ready = []
    port.on_ready_read(lambda: ready.append(True))
    port.open()
    try:
        peer, _ = listener.accept()
        with peer:
            assert port.port_status() == (
                True,
                f"TCP Client OPEND @127.0.0.1:{number}",
            )
            peer.sendall(b"hello")
            chunks = bytearray()
            assert _poll_until(port, lambda: chunks.extend(port.read_all()) or chunks == b"hello")
            assert ready
            port.write(b"reply")
            assert peer.recv(16) == b"reply"
    finally:
        port.close()
    assert not port.is_open()


def test_tcp_client_reports_remote_close(listener):
    port = TcpUdpPort()
    port.set_address("127.0.0.1")
    port.set_port_number(listener.getsockname()[1])
    errors = []
    port.on_error(lambda: errors.append(True))
    port.open()
    peer, _ = listener.accept()
    peer.close()
    assert _poll_until(port, lambda: bool(errors))
    assert not port.is_open()


def test_protocol_locked_while_open(listener):
    port = TcpUdpPort()
    port.set_address("127.0.0.1")
    port.set_port_number(listener.getsockname()[1])
    with port:
        with pytest.raises(PortError):
            port.set_protocol(Protocol.UDP)
        with pytest.raises(PortError):
            port.open()
    assert port.protocol is Protocol.TCP_CLIENT
    assert not port.is_open()


def test_tcp_server_exchange():
    number = _free_port()
    port = TcpUdpPort()
    port.set_protocol(Protocol.TCP_SERVER)
    port.set_port_number(number)
    port.open()
    try:
        ok, text = port.port_status()
        assert ok and text.startswith("TCP Server OPEND @")
        assert text.endswith(f":{number}")
        with socket.create_connection(("127.0.0.1", number), timeout=2) as peer:
            peer.sendall(b"data")
            chunks = bytearray()
            assert _poll_until(port, lambda: chunks.extend(port.read_all()) or chunks == b"data")
            port.write(b"back")
            assert peer.recv(16) == b"back"
    finally:
        port.close()
    assert port.port_status() == (False, "TCP Server CLOSED")


def test_server_port_in_use():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("", 0))
        busy.listen()
        port = TcpUdpPort()
        port.set_protocol(Protocol.TCP_SERVER)
        port.set_port_number(busy.getsockname()[1])
        with pytest.raises(PortError, match="Can not create server"):
            port.open()


def test_udp_loopback_and_external_sender():
    number = _free_port(socket.SOCK_DGRAM)
    port = TcpUdpPort()
    port.set_protocol(Protocol.UDP)
    port.set_address("127.0.0.1")
    port.set_port_number(number)
    with port:
        assert port.port_status() == (True, f"UDP OPEND @127.0.0.1:{number}")
        port.write(b"ping")
        assert _poll_until(port, lambda: port.read_all() == b"ping")
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
            sender.sendto(b"pong", ("127.0.0.1", number))
            assert _poll_until(port, lambda: port.read_all() == b"pong")
    assert not port.is_open()


def test_udp_port_occupied():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as busy:
        busy.bind(("", 0))
        port = TcpUdpPort()
        port.set_protocol(Protocol.UDP)
        port.set_address("127.0.0.1")
        port.set_port_number(busy.getsockname()[1])
        with pytest.raises(PortError, match="occupied"):
            port.open()