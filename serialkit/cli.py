"""Command line terminal: open a port, print what arrives, send input."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from pathlib import Path
from typing import Sequence

from .config import Config, sync_default_config
from .controller import Controller
from .port import Port, PortError
from .portmanager import DEFAULT_FACTORIES, PortManager
from .serialport import (
    DATA_BITS,
    FLOW_CONTROLS,
    PARITIES,
    STOP_BITS,
    SerialPort,
    available_ports,
)
from .tcpudpport import Protocol, TcpUdpPort
from .toolboxmanager import ToolBoxManager
from .version import software_title
from .valuedisplay import ValueDisplay

DEFAULT_CONFIG = """\
[Settings]
Language=en
Theme=default
PortType=Serial Port
WindowOpacity=100

[SerialPort]
BaudRate=115200

[TcpUdpPort]
ServerAddress=
PortNumber=
PortProtocol=TCP Client

[Path]
DocumentPath=
"""

_POLL_INTERVAL = 0.05


def _default_config_path() -> Path:
    return Path.home() / ".config" / "SerialTool" / "config.ini"


def build_parser() -> argparse.ArgumentParser:
    """Return the parser of the command line options."""
    parser = argparse.ArgumentParser(
        prog="serialkit",
        description="Exchange data with a serial port or a TCP/UDP peer.",
    )
    parser.add_argument("--config", help="settings file (INI)")
    parser.add_argument("--version", action="store_true", help="print the version")
    parser.add_argument("--debug", action="store_true", help="debug build title")
    parser.add_argument("--list-ports", action="store_true", help="list serial ports")
    parser.add_argument("--port-type", choices=list(DEFAULT_FACTORIES))
    parser.add_argument("--port", help="serial port name or pyserial URL")
    parser.add_argument("--baud", help="baud rate")
    parser.add_argument("--data-bits", type=int, choices=list(DATA_BITS))
    parser.add_argument("--parity", choices=[name for _, name in PARITIES])
    parser.add_argument("--stop-bits", choices=[name for _, name in STOP_BITS])
    parser.add_argument("--flow-control", choices=list(FLOW_CONTROLS))
    parser.add_argument("--protocol", choices=[p.value for p in Protocol])
    parser.add_argument("--address", help="remote IPv4 address or localhost")
    parser.add_argument("--number", help="network port number")
    parser.add_argument("--send", help="send this text once instead of reading stdin")
    parser.add_argument("--duration", type=float, help="stop after this many seconds")
    parser.add_argument("--stats", action="store_true", help="print byte counters every second")
    parser.add_argument("--values", action="store_true", help="print the vdisp table at exit")
    return parser


def format_counters(rx_count: int, tx_count: int) -> tuple[str, str]:
    """Return the received and sent byte counter texts."""
    return f"RX: {rx_count}Bytes", f"TX: {tx_count}Bytes"


def clamp_opacity(value: int) -> int:
    """Return a window opacity percentage; below 30 or above 100 means 100."""
    value = int(value)
    return 100 if value < 30 or value > 100 else value


def _apply_overrides(port: Port, args: argparse.Namespace) -> None:
    if isinstance(port, SerialPort):
        if args.port:
            port.port_name = args.port
        elif not port.port_name:
            ports = available_ports()
            if ports:
                port.port_name = ports[0]
        if args.baud:
            port.set_baud_rate(args.baud)
        if args.data_bits is not None:
            port.set_data_bits(DATA_BITS.index(args.data_bits))
        if args.parity:
            port.set_parity([name for _, name in PARITIES].index(args.parity))
        if args.stop_bits:
            port.set_stop_bits([name for _, name in STOP_BITS].index(args.stop_bits))
        if args.flow_control:
            port.set_flow_control(FLOW_CONTROLS.index(args.flow_control))
    elif isinstance(port, TcpUdpPort):
        if args.protocol:
            port.set_protocol(args.protocol)
        if args.address is not None:
            port.set_address(args.address)
        if args.number is not None:
            port.set_port_number(args.number)


def _forward_stdin(controller: Controller, stop: threading.Event) -> None:
    try:
        for line in sys.stdin:
            if stop.is_set():
                return
            try:
                controller.write_port_data(line.encode("utf-8"))
            except PortError:
                return
    except (OSError, ValueError):
        return


def main(argv: Sequence[str] | None = None) -> int:
    """Run the terminal; return the process exit status."""
    args = build_parser().parse_args(argv)
    if args.version:
        print(software_title(args.debug))
        return 0
    if args.list_ports:
        for name in available_ports():
            print(name)
        return 0

    config_path = Path(args.config) if args.config else _default_config_path()
    sync_default_config(str(config_path), DEFAULT_CONFIG)
    config = Config(str(config_path))

    manager = PortManager()
    manager.load_config(config)
    if args.port_type:
        config.set_value("Settings", "PortType", args.port_type)
    manager.load_settings(config)
    try:
        _apply_overrides(manager.port, args)
    except (ValueError, PortError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    doc_path = str(config.value("Path", "DocumentPath", "") or "")
    toolboxes = ToolBoxManager(doc_path)
    controller = Controller(manager, toolboxes)
    display = toolboxes.open(0) if args.values else None

    output_lock = threading.Lock()

    @controller.on_receive
    def _print(data: bytes) -> None:
        with output_lock:
            sys.stdout.write(data.decode("utf-8", errors="replace"))
            sys.stdout.flush()

    stop = threading.Event()
    failed = threading.Event()

    @manager.on_error
    def _failure() -> None:
        failed.set()
        stop.set()

    status = 0
    try:
        manager.open()
    except PortError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        manager.save_config(config)
        config.save()
        return 1

    try:
        print(manager.port_status()[1], file=sys.stderr)
        if args.send is not None:
            controller.write_port_data(args.send.encode("utf-8"))
        else:
            threading.Thread(
                target=_forward_stdin, args=(controller, stop), daemon=True
            ).start()

        deadline = time.monotonic() + args.duration if args.duration else None
        next_stats = time.monotonic() + 1.0
        while not stop.is_set():
            now = time.monotonic()
            if deadline is not None and now >= deadline:
                break
            active = manager.port
            if isinstance(active, TcpUdpPort):
                active.poll(_POLL_INTERVAL)
            else:
                stop.wait(_POLL_INTERVAL)
            if args.stats and time.monotonic() >= next_stats:
                next_stats += 1.0
                print("  ".join(format_counters(controller.rx_count, controller.tx_count)),
                      file=sys.stderr)
    except KeyboardInterrupt:
        pass
    except PortError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        status = 1
    finally:
        stop.set()
        if manager.is_open():
            manager.close()
        manager.save_config(config)
        config.save()

    if failed.is_set():
        print("Error: the port reported a failure and was closed.", file=sys.stderr)
        status = 1
    if isinstance(display, ValueDisplay):
        for ident, value, extra in display.rows():
            print(f"{ident}\t{value}\t{extra}".rstrip())
    if args.stats:
        print("  ".join(format_counters(controller.rx_count, controller.tx_count)),
              file=sys.stderr)
    return status


if __name__ == "__main__":
    sys.exit(main())