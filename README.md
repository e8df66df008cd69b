# serialkit

A toolkit for exchanging data with devices over a serial port or a TCP/UDP
socket. It also has helpers for the kinds of data that embedded devices
commonly send back.

## Installation

```
pip install serialkit
```

## Command line

```
serialkit --help
```

`serialkit` opens the configured port and prints whatever arrives to
standard output. Each line read from standard input is sent to the port.
With `--send TEXT`, that text is sent once and standard input is not read.
The command runs until it is interrupted, until `--duration` seconds have
passed, or until the port reports a failure.

Settings are kept in an INI file. The default file is
`~/.config/SerialTool/config.ini`; `--config` names another one. The file
is created with defaults on first use and written back on exit.

Options:

- `--version`: print the version title. With `--debug`, the title also
  shows the build identifier.
- `--list-ports`: list the serial ports found.
- `--port-type`: `Serial Port` or `TCP/UDP`. The choice is stored as
  `Settings/PortType`.
- Serial port options:
  - `--port`: a port name or a pyserial URL such as `loop://`. Without it,
    the first port found is used.
  - `--baud`: the baud rate.
  - `--data-bits`: 5, 6, 7 or 8.
  - `--parity`: `None`, `Even`, `Odd`, `Space` or `Mark`.
  - `--stop-bits`: `1`, `1.5` or `2`.
  - `--flow-control`: `None`, `RTS/CTS` or `XON/XOFF`.
- Network options:
  - `--protocol`: `TCP Client`, `TCP Server` or `UDP`.
  - `--address`: an IPv4 address or `localhost`.
  - `--number`: the port number.
- `--stats`: print the `RX: nBytes` and `TX: nBytes` counters to standard
  error every second and once more at exit.
- `--values`: collect `vdisp` lines (see below) and print the table at exit.

Exit status:

- 0: the command finished normally.
- 1: the port could not be opened or reported a failure.
- 2: a port option had an invalid value.

## Library

- **Ports** (`serialkit.port`, `serialkit.serialport`,
  `serialkit.tcpudpport`, `serialkit.portmanager`):
  - `SerialPort` (built on pyserial) and `TcpUdpPort` (TCP client, TCP
    server or UDP) implement the `Port` interface: `open`, `close`,
    `read_all`, `write`, `is_open` and `port_status`.
  - Failures raise `PortError`.
  - Listeners are registered with `on_ready_read`, `on_error` and
    `on_changed`.
  - `TcpUdpPort` does no background work: call `poll(timeout)` regularly.
  - `PortManager` holds the active port and switches it according to
    `Settings/PortType`.
  - `available_ports()` lists the serial ports present.
- **Waveform frames** (`serialkit.sendwave`):
  - `point_int8`, `point_int16`, `point_int32` and `point_float` build
    single-sample frames.
  - `SyncFrame` gathers samples for several channels into one frame. It
    raises `FrameFullError` when the 80-byte payload is full.
  - `Timestamp.encode()` builds the 10-byte info frame.
- **Tool boxes** (`serialkit.toolbox`, `serialkit.valuedisplay`,
  `serialkit.videobox`, `serialkit.toolboxmanager`):
  - `ValueDisplay` keeps the latest row for each `vdisp <id> <value> [extra...]`
    line.
  - `VideoBox` decodes 80x60 monochrome images framed by `0x0B 0xBB`. It
    offers them as `pixels()` and `image()`, as C array text with
    `c_array_text()`, and saves them as BMP files with `save_image()`.
  - `ToolBoxManager` opens at most one tool box of each kind and feeds them
    received data.
- **Traffic** (`serialkit.controller`): `Controller` moves data between a
  port and the tool boxes. It counts bytes in `rx_count` and `tx_count`,
  and `set_pause` stops reading from the port.
- **Settings** (`serialkit.config`, `serialkit.translate`,
  `serialkit.settingsitems`, `serialkit.settingsform`):
  - `Config` reads and writes grouped INI settings, and
    `sync_default_config` creates the file on first use.
  - `Translate` loads tab-separated translation tables.
  - `SettingsForm` and `OptionsDialog` build setting items such as check
    boxes, combo boxes, sliders, spin boxes and line edits from JSON layout
    files, and load and save their values.
- **Versions** (`serialkit.version`):
  - `compare_version` tells whether a release version is newer.
  - `parse_release` and `check_update` read a JSON release description.
  - `fetch_latest_release` downloads one.

## Examples

```python
from serialkit.sendwave import point_int16, SyncFrame

frame = point_int16(0, 1234)

sync = SyncFrame()
sync.add_int8(0, -5)
sync.add_float(1, 3.5)
payload = sync.to_bytes()
```

```python
from serialkit.valuedisplay import ValueDisplay

display = ValueDisplay()
display.receive_data(b"vdisp temp 23.5 C\n")
print(display.rows())  # [('temp', '23.5', 'C ')]
```

```python
from serialkit.version import compare_version

compare_version("1.5.0", "1.4.0Alpha")  # True
```

## What it does not do

- There is no graphical interface. The options dialog, tool boxes and
  settings items are plain objects with no windows.
- The package only encodes waveform frames. It does not decode or plot
  them.
- There is no terminal emulation and no file transfer protocol.
- Update checking only reports whether a release is newer. Nothing is
  downloaded or installed.

## Running the tests

```
pip install serialkit[test]
pytest
```