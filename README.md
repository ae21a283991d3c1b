# trafficdash

A live network traffic monitor for the terminal. It captures packets on one
or more network interfaces. It can print a line for each packet, or it can
draw a colour-coded dashboard that groups traffic by protocol and OSI layer.

The dashboard has these parts:

- **Traffic statistics**: total packets, total bytes, time spent monitoring,
  packet rate and byte rate.
- **Interface statistics**: packets and bytes for each interface. This part
  appears only when packets carry an interface name.
- **Protocol distribution**: a bar chart for TCP, UDP, ICMP and other
  protocols. Each bar shows its OSI layer.
- **Top 10 connections**: source and destination address and port pairs,
  ordered by packet count.
- **Colour legend**: TCP in green, UDP in yellow, ICMP in blue, and other
  protocols in magenta.

The dashboard redraws once a second.

## Installation

```
pip install .
```

The package uses only the standard library. Live capture reads frames from
a link-layer raw socket (`AF_PACKET`), which exists on Linux only. It also
tries to put the interface into promiscuous mode. For both, the command
normally has to run as root or with the right capabilities.

To run the tests:

```
pip install .[test]
pytest
```

## Command-line use

```
trafficdash [OPTIONS] [INTERFACE]
```

| Option                 | Meaning                                              |
|------------------------|------------------------------------------------------|
| `-d`, `--dashboard`    | Show the dashboard instead of one line per packet     |
| `-l`, `--list`         | List the available network interfaces and exit        |
| `-i`, `--interactive`  | Choose the interface(s) from a numbered list          |
| `-m`, `--multi`        | Monitor several interfaces at the same time           |
| `--interfaces <list>`  | Comma-separated interfaces for multi-interface mode   |
| `-h`, `--help`         | Show help and exit                                    |

Examples:

```
trafficdash                                   # first interface the system lists
trafficdash eth0                              # a specific interface
trafficdash --dashboard                       # dashboard on the default interface
trafficdash -i                                # pick an interface interactively
trafficdash --list                            # list interfaces
trafficdash -m --interfaces eth0,lo           # several interfaces at once
trafficdash -m -d --interfaces eth0,docker0   # several interfaces with the dashboard
```

If you name no interface, the command uses the first interface the system
reports and prints which one it chose.

Multi-interface mode needs either `--interfaces` or `--interactive`. In
interactive multi-interface mode you type the numbers of the interfaces,
separated by commas, for example `1,3,4`. A number that is out of range, or
an entry that is not a number, is skipped with a warning. If one interface
cannot be opened, the command reports an error for that interface and keeps
capturing on the others.

Press Ctrl+C to stop monitoring.

Exit status:

| Status | Meaning                                                            |
|--------|--------------------------------------------------------------------|
| 0      | Normal end, or `--help` / `--list`                                 |
| 1      | Bad or missing interface choice, or the device could not be opened |
| 2      | No interfaces found, or the run was stopped with Ctrl+C            |

Without the dashboard, each packet prints one line like this:

```
[eth0] Packet captured. Length: 74 | Protocol: TCP | From: 10.0.0.2:51514 -> To: 10.0.0.1:443
```

Ports are shown for TCP and UDP. For ICMP and other protocols they are `0`.

## Library use

The parts that decode packets, count them and draw the dashboard do not need
a live capture:

```python
import sys
import time

from trafficdash.dashboard import Dashboard, format_bytes
from trafficdash.packets import format_packet, parse_packet

frame = ...  # raw Ethernet frame as bytes
info = parse_packet(frame, len(frame), "eth0")
print(format_packet(info))

board = Dashboard(clock=time.monotonic)
board.update_packet(info)
for connection, packets in board.top_connections(limit=10):
    print(connection, packets)
text = board.render()           # the dashboard as a string
board.display(stream=sys.stdout)  # clears the screen, then draws it

print(format_bytes(1536))  # "1.50 KB"
```

- `trafficdash.packets` has `PacketInfo`, `parse_packet`, `format_packet`
  and `PacketParseError`. `parse_packet` raises `PacketParseError` if a
  frame is too short to hold the headers it needs.
- `trafficdash.dashboard` has `Dashboard`, `ConnectionKey`, `Colors`,
  `protocol_color`, `osi_layer`, `format_bytes` and `draw_bar`.
- `trafficdash.capture` has `NetworkMonitor` for one interface,
  `MultiMonitor` for several, `list_interfaces`, and `CaptureError`.
  `CaptureError` is raised when a device cannot be opened.
  `NetworkMonitor` takes an `opener` callable, so frames can come from any
  object with `read()` and `close()` methods instead of a raw socket. It can
  also be used as a context manager. Its `handle_frame` method decodes and
  reports a single frame. It skips frames that are too short to decode.

## What it does not do

- It treats every frame as Ethernet carrying IPv4. It does not check the
  EtherType, and it does not decode IPv6, ARP or VLAN-tagged frames.
- It does not read or write capture files, and it has no packet filters.
- Live capture works only where `AF_PACKET` raw sockets exist, that is, on
  Linux.