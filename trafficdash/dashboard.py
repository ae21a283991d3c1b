"""Real-time traffic dashboard with colour-coded, OSI-layer oriented views."""

from __future__ import annotations

import sys
import threading
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, TextIO

from trafficdash.packets import PacketInfo


class Colors:
    """ANSI colour codes used by the dashboard."""

    RESET = "\033[0m"
    ICMP = "\033[38;5;33m"
    IP = "\033[38;5;27m"
    TCP = "\033[38;5;46m"
    UDP = "\033[38;5;226m"
    OTHER = "\033[38;5;201m"
    HEADER = "\033[38;5;51m"
    LABEL = "\033[38;5;250m"
    BAR = "\033[38;5;208m"


CLEAR_SCREEN = "\033[2J\033[1;1H"
BAR_WIDTH = 40
TOP_CONNECTIONS = 10

_BOX_TOP = "╔════════════════════════════════════════════════════════════════╗"
_BOX_BOTTOM = "╚════════════════════════════════════════════════════════════════╝"
_UNITS = ("B", "KB", "MB", "GB", "TB")


@dataclass(frozen=True, order=True)
class ConnectionKey:
    """Identity of a connection; ordered by addresses, ports, then protocol."""

    source_ip: str
    dest_ip: str
    source_port: int
    dest_port: int
    protocol: str

    @classmethod
    def from_packet(cls, info: PacketInfo) -> "ConnectionKey":
        return cls(
            info.source_ip, info.dest_ip, info.source_port, info.dest_port, info.protocol
        )


def protocol_color(protocol: str) -> str:
    """Colour code for a protocol name."""
    return {"TCP": Colors.TCP, "UDP": Colors.UDP, "ICMP": Colors.ICMP}.get(
        protocol, Colors.OTHER
    )


def osi_layer(protocol: str) -> str:
    """OSI layer description for a protocol name."""
    if protocol in ("TCP", "UDP"):
        return "Layer 4 (Transport)"
    if protocol == "ICMP":
        return "Layer 3 (Network)"
    return "Layer 3/4 (Network/Transport)"


def format_bytes(num_bytes: int) -> str:
    """Human-readable byte count with two decimals, e.g. ``1.50 KB``."""
    size = float(num_bytes)
    unit = 0
    while size >= 1024.0 and unit < len(_UNITS) - 1:
        size /= 1024.0
        unit += 1
    return f"{size:.2f} {_UNITS[unit]}"


def draw_bar(
    label: str, value: int, max_value: int, color: str, width: int = BAR_WIDTH
) -> str:
    """One line of a horizontal bar chart, scaled against ``max_value``."""
    bar_length = int(value / max_value * width) if max_value > 0 else 0
    return (
        f"{Colors.LABEL}{label:<10}{Colors.RESET} │ "
        f"{color}{'█' * bar_length}{Colors.RESET}"
        f"{' ' * max(0, width - bar_length)}"
        f" │ {Colors.LABEL}{value:>10}{Colors.RESET}"
    )


def _section(title_line: str) -> list[str]:
    return [f"{Colors.HEADER}{_BOX_TOP}", title_line, f"{_BOX_BOTTOM}{Colors.RESET}"]


class Dashboard:
    """Collects packet statistics and renders them as a terminal dashboard."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self.total_packets = 0
        self.total_bytes = 0
        self.protocol_counts: Counter[str] = Counter()
        self.protocol_bytes: Counter[str] = Counter()
        self.interface_counts: Counter[str] = Counter()
        self.interface_bytes: Counter[str] = Counter()
        self.connections: Counter[ConnectionKey] = Counter()
        self.start_time = clock()
        self.last_update = self.start_time

    def update_packet(self, info: PacketInfo) -> None:
        """Account for one captured packet."""
        with self._lock:
            self.total_packets += 1
            self.total_bytes += info.length
            self.protocol_counts[info.protocol] += 1
            self.protocol_bytes[info.protocol] += info.length
            if info.interface_name:
                self.interface_counts[info.interface_name] += 1
                self.interface_bytes[info.interface_name] += info.length
            self.connections[ConnectionKey.from_packet(info)] += 1
            self.last_update = self._clock()

    def top_connections(self, limit: int = TOP_CONNECTIONS) -> list[tuple[ConnectionKey, int]]:
        """Connections with the most packets, most first."""
        with self._lock:
            ordered = sorted(self.connections.items())
        ordered.sort(key=lambda item: item[1], reverse=True)
        return ordered[:limit]

    def _traffic_stats(self) -> list[str]:
        duration = int(self._clock() - self.start_time)
        if duration == 0:
            duration = 1
        packets_per_sec = self.total_packets / duration
        bytes_per_sec = self.total_bytes / duration
        label = Colors.LABEL
        reset = Colors.RESET
        return [
            *_section(
                "║  TRAFFIC STATISTICS                                            ║"
            ),
            f"{label}  Total Packets:    {reset}{self.total_packets}",
            f"{label}  Total Traffic:    {reset}{format_bytes(self.total_bytes)}",
            f"{label}  Monitoring Time:  {reset}{duration} seconds",
            f"{label}  Packet Rate:      {reset}{packets_per_sec:.2f} packets/sec",
            f"{label}  Traffic Rate:     {reset}{format_bytes(int(bytes_per_sec))}/sec",
            "",
        ]

    def _interface_stats(self) -> list[str]:
        if not self.interface_counts:
            return []
        lines = _section(
            "║  INTERFACE STATISTICS                                          ║"
        )
        max_count = max(self.interface_counts.values())
        for iface in sorted(self.interface_counts):
            lines += [
                f"{Colors.LABEL}  Interface: {Colors.RESET}{iface}",
                draw_bar("Packets", self.interface_counts[iface], max_count, Colors.BAR),
                f"{Colors.LABEL}           └─ Traffic: "
                f"{format_bytes(self.interface_bytes[iface])}{Colors.RESET}",
                "",
            ]
        return lines

    def _protocol_distribution(self) -> list[str]:
        lines = _section(
            "║  PROTOCOL DISTRIBUTION (by OSI Layer)                         ║"
        )
        max_count = max(self.protocol_counts.values(), default=0)
        for protocol in sorted(self.protocol_counts):
            color = protocol_color(protocol)
            lines += [
                f"{color}  {protocol}{Colors.RESET} "
                f"({Colors.LABEL}{osi_layer(protocol)}{Colors.RESET})",
                draw_bar("Packets", self.protocol_counts[protocol], max_count, color),
                f"{Colors.LABEL}           └─ Traffic: "
                f"{format_bytes(self.protocol_bytes[protocol])}{Colors.RESET}",
                "",
            ]
        return lines

    def _connections_section(self, top: list[tuple[ConnectionKey, int]]) -> list[str]:
        lines = _section(
            "║  TOP 10 CONNECTIONS                                            ║"
        )
        for conn, count in top:
            lines.append(
                f"  {protocol_color(conn.protocol)}{conn.protocol}{Colors.RESET} │ "
                f"{conn.source_ip}:{conn.source_port} → {conn.dest_ip}:{conn.dest_port}"
                f"{Colors.LABEL} ({count} packets){Colors.RESET}"
            )
        if not top:
            lines.append(f"{Colors.LABEL}  No connections yet...{Colors.RESET}")
        lines.append("")
        return lines

    @staticmethod
    def _legend() -> list[str]:
        return [
            *_section(
                "║  COLOR LEGEND (OSI Model)                                      ║"
            ),
            f"  {Colors.TCP}■ TCP{Colors.RESET} - Layer 4 (Transport Layer)",
            f"  {Colors.UDP}■ UDP{Colors.RESET} - Layer 4 (Transport Layer)",
            f"  {Colors.ICMP}■ ICMP{Colors.RESET} - Layer 3 (Network Layer)",
            f"  {Colors.OTHER}■ Other{Colors.RESET} - Various Layers",
            "",
            f"{Colors.LABEL}Press Ctrl+C to stop monitoring...{Colors.RESET}",
        ]

    def render(self) -> str:
        """The full dashboard as text, without the screen-clearing prefix."""
        top = self.top_connections()
        with self._lock:
            lines = [
                f"{Colors.HEADER}{_BOX_TOP}",
                "║                                                                ║",
                "║          NETWORK TRAFFIC ANALYZER DASHBOARD                    ║",
                "║          Real-time Monitoring with OSI Layer View              ║",
                "║                                                                ║",
                f"{_BOX_BOTTOM}{Colors.RESET}",
                "",
                *self._traffic_stats(),
                *self._interface_stats(),
                *self._protocol_distribution(),
                *self._connections_section(top),
                *self._legend(),
            ]
        return "\n".join(lines) + "\n"

    def display(self, stream: TextIO | None = None) -> None:
        """Clear the terminal and draw the dashboard."""
        out = sys.stdout if stream is None else stream
        out.write(CLEAR_SCREEN + self.render())
        out.flush()