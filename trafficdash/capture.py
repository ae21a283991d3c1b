"""Live packet capture on one or several network interfaces."""

from __future__ import annotations

import socket
import struct
import sys
import threading
from typing import Callable, Iterable, Protocol, TextIO

from trafficdash.dashboard import Dashboard
from trafficdash.packets import PacketInfo, PacketParseError, format_packet, parse_packet

SNAPSHOT_LENGTH = 65535
READ_TIMEOUT = 1.0

_ETH_P_ALL = 0x0003
_SOL_PACKET = 263
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1


class CaptureError(OSError):
    """Raised when a capture device cannot be opened."""


class FrameSource(Protocol):
    """Something frames can be read from, one at a time."""

    def read(self) -> bytes | None:
        """Return the next frame, or None when the read timed out."""

    def close(self) -> None:
        """Release the underlying device."""


class _RawSocketSource:
    """Frames read from a link-layer raw socket in promiscuous mode."""

    def __init__(self, device: str) -> None:
        family = getattr(socket, "AF_PACKET", None)
        if family is None:
            raise OSError("link-layer capture is not supported on this platform")
        self._sock = socket.socket(family, socket.SOCK_RAW, socket.ntohs(_ETH_P_ALL))
        try:
            self._sock.bind((device, 0))
            self._sock.settimeout(READ_TIMEOUT)
            self._enable_promiscuous(device)
        except OSError:
            self._sock.close()
            raise

    def _enable_promiscuous(self, device: str) -> None:
        try:
            request = struct.pack(
                "iHH8s", socket.if_nametoindex(device), _PACKET_MR_PROMISC, 0, b""
            )
            self._sock.setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, request)
        except OSError:
            pass

    def read(self) -> bytes | None:
        try:
            return self._sock.recv(SNAPSHOT_LENGTH)
        except socket.timeout:
            return None

    def close(self) -> None:
        self._sock.close()


def list_interfaces() -> list[str]:
    """Names of the network interfaces on this host; empty if none can be found."""
    try:
        return [name for _, name in socket.if_nameindex()]
    except OSError as exc:
        print(f"Error finding devices: {exc}", file=sys.stderr)
        return []


class NetworkMonitor:
    """Captures frames on one interface and reports each packet."""

    def __init__(
        self,
        device: str,
        use_dashboard: bool = False,
        opener: Callable[[str], FrameSource] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.device = device
        self.use_dashboard = use_dashboard
        self.dashboard: Dashboard | None = None
        self._stream = stream
        self._stop = threading.Event()
        open_source = _RawSocketSource if opener is None else opener
        try:
            self._source: FrameSource | None = open_source(device)
        except OSError as exc:
            raise CaptureError(f"Couldn't open device {device}: {exc}") from exc
        self._print(f"Sniffing on device: {device}")

    def _print(self, text: str) -> None:
        out = sys.stdout if self._stream is None else self._stream
        print(text, file=out)

    def __enter__(self) -> "NetworkMonitor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def set_dashboard(self, dashboard: Dashboard | None) -> None:
        """Send packets to ``dashboard`` instead of printing them."""
        self.dashboard = dashboard

    def handle_frame(self, frame: bytes) -> PacketInfo | None:
        """Decode one frame and report it; malformed frames are skipped."""
        try:
            info = parse_packet(frame, len(frame), self.device)
        except PacketParseError:
            return None
        if self.dashboard is not None:
            self.dashboard.update_packet(info)
        else:
            self._print(format_packet(info))
        return info

    def start_capture(self, packet_count: int = -1) -> int:
        """Capture until ``packet_count`` frames are read (forever if <= 0) or stopped.

        Returns the number of frames read.
        """
        if self._source is None:
            raise CaptureError(f"device {self.device} is closed")
        self._stop.clear()
        seen = 0
        while not self._stop.is_set():
            if packet_count > 0 and seen >= packet_count:
                break
            frame = self._source.read()
            if frame is None:
                continue
            seen += 1
            self.handle_frame(frame)
        return seen

    def stop(self) -> None:
        """Ask a running capture loop to finish."""
        self._stop.set()

    def close(self) -> None:
        """Stop capturing and release the device."""
        self.stop()
        if self._source is not None:
            self._source.close()
            self._source = None


MonitorFactory = Callable[[str, bool], NetworkMonitor]


class MultiMonitor:
    """Runs one capture thread per interface, all feeding the same dashboard."""

    def __init__(
        self,
        interfaces: Iterable[str],
        use_dashboard: bool = False,
        monitor_factory: MonitorFactory | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.interfaces = list(interfaces)
        self.use_dashboard = use_dashboard
        self.dashboard: Dashboard | None = None
        self._stream = stream
        self._factory = monitor_factory or self._default_factory
        self._lock = threading.Lock()
        self._monitors: list[NetworkMonitor] = []
        self._threads: list[threading.Thread] = []
        self.running = False

        if not self.interfaces:
            print(
                "No interfaces specified for multi-interface monitoring",
                file=sys.stderr,
            )
            return
        self._print("Initializing multi-interface monitoring for:")
        for iface in self.interfaces:
            self._print(f"  - {iface}")

    def _default_factory(self, device: str, use_dashboard: bool) -> NetworkMonitor:
        return NetworkMonitor(device, use_dashboard, stream=self._stream)

    def _print(self, text: str) -> None:
        out = sys.stdout if self._stream is None else self._stream
        print(text, file=out)

    def set_dashboard(self, dashboard: Dashboard | None) -> None:
        """Share ``dashboard`` with every interface's monitor."""
        self.dashboard = dashboard

    def _capture_thread(self, interface_name: str) -> None:
        monitor = None
        try:
            monitor = self._factory(interface_name, self.use_dashboard)
            if self.dashboard is not None:
                monitor.set_dashboard(self.dashboard)
            with self._lock:
                if not self.running:
                    return
                self._monitors.append(monitor)
            monitor.start_capture(-1)
        except Exception as exc:  # one failing interface must not stop the others
            print(
                f"Error in capture thread for {interface_name}: {exc}",
                file=sys.stderr,
            )
        finally:
            if monitor is not None:
                with self._lock:
                    if monitor in self._monitors:
                        self._monitors.remove(monitor)
                monitor.close()

    def start_capture(self) -> None:
        """Capture on all interfaces, blocking until every thread has finished."""
        with self._lock:
            if self.running:
                print("Capture already running", file=sys.stderr)
                return
            self.running = True
        try:
            self._print(f"Starting capture on {len(self.interfaces)} interface(s)...")
            self._threads = [
                threading.Thread(
                    target=self._capture_thread, args=(iface,), daemon=True
                )
                for iface in self.interfaces
            ]
            for thread in self._threads:
                thread.start()
            for thread in self._threads:
                thread.join()
        finally:
            with self._lock:
                self.running = False
            self._threads = []

    def stop_capture(self) -> None:
        """Ask every running capture thread to finish."""
        with self._lock:
            if not self.running:
                return
            self.running = False
            monitors = list(self._monitors)
        self._print("Stopping capture on all interfaces...")
        for monitor in monitors:
            monitor.stop()