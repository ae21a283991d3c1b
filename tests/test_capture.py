import io
import struct
import threading

import pytest

from trafficdash.capture import CaptureError, MultiMonitor, NetworkMonitor, list_interfaces
from trafficdash.dashboard import Dashboard
from trafficdash.packets import format_packet


def make_frame(protocol=6, src=(10, 0, 0, 1), dst=(10, 0, 0, 2), ports=(1234, 80)):
    ethernet = bytes(14)
    ip = bytes([0x45, 0, 0, 40, 0, 0, 0, 0, 64, protocol, 0, 0]) + bytes(src) + bytes(dst)
    return ethernet + ip + struct.pack("!HH", *ports) + bytes(16)


class FakeSource:
    def __init__(self, frames, on_exhausted=None):
        self.frames = list(frames)
        self.closed = False
        self.on_exhausted = on_exhausted

    def read(self):
        if self.frames:
            return self.frames.pop(0)
        if self.on_exhausted is not None:
            self.on_exhausted()
        return None

    def close(self):
        self.closed = True


def monitor_with(frames, device="eth0", stream=None):
    source = FakeSource(frames)
    monitor = NetworkMonitor(device, False, lambda dev: source, stream or io.StringIO())
    return monitor, source


def test_init_announces_device():
    out = io.StringIO()
    monitor_with([], device="wlan0", stream=out)
    assert out.getvalue() == "Sniffing on device: wlan0\n"


def test_open_failure_raises_capture_error():
    def failing(device):
        raise OSError("permission denied")

    with pytest.raises(CaptureError, match="Couldn't open device eth9"):
        NetworkMonitor("eth9", False, failing, io.StringIO())


def test_handle_frame_prints_packet():
    out = io.StringIO()
    monitor, _ = monitor_with([], stream=out)
    info = monitor.handle_frame(make_frame())
    assert info.protocol == "TCP"
    assert info.source_port == 1234
    assert info.interface_name == "eth0"
    assert out.getvalue().splitlines()[-1] == format_packet(info)


def test_handle_frame_feeds_dashboard_instead_of_printing():
    out = io.StringIO()
    monitor, _ = monitor_with([], stream=out)
    dashboard = Dashboard(clock=lambda: 0.0)
    monitor.set_dashboard(dashboard)
    monitor.handle_frame(make_frame(protocol=17))
    assert dashboard.total_packets == 1
    assert dashboard.protocol_counts["UDP"] == 1
    assert dashboard.interface_counts["eth0"] == 1
    assert out.getvalue().count("\n") == 1


def test_handle_frame_skips_short_frame():
    monitor, _ = monitor_with([])
    assert monitor.handle_frame(b"\x00" * 10) is None


def test_start_capture_stops_after_count():
    frames = [make_frame(), make_frame(protocol=1), make_frame()]
    monitor, source = monitor_with(frames)
    dashboard = Dashboard(clock=lambda: 0.0)
    monitor.set_dashboard(dashboard)
    assert monitor.start_capture(2) == 2
    assert dashboard.total_packets == 2
    assert len(source.frames) == 1


def test_start_capture_runs_until_stopped():
    source = FakeSource([make_frame()] * 3)
    monitor = NetworkMonitor("eth0", False, lambda dev: source, io.StringIO())
    source.on_exhausted = monitor.stop
    dashboard = Dashboard(clock=lambda: 0.0)
    monitor.set_dashboard(dashboard)
    assert monitor.start_capture(-1) == 3
    assert dashboard.total_packets == 3


def test_stop_from_another_thread():
    monitor, _ = monitor_with([])
    thread = threading.Thread(target=monitor.start_capture, args=(-1,))
    thread.start()
    monitor.stop()
    thread.join(timeout=5)
    assert not thread.is_alive()


def test_close_releases_source_and_forbids_capture():
    monitor, source = monitor_with([make_frame()])
    with monitor:
        pass
    assert source.closed
    with pytest.raises(CaptureError):
        monitor.start_capture(1)


def test_list_interfaces_returns_names():
    names = list_interfaces()
    assert all(isinstance(name, str) and name for name in names)


def test_multi_monitor_announces_interfaces():
    out = io.StringIO()
    MultiMonitor(["eth0", "lo"], False, None, out)
    assert out.getvalue().splitlines() == [
        "Initializing multi-interface monitoring for:",
        "  - eth0",
        "  - lo",
    ]


def test_multi_monitor_shares_dashboard_across_interfaces():
    out = io.StringIO()
    sources = {}

    def factory(device, use_dashboard):
        source = FakeSource([make_frame(), make_frame(protocol=17)])
        monitor = NetworkMonitor(device, use_dashboard, lambda dev: source, out)
        source.on_exhausted = monitor.stop
        sources[device] = source
        return monitor

    multi = MultiMonitor(["eth0", "lo"], True, factory, out)
    dashboard = Dashboard(clock=lambda: 0.0)
    multi.set_dashboard(dashboard)
    multi.start_capture()
    assert dashboard.total_packets == 4
    assert dict(dashboard.interface_counts) == {"eth0": 2, "lo": 2}
    assert all(source.closed for source in sources.values())
    assert multi.running is False


def test_multi_monitor_reports_thread_error(capsys):
    def factory(device, use_dashboard):
        raise CaptureError(f"Couldn't open device {device}: boom")

    multi = MultiMonitor(["bad0"], False, factory, io.StringIO())
    multi.start_capture()
    err = capsys.readouterr().err
    assert "Error in capture thread for bad0" in err


def test_multi_monitor_empty_interfaces_warns(capsys):
    MultiMonitor([], False, None, io.StringIO())
    assert "No interfaces specified" in capsys.readouterr().err


def test_stop_capture_without_running_is_silent():
    out = io.StringIO()
    multi = MultiMonitor(["eth0"], False, None, out)
    before = out.getvalue()
    multi.stop_capture()
    assert out.getvalue() == before


def test_stop_capture_ends_running_threads():
    out = io.StringIO()
    started = threading.Event()

    class StartingSource(FakeSource):
        def read(self):
            started.set()
            return super().read()

    def factory(device, use_dashboard):
        return NetworkMonitor(device, use_dashboard, lambda dev: StartingSource([]), out)

    multi = MultiMonitor(["eth0"], False, factory, out)
    thread = threading.Thread(target=multi.start_capture)
    thread.start()
    assert started.wait(timeout=5)
    multi.stop_capture()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert "Stopping capture on all interfaces..." in out.getvalue()