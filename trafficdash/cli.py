"""Command-line entry point for the traffic monitor."""

from __future__ import annotations

import re
import signal
import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, TextIO

from trafficdash.capture import CaptureError, MultiMonitor, NetworkMonitor, list_interfaces
from trafficdash.dashboard import Dashboard

DASHBOARD_STARTUP_DELAY = 2.0
DASHBOARD_REFRESH = 1.0

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_HELP_TEXT = """\
Network Analyzer - Real-time network traffic monitor

Usage:
  trafficdash [OPTIONS] [INTERFACE]

Options:
  -d, --dashboard        Enable dashboard mode with visualizations
  -l, --list             List all available network interfaces
  -i, --interactive      Interactive interface selection
  -m, --multi            Multi-interface mode (specify interfaces with --interfaces)
  --interfaces <list>    Comma-separated list of interfaces for multi-mode
  -h, --help             Show this help message

Examples:
  trafficdash                                # Use default interface
  trafficdash eth0                           # Monitor specific interface
  trafficdash --dashboard                    # Dashboard mode with default interface
  trafficdash -i                             # Interactive interface selection
  trafficdash --list                         # List available interfaces
  trafficdash -m --interfaces eth0,lo        # Monitor multiple interfaces
  trafficdash -m -d --interfaces eth0,docker0  # Multi-interface with dashboard

"""


@dataclass
class Options:
    """Settings taken from the command line."""

    dashboard: bool = False
    interactive: bool = False
    list_interfaces: bool = False
    multi: bool = False
    interface_list: str = ""
    device: str | None = None
    help: bool = False


def parse_args(argv: Sequence[str]) -> Options:
    """Read command-line arguments; parsing stops at the first help flag."""
    options = Options()
    args = list(argv)
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in ("--dashboard", "-d"):
            options.dashboard = True
        elif arg in ("--interactive", "-i"):
            options.interactive = True
        elif arg in ("--list", "-l"):
            options.list_interfaces = True
        elif arg in ("--multi", "-m"):
            options.multi = True
        elif arg == "--interfaces" and index + 1 < len(args):
            index += 1
            options.interface_list = args[index]
        elif arg in ("--help", "-h"):
            options.help = True
            break
        elif options.device is None:
            options.device = arg
        index += 1
    return options


def parse_interface_list(text: str) -> list[str]:
    """Split a comma-separated interface list, trimming blanks and dropping empties."""
    names = (token.strip(" \t") for token in text.split(","))
    return [name for name in names if name]


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        return None
    return value


def _first_word(line: str) -> str:
    words = line.split()
    return words[0] if words else ""


def _out(stream: TextIO | None) -> TextIO:
    return sys.stdout if stream is None else stream


def _err(errors: TextIO | None) -> TextIO:
    return sys.stderr if errors is None else errors


def parse_selection(
    text: str, interfaces: Sequence[str], errors: TextIO | None = None
) -> list[str]:
    """Turn a comma-separated list of 1-based numbers into interface names.

    Numbers out of range and tokens that are not numbers are reported on
    ``errors`` and skipped.
    """
    err = _err(errors)
    tokens = text.split(",")
    if tokens and tokens[-1] == "":
        tokens.pop()
    selected = []
    for token in tokens:
        choice = _leading_int(token)
        if choice is None:
            print(f"Warning: Invalid input '{token}' ignored.", file=err)
        elif 1 <= choice <= len(interfaces):
            selected.append(interfaces[choice - 1])
        else:
            print(f"Warning: Invalid selection {choice} ignored.", file=err)
    return selected


def show_help(stream: TextIO | None = None) -> None:
    """Print usage information."""
    _out(stream).write(_HELP_TEXT)


def _write_numbered(interfaces: Iterable[str], out: TextIO) -> None:
    for number, name in enumerate(interfaces, start=1):
        print(f"  {number}. {name}", file=out)


def print_interfaces(interfaces: Sequence[str], stream: TextIO | None = None) -> None:
    """Print a numbered list of interfaces."""
    out = _out(stream)
    print("Available network interfaces:", file=out)
    print(file=out)
    if not interfaces:
        print("No network interfaces found.", file=out)
        return
    _write_numbered(interfaces, out)
    print(file=out)


def _prompt(
    interfaces: Sequence[str],
    prompt: str,
    input_func: Callable[[], str],
    out: TextIO,
) -> str:
    print("Available network interfaces:", file=out)
    print(file=out)
    _write_numbered(interfaces, out)
    print(file=out)
    out.write(prompt)
    out.flush()
    try:
        return _first_word(input_func())
    except EOFError:
        return ""


def select_interface(
    interfaces: Sequence[str],
    input_func: Callable[[], str] = input,
    stream: TextIO | None = None,
    errors: TextIO | None = None,
) -> str | None:
    """Ask the user to pick one interface; None if nothing valid was chosen."""
    err = _err(errors)
    if not interfaces:
        print("No network interfaces found.", file=err)
        return None
    answer = _prompt(
        interfaces,
        f"Select interface (1-{len(interfaces)}): ",
        input_func,
        _out(stream),
    )
    choice = _leading_int(answer)
    if choice is None or not 1 <= choice <= len(interfaces):
        print("Invalid selection.", file=err)
        return None
    return interfaces[choice - 1]


def select_multiple_interfaces(
    interfaces: Sequence[str],
    input_func: Callable[[], str] = input,
    stream: TextIO | None = None,
    errors: TextIO | None = None,
) -> list[str]:
    """Ask the user to pick several interfaces by number."""
    err = _err(errors)
    if not interfaces:
        print("No network interfaces found.", file=err)
        return []
    answer = _prompt(
        interfaces,
        "Select interfaces (comma-separated, e.g., 1,3,4): ",
        input_func,
        _out(stream),
    )
    selected = parse_selection(answer, interfaces, err)
    if not selected:
        print("No valid interfaces selected.", file=err)
    return selected


def _run_with_dashboard(dashboard: Dashboard, capture: Callable[[], object]) -> None:
    print("Initializing dashboard in 2 seconds...")
    time.sleep(DASHBOARD_STARTUP_DELAY)
    finished = threading.Event()

    def refresh() -> None:
        while not finished.is_set():
            dashboard.display()
            finished.wait(DASHBOARD_REFRESH)

    painter = threading.Thread(target=refresh, daemon=True)
    painter.start()
    try:
        capture()
    finally:
        finished.set()
        painter.join()


def _run_multi(options: Options) -> int:
    if options.interface_list:
        interfaces = parse_interface_list(options.interface_list)
    elif options.interactive:
        interfaces = select_multiple_interfaces(list_interfaces())
    else:
        print(
            "Multi-interface mode requires --interfaces or --interactive flag",
            file=sys.stderr,
        )
        print("Use --help for more information", file=sys.stderr)
        return 1

    if not interfaces:
        print("No interfaces specified for monitoring", file=sys.stderr)
        return 1

    monitor = MultiMonitor(interfaces, options.dashboard)
    try:
        if options.dashboard:
            dashboard = Dashboard()
            monitor.set_dashboard(dashboard)
            print(
                "Starting multi-interface monitor with dashboard... "
                "(Press Ctrl+C to stop)"
            )
            _run_with_dashboard(dashboard, monitor.start_capture)
        else:
            print("Starting multi-interface monitor... (Press Ctrl+C to stop)")
            print("Tip: Use --dashboard flag for visual dashboard mode")
            monitor.start_capture()
    finally:
        monitor.stop_capture()
    return 0


def _run_single(options: Options) -> int:
    device = options.device
    if options.interactive:
        device = select_interface(list_interfaces())
        if device is None:
            return 1

    if device is None:
        interfaces = list_interfaces()
        if not interfaces:
            print("No network interfaces found", file=sys.stderr)
            return 2
        device = interfaces[0]
        print(f"Using default device: {device}")

    try:
        monitor = NetworkMonitor(device, options.dashboard)
    except CaptureError as exc:
        print(exc, file=sys.stderr)
        return 1

    with monitor:
        if options.dashboard:
            dashboard = Dashboard()
            monitor.set_dashboard(dashboard)
            print("Starting network monitor with dashboard... (Press Ctrl+C to stop)")
            _run_with_dashboard(dashboard, lambda: monitor.start_capture(-1))
        else:
            print("Starting network monitor... (Press Ctrl+C to stop)")
            print("Tip: Use --dashboard flag for visual dashboard mode")
            print("     Use --help for more options")
            monitor.start_capture(-1)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the monitor; returns the process exit status."""
    options = parse_args(sys.argv[1:] if argv is None else argv)

    if options.help:
        show_help()
        return 0

    if options.list_interfaces:
        print_interfaces(list_interfaces())
        return 0

    try:
        if options.multi:
            return _run_multi(options)
        return _run_single(options)
    except KeyboardInterrupt:
        signum = int(signal.SIGINT)
        print(f"\nInterrupt signal ({signum}) received.")
        print("Stopping packet capture...")
        return signum


if __name__ == "__main__":
    sys.exit(main())