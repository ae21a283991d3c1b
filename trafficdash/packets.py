"""Decoding of captured Ethernet/IPv4 frames into packet summaries."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass

ETHERNET_HEADER_LEN = 14
IPV4_MIN_HEADER_LEN = 20

TCP = "TCP"
UDP = "UDP"
ICMP = "ICMP"
OTHER = "Other"

_PROTOCOL_NUMBERS = {6: TCP, 17: UDP, 1: ICMP}
_PORT_PROTOCOLS = frozenset({TCP, UDP})


class PacketParseError(ValueError):
    """Raised when a frame is too short to hold the headers being read."""


@dataclass(frozen=True)
class PacketInfo:
    """Summary of one captured packet."""

    source_ip: str
    dest_ip: str
    source_port: int
    dest_port: int
    protocol: str
    length: int
    interface_name: str = ""


def parse_packet(
    frame: bytes, length: int | None = None, interface_name: str = ""
) -> PacketInfo:
    """Decode an Ethernet frame carrying IPv4 into a PacketInfo.

    ``length`` is the length of the packet on the wire; it defaults to the
    size of the captured frame.
    """
    data = bytes(frame)
    ip_start = ETHERNET_HEADER_LEN
    if len(data) < ip_start + IPV4_MIN_HEADER_LEN:
        raise PacketParseError(
            f"frame of {len(data)} bytes is too short for an IPv4 header"
        )

    header_len = (data[ip_start] & 0x0F) * 4
    protocol = _PROTOCOL_NUMBERS.get(data[ip_start + 9], OTHER)
    source_ip = str(ipaddress.IPv4Address(data[ip_start + 12 : ip_start + 16]))
    dest_ip = str(ipaddress.IPv4Address(data[ip_start + 16 : ip_start + 20]))

    source_port = dest_port = 0
    if protocol in _PORT_PROTOCOLS:
        ports_at = ip_start + header_len
        if len(data) < ports_at + 4:
            raise PacketParseError(
                f"frame of {len(data)} bytes is too short for {protocol} ports"
            )
        source_port, dest_port = struct.unpack_from("!HH", data, ports_at)

    return PacketInfo(
        source_ip=source_ip,
        dest_ip=dest_ip,
        source_port=source_port,
        dest_port=dest_port,
        protocol=protocol,
        length=len(data) if length is None else length,
        interface_name=interface_name,
    )


def format_packet(info: PacketInfo) -> str:
    """Render a one-line, human-readable description of a packet."""
    return (
        f"[{info.interface_name}] "
        f"Packet captured. Length: {info.length} | "
        f"Protocol: {info.protocol} | "
        f"From: {info.source_ip}:{info.source_port} -> "
        f"To: {info.dest_ip}:{info.dest_port}"
    )