"""Helpers for serial port information reported by the Windows device registry."""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Any, Iterable

from ucnscan.enumerator import PortInfo

_ID_PATTERN = re.compile(r"VID_(\w+)&PID_(\w+)")
_HEX_PATTERN = re.compile(r"[0-9A-F]+")
_DEC_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT_MAX = 2**31 - 1
_COM_PREFIX = "COM"


def _hex_or_zero(text: str) -> int:
    if not _HEX_PATTERN.fullmatch(text):
        return 0
    value = int(text, 16)
    return value if value <= _INT_MAX else 0


def _dec_or_zero(text: str) -> int:
    text = text.strip()
    if not _DEC_PATTERN.fullmatch(text):
        return 0
    value = int(text, 10)
    return value if -_INT_MAX - 1 <= value <= _INT_MAX else 0


def parse_hardware_ids(hardware_ids: str) -> tuple[int, int] | None:
    """Extract ``(vendor_id, product_id)`` from a device's hardware ids.

    Only the first of a null-separated list of ids is examined, and it is
    matched case-insensitively. Returns None when it carries no
    ``VID_xxxx&PID_xxxx`` pair; an id that is not valid hex becomes 0.
    """
    first = hardware_ids.split("\0", 1)[0].upper()
    match = _ID_PATTERN.search(first)
    if match is None:
        return None
    return _hex_or_zero(match.group(1)), _hex_or_zero(match.group(2))


def _compare(left: Any, right: Any) -> int:
    a: str = left.port_name
    b: str = right.port_name
    if a.startswith(_COM_PREFIX) and b.startswith(_COM_PREFIX):
        na = _dec_or_zero(a[len(_COM_PREFIX):])
        nb = _dec_or_zero(b[len(_COM_PREFIX):])
        return (na > nb) - (na < nb)
    return (a > b) - (a < b)


_KEY = cmp_to_key(_compare)


def port_sort_key(info: PortInfo) -> Any:
    """Sort key ordering COM ports by number and other ports by name."""
    return _KEY(info)


def sort_ports(ports: Iterable[PortInfo]) -> list[PortInfo]:
    """Return the ports ordered so that ``COM2`` comes before ``COM10``."""
    return sorted(ports, key=port_sort_key)


def normalize_device_id(device_id: str) -> str:
    """Upper-case a device interface name and turn ``#`` into backslashes."""
    return device_id.upper().replace("#", "\\")


def matches_device(device_id: str, instance_id: str) -> bool:
    """True if the normalized ``device_id`` contains ``instance_id``."""
    return instance_id in device_id