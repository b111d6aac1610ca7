"""Discovery of serial ports present on the system."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DEV_DIR = "/dev"

_STANDARD_PATTERNS = ("ttyS*",)
_EXTRA_PATTERNS = ("ttyACM*", "ttyUSB*", "rfcomm*")

# Substring looked for in a device name, the friendly prefix, and how many
# leading characters of the name are dropped before the prefix is added.
_FRIENDLY = (
    ("ttyS", "Serial port ", 4),
    ("ttyUSB", "USB-serial adapter ", 6),
    ("rfcomm", "Bluetooth-serial adapter ", 6),
)


@dataclass(frozen=True)
class PortInfo:
    """Information about one serial port."""

    port_name: str = ""
    phys_name: str = ""
    friend_name: str = ""
    enum_name: str = ""
    vendor_id: int = 0
    product_id: int = 0


PortCallback = Callable[[PortInfo], None]


def friendly_name(name: str) -> str:
    """Return a human-readable description of a device name, or ''."""
    for marker, prefix, cut in _FRIENDLY:
        if marker in name:
            return prefix + name[cut:]
    return ""


def _matches(name: str, patterns: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(fnmatch.fnmatchcase(lowered, p.lower()) for p in patterns)


def _entries(directory: Path, patterns: tuple[str, ...]) -> list[str]:
    try:
        with os.scandir(directory) as it:
            names = [
                entry.name
                for entry in it
                if not _is_dir(entry) and _matches(entry.name, patterns)
            ]
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return []
    return sorted(names)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _has_numeric_suffix(name: str) -> bool:
    try:
        int(name[4:], 10)
    except ValueError:
        return False
    return True


def list_ports(dev_dir: str | os.PathLike = DEFAULT_DEV_DIR) -> list[PortInfo]:
    """List serial ports found in ``dev_dir``.

    Standard ``ttyS<n>`` ports come first, followed by USB, ACM and
    Bluetooth serial devices, each block sorted by name.
    """
    directory = Path(dev_dir)
    names = [n for n in _entries(directory, _STANDARD_PATTERNS) if _has_numeric_suffix(n)]
    names += _entries(directory, _EXTRA_PATTERNS)
    enum_name = str(directory)
    return [
        PortInfo(
            port_name=name,
            phys_name=str(directory / name),
            friend_name=friendly_name(name),
            enum_name=enum_name,
        )
        for name in names
    ]


class SerialEnumerator:
    """Lists serial ports and reports ports appearing or disappearing.

    Notification works by polling: after :meth:`set_up_notifications`, each
    call to :meth:`poll` compares the current ports with the previous ones
    and invokes the registered callbacks for every change.
    """

    def __init__(self, dev_dir: str | os.PathLike = DEFAULT_DEV_DIR) -> None:
        self._dev_dir = Path(dev_dir)
        self._discovered: list[PortCallback] = []
        self._removed: list[PortCallback] = []
        self._known: dict[str, PortInfo] | None = None

    @property
    def dev_dir(self) -> Path:
        return self._dev_dir

    @property
    def notifying(self) -> bool:
        """True once notifications have been set up."""
        return self._known is not None

    def get_ports(self) -> list[PortInfo]:
        """Return the ports currently available."""
        return list_ports(self._dev_dir)

    def on_discovered(self, callback: PortCallback) -> PortCallback:
        """Register a callback for newly connected ports."""
        self._discovered.append(callback)
        return callback

    def on_removed(self, callback: PortCallback) -> PortCallback:
        """Register a callback for disconnected ports."""
        self._removed.append(callback)
        return callback

    def _emit(self, callbacks: list[PortCallback], info: PortInfo) -> None:
        for callback in callbacks:
            callback(info)

    def set_up_notifications(self) -> bool:
        """Start tracking ports, reporting those already connected.

        Returns False if the device directory cannot be read.
        """
        if not self._dev_dir.is_dir():
            logger.warning("Setup Notification Failed...")
            return False
        ports = self.get_ports()
        self._known = {p.phys_name: p for p in ports}
        for info in ports:
            self._emit(self._discovered, info)
        return True

    def poll(self) -> tuple[list[PortInfo], list[PortInfo]]:
        """Check for changes and return the (added, removed) ports."""
        if self._known is None:
            raise RuntimeError("notifications are not set up")
        current = {p.phys_name: p for p in self.get_ports()}
        added = [p for key, p in current.items() if key not in self._known]
        removed = [p for key, p in self._known.items() if key not in current]
        self._known = current
        for info in added:
            self._emit(self._discovered, info)
        for info in removed:
            self._emit(self._removed, info)
        return added, removed