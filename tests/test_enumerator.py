from pathlib import Path

import pytest

from ucnscan.enumerator import PortInfo, SerialEnumerator, friendly_name, list_ports


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"")


def test_friendly_name_serial():
    assert friendly_name("ttyS0") == "Serial port 0"


def test_friendly_name_usb_and_bluetooth():
    assert friendly_name("ttyUSB3") == "USB-serial adapter 3"
    assert friendly_name("rfcomm1") == "Bluetooth-serial adapter 1"


def test_friendly_name_acm_is_empty():
    assert friendly_name("ttyACM0") == ""


def test_standard_ports_come_first(tmp_path):
    _touch(tmp_path, "ttyUSB0", "ttyS1", "ttyACM0", "ttyS0", "rfcomm0")
    names = [p.port_name for p in list_ports(tmp_path)]
    assert names == ["ttyS0", "ttyS1", "ttyACM0", "ttyUSB0", "rfcomm0"]


def test_non_numeric_standard_names_are_dropped(tmp_path):
    _touch(tmp_path, "ttySa", "ttyS", "ttyS2", "null", "tty0")
    names = [p.port_name for p in list_ports(tmp_path)]
    assert names == ["ttyS2"]


def test_directories_are_ignored(tmp_path):
    (tmp_path / "ttyUSB9").mkdir()
    _touch(tmp_path, "ttyUSB1")
    assert [p.port_name for p in list_ports(tmp_path)] == ["ttyUSB1"]


def test_port_info_fields(tmp_path):
    _touch(tmp_path, "ttyS0")
    (info,) = list_ports(tmp_path)
    assert info.phys_name == str(tmp_path / "ttyS0")
    assert info.enum_name == str(tmp_path)
    assert info.friend_name == "Serial port 0"
    assert (info.vendor_id, info.product_id) == (0, 0)


def test_missing_directory_gives_no_ports(tmp_path):
    assert list_ports(tmp_path / "absent") == []


def test_get_ports_matches_list_ports(tmp_path):
    _touch(tmp_path, "ttyACM0", "ttyS4")
    assert SerialEnumerator(tmp_path).get_ports() == list_ports(tmp_path)


def test_set_up_notifications_reports_existing(tmp_path):
    _touch(tmp_path, "ttyACM0", "ttyS0")
    enumerator = SerialEnumerator(tmp_path)
    seen: list[PortInfo] = []
    enumerator.on_discovered(seen.append)
    assert enumerator.set_up_notifications() is True
    assert [p.port_name for p in seen] == ["ttyS0", "ttyACM0"]


def test_set_up_notifications_fails_without_directory(tmp_path):
    enumerator = SerialEnumerator(tmp_path / "absent")
    assert enumerator.set_up_notifications() is False
    assert enumerator.notifying is False


def test_poll_reports_changes(tmp_path):
    _touch(tmp_path, "ttyS0")
    enumerator = SerialEnumerator(tmp_path)
    discovered: list[PortInfo] = []
    removed: list[PortInfo] = []
    enumerator.on_discovered(discovered.append)
    enumerator.on_removed(removed.append)
    enumerator.set_up_notifications()
    discovered.clear()

    _touch(tmp_path, "ttyUSB0")
    (tmp_path / "ttyS0").unlink()
    added, gone = enumerator.poll()

    assert [p.port_name for p in added] == ["ttyUSB0"]
    assert [p.port_name for p in gone] == ["ttyS0"]
    assert discovered == added
    assert removed == gone


def test_poll_without_changes_is_quiet(tmp_path):
    _touch(tmp_path, "ttyS0")
    enumerator = SerialEnumerator(tmp_path)
    enumerator.set_up_notifications()
    assert enumerator.poll() == ([], [])


def test_poll_requires_setup(tmp_path):
    with pytest.raises(RuntimeError):
        SerialEnumerator(tmp_path).poll()