"""Command-line front end for the scanner stage."""

from __future__ import annotations

import argparse
import sys
import threading
from datetime import datetime
from typing import Any, Iterable, TextIO

import serial

from ucnscan.enumerator import DEFAULT_DEV_DIR, SerialEnumerator
from ucnscan.scanner import Scanner, ScannerError, finish_time, scan_duration

DEFAULT_PORT = "/dev/ttyACM0"
BAUD_RATE = 9600
SEPARATOR = "==================================="

HELP = (
    "commands: scan SPACING TIME | move X Y | home | stop | "
    "x+ | x- | y+ | y- | pos | help | quit"
)


def _open_port(device: str) -> Any:
    return serial.Serial(
        port=device,
        baudrate=BAUD_RATE,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=False,
        timeout=0,
    )


def _print_ports(dev_dir: str, out: TextIO) -> None:
    print("List of ports:", file=out)
    for info in SerialEnumerator(dev_dir).get_ports():
        print(f"port name: {info.port_name}", file=out)
        print(f"friendly name: {info.friend_name}", file=out)
        print(f"physical name: {info.phys_name}", file=out)
        print(f"enumerator name: {info.enum_name}", file=out)
        print(f"vendor ID: {info.vendor_id}", file=out)
        print(f"product ID: {info.product_id}", file=out)
        print(SEPARATOR, file=out)


def _numbers(args: list[str], count: int) -> list[float]:
    if len(args) != count:
        raise ValueError(f"expected {count} numbers")
    return [float(a) for a in args]


def _scan_worker(scanner: Scanner, spacing: float, timing: float,
                 out: TextIO, err: TextIO) -> None:
    try:
        estimate = scanner.run_scan(spacing, timing)
    except (ScannerError, ValueError) as exc:
        print(f"Error: {exc}", file=err)
    else:
        print(f"Scan finished (estimated end {estimate})", file=out)


def _run_console(scanner: Scanner, lines: Iterable[str], out: TextIO, err: TextIO) -> int:
    scan_thread: threading.Thread | None = None

    def show() -> None:
        x, y = scanner.position_cm()
        print(f"X: {x:.3f} cm  Y: {y:.3f} cm", file=out)

    steps = {
        "x-": scanner.step_x_back,
        "y-": scanner.step_y_back,
        "x+": scanner.step_x_forward,
        "y+": scanner.step_y_forward,
    }

    for raw in lines:
        words = raw.split()
        if not words:
            continue
        name, args = words[0].lower(), words[1:]
        try:
            if name in ("quit", "exit"):
                break
            if name == "help":
                print(HELP, file=out)
            elif name == "pos":
                show()
            elif name in steps:
                steps[name]()
                show()
            elif name == "home":
                scanner.return_home()
                show()
            elif name == "move":
                x, y = _numbers(args, 2)
                scanner.update_position(x, y)
                show()
            elif name == "stop":
                scanner.stop()
                show()
            elif name == "scan":
                if scan_thread is not None and scan_thread.is_alive():
                    print("Error: a scan is already running", file=err)
                    continue
                spacing, timing = _numbers(args, 2)
                minutes = scan_duration(spacing, timing)
                print(f"Scan started, estimated time {minutes:.3f} min", file=out)
                scan_thread = threading.Thread(
                    target=_scan_worker,
                    args=(scanner, spacing, timing, out, err),
                    daemon=True,
                )
                scan_thread.start()
            else:
                print(f"Unknown command: {name}", file=err)
        except (ScannerError, ValueError) as exc:
            print(f"Error: {exc}", file=err)
    return 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ucnscan", description="Drive the scanner stage.")
    parser.add_argument("--port", default=DEFAULT_PORT, help="serial device of the controller")
    sub = parser.add_subparsers(dest="command")

    ports = sub.add_parser("ports", help="list serial ports")
    ports.add_argument("--dev-dir", default=DEFAULT_DEV_DIR)

    estimate = sub.add_parser("estimate", help="estimate scan time")
    estimate.add_argument("spacing", type=float, help="sample spacing in cm")
    estimate.add_argument("sample_time", type=float, help="time per sample in s")

    sub.add_parser("console", help="interactive control (default)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)

    if args.command == "ports":
        _print_ports(args.dev_dir, sys.stdout)
        return 0

    if args.command == "estimate":
        try:
            minutes = scan_duration(args.spacing, args.sample_time)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print(f"Estimated scan time: {minutes:.3f} min")
        print(f"Estimated end: {finish_time(datetime.now(), minutes)}")
        return 0

    try:
        port = _open_port(args.port)
    except serial.SerialException:
        print("PORT ERROR: Arduino port could not be opened!", file=sys.stderr)
        return 1
    try:
        return _run_console(Scanner(port), sys.stdin, sys.stdout, sys.stderr)
    finally:
        port.close()


if __name__ == "__main__":
    sys.exit(main())