"""Control of the two-axis scanner stage over its serial link.

Every command is framed as ``<C,V1,V2>``, where ``C`` is a one-character
command code and ``V1``/``V2`` are numbers cut to five characters. Position
is kept in microsteps; the conversion factors below describe the stage's
lead screws.
"""

from __future__ import annotations

import logging
import math
import re
import struct
import threading
import time
from datetime import datetime
from datetime import time as clock_time
from enum import Enum
from typing import Any, Callable, Union

logger = logging.getLogger(__name__)

USTEPS = 32.0
RPM = 60.0
MAX_STEPS_LENGTH = 4214.8215  # 59 cm
MAX_STEPS_WIDTH = 1992.375  # 28 cm
STEPS_PER_CM_X = 71.0 + (15.0 / 32.0)
STEPS_PER_CM_Y = 71.0 + (5.0 / 32.0)
MAX_X_CM = 59.0
MAX_Y_CM = 28.0
MAX_VALUE_CHARS = 5
STEPS_PER_REVOLUTION = 200

SCAN_DONE = b"9"
IDLE_STOP = b"0"
IDLE_TIME = "00:00"

POLL_INTERVAL = 0.01
STOP_REPLY_DELAY = 0.03
POSITION_REPLY_DELAY = 1.2


class Command(str, Enum):
    """Command codes understood by the stage controller."""

    X_BACK = "1"
    Y_BACK = "2"
    X_FORWARD = "3"
    Y_FORWARD = "4"
    RUN_SCAN = "5"
    STOP = "6"
    UPDATE_POSITION = "7"
    RETURN_HOME = "8"


class ScannerError(Exception):
    """Raised when the stage refuses a request or the port is unusable."""


CommandLike = Union[Command, str]


def _float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", float(value)))[0]


def _command_char(command: CommandLike) -> str:
    code = command.value if isinstance(command, Command) else str(command)
    if len(code) != 1:
        raise ValueError(f"command must be a single character, got {code!r}")
    return code


def format_value(value: float) -> str:
    """Render a value the way the controller expects it: single precision,
    six decimals, cut to five characters."""
    return f"{_float32(value):f}"[:MAX_VALUE_CHARS]


def encode_command(command: CommandLike, value1: float, value2: float) -> bytes:
    """Build the framed message ``<C,V1,V2>`` for a command."""
    code = _command_char(command)
    text = f"<{code},{format_value(value1)},{format_value(value2)}>"
    return text.encode("ascii")


def cm_to_steps_x(cm: float) -> float:
    return cm * STEPS_PER_CM_X * USTEPS


def cm_to_steps_y(cm: float) -> float:
    return cm * STEPS_PER_CM_Y * USTEPS


def steps_to_cm_x(steps: float) -> float:
    return (steps / USTEPS) / STEPS_PER_CM_X


def steps_to_cm_y(steps: float) -> float:
    return (steps / USTEPS) / STEPS_PER_CM_Y


def scan_duration(spacing: float, sample_time: float) -> float:
    """Estimated length of a full raster scan, in minutes.

    ``spacing`` is the distance between samples in cm and ``sample_time``
    the dwell at each sample in seconds.
    """
    spacing = _float32(spacing)
    timing = _float32(sample_time)
    if not spacing > 0:
        raise ValueError("sample spacing must be positive")

    sec2min = timing / 60.0
    width_usteps = spacing * STEPS_PER_CM_Y * USTEPS
    length_usteps = spacing * STEPS_PER_CM_X * USTEPS
    min_per_rot = 1.0 / RPM
    per_rev = STEPS_PER_REVOLUTION * USTEPS

    rows = math.floor((MAX_STEPS_WIDTH * USTEPS) / width_usteps)
    time_out = (rows + 1) * sec2min + (min_per_rot * (width_usteps / per_rev)) * rows
    time_in = ((rows * width_usteps) / per_rev) * min_per_rot
    lines = (MAX_STEPS_LENGTH * USTEPS) / length_usteps
    time_up = lines * (length_usteps / per_rev) * min_per_rot
    return (time_out + time_in) * (lines + 1) + time_up


def finish_time(now: datetime | clock_time, run_minutes: float) -> str:
    """Clock reading ``H:M`` after ``run_minutes`` from ``now``.

    Hours are not wrapped at midnight and neither field is zero-padded.
    """
    minutes_now = now.hour * 60.0 + now.minute + now.second / 60.0
    total = minutes_now + run_minutes
    hour = int(total / 60)
    minute = int(((total / 60.0) - hour) * 60)
    return f"{hour}:{minute}"


_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"
)


def _atof(raw: bytes) -> float:
    match = _FLOAT_PREFIX.match(raw.decode("latin-1"))
    return float(match.group(0)) if match else 0.0


def parse_position_reply(data: bytes) -> tuple[float, float]:
    """Read the ``<X><Y>`` position report sent after a stop.

    Returns the two positions in microsteps. Text that does not start with
    a number reads as zero.
    """
    data = bytes(data)
    first = data.find(b">")
    if first < 1:
        raise ValueError("malformed position reply: missing X field")
    second = data.find(b">", first + 1)
    if second == -1 or second == first + 1:
        raise ValueError("malformed position reply: missing Y field")
    x_text = data[1:first]
    y_text = data[first + 2:second]
    return _atof(x_text), _atof(y_text)


class Scanner:
    """State and commands of the scanner stage.

    ``port`` is an open serial-port object with ``is_open``, ``in_waiting``,
    ``read`` and ``write``. The ``sleep`` and ``clock`` attributes may be
    replaced to control waiting and the time used for estimates.
    """

    def __init__(self, port: Any) -> None:
        self.port = port
        self.current_x = 0.0
        self.current_y = 0.0
        self.run_end = IDLE_TIME
        self.sleep: Callable[[float], None] = time.sleep
        self.clock: Callable[[], datetime] = datetime.now
        self._stop_requested = threading.Event()
        self._port_lock = threading.RLock()

    def position_cm(self) -> tuple[float, float]:
        """Current position in cm."""
        return steps_to_cm_x(self.current_x), steps_to_cm_y(self.current_y)

    def _is_open(self) -> bool:
        return bool(getattr(self.port, "is_open", False))

    def _read_all(self) -> bytes:
        return bytes(self.port.read(self.port.in_waiting))

    def transmit(self, command: CommandLike, value1: float, value2: float) -> bytes:
        """Send one framed command and return the bytes written."""
        message = encode_command(command, value1, value2)
        with self._port_lock:
            if not self._is_open():
                raise ScannerError("Arduino port is not open!")
            self.port.write(message)
        return message

    def run_scan(self, spacing: float, sample_time: float) -> str:
        """Start a scan from home and wait until the controller reports the
        end or :meth:`stop` is called. Returns the estimated finish time."""
        self._stop_requested.clear()
        estimate = finish_time(self.clock(), scan_duration(spacing, sample_time))
        self.run_end = estimate

        if self.current_x != 0 or self.current_y != 0:
            raise ScannerError("You must start at home (0,0)!!")
        if _float32(spacing) > MAX_Y_CM:
            raise ScannerError("Sample spacing must be less than 28.000 cm")

        self.transmit(Command.RUN_SCAN, spacing, sample_time)
        self.current_x = 0.0
        self.current_y = 0.0
        try:
            while True:
                with self._port_lock:
                    if self._stop_requested.is_set():
                        break
                    if self._is_open():
                        reply = self._read_all()
                        logger.debug("scan reply: %r", reply)
                        if reply[:1] == SCAN_DONE:
                            break
                self.sleep(POLL_INTERVAL)
        finally:
            self.run_end = IDLE_TIME
        return estimate

    def update_position(self, x_cm: float, y_cm: float) -> None:
        """Move the stage to an absolute position in cm."""
        if x_cm < 0 or y_cm < 0:
            raise ScannerError("New position must be greater than or equal to (0,0)!!")
        if x_cm > MAX_X_CM or y_cm > MAX_Y_CM:
            raise ScannerError(
                "New position must be less than 59.000 cm for X and 28.000 cm for Y!"
            )
        self.transmit(Command.UPDATE_POSITION, x_cm, y_cm)
        self.current_x = cm_to_steps_x(x_cm)
        self.current_y = cm_to_steps_y(y_cm)
        logger.debug("%f usteps", self.current_x)
        logger.debug("%f usteps", self.current_y)

    def return_home(self) -> None:
        """Send the stage back to (0, 0)."""
        self.transmit(Command.RETURN_HOME, 0, 0)
        self.current_x = 0.0
        self.current_y = 0.0

    def stop(self) -> tuple[float, float]:
        """Stop any motion, read back the position and return it in cm."""
        with self._port_lock:
            self._stop_requested.set()
            self.run_end = IDLE_TIME
            self.transmit(Command.STOP, 0, 0)

            stop_reply = b""
            if self._is_open():
                self.sleep(STOP_REPLY_DELAY)
                stop_reply = self._read_all()
            if stop_reply[:1] not in (SCAN_DONE, IDLE_STOP):
                logger.warning("Stop command not received. Data acquisition continues.")

            data = b""
            if self._is_open():
                self.sleep(POSITION_REPLY_DELAY)
                data = self._read_all()
            logger.debug("position reply: %r", data)

        try:
            x, y = parse_position_reply(data)
        except ValueError as exc:
            raise ScannerError(str(exc)) from exc
        self.current_x = x
        self.current_y = y
        return self.position_cm()

    def step_x_back(self) -> None:
        if not self.current_x > 0:
            raise ScannerError("At min position, can't step back!")
        self.transmit(Command.X_BACK, 0, 0)
        self.current_x -= USTEPS

    def step_y_back(self) -> None:
        if not self.current_y > 0:
            raise ScannerError("At min position, can't step back!")
        self.transmit(Command.Y_BACK, 0, 0)
        self.current_y -= USTEPS

    def step_x_forward(self) -> None:
        if not self.current_x < MAX_STEPS_LENGTH * USTEPS:
            raise ScannerError("At max position, can't step forward!")
        self.transmit(Command.X_FORWARD, 0, 0)
        self.current_x += USTEPS

    def step_y_forward(self) -> None:
        if not self.current_y < MAX_STEPS_WIDTH * USTEPS:
            raise ScannerError("At max position, can't step forward!")
        self.transmit(Command.Y_FORWARD, 0, 0)
        self.current_y += USTEPS