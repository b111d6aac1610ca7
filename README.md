# ucnscan

Control a two-axis stepper-motor scanner stage driven by a microcontroller
over a serial line, and list the serial ports available on the machine.

The stage covers 59 cm along X and 28 cm along Y. Commands go to the
controller as framed messages `<C,V1,V2>`: a one-digit command code and two
values, each written with six decimals in single precision and cut to five
characters, for example `<7,12.50,3.000>`.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Command line

```
ucnscan [--port DEVICE] [ports | estimate | console]
```

- `ucnscan` or `ucnscan console` opens the controller's serial port
  (`--port`, default `/dev/ttyACM0`, 9600 baud, 8N1, no flow control) and
  reads commands from standard input, one per line:
  - `scan SPACING TIME` starts a scan in the background (spacing in cm,
    time per sample in seconds) and prints the estimated duration;
  - `move X Y` moves to an absolute position in cm;
  - `home` returns to (0, 0);
  - `stop` stops motion and reads the position back from the controller;
  - `x+`, `x-`, `y+`, `y-` take one step;
  - `pos` prints the current position;
  - `help` lists the commands; `quit` or `exit` leaves.
  If the port cannot be opened the command prints an error and exits with
  status 1.
- `ucnscan ports [--dev-dir DIR]` lists the serial ports found in `DIR`
  (default `/dev`).
- `ucnscan estimate SPACING SAMPLE_TIME` prints the estimated scan time in
  minutes and the clock time the scan would end.

## Library use

```python
import serial
from ucnscan.scanner import Scanner, scan_duration

with serial.Serial("/dev/ttyACM0", 9600, timeout=0) as port:
    scanner = Scanner(port)
    scanner.update_position(10.0, 5.0)   # move to (10 cm, 5 cm)
    print(scanner.position_cm())
    scanner.return_home()

# Estimated scan time in minutes for 5 cm spacing and 10 s per sample
print(scan_duration(5, 10))
```

`Scanner` keeps its position in microsteps (`current_x`, `current_y`).
Its methods are `transmit`, `run_scan`, `update_position`, `return_home`,
`stop`, `step_x_back`, `step_y_back`, `step_x_forward`, `step_y_forward`
and `position_cm`.

- Moves outside the stage, steps past either end, and scans not started
  from home or with a spacing over 28 cm raise `ScannerError` without
  sending anything. Writing to a closed port also raises `ScannerError`.
- `run_scan(spacing, sample_time)` sends the scan command and blocks until
  the controller replies with `9` or `stop()` is called from another
  thread; it returns the estimated finish time.
- `stop()` sends the stop command, reads the controller's position report
  and returns the new position in cm.
- The `sleep` and `clock` attributes can be replaced to control waiting and
  the time used for estimates.

Helpers in `ucnscan.scanner`:

- `Command` enumerates the command codes.
- `format_value(value)` and `encode_command(command, value1, value2)` build
  the wire format.
- `parse_position_reply(data)` reads the `<X><Y>` position report sent after
  a stop, in microsteps; it raises `ValueError` on a malformed reply.
- `cm_to_steps_x`, `cm_to_steps_y`, `steps_to_cm_x`, `steps_to_cm_y`
  convert between centimetres and microsteps.
- `scan_duration(spacing, sample_time)` estimates a scan in minutes.
- `finish_time(now, run_minutes)` gives the `H:M` clock time a run ends;
  hours do not wrap at midnight and fields are not zero-padded.

## Listing serial ports

```python
from ucnscan.enumerator import SerialEnumerator, list_ports

for info in list_ports("/dev"):
    print(info.port_name, info.friend_name)

enumerator = SerialEnumerator("/dev")
enumerator.on_discovered(lambda info: print("added", info.port_name))
enumerator.on_removed(lambda info: print("removed", info.port_name))
enumerator.set_up_notifications()   # reports the ports already present
added, removed = enumerator.poll()  # call again later to see changes
```

`list_ports` returns `PortInfo` records: numbered `ttyS<n>` ports first,
then `ttyACM*`, `ttyUSB*` and `rfcomm*` devices, each block sorted by name.
`friendly_name(name)` gives descriptions such as `Serial port 0` or
`USB-serial adapter 1`. Changes are found by polling: `poll()` compares the
current ports with the previous call and raises `RuntimeError` if
notifications were not set up.

`ucnscan.winports` has pure helpers for port data as the Windows device
registry reports it: `parse_hardware_ids`, `sort_ports` and `port_sort_key`
(so that `COM2` sorts before `COM10`), `normalize_device_id` and
`matches_device`.

## Supporting pieces

- `ucnscan.buffer.ReadBuffer` is a FIFO byte buffer with `append`, `read`,
  `read_line`, `read_all`, `can_read_line`, `chop` and `squeeze`; its
  capacity grows in doubling blocks.
- `ucnscan.messages` formats messages by severity (`message_text`,
  `decorate_html`), and `MessageLog` collects them thread-safely; posting a
  fatal message raises `FatalMessage`.

## What it does not do

- There is no graphical window; control is through the console command or
  the library.
- Port discovery reads a device directory; it does not query the Windows
  device registry or the macOS I/O registry, and vendor and product ids are
  left at 0. `ucnscan.winports` only processes strings already obtained.
- Port change notification is by polling, not by operating-system events.