# touchfilt

Touchscreen sample processing in plain Python. The package provides a
chain of filters that smooth, debounce, crop and threshold touch samples. It
also provides decoders that turn several raw touchscreen byte streams into
samples. It has no dependencies outside the standard library.

## Installation

    pip install touchfilt

## Concepts

- `touchfilt.core.Sample` is one single-touch sample. It holds `x`, `y`,
  `pressure`, and a timestamp split into `sec` and `usec`.
- `touchfilt.core.MtSample` is one multitouch slot sample. It holds the same
  fields plus `slot`, `tracking_id`, tool, contact-size and orientation
  values, `pen_down`, and a `valid` flag.
- `touchfilt.core.SampleSource` is anything with `read(nr)`, which returns a
  list of at most `nr` samples, and `read_mt(max_slots, nr)`, which returns a
  list of rows of `max_slots` slot samples. The base implementations raise
  `OSError` with `errno.ENOSYS`.
- `touchfilt.core.Filter(source)` wraps another source, stored as `source`.
  Filters stack, and each one reads from the source below it.
- `touchfilt.core.parse_ulong(text)` parses numbers the way the filters accept
  them as text. It takes a decimal value, an octal value with a leading `0`,
  or a hexadecimal value with a leading `0x`.

Every filter parameter may be given as an integer or as such a text.

## Filters

| Module | Class | What it does |
| --- | --- | --- |
| `touchfilt.iir` | `IirFilter(source, n=0, d=0)` | Smooths x and y by the fraction n/d. A pen-down or a pen-up resets it. If `d` is 0, it is set to 1. |
| `touchfilt.debounce` | `DebounceFilter(source, drop_threshold=0)` | Drops samples that arrive within `drop_threshold` milliseconds of the last release. |
| `touchfilt.crop` | `CropFilter(source, calfile=None)` | Drops touches outside `0..res-1` of the resolution stored in a calibration file. |
| `touchfilt.dejitter` | `DejitterFilter(source, delta=100)` | Takes a weighted average of up to four recent positions. A jump of more than `delta`, or a release, resets it. |
| `touchfilt.evthres` | `EvthresFilter(source, size=None)` | Holds back the first `size` samples of a touch (5 by default). A touch that is shorter is dropped whole. A `size` of 500 or more raises `ValueError`. |

All filters support both `read` and `read_mt`. In multitouch reads, a
dropped slot has its `valid` flag cleared; the slot is not removed.

### Calibration files

`touchfilt.crop.read_calibration(path)` reads a calibration file and returns
`(coefficients, res_x, res_y, rotation)`. The file holds whitespace-separated
integers: seven coefficients, then the x and y resolution, then the
rotation. Any value that is missing reads as 0.

If `CropFilter` is given no `calfile`, it uses the `TSLIB_CALIBFILE`
environment variable, or `/system/etc/pointercal` if that variable is not
set. If the file does not exist, the resolution is 0 and every touch counts
as outside.

## Raw decoders

All decoders work on a binary stream object, for example an opened device
node or an `io.BytesIO`.

- `touchfilt.rawformats`: `Arctic2Reader`, `CollieReader`, `CorgiReader`
  and `H3600Reader`, all built on `StructReader(stream)`. `read(nr)` reads up
  to `nr` fixed-size records in one request and drops a trailing partial
  record. It raises `OSError` when the stream returns no data.
- `touchfilt.dmc.DmcReader(stream)`: the DMC serial protocol. Call
  `handshake()` before the first `read(nr)`. The handshake waits
  `settle_delay` seconds (1.0 by default), and it configures the line when the
  stream is a terminal.
- `touchfilt.dus3000.Dus3000Reader(stream)`: the DMC DUS series UART
  protocol. `start()` selects XP mode and sends the command for the current
  `state` (`State.COORDINATES` by default). The wire bytes of each command are
  available from `command_bytes(Command.…)`. Samples from this reader carry
  no timestamp. An unknown message makes the reader resynchronise.
- `touchfilt.palmpre.PalmPreReader(stream, settings=None, control=None)`:
  capacitive sensor-grid frames. The constructor reads one frame and uses it
  as the reference values. Each `read()` handles one frame and returns at
  most one sample. The first quiet frame after a touch repeats the last
  sample with pressure 0. `control` is an optional callable taking a setting
  name and a value, which passes device settings on. `PalmPreSettings` holds
  the tuning values. The helpers `parse_frame`, `update_references` and
  `interpolate` can also be used on their own.

## Example

    from touchfilt.rawformats import H3600Reader
    from touchfilt.dejitter import DejitterFilter
    from touchfilt.iir import IirFilter

    with open("touch.bin", "rb") as stream:
        chain = IirFilter(DejitterFilter(H3600Reader(stream), 100), 7, 8)
        for sample in chain.read(4):
            print(sample.x, sample.y, sample.pressure)

## What it does not do

- It has no command-line tools.
- It does not open devices by name.
- It does not build a filter chain from a configuration file.
- It has no reader for Linux input event devices.
- It has no linear calibration transform.
- It has no tool that writes the calibration file that `CropFilter` reads.

## Running the tests

    pip install -e .[test]
    pytest