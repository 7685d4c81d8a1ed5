"""Reader for the cy8mrln capacitive sensor grid of Palm Pre handsets."""

from __future__ import annotations

import errno
import logging
import struct
import time
from collections.abc import Callable, MutableSequence, Sequence
from dataclasses import dataclass, replace
from typing import BinaryIO

from .core import Sample

log = logging.getLogger(__name__)

SCREEN_WIDTH = 319
SCREEN_HEIGHT = 527
H_FIELDS = 7
V_FIELDS = 11
FIELD_COUNT = H_FIELDS * V_FIELDS

DEFAULT_GESTURE_HEIGHT = 1
DEFAULT_SENSOR_DELTA_X = SCREEN_WIDTH // H_FIELDS
DEFAULT_SENSOR_DELTA_Y = SCREEN_HEIGHT // (V_FIELDS - DEFAULT_GESTURE_HEIGHT)
DEFAULT_SENSOR_OFFSET_X = DEFAULT_SENSOR_DELTA_X // 2
DEFAULT_SENSOR_OFFSET_Y = DEFAULT_SENSOR_DELTA_Y // 2

MIN_VALUE = 700
MAX_VALUE = 1500
ASLEEP_SCANRATE = 5
DISCARD_FRAMES = 5

# n_r, the sensor field, the 0xffff marker, seq_nr1, seq_nr2, four unknown
# bytes, seq_nr0 and a trailing null byte, in the driver's native layout.
FRAME = struct.Struct(f"@H{FIELD_COUNT}HHBH4BBB")

Control = Callable[[str, int], None]


def _field_nr(x: int, y: int) -> int:
    return y * H_FIELDS + (H_FIELDS - x) - 1


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


@dataclass
class PalmPreSettings:
    """Tunables of the sensor and of the position interpolation.

    ``sleepmode`` and ``wot_scanrate`` are only sent to the device when set.
    """

    scanrate: int = 60
    verbose: int = 0
    wot_threshold: int = 22
    sleepmode: int | None = None
    wot_scanrate: int | None = None
    timestamp_mode: int = 1
    gesture_height: int = DEFAULT_GESTURE_HEIGHT
    noise: int = 25
    pressure: int = 60
    sensor_offset_x: int = DEFAULT_SENSOR_OFFSET_X
    sensor_offset_y: int = DEFAULT_SENSOR_OFFSET_Y
    sensor_delta_x: int = DEFAULT_SENSOR_DELTA_X
    sensor_delta_y: int = DEFAULT_SENSOR_DELTA_Y


def parse_frame(data: bytes) -> list[int]:
    """Return the sensor field values of one raw frame."""
    if len(data) < FRAME.size:
        raise ValueError(f"frame too short: {len(data)} of {FRAME.size} bytes")
    values = FRAME.unpack_from(data)
    return list(values[1 : 1 + FIELD_COUNT])


def update_references(references: MutableSequence[int], field: Sequence[int]) -> list[int] | None:
    """Turn raw readings into deltas below the per-cell reference values.

    A reading above its reference raises the reference and gives a delta of 0.
    Returns None, leaving the references updated up to that cell, as soon as
    a reading lies outside MIN_VALUE..MAX_VALUE.
    """
    deltas: list[int] = []
    for index, value in enumerate(field):
        if value < MIN_VALUE or value > MAX_VALUE:
            log.debug("Discarding frame with %d at cell %d", value, index)
            return None
        if value > references[index]:
            references[index] = value
            deltas.append(0)
        else:
            deltas.append(references[index] - value)
    return deltas


def interpolate(settings: PalmPreSettings, field: Sequence[int], x: int, y: int) -> tuple[int, int]:
    """Refine the position of grid cell (x, y) from the deltas of its neighbours."""
    n = _field_nr(x, y)
    center = field[n]
    if center == 0:
        raise ValueError("cannot interpolate around a cell without signal")
    edge = settings.pressure - center
    right = edge if x == H_FIELDS - 1 else field[n - 1]
    left = edge if x == 0 else field[n + 1]
    below = edge if y == V_FIELDS - 1 else field[n + H_FIELDS]
    above = edge if y == 0 else field[n - H_FIELDS]

    fx = _f32((right - left) / (center * 1.5))
    fy = _f32((below - above) / (center * 1.5))

    posx = settings.sensor_delta_x * x + settings.sensor_offset_x
    posy = settings.sensor_delta_y * y + settings.sensor_offset_y
    out_x = int(_f32(posx + _f32(fx * settings.sensor_delta_x)))
    out_y = int(_f32(posy + _f32(fy * settings.sensor_delta_y)))
    return out_x, out_y


class PalmPreReader:
    """Turns sensor grid frames into single-touch samples.

    ``control`` applies a device setting, called with the setting's name and
    value, and raises OSError when the device refuses it; None means the
    device takes no settings.
    """

    def __init__(
        self,
        stream: BinaryIO,
        settings: PalmPreSettings | None = None,
        control: Control | None = None,
    ) -> None:
        self.stream = stream
        self.settings = replace(settings) if settings is not None else PalmPreSettings()
        self.control = control
        self._discard_frames = 0
        self._old_scanrate = self.settings.scanrate
        self._last_valid: list[Sample] = []

        s = self.settings
        self._apply("verbose", s.verbose)
        self._apply("scanrate", s.scanrate)
        self._apply("timestamp_mode", 1 if s.timestamp_mode else 0)
        if s.sleepmode is not None:
            self._apply("sleepmode", s.sleepmode)
        if s.wot_scanrate is not None:
            self._apply("wot_scanrate", s.wot_scanrate)
        self._apply("wot_threshold", s.wot_threshold)

        # The untouched readings serve as the initial references.
        self.references = parse_frame(self._read_frame())

    def _apply(self, name: str, value: int) -> bool:
        if self.control is not None:
            try:
                self.control(name, value)
            except OSError:
                log.error("cy8mrln_palmpre: could not set %s value", name)
                return False
        setattr(self.settings, name, value)
        return True

    def _read_frame(self) -> bytes:
        while True:
            data = self.stream.read(FRAME.size)
            if data is None:
                continue
            if not data:
                raise OSError(errno.EIO, "no data from touchscreen device")
            return data

    def read(self, nr: int = 1) -> list[Sample]:
        """Read one frame and return at most one sample.

        Returns an empty list for frames that are discarded or hold only
        noise; the first quiet frame after a touch repeats its last sample
        with pressure 0.
        """
        deltas = update_references(self.references, parse_frame(self._read_frame()))
        if deltas is None:
            if self._discard_frames == 0:
                self._old_scanrate = self.settings.scanrate
                self._apply("scanrate", ASLEEP_SCANRATE)
                self._discard_frames = DISCARD_FRAMES
                log.debug("go to sleep")
            return []

        if self._discard_frames == DISCARD_FRAMES:
            self._apply("scanrate", self._old_scanrate)
            log.debug("woke up")
        if self._discard_frames:
            self._discard_frames -= 1
            return []

        max_x = max_y = max_value = 0
        for y in range(V_FIELDS):
            for x in range(H_FIELDS):
                value = deltas[_field_nr(x, y)]
                if value > max_value:
                    max_value, max_x, max_y = value, x, y

        if max_value > self.settings.noise:
            px, py = interpolate(self.settings, deltas, max_x, max_y)
            micros = time.time_ns() // 1000
            sample = Sample(
                x=px, y=py, pressure=max_value,
                sec=micros // 1_000_000, usec=micros % 1_000_000,
            )
            self._last_valid = [replace(sample)]
            return [sample]

        released = [replace(s, pressure=0) for s in self._last_valid]
        self._last_valid = []
        return released