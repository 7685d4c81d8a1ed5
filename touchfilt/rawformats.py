"""Readers for fixed-size binary touch records of older handheld devices."""

from __future__ import annotations

import errno
import struct
import time
from abc import ABC, abstractmethod
from typing import BinaryIO

from .core import Sample

_U32 = 0xFFFFFFFF


def _int32(value: int) -> int:
    value &= _U32
    return value - (1 << 32) if value & 0x80000000 else value


def _short(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _now() -> tuple[int, int]:
    micros = time.time_ns() // 1000
    return micros // 1_000_000, micros % 1_000_000


def _split_millis(millis: int) -> tuple[int, int]:
    """Split milliseconds into seconds and microseconds, truncating toward zero."""
    sec = abs(millis) // 1000
    if millis < 0:
        sec = -sec
    return sec, (millis - sec * 1000) * 1000


class StructReader(ABC):
    """Reads whole binary records from a stream and turns them into samples.

    Subclasses set ``FORMAT`` to the record layout in native byte order and
    alignment, as the device driver writes it.
    """

    FORMAT = ""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self._record = struct.Struct(self.FORMAT)

    def read(self, nr: int) -> list[Sample]:
        """Read up to nr records in one request; a trailing partial record is dropped."""
        size = self._record.size
        data = self.stream.read(size * nr)
        if not data:
            raise OSError(errno.EIO, "no data from touchscreen device")
        usable = len(data) - len(data) % size
        return [self._to_sample(values) for values in self._record.iter_unpack(data[:usable])]

    @abstractmethod
    def _to_sample(self, values: tuple[int, ...]) -> Sample:
        """Convert one unpacked record into a sample."""


class Arctic2Reader(StructReader):
    """IBM Arctic II records: pressure, x, y, milliseconds and flags."""

    FORMAT = "@hiiii"

    def _to_sample(self, values: tuple[int, ...]) -> Sample:
        pressure, x, y, _millis, _flags = values
        sec, usec = _now()
        return Sample(x=_short(x), y=_short(y), pressure=pressure & _U32, sec=sec, usec=usec)


class CollieReader(StructReader):
    """Sharp Zaurus SL-5000d/SL-5500 records: y, x, pressure, milliseconds."""

    FORMAT = "@lllq"

    def _to_sample(self, values: tuple[int, ...]) -> Sample:
        y, x, pressure, millis = values
        sec, usec = _split_millis(millis)
        return Sample(x=_int32(x), y=_int32(y), pressure=pressure & _U32, sec=sec, usec=usec)


class CorgiReader(StructReader):
    """Sharp Zaurus SL-C700 records: pressure, x, y, milliseconds as shorts."""

    FORMAT = "@hhhh"

    def _to_sample(self, values: tuple[int, ...]) -> Sample:
        pressure, x, y, millis = values
        sec, usec = _split_millis(millis)
        return Sample(x=x, y=y, pressure=pressure & _U32, sec=sec, usec=usec)


class H3600Reader(StructReader):
    """Compaq iPAQ records: pressure, x, y and padding as unsigned shorts."""

    FORMAT = "@HHHH"

    def _to_sample(self, values: tuple[int, ...]) -> Sample:
        pressure, x, y, _pad = values
        sec, usec = _now()
        return Sample(x=x, y=y, pressure=pressure, sec=sec, usec=usec)