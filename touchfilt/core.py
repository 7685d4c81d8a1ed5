"""Touch sample types and the base classes of a filter chain."""

from __future__ import annotations

import errno
import re
from dataclasses import dataclass

ULONG_MAX = 2**64 - 1

_DIGITS = {
    16: re.compile(r"[0-9a-fA-F]*"),
    10: re.compile(r"[0-9]*"),
    8: re.compile(r"[0-7]*"),
}
_HEX = frozenset("0123456789abcdefABCDEF")


def parse_ulong(text: str) -> int:
    """Parse an unsigned long the way strtoul(text, NULL, 0) does.

    Leading blanks, an optional sign and a 0x/0 prefix are accepted, parsing
    stops at the first character that is not a digit, and text without digits
    yields 0. A minus sign wraps the value around ULONG_MAX. A value that does
    not fit raises ValueError.
    """
    s = text.lstrip()
    negative = False
    if s.startswith(("+", "-")):
        negative = s[0] == "-"
        s = s[1:]
    if s[:2].lower() == "0x" and len(s) > 2 and s[2] in _HEX:
        base, s = 16, s[2:]
    elif s.startswith("0"):
        base = 8
    else:
        base = 10
    digits = _DIGITS[base].match(s).group()
    value = int(digits, base) if digits else 0
    if value > ULONG_MAX:
        raise ValueError(f"value out of range: {text!r}")
    if negative:
        value = -value & ULONG_MAX
    return value


@dataclass
class Sample:
    """A single-touch sample with its timestamp in seconds and microseconds."""

    x: int = 0
    y: int = 0
    pressure: int = 0
    sec: int = 0
    usec: int = 0


@dataclass
class MtSample:
    """One slot of a multitouch sample."""

    x: int = 0
    y: int = 0
    pressure: int = 0
    sec: int = 0
    usec: int = 0
    slot: int = 0
    tracking_id: int = 0
    tool_x: int = 0
    tool_y: int = 0
    tool_type: int = 0
    orientation: int = 0
    distance: int = 0
    blob_id: int = 0
    touch_major: int = 0
    width_major: int = 0
    touch_minor: int = 0
    width_minor: int = 0
    pen_down: int = 0
    valid: bool = False


class SampleSource:
    """Something that delivers touch samples on request.

    ``read`` returns a list of at most ``nr`` samples; ``read_mt`` returns a
    list of at most ``nr`` rows, each holding ``max_slots`` slot samples.
    A source that cannot deliver a kind of sample raises OSError(ENOSYS).
    """

    def read(self, nr: int) -> list[Sample]:
        raise OSError(errno.ENOSYS, "single-touch reads are not supported")

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        raise OSError(errno.ENOSYS, "multitouch reads are not supported")


class Filter(SampleSource):
    """A stage that reads from the source below it and transforms samples."""

    def __init__(self, source: SampleSource) -> None:
        self.source = source