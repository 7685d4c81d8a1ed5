"""Drop samples that lie outside the calibrated screen resolution."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from itertools import islice
from pathlib import Path

from .core import Filter, MtSample, Sample, SampleSource

log = logging.getLogger(__name__)

DEFAULT_CALIBFILE = "/system/etc/pointercal"

_INT = re.compile(r"\s*([+-]?\d+)")


def _scan_ints(text: str) -> Iterator[int]:
    pos = 0
    while (match := _INT.match(text, pos)) is not None:
        yield int(match.group(1))
        pos = match.end()


def read_calibration(path: str | os.PathLike) -> tuple[tuple[int, ...], int, int, int]:
    """Read a pointercal file.

    Returns the seven calibration coefficients, the x and y resolution and
    the rotation. Values that cannot be read are 0.
    """
    values = list(islice(_scan_ints(Path(path).read_text()), 10))
    if len(values) < 9:
        log.warning("CROP: Couldn't read resolution values")
    elif len(values) < 10:
        log.warning("CROP: Couldn't read rotation value")
    values += [0] * (10 - len(values))
    return tuple(values[:7]), values[7], values[8], values[9]


class CropFilter(Filter):
    """Drops touches outside 0..res-1 of the resolution in the calibration file."""

    def __init__(self, source: SampleSource, calfile: str | os.PathLike | None = None) -> None:
        super().__init__(source)
        if calfile is None:
            calfile = os.environ.get("TSLIB_CALIBFILE", DEFAULT_CALIBFILE)
        self.coefficients: tuple[int, ...] = (0,) * 7
        self.res_x = 0
        self.res_y = 0
        self.rotation = 0
        if os.path.exists(calfile):
            self.coefficients, self.res_x, self.res_y, self.rotation = read_calibration(calfile)
        self._last_pressure = 0
        self._last_tid: list[int] = []

    def _outside(self, x: int, y: int) -> bool:
        return x >= self.res_x or x < 0 or y >= self.res_y or y < 0

    def read(self, nr: int) -> list[Sample]:
        """Return up to nr samples, stopping early when the source runs dry."""
        kept: list[Sample] = []
        while len(kept) < nr:
            batch = self.source.read(1)
            if not batch:
                break
            cur = batch[0]
            if self._outside(cur.x, cur.y) and (cur.pressure != 0 or self._last_pressure == 0):
                continue
            kept.append(cur)
            self._last_pressure = cur.pressure
        return kept

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        rows = self.source.read_mt(max_slots, nr)
        if len(self._last_tid) < max_slots:
            self._last_tid.extend([-1] * (max_slots - len(self._last_tid)))

        for row in rows:
            for j, samp in enumerate(row):
                if not samp.valid:
                    continue
                if self._outside(samp.x, samp.y):
                    # A release is kept unless the slot was already released.
                    if samp.tracking_id != -1 or self._last_tid[j] == -1:
                        samp.valid = False
                if samp.valid:
                    self._last_tid[j] = samp.tracking_id
        return rows