"""Drop touch sequences that are shorter than a given number of samples."""

from __future__ import annotations

from collections import deque
from dataclasses import replace

from .core import Filter, MtSample, Sample, SampleSource, parse_ulong

EVTHRES_SIZE_MAX = 500
EVTHRES_SIZE_DEFAULT = 5


def _parse_size(size: int | str) -> int:
    value = parse_ulong(size) if isinstance(size, str) else int(size)
    if value < 0 or value >= EVTHRES_SIZE_MAX:
        raise ValueError(f"EVTHRES: size exceeds maximum of {EVTHRES_SIZE_MAX}")
    return value


class EvthresFilter(Filter):
    """Holds back the first ``size`` samples of a touch.

    A touch released before ``size`` samples arrived is dropped whole; a
    longer one is released from the buffer on the following reads and then
    passed through until the pen goes up.
    """

    def __init__(self, source: SampleSource, size: int | str | None = None) -> None:
        super().__init__(source)
        self.size = EVTHRES_SIZE_DEFAULT if size is None else _parse_size(size)
        self._buf: deque[Sample] = deque()
        self._filling = True
        self._buf_mt: list[deque[MtSample]] = []
        self._filling_mt: list[bool] = []

    def read(self, nr: int) -> list[Sample]:
        drained: list[Sample] = []
        while len(drained) < nr and not self._filling and self._buf:
            drained.append(self._buf.popleft())
        if drained:
            return drained

        out: list[Sample] = []
        for samp in self.source.read(nr):
            if not self._filling:
                if not samp.pressure:
                    self._filling = True
                out.append(samp)
                continue
            if not samp.pressure and len(self._buf) < self.size:
                self._buf.clear()
                continue
            self._buf.append(replace(samp))
            self._filling = len(self._buf) < self.size
        return out

    def _drain_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        rows: list[list[MtSample]] = []
        for _ in range(nr):
            row: list[MtSample] = []
            popped = False
            for slot in range(max_slots):
                if slot < len(self._buf_mt) and not self._filling_mt[slot] and self._buf_mt[slot]:
                    row.append(self._buf_mt[slot].popleft())
                    popped = True
                else:
                    row.append(MtSample())
            if not popped:
                break
            rows.append(row)
        return rows

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        drained = self._drain_mt(max_slots, nr)
        if drained:
            return drained

        rows = self.source.read_mt(max_slots, nr)
        if len(self._buf_mt) < max_slots:
            self._buf_mt = [deque() for _ in range(max_slots)]
            self._filling_mt = [True] * max_slots

        for row in rows:
            for slot, samp in enumerate(row):
                if not samp.valid:
                    continue
                if not self._filling_mt[slot]:
                    if not samp.pressure:
                        self._filling_mt[slot] = True
                    continue
                buf = self._buf_mt[slot]
                if not samp.pressure and len(buf) < self.size:
                    buf.clear()
                    self._filling_mt[slot] = True
                    samp.valid = False
                    continue
                buf.append(replace(samp))
                self._filling_mt[slot] = len(buf) < self.size
                samp.valid = False
        return rows