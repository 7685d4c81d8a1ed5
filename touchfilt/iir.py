"""Infinite impulse response smoothing of touch coordinates."""

from __future__ import annotations

import logging

from .core import Filter, MtSample, Sample, SampleSource, parse_ulong

log = logging.getLogger(__name__)

_U32 = 0xFFFFFFFF


def _int32(value: int) -> int:
    value &= _U32
    return value - (1 << 32) if value & 0x80000000 else value


def _u32(value: int | str) -> int:
    return (parse_ulong(value) if isinstance(value, str) else int(value)) & _U32


class IirFilter(Filter):
    """Smooths x and y by the fraction n/d; pen-down and pen-up reset it."""

    def __init__(self, source: SampleSource, n: int | str = 0, d: int | str = 0) -> None:
        super().__init__(source)
        self.n = _u32(n)
        self.d = _u32(d)
        if self.d == 0:
            log.warning("IIR: avoid division by zero: D=1 set")
            self.d = 1
        self._s = 0
        self._t = 0
        self._last_active = False
        self._s_mt: list[int] = []
        self._t_mt: list[int] = []
        self._active_mt: list[bool] = []

    def _smooth(self, new: int, saved: int) -> int:
        total = (
            self.n * (saved & _U32)
            + ((self.d - self.n) & _U32) * (new & _U32)
            + self.d // 2
        ) & _U32
        return _int32(total // self.d)

    def read(self, nr: int) -> list[Sample]:
        samples = self.source.read(nr)
        for samp in samples:
            if samp.pressure == 0:
                self._s, self._t = samp.x, samp.y
                self._last_active = False
                continue
            if not self._last_active:
                self._s, self._t = samp.x, samp.y
                self._last_active = True
                continue
            self._s = self._smooth(samp.x, self._s)
            samp.x = self._s
            self._t = self._smooth(samp.y, self._t)
            samp.y = self._t
        return samples

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        if not self._s_mt or max_slots > len(self._s_mt):
            self._s_mt = [0] * max_slots
            self._t_mt = [0] * max_slots
            self._active_mt = [False] * max_slots

        rows = self.source.read_mt(max_slots, nr)
        for row in rows:
            for j, samp in enumerate(row):
                if not samp.valid:
                    continue
                if samp.pressure == 0:
                    self._s_mt[j], self._t_mt[j] = samp.x, samp.y
                    self._active_mt[j] = False
                    continue
                if not self._active_mt[j]:
                    self._s_mt[j], self._t_mt[j] = samp.x, samp.y
                    self._active_mt[j] = True
                    continue
                self._s_mt[j] = self._smooth(samp.x, self._s_mt[j])
                samp.x = self._s_mt[j]
                self._t_mt[j] = self._smooth(samp.y, self._t_mt[j])
                samp.y = self._t_mt[j]
        return rows