"""Drop samples that arrive too soon after the pen was lifted."""

from __future__ import annotations

from .core import Filter, MtSample, Sample, SampleSource, parse_ulong


def _micros(sec: int, usec: int) -> int:
    return int(sec * 1e6 + usec)


def _elapsed_ms(now: int, last: int) -> int:
    diff = now - last
    quotient = abs(diff) // 1000
    return quotient if diff >= 0 else -quotient


class DebounceFilter(Filter):
    """Drops every sample within drop_threshold milliseconds of the last release."""

    def __init__(self, source: SampleSource, drop_threshold: int | str = 0) -> None:
        super().__init__(source)
        value = parse_ulong(drop_threshold) if isinstance(drop_threshold, str) else int(drop_threshold)
        self.drop_threshold = value & 0xFFFFFFFF
        self._last_release = 0
        self._last_pressure = 0
        self._last_release_mt: list[int] = []
        self._last_pressure_mt: list[int] = []

    def read(self, nr: int) -> list[Sample]:
        kept = []
        for samp in self.source.read(nr):
            now = _micros(samp.sec, samp.usec)
            dt = _elapsed_ms(now, self._last_release)
            if not samp.pressure:
                self._last_release = now
            self._last_pressure = samp.pressure
            if dt < self.drop_threshold:
                continue
            kept.append(samp)
        return kept

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        if len(self._last_release_mt) < max_slots:
            self._last_release_mt = [0] * max_slots
            self._last_pressure_mt = [0] * max_slots

        rows = self.source.read_mt(max_slots, nr)
        for row in rows:
            for i, samp in enumerate(row):
                if not samp.valid:
                    continue
                now = _micros(samp.sec, samp.usec)
                dt = _elapsed_ms(now, self._last_release_mt[i])
                if not samp.pressure:
                    self._last_release_mt[i] = now
                self._last_pressure_mt[i] = samp.pressure
                if dt < self.drop_threshold:
                    samp.valid = False
        return rows