"""Weighted averaging of recent touch positions to remove jitter."""

from __future__ import annotations

from dataclasses import replace

from .core import Filter, MtSample, Sample, SampleSource, parse_ulong

HISTORY_LENGTH = 4
DEFAULT_DELTA = 100

# Weights for 2, 3 and 4 samples of history; the last entry of each row is
# the power of two that the weights add up to.
WEIGHTS = (
    (5, 3, 0, 0, 3),
    (8, 5, 3, 0, 4),
    (6, 4, 3, 3, 4),
)


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


class _History:
    """Ring buffer of the latest positions of one contact."""

    def __init__(self) -> None:
        self._points: list[tuple[int, int, int]] = [(0, 0, 0)] * HISTORY_LENGTH
        self._count = 0
        self._head = 0

    def reset(self) -> None:
        self._count = 0

    def moved_too_far(self, x: int, y: int, delta: int) -> bool:
        if not self._count:
            return False
        px, py, _ = self._points[(self._head - 1) % HISTORY_LENGTH]
        return (x - px) ** 2 + (y - py) ** 2 > delta

    def push(self, x: int, y: int, pressure: int) -> tuple[int, int, int] | None:
        """Store a position; return the weighted average, or None for the first one."""
        self._points[self._head] = (x, y, pressure)
        self._count = min(self._count + 1, HISTORY_LENGTH)
        result = self._average() if self._count > 1 else None
        self._head = (self._head + 1) % HISTORY_LENGTH
        return result

    def _average(self) -> tuple[int, int, int]:
        weights = WEIGHTS[self._count - 2]
        shift = weights[HISTORY_LENGTH]
        sx = sy = sp = 0
        index = self._head
        for weight in weights[: self._count]:
            px, py, pp = self._points[index]
            sx += px * weight
            sy += py * weight
            sp += pp * weight
            index = (index - 1) % HISTORY_LENGTH
        return sx >> shift, sy >> shift, sp >> shift


class DejitterFilter(Filter):
    """Averages the last few positions; a jump beyond delta or a release resets it."""

    def __init__(self, source: SampleSource, delta: int | str = DEFAULT_DELTA) -> None:
        super().__init__(source)
        value = parse_ulong(delta) if isinstance(delta, str) else int(delta)
        self.delta = _int32(value) ** 2
        self._history = _History()
        self._history_mt: list[_History] = []

    def read(self, nr: int) -> list[Sample]:
        out: list[Sample] = []
        for samp in self.source.read(nr):
            if samp.pressure == 0:
                self._history.reset()
                out.append(samp)
                continue
            if self._history.moved_too_far(samp.x, samp.y, self.delta):
                self._history.reset()
            averaged = self._history.push(samp.x, samp.y, samp.pressure)
            if averaged is None:
                out.append(samp)
            else:
                x, y, pressure = averaged
                out.append(replace(samp, x=x, y=y, pressure=pressure))
        return out

    def read_mt(self, max_slots: int, nr: int) -> list[list[MtSample]]:
        rows = self.source.read_mt(max_slots, nr)
        if len(self._history_mt) < max_slots:
            self._history_mt = [_History() for _ in range(max_slots)]

        for row in rows:
            for slot, samp in enumerate(row):
                if not samp.valid:
                    continue
                history = self._history_mt[slot]
                if samp.pressure == 0:
                    history.reset()
                    continue
                if history.moved_too_far(samp.x, samp.y, self.delta):
                    history.reset()
                averaged = history.push(samp.x, samp.y, samp.pressure)
                if averaged is not None:
                    samp.x, samp.y, samp.pressure = averaged
        return rows