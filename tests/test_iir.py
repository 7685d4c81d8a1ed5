import errno

import pytest

from touchfilt.core import MtSample, Sample, SampleSource
from touchfilt.iir import IirFilter


class ListSource(SampleSource):
    def __init__(self, samples=(), frames=()):
        self.samples = list(samples)
        self.frames = list(frames)

    def read(self, nr):
        batch, self.samples = self.samples[:nr], self.samples[nr:]
        return batch

    def read_mt(self, max_slots, nr):
        batch, self.frames = self.frames[:nr], self.frames[nr:]
        return batch


def touch(x, y, p=100):
    return Sample(x=x, y=y, pressure=p)


def test_zero_n_passes_through():
    points = [(10, 20), (30, 40), (50, 60)]
    f = IirFilter(ListSource([touch(x, y) for x, y in points]), 0, 4)
    out = f.read(3)
    assert [(s.x, s.y) for s in out] == points


def test_n_equal_d_holds_first_position():
    f = IirFilter(ListSource([touch(10, 20), touch(90, 80), touch(70, 5)]), 8, 8)
    out = f.read(3)
    assert [(s.x, s.y) for s in out] == [(10, 20)] * 3


def test_half_smoothing_worked_example():
    f = IirFilter(ListSource([touch(10, 10), touch(20, 10)]), 1, 2)
    out = f.read(2)
    assert out[1].x == 15
    assert out[1].y == 10


def test_pen_up_resets_history():
    samples = [touch(10, 10), touch(0, 0, p=0), touch(500, 400), touch(600, 300)]
    f = IirFilter(ListSource(samples), 8, 8)
    out = f.read(4)
    assert (out[1].x, out[1].y) == (0, 0)
    assert (out[2].x, out[2].y) == (500, 400)
    assert (out[3].x, out[3].y) == (500, 400)


def test_pressure_is_untouched():
    f = IirFilter(ListSource([touch(1, 1, 30), touch(9, 9, 70)]), 1, 2)
    assert [s.pressure for s in f.read(2)] == [30, 70]


def test_zero_denominator_becomes_one():
    f = IirFilter(ListSource(), 0, 0)
    assert f.d == 1


def test_string_parameters():
    f = IirFilter(ListSource(), "0x1", "2")
    assert (f.n, f.d) == (1, 2)


def test_read_mt_filters_valid_slots_only():
    frames = [
        [MtSample(x=10, y=10, pressure=5, valid=True), MtSample(x=3, y=3)],
        [MtSample(x=90, y=90, pressure=5, valid=True), MtSample(x=7, y=7)],
    ]
    f = IirFilter(ListSource(frames=frames), 4, 4)
    out = f.read_mt(2, 2)
    assert (out[1][0].x, out[1][0].y) == (10, 10)
    assert (out[1][1].x, out[1][1].y) == (7, 7)


def test_read_mt_slots_are_independent():
    frames = [
        [MtSample(x=10, y=10, pressure=5, valid=True), MtSample(x=0, y=0, pressure=0, valid=True)],
        [MtSample(x=90, y=90, pressure=5, valid=True), MtSample(x=300, y=200, pressure=5, valid=True)],
    ]
    f = IirFilter(ListSource(frames=frames), 4, 4)
    out = f.read_mt(2, 2)
    assert (out[1][0].x, out[1][0].y) == (10, 10)
    assert (out[1][1].x, out[1][1].y) == (300, 200)


def test_read_mt_unsupported_below():
    f = IirFilter(SampleSource(), 1, 2)
    with pytest.raises(OSError) as info:
        f.read_mt(2, 1)
    assert info.value.errno == errno.ENOSYS