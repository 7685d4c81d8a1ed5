import pytest

from touchfilt.core import MtSample, Sample, SampleSource
from touchfilt.debounce import DebounceFilter


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


def at(usec, pressure):
    return Sample(x=1, y=2, pressure=pressure, sec=10, usec=usec)


def test_zero_threshold_keeps_everything():
    samples = [at(0, 50), at(1000, 0), at(2000, 50)]
    f = DebounceFilter(ListSource(samples), 0)
    assert f.read(3) == samples


def test_drops_touch_shortly_after_release():
    s1, s2, s3, s4 = at(0, 50), at(100000, 0), at(150000, 50), at(300000, 50)
    f = DebounceFilter(ListSource([s1, s2, s3, s4]), 100)
    out = f.read(4)
    assert len(out) == 3
    assert out[0] is s1 and out[1] is s2 and out[2] is s4


def test_dropped_release_still_counts():
    first, second, press = at(100000, 0), at(120000, 0), at(200000, 50)
    f = DebounceFilter(ListSource([first, second, press]), 100)
    assert f.read(3) == [first]


def test_exact_threshold_is_kept():
    release, press = at(100000, 0), at(200000, 50)
    f = DebounceFilter(ListSource([release, press]), 100)
    assert f.read(2) == [release, press]


def test_last_sample_dropped():
    release, press = at(0, 0), at(10000, 50)
    f = DebounceFilter(ListSource([release, press]), 100)
    assert f.read(2) == [release]


def test_string_threshold():
    f = DebounceFilter(ListSource(), "0x64")
    assert f.drop_threshold == int("64", 16)


def test_threshold_overflow_raises():
    with pytest.raises(ValueError):
        DebounceFilter(ListSource(), "99999999999999999999999")


def test_read_mt_clears_valid_on_drop():
    def mt(usec, pressure, valid=True):
        return MtSample(pressure=pressure, sec=10, usec=usec, valid=valid)

    frames = [
        [mt(0, 50), mt(0, 50, valid=False)],
        [mt(100000, 0), mt(0, 0, valid=False)],
        [mt(150000, 50), mt(0, 0, valid=False)],
        [mt(300000, 50), mt(0, 0, valid=False)],
    ]
    f = DebounceFilter(ListSource(frames=frames), 100)
    out = f.read_mt(2, 4)
    assert len(out) == 4
    assert [row[0].valid for row in out] == [True, True, False, True]
    assert all(not row[1].valid for row in out)