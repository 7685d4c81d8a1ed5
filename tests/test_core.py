import errno

import pytest

from touchfilt.core import ULONG_MAX, Filter, MtSample, Sample, SampleSource, parse_ulong


def test_parse_decimal():
    assert parse_ulong("42") == 42


def test_parse_hex_prefix():
    assert parse_ulong("0x1F") == int("1F", 16)


def test_parse_octal_prefix():
    assert parse_ulong("017") == int("17", 8)


def test_parse_stops_at_junk_and_skips_blanks():
    assert parse_ulong("  250ms") == 250


def test_parse_without_digits_is_zero():
    assert parse_ulong("abc") == 0
    assert parse_ulong("") == 0


def test_parse_bare_hex_prefix_reads_zero():
    assert parse_ulong("0xg") == 0


def test_parse_negative_wraps():
    assert parse_ulong("-1") == ULONG_MAX
    assert ULONG_MAX == 2**64 - 1


def test_parse_overflow_raises():
    with pytest.raises(ValueError):
        parse_ulong("0x10000000000000000")


def test_source_read_unsupported():
    with pytest.raises(OSError) as info:
        SampleSource().read(1)
    assert info.value.errno == errno.ENOSYS


def test_source_read_mt_unsupported():
    with pytest.raises(OSError) as info:
        SampleSource().read_mt(2, 1)
    assert info.value.errno == errno.ENOSYS


def test_filter_keeps_source_and_defaults_to_unsupported():
    src = SampleSource()
    f = Filter(src)
    assert f.source is src
    with pytest.raises(OSError) as info:
        f.read(1)
    assert info.value.errno == errno.ENOSYS


def test_sample_defaults():
    assert Sample() == Sample(0, 0, 0, 0, 0)
    mt = MtSample()
    assert mt.valid is False
    assert mt.tracking_id == 0