import struct

import pytest

from touchfilt.dus3000 import Command, Dus3000Reader, State, command_bytes


class FakeSerial:
    def __init__(self, data=b""):
        self.pending = bytearray(data)
        self.tx = bytearray()

    def feed(self, data):
        self.pending.extend(data)

    def read(self, n):
        chunk = bytes(self.pending[:n])
        del self.pending[:n]
        return chunk

    def write(self, data):
        self.tx.extend(data)
        return len(data)


def _report(down, x, y):
    return struct.pack("<BBHH", 0x01, down, x, y)


def _reader(data=b""):
    reader = Dus3000Reader(FakeSerial(data))
    reader.resync_delay = 0
    return reader


@pytest.mark.parametrize(
    "command, wire",
    [
        (Command.VERSION_INFO, b"\x02\x4c\x02\x04\x00"),
        (Command.SETUP_WINXP, b"\x02\x4c\x02\x80\x04"),
        (Command.COORDINATES_ON, b"\x02\x4c\x02\x81\x01"),
        (Command.COORDINATES_OFF, b"\x02\x4c\x02\x81\x00"),
        (Command.ADJUST_OFFSET, b"\x02\x4c\x01\x17"),
        (Command.CALIBRATE_OFFSET, b"\x02\x4c\x01\x01"),
    ],
)
def test_command_bytes(command, wire):
    assert command_bytes(command) == wire


def test_command_bytes_rejects_unknown():
    with pytest.raises(ValueError):
        command_bytes(99)


def test_start_sends_setup_and_coordinates_on():
    reader = _reader()
    reader.start()
    expected = command_bytes(Command.SETUP_WINXP) + command_bytes(Command.COORDINATES_ON)
    assert bytes(reader.stream.tx) == expected


def test_start_in_adjust_state_sends_adjust():
    reader = _reader()
    reader.state = State.ADJUST_OFFSET
    reader.start()
    assert bytes(reader.stream.tx).endswith(command_bytes(Command.ADJUST_OFFSET))


def test_reports_become_samples():
    reader = _reader(_report(1, 300, 400) + _report(0, 301, 402))
    samples = reader.read(5)
    assert [(s.x, s.y, s.pressure) for s in samples] == [(300, 400, 255), (301, 402, 0)]


def test_read_respects_count():
    reader = _reader(_report(1, 1, 2) + _report(1, 3, 4))
    assert [(s.x, s.y) for s in reader.read(1)] == [(1, 2)]
    assert [(s.x, s.y) for s in reader.read(1)] == [(3, 4)]


def test_partial_report_is_completed_on_next_read():
    data = _report(1, 70, 80)
    reader = _reader(data[:3])
    assert reader.read(1) == []
    reader.stream.feed(data[3:])
    (sample,) = reader.read(1)
    assert (sample.x, sample.y, sample.pressure) == (70, 80, 255)


def test_version_response_is_consumed():
    response = b"\x02\x4c\x04\x04AB\x00"
    reader = _reader(response + _report(1, 9, 10))
    samples = reader.read(1)
    assert [(s.x, s.y) for s in samples] == [(9, 10)]
    assert reader.stream.tx == bytearray()


def test_calibration_sequence():
    reader = _reader(b"\x02\x4c\x02\x17\x01")
    reader.state = State.ADJUST_OFFSET
    assert reader.read(1) == []
    assert reader.state is State.CALIBRATE_OFFSET
    assert bytes(reader.stream.tx) == command_bytes(Command.CALIBRATE_OFFSET)

    reader.stream.feed(b"\x02\x4c\x02\x01\x01")
    assert reader.read(1) == []
    assert reader.state is State.COORDINATES
    assert bytes(reader.stream.tx).endswith(command_bytes(Command.COORDINATES_ON))


def test_failed_adjust_keeps_state():
    reader = _reader(b"\x02\x4c\x02\x17\x00")
    reader.state = State.ADJUST_OFFSET
    reader.read(1)
    assert reader.state is State.ADJUST_OFFSET
    assert reader.stream.tx == bytearray()


def test_unknown_response_resynchronizes():
    reader = _reader(b"\x55\x66\x77\x88" + _report(1, 5, 6))
    reader.state = State.CALIBRATE_OFFSET
    samples = reader.read(1)
    assert [(s.x, s.y) for s in samples] == [(5, 6)]
    assert reader.state is State.COORDINATES
    expected = command_bytes(Command.COORDINATES_OFF) + command_bytes(Command.COORDINATES_ON)
    assert bytes(reader.stream.tx) == expected