"""Reader for DMC DUS series projected capacitive touchscreens over UART."""

from __future__ import annotations

import logging
import os
import time
from enum import Enum, IntEnum
from typing import BinaryIO

from .core import Sample

try:
    import termios
except ImportError:  # not available on this platform
    termios = None

log = logging.getLogger(__name__)

REPORT_ID = 0x01
RESPONSE_START = (0x02, 0x4C)

RESPONSE_CAL_OFFSET = 0x01
RESPONSE_VERSION_INFO = 0x04
RESPONSE_FIRMWARE_INFO = 0x06
RESPONSE_ADJ_OFFSET = 0x17


class Command(IntEnum):
    VERSION_INFO = 0
    DETAILED_FIRMWARE_INFO = 1
    SETUP_WINXP = 2
    COORDINATES_ON = 3
    COORDINATES_OFF = 4
    ADJUST_OFFSET = 5
    CALIBRATE_OFFSET = 6


_COMMANDS = {
    Command.VERSION_INFO: bytes((0x02, 0x4C, 0x02, 0x04, 0x00)),
    Command.DETAILED_FIRMWARE_INFO: bytes((0x02, 0x4C, 0x02, 0x06, 0x00)),
    Command.SETUP_WINXP: bytes((0x02, 0x4C, 0x02, 0x80, 0x04)),
    Command.COORDINATES_ON: bytes((0x02, 0x4C, 0x02, 0x81, 0x01)),
    Command.COORDINATES_OFF: bytes((0x02, 0x4C, 0x02, 0x81, 0x00)),
    Command.ADJUST_OFFSET: bytes((0x02, 0x4C, 0x01, 0x17)),
    Command.CALIBRATE_OFFSET: bytes((0x02, 0x4C, 0x01, 0x01)),
}


def command_bytes(command: Command | int) -> bytes:
    """Return the wire bytes of a controller command."""
    return _COMMANDS[Command(command)]


class State(Enum):
    ADJUST_OFFSET = 0
    CALIBRATE_OFFSET = 1
    COORDINATES = 2


def _tty_fd(stream: object) -> int | None:
    if termios is None:
        return None
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    return fd if os.isatty(fd) else None


def _configure_tty(fd: int) -> None:
    cc = termios.tcgetattr(fd)[6]
    cc[termios.VTIME] = 0
    cc[termios.VMIN] = 1
    cflag = termios.CS8 | termios.CREAD | termios.CLOCAL | termios.HUPCL
    termios.tcsetattr(
        fd, termios.TCSAFLUSH,
        [termios.IGNBRK | termios.IGNPAR, 0, cflag, 0, termios.B57600, termios.B57600, cc],
    )


class Dus3000Reader:
    """Decodes mouse-format reports and controller responses into samples."""

    resync_delay = 0.05

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.state = State.COORDINATES
        self._rx = bytearray()

    def _send(self, command: Command) -> bool:
        data = command_bytes(command)
        return self.stream.write(data) == len(data)

    def start(self) -> None:
        """Configure the line, select XP mode and start the current state's command."""
        fd = _tty_fd(self.stream)
        if fd is not None:
            _configure_tty(fd)
        self._send(Command.SETUP_WINXP)
        if self.state is State.ADJUST_OFFSET:
            self._send(Command.ADJUST_OFFSET)
        elif self.state is State.CALIBRATE_OFFSET:
            self._send(Command.CALIBRATE_OFFSET)
        else:
            self._send(Command.COORDINATES_ON)

    def _fill(self, length: int) -> bool:
        while len(self._rx) < length:
            data = self.stream.read(length - len(self._rx))
            if not data:
                return False
            self._rx += data
        return True

    def read(self, nr: int) -> list[Sample]:
        """Return up to nr samples; stops early when the line has no more data."""
        samples: list[Sample] = []
        while len(samples) < nr:
            if not self._fill(4):
                break
            if self._rx[0] == REPORT_ID:
                if not self._fill(6):
                    break
                msg = bytes(self._rx)
                self._rx.clear()
                samples.append(Sample(
                    x=msg[2] | (msg[3] << 8),
                    y=msg[4] | (msg[5] << 8),
                    pressure=255 if msg[1] else 0,
                ))
            elif tuple(self._rx[:2]) == RESPONSE_START:
                if not self._fill(3 + self._rx[2]):
                    break
                msg = bytes(self._rx)
                self._rx.clear()
                self._handle_response(msg)
            else:
                self._resync()
        return samples

    def _handle_response(self, msg: bytes) -> None:
        kind = msg[3]
        status = msg[4] if len(msg) > 4 else 0
        if kind == RESPONSE_VERSION_INFO:
            log.debug("Version information: %s", msg[3:].decode("latin-1"))
        elif kind == RESPONSE_FIRMWARE_INFO:
            log.debug("Firmware information: %s", msg.decode("latin-1"))
        elif kind == RESPONSE_ADJ_OFFSET:
            if self.state is not State.ADJUST_OFFSET or not status:
                return
            log.debug("Adjust offset succeeded!")
            if not self._send(Command.CALIBRATE_OFFSET):
                log.error("Calibrate offset command transmission failed!")
                return
            self.state = State.CALIBRATE_OFFSET
        elif kind == RESPONSE_CAL_OFFSET:
            if self.state is not State.CALIBRATE_OFFSET or not status:
                log.error("Calibrate offset failed!")
                return
            log.debug("Calibrate offset succeeded!")
            if not self._send(Command.COORDINATES_ON):
                log.error("Enable coordinates command transmission failed!")
                return
            self.state = State.COORDINATES
            log.debug("Calibration finished!")

    def _resync(self) -> None:
        log.warning(
            "DUS3000: unknown response 0x %s - resynchronizing!",
            " ".join(f"{b:02x}" for b in self._rx[:4]),
        )
        self._send(Command.COORDINATES_OFF)
        time.sleep(self.resync_delay)
        fd = _tty_fd(self.stream)
        if fd is not None:
            termios.tcflush(fd, termios.TCIOFLUSH)
        self._rx.clear()
        self.state = State.COORDINATES
        self._send(Command.COORDINATES_ON)