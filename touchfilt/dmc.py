"""Reader for DMC serial touchscreens."""

from __future__ import annotations

import errno
import logging
import os
import time
from typing import BinaryIO

from .core import Sample

try:
    import termios
except ImportError:  # not available on this platform
    termios = None

log = logging.getLogger(__name__)

RELEASE = 0x10
COORDINATES = 0x11
ACK = 0x06
PRESSURE = 100


def _tty_fd(stream: object) -> int | None:
    if termios is None:
        return None
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    return fd if os.isatty(fd) else None


def _configure_tty(fd: int) -> None:
    iflag, oflag, cflag, lflag, _ispeed, _ospeed, cc = termios.tcgetattr(fd)
    iflag &= ~(
        termios.IGNBRK | termios.BRKINT | termios.PARMRK | termios.ISTRIP
        | termios.INLCR | termios.IGNCR | termios.ICRNL | termios.IXON | termios.IXOFF
    )
    oflag &= ~termios.OPOST
    lflag &= ~(termios.ECHO | termios.ECHONL | termios.ICANON | termios.ISIG | termios.IEXTEN)
    cflag &= ~(termios.CSIZE | termios.PARENB | termios.CSTOPB)
    cflag |= termios.CS8 | termios.CLOCAL
    cc[termios.VMIN] = 3
    cc[termios.VTIME] = 1
    termios.tcsetattr(
        fd, termios.TCSANOW,
        [iflag, oflag, cflag, lflag, termios.B9600, termios.B9600, cc],
    )


def _not_understood() -> OSError:
    return OSError(errno.EINVAL, "dmc: selected device is not a touchscreen I understand")


class DmcReader:
    """Decodes the DMC serial protocol into samples."""

    settle_delay = 1.0

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.current_x = 0
        self.current_y = 0

    def _send(self, data: bytes) -> bool:
        ok = self.stream.write(data) == len(data)
        flush = getattr(self.stream, "flush", None)
        if ok and flush is not None:
            flush()
        return ok

    def handshake(self) -> None:
        """Configure the line and switch the controller into reporting mode."""
        fd = _tty_fd(self.stream)
        if fd is not None:
            _configure_tty(fd)
        if not self._send(b"\x55"):
            raise OSError(errno.EINVAL, "dmc: failed to write. Check permissions of the device!")
        time.sleep(self.settle_delay)
        if not self._send(b"\x05\x40"):
            raise _not_understood()
        ack = self.stream.read(1)
        if not ack or len(ack) != 1:
            raise _not_understood()
        if ack[0] != ACK:
            log.warning("dmc: got wrong return value. The touchscreen may not work.")
        if not self._send(b"\x31"):
            raise _not_understood()

    def read(self, nr: int) -> list[Sample]:
        """Read up to nr protocol bytes' worth of samples; unknown bytes are skipped."""
        samples: list[Sample] = []
        for index in range(nr):
            head = self.stream.read(1)
            if not head:
                if index == 0:
                    raise OSError(errno.EIO, "dmc: no data from device")
                break
            if head[0] == RELEASE:
                pressure = 0
            elif head[0] == COORDINATES:
                body = self.stream.read(4)
                if not body or len(body) != 4:
                    if index == 0:
                        raise OSError(errno.EIO, "dmc: short coordinate record")
                    break
                self.current_x = (body[0] << 8) + body[1]
                self.current_y = (body[2] << 8) + body[3]
                pressure = PRESSURE
            else:
                continue
            micros = time.time_ns() // 1000
            samples.append(Sample(
                x=self.current_x, y=self.current_y, pressure=pressure,
                sec=micros // 1_000_000, usec=micros % 1_000_000,
            ))
        return samples