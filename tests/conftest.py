"""Test configuration and fixtures."""

import sys
import threading
from pathlib import Path
from typing import List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from czmanager.midi.channel import MessageChannel
from czmanager.protocol.decoder import SysexDecoder
from czmanager.protocol.tags import TagTable


class FakeTransport:
    """
    Stand-in for MidoTransport.

    Records every sent frame and, when a reply is queued for it, pushes that
    reply into the channel from a separate thread after a short delay, the way
    a driver callback would.
    """

    def __init__(self, channel: MessageChannel, delay: float = 0.01):
        self.channel = channel
        self.delay = delay
        self.sent: List[bytes] = []
        self.replies: List[Optional[bytes]] = []
        self._threads: List[threading.Thread] = []

    def queue_reply(self, reply: Optional[bytes]) -> None:
        """Queue the reply for the next send; None means the device stays silent."""
        self.replies.append(reply)

    def send(self, frame: bytes) -> None:
        self.sent.append(frame)
        reply = self.replies.pop(0) if self.replies else None
        if reply is None:
            return

        timer = threading.Timer(self.delay, self.channel.push, args=(reply,))
        timer.daemon = True
        timer.start()
        self._threads.append(timer)

    def join(self) -> None:
        for t in self._threads:
            t.join()


@pytest.fixture
def tags():
    """Return the default CZ tag table."""
    return TagTable.default()


@pytest.fixture
def decoder(tags):
    """Return a decoder over the default table."""
    return SysexDecoder(tags)


@pytest.fixture
def empty_frame():
    """F0 40 00 00 00 F7 - envelope only."""
    return bytes([0xF0, 0x40, 0x00, 0x00, 0x00, 0xF7])


@pytest.fixture
def cartridge_frame():
    """F0 40 00 00 00 4C 01 F7 - one parameter."""
    return bytes([0xF0, 0x40, 0x00, 0x00, 0x00, 0x4C, 0x01, 0xF7])


@pytest.fixture
def nested_frame():
    """Frame with a nested block and unknown opcodes."""
    return bytes(
        [
            0xF0, 0x44, 0x00, 0x00, 0x70,  # outer start + envelope
            0x40, 0x02,  # CZ_BEND_RANGE = 2
            0xF0, 0x44, 0x01, 0x02, 0x73,  # inner start + envelope
            0x55, 0x01,  # CZ_OCTAVE_SHIFT = 1
            0x13,  # unknown
            0xF7,  # closes inner
            0x20,  # unknown
            0xF7,  # closes outer
        ]
    )


@pytest.fixture
def channel():
    """Return a fresh message channel."""
    return MessageChannel()


@pytest.fixture
def transport(channel):
    """Return a fake transport feeding the channel."""
    fake = FakeTransport(channel)
    yield fake
    fake.join()
