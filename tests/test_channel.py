"""Tests for the thread-safe message channel."""

import threading
import time

import pytest

from czmanager.errors import ChannelClosed, ChannelTimeout
from czmanager.midi.channel import MessageChannel


class TestMessageChannel:
    """Single-thread behaviour."""

    def test_fifo_order(self, channel):
        for i in range(5):
            channel.push(bytes([0xF0, i, 0xF7]))

        assert len(channel) == 5
        assert [channel.pop_blocking(timeout=0.1)[1] for _ in range(5)] == list(range(5))
        assert len(channel) == 0

    def test_push_copies_to_bytes(self, channel):
        buf = bytearray([0xF0, 0x01, 0xF7])
        channel.push(buf)
        buf[1] = 0x02

        assert channel.pop_blocking(timeout=0.1) == bytes([0xF0, 0x01, 0xF7])

    def test_pop_timeout(self, channel):
        started = time.monotonic()
        with pytest.raises(ChannelTimeout):
            channel.pop_blocking(timeout=0.05)
        assert time.monotonic() - started >= 0.05

    def test_zero_timeout_on_empty(self, channel):
        with pytest.raises(ChannelTimeout):
            channel.pop_blocking(timeout=0)

    def test_pop_nowait(self, channel):
        assert channel.pop_nowait() is None
        channel.push(b"\xf0\xf7")
        assert channel.pop_nowait() == b"\xf0\xf7"

    def test_clear(self, channel):
        channel.push(b"a")
        channel.push(b"b")
        assert channel.clear() == 2
        assert len(channel) == 0
        assert channel.clear() == 0

    def test_close_drains_remaining(self, channel):
        channel.push(b"x")
        channel.close()

        assert channel.closed
        assert channel.pop_blocking(timeout=0.1) == b"x"
        with pytest.raises(ChannelClosed):
            channel.pop_blocking(timeout=0.1)

    def test_reopen(self, channel):
        channel.close()
        channel.reopen()
        assert not channel.closed
        with pytest.raises(ChannelTimeout):
            channel.pop_blocking(timeout=0.01)


class TestMessageChannelThreads:
    """Producer and consumer on different threads."""

    def test_pop_blocks_until_push(self, channel):
        result = []

        def consumer():
            result.append(channel.pop_blocking(timeout=2.0))

        thread = threading.Thread(target=consumer)
        thread.start()
        time.sleep(0.05)
        assert thread.is_alive()
        assert result == []

        channel.push(b"\xf0\x01\xf7")
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert result == [b"\xf0\x01\xf7"]

    def test_interleaved_order_preserved(self, channel):
        """N pushes against M <= N pops keep push order."""
        count = 200
        received = []

        def producer():
            for i in range(count):
                channel.push(i.to_bytes(2, "big"))
                if i % 17 == 0:
                    time.sleep(0.001)

        def consumer():
            for _ in range(count - 10):
                received.append(int.from_bytes(channel.pop_blocking(timeout=2.0), "big"))

        threads = [threading.Thread(target=consumer), threading.Thread(target=producer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5.0)

        assert received == list(range(count - 10))
        assert len(channel) == 10

    def test_close_wakes_waiter(self, channel):
        errors = []

        def consumer():
            try:
                channel.pop_blocking()
            except ChannelClosed as e:
                errors.append(e)

        thread = threading.Thread(target=consumer)
        thread.start()
        time.sleep(0.05)
        channel.close()
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert len(errors) == 1
