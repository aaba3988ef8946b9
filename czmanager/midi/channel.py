"""
Thread-safe FIFO between the MIDI input callback and the control thread.

The producer is the transport's delivery callback, which runs on a driver
thread and must return quickly, so push() never blocks on the consumer and does
no work under the lock beyond the append. The consumer blocks in
pop_blocking() on a condition variable until a message arrives, the timeout
expires, or the channel is closed.
"""

import logging
import threading
import time
from collections import deque
from typing import Deque, Optional, Union

from czmanager.errors import ChannelClosed, ChannelTimeout

logger = logging.getLogger(__name__)


class MessageChannel:
    """
    Single-producer/single-consumer queue of raw SysEx messages.

    Example:
        channel = MessageChannel()
        channel.push(b"\\xf0\\x44\\x00\\x00\\x70\\xf7")   # callback thread
        message = channel.pop_blocking(timeout=2.0)      # control thread
    """

    def __init__(self):
        self._messages: Deque[bytes] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._closed = False

    def push(self, message: Union[bytes, bytearray, memoryview]) -> None:
        """Append a message to the tail. Never blocks for longer than the append."""
        message = bytes(message)
        with self._not_empty:
            self._messages.append(message)
            self._not_empty.notify()

    def pop_blocking(self, timeout: Optional[float] = None) -> bytes:
        """
        Remove and return the oldest message, waiting for one if needed.

        Args:
            timeout: Maximum seconds to wait; None waits until a message
                arrives or the channel is closed

        Raises:
            ChannelTimeout: If no message arrived within timeout
            ChannelClosed: If the channel is closed and holds no messages
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._not_empty:
            while not self._messages:
                if self._closed:
                    raise ChannelClosed("Channel closed while waiting for a message")

                if deadline is None:
                    self._not_empty.wait()
                    continue

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ChannelTimeout(f"No message within {timeout}s")
                self._not_empty.wait(remaining)

            return self._messages.popleft()

    def pop_nowait(self) -> Optional[bytes]:
        """Return the oldest message, or None if the channel is empty."""
        with self._lock:
            if self._messages:
                return self._messages.popleft()
            return None

    def clear(self) -> int:
        """Drop every queued message and return how many were dropped."""
        with self._lock:
            dropped = len(self._messages)
            self._messages.clear()

        if dropped:
            logger.debug("Dropped %d stale message(s)", dropped)
        return dropped

    def close(self) -> None:
        """
        Close the channel and wake every waiter.

        Messages already queued can still be popped. Pushing after close is
        allowed and simply queues the message.
        """
        with self._not_empty:
            self._closed = True
            self._not_empty.notify_all()

    def reopen(self) -> None:
        with self._lock:
            self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
