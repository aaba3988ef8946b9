"""
Request/response exchanges with a CZ device.

State machine::

    IDLE ──send──> REQUEST_SENT ──response──> RESPONSE_RECEIVED
      ^                 │                            │
      │                 └──timeout──> TIMED_OUT ─────┤
      └──────────────────────────────────────────────┘

The base protocol has no correlation id, so only one request may be
outstanding at a time: the first message the channel yields after a send is
taken as the answer to that send. A timeout (or a cancel) always returns the
protocol to IDLE so the caller can retry straight away.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from czmanager.config import ExchangeSettings
from czmanager.errors import (
    ChannelClosed,
    ChannelTimeout,
    ExchangeBusy,
    ExchangeCancelled,
    ResponseTimeout,
)
from czmanager.midi.channel import MessageChannel
from czmanager.utils.validation import validate_sysex_frame

logger = logging.getLogger(__name__)


class Sender(Protocol):
    def send(self, frame: bytes) -> None: ...


class ExchangeState(Enum):
    """Exchange protocol states."""

    IDLE = "idle"
    REQUEST_SENT = "request_sent"
    RESPONSE_RECEIVED = "response_received"
    TIMED_OUT = "timed_out"


@dataclass
class ExchangeRecord:
    """One completed round trip."""

    request: bytes
    response: bytes
    elapsed: float


class ExchangeProtocol:
    """
    Drives request/response round trips over a transport and a channel.

    Args:
        transport: Anything with a synchronous send(frame) method
        channel: Channel the transport's input callback pushes into
        settings: Timeout and flush behaviour

    Example:
        protocol = ExchangeProtocol(transport, channel)
        response = protocol.exchange(build_request(SEND_REQUEST_1, 10))
    """

    def __init__(
        self,
        transport: Sender,
        channel: MessageChannel,
        settings: Optional[ExchangeSettings] = None,
    ):
        self.transport = transport
        self.channel = channel
        self.settings = settings or ExchangeSettings()
        self.history: List[ExchangeRecord] = []
        self._state = ExchangeState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> ExchangeState:
        return self._state

    def _set_state(self, state: ExchangeState) -> None:
        logger.debug("Exchange %s -> %s", self._state.value, state.value)
        self._state = state

    def exchange(self, request: bytes, timeout: Optional[float] = None) -> bytes:
        """
        Send one request and wait for its response.

        Args:
            request: Complete request frame
            timeout: Seconds to wait; defaults to settings.timeout

        Returns:
            The raw response message

        Raises:
            ExchangeBusy: If another request is still awaiting its response
            ResponseTimeout: If nothing arrived in time (state returns to IDLE)
            ExchangeCancelled: If cancel() was called during the wait, or the
                channel is still closed (nothing is sent then)
        """
        if timeout is None:
            timeout = self.settings.timeout

        with self._state_lock:
            if self._state == ExchangeState.REQUEST_SENT:
                raise ExchangeBusy("A request is already awaiting its response")
            self._set_state(ExchangeState.IDLE)

            if self.channel.closed:
                raise ExchangeCancelled("Channel is closed; reopen it before sending")

            if self.settings.flush_before_send:
                self.channel.clear()

            logger.info("Sending %s", request.hex(" "))
            self.transport.send(request)
            self._set_state(ExchangeState.REQUEST_SENT)

        started = time.monotonic()
        try:
            response = self.channel.pop_blocking(timeout)
        except ChannelTimeout:
            self._set_state(ExchangeState.TIMED_OUT)
            logger.warning("No response within %ss", timeout)
            self._set_state(ExchangeState.IDLE)
            raise ResponseTimeout(timeout) from None
        except ChannelClosed:
            self._set_state(ExchangeState.IDLE)
            raise ExchangeCancelled("Exchange cancelled while awaiting response") from None

        elapsed = time.monotonic() - started
        self._set_state(ExchangeState.RESPONSE_RECEIVED)
        logger.info("Received %d bytes after %.3fs", len(response), elapsed)
        if not validate_sysex_frame(response):
            logger.warning("Response is not a well-formed SysEx frame")

        self.history.append(ExchangeRecord(request, response, elapsed))
        return response

    def run(self, requests: Sequence[bytes], timeout: Optional[float] = None) -> List[bytes]:
        """
        Run several exchanges one after another.

        Each request is only sent after the previous response arrived. The
        first failure propagates and stops the sequence.
        """
        return [self.exchange(request, timeout) for request in requests]

    def cancel(self) -> None:
        """
        Abandon a blocked wait by closing the channel.

        The channel stays closed; call channel.reopen() before the next
        exchange.
        """
        logger.info("Cancelling exchange")
        self.channel.close()
