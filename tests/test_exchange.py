"""Tests for the request/response exchange protocol."""

import threading
import time

import pytest

from czmanager.config import ExchangeSettings
from czmanager.errors import ExchangeBusy, ExchangeCancelled, ResponseTimeout
from czmanager.midi.exchange import ExchangeProtocol, ExchangeState
from czmanager.protocol.requests import SEND_REQUEST_1, SEND_REQUEST_2, build_request

RESPONSE_1 = bytes([0xF0, 0x44, 0x00, 0x00, 0x70, 0x30, 0xF7])
RESPONSE_2 = bytes([0xF0, 0x44, 0x00, 0x00, 0x70, 0x31, 0x01, 0x02, 0xF7])


@pytest.fixture
def protocol(transport, channel):
    return ExchangeProtocol(transport, channel, ExchangeSettings(timeout=1.0))


class TestExchange:
    """Single round trips."""

    def test_initial_state(self, protocol):
        assert protocol.state == ExchangeState.IDLE

    def test_response_received(self, protocol, transport):
        request = build_request(SEND_REQUEST_1, 10)
        transport.queue_reply(RESPONSE_1)

        response = protocol.exchange(request)

        assert response == RESPONSE_1
        assert transport.sent == [request]
        assert protocol.state == ExchangeState.RESPONSE_RECEIVED
        assert len(protocol.history) == 1
        assert protocol.history[0].request == request
        assert protocol.history[0].response == RESPONSE_1
        assert protocol.history[0].elapsed >= 0

    def test_timeout_returns_to_idle(self, protocol, transport):
        transport.queue_reply(None)

        with pytest.raises(ResponseTimeout) as exc:
            protocol.exchange(build_request(SEND_REQUEST_1, 10), timeout=0.05)

        assert exc.value.timeout == 0.05
        assert protocol.state == ExchangeState.IDLE
        assert protocol.history == []

    def test_retry_after_timeout(self, protocol, transport):
        request = build_request(SEND_REQUEST_1, 10)
        transport.queue_reply(None)
        with pytest.raises(ResponseTimeout):
            protocol.exchange(request, timeout=0.05)

        transport.queue_reply(RESPONSE_1)
        assert protocol.exchange(request) == RESPONSE_1
        assert transport.sent == [request, request]

    def test_default_timeout_from_settings(self, transport, channel):
        protocol = ExchangeProtocol(transport, channel, ExchangeSettings(timeout=0.05))
        started = time.monotonic()
        with pytest.raises(ResponseTimeout):
            protocol.exchange(build_request(SEND_REQUEST_1, 1))
        assert time.monotonic() - started < 1.0

    def test_stale_messages_flushed(self, protocol, transport, channel):
        channel.push(b"\xf0\x7f\xf7")
        transport.queue_reply(RESPONSE_1)

        assert protocol.exchange(build_request(SEND_REQUEST_1, 10)) == RESPONSE_1

    def test_stale_messages_kept_without_flush(self, transport, channel):
        protocol = ExchangeProtocol(
            transport, channel, ExchangeSettings(timeout=1.0, flush_before_send=False)
        )
        stale = b"\xf0\x7f\xf7"
        channel.push(stale)
        transport.queue_reply(RESPONSE_1)

        # First queued message is taken as the answer
        assert protocol.exchange(build_request(SEND_REQUEST_1, 10)) == stale

    def test_busy_while_awaiting(self, protocol, transport):
        transport.queue_reply(None)
        errors = []

        def waiter():
            try:
                protocol.exchange(build_request(SEND_REQUEST_1, 1), timeout=0.5)
            except ResponseTimeout as e:
                errors.append(e)

        thread = threading.Thread(target=waiter)
        thread.start()
        deadline = time.monotonic() + 1.0
        while protocol.state != ExchangeState.REQUEST_SENT and time.monotonic() < deadline:
            time.sleep(0.005)

        with pytest.raises(ExchangeBusy):
            protocol.exchange(build_request(SEND_REQUEST_2, 1))

        thread.join(timeout=2.0)
        assert len(errors) == 1
        assert protocol.state == ExchangeState.IDLE

    def test_cancel(self, protocol, transport, channel):
        transport.queue_reply(None)
        errors = []

        def waiter():
            try:
                protocol.exchange(build_request(SEND_REQUEST_1, 1), timeout=5.0)
            except ExchangeCancelled as e:
                errors.append(e)

        thread = threading.Thread(target=waiter)
        thread.start()
        time.sleep(0.05)
        protocol.cancel()
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert len(errors) == 1
        assert protocol.state == ExchangeState.IDLE

        channel.reopen()
        transport.queue_reply(RESPONSE_1)
        assert protocol.exchange(build_request(SEND_REQUEST_1, 1)) == RESPONSE_1

    def test_nothing_sent_while_closed(self, transport, channel):
        """A closed channel stops the request before it reaches the device."""
        protocol = ExchangeProtocol(
            transport, channel, ExchangeSettings(timeout=1.0, flush_before_send=False)
        )
        protocol.cancel()
        transport.queue_reply(RESPONSE_2)

        with pytest.raises(ExchangeCancelled):
            protocol.exchange(build_request(SEND_REQUEST_1, 1))

        assert transport.sent == []
        assert len(channel) == 0
        assert protocol.state == ExchangeState.IDLE

        # The reply queued for the refused request answers the next real one
        channel.reopen()
        request = build_request(SEND_REQUEST_2, 1)
        assert protocol.exchange(request) == RESPONSE_2
        assert transport.sent == [request]


class TestRun:
    """Sequences of exchanges."""

    def test_two_requests_in_order(self, protocol, transport):
        requests = [build_request(SEND_REQUEST_1, 10), build_request(SEND_REQUEST_2, 10)]
        transport.queue_reply(RESPONSE_1)
        transport.queue_reply(RESPONSE_2)

        assert protocol.run(requests) == [RESPONSE_1, RESPONSE_2]
        assert transport.sent == requests
        assert [r.response for r in protocol.history] == [RESPONSE_1, RESPONSE_2]

    def test_failure_stops_sequence(self, protocol, transport):
        requests = [build_request(SEND_REQUEST_1, 10), build_request(SEND_REQUEST_2, 10)]
        transport.queue_reply(None)

        with pytest.raises(ResponseTimeout):
            protocol.run(requests, timeout=0.05)
        assert transport.sent == requests[:1]
