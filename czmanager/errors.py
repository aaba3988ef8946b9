"""
Exception hierarchy for czmanager.

Every error raised by the library derives from CZError so callers (and the
CLI) can catch the whole family in one place. None of these are fatal: a
failed decode leaves the tag table and message channel untouched, and a failed
exchange leaves the protocol idle and ready for another request.
"""

from typing import Optional


class CZError(Exception):
    """Base class for all czmanager errors."""

    pass


class SysexError(CZError):
    """
    Structural error found while decoding a SysEx byte sequence.

    Attributes:
        offset: Position in the buffer where the problem was detected
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class TruncatedMessage(SysexError):
    """Input ended before a required byte or terminator."""

    pass


class UnmatchedTerminator(SysexError):
    """A 0xF7 terminator was found with no open start block."""

    pass


class TrailingData(SysexError):
    """Bytes remain after a complete request was decoded."""

    pass


class UnknownSymbol(CZError, KeyError):
    """Reverse lookup of a symbol that is not in the tag table."""

    def __init__(self, symbol: str):
        super().__init__(f"Unknown symbol: {symbol!r}")
        self.symbol = symbol

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class ChannelError(CZError):
    """Base class for message channel errors."""

    pass


class ChannelTimeout(ChannelError):
    """No message arrived within the allotted wait."""

    pass


class ChannelClosed(ChannelError):
    """The channel was closed while (or before) waiting for a message."""

    pass


class ExchangeError(CZError):
    """Base class for request/response exchange errors."""

    pass


class ResponseTimeout(ExchangeError):
    """The device did not answer a request in time."""

    def __init__(self, timeout: Optional[float]):
        super().__init__(f"No response within {timeout}s")
        self.timeout = timeout


class ExchangeBusy(ExchangeError):
    """A request was issued while another one is still awaiting its response."""

    pass


class ExchangeCancelled(ExchangeError):
    """The wait for a response was abandoned by closing the channel."""

    pass


class PortNotFound(CZError):
    """No MIDI port matched the requested name."""

    def __init__(self, fragment: str, direction: str = "input"):
        super().__init__(f"No MIDI {direction} port matching {fragment!r}")
        self.fragment = fragment
        self.direction = direction
