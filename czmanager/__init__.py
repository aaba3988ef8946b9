"""
czmanager - SysEx decoder and request/response driver for Casio CZ synthesizers.

This library provides tools to:
- Decode and re-encode request-shaped CZ SysEx messages
- Build CZ request frames
- Exchange requests and responses with a live device over MIDI

Example usage:
    from czmanager import SysexDecoder, MessageChannel, ExchangeProtocol
    from czmanager.midi import MidoTransport
    from czmanager.protocol import build_request, SEND_REQUEST_1

    node = SysexDecoder().decode_request(bytes.fromhex("F0 40 00 00 00 4C 01 F7"))

    channel = MessageChannel()
    with MidoTransport.open("CZ", "CZ", channel) as transport:
        protocol = ExchangeProtocol(transport, channel)
        response = protocol.exchange(build_request(SEND_REQUEST_1, 10), timeout=5)
"""

__version__ = "0.1.0"
__author__ = "czmanager Contributors"

from czmanager.config import ExchangeSettings
from czmanager.errors import (
    CZError,
    SysexError,
    TruncatedMessage,
    UnmatchedTerminator,
    TrailingData,
    UnknownSymbol,
    ResponseTimeout,
)
from czmanager.midi.channel import MessageChannel
from czmanager.midi.exchange import ExchangeProtocol, ExchangeState
from czmanager.protocol.decoder import DecodedNode, Envelope, SysexDecoder
from czmanager.protocol.tags import TagTable, Opcode

__all__ = [
    "ExchangeSettings",
    "CZError",
    "SysexError",
    "TruncatedMessage",
    "UnmatchedTerminator",
    "TrailingData",
    "UnknownSymbol",
    "ResponseTimeout",
    "MessageChannel",
    "ExchangeProtocol",
    "ExchangeState",
    "DecodedNode",
    "Envelope",
    "SysexDecoder",
    "TagTable",
    "Opcode",
]
