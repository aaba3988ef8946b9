"""CZ SysEx protocol: opcode table, decoder and request frames."""

from czmanager.protocol.tags import CZ_TAGS, SYSEX_END, SYSEX_START, UNKNOWN, Opcode, TagTable
from czmanager.protocol.decoder import (
    DecodedNode,
    Envelope,
    SysexDecoder,
    TraceRecord,
    decode_request,
    format_trace,
)
from czmanager.protocol.requests import SEND_REQUEST_1, SEND_REQUEST_2, build_request

__all__ = [
    "CZ_TAGS",
    "SYSEX_END",
    "SYSEX_START",
    "UNKNOWN",
    "Opcode",
    "TagTable",
    "DecodedNode",
    "Envelope",
    "SysexDecoder",
    "TraceRecord",
    "decode_request",
    "format_trace",
    "SEND_REQUEST_1",
    "SEND_REQUEST_2",
    "build_request",
]
