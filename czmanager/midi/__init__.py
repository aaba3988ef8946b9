"""MIDI transport, message channel and exchange protocol."""

from czmanager.midi.channel import MessageChannel
from czmanager.midi.exchange import ExchangeProtocol, ExchangeRecord, ExchangeState
from czmanager.midi.transport import MidoTransport, find_port, list_ports

__all__ = [
    "MessageChannel",
    "ExchangeProtocol",
    "ExchangeRecord",
    "ExchangeState",
    "MidoTransport",
    "find_port",
    "list_ports",
]
