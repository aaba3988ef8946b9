"""
MIDI transport built on mido.

Opens an input port whose callback feeds a MessageChannel and an output port
used to send request frames. The callback runs on the backend's own thread; it
only converts the message to bytes and pushes it, all decoding happens on the
consumer side.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import mido

from czmanager.errors import PortNotFound
from czmanager.midi.channel import MessageChannel

logger = logging.getLogger(__name__)


def list_ports() -> Tuple[List[str], List[str]]:
    """Return (input port names, output port names)."""
    return list(mido.get_input_names()), list(mido.get_output_names())


def find_port(names: Sequence[str], fragment: str, direction: str = "input") -> str:
    """
    Find a MIDI port by exact name or case-insensitive substring.

    Args:
        names: Available port names
        fragment: Full name or part of it
        direction: "input" or "output", used in the error message

    Returns:
        The matching port name (first substring match wins)

    Raises:
        PortNotFound: If nothing matches
    """
    if fragment in names:
        return fragment
    matches = [name for name in names if fragment.lower() in name.lower()]
    if not matches:
        raise PortNotFound(fragment, direction)
    if len(matches) > 1:
        logger.debug("Several %s ports match %r, using %r", direction, fragment, matches[0])
    return matches[0]


class MidoTransport:
    """
    Input/output port pair for one device.

    Example:
        channel = MessageChannel()
        with MidoTransport.open("CZ", "CZ", channel) as transport:
            transport.send(build_request(SEND_REQUEST_1, 10))
            response = channel.pop_blocking(timeout=5)
    """

    def __init__(self, input_port, output_port, channel: MessageChannel, sysex_only: bool = True):
        self.input_port = input_port
        self.output_port = output_port
        self.channel = channel
        self.sysex_only = sysex_only

    @classmethod
    def open(
        cls,
        input_fragment: str,
        output_fragment: str,
        channel: MessageChannel,
        sysex_only: bool = True,
    ) -> "MidoTransport":
        """
        Open ports whose names contain the given fragments.

        Raises:
            PortNotFound: If either port cannot be matched
        """
        inputs, outputs = list_ports()
        input_name = find_port(inputs, input_fragment, "input")
        output_name = find_port(outputs, output_fragment, "output")

        transport = cls(None, None, channel, sysex_only)
        transport.output_port = mido.open_output(output_name)
        try:
            transport.input_port = mido.open_input(input_name, callback=transport._on_message)
        except Exception:
            transport.output_port.close()
            raise

        logger.info("Connected: IN=%s OUT=%s", input_name, output_name)
        return transport

    def _on_message(self, message: "mido.Message") -> None:
        if self.sysex_only and message.type != "sysex":
            return
        self.channel.push(bytes(message.bytes()))

    def send(self, frame: bytes) -> None:
        """Send one complete message synchronously."""
        self.output_port.send(mido.Message.from_bytes(list(frame)))

    def close(self) -> None:
        for port in (self.input_port, self.output_port):
            if port is not None and not port.closed:
                port.close()

    @property
    def input_name(self) -> Optional[str]:
        return getattr(self.input_port, "name", None)

    @property
    def output_name(self) -> Optional[str]:
        return getattr(self.output_port, "name", None)

    def __enter__(self) -> "MidoTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
