"""
CZ request frame construction.

Request format:
    F0 44 00 00 7n CC PP 70 31 F7

Where:
    44: Casio manufacturer ID
    7n: channel byte, n = MIDI channel (0-15), high nibble fixed at 7
    CC: request command
    PP: patch number
    70 31: fixed request trailer
"""

from typing import List, Sequence

from czmanager.protocol.tags import SYSEX_END, SYSEX_START
from czmanager.utils.validation import validate_channel, validate_midi_value

CASIO_ID = 0x44
CHANNEL_FLAGS = 0x70
REQUEST_TRAILER = (0x70, 0x31)

SEND_REQUEST_1 = 0x11
SEND_REQUEST_2 = 0x12

REQUEST_COMMANDS = {
    "send1": SEND_REQUEST_1,
    "send2": SEND_REQUEST_2,
}


def build_request(command: int, patch: int, channel: int = 0) -> bytes:
    """
    Build a complete request frame.

    Args:
        command: Request command byte (0-127)
        patch: Patch number (0-127)
        channel: Zero-based MIDI channel (0-15)

    Returns:
        Frame bytes including F0 and F7

    Raises:
        ValidationError: If any value does not fit its field
    """
    validate_midi_value(command, "command")
    validate_midi_value(patch, "patch")
    validate_channel(channel)

    return bytes(
        [
            SYSEX_START,
            CASIO_ID,
            0x00,
            0x00,
            CHANNEL_FLAGS | channel,
            command,
            patch,
            *REQUEST_TRAILER,
            SYSEX_END,
        ]
    )


def build_requests(commands: Sequence[int], patch: int, channel: int = 0) -> List[bytes]:
    """Build one request per command, all for the same patch and channel."""
    return [build_request(command, patch, channel) for command in commands]


def parse_command(text: str) -> int:
    """
    Parse a command given by name ("send1") or number ("0x11", "17").

    Raises:
        ValueError: If the text is neither a known name nor a number
    """
    key = text.strip().lower()
    if key in REQUEST_COMMANDS:
        return REQUEST_COMMANDS[key]
    return int(key, 0)
