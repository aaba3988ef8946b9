"""
Data validation utilities for CZ SysEx values.
"""

from typing import Iterable

from czmanager.errors import CZError


class ValidationError(CZError, ValueError):
    """Raised when a value cannot be placed in a SysEx frame."""

    pass


def validate_midi_value(value: int, name: str = "value") -> None:
    """
    Validate that a value is a MIDI data byte (0-127).

    Args:
        value: The value to validate
        name: Name of the value for error messages

    Raises:
        ValidationError: If value is out of range
    """
    if not 0 <= value <= 127:
        raise ValidationError(f"{name} must be 0-127, got {value}")


def validate_channel(channel: int) -> None:
    """
    Validate a zero-based MIDI channel number (0-15).

    The CZ envelope stores the channel in the low nibble of a byte, so the
    wire value is one less than the number shown on the instrument.

    Raises:
        ValidationError: If channel is out of range
    """
    if not 0 <= channel <= 15:
        raise ValidationError(f"MIDI channel must be 0-15, got {channel}")


def validate_timeout(timeout: float) -> None:
    """
    Validate a response timeout in seconds.

    Raises:
        ValidationError: If timeout is not positive
    """
    if timeout <= 0:
        raise ValidationError(f"Timeout must be positive, got {timeout}")


def validate_sysex_frame(data: bytes) -> bool:
    """
    Check the outer framing of a SysEx message.

    Args:
        data: Complete message bytes

    Returns:
        True if the message starts with F0, ends with F7 and has data bytes
        only in between
    """
    if len(data) < 2:
        return False
    if data[0] != 0xF0 or data[-1] != 0xF7:
        return False
    return all(b < 0x80 for b in data[1:-1])


def parse_hex_bytes(text: str) -> bytes:
    """
    Parse a hex string such as "F0 44 00 00 70 F7" or "f0440000..." into bytes.

    Commas, spaces and 0x prefixes are accepted.

    Raises:
        ValidationError: If the text is not valid hex
    """
    tokens: Iterable[str] = text.replace(",", " ").split()
    cleaned = "".join(t[2:] if t.lower().startswith("0x") else t for t in tokens)
    try:
        return bytes.fromhex(cleaned)
    except ValueError:
        raise ValidationError(f"Invalid hex bytes: {text!r}") from None
