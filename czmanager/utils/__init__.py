"""Utility functions for czmanager."""

from czmanager.utils.validation import (
    ValidationError,
    parse_hex_bytes,
    validate_channel,
    validate_midi_value,
)

__all__ = [
    "ValidationError",
    "parse_hex_bytes",
    "validate_channel",
    "validate_midi_value",
]
