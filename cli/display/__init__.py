"""
CLI display modules.
"""

from cli.display.hex_view import display_frame, format_frame
from cli.display.trace_view import display_trace, format_record

__all__ = [
    "display_frame",
    "format_frame",
    "display_trace",
    "format_record",
]
