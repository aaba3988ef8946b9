"""
Hex display utilities for raw SysEx frames.
"""

from typing import Optional

from rich.console import Console
from rich.text import Text

console = Console()


def format_frame(data: bytes, bytes_per_line: int = 16) -> Text:
    """
    Format a SysEx frame as hex, highlighting status bytes.

    F0/F7 markers are bold magenta, other bytes with the high bit set are red,
    data bytes are plain.
    """
    text = Text()
    for i, b in enumerate(data):
        if i and i % bytes_per_line == 0:
            text.append("\n")
        elif i:
            text.append(" ")

        if b in (0xF0, 0xF7):
            style = "bold magenta"
        elif b & 0x80:
            style = "red"
        else:
            style = ""
        text.append(f"{b:02X}", style=style)
    return text


def display_frame(data: bytes, label: Optional[str] = None, bytes_per_line: int = 16) -> None:
    """Print one frame, optionally prefixed with a label and its size."""
    if label:
        console.print(f"[bold]{label}[/bold] [dim]({len(data)} bytes)[/dim]")
    console.print(format_frame(data, bytes_per_line))
