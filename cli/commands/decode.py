"""
Decode command - trace the structure of CZ SysEx messages.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli.display.hex_view import display_frame
from cli.display.trace_view import display_trace
from czmanager.errors import CZError
from czmanager.protocol.decoder import SysexDecoder
from czmanager.utils.validation import parse_hex_bytes

console = Console()
app = typer.Typer()


@app.command()
def decode(
    file: Optional[Path] = typer.Argument(None, help="SysEx file (.syx) to decode"),
    hex_bytes: Optional[str] = typer.Option(
        None, "--hex", "-x", help='Bytes to decode, e.g. "F0 40 00 00 00 4C 01 F7"'
    ),
    show_raw: bool = typer.Option(False, "--raw", "-r", help="Also show the raw bytes"),
    indent: int = typer.Option(2, "--indent", "-i", help="Spaces per nesting level"),
) -> None:
    """
    Decode request-shaped CZ SysEx messages.

    Every message in the input is decoded in turn and printed as an indented
    trace of opcodes. Structural errors (missing terminator, stray
    terminator) stop decoding and exit with code 1.

    Examples:

        czmanager decode patch.syx

        czmanager decode --hex "F0 40 00 00 00 4C 01 F7"
    """
    if file is None and hex_bytes is None:
        console.print("[red]Error: Give a file or --hex bytes[/red]")
        raise typer.Exit(1)

    if file is not None:
        if not file.exists():
            console.print(f"[red]Error: File not found: {file}[/red]")
            raise typer.Exit(1)
        with open(file, "rb") as f:
            data = f.read()
        source = str(file)
    else:
        try:
            data = parse_hex_bytes(hex_bytes)
        except CZError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        source = "--hex"

    if not data:
        console.print(f"[yellow]No data in {source}[/yellow]")
        raise typer.Exit(1)

    decoder = SysexDecoder()
    count = 0
    try:
        for node in decoder.iter_messages(data):
            count += 1
            if show_raw:
                display_frame(decoder.encode(node), label=f"Message {count}")
            display_trace(node, decoder, title=f"Message {count}", indent=indent)
    except CZError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]Decoded {count} message(s) from {source}[/dim]")


if __name__ == "__main__":
    app()
