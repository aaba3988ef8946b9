"""
Request command - send CZ requests to a device and show the responses.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from cli.display.hex_view import display_frame
from cli.display.trace_view import display_trace
from czmanager.config import ExchangeSettings
from czmanager.errors import CZError, SysexError
from czmanager.midi.channel import MessageChannel
from czmanager.midi.exchange import ExchangeProtocol
from czmanager.midi.transport import MidoTransport
from czmanager.protocol.decoder import SysexDecoder
from czmanager.protocol.requests import SEND_REQUEST_1, build_requests, parse_command

console = Console()
app = typer.Typer()


def load_settings(config: Optional[Path], **overrides) -> ExchangeSettings:
    """Load settings from a JSON file (if given) and apply CLI overrides."""
    settings = ExchangeSettings.load(config) if config else ExchangeSettings()
    return settings.merged(**overrides)


@app.command()
def request(
    input_port: Optional[str] = typer.Argument(None, help="Input port name or part of it"),
    output_port: Optional[str] = typer.Argument(None, help="Output port name or part of it"),
    command: List[str] = typer.Option(
        [], "--command", "-c", help="Request command (0x11, 17, send1); repeatable"
    ),
    patch: int = typer.Option(10, "--patch", "-p", help="Patch number (0-127)"),
    channel: Optional[int] = typer.Option(None, "--channel", help="MIDI channel (0-15)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds per response"),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON settings file"),
    decode_responses: bool = typer.Option(
        False, "--decode", "-d", help="Try to decode responses with the request grammar"
    ),
) -> None:
    """
    Send one or more requests and print each response.

    Requests are sent one at a time; the next request goes out only after
    the previous response arrived. Responses are shown as raw hex since their
    layout depends on the request that produced them.

    Examples:

        czmanager request "USB MIDI" "USB MIDI" --command 0x11 --patch 10

        czmanager request CZ CZ -c 0x11 -c 0x12 --timeout 3
    """
    try:
        settings = load_settings(
            config,
            timeout=timeout,
            channel=channel,
            input_port=input_port,
            output_port=output_port,
        )
        commands = [parse_command(c) for c in command] or [SEND_REQUEST_1]
        frames = build_requests(commands, patch, settings.channel)
    except (CZError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not settings.input_port or not settings.output_port:
        console.print("[red]Error: Input and output ports are required[/red]")
        console.print("[dim]Run 'czmanager ports' to list them[/dim]")
        raise typer.Exit(1)

    channel_queue = MessageChannel()
    decoder = SysexDecoder()

    try:
        with MidoTransport.open(
            settings.input_port, settings.output_port, channel_queue, settings.sysex_only
        ) as transport:
            console.print(
                Panel(
                    f"[bold]IN:[/bold]  {transport.input_name}\n"
                    f"[bold]OUT:[/bold] {transport.output_name}\n"
                    f"[bold]Timeout:[/bold] {settings.timeout}s",
                    title="[bold]Connected[/bold]",
                    border_style="green",
                    expand=False,
                )
            )

            protocol = ExchangeProtocol(transport, channel_queue, settings)
            for i, frame in enumerate(frames, 1):
                display_frame(frame, label=f"Request {i}")
                response = protocol.exchange(frame)
                display_frame(response, label=f"Response {i}")

                if decode_responses:
                    try:
                        display_trace(decoder.decode_request(response), decoder, title=f"Response {i}")
                    except SysexError as e:
                        console.print(f"[yellow]Response {i} does not fit the request grammar: {e}[/yellow]")
    except CZError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]{len(frames)} exchange(s) completed[/green]")


if __name__ == "__main__":
    app()
