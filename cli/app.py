"""
czmanager - SysEx tools for Casio CZ synthesizers.

A CLI for decoding CZ SysEx messages and exchanging requests with a device.
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli.commands.decode import decode
from cli.commands.ports import ports
from cli.commands.request import request
from czmanager import __version__

console = Console()

# Main app
app = typer.Typer(
    name="czmanager",
    help="Decode CZ SysEx messages and talk to CZ synthesizers.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Add commands directly
app.command(name="ports")(ports)
app.command(name="decode")(decode)
app.command(name="request")(request)


def configure_logging(verbose: int) -> None:
    """Route library logging through rich; -v for INFO, -vv for DEBUG."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]czmanager[/bold] version {__version__}")
    console.print("[dim]SysEx decoder and request tool for Casio CZ synthesizers[/dim]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More log output"),
) -> None:
    """
    czmanager - Decode and request CZ SysEx data.

    [bold]Quick Start:[/bold]

        czmanager ports                          # List MIDI ports
        czmanager decode patch.syx               # Trace a SysEx file
        czmanager decode --hex "F0 40 00 00 00 F7"

    [bold]Device Commands:[/bold]

        czmanager request IN OUT -c 0x11 -p 10   # Send a request

    Use --help with any command for more details.
    """
    configure_logging(verbose)

    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
