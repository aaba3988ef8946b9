"""
Ports command - list available MIDI ports.
"""

import typer
from rich.console import Console
from rich.table import Table
from rich import box

from czmanager.midi.transport import list_ports

console = Console()
app = typer.Typer()


def create_port_table(title: str, names: list) -> Table:
    table = Table(title=title, box=box.SIMPLE, expand=False)
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", style="cyan")

    for i, name in enumerate(names):
        table.add_row(str(i), name)

    if not names:
        table.add_row("-", "[dim](none found)[/dim]")

    return table


@app.command()
def ports() -> None:
    """
    List MIDI input and output ports.

    Port names (or any part of them) can be passed to the request command.

    Examples:

        czmanager ports
    """
    inputs, outputs = list_ports()

    console.print(create_port_table(f"Input ports ({len(inputs)})", inputs))
    console.print(create_port_table(f"Output ports ({len(outputs)})", outputs))

    if not inputs or not outputs:
        console.print("[yellow]Connect a MIDI interface and try again.[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
