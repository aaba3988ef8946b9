"""
Decoded message trace display.
"""

from typing import Iterable, List

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from czmanager.protocol.decoder import DecodedNode, SysexDecoder, TraceRecord
from czmanager.protocol.tags import UNKNOWN

console = Console()

ENVELOPE_FIELDS = {"ID", "SUB1", "SUB2", "CHANNEL"}


def record_style(record: TraceRecord) -> str:
    """Pick a style for one trace line."""
    if record.symbol == UNKNOWN:
        return "yellow"
    if record.symbol in ENVELOPE_FIELDS:
        return "cyan"
    if record.symbol == "VALUE":
        return "green"
    return "bold blue"


def format_record(record: TraceRecord, indent: int = 2) -> Text:
    """Format one record as `<symbol> (<hex>)`, indented by depth."""
    text = Text(" " * (record.depth * indent))
    text.append(record.symbol, style=record_style(record))
    text.append(f" (0x{record.byte:02x})", style="dim")
    return text


def trace_lines(records: Iterable[TraceRecord], indent: int = 2) -> List[Text]:
    return [format_record(record, indent) for record in records]


def display_trace(
    node: DecodedNode,
    decoder: SysexDecoder,
    title: str = "Decoded Message",
    indent: int = 2,
) -> None:
    """Display the indented trace of one decoded message inside a panel."""
    body = Text("\n").join(trace_lines(decoder.trace(node), indent))

    subtitle = None
    if node.envelope is not None:
        leaves = sum(1 for _ in node.leaves())
        subtitle = f"channel {node.envelope.channel + 1}, {leaves} parameter(s)"

    console.print(
        Panel(body, title=f"[bold]{title}[/bold]", subtitle=subtitle, border_style="blue", expand=False)
    )
