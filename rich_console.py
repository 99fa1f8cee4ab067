"""
Rich console configuration for the landmark locator.

Provides styled terminal output with panels and logging.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table

from location_map import MapReadout

LOCATOR_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim",
    "gps": "green",
    "landmark": "bold red",
})

# Global console instance
console = Console(theme=LOCATOR_THEME)


def setup_rich_logging(verbose: bool = False) -> None:
    """
    Configure logging to use Rich handler.

    Args:
        verbose: Enable DEBUG level logging with full details
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                markup=False,
            )
        ],
        force=True,  # Override any existing configuration
    )


def print_banner(version: str = "1.0.0") -> None:
    console.print("\n[bold cyan]Landmark Locator[/]")
    console.print("[dim]Live position relative to a fixed landmark[/]")
    console.print(f"[muted]Version {version}[/]\n")


def print_readout(readout: MapReadout, landmark_label: str) -> None:
    """
    Print the map readout as a styled panel.

    Args:
        readout: Current readout from LocationMap.readout()
        landmark_label: Landmark name used in the distance row
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Status", "[success]tracking[/]" if readout.tracking else "[muted]idle[/]")
    table.add_row("Position", f"[gps]{escape(readout.coordinates)}[/]" if readout.coordinates else "[dim]unknown[/]")
    if readout.distance:
        table.add_row(f"Distance to [landmark]{escape(landmark_label)}[/]", escape(readout.distance))
    if readout.accuracy:
        table.add_row("Accuracy", escape(readout.accuracy))
    if readout.error:
        table.add_row("Error", f"[error]{escape(readout.error)}[/]")

    panel = Panel(
        table,
        title="[bold]Location[/]",
        border_style="red" if readout.error else "cyan",
        padding=(1, 2),
    )
    console.print(panel)


def print_completion_summary(
    output_dir: str,
    fixes: int,
    frames_written: int,
    renders: Optional[int] = None,
) -> None:
    """
    Print a styled completion summary.

    Args:
        output_dir: Directory the snapshots were written to
        fixes: Number of fixes replayed
        frames_written: Number of PNG snapshots written
        renders: Total renders performed (optional)
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold green")

    table.add_row("Fixes Replayed", f"{fixes:,}")
    if renders:
        table.add_row("Renders", f"{renders:,}")
    table.add_row("Snapshots", f"{frames_written:,}")
    table.add_row("Output", escape(output_dir))

    panel = Panel(
        table,
        title="[bold green]Complete[/]",
        border_style="green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print a styled error message.

    Args:
        message: Error message
        hint: Optional hint for resolution
    """
    console.print(f"\n[error]Error:[/] {escape(message)}")
    if hint:
        console.print(f"[muted]Hint: {escape(hint)}[/]")
