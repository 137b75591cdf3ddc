"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from segmerge.models.config import SegmergeConfig
from segmerge.models.parts import FilePart
from segmerge.models.volume import StorageVolume
from segmerge.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "PartMissing": [
            "• Make sure every part finished downloading before merging.",
            "• Pass the parts in index order: <file>.0.part, <file>.1.part, ...",
        ],
        "IOFailure": [
            "• Check free space and permissions on the destination volume.",
            "• The device may have been removed mid-operation.",
            "• Delete any partial output and retry from scratch.",
        ],
        "NoWritableVolume": [
            "• Mount a writable volume or fix its permissions.",
            "• List known mount paths with `volume_paths` in the config file.",
        ],
        "ConfigurationError": [
            "• Run `segmerge validate` to see the offending setting.",
            "• Run `segmerge init --force` to write a fresh default config.",
        ],
    }
    suggestions = suggestions_map.get(
        error_type,
        [
            "• Re-run with -vv for debug output.",
        ],
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: SegmergeConfig):
    """Displays the effective configuration."""
    console = Console()
    content = ""
    for key in sorted(SegmergeConfig.get_ini_keys()):
        value = getattr(config, key)
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_parts_table(parts: list[FilePart], duration: float):
    """Displays the parts produced by a split."""
    console = Console()
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("#", justify="right", style="bold cyan")
    table.add_column("Part")
    table.add_column("Size", justify="right")

    for part in parts:
        table.add_row(str(part.index), part.path, format_size(part.length))

    total = sum(part.length for part in parts)
    console.print(table)
    console.print(
        f"[green]✓ Split into {len(parts)} parts[/green] "
        f"([dim]{format_size(total)} in {format_duration(duration)}[/dim])"
    )


def print_volumes_table(volumes: list[StorageVolume]):
    """Displays discovered volumes; the first one is the default destination."""
    console = Console()
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("", width=1)
    table.add_column("Path", style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Usable", justify="right", style="green")

    for i, volume in enumerate(volumes):
        table.add_row(
            "*" if i == 0 else "",
            volume.path,
            format_size(volume.total_space),
            format_size(volume.usable_space),
        )

    console.print(
        Panel(
            table,
            title="[bold green]Writable Storage[/bold green]",
            border_style="green",
            expand=False,
        )
    )
