"""
Defines the command-line interface for the application using Typer.
"""

import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from segmerge import __version__
from segmerge.core.assembler import SegmentAssembler
from segmerge.exceptions import SegmergeError
from segmerge.models.config import SegmergeConfig
from segmerge.storage.config_manager import ConfigManager
from segmerge.storage.resolver import StorageVolumeResolver
from segmerge.utils.formatting import format_duration, format_size
from segmerge.utils.structured_logger import create_structured_logger

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_parts_table,
    print_volumes_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=False,
        )
    ],
)
log = logging.getLogger("segmerge")

app = typer.Typer(
    name="segmerge",
    help=(
        "Split files into byte-range parts, merge parts back, and find writable"
        " storage. Use 'segmerge <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "segmerge"


CONFIG_FILE = get_config_dir() / "config.ini"


class _State:
    """Per-invocation settings shared between the callback and commands."""

    def __init__(self, config_file: Path, log_dir: Path | None):
        self.config_file = config_file
        self.log_dir = log_dir
        self._loggers = None

    def load_config(self, cli_options: dict | None = None) -> SegmergeConfig:
        return ConfigManager(self.config_file).load_config(cli_options)

    def loggers(self):
        if self._loggers is None:
            self._loggers = create_structured_logger(
                self.log_dir, enable_json=self.log_dir is not None
            )
        return self._loggers

    def close(self) -> None:
        if self._loggers is not None:
            self._loggers[0].close()


def _state(ctx: typer.Context) -> _State:
    return ctx.obj


def _fail(error: SegmergeError) -> None:
    console.print(format_error_with_suggestions(error))
    raise typer.Exit(code=1) from error


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    config_file: Path = typer.Option(
        CONFIG_FILE, "--config", "-c", help="Path to the INI configuration file."
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Also write JSON-lines event logs to this directory."
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
):
    """Segmented file assembly toolkit."""
    if version:
        console.print(f"[bold]segmerge[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("segmerge").setLevel(log_level)

    state = _State(config_file, log_dir)
    ctx.obj = state
    ctx.call_on_close(state.close)

    if show_config:
        try:
            print_config(config_file, state.load_config())
        except SegmergeError as e:
            _fail(e)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def split(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="The file to split."),
    parts: int | None = typer.Option(
        None, "-n", "--parts", help="Number of parts (default from config)."
    ),
    buffer_size: int | None = typer.Option(
        None, "--buffer-size", help="Intermediate buffer size in bytes."
    ),
):
    """Split a file into <file>.<index>.part files."""
    state = _state(ctx)
    cli_options = {"buffer_size": buffer_size} if buffer_size is not None else None
    try:
        config = state.load_config(cli_options)
        _, assembly_log, _ = state.loggers()
        assembler = SegmentAssembler(config.buffer_size, events=assembly_log)
        start_time = time.monotonic()
        part_count = parts if parts is not None else config.default_part_count
        produced = assembler.split(source, part_count)
    except SegmergeError as e:
        _fail(e)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    print_parts_table(produced, time.monotonic() - start_time)


@app.command()
def merge(
    ctx: typer.Context,
    target: Path = typer.Argument(..., help="The file to write."),
    part_paths: list[Path] | None = typer.Argument(  # noqa: B008
        None, help="Part files, in merge order."
    ),
    count: int | None = typer.Option(
        None,
        "-n",
        "--count",
        help="Merge <target>.0.part .. <target>.<N-1>.part instead of listing parts.",
    ),
    atomic: bool | None = typer.Option(
        None,
        "--atomic/--no-atomic",
        help="Write to a temporary file and rename it into place on success.",
    ),
):
    """Concatenate part files, in the given order, into one file."""
    if part_paths and count:
        console.print("[red]✗ Give either part paths or --count, not both.[/red]")
        raise typer.Exit(code=1)
    if count:
        part_paths = SegmentAssembler.collect_parts(target, count)
    if not part_paths:
        console.print(
            "[red]✗ No parts provided.[/red] "
            "Use: [cyan]segmerge merge <TARGET> <PART>...[/cyan] or [cyan]--count[/cyan]"
        )
        raise typer.Exit(code=1)

    state = _state(ctx)
    try:
        config = state.load_config()
        _, assembly_log, _ = state.loggers()
        assembler = SegmentAssembler(
            config.buffer_size, atomic_merge=config.atomic_merge, events=assembly_log
        )
        start_time = time.monotonic()
        written = assembler.merge(target, part_paths, atomic=atomic)
    except SegmergeError as e:
        _fail(e)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    duration = time.monotonic() - start_time
    console.print(
        f"[green]✓ Merged {len(part_paths)} parts into '{target}'[/green] "
        f"([dim]{format_size(written)} in {format_duration(duration)}[/dim])"
    )


@app.command()
def volumes(ctx: typer.Context):
    """List writable storage volumes; the first one is the default destination."""
    state = _state(ctx)
    try:
        config = state.load_config()
    except SegmergeError as e:
        _fail(e)
    _, _, discovery_log = state.loggers()
    found = StorageVolumeResolver(config, events=discovery_log).discover()
    if not found:
        console.print("[yellow]⚠️  No writable storage available.[/yellow]")
        raise typer.Exit(code=1)
    print_volumes_table(found)


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with every setting at its default."""
    config_file = _state(ctx).config_file
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()
    try:
        ConfigManager(config_file).save_new_config()
    except SegmergeError as e:
        _fail(e)
    console.print(f"[bold green]✓ Configuration saved to '{config_file}'[/bold green]")


@app.command()
def validate(ctx: typer.Context):
    """Validate the current configuration."""
    state = _state(ctx)
    try:
        config = state.load_config()
    except SegmergeError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
    print_config(state.config_file, config)
    console.print("[bold green]✓ Configuration is valid.[/bold green]")
