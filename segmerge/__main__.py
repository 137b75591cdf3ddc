"""
Main entry point for the segmerge application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import logging
import sys

import typer
from rich.console import Console

from segmerge.cli.app import app
from segmerge.cli.formatters import format_error_with_suggestions
from segmerge.exceptions import SegmergeError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("segmerge")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(130)
    except SegmergeError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
