"""
Utilities for handling file paths and part naming.
"""

from pathlib import Path

PART_SUFFIX = ".part"


def part_path(path: str | Path, index: int) -> str:
    """
    Returns the path of part `index` for a source or target file.

    The convention is `<path>.<index>.part`, zero-based and without padding,
    and is relied upon by downstream reassembly tooling.
    """
    if index < 0:
        raise ValueError(f"Part index cannot be negative, got {index}.")
    return f"{path}.{index}{PART_SUFFIX}"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)
