"""
Data structures describing how a file maps onto its ordered parts.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FilePart:
    """A contiguous byte range of a logical file, materialized on disk."""

    index: int
    path: str
    length: int


@dataclass(frozen=True)
class SplitPlan:
    """
    Describes how a source of `total_size` bytes maps onto `part_count` parts.

    Every part is `block_size` long except the last, which absorbs the
    remainder so that the sizes always sum to `total_size`.
    """

    total_size: int
    part_count: int

    def __post_init__(self):
        if self.part_count < 1:
            raise ValueError(f"Part count must be at least 1, got {self.part_count}.")
        if self.total_size < 0:
            raise ValueError(f"Total size cannot be negative, got {self.total_size}.")
        if self.part_count > max(self.total_size, 1):
            raise ValueError(
                f"Cannot split {self.total_size} bytes into {self.part_count} parts."
            )

    @property
    def block_size(self) -> int:
        return self.total_size // self.part_count

    @property
    def part_sizes(self) -> list[int]:
        """Target length of each part, in index order."""
        sizes = [self.block_size] * (self.part_count - 1)
        sizes.append(self.total_size - self.block_size * (self.part_count - 1))
        return sizes
