"""
Splits a file into ordered byte-range parts and merges parts back into one file.

Both operations are blocking single-shot calls. Every file handle is scoped to
the call and released on every exit path. Partial output from a failed call is
left in place for the caller to clean up or retry from scratch.
"""

import logging
import os
import stat
import time
from collections.abc import Sequence
from contextlib import ExitStack, suppress
from pathlib import Path
from typing import BinaryIO

from segmerge.exceptions import IOFailure, PartMissing
from segmerge.models.parts import FilePart, SplitPlan
from segmerge.utils.path import part_path
from segmerge.utils.structured_logger import AssemblyLogger

log = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 8192
ATOMIC_SUFFIX = ".merging"


class SegmentAssembler:
    """Performs split and merge of byte ranges with a bounded intermediate buffer."""

    def __init__(
        self,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        atomic_merge: bool = False,
        events: AssemblyLogger | None = None,
    ):
        """
        Args:
            buffer_size: Size of the per-call intermediate buffer, in bytes.
            atomic_merge: Write merge output to a temporary sibling and rename it
                into place only once every byte has been written.
            events: Optional structured event logger.
        """
        if buffer_size < 1:
            raise ValueError(f"Buffer size must be positive, got {buffer_size}.")
        self.buffer_size = buffer_size
        self.atomic_merge = atomic_merge
        self.events = events

    @staticmethod
    def plan(total_size: int, part_count: int) -> SplitPlan:
        """Computes the part layout for a source of `total_size` bytes."""
        return SplitPlan(total_size=total_size, part_count=part_count)

    @staticmethod
    def collect_parts(path: str | Path, part_count: int) -> list[str]:
        """Returns the ordered part paths produced by splitting `path`."""
        return [part_path(path, index) for index in range(part_count)]

    def split(self, source_path: str | Path, part_count: int) -> list[FilePart]:
        """
        Splits `source_path` into `part_count` part files named
        `<source_path>.<index>.part`. The source is read once, sequentially, and
        left untouched. Existing part files are truncated.

        Returns:
            The produced parts in index order.

        Raises:
            ValueError: If `part_count` is below 1 or exceeds the source size.
            IOFailure: If the source cannot be read or a part cannot be written.
        """
        if part_count < 1:
            raise ValueError(f"Part count must be at least 1, got {part_count}.")

        source_path = str(source_path)
        started = time.monotonic()
        try:
            src = open(source_path, "rb")  # noqa: SIM115
        except OSError as e:
            self._report_failure("split", source_path, e)
            raise IOFailure(f"Cannot open source '{source_path}': {e}") from e

        with src:
            info = os.fstat(src.fileno())
            if not stat.S_ISREG(info.st_mode):
                raise IOFailure(f"Source '{source_path}' is not a regular file.")
            plan = self.plan(info.st_size, part_count)
            if self.events:
                self.events.split_started(source_path, plan.total_size, part_count)

            view = memoryview(bytearray(self.buffer_size))
            parts: list[FilePart] = []
            for index, target_length in enumerate(plan.part_sizes):
                path = part_path(source_path, index)
                try:
                    with open(path, "wb") as dst:
                        written = self._copy_range(src, dst, target_length, view)
                except OSError as e:
                    self._report_failure("split", path, e)
                    raise IOFailure(f"Failed to write part '{path}': {e}") from e

                if written != target_length:
                    error = IOFailure(
                        f"Source '{source_path}' ended early: part {index} got "
                        f"{written} of {target_length} bytes."
                    )
                    self._report_failure("split", path, error)
                    raise error
                parts.append(FilePart(index=index, path=path, length=written))
                log.debug(f"Wrote part {index} ({written} bytes) to '{path}'.")

        if self.events:
            self.events.split_completed(
                source_path, part_count, plan.total_size, time.monotonic() - started
            )
        return parts

    def merge(
        self,
        target_path: str | Path,
        part_paths: Sequence[str | Path],
        atomic: bool | None = None,
    ) -> int:
        """
        Concatenates `part_paths`, in the order given, into `target_path`.

        Every part is checked and opened before the target is touched, so a
        missing part never leaves a half-written target behind. The order is
        taken as-is; callers are responsible for supplying index order.

        Returns:
            The number of bytes written, equal to the sum of the part lengths.

        Raises:
            ValueError: If no parts are given, or a non-atomic merge would
                overwrite one of its own parts.
            PartMissing: If any listed part does not exist.
            IOFailure: If reading a part or writing the target fails.
        """
        if not part_paths:
            raise ValueError("At least one part is required to merge.")

        target_path = str(target_path)
        atomic = self.atomic_merge if atomic is None else atomic
        write_path = target_path + ATOMIC_SUFFIX if atomic else target_path
        started = time.monotonic()

        with ExitStack() as stack:
            sources = []
            for path in map(str, part_paths):
                if not os.path.exists(path):
                    log.debug(f"Merge of '{target_path}' aborted: missing '{path}'.")
                    self._report_failure("merge", path, "part missing")
                    raise PartMissing(path)
                if (
                    not atomic
                    and os.path.exists(target_path)
                    and os.path.samefile(path, target_path)
                ):
                    raise ValueError(
                        f"Target '{target_path}' is also listed as a part; "
                        "merge into a different file or use an atomic merge."
                    )
                try:
                    sources.append(stack.enter_context(open(path, "rb")))
                except FileNotFoundError as e:
                    raise PartMissing(path) from e
                except OSError as e:
                    self._report_failure("merge", path, e)
                    raise IOFailure(f"Cannot open part '{path}': {e}") from e

            if self.events:
                self.events.merge_started(target_path, len(sources))

            view = memoryview(bytearray(self.buffer_size))
            total = 0
            try:
                with open(write_path, "wb") as dst:
                    for src in sources:
                        total += self._copy_all(src, dst, view)
                if atomic:
                    os.replace(write_path, target_path)
            except OSError as e:
                if atomic:
                    with suppress(OSError):
                        os.remove(write_path)
                self._report_failure("merge", target_path, e)
                raise IOFailure(f"Failed to merge into '{target_path}': {e}") from e

        if self.events:
            self.events.merge_completed(
                target_path, len(part_paths), total, time.monotonic() - started
            )
        return total

    @staticmethod
    def _copy_range(
        src: BinaryIO, dst: BinaryIO, length: int, view: memoryview
    ) -> int:
        """Copies up to `length` bytes from `src` to `dst`; stops early at EOF."""
        copied = 0
        while copied < length:
            wanted = min(len(view), length - copied)
            read = src.readinto(view[:wanted])
            if not read:
                break
            dst.write(view[:read])
            copied += read
        return copied

    @staticmethod
    def _copy_all(src: BinaryIO, dst: BinaryIO, view: memoryview) -> int:
        copied = 0
        while read := src.readinto(view):
            dst.write(view[:read])
            copied += read
        return copied

    def _report_failure(self, operation: str, path: str, error: object) -> None:
        if self.events:
            self.events.operation_failed(operation, path, str(error))
