"""
Data structures used by storage volume discovery.
"""

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StorageVolume:
    """A candidate writable root directory and its capacity metrics."""

    path: str
    total_space: int
    usable_space: int
    writable: bool = True

    @property
    def fingerprint(self) -> tuple[int, int]:
        """The capacity pair used to detect aliased mount points."""
        return self.total_space, self.usable_space


@dataclass
class DiscoveryContext:
    """
    Inputs for one discovery call.

    Attributes:
        environ: Environment values describing storage roots. Read once per call.
        volume_lister: Queries the platform volume manager for mount paths.
            None when the platform exposes no such manager.
    """

    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    volume_lister: Callable[[], Sequence[str]] | None = None
