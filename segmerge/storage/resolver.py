"""
Discovers writable storage roots across heterogeneous device layouts.

Candidates come from a prioritized list of enumeration tiers, newest platform
capability first. The first tier that yields at least one usable volume wins.
Usable means the path is a directory, passes the live write probe, and is not
an alias of a volume already found.
"""

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass

from segmerge.exceptions import NoWritableVolume
from segmerge.models.config import SegmergeConfig
from segmerge.models.volume import DiscoveryContext, StorageVolume
from segmerge.utils.structured_logger import DiscoveryLogger

from .mounts import intersect_mounts, read_mount_points, read_vold_mount_points
from .probe import is_writable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnumerationTier:
    """A named strategy producing candidate root paths for one discovery call."""

    name: str
    enumerate: Callable[[DiscoveryContext], list[str]]


class StorageVolumeResolver:
    """
    Resolves the ordered list of writable, deduplicated storage volumes.

    Nothing is cached: removable media may come and go between calls, so every
    call to `discover` re-reads the environment and system files.
    """

    def __init__(
        self,
        config: SegmergeConfig | None = None,
        events: DiscoveryLogger | None = None,
    ):
        self.config = config or SegmergeConfig()
        self.events = events
        self.tiers = [
            EnumerationTier("volume-manager", self._volume_manager_paths),
            EnumerationTier("environment", self._environment_paths),
            EnumerationTier("mount-table", self._mount_table_paths),
        ]

    def discover(self, context: DiscoveryContext | None = None) -> list[StorageVolume]:
        """
        Returns writable volumes in discovery order.

        The first entry is the default destination; an empty list means no
        writable storage is available and is a valid result.
        """
        context = context or DiscoveryContext()
        for tier in self.tiers:
            candidates = tier.enumerate(context)
            volumes = self._accept(candidates)
            log.debug(
                f"Tier '{tier.name}': {len(candidates)} candidates, "
                f"{len(volumes)} accepted."
            )
            if self.events:
                self.events.tier_attempted(tier.name, len(candidates), len(volumes))
            if volumes:
                if self.events:
                    self.events.discovery_completed(
                        tier.name, [volume.path for volume in volumes]
                    )
                return volumes

        log.warning("No writable storage volume was found.")
        if self.events:
            self.events.discovery_completed(None, [])
        return []

    def default_volume(self, context: DiscoveryContext | None = None) -> StorageVolume:
        """
        Returns the preferred destination volume.

        Raises:
            NoWritableVolume: If discovery found nothing usable.
        """
        volumes = self.discover(context)
        if not volumes:
            raise NoWritableVolume("No writable storage available.")
        return volumes[0]

    def _accept(self, candidates: list[str]) -> list[StorageVolume]:
        """
        Filters candidates down to writable directories and collapses aliases.

        Two paths with the same (total, usable) fingerprint are taken to be the
        same device mounted twice; the shorter path is kept, and on equal
        length the first one seen. The survivor takes the position of the
        first entry with that fingerprint.
        """
        by_fingerprint: dict[tuple[int, int], StorageVolume] = {}
        seen: set[str] = set()
        for path in candidates:
            if not path or path in seen:
                continue
            seen.add(path)

            if not os.path.isdir(path):
                self._reject(path, "not a directory")
                continue
            if not is_writable(
                path,
                marker_name=self.config.probe_file_name,
                trust_flag=self.config.trust_writable_flag,
            ):
                self._reject(path, "not writable")
                continue
            try:
                usage = shutil.disk_usage(path)
            except OSError as e:
                self._reject(path, f"capacity unavailable: {e}")
                continue

            volume = StorageVolume(
                path=path, total_space=usage.total, usable_space=usage.free
            )
            previous = by_fingerprint.get(volume.fingerprint)
            if previous is not None and len(previous.path) <= len(path):
                self._reject(path, f"alias of '{previous.path}'")
                continue
            if previous is not None:
                self._reject(previous.path, f"alias of '{path}'")
            by_fingerprint[volume.fingerprint] = volume
        return list(by_fingerprint.values())

    def _reject(self, path: str, reason: str) -> None:
        log.debug(f"Rejected storage candidate '{path}': {reason}.")
        if self.events:
            self.events.volume_rejected(path, reason)

    def _volume_manager_paths(self, context: DiscoveryContext) -> list[str]:
        if context.volume_lister is not None:
            try:
                paths = [str(path) for path in context.volume_lister() or []]
            except Exception as e:
                log.debug(f"Volume manager query failed: {e}")
                paths = []
        elif self.config.volume_paths:
            paths = list(self.config.volume_paths)
        else:
            return []
        return paths or [self.config.default_external_path]

    def _environment_paths(self, context: DiscoveryContext) -> list[str]:
        cfg = self.config
        env = context.environ
        primary = env.get(cfg.external_storage_env, "")
        secondary = env.get(cfg.secondary_storage_env, "")
        emulated = env.get(cfg.emulated_storage_env, "")

        paths = []
        if not emulated:
            paths.append(primary or cfg.fallback_external_path)
        else:
            # Emulated storage burns the user id into the path: /storage/emulated/0
            root = primary or cfg.default_external_path
            user_id = root.rstrip("/").rsplit("/", 1)[-1]
            if user_id.isascii() and user_id.isdigit():
                paths.append(emulated.rstrip("/") + "/" + user_id)
            else:
                paths.append(root)

        if secondary:
            paths.extend(p.strip() for p in secondary.split(os.pathsep) if p.strip())
        return paths

    def _mount_table_paths(self, context: DiscoveryContext) -> list[str]:
        cfg = self.config
        mounts = read_mount_points(
            cfg.mount_table_path, cfg.block_device_prefixes, cfg.default_external_path
        )
        vold = read_vold_mount_points(cfg.vold_config_paths, cfg.default_external_path)
        return intersect_mounts(mounts, vold)
