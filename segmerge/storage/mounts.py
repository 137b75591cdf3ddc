"""
Readers for the system files consulted by the mount-table discovery tier.

Two sources are combined: the kernel mount table, which lists what is mounted
right now, and the legacy volume-daemon configuration, which lists the mount
points that are declared as storage. Only paths present in both are kept.
"""

import logging
from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)

DEV_MOUNT_PREFIX = "dev_mount"
MOUNT_POINT_PREFIX = "mount_point"


def read_mount_points(
    mount_table_path: str, device_prefixes: Sequence[str], default_path: str
) -> list[str]:
    """
    Collects the mount points of block devices with a known vendor prefix.

    The default external path is always the first entry, since some mount
    tables do not list it.

    Example line:
        /dev/block/vold/179:1 /mnt/sdcard vfat rw,dirsync,nosuid 0 0
    """
    mounts = [default_path]
    prefixes = tuple(device_prefixes)
    try:
        with open(mount_table_path, encoding="utf-8", errors="replace") as f:
            for line in f:
                if not line.startswith(prefixes):
                    continue
                fields = line.split()
                if len(fields) < 2:
                    continue
                if fields[1] != default_path:
                    mounts.append(fields[1])
    except OSError as e:
        log.debug(f"Could not read mount table '{mount_table_path}': {e}")
    return mounts


def read_vold_mount_points(
    config_paths: Iterable[str], default_path: str
) -> list[str] | None:
    """
    Parses the first readable volume-daemon config file.

    Recognized lines:
        dev_mount sdcard /mnt/sdcard:auto auto /devices/platform/...
        mount_point /mnt/sdcard

    Returns:
        The declared mount points, seeded with the default external path, or
        None when no config file could be read.
    """
    lines = None
    for path in config_paths:
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
            log.debug(f"Read volume daemon config from '{path}'.")
            break
        except OSError as e:
            log.debug(f"Volume daemon config '{path}' unavailable: {e}")
    if lines is None:
        return None

    vold = [default_path]
    for raw in lines:
        line = raw.strip()
        if line.startswith(DEV_MOUNT_PREFIX):
            fields = line.split()
            if len(fields) < 3:
                continue
            element = fields[2].split(":", 1)[0]
        elif line.startswith(MOUNT_POINT_PREFIX):
            element = line[len(MOUNT_POINT_PREFIX) :].strip()
        else:
            continue
        if element and element != default_path:
            vold.append(element)
    return vold


def intersect_mounts(mounts: list[str], vold: list[str] | None) -> list[str]:
    """Keeps the mounts also declared by the volume daemon, in mount order."""
    if vold is None:
        return list(mounts)
    declared = set(vold)
    return [mount for mount in mounts if mount in declared]
