"""
Live writability probe for candidate storage roots.
"""

import logging
import os
import uuid

log = logging.getLogger(__name__)

DEFAULT_MARKER_NAME = "tw.txt"


def _remove_marker(marker_path: str) -> None:
    try:
        os.remove(marker_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.debug(f"Could not remove probe marker '{marker_path}': {e}")


def _write_marker(marker_path: str) -> None:
    marker = open(marker_path, "xb")
    try:
        with marker:
            marker.write(b"\x01")
    except OSError:
        _remove_marker(marker_path)
        raise


def is_writable(
    directory: str, marker_name: str = DEFAULT_MARKER_NAME, trust_flag: bool = False
) -> bool:
    """
    Checks that `directory` really accepts writes.

    Metadata flags are unreliable on some mounts (read-only remounts, FUSE
    layers), so a marker file is created and written. The marker is created
    exclusively and only a marker this probe created is removed; if a file
    named `marker_name` already exists, a uniquely suffixed marker is used
    instead. Removal is best-effort and a leaked marker does not fail the probe.

    Args:
        directory: The directory to probe.
        marker_name: File name of the marker created inside `directory`.
        trust_flag: Accept a positive `os.access` result without the live probe.
    """
    if trust_flag and os.access(directory, os.W_OK):
        return True

    marker_path = os.path.join(directory, marker_name)
    if os.path.lexists(marker_path):
        marker_path = f"{marker_path}.{uuid.uuid4().hex[:8]}"

    try:
        _write_marker(marker_path)
    except FileExistsError:
        # Created by someone else between the check and the write.
        log.debug(f"Write probe for '{directory}' raced on '{marker_path}'.")
        return False
    except OSError as e:
        log.debug(f"Write probe failed for '{directory}': {e}")
        return False

    _remove_marker(marker_path)
    return True
