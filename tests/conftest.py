"""Shared pytest fixtures for all tests."""

import os
from collections import namedtuple

import pytest

from segmerge.models.config import SegmergeConfig

DiskUsage = namedtuple("DiskUsage", "total used free")


@pytest.fixture
def make_source(tmp_path):
    """
    Factory creating a source file with deterministic, non-repeating content.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Callable taking (size, name) and returning the file path as a string
    """

    def _make(size, name="source.bin"):
        path = tmp_path / name
        path.write_bytes(bytes((i * 31 + i // 251) % 256 for i in range(size)))
        return str(path)

    return _make


@pytest.fixture
def storage_root(tmp_path):
    """
    Create an isolated directory tree standing in for device storage.

    Returns:
        Path to the storage root; nothing under it exists yet
    """
    root = tmp_path / 'device'
    root.mkdir()
    return root


@pytest.fixture
def resolver_config(storage_root):
    """
    Resolver configuration whose system files and default paths live under
    the storage root, so no test reads the real host layout.
    """
    return SegmergeConfig(
        default_external_path=str(storage_root / 'sdcard'),
        fallback_external_path=str(storage_root / 'storage' / 'sdcard0'),
        mount_table_path=str(storage_root / 'proc_mounts'),
        vold_config_paths=[
            str(storage_root / 'vold.fstab'),
            str(storage_root / 'vold.conf'),
        ],
    )


@pytest.fixture
def fake_disk_usage(monkeypatch):
    """
    Replace shutil.disk_usage with a table keyed by path.

    Returns:
        Dict mapping path -> (total, free); unknown paths get unique values
    """
    table = {}

    def _usage(path):
        path = os.fspath(path)
        total, free = table.get(path, (hash(path) % 10**9 + 10**9, 10**6))
        return DiskUsage(total, total - free, free)

    monkeypatch.setattr('segmerge.storage.resolver.shutil.disk_usage', _usage)
    return table
