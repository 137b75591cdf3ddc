"""
Storage Layer.

This package discovers writable storage volumes and manages the INI
configuration file.
"""

from .config_manager import ConfigManager
from .probe import is_writable
from .resolver import EnumerationTier, StorageVolumeResolver

__all__ = ["ConfigManager", "EnumerationTier", "StorageVolumeResolver", "is_writable"]
