"""
Data Models Layer.

This package contains the data structures shared by the assembler and the
storage resolver, plus the Pydantic configuration model.
"""

from .config import SegmergeConfig
from .parts import FilePart, SplitPlan
from .volume import DiscoveryContext, StorageVolume

__all__ = ["DiscoveryContext", "FilePart", "SegmergeConfig", "SplitPlan", "StorageVolume"]
