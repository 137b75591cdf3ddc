"""
Core segment assembly engine.

The `SegmentAssembler` splits a file into ordered byte-range parts before a
segmented transfer and merges the fetched parts back into one byte-exact file
afterwards.
"""

from .assembler import SegmentAssembler

__all__ = ["SegmentAssembler"]
