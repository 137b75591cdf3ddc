"""
segmerge: segmented file assembly and writable storage discovery.
"""

__version__ = "0.1.0"
