"""Parallel directory discovery feeding a bounded hand-off queue."""

from .tree_scanner import HANDOFF_CAPACITY, HandOff, ScannedEntry, TreeScanner

__all__ = ["HANDOFF_CAPACITY", "HandOff", "ScannedEntry", "TreeScanner"]
