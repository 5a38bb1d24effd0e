"""Source tree reconstruction from decompiled text."""

from jar_rebuilder.placement.engine import SOURCE_EXTENSION, SourcePlacementEngine
from jar_rebuilder.placement.scanner import PLACEHOLDER_TYPE, scan_declarations

__all__ = ["PLACEHOLDER_TYPE", "SOURCE_EXTENSION", "SourcePlacementEngine", "scan_declarations"]
