"""Archive access — entry classification and manifest parsing."""

from jar_rebuilder.archive.manifest import parse_class_path, parse_main_attributes
from jar_rebuilder.archive.walker import ArchiveWalker

__all__ = ["ArchiveWalker", "parse_class_path", "parse_main_attributes"]
