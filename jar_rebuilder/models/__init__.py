"""Data models shared across the rebuild pipeline."""

from jar_rebuilder.models.archive import ArchiveEntry, EntryKind
from jar_rebuilder.models.dependency import UNKNOWN, Coordinate, DependencySet
from jar_rebuilder.models.project import (
    EmbeddedDescriptor,
    Plugin,
    ProjectDescriptor,
    ProjectIdentity,
    Repository,
)
from jar_rebuilder.models.references import ClassReferenceSet, TypeReference
from jar_rebuilder.models.source import SourceFileRecord, WriteRegistry

__all__ = [
    "UNKNOWN",
    "ArchiveEntry",
    "ClassReferenceSet",
    "Coordinate",
    "DependencySet",
    "EmbeddedDescriptor",
    "EntryKind",
    "Plugin",
    "ProjectDescriptor",
    "ProjectIdentity",
    "Repository",
    "SourceFileRecord",
    "TypeReference",
    "WriteRegistry",
]
