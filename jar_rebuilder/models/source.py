"""Data models for placed source files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class SourceFileRecord:
    package_path: str  # dotted package, "" for the source root
    type_name: str
    destination: Path


@dataclass
class WriteRegistry:
    """Every destination written during one run, plus overwrites among them."""

    records: list[SourceFileRecord] = field(default_factory=list)
    collisions: list[Path] = field(default_factory=list)
    _written: set[Path] = field(default_factory=set, repr=False)

    def register(self, record: SourceFileRecord) -> bool:
        """Record a write. Returns True if it overwrote an earlier write."""
        collided = record.destination in self._written
        if collided:
            self.collisions.append(record.destination)
        self._written.add(record.destination)
        self.records.append(record)
        return collided

    @property
    def destinations(self) -> set[Path]:
        return set(self._written)

    @property
    def collision_count(self) -> int:
        return len(self.collisions)
