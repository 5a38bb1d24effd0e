"""Data models for resolved Maven dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

UNKNOWN = "unknown"


@dataclass(frozen=True)
class Coordinate:
    """A single Maven dependency.

    Dedup identity is ``(group_id, artifact_id)``; see :attr:`key`.
    """

    group_id: str
    artifact_id: str
    version: str | None = None
    scope: str | None = "compile"
    source: str = "package-prefix"  # "embedded-pom" | "manifest-classpath" | "package-prefix" | "baseline"

    # Carried over from a packaged pom; inferred coordinates leave them unset.
    type: str | None = None
    classifier: str | None = None
    optional: bool = False
    exclusions: tuple[tuple[str, str], ...] = ()  # (groupId, artifactId)

    @property
    def key(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)

    @property
    def needs_review(self) -> bool:
        """Stub coordinates whose group/version could not be inferred."""
        return self.group_id == UNKNOWN or self.version == UNKNOWN

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id]
        if self.version:
            parts.append(self.version)
        return ":".join(parts)


class DependencySet:
    """Insertion-ordered coordinates, at most one per (group_id, artifact_id).

    The first coordinate added for a key wins; later adds are no-ops.
    """

    def __init__(self, coordinates: Iterable[Coordinate] = ()) -> None:
        self._by_key: dict[tuple[str, str], Coordinate] = {}
        for coordinate in coordinates:
            self.add(coordinate)

    def add(self, coordinate: Coordinate) -> bool:
        """Add *coordinate*; return False if its key was already present."""
        if coordinate.key in self._by_key:
            return False
        self._by_key[coordinate.key] = coordinate
        return True

    def extend(self, coordinates: Iterable[Coordinate]) -> int:
        return sum(1 for c in coordinates if self.add(c))

    def get(self, group_id: str, artifact_id: str) -> Coordinate | None:
        return self._by_key.get((group_id, artifact_id))

    def keys(self) -> list[tuple[str, str]]:
        return list(self._by_key)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Coordinate):
            return item.key in self._by_key
        return item in self._by_key

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def __bool__(self) -> bool:
        return bool(self._by_key)

    def __repr__(self) -> str:
        return f"DependencySet({[str(c) for c in self]})"
