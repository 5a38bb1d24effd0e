"""Data models for bytecode type references."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

# A fully qualified dotted type name, e.g. "java.util.List".
TypeReference = str


@dataclass(frozen=True)
class ClassReferenceSet:
    """Types referenced by one class file, keyed by the owning class."""

    owner: str
    references: frozenset[TypeReference]

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.references

    def __iter__(self) -> Iterator[TypeReference]:
        return iter(self.references)

    def __len__(self) -> int:
        return len(self.references)
