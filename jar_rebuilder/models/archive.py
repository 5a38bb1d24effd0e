"""Data models for archive entries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable


class EntryKind(str, enum.Enum):
    CLASS = "class"
    RESOURCE = "resource"
    DESCRIPTOR = "descriptor"
    MANIFEST = "manifest"


@dataclass
class ArchiveEntry:
    """One classified archive entry. Bytes are read on demand."""

    path: str  # full path inside the archive, e.g. BOOT-INF/classes/app.yml
    kind: EntryKind
    relative_path: str  # path with the embedded-classes root stripped
    _reader: Callable[[], bytes] = field(repr=False, compare=False)

    def read(self) -> bytes:
        return self._reader()
