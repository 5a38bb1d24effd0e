"""Archive walker — open a jar/war and classify its entries."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Iterator

import structlog

from jar_rebuilder.archive.manifest import parse_class_path
from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.exceptions import InvalidArchive
from jar_rebuilder.models.archive import ArchiveEntry, EntryKind

log = structlog.get_logger("jar_rebuilder.archive")

MANIFEST_PATH = "META-INF/MANIFEST.MF"
DESCRIPTOR_NAME = "pom.xml"
DESCRIPTOR_ROOT = "META-INF/maven/"
CLASS_SUFFIX = ".class"


class ArchiveWalker:
    """Read-only view over one archive.

    Use as a context manager; the zip handle is held for the whole scan and
    closed exactly once::

        with ArchiveWalker(path, config) as archive:
            for entry in archive.iter_entries():
                ...
    """

    def __init__(self, path: str | Path, config: RebuilderConfig | None = None) -> None:
        self.path = Path(path)
        self.config = config or RebuilderConfig()
        self._zip: zipfile.ZipFile | None = None

    # ── lifecycle ────────────────────────────────────────────────────────

    def open(self) -> ArchiveWalker:
        if not self.path.is_file():
            raise InvalidArchive(str(self.path), "file not found")
        if self.path.suffix.lower() not in self.config.archive_extensions:
            raise InvalidArchive(
                str(self.path),
                f"expected one of {', '.join(self.config.archive_extensions)}",
            )
        try:
            self._zip = zipfile.ZipFile(self.path)
        except (zipfile.BadZipFile, OSError) as e:
            raise InvalidArchive(str(self.path), f"not a zip archive ({e})") from e
        log.debug("walker.opened", archive=str(self.path), entries=len(self._zip.infolist()))
        return self

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> ArchiveWalker:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    # ── entries ──────────────────────────────────────────────────────────

    def iter_entries(self) -> Iterator[ArchiveEntry]:
        """Yield classified entries in native archive order.

        Each call starts a fresh pass. Excluded and unclassifiable entries
        are never yielded.
        """
        archive = self._require_open()
        for info in archive.infolist():
            if info.is_dir():
                continue
            entry = self.classify(info.filename)
            if entry is not None:
                yield entry

    def classify(self, name: str) -> ArchiveEntry | None:
        """Classify one entry name, or return None if it should be skipped."""
        if name == MANIFEST_PATH:
            return self._entry(name, EntryKind.MANIFEST, name)
        if name == DESCRIPTOR_NAME or (
            name.startswith(DESCRIPTOR_ROOT) and name.endswith(f"/{DESCRIPTOR_NAME}")
        ):
            return self._entry(name, EntryKind.DESCRIPTOR, name)

        relative, embedded = self._strip_embedded_root(name)
        if self.is_excluded(name) or (embedded and self.is_excluded(relative)):
            log.debug("walker.entry_excluded", entry=name)
            return None

        if name.endswith(CLASS_SUFFIX):
            return self._entry(name, EntryKind.CLASS, relative)
        if embedded:
            return self._entry(name, EntryKind.RESOURCE, relative)
        return None

    def is_excluded(self, name: str) -> bool:
        return name.startswith(self.config.excluded_prefixes)

    def read(self, name: str) -> bytes:
        return self._require_open().read(name)

    def manifest_classpath(self) -> list[str]:
        """Return the manifest's ``Class-Path`` tokens (empty if absent)."""
        archive = self._require_open()
        try:
            raw = archive.read(MANIFEST_PATH)
        except KeyError:
            return []
        return parse_class_path(raw.decode("utf-8", errors="replace"))

    # ── internals ────────────────────────────────────────────────────────

    def _entry(self, name: str, kind: EntryKind, relative: str) -> ArchiveEntry:
        return ArchiveEntry(
            path=name,
            kind=kind,
            relative_path=relative,
            _reader=lambda: self.read(name),
        )

    def _strip_embedded_root(self, name: str) -> tuple[str, bool]:
        for root in self.config.embedded_class_roots:
            if name.startswith(root):
                return name[len(root):], True
        return name, False

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise RuntimeError(f"archive {self.path} is not open")
        return self._zip
