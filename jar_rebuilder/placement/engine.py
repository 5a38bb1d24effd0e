"""Source placement engine — decompiled text in, package-qualified source tree out."""

from __future__ import annotations

from pathlib import Path

import structlog

from jar_rebuilder.exceptions import WriteError
from jar_rebuilder.models.archive import ArchiveEntry
from jar_rebuilder.models.source import SourceFileRecord, WriteRegistry
from jar_rebuilder.placement.scanner import scan_declarations

log = structlog.get_logger("jar_rebuilder.placement")

SOURCE_EXTENSION = ".java"


class SourcePlacementEngine:
    """Decompiler sink that owns file naming.

    The decompiler's filename hint is only used for diagnostics: package and
    type are always recovered from the text itself. Writes are last-wins;
    overwrites are recorded in the registry and logged.
    """

    def __init__(
        self,
        source_root: Path,
        resource_root: Path,
        registry: WriteRegistry | None = None,
    ) -> None:
        self.source_root = Path(source_root)
        self.resource_root = Path(resource_root)
        self.registry = registry if registry is not None else WriteRegistry()
        self.resources_copied = 0

    # ── DecompilerSink ───────────────────────────────────────────────────

    def accept(self, text: str, hint: str | None = None) -> SourceFileRecord | None:
        """Place one decompiled compilation unit. Empty text is ignored."""
        if not text or not text.strip():
            log.debug("placement.empty_output", hint=hint)
            return None

        package, type_name = scan_declarations(text)
        destination = self.destination_for(package, type_name)
        _write(destination, text if text.endswith("\n") else text + "\n")

        record = SourceFileRecord(package, type_name, destination)
        if self.registry.register(record):
            log.warning(
                "placement.collision",
                destination=str(destination),
                hint=hint,
                collisions=self.registry.collision_count,
            )
        else:
            log.debug("placement.written", destination=str(destination), hint=hint)
        return record

    def destination_for(self, package: str, type_name: str) -> Path:
        package_dir = self.source_root.joinpath(*package.split(".")) if package else self.source_root
        return package_dir / f"{type_name}{SOURCE_EXTENSION}"

    # ── resources ────────────────────────────────────────────────────────

    def copy_resource(self, entry: ArchiveEntry) -> Path | None:
        """Copy a retained resource to ``<resource_root>/<relative_path>``.

        Entries whose path would escape the resource root are skipped.
        """
        destination = self.resource_root / entry.relative_path
        root = self.resource_root.resolve()
        if root not in destination.resolve().parents:
            log.warning("placement.resource_outside_root", entry=entry.path)
            return None
        _write(destination, entry.read())
        self.resources_copied += 1
        log.debug("placement.resource_copied", entry=entry.path, destination=str(destination))
        return destination


def _write(destination: Path, payload: str | bytes) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(payload, bytes):
            destination.write_bytes(payload)
        else:
            destination.write_text(payload, encoding="utf-8")
    except OSError as e:
        raise WriteError(str(destination), e) from e
