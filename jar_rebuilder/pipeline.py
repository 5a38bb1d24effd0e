"""Rebuild pipeline — one archive in, one Maven project out."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from jar_rebuilder.archive.walker import ArchiveWalker
from jar_rebuilder.bytecode.extractor import ReferenceExtractor
from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.decompiler.base import DecompilerEngine
from jar_rebuilder.dependencies.embedded_pom import parse_embedded_pom
from jar_rebuilder.dependencies.resolver import DependencyResolver
from jar_rebuilder.descriptor.assembler import assemble, default_identity
from jar_rebuilder.descriptor.writer import POM_FILENAME, serialize
from jar_rebuilder.exceptions import DecompilerFailure, MalformedClassFile, WriteError
from jar_rebuilder.models.archive import ArchiveEntry, EntryKind
from jar_rebuilder.models.dependency import DependencySet
from jar_rebuilder.models.project import EmbeddedDescriptor
from jar_rebuilder.models.references import TypeReference
from jar_rebuilder.models.source import WriteRegistry
from jar_rebuilder.placement.engine import SourcePlacementEngine
from jar_rebuilder.progress import ProgressTracker

log = structlog.get_logger("jar_rebuilder.pipeline")

MAIN_SOURCES = Path("src/main/java")
MAIN_RESOURCES = Path("src/main/resources")
TEST_SOURCES = Path("src/test/java")
TEST_RESOURCES = Path("src/test/resources")
PROJECT_LAYOUT = (MAIN_SOURCES, MAIN_RESOURCES, TEST_SOURCES, TEST_RESOURCES)


@dataclass
class RunReport:
    """Pipeline return value."""

    project_dir: Path
    descriptor_path: Path
    dependencies: DependencySet
    classes_scanned: int
    sources_written: int
    resources_copied: int
    malformed_classes: list[str] = field(default_factory=list)
    decompiler_failures: list[str] = field(default_factory=list)
    collisions: list[Path] = field(default_factory=list)
    embedded_descriptor: str | None = None


class PipelineRun:
    """
    One rebuild, strictly sequential:

    Phase 1: scaffold — recreate ``<output>/<archive stem>`` with the Maven layout
    Phase 2: scan     — per entry: extract references, decompile + place, copy resources
    Phase 3: resolve  — corpus + manifest + embedded pom -> DependencySet
    Phase 4: assemble — build and atomically write pom.xml

    The corpus map and the write registry belong to this instance only.
    A fatal error in phases 1-2 means no pom.xml is written.
    """

    def __init__(
        self,
        archive_path: str | Path,
        output_dir: str | Path | None = None,
        decompiler: DecompilerEngine | None = None,
        config: RebuilderConfig | None = None,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self.archive_path = Path(archive_path)
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.decompiler = decompiler
        self.config = config or RebuilderConfig()
        self.resolver = resolver or DependencyResolver(
            archive_extensions=self.config.archive_extensions
        )
        self.extractor = ReferenceExtractor()
        self.progress = ProgressTracker()

        # Run-scoped state
        self.corpus: dict[str, frozenset[TypeReference]] = {}
        self.registry = WriteRegistry()
        self.manifest_classpath: list[str] = []
        self.embedded: EmbeddedDescriptor | None = None
        self.classes_scanned = 0
        self.malformed_classes: list[str] = []
        self.decompiler_failures: list[str] = []

    # ── entry points ─────────────────────────────────────────────────────

    def run(self) -> RunReport:
        """Rebuild the project on disk.

        Raises:
            InvalidArchive: before anything is written.
            WriteError: on any filesystem failure; the run is aborted.
        """
        if self.output_dir is None:
            raise ValueError("output_dir is required to rebuild a project")

        with ArchiveWalker(self.archive_path, self.config) as walker:
            project_dir = self.output_dir / walker.stem
            with self.progress.phase("scaffold") as p:
                create_project_layout(project_dir)
                p.detail = str(project_dir)

            placement = SourcePlacementEngine(
                project_dir / MAIN_SOURCES, project_dir / MAIN_RESOURCES, self.registry
            )
            if self.decompiler is None:
                self.progress.skip("decompile", "no decompiler configured")

            with self.progress.phase("scan") as p:
                self.scan(walker, placement)
                p.detail = (
                    f"classes={self.classes_scanned}, sources={len(self.registry.records)}, "
                    f"resources={placement.resources_copied}"
                )
            identity = default_identity(walker.stem, walker.extension, self.config)

        with self.progress.phase("resolve") as p:
            dependencies = self.resolve()
            p.detail = f"dependencies={len(dependencies)}"

        with self.progress.phase("assemble") as p:
            descriptor = assemble(identity, dependencies, self.embedded, self.config)
            descriptor_path = serialize(descriptor, project_dir / POM_FILENAME)
            p.detail = str(descriptor_path)

        if self.registry.collisions:
            log.warning("pipeline.collisions", count=self.registry.collision_count)

        return RunReport(
            project_dir=project_dir,
            descriptor_path=descriptor_path,
            dependencies=dependencies,
            classes_scanned=self.classes_scanned,
            sources_written=len(self.registry.destinations),
            resources_copied=placement.resources_copied,
            malformed_classes=list(self.malformed_classes),
            decompiler_failures=list(self.decompiler_failures),
            collisions=list(self.registry.collisions),
            embedded_descriptor=self.embedded.source_path if self.embedded else None,
        )

    def inspect(self) -> DependencySet:
        """Scan references only (nothing written) and resolve dependencies."""
        with ArchiveWalker(self.archive_path, self.config) as walker:
            with self.progress.phase("scan") as p:
                self.scan(walker, placement=None)
                p.detail = f"classes={self.classes_scanned}"
        with self.progress.phase("resolve"):
            return self.resolve()

    # ── phases ───────────────────────────────────────────────────────────

    def scan(self, walker: ArchiveWalker, placement: SourcePlacementEngine | None) -> None:
        for entry in walker.iter_entries():
            if entry.kind is EntryKind.CLASS:
                self._process_class(entry, placement)
            elif entry.kind is EntryKind.RESOURCE:
                if placement is not None:
                    placement.copy_resource(entry)
            elif entry.kind is EntryKind.DESCRIPTOR:
                self._process_descriptor(entry)
            elif entry.kind is EntryKind.MANIFEST:
                self.manifest_classpath = walker.manifest_classpath()
                log.debug("pipeline.manifest_read", class_path=len(self.manifest_classpath))

    def resolve(self) -> DependencySet:
        return self.resolver.resolve(self.corpus, self.manifest_classpath, self.embedded)

    # ── per-entry ────────────────────────────────────────────────────────

    def _process_class(self, entry: ArchiveEntry, placement: SourcePlacementEngine | None) -> None:
        data = entry.read()
        try:
            refs = self.extractor.extract(data)
        except MalformedClassFile as e:
            log.warning("extractor.malformed_class", entry=entry.path, error=str(e))
            self.malformed_classes.append(entry.path)
            return

        self.classes_scanned += 1
        previous = self.corpus.get(refs.owner)
        self.corpus[refs.owner] = refs.references if previous is None else previous | refs.references

        if placement is None or self.decompiler is None:
            return
        try:
            self.decompiler.decompile(data, entry.path, placement)
        except DecompilerFailure as e:
            log.warning("decompiler.failed", entry=entry.path, error=str(e))
            self.decompiler_failures.append(entry.path)

    def _process_descriptor(self, entry: ArchiveEntry) -> None:
        if self.embedded is not None:
            log.debug("pipeline.extra_descriptor_ignored", entry=entry.path)
            return
        self.embedded = parse_embedded_pom(entry.read(), source_path=entry.path)
        if self.embedded is not None:
            log.info(
                "pipeline.embedded_descriptor",
                entry=entry.path,
                dependencies=len(self.embedded.dependencies),
            )


def create_project_layout(project_dir: Path) -> None:
    """Recreate *project_dir* empty, with the four Maven source directories."""
    try:
        if project_dir.exists():
            shutil.rmtree(project_dir)
        for sub in PROJECT_LAYOUT:
            (project_dir / sub).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(str(project_dir), e) from e
