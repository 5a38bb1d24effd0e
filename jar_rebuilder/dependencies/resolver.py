"""Dependency resolver — corpus references + manifest + embedded pom -> DependencySet."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable, Mapping

import structlog

from jar_rebuilder.dependencies.known_packages import BASELINE, KNOWN_PACKAGES
from jar_rebuilder.models.dependency import UNKNOWN, Coordinate, DependencySet
from jar_rebuilder.models.project import EmbeddedDescriptor
from jar_rebuilder.models.references import TypeReference

log = structlog.get_logger("jar_rebuilder.resolver")


def package_of(type_name: TypeReference) -> str | None:
    """``com.acme.Foo`` -> ``com.acme``; default-package types -> None."""
    last_dot = type_name.rfind(".")
    return type_name[:last_dot] if last_dot > 0 else None


class DependencyResolver:
    """
    Resolve build dependencies, stopping at the first rule that yields any:

    Rule 1: Embedded pom.xml dependencies, verbatim (ground truth).
    Rule 2: Manifest Class-Path jar names as ``unknown:<name>:unknown`` stubs.
    Rule 3: Package-prefix table over the corpus references.

    The baseline set is appended unless rule 1 applied. Never raises.
    """

    def __init__(
        self,
        known_packages: list[tuple[str, str, str, str]] | None = None,
        baseline: list[Coordinate] | None = None,
        archive_extensions: Iterable[str] = (".jar",),
    ) -> None:
        self.known_packages = KNOWN_PACKAGES if known_packages is None else known_packages
        self.baseline = BASELINE if baseline is None else baseline
        self.archive_extensions = tuple(e.lower() for e in archive_extensions)

    def resolve(
        self,
        corpus_references: Mapping[str, Iterable[TypeReference]],
        manifest_classpath: Iterable[str] = (),
        embedded_descriptor: EmbeddedDescriptor | None = None,
    ) -> DependencySet:
        if embedded_descriptor is not None and embedded_descriptor.dependencies:
            deps = DependencySet(embedded_descriptor.dependencies)
            log.info(
                "resolver.rule_applied",
                rule="embedded-pom",
                source=embedded_descriptor.source_path,
                count=len(deps),
            )
            return deps

        deps = self.from_manifest(manifest_classpath)
        if deps:
            log.info("resolver.rule_applied", rule="manifest-classpath", count=len(deps))
        else:
            deps = self.from_references(corpus_references)
            log.info("resolver.rule_applied", rule="package-prefix", count=len(deps))

        added = deps.extend(self.baseline)
        log.debug("resolver.baseline_added", added=added, total=len(deps))
        return deps

    # ── rules ────────────────────────────────────────────────────────────

    def from_manifest(self, manifest_classpath: Iterable[str]) -> DependencySet:
        deps = DependencySet()
        for token in manifest_classpath:
            name = PurePosixPath(token).name
            if not name.lower().endswith(self.archive_extensions):
                continue
            artifact_id = name[: name.rfind(".")]
            if not artifact_id:
                continue
            deps.add(
                Coordinate(
                    group_id=UNKNOWN,
                    artifact_id=artifact_id,
                    version=UNKNOWN,
                    scope="compile",
                    source="manifest-classpath",
                )
            )
        return deps

    def from_references(self, corpus_references: Mapping[str, Iterable[TypeReference]]) -> DependencySet:
        deps = DependencySet()
        unmatched = 0
        for owner in corpus_references:
            for type_name in sorted(corpus_references[owner]):
                coordinate = self.match(type_name)
                if coordinate is None:
                    unmatched += 1
                    continue
                deps.add(coordinate)
        log.debug("resolver.references_unmatched", count=unmatched)
        return deps

    def match(self, type_name: TypeReference) -> Coordinate | None:
        """Map one referenced type to a known coordinate via its package."""
        package = package_of(type_name)
        if package is None:
            return None
        best: tuple[str, str, str, str] | None = None
        for row in self.known_packages:
            prefix = row[0]
            if package != prefix and not package.startswith(f"{prefix}."):
                continue
            if best is None or len(prefix) > len(best[0]):
                best = row
        if best is None:
            return None
        _, group_id, artifact_id, version = best
        return Coordinate(group_id, artifact_id, version, "compile", source="package-prefix")


def resolve(
    corpus_references: Mapping[str, Iterable[TypeReference]],
    manifest_classpath: Iterable[str] = (),
    embedded_descriptor: EmbeddedDescriptor | None = None,
) -> DependencySet:
    """Resolve with the default table and baseline."""
    return DependencyResolver().resolve(corpus_references, manifest_classpath, embedded_descriptor)
