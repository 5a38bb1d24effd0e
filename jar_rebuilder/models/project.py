"""Data models for the reconstructed Maven project descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field

from jar_rebuilder.models.dependency import Coordinate, DependencySet

MAVEN_PLUGINS_GROUP = "org.apache.maven.plugins"


@dataclass(frozen=True)
class ProjectIdentity:
    group_id: str
    artifact_id: str
    version: str
    packaging: str = "jar"


@dataclass
class Plugin:
    group_id: str
    artifact_id: str
    version: str | None
    configuration: dict[str, str] = field(default_factory=dict)
    raw: str | None = None  # verbatim <plugin> element from a packaged pom, namespace-free


@dataclass
class Repository:
    id: str
    url: str
    name: str | None = None


@dataclass
class EmbeddedDescriptor:
    """Build information recovered from a pom.xml packaged inside the archive."""

    source_path: str
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    dependencies: list[Coordinate] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    repositories: list[Repository] = field(default_factory=list)
    managed_plugins: list[Plugin] = field(default_factory=list)


@dataclass
class ProjectDescriptor:
    identity: ProjectIdentity
    properties: dict[str, str]
    dependencies: DependencySet
    plugins: list[Plugin]
    repositories: list[Repository] = field(default_factory=list)
    managed_plugins: list[Plugin] = field(default_factory=list)
    model_version: str = "4.0.0"
