"""Project descriptor assembly — identity, properties, dependencies, plugins."""

from __future__ import annotations

from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.models.dependency import DependencySet
from jar_rebuilder.models.project import (
    MAVEN_PLUGINS_GROUP,
    EmbeddedDescriptor,
    Plugin,
    ProjectDescriptor,
    ProjectIdentity,
)

# (artifactId, pinned version), in build order.
PLUGINS: list[tuple[str, str]] = [
    ("maven-compiler-plugin", "3.8.1"),
    ("maven-source-plugin", "3.2.1"),
    ("maven-javadoc-plugin", "3.3.0"),
]

_PACKAGING_BY_EXTENSION = {".jar": "jar", ".war": "war"}


def default_identity(
    archive_stem: str,
    extension: str = ".jar",
    config: RebuilderConfig | None = None,
) -> ProjectIdentity:
    config = config or RebuilderConfig()
    return ProjectIdentity(
        group_id=config.group_id,
        artifact_id=archive_stem,
        version=config.version,
        packaging=_PACKAGING_BY_EXTENSION.get(extension.lower(), "jar"),
    )


def base_properties(config: RebuilderConfig | None = None) -> dict[str, str]:
    config = config or RebuilderConfig()
    return {
        "project.build.sourceEncoding": config.source_encoding,
        "maven.compiler.source": config.language_level,
        "maven.compiler.target": config.language_level,
    }


def build_plugins() -> list[Plugin]:
    plugins = [Plugin(MAVEN_PLUGINS_GROUP, artifact_id, version) for artifact_id, version in PLUGINS]
    # The compiler follows the language level declared in <properties>.
    plugins[0].configuration = {
        "source": "${maven.compiler.source}",
        "target": "${maven.compiler.target}",
    }
    return plugins


def assemble(
    identity: ProjectIdentity,
    dependencies: DependencySet,
    embedded: EmbeddedDescriptor | None = None,
    config: RebuilderConfig | None = None,
) -> ProjectDescriptor:
    """Build the descriptor. Pure: touches no filesystem state.

    When the archive carried its own pom, its properties are layered over
    the fixed ones; its repositories and managed plugins are kept.
    """
    properties = base_properties(config)
    repositories = []
    managed_plugins = []
    if embedded is not None:
        properties.update(embedded.properties)
        repositories = list(embedded.repositories)
        managed_plugins = list(embedded.managed_plugins)
    return ProjectDescriptor(
        identity=identity,
        properties=properties,
        dependencies=DependencySet(dependencies),
        plugins=build_plugins(),
        repositories=repositories,
        managed_plugins=managed_plugins,
    )
