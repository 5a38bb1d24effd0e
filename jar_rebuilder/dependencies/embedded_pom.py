"""Reader for a pom.xml packaged inside the archive (META-INF/maven/<g>/<a>/pom.xml)."""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as ET

import structlog

from jar_rebuilder.models.dependency import UNKNOWN, Coordinate
from jar_rebuilder.models.project import (
    MAVEN_PLUGINS_GROUP,
    EmbeddedDescriptor,
    Plugin,
    Repository,
)

log = structlog.get_logger("jar_rebuilder.resolver")

_NS = "{http://maven.apache.org/POM/4.0.0}"

_PROP_RE = re.compile(r"\$\{([^}]+)\}")

SOURCE = "embedded-pom"


def _resolve_props(value: str, props: dict[str, str]) -> str:
    """Replace ${property} placeholders with values from <properties>."""

    def _replace(m: re.Match) -> str:
        key = m.group(1)
        return props.get(key, m.group(0))  # left as-is when undefined

    return _PROP_RE.sub(_replace, value)


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


def _namespace(root: ET.Element) -> str:
    return _NS if root.tag.startswith(_NS) else ""


def parse_embedded_pom(content: bytes | str, source_path: str = "pom.xml") -> EmbeddedDescriptor | None:
    """Parse a packaged POM. Returns None (and logs) if it is not valid XML."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        log.warning("resolver.embedded_pom_invalid", path=source_path, error=str(e))
        return None

    ns = _namespace(root)
    parent = root.find(f"{ns}parent")

    group_id = _text(root.find(f"{ns}groupId")) or _text(
        parent.find(f"{ns}groupId") if parent is not None else None
    )
    artifact_id = _text(root.find(f"{ns}artifactId"))
    version = _text(root.find(f"{ns}version")) or _text(
        parent.find(f"{ns}version") if parent is not None else None
    )

    props = _extract_properties(root, ns)
    # Built-in project properties available to ${...} substitution
    lookup = dict(props)
    for key, value in (("project.groupId", group_id), ("project.version", version),
                       ("project.artifactId", artifact_id)):
        if value:
            lookup.setdefault(key, value)

    return EmbeddedDescriptor(
        source_path=source_path,
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        dependencies=_extract_dependencies(root, ns, lookup),
        properties=props,
        repositories=_extract_repositories(root, ns),
        managed_plugins=_extract_managed_plugins(root, ns),
    )


def _extract_properties(root: ET.Element, ns: str) -> dict[str, str]:
    """Extract <properties> key-value pairs from the POM root."""
    props: dict[str, str] = {}
    props_el = root.find(f"{ns}properties")
    if props_el is not None:
        for child in props_el:
            if not isinstance(child.tag, str):
                continue  # comments / processing instructions
            # Strip namespace from tag name
            tag = child.tag.split("}")[-1] if "}" in child.tag else child.tag
            if child.text:
                props[tag] = child.text.strip()
    return props


def _extract_dependencies(root: ET.Element, ns: str, props: dict[str, str]) -> list[Coordinate]:
    """Direct <dependencies> only; dependencyManagement and plugin deps are ignored."""
    deps: list[Coordinate] = []
    deps_el = root.find(f"{ns}dependencies")
    if deps_el is None:
        return deps
    for dep_el in deps_el.findall(f"{ns}dependency"):
        group_id = _text(dep_el.find(f"{ns}groupId"))
        artifact_id = _text(dep_el.find(f"{ns}artifactId"))
        version = _text(dep_el.find(f"{ns}version"))
        scope = _text(dep_el.find(f"{ns}scope")) or "compile"

        if not artifact_id:
            continue

        if version:
            version = _resolve_props(version, props)
        if group_id:
            group_id = _resolve_props(group_id, props)

        deps.append(
            Coordinate(
                group_id=group_id or UNKNOWN,
                artifact_id=_resolve_props(artifact_id, props),
                version=version,
                scope=scope,
                source=SOURCE,
                type=_text(dep_el.find(f"{ns}type")),
                classifier=_text(dep_el.find(f"{ns}classifier")),
                optional=_text(dep_el.find(f"{ns}optional")) == "true",
                exclusions=_extract_exclusions(dep_el, ns),
            )
        )
    return deps


def _extract_exclusions(dep_el: ET.Element, ns: str) -> tuple[tuple[str, str], ...]:
    exclusions: list[tuple[str, str]] = []
    for excl_el in dep_el.findall(f"{ns}exclusions/{ns}exclusion"):
        group_id = _text(excl_el.find(f"{ns}groupId"))
        artifact_id = _text(excl_el.find(f"{ns}artifactId"))
        if group_id and artifact_id:
            exclusions.append((group_id, artifact_id))
    return tuple(exclusions)


def _extract_managed_plugins(root: ET.Element, ns: str) -> list[Plugin]:
    """<build><pluginManagement><plugins>, each kept verbatim for re-rendering."""
    plugins: list[Plugin] = []
    for plugin_el in root.findall(f"{ns}build/{ns}pluginManagement/{ns}plugins/{ns}plugin"):
        artifact_id = _text(plugin_el.find(f"{ns}artifactId"))
        if not artifact_id:
            continue
        plugins.append(
            Plugin(
                group_id=_text(plugin_el.find(f"{ns}groupId")) or MAVEN_PLUGINS_GROUP,
                artifact_id=artifact_id,
                version=_text(plugin_el.find(f"{ns}version")),
                raw=_strip_namespace(plugin_el),
            )
        )
    return plugins


def _strip_namespace(element: ET.Element) -> str:
    """Serialize *element* with the POM namespace removed from every tag."""
    clone = copy.deepcopy(element)
    for el in clone.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]
    clone.tail = None
    return ET.tostring(clone, encoding="unicode")


def _extract_repositories(root: ET.Element, ns: str) -> list[Repository]:
    repos: list[Repository] = []
    repos_el = root.find(f"{ns}repositories")
    if repos_el is None:
        return repos
    for repo_el in repos_el.findall(f"{ns}repository"):
        repo_id = _text(repo_el.find(f"{ns}id"))
        url = _text(repo_el.find(f"{ns}url"))
        if not repo_id or not url:
            continue
        repos.append(Repository(id=repo_id, url=url, name=_text(repo_el.find(f"{ns}name"))))
    return repos
