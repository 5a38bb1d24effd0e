"""pom.xml rendering and atomic write."""

from __future__ import annotations

import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from jar_rebuilder.exceptions import WriteError
from jar_rebuilder.models.dependency import Coordinate
from jar_rebuilder.models.project import Plugin, ProjectDescriptor

log = structlog.get_logger("jar_rebuilder.descriptor")

_POM_NS = "http://maven.apache.org/POM/4.0.0"
_XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
_SCHEMA_LOCATION = f"{_POM_NS} https://maven.apache.org/xsd/maven-4.0.0.xsd"

POM_FILENAME = "pom.xml"


def _child(parent: ET.Element, tag: str, text: str | None = None) -> ET.Element:
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def render(descriptor: ProjectDescriptor) -> str:
    """Render *descriptor* as a Maven 4.0.0 POM document."""
    root = ET.Element(
        "project",
        {"xmlns": _POM_NS, "xmlns:xsi": _XSI_NS, "xsi:schemaLocation": _SCHEMA_LOCATION},
    )
    identity = descriptor.identity
    _child(root, "modelVersion", descriptor.model_version)
    _child(root, "groupId", identity.group_id)
    _child(root, "artifactId", identity.artifact_id)
    _child(root, "version", identity.version)
    _child(root, "packaging", identity.packaging)

    if descriptor.properties:
        props_el = _child(root, "properties")
        for key, value in descriptor.properties.items():
            _child(props_el, key, value)

    if descriptor.repositories:
        repos_el = _child(root, "repositories")
        for repo in descriptor.repositories:
            repo_el = _child(repos_el, "repository")
            _child(repo_el, "id", repo.id)
            if repo.name:
                _child(repo_el, "name", repo.name)
            _child(repo_el, "url", repo.url)

    if descriptor.dependencies:
        deps_el = _child(root, "dependencies")
        for dep in descriptor.dependencies:
            if dep.needs_review:
                deps_el.append(ET.Comment(f" inferred from {dep.source}: refine groupId/version "))
            _render_dependency(_child(deps_el, "dependency"), dep)

    if descriptor.managed_plugins or descriptor.plugins:
        build_el = _child(root, "build")
        if descriptor.managed_plugins:
            managed_el = _child(_child(build_el, "pluginManagement"), "plugins")
            for plugin in descriptor.managed_plugins:
                _render_plugin(managed_el, plugin)
        if descriptor.plugins:
            plugins_el = _child(build_el, "plugins")
            for plugin in descriptor.plugins:
                _render_plugin(plugins_el, plugin)

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def _render_dependency(dep_el: ET.Element, dep: Coordinate) -> None:
    # Child order follows the Maven 4.0.0 schema.
    _child(dep_el, "groupId", dep.group_id)
    _child(dep_el, "artifactId", dep.artifact_id)
    if dep.version:
        _child(dep_el, "version", dep.version)
    if dep.type:
        _child(dep_el, "type", dep.type)
    if dep.classifier:
        _child(dep_el, "classifier", dep.classifier)
    if dep.scope and dep.scope != "compile":
        _child(dep_el, "scope", dep.scope)
    if dep.exclusions:
        exclusions_el = _child(dep_el, "exclusions")
        for group_id, artifact_id in dep.exclusions:
            excl_el = _child(exclusions_el, "exclusion")
            _child(excl_el, "groupId", group_id)
            _child(excl_el, "artifactId", artifact_id)
    if dep.optional:
        _child(dep_el, "optional", "true")


def _render_plugin(parent: ET.Element, plugin: Plugin) -> None:
    if plugin.raw is not None:
        parent.append(ET.fromstring(plugin.raw))
        return
    plugin_el = _child(parent, "plugin")
    _child(plugin_el, "groupId", plugin.group_id)
    _child(plugin_el, "artifactId", plugin.artifact_id)
    if plugin.version:
        _child(plugin_el, "version", plugin.version)
    if plugin.configuration:
        config_el = _child(plugin_el, "configuration")
        for key, value in plugin.configuration.items():
            _child(config_el, key, value)


def serialize(descriptor: ProjectDescriptor, path: str | Path) -> Path:
    """Write the POM to *path* atomically.

    The document is rendered in memory, written to a temporary sibling and
    moved into place, so *path* is either untouched or complete.

    Raises:
        WriteError: on any filesystem failure.
    """
    target = Path(path)
    if target.is_dir():
        target = target / POM_FILENAME
    document = render(descriptor).encode("utf-8")

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(document)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise WriteError(str(target), e) from e

    log.info(
        "descriptor.written",
        path=str(target),
        dependencies=len(descriptor.dependencies),
        plugins=len(descriptor.plugins),
    )
    return target
