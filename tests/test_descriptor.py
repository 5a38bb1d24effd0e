"""Tests for descriptor assembly and pom.xml serialization."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET

import pytest

from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.dependencies import parse_embedded_pom, resolve
from jar_rebuilder.descriptor import POM_FILENAME, assemble, default_identity, render, serialize
from jar_rebuilder.exceptions import WriteError
from jar_rebuilder.models.dependency import Coordinate, DependencySet
from jar_rebuilder.models.project import EmbeddedDescriptor, Plugin, Repository

NS = {"m": "http://maven.apache.org/POM/4.0.0"}


def _deps(*coordinates: Coordinate) -> DependencySet:
    return DependencySet(coordinates)


def _parse(document: str) -> ET.Element:
    return ET.fromstring(document.encode("utf-8"))


def _texts(root: ET.Element, path: str) -> list[str]:
    return [e.text for e in root.findall(path, NS)]


class TestAssemble:
    def test_identity_from_stem(self):
        identity = default_identity("app")
        assert (identity.group_id, identity.artifact_id, identity.version, identity.packaging) == (
            "com.decompiled",
            "app",
            "1.0-SNAPSHOT",
            "jar",
        )

    def test_war_packaging(self):
        assert default_identity("site", ".WAR").packaging == "war"

    def test_config_identity(self):
        config = RebuilderConfig(group_id="org.example", version="2.0")
        identity = default_identity("svc", ".jar", config)
        assert (identity.group_id, identity.version) == ("org.example", "2.0")

    def test_fixed_properties_and_plugins(self):
        descriptor = assemble(default_identity("app"), _deps())
        assert descriptor.properties == {
            "project.build.sourceEncoding": "UTF-8",
            "maven.compiler.source": "1.8",
            "maven.compiler.target": "1.8",
        }
        assert [(p.artifact_id, p.version) for p in descriptor.plugins] == [
            ("maven-compiler-plugin", "3.8.1"),
            ("maven-source-plugin", "3.2.1"),
            ("maven-javadoc-plugin", "3.3.0"),
        ]
        assert descriptor.plugins[0].configuration["source"] == "${maven.compiler.source}"

    def test_dependencies_copied_in_order(self):
        deps = _deps(Coordinate("b", "b", "1"), Coordinate("a", "a", "1"))
        descriptor = assemble(default_identity("app"), deps)
        assert descriptor.dependencies.keys() == [("b", "b"), ("a", "a")]
        deps.add(Coordinate("c", "c", "1"))
        assert len(descriptor.dependencies) == 2

    def test_embedded_properties_and_repositories(self):
        embedded = EmbeddedDescriptor(
            source_path="pom.xml",
            properties={"maven.compiler.source": "11", "jackson.version": "2.12.5"},
            repositories=[Repository("internal", "https://repo.example/maven")],
        )
        descriptor = assemble(default_identity("app"), _deps(), embedded)
        assert descriptor.properties["maven.compiler.source"] == "11"
        assert descriptor.properties["jackson.version"] == "2.12.5"
        assert descriptor.properties["maven.compiler.target"] == "1.8"
        assert [r.id for r in descriptor.repositories] == ["internal"]

    def test_embedded_managed_plugins(self):
        managed = Plugin("org.apache.maven.plugins", "maven-surefire-plugin", "2.22.2")
        embedded = EmbeddedDescriptor(source_path="pom.xml", managed_plugins=[managed])
        descriptor = assemble(default_identity("app"), _deps(), embedded)
        assert descriptor.managed_plugins == [managed]
        assert [p.artifact_id for p in descriptor.plugins][0] == "maven-compiler-plugin"


class TestRender:
    def test_document_structure(self):
        deps = _deps(
            Coordinate("org.springframework", "spring-core", "5.3.9"),
            Coordinate("junit", "junit", "4.13.2", "test"),
        )
        root = _parse(render(assemble(default_identity("app"), deps)))
        assert root.tag == "{http://maven.apache.org/POM/4.0.0}project"
        assert _texts(root, "m:modelVersion") == ["4.0.0"]
        assert _texts(root, "m:groupId") == ["com.decompiled"]
        assert _texts(root, "m:artifactId") == ["app"]
        assert _texts(root, "m:packaging") == ["jar"]
        assert _texts(root, "m:properties/m:maven.compiler.source") == ["1.8"]
        assert _texts(root, "m:dependencies/m:dependency/m:artifactId") == ["spring-core", "junit"]
        # compile scope is Maven's default and is left implicit
        assert _texts(root, "m:dependencies/m:dependency/m:scope") == ["test"]
        assert _texts(root, "m:build/m:plugins/m:plugin/m:artifactId") == [
            "maven-compiler-plugin",
            "maven-source-plugin",
            "maven-javadoc-plugin",
        ]

    def test_xml_declaration(self):
        document = render(assemble(default_identity("app"), _deps()))
        assert document.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<project')

    def test_stub_dependency_flagged(self):
        deps = _deps(Coordinate("unknown", "guava", "unknown", source="manifest-classpath"))
        document = render(assemble(default_identity("app"), deps))
        assert "<!-- inferred from manifest-classpath" in document
        root = _parse(document)
        assert _texts(root, "m:dependencies/m:dependency/m:version") == ["unknown"]

    def test_versionless_dependency(self):
        deps = _deps(Coordinate("org.junit.jupiter", "junit-jupiter", None, "test"))
        root = _parse(render(assemble(default_identity("app"), deps)))
        assert root.findall("m:dependencies/m:dependency/m:version", NS) == []

    def test_repositories(self):
        embedded = EmbeddedDescriptor(
            source_path="pom.xml",
            repositories=[Repository("internal", "https://repo.example/maven", "Internal")],
        )
        root = _parse(render(assemble(default_identity("app"), _deps(), embedded)))
        assert _texts(root, "m:repositories/m:repository/m:id") == ["internal"]
        assert _texts(root, "m:repositories/m:repository/m:url") == ["https://repo.example/maven"]

    def test_no_dependencies_section_when_empty(self):
        root = _parse(render(assemble(default_identity("app"), _deps())))
        assert root.find("m:dependencies", NS) is None

    def test_deterministic(self):
        descriptor = assemble(default_identity("app"), _deps(Coordinate("g", "a", "1")))
        assert render(descriptor) == render(descriptor)

    def test_dependency_details(self):
        deps = _deps(
            Coordinate(
                "io.netty", "netty-tcnative", "2.0.46.Final", "runtime",
                classifier="linux-x86_64", optional=True,
                exclusions=(("io.netty", "netty-common"),),
            ),
            Coordinate("org.acme", "acme-bom", "1", type="pom"),
        )
        root = _parse(render(assemble(default_identity("app"), deps)))
        tcnative, bom = root.findall("m:dependencies/m:dependency", NS)
        assert [child.tag.split("}")[1] for child in tcnative] == [
            "groupId", "artifactId", "version", "classifier", "scope", "exclusions", "optional",
        ]
        assert _texts(tcnative, "m:exclusions/m:exclusion/m:artifactId") == ["netty-common"]
        assert _texts(tcnative, "m:optional") == ["true"]
        assert _texts(bom, "m:type") == ["pom"]
        assert bom.find("m:optional", NS) is None

    def test_managed_plugins_under_plugin_management(self):
        managed = Plugin(
            "org.apache.maven.plugins",
            "maven-surefire-plugin",
            "2.22.2",
            raw="<plugin><artifactId>maven-surefire-plugin</artifactId><version>2.22.2</version>"
            "<configuration><includes><include>**/*IT.java</include></includes></configuration>"
            "</plugin>",
        )
        embedded = EmbeddedDescriptor(source_path="pom.xml", managed_plugins=[managed])
        root = _parse(render(assemble(default_identity("app"), _deps(), embedded)))
        assert len(root.findall("m:build", NS)) == 1
        managed_path = "m:build/m:pluginManagement/m:plugins/m:plugin"
        assert _texts(root, f"{managed_path}/m:artifactId") == ["maven-surefire-plugin"]
        assert _texts(root, f"{managed_path}/m:configuration/m:includes/m:include") == ["**/*IT.java"]
        assert len(root.findall("m:build/m:plugins/m:plugin", NS)) == 3

    def test_embedded_pom_details_survive_rebuild(self):
        embedded = parse_embedded_pom(
            '<project xmlns="http://maven.apache.org/POM/4.0.0">'
            "<groupId>com.acme</groupId><artifactId>gateway</artifactId><version>1.0</version>"
            "<dependencies>"
            "<dependency><groupId>io.netty</groupId><artifactId>netty-tcnative</artifactId>"
            "<version>2.0.46.Final</version><classifier>linux-x86_64</classifier>"
            "<optional>true</optional><exclusions><exclusion><groupId>io.netty</groupId>"
            "<artifactId>netty-common</artifactId></exclusion></exclusions></dependency>"
            "<dependency><groupId>org.acme</groupId><artifactId>acme-bom</artifactId>"
            "<version>3</version><type>pom</type></dependency>"
            "</dependencies>"
            "<build><pluginManagement><plugins><plugin>"
            "<artifactId>maven-surefire-plugin</artifactId><version>2.22.2</version>"
            "</plugin></plugins></pluginManagement></build>"
            "</project>",
            "META-INF/maven/com.acme/gateway/pom.xml",
        )
        deps = resolve({}, (), embedded)
        xml = render(assemble(default_identity("gateway"), deps, embedded))
        assert "<classifier>linux-x86_64</classifier>" in xml
        assert "<type>pom</type>" in xml
        assert "<optional>true</optional>" in xml
        root = _parse(xml)
        assert _texts(root, "m:dependencies/m:dependency/m:exclusions/m:exclusion/m:groupId") == [
            "io.netty"
        ]
        assert _texts(root, "m:build/m:pluginManagement/m:plugins/m:plugin/m:groupId") == []
        assert _texts(root, "m:build/m:pluginManagement/m:plugins/m:plugin/m:version") == ["2.22.2"]


class TestSerialize:
    def test_writes_into_directory(self, tmp_path):
        descriptor = assemble(default_identity("app"), _deps(Coordinate("g", "a", "1")))
        path = serialize(descriptor, tmp_path)
        assert path == tmp_path / POM_FILENAME
        assert path.read_text(encoding="utf-8") == render(descriptor)
        assert sorted(p.name for p in tmp_path.iterdir()) == [POM_FILENAME]

    def test_missing_directory_raises(self, tmp_path):
        descriptor = assemble(default_identity("app"), _deps())
        with pytest.raises(WriteError) as exc_info:
            serialize(descriptor, tmp_path / "nope" / POM_FILENAME)
        assert exc_info.value.path.endswith(POM_FILENAME)

    def test_failed_replace_leaves_previous_file(self, tmp_path, monkeypatch):
        target = tmp_path / POM_FILENAME
        target.write_text("previous", encoding="utf-8")

        def _fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", _fail)
        with pytest.raises(WriteError, match="disk full"):
            serialize(assemble(default_identity("app"), _deps()), target)
        assert target.read_text(encoding="utf-8") == "previous"
        assert sorted(p.name for p in tmp_path.iterdir()) == [POM_FILENAME]
