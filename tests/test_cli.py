"""Tests for CLI commands — the decompiler is faked, no JVM needed."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from jar_rebuilder.cli import main
from jar_rebuilder.testing import ClassFileBuilder, FakeDecompiler, op

QUIET = {"JAR_REBUILDER_LOG_LEVEL": "ERROR", "JAR_REBUILDER_CFR_JAR": None}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def spring_jar(make_archive):
    builder = ClassFileBuilder("com/acme/Service")
    code = (
        op(0xB8, builder.method_ref("org/slf4j/LoggerFactory", "getLogger",
                                    "(Ljava/lang/Class;)Lorg/slf4j/Logger;"))
        + op(0x57)
        + op(0xB1)
    )
    builder.add_method("init", "()V", code=code)
    builder.add_field("ctx", "Lorg/springframework/context/ApplicationContext;")
    return make_archive(
        {
            "BOOT-INF/classes/com/acme/Service.class": builder.build(),
            "BOOT-INF/classes/application.properties": "server.port=8080\n",
        }
    )


# ── deps ──


class TestDepsCommand:
    def test_json(self, runner, spring_jar):
        result = runner.invoke(main, ["deps", str(spring_jar), "--json"], env=QUIET)
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [(r["group_id"], r["artifact_id"]) for r in rows][:2] == [
            ("org.slf4j", "slf4j-api"),
            ("org.springframework", "spring-core"),
        ]
        assert rows[0]["source"] == "package-prefix"
        assert rows[-1]["scope"] == "test"

    def test_text(self, runner, spring_jar):
        result = runner.invoke(main, ["deps", str(spring_jar)], env=QUIET)
        assert result.exit_code == 0
        assert "org.springframework:spring-core:5.3.9  <- package-prefix" in result.output
        assert "junit:junit:4.13.2 (test)" in result.output

    def test_invalid_archive(self, runner, tmp_path):
        bogus = tmp_path / "bogus.jar"
        bogus.write_text("nope")
        result = runner.invoke(main, ["deps", str(bogus)], env=QUIET)
        assert result.exit_code == 1
        assert "Invalid archive" in result.output


# ── refs ──


class TestRefsCommand:
    def test_json(self, runner, spring_jar):
        result = runner.invoke(main, ["refs", str(spring_jar), "--json"], env=QUIET)
        assert result.exit_code == 0, result.output
        refs = json.loads(result.stdout)
        assert list(refs) == ["com.acme.Service"]
        assert "org.slf4j.LoggerFactory" in refs["com.acme.Service"]
        assert "org.springframework.context.ApplicationContext" in refs["com.acme.Service"]

    def test_text(self, runner, spring_jar):
        result = runner.invoke(main, ["refs", str(spring_jar)], env=QUIET)
        assert result.exit_code == 0
        assert "1 classes in app.jar" in result.output
        assert "    org.slf4j.Logger" in result.output


# ── rebuild ──


class TestRebuildCommand:
    def test_no_decompile(self, runner, spring_jar, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(
            main, ["rebuild", str(spring_jar), "-o", str(out), "--no-decompile"], env=QUIET
        )
        assert result.exit_code == 0, result.output
        assert (out / "app/pom.xml").is_file()
        assert (out / "app/src/main/resources/application.properties").is_file()
        assert "Sources written: 0" in result.output
        assert "[-] decompile - no decompiler configured" in result.output

    def test_with_decompiler(self, runner, spring_jar, tmp_path):
        out = tmp_path / "out"
        cfr_jar = tmp_path / "cfr.jar"
        cfr_jar.write_bytes(b"PK")
        with patch("jar_rebuilder.cli.CfrDecompiler", return_value=FakeDecompiler()) as factory:
            result = runner.invoke(
                main,
                ["rebuild", str(spring_jar), "-o", str(out), "--cfr-jar", str(cfr_jar)],
                env=QUIET,
            )
        assert result.exit_code == 0, result.output
        factory.assert_called_once_with(str(cfr_jar), "java", 60.0)
        assert (out / "app/src/main/java/com/acme/Service.java").is_file()
        assert "Sources written: 1" in result.output

    def test_cfr_jar_from_env(self, runner, spring_jar, tmp_path):
        env = dict(QUIET, JAR_REBUILDER_CFR_JAR="/opt/cfr.jar", JAR_REBUILDER_DECOMPILE_TIMEOUT="5")
        with patch("jar_rebuilder.cli.CfrDecompiler", return_value=FakeDecompiler()) as factory:
            result = runner.invoke(main, ["rebuild", str(spring_jar), "-o", str(tmp_path / "o")], env=env)
        assert result.exit_code == 0, result.output
        factory.assert_called_once_with("/opt/cfr.jar", "java", 5.0)

    def test_requires_cfr_jar(self, runner, spring_jar, tmp_path):
        result = runner.invoke(main, ["rebuild", str(spring_jar), "-o", str(tmp_path)], env=QUIET)
        assert result.exit_code == 1
        assert "--cfr-jar is required" in result.output

    def test_invalid_config(self, runner, spring_jar, tmp_path):
        env = dict(QUIET, JAR_REBUILDER_DECOMPILE_TIMEOUT="-1")
        result = runner.invoke(
            main, ["rebuild", str(spring_jar), "-o", str(tmp_path), "--no-decompile"], env=env
        )
        assert result.exit_code == 1
        assert "invalid configuration" in result.output

    def test_missing_archive(self, runner, tmp_path):
        result = runner.invoke(
            main,
            ["rebuild", str(tmp_path / "missing.jar"), "-o", str(tmp_path / "out"), "--no-decompile"],
            env=QUIET,
        )
        assert result.exit_code == 1
        assert "file not found" in result.output
        assert not (tmp_path / "out").exists()
