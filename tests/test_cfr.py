"""Tests for CfrDecompiler — subprocess is mocked, no JVM needed."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from jar_rebuilder.decompiler import DECOMPILER_OPTIONS, CfrDecompiler, DecompilerEngine
from jar_rebuilder.exceptions import DecompilerFailure


class _Sink:
    def __init__(self):
        self.received: list[tuple[str, str | None]] = []

    def accept(self, text, hint=None):
        self.received.append((text, hint))


@pytest.fixture
def cfr_jar(tmp_path) -> Path:
    path = tmp_path / "cfr.jar"
    path.write_bytes(b"PK")
    return path


def _fake_run(outputs: dict[str, str], returncode: int = 0, stderr: str = ""):
    """Build a subprocess.run stand-in that writes *outputs* under --outputdir."""
    seen: list[list[str]] = []

    def _run(cmd, capture_output, text, timeout):
        seen.append(cmd)
        out_dir = Path(cmd[cmd.index("--outputdir") + 1])
        for rel, content in outputs.items():
            target = out_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)

    _run.seen = seen
    return _run


class TestCommand:
    def test_command_line(self, cfr_jar, tmp_path):
        engine = CfrDecompiler(cfr_jar, java_bin="/opt/jdk/bin/java")
        cmd = engine.command(tmp_path / "Foo.class", tmp_path / "out")
        assert cmd[:6] == [
            "/opt/jdk/bin/java", "-jar", str(cfr_jar), str(tmp_path / "Foo.class"),
            "--outputdir", str(tmp_path / "out"),
        ]
        assert cmd[6:8] == ["--showversion", "false"]
        assert len(cmd) == 6 + 2 * len(DECOMPILER_OPTIONS)

    def test_satisfies_protocol(self, cfr_jar):
        assert isinstance(CfrDecompiler(cfr_jar), DecompilerEngine)


class TestDecompile:
    def test_pushes_every_output(self, cfr_jar, monkeypatch):
        fake = _fake_run({
            "com/acme/Foo.java": "package com.acme;\nclass Foo {}\n",
            "com/acme/Helper.java": "package com.acme;\nclass Helper {}\n",
        })
        monkeypatch.setattr("jar_rebuilder.decompiler.cfr.subprocess.run", fake)
        sink = _Sink()
        pushed = CfrDecompiler(cfr_jar).decompile(b"\xca\xfe", "BOOT-INF/classes/com/acme/Foo.class", sink)
        assert pushed == 2
        assert [hint for _, hint in sink.received] == ["com/acme/Foo.java", "com/acme/Helper.java"]
        assert sink.received[0][0].startswith("package com.acme;")
        # the class was written under its file name only
        assert Path(fake.seen[0][3]).name == "Foo.class"

    def test_no_output(self, cfr_jar, monkeypatch):
        monkeypatch.setattr("jar_rebuilder.decompiler.cfr.subprocess.run", _fake_run({}))
        sink = _Sink()
        assert CfrDecompiler(cfr_jar).decompile(b"", "A.class", sink) == 0
        assert sink.received == []

    def test_nonzero_exit(self, cfr_jar, monkeypatch):
        fake = _fake_run({}, returncode=1, stderr="java.lang.IllegalStateException: bad")
        monkeypatch.setattr("jar_rebuilder.decompiler.cfr.subprocess.run", fake)
        with pytest.raises(DecompilerFailure, match="rc=1"):
            CfrDecompiler(cfr_jar).decompile(b"", "A.class", _Sink())

    def test_timeout(self, cfr_jar, monkeypatch):
        def _run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr("jar_rebuilder.decompiler.cfr.subprocess.run", _run)
        with pytest.raises(DecompilerFailure, match="timed out") as exc_info:
            CfrDecompiler(cfr_jar, timeout=0.5).decompile(b"", "A.class", _Sink())
        assert isinstance(exc_info.value.__cause__, subprocess.TimeoutExpired)

    def test_java_missing(self, cfr_jar, monkeypatch):
        def _run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr("jar_rebuilder.decompiler.cfr.subprocess.run", _run)
        with pytest.raises(DecompilerFailure, match="java executable not found"):
            CfrDecompiler(cfr_jar, java_bin="no-such-java").decompile(b"", "A.class", _Sink())

    def test_cfr_jar_missing(self, tmp_path):
        with pytest.raises(DecompilerFailure, match="CFR jar not found"):
            CfrDecompiler(tmp_path / "missing.jar").decompile(b"", "A.class", _Sink())
