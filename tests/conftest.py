"""Shared pytest fixtures for jar-rebuilder tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from jar_rebuilder.testing import ClassFileBuilder, build_archive


@pytest.fixture
def foo_class() -> bytes:
    """``com.acme.Foo implements java.lang.Runnable`` with a trivial run()."""
    builder = ClassFileBuilder("com/acme/Foo", interfaces=["java/lang/Runnable"])
    builder.add_method("run", "()V", code=bytes([0xB1]))  # return
    return builder.build()


@pytest.fixture
def make_archive(tmp_path: Path):
    """Factory: ``make_archive({"name": data}, name="app.jar") -> Path``."""

    def _make(entries: dict[str, bytes | str], name: str = "app.jar") -> Path:
        return build_archive(tmp_path / name, entries)

    return _make
