"""Test doubles for jar_rebuilder — use in unit / E2E tests.

Usage::

    from jar_rebuilder.testing import ClassFileBuilder, FakeDecompiler, build_archive

    cls = ClassFileBuilder("com/acme/Foo", interfaces=["java/lang/Runnable"])
    archive = build_archive(tmp_path / "app.jar", {"BOOT-INF/classes/com/acme/Foo.class": cls.build()})
    decompiler = FakeDecompiler()   # emits "package x; public class Y {}" per class
"""

from __future__ import annotations

import struct
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable

from jar_rebuilder.decompiler.base import DecompilerSink
from jar_rebuilder.exceptions import DecompilerFailure

ACC_PUBLIC = 0x0001
ACC_SUPER = 0x0020


class ClassFileBuilder:
    """Assemble a structurally valid class file byte by byte.

    Only what the reference extractor reads is supported: constant pool,
    header, fields, methods with ``Code`` / ``Exceptions`` attributes.
    Constant pool entries are deduplicated.
    """

    def __init__(
        self,
        name: str,
        super_name: str | None = "java/lang/Object",
        interfaces: Iterable[str] = (),
        major_version: int = 52,
    ) -> None:
        self.major_version = major_version
        self._pool: list[bytes] = []
        self._next_index = 1
        self._cache: dict[tuple, int] = {}
        self._fields: list[bytes] = []
        self._methods: list[bytes] = []
        self.this_index = self.class_ref(name)
        self.super_index = self.class_ref(super_name) if super_name else 0
        self.interface_indexes = [self.class_ref(i) for i in interfaces]

    # ── constant pool ────────────────────────────────────────────────────

    def _add(self, key: tuple, payload: bytes, slots: int = 1) -> int:
        if key in self._cache:
            return self._cache[key]
        index = self._next_index
        self._pool.append(payload)
        self._next_index += slots
        self._cache[key] = index
        return index

    def utf8(self, value: str) -> int:
        data = value.encode("utf-8")
        return self._add(("utf8", value), struct.pack(">BH", 1, len(data)) + data)

    def class_ref(self, internal_name: str) -> int:
        name_index = self.utf8(internal_name)
        return self._add(("class", internal_name), struct.pack(">BH", 7, name_index))

    def string(self, value: str) -> int:
        return self._add(("string", value), struct.pack(">BH", 8, self.utf8(value)))

    def integer(self, value: int) -> int:
        return self._add(("int", value), struct.pack(">Bi", 3, value))

    def long(self, value: int) -> int:
        return self._add(("long", value), struct.pack(">Bq", 5, value), slots=2)

    def name_and_type(self, name: str, descriptor: str) -> int:
        return self._add(
            ("nat", name, descriptor),
            struct.pack(">BHH", 12, self.utf8(name), self.utf8(descriptor)),
        )

    def _member_ref(self, tag: int, owner: str, name: str, descriptor: str) -> int:
        return self._add(
            ("ref", tag, owner, name, descriptor),
            struct.pack(">BHH", tag, self.class_ref(owner), self.name_and_type(name, descriptor)),
        )

    def field_ref(self, owner: str, name: str, descriptor: str) -> int:
        return self._member_ref(9, owner, name, descriptor)

    def method_ref(self, owner: str, name: str, descriptor: str) -> int:
        return self._member_ref(10, owner, name, descriptor)

    def interface_method_ref(self, owner: str, name: str, descriptor: str) -> int:
        return self._member_ref(11, owner, name, descriptor)

    def invoke_dynamic(self, name: str, descriptor: str, bootstrap_index: int = 0) -> int:
        return self._add(
            ("indy", name, descriptor, bootstrap_index),
            struct.pack(">BHH", 18, bootstrap_index, self.name_and_type(name, descriptor)),
        )

    # ── members ──────────────────────────────────────────────────────────

    def add_field(self, name: str, descriptor: str, access: int = ACC_PUBLIC) -> ClassFileBuilder:
        self._fields.append(
            struct.pack(">HHHH", access, self.utf8(name), self.utf8(descriptor), 0)
        )
        return self

    def add_method(
        self,
        name: str,
        descriptor: str,
        code: bytes | None = None,
        exceptions: Iterable[str] = (),
        handlers: Iterable[tuple[int, int, int, str | None]] = (),
        access: int = ACC_PUBLIC,
    ) -> ClassFileBuilder:
        """Add a method. *handlers* are ``(start, end, handler, catch_type)``."""
        attributes: list[bytes] = []
        if code is not None:
            table = b"".join(
                struct.pack(">HHHH", start, end, handler, self.class_ref(catch) if catch else 0)
                for start, end, handler, catch in handlers
            )
            table_len = len(table) // 8
            body = (
                struct.pack(">HHI", 8, 8, len(code))
                + code
                + struct.pack(">H", table_len)
                + table
                + struct.pack(">H", 0)
            )
            attributes.append(self._attribute("Code", body))
        exception_names = list(exceptions)
        if exception_names:
            body = struct.pack(">H", len(exception_names)) + b"".join(
                struct.pack(">H", self.class_ref(e)) for e in exception_names
            )
            attributes.append(self._attribute("Exceptions", body))
        self._methods.append(
            struct.pack(">HHHH", access, self.utf8(name), self.utf8(descriptor), len(attributes))
            + b"".join(attributes)
        )
        return self

    def _attribute(self, name: str, body: bytes) -> bytes:
        return struct.pack(">HI", self.utf8(name), len(body)) + body

    # ── output ───────────────────────────────────────────────────────────

    def build(self) -> bytes:
        header = struct.pack(">IHH", 0xCAFEBABE, 0, self.major_version)
        pool = struct.pack(">H", self._next_index) + b"".join(self._pool)
        interfaces = struct.pack(">H", len(self.interface_indexes)) + b"".join(
            struct.pack(">H", i) for i in self.interface_indexes
        )
        fields = struct.pack(">H", len(self._fields)) + b"".join(self._fields)
        methods = struct.pack(">H", len(self._methods)) + b"".join(self._methods)
        return (
            header
            + pool
            + struct.pack(">HHH", ACC_PUBLIC | ACC_SUPER, self.this_index, self.super_index)
            + interfaces
            + fields
            + methods
            + struct.pack(">H", 0)
        )


def op(opcode: int, *operands: int, widths: tuple[int, ...] | None = None) -> bytes:
    """Encode one instruction; operands default to u2 each."""
    widths = widths or tuple(2 for _ in operands)
    out = bytes([opcode])
    for value, width in zip(operands, widths):
        out += value.to_bytes(width, "big", signed=value < 0)
    return out


def build_archive(path: Path, entries: dict[str, bytes | str]) -> Path:
    """Write a zip archive with *entries* in the given order."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


class FakeDecompiler:
    """Drop-in DecompilerEngine that derives source text from the entry name.

    Parameters
    ----------
    outputs:
        Optional ``entry name -> list of text blobs`` overrides.
    fail_on:
        Entry names for which ``DecompilerFailure`` is raised.
    """

    name = "fake"

    def __init__(
        self,
        outputs: dict[str, list[str]] | None = None,
        fail_on: Iterable[str] = (),
    ) -> None:
        self.outputs = outputs or {}
        self.fail_on = set(fail_on)
        self.calls: list[str] = []

    def decompile(self, class_bytes: bytes, entry_name: str, sink: DecompilerSink) -> int:
        self.calls.append(entry_name)
        if entry_name in self.fail_on:
            raise DecompilerFailure(f"fake failure on {entry_name}")
        blobs = self.outputs.get(entry_name)
        if blobs is None:
            blobs = [self._source_for(entry_name)]
        for blob in blobs:
            sink.accept(blob, entry_name)
        return len(blobs)

    @staticmethod
    def _source_for(entry_name: str) -> str:
        path = PurePosixPath(entry_name)
        parts = list(path.parent.parts)
        for root in (["BOOT-INF", "classes"], ["WEB-INF", "classes"]):
            if parts[:2] == root:
                parts = parts[2:]
        type_name = path.stem.split("$")[0]
        package = ".".join(parts)
        header = f"package {package};\n\n" if package else ""
        return f"{header}public class {type_name} {{\n}}\n"
