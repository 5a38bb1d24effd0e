"""Minimal class-file reader (JVMS §4).

Parses the constant pool, class header, fields, methods and the attributes
the reference extractor needs (``Code`` and ``Exceptions``). Everything
else is kept as raw bytes or skipped. Any structural inconsistency raises
:class:`MalformedClassFile`.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from jar_rebuilder.exceptions import MalformedClassFile

MAGIC = 0xCAFEBABE

# Constant pool tags
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# Payload size in bytes for fixed-width tags (Utf8 is length-prefixed)
_TAG_SIZES: dict[int, int] = {
    CONSTANT_INTEGER: 4,
    CONSTANT_FLOAT: 4,
    CONSTANT_LONG: 8,
    CONSTANT_DOUBLE: 8,
    CONSTANT_CLASS: 2,
    CONSTANT_STRING: 2,
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}

_MEMBER_REF_TAGS = (CONSTANT_FIELDREF, CONSTANT_METHODREF, CONSTANT_INTERFACE_METHODREF)


class ByteReader:
    """Big-endian cursor over a bytes buffer."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = data
        self.pos = pos

    def _take(self, size: int) -> bytes:
        end = self.pos + size
        if size < 0 or end > len(self.data):
            raise MalformedClassFile(
                f"truncated class file: need {size} bytes at offset {self.pos}, "
                f"have {len(self.data) - self.pos}"
            )
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk

    def u1(self) -> int:
        return self._take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self._take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self._take(4))[0]

    def s4(self) -> int:
        return struct.unpack(">i", self._take(4))[0]

    def raw(self, size: int) -> bytes:
        return self._take(size)

    def skip(self, size: int) -> None:
        self._take(size)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos


def _decode_modified_utf8(data: bytes) -> str:
    # Modified UTF-8 encodes NUL as C0 80 and supplementary characters as
    # surrogate pairs.
    try:
        return data.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
    except UnicodeDecodeError as e:
        raise MalformedClassFile(f"invalid modified UTF-8 in constant pool: {e}") from e


@dataclass(frozen=True)
class MemberRef:
    owner: str  # internal name of the owning class (may be an array descriptor)
    name: str
    descriptor: str


class ConstantPool:
    """Indexed constant pool. Index 0 and the slot after Long/Double are unusable."""

    def __init__(self, entries: list[tuple[int, object] | None]) -> None:
        self._entries = entries

    @classmethod
    def read(cls, reader: ByteReader) -> ConstantPool:
        count = reader.u2()
        if count == 0:
            raise MalformedClassFile("constant_pool_count must be at least 1")
        entries: list[tuple[int, object] | None] = [None] * count
        index = 1
        while index < count:
            tag = reader.u1()
            if tag == CONSTANT_UTF8:
                length = reader.u2()
                entries[index] = (tag, _decode_modified_utf8(reader.raw(length)))
            elif tag in (CONSTANT_CLASS, CONSTANT_STRING, CONSTANT_METHOD_TYPE,
                         CONSTANT_MODULE, CONSTANT_PACKAGE):
                entries[index] = (tag, reader.u2())
            elif tag in _MEMBER_REF_TAGS or tag in (
                CONSTANT_NAME_AND_TYPE, CONSTANT_DYNAMIC, CONSTANT_INVOKE_DYNAMIC
            ):
                entries[index] = (tag, (reader.u2(), reader.u2()))
            elif tag in _TAG_SIZES:
                entries[index] = (tag, reader.raw(_TAG_SIZES[tag]))
            else:
                raise MalformedClassFile(f"unknown constant pool tag {tag} at index {index}")
            # Long and Double take two slots
            index += 2 if tag in (CONSTANT_LONG, CONSTANT_DOUBLE) else 1
        if index != count:
            raise MalformedClassFile("wide constant overruns constant_pool_count")
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def tag(self, index: int) -> int | None:
        """Tag at *index*, or None for an unusable/out-of-range slot."""
        if 0 < index < len(self._entries) and self._entries[index] is not None:
            return self._entries[index][0]  # type: ignore[index]
        return None

    def _get(self, index: int, *tags: int) -> object:
        if not 0 < index < len(self._entries):
            raise MalformedClassFile(f"constant pool index {index} out of range")
        entry = self._entries[index]
        if entry is None or entry[0] not in tags:
            found = None if entry is None else entry[0]
            raise MalformedClassFile(
                f"constant pool index {index}: expected tag {tags}, found {found}"
            )
        return entry[1]

    def utf8(self, index: int) -> str:
        return self._get(index, CONSTANT_UTF8)  # type: ignore[return-value]

    def class_name(self, index: int) -> str:
        """Internal name of the CONSTANT_Class at *index*."""
        return self.utf8(self._get(index, CONSTANT_CLASS))  # type: ignore[arg-type]

    def name_and_type(self, index: int) -> tuple[str, str]:
        name_index, type_index = self._get(index, CONSTANT_NAME_AND_TYPE)  # type: ignore[misc]
        return self.utf8(name_index), self.utf8(type_index)

    def member_ref(self, index: int) -> MemberRef:
        class_index, nat_index = self._get(index, *_MEMBER_REF_TAGS)  # type: ignore[misc]
        name, descriptor = self.name_and_type(nat_index)
        return MemberRef(self.class_name(class_index), name, descriptor)

    def invoke_dynamic_descriptor(self, index: int) -> str:
        _, nat_index = self._get(index, CONSTANT_INVOKE_DYNAMIC)  # type: ignore[misc]
        return self.name_and_type(nat_index)[1]


@dataclass
class ExceptionHandler:
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int  # constant pool index, 0 for finally/catch-all


@dataclass
class CodeAttribute:
    max_stack: int
    max_locals: int
    code: bytes
    exception_table: list[ExceptionHandler] = field(default_factory=list)


@dataclass
class MemberInfo:
    """A field or method."""

    access_flags: int
    name: str
    descriptor: str
    attributes: dict[str, list[bytes]] = field(default_factory=dict)

    def attribute(self, name: str) -> bytes | None:
        values = self.attributes.get(name)
        return values[0] if values else None


@dataclass
class ClassFile:
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: int
    this_class: str
    super_class: str | None
    interfaces: list[str]
    fields: list[MemberInfo]
    methods: list[MemberInfo]
    attributes: dict[str, list[bytes]] = field(default_factory=dict)

    def code_of(self, method: MemberInfo) -> CodeAttribute | None:
        raw = method.attribute("Code")
        return None if raw is None else parse_code_attribute(raw)

    def exceptions_of(self, method: MemberInfo) -> list[str]:
        """Internal names from a method's ``Exceptions`` attribute."""
        raw = method.attribute("Exceptions")
        if raw is None:
            return []
        reader = ByteReader(raw)
        count = reader.u2()
        return [self.constant_pool.class_name(reader.u2()) for _ in range(count)]


def _read_attributes(reader: ByteReader, pool: ConstantPool) -> dict[str, list[bytes]]:
    attributes: dict[str, list[bytes]] = {}
    for _ in range(reader.u2()):
        name = pool.utf8(reader.u2())
        length = reader.u4()
        attributes.setdefault(name, []).append(reader.raw(length))
    return attributes


def _read_members(reader: ByteReader, pool: ConstantPool) -> list[MemberInfo]:
    members: list[MemberInfo] = []
    for _ in range(reader.u2()):
        access = reader.u2()
        name = pool.utf8(reader.u2())
        descriptor = pool.utf8(reader.u2())
        members.append(MemberInfo(access, name, descriptor, _read_attributes(reader, pool)))
    return members


def parse_code_attribute(raw: bytes) -> CodeAttribute:
    reader = ByteReader(raw)
    max_stack = reader.u2()
    max_locals = reader.u2()
    code = reader.raw(reader.u4())
    handlers = [
        ExceptionHandler(reader.u2(), reader.u2(), reader.u2(), reader.u2())
        for _ in range(reader.u2())
    ]
    # Nested attributes (LineNumberTable, StackMapTable, ...) are not needed.
    return CodeAttribute(max_stack, max_locals, code, handlers)


def parse_class_file(data: bytes) -> ClassFile:
    """Parse *data* as a class file or raise :class:`MalformedClassFile`."""
    reader = ByteReader(data)
    if reader.remaining < 10 or reader.u4() != MAGIC:
        raise MalformedClassFile("bad magic number")
    minor = reader.u2()
    major = reader.u2()
    pool = ConstantPool.read(reader)
    access = reader.u2()
    this_class = pool.class_name(reader.u2())
    super_index = reader.u2()
    super_class = pool.class_name(super_index) if super_index else None
    interfaces = [pool.class_name(reader.u2()) for _ in range(reader.u2())]
    fields = _read_members(reader, pool)
    methods = _read_members(reader, pool)
    attributes = _read_attributes(reader, pool)
    if reader.remaining:
        raise MalformedClassFile(f"{reader.remaining} trailing bytes after class attributes")
    return ClassFile(
        minor_version=minor,
        major_version=major,
        constant_pool=pool,
        access_flags=access,
        this_class=this_class,
        super_class=super_class,
        interfaces=interfaces,
        fields=fields,
        methods=methods,
        attributes=attributes,
    )
