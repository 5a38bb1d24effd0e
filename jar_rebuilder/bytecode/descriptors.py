"""JVM type descriptor decoding.

Descriptors use the class-file grammar::

    FieldType  := B | C | D | F | I | J | S | Z | L<internal/name>; | [FieldType
    Method     := ( FieldType* ) ( FieldType | V )

All functions here are pure. Malformed input never raises: it simply
contributes no type names.
"""

from __future__ import annotations

from jar_rebuilder.models.references import TypeReference

_PRIMITIVES = frozenset("BCDFIJSZ")


class _DescriptorError(ValueError):
    pass


def internal_to_dotted(internal_name: str) -> str:
    """``java/util/Map$Entry`` -> ``java.util.Map$Entry``."""
    return internal_name.replace("/", ".")


def _read_field_type(descriptor: str, pos: int) -> tuple[TypeReference | None, int]:
    """Decode one FieldType at *pos*; return (object type or None, next pos)."""
    if pos >= len(descriptor):
        raise _DescriptorError(f"truncated descriptor {descriptor!r}")
    ch = descriptor[pos]
    if ch in _PRIMITIVES:
        return None, pos + 1
    if ch == "[":
        # Arrays contribute their element type
        while pos < len(descriptor) and descriptor[pos] == "[":
            pos += 1
        return _read_field_type(descriptor, pos)
    if ch == "L":
        end = descriptor.find(";", pos)
        if end == -1 or end == pos + 1:
            raise _DescriptorError(f"unterminated class type in {descriptor!r}")
        return internal_to_dotted(descriptor[pos + 1 : end]), end + 1
    raise _DescriptorError(f"unexpected {ch!r} in {descriptor!r}")


def decode_field_descriptor(descriptor: str) -> TypeReference | None:
    """Return the object type named by a field descriptor, or None.

    ``Ljava/lang/String;`` -> ``java.lang.String``;
    ``[[Lcom/acme/Foo;`` -> ``com.acme.Foo``; ``I`` / ``[J`` -> None.
    """
    try:
        type_name, end = _read_field_type(descriptor, 0)
    except _DescriptorError:
        return None
    if end != len(descriptor):
        return None
    return type_name


def decode_method_descriptor(descriptor: str) -> list[TypeReference]:
    """Return the object types of a method's parameters and return value."""
    if not descriptor.startswith("("):
        return []
    types: list[TypeReference] = []
    pos = 1
    try:
        while pos < len(descriptor) and descriptor[pos] != ")":
            type_name, pos = _read_field_type(descriptor, pos)
            if type_name is not None:
                types.append(type_name)
        if pos >= len(descriptor):
            return []
        pos += 1  # skip ")"
        if descriptor[pos:] == "V":
            return types
        type_name, pos = _read_field_type(descriptor, pos)
    except _DescriptorError:
        return []
    if pos != len(descriptor):
        return []
    if type_name is not None:
        types.append(type_name)
    return types


def decode_class_operand(name: str) -> TypeReference | None:
    """Decode a CONSTANT_Class name as used by instructions.

    Plain internal names become dotted names; array class names
    (``[Ljava/lang/String;``) decode to their element type; primitive arrays
    yield None.
    """
    if not name:
        return None
    if name.startswith("["):
        return decode_field_descriptor(name)
    return internal_to_dotted(name)
