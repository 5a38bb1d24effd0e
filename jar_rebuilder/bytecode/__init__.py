"""Class-file parsing and type-reference extraction."""

from jar_rebuilder.bytecode.descriptors import (
    decode_class_operand,
    decode_field_descriptor,
    decode_method_descriptor,
)
from jar_rebuilder.bytecode.extractor import ReferenceExtractor

__all__ = [
    "ReferenceExtractor",
    "decode_class_operand",
    "decode_field_descriptor",
    "decode_method_descriptor",
]
