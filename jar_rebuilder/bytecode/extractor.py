"""Bytecode reference extractor — the type names one class file mentions.

Declared signatures alone miss types used only inside method bodies, so
every ``Code`` attribute is walked and type, field-owner and method-owner
operands are collected as well.
"""

from __future__ import annotations

import structlog

from jar_rebuilder.bytecode import instructions as insn
from jar_rebuilder.bytecode.classfile import (
    CONSTANT_CLASS,
    ClassFile,
    CodeAttribute,
    parse_class_file,
)
from jar_rebuilder.bytecode.descriptors import (
    decode_class_operand,
    decode_field_descriptor,
    decode_method_descriptor,
    internal_to_dotted,
)
from jar_rebuilder.models.references import ClassReferenceSet, TypeReference

log = structlog.get_logger("jar_rebuilder.extractor")


class ReferenceExtractor:
    """Stateless; one instance can be reused for every class in a scan."""

    def extract(self, data: bytes) -> ClassReferenceSet:
        """Parse *data* and collect its references.

        Raises:
            MalformedClassFile: the class structure is inconsistent.
        """
        class_file = parse_class_file(data)
        refs: set[TypeReference] = set()

        owner = internal_to_dotted(class_file.this_class)
        refs.add(owner)
        if class_file.super_class is not None:
            refs.add(internal_to_dotted(class_file.super_class))
        refs.update(internal_to_dotted(i) for i in class_file.interfaces)

        for field_info in class_file.fields:
            _add(refs, decode_field_descriptor(field_info.descriptor))

        for method in class_file.methods:
            refs.update(decode_method_descriptor(method.descriptor))
            refs.update(internal_to_dotted(e) for e in class_file.exceptions_of(method))
            code = class_file.code_of(method)
            if code is not None:
                self._scan_code(class_file, code, refs)

        log.debug("extractor.class_parsed", owner=owner, references=len(refs))
        return ClassReferenceSet(owner=owner, references=frozenset(refs))

    @staticmethod
    def _scan_code(class_file: ClassFile, code: CodeAttribute, refs: set[TypeReference]) -> None:
        pool = class_file.constant_pool
        bytecode = code.code
        for instruction in insn.iter_instructions(bytecode):
            op = instruction.opcode
            if op in insn.TYPE_INSNS:
                _add(refs, decode_class_operand(pool.class_name(insn.u2_operand(bytecode, instruction))))
            elif op in insn.FIELD_INSNS:
                ref = pool.member_ref(insn.u2_operand(bytecode, instruction))
                _add(refs, decode_class_operand(ref.owner))
                _add(refs, decode_field_descriptor(ref.descriptor))
            elif op in insn.METHOD_INSNS:
                ref = pool.member_ref(insn.u2_operand(bytecode, instruction))
                _add(refs, decode_class_operand(ref.owner))
                refs.update(decode_method_descriptor(ref.descriptor))
            elif op == insn.INVOKEDYNAMIC:
                descriptor = pool.invoke_dynamic_descriptor(insn.u2_operand(bytecode, instruction))
                refs.update(decode_method_descriptor(descriptor))
            elif op in (insn.LDC, insn.LDC_W):
                index = (
                    insn.u1_operand(bytecode, instruction)
                    if op == insn.LDC
                    else insn.u2_operand(bytecode, instruction)
                )
                if pool.tag(index) == CONSTANT_CLASS:
                    _add(refs, decode_class_operand(pool.class_name(index)))

        # Caught exception types are referenced only through the handler table.
        for handler in code.exception_table:
            if handler.catch_type:
                _add(refs, decode_class_operand(pool.class_name(handler.catch_type)))


def _add(refs: set[TypeReference], type_name: TypeReference | None) -> None:
    if type_name:
        refs.add(type_name)
