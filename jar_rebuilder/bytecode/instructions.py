"""JVM instruction decoding — just enough to find constant-pool operands."""

from __future__ import annotations

import struct
from typing import Iterator, NamedTuple

from jar_rebuilder.exceptions import MalformedClassFile

LDC = 0x12
LDC_W = 0x13
GETSTATIC = 0xB2
PUTSTATIC = 0xB3
GETFIELD = 0xB4
PUTFIELD = 0xB5
INVOKEVIRTUAL = 0xB6
INVOKESPECIAL = 0xB7
INVOKESTATIC = 0xB8
INVOKEINTERFACE = 0xB9
INVOKEDYNAMIC = 0xBA
NEW = 0xBB
ANEWARRAY = 0xBD
CHECKCAST = 0xC0
INSTANCEOF = 0xC1
MULTIANEWARRAY = 0xC5

TABLESWITCH = 0xAA
LOOKUPSWITCH = 0xAB
WIDE = 0xC4
IINC = 0x84

FIELD_INSNS = frozenset({GETSTATIC, PUTSTATIC, GETFIELD, PUTFIELD})
METHOD_INSNS = frozenset({INVOKEVIRTUAL, INVOKESPECIAL, INVOKESTATIC, INVOKEINTERFACE})
TYPE_INSNS = frozenset({NEW, ANEWARRAY, CHECKCAST, INSTANCEOF, MULTIANEWARRAY})


def _build_length_table() -> dict[int, int]:
    """Total instruction length (opcode included) for fixed-size opcodes."""
    lengths: dict[int, int] = {}

    def fill(first: int, last: int, size: int) -> None:
        for op in range(first, last + 1):
            lengths[op] = size

    fill(0x00, 0x0F, 1)  # nop, aconst_null, iconst_*, lconst_*, fconst_*, dconst_*
    lengths[0x10] = 2  # bipush
    lengths[0x11] = 3  # sipush
    lengths[LDC] = 2
    lengths[LDC_W] = 3
    lengths[0x14] = 3  # ldc2_w
    fill(0x15, 0x19, 2)  # iload .. aload
    fill(0x1A, 0x35, 1)  # *load_<n>, *aload
    fill(0x36, 0x3A, 2)  # istore .. astore
    fill(0x3B, 0x83, 1)  # *store_<n>, *astore, stack ops, arithmetic
    lengths[IINC] = 3
    fill(0x85, 0x98, 1)  # conversions, comparisons
    fill(0x99, 0xA8, 3)  # if*, goto, jsr
    lengths[0xA9] = 2  # ret
    fill(0xAC, 0xB1, 1)  # returns
    fill(GETSTATIC, INVOKESTATIC, 3)
    lengths[INVOKEINTERFACE] = 5
    lengths[INVOKEDYNAMIC] = 5
    lengths[NEW] = 3
    lengths[0xBC] = 2  # newarray
    lengths[ANEWARRAY] = 3
    fill(0xBE, 0xBF, 1)  # arraylength, athrow
    lengths[CHECKCAST] = 3
    lengths[INSTANCEOF] = 3
    fill(0xC2, 0xC3, 1)  # monitorenter, monitorexit
    lengths[MULTIANEWARRAY] = 4
    fill(0xC6, 0xC7, 3)  # ifnull, ifnonnull
    fill(0xC8, 0xC9, 5)  # goto_w, jsr_w
    return lengths


_LENGTHS = _build_length_table()


class Instruction(NamedTuple):
    pc: int
    opcode: int
    length: int


def _s4(code: bytes, pos: int) -> int:
    if pos + 4 > len(code):
        raise MalformedClassFile(f"switch operands truncated at offset {pos}")
    return struct.unpack_from(">i", code, pos)[0]


def _switch_length(code: bytes, pc: int, opcode: int) -> int:
    # Operands start at the next 4-byte boundary relative to the method's code.
    base = pc + 1 + (-(pc + 1) % 4)
    if opcode == TABLESWITCH:
        low = _s4(code, base + 4)
        high = _s4(code, base + 8)
        if high < low:
            raise MalformedClassFile(f"tableswitch at {pc}: high {high} < low {low}")
        return base - pc + 12 + 4 * (high - low + 1)
    npairs = _s4(code, base + 4)
    if npairs < 0:
        raise MalformedClassFile(f"lookupswitch at {pc}: negative npairs")
    return base - pc + 8 + 8 * npairs


def iter_instructions(code: bytes) -> Iterator[Instruction]:
    """Walk a method's bytecode instruction by instruction."""
    pc = 0
    while pc < len(code):
        opcode = code[pc]
        if opcode in (TABLESWITCH, LOOKUPSWITCH):
            length = _switch_length(code, pc, opcode)
        elif opcode == WIDE:
            if pc + 1 >= len(code):
                raise MalformedClassFile(f"wide at {pc} has no operand opcode")
            length = 6 if code[pc + 1] == IINC else 4
        else:
            length = _LENGTHS.get(opcode, 0)
            if not length:
                raise MalformedClassFile(f"unknown opcode 0x{opcode:02x} at offset {pc}")
        if pc + length > len(code):
            raise MalformedClassFile(f"instruction 0x{opcode:02x} at {pc} overruns code")
        yield Instruction(pc, opcode, length)
        pc += length


def u1_operand(code: bytes, insn: Instruction) -> int:
    return code[insn.pc + 1]


def u2_operand(code: bytes, insn: Instruction) -> int:
    return (code[insn.pc + 1] << 8) | code[insn.pc + 2]
