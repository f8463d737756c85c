"""
NeoVM Instruction Set Definition
================================

This module defines the instruction set of the NeoVM stack machine: the 29
opcodes, which modifiers each one accepts, and the packing of an instruction
into its single control byte.

Control Byte Layout
-------------------
Every instruction is encoded as exactly one byte:

    bit   7    6 5    4 3 2 1 0
        +---+-------+-----------+
        | r | size  |  opcode   |
        +---+-------+-----------+

- **r** (bit 7): return modifier. The instruction works on the return stack
  instead of the working stack.
- **size** (bits 6-5): operand width. 00 = unspecified (1 byte), 01 = 2 bytes,
  10 = 3 bytes, 11 = 4 bytes.
- **opcode** (bits 4-0): ordinal in the opcode table (0-28).

A LIT control byte is followed in the image by its payload: as many bytes as
its size class selects.

Addressing
----------
The machine exposes an 8 MiB address space. An assembled ROM is placed so
that its last byte sits at the top of that space, which is why label
addresses are computed backward from ADDRESS_SPACE_SIZE.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from enum import IntEnum


# Total addressable space of the machine (8 MiB)
ADDRESS_SPACE_SIZE = 8 * 1024 * 1024

# Control byte fields
RETURN_FLAG = 0b1000_0000
SIZE_MASK = 0b0110_0000
SIZE_SHIFT = 5
OPCODE_MASK = 0b0001_1111

# Widest literal payload, in bytes
MAX_LITERAL_BYTES = 4


# =============================================================================
# Opcode and Size Class Enumerations
# =============================================================================

class Opcode(IntEnum):
    """NeoVM opcodes; the value is the ordinal stored in the control byte."""
    LIT = 0
    DEI = 1
    DEO = 2
    HLT = 3
    BRP = 4
    DUP = 5
    SWP = 6
    ROT = 7
    POP = 8
    STH = 9
    GPC = 10
    MEMR = 11
    MEMW = 12
    MEMC = 13
    JMP = 14
    TJMP = 15
    FJMP = 16
    EQ = 17
    NE = 18
    LT = 19
    GT = 20
    ADD = 21
    SUB = 22
    MUL = 23
    DIV = 24
    AND = 25
    OR = 26
    XOR = 27
    NOT = 28


class SizeClass(IntEnum):
    """
    Operand width selected by bits 6-5 of the control byte.

    DEFAULT is what a mnemonic gets without a size digit; it also
    selects a one-byte payload for LIT.
    """
    DEFAULT = 0
    TWO = 1
    THREE = 2
    FOUR = 3

    @property
    def byte_count(self) -> int:
        """Number of payload bytes a LIT with this size class carries."""
        return self.value + 1

    @classmethod
    def from_byte_count(cls, count: int) -> "SizeClass":
        """Size class for a literal of 1-4 bytes."""
        if not 1 <= count <= MAX_LITERAL_BYTES:
            raise ValueError(f"literal size must be 1-{MAX_LITERAL_BYTES} bytes, got {count}")
        return cls(count - 1)

    @classmethod
    def from_digit(cls, digit: str) -> "SizeClass":
        """Size class for a mnemonic size digit ('2', '3' or '4')."""
        if digit not in SIZE_DIGITS:
            raise ValueError(f"invalid size digit {digit!r}")
        return cls(int(digit) - 1)


# Digits accepted after a mnemonic as its size modifier
SIZE_DIGITS = "234"

# Lowercase suffix marking the return modifier
RETURN_SUFFIX = "r"


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Capabilities of one opcode.

    Attributes:
        opcode: The opcode
        accepts_return: True if the 'r' modifier may be applied
        accepts_size: True if a size digit may be applied
    """
    opcode: Opcode
    accepts_return: bool = True
    accepts_size: bool = True

    @property
    def mnemonic(self) -> str:
        return self.opcode.name


# Master table: mnemonic -> capabilities.
# BRP only moves the stack pointer, GPC and JMP have no sized operand.
OPCODE_TABLE: dict[str, InstructionInfo] = {
    op.name: InstructionInfo(op) for op in Opcode
}
OPCODE_TABLE["BRP"] = InstructionInfo(Opcode.BRP, accepts_return=False, accepts_size=False)
OPCODE_TABLE["GPC"] = InstructionInfo(Opcode.GPC, accepts_size=False)
OPCODE_TABLE["JMP"] = InstructionInfo(Opcode.JMP, accepts_size=False)

MNEMONICS = frozenset(OPCODE_TABLE)


# =============================================================================
# Lookup and Encoding Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> InstructionInfo | None:
    """
    Look up an opcode by mnemonic.

    Mnemonics are case-sensitive: the instruction set is upper case.

    Returns:
        InstructionInfo, or None if the mnemonic is unknown
    """
    return OPCODE_TABLE.get(mnemonic)


def encode_control_byte(
    opcode: Opcode,
    ret: bool = False,
    size: SizeClass = SizeClass.DEFAULT,
) -> int:
    """
    Pack an instruction into its control byte.

    Modifier legality is the caller's concern; this is a pure bit packing.

    >>> hex(encode_control_byte(Opcode.LIT, size=SizeClass.FOUR))
    '0x60'
    >>> hex(encode_control_byte(Opcode.ADD, ret=True, size=SizeClass.TWO))
    '0xb5'
    """
    return int(opcode) | (RETURN_FLAG if ret else 0) | (int(size) << SIZE_SHIFT)


def decode_control_byte(byte: int) -> tuple[Opcode, bool, SizeClass]:
    """
    Unpack a control byte into (opcode, return flag, size class).

    Raises:
        ValueError: If the byte is out of range or its ordinal (29-31)
            names no opcode
    """
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"control byte out of range: {byte}")

    ordinal = byte & OPCODE_MASK
    try:
        opcode = Opcode(ordinal)
    except ValueError:
        raise ValueError(f"no opcode with ordinal {ordinal} (byte ${byte:02X})") from None

    ret = bool(byte & RETURN_FLAG)
    size = SizeClass((byte & SIZE_MASK) >> SIZE_SHIFT)
    return opcode, ret, size


def format_mnemonic(opcode: Opcode, ret: bool = False, size: SizeClass = SizeClass.DEFAULT) -> str:
    """
    Render an instruction the way it is written in source, e.g. 'ADDr2'.
    """
    text = opcode.name
    if ret:
        text += RETURN_SUFFIX
    if size != SizeClass.DEFAULT:
        text += str(size.byte_count)
    return text


def resolved_address(offset: int, image_length: int) -> int:
    """
    Address of an image offset once the image is placed at the top of memory.

    Args:
        offset: Byte offset within the assembled image
        image_length: Final length of the image in bytes

    Returns:
        ADDRESS_SPACE_SIZE - image_length + offset
    """
    return ADDRESS_SPACE_SIZE - image_length + offset
