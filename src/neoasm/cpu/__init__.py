"""
Neoasm CPU Package
==================

Instruction set definitions shared by the assembler (which encodes
instructions) and the disassembler (which decodes them).

Usage:
    from neoasm.cpu import (
        Opcode,
        SizeClass,
        encode_control_byte,
        decode_control_byte,
    )

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from neoasm.cpu.neovm import (
    # Constants
    ADDRESS_SPACE_SIZE,
    MAX_LITERAL_BYTES,
    RETURN_SUFFIX,
    SIZE_DIGITS,
    # Core types
    Opcode,
    SizeClass,
    InstructionInfo,
    # Instruction database
    OPCODE_TABLE,
    MNEMONICS,
    # Functions
    get_instruction_info,
    encode_control_byte,
    decode_control_byte,
    format_mnemonic,
    resolved_address,
)

__all__ = [
    "ADDRESS_SPACE_SIZE",
    "MAX_LITERAL_BYTES",
    "RETURN_SUFFIX",
    "SIZE_DIGITS",
    "Opcode",
    "SizeClass",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "get_instruction_info",
    "encode_control_byte",
    "decode_control_byte",
    "format_mnemonic",
    "resolved_address",
]
