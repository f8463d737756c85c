"""
Neoasm - Assembler Toolchain for the NeoVM Stack Machine
========================================================

This package assembles programs for NeoVM, a small stack-based virtual
machine with 29 instructions and an 8 MiB address space. Programs are
distributed as flat ROM images (.rom).

Main Components
---------------
- **assembler**: NeoVM assembler (neoasm)
    Converts assembly source into a ROM image in a single streaming pass

- **cpu**: Instruction set definitions
    Opcodes, modifiers and the control-byte encoding

- **disassembler**: ROM disassembler (neodisasm)
    Decodes a ROM image back into assembly text

Quick Start
-----------
Assemble a program:
    >>> from neoasm import Assembler
    >>> asm = Assembler()
    >>> rom = asm.assemble_file("hello.nasm")
    >>> asm.write_rom("hello.rom")

Disassemble it again:
    >>> from neoasm import NeoDisassembler
    >>> print(NeoDisassembler().disassemble_to_text(rom))

Or use the command-line tools:
    $ neoasm hello.nasm -o hello
    $ neodisasm hello.rom

Language Summary
----------------
    ( comment )       ignored, may span lines
    @name             define a label at the current offset
    ;name             push the 4-byte address of a label
    'text             the bytes of text, up to the next whitespace
    #2a  #1234        LIT with a 1-4 byte payload
    2a1f              raw data bytes
    ADD  ADDr  ADD2   instruction, with return and size modifiers
"""

import logging

__version__ = "1.0.0"

# Library logging stays silent unless the application configures it
logging.getLogger(__name__).addHandler(logging.NullHandler())

# =============================================================================
# Public API Exports
# =============================================================================

from neoasm.errors import (
    NeoasmError,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    DuplicateSymbolError,
    UnknownInstructionError,
    ModifierError,
    UndefinedSymbolError,
    SourceReadError,
)
from neoasm.cpu import (
    ADDRESS_SPACE_SIZE,
    Opcode,
    SizeClass,
    encode_control_byte,
    decode_control_byte,
)
from neoasm.assembler import Assembler, assemble, assemble_file
from neoasm.disassembler import NeoDisassembler

__all__ = [
    "__version__",
    # Errors
    "NeoasmError",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "DuplicateSymbolError",
    "UnknownInstructionError",
    "ModifierError",
    "UndefinedSymbolError",
    "SourceReadError",
    # CPU
    "ADDRESS_SPACE_SIZE",
    "Opcode",
    "SizeClass",
    "encode_control_byte",
    "decode_control_byte",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Disassembler
    "NeoDisassembler",
]
