"""
Neoasm Disassembler Module
==========================

Decodes NeoVM ROM images back into assembly listings.

Usage:
    from neoasm.disassembler import NeoDisassembler

    disasm = NeoDisassembler()
    print(disasm.disassemble_to_text(rom))

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from .neovm import NeoDisassembler, DisassembledInstruction, parse_symbol_file

__all__ = [
    "NeoDisassembler",
    "DisassembledInstruction",
    "parse_symbol_file",
]
