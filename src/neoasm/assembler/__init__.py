"""
NeoVM Assembler
===============

This package turns NeoVM assembly source into a flat ROM image.

Main Components
---------------
- **Assembler**: Facade that runs one pass per source and keeps its results
- **CodeGenerator**: Single-pass scan that emits bytes as it recognizes them
- **Scanner**: Two-character lookahead cursor over the source bytes
- **LabelResolver**: Label tables and the final backpatching step

Assembly Process
----------------
1. **Scan**: the current character selects a production (comment, label
   reference, label definition, string, literal, data or instruction) and
   the production appends its bytes to the image.
2. **Resolve**: once the image length is final, every label reference
   placeholder is overwritten with the label's address.

Example Usage
-------------
>>> from neoasm.assembler import assemble
>>> assemble("#2a #00 DEO").hex()
'002a000002'
"""

from neoasm.assembler.assembler import Assembler, assemble, assemble_file
from neoasm.assembler.codegen import CodeGenerator
from neoasm.assembler.labels import LabelDefinition, LabelReference, LabelResolver
from neoasm.assembler.scanner import Scanner, is_hex, is_space, is_symbol

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Code generator
    "CodeGenerator",
    # Labels
    "LabelDefinition",
    "LabelReference",
    "LabelResolver",
    # Scanner
    "Scanner",
    "is_hex",
    "is_space",
    "is_symbol",
]
