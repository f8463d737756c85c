"""
Neoasm Assembler - Main Interface
=================================

This module provides the Assembler class, the primary interface for turning
NeoVM assembly source into a ROM image. Each call runs one independent pass
through a fresh CodeGenerator.

Example Usage
-------------
>>> from neoasm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> rom = asm.assemble_string('''
... ( print a character )
...     #2a #00 DEO
...     ;end JMP
... @end
...     HLT
... ''')
>>> asm.write_rom("hello.rom")
>>> asm.get_symbols()
{'end': 8388607}

Command-Line Usage
------------------
    $ neoasm hello.nasm -o hello
    Assembled as 'hello.rom' in 12 bytes
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional

from neoasm.assembler.codegen import CodeGenerator
from neoasm.errors import AssemblerError


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main NeoVM assembler class.

    The assembler keeps the result of the last successful pass: the image,
    the symbol table and the warnings. A failed pass clears all of them, so
    no partial image can be written.

    Attributes:
        strict: If True, references to undefined labels are errors
        warnings: Warnings from the last successful pass
    """

    def __init__(self, strict: bool = False):
        """
        Initialize the assembler.

        Args:
            strict: Treat a reference to a label that is never defined as an
                    error. By default its placeholder is left as zero.
        """
        self.strict = strict
        self.warnings: list[str] = []
        self._code: Optional[bytes] = None
        self._symbols: dict[str, int] = {}
        self._source_name: Optional[str] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str | bytes, filename: str = "<input>") -> bytes:
        """
        Assemble source given as text or raw bytes.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The assembled image
        """
        if isinstance(source, str):
            return self.assemble_string(source, filename)
        return self.assemble_stream(io.BytesIO(source), filename)

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        The string is encoded as UTF-8 before scanning.

        Raises:
            AssemblerError: If assembly fails
        """
        return self.assemble_stream(io.BytesIO(source.encode("utf-8")), filename)

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")

        with open(filepath, "rb") as f:
            return self.assemble_stream(f, str(filepath))

    def assemble_stream(self, stream: BinaryIO, filename: str = "<input>") -> bytes:
        """
        Assemble source read from a binary stream.

        Args:
            stream: Readable binary stream
            filename: Name used in error messages

        Returns:
            The assembled image

        Raises:
            AssemblerError: If assembly fails
        """
        self._reset()

        generator = CodeGenerator(stream, filename, strict=self.strict)
        code = generator.generate()

        self._code = code
        self._symbols = generator.get_symbols()
        self._source_name = filename
        self.warnings = list(generator.warnings)

        logger.debug(f"Generated {len(code)} bytes with {len(self.warnings)} warning(s)")
        return code

    def _reset(self) -> None:
        self.warnings = []
        self._code = None
        self._symbols = {}
        self._source_name = None

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """
        Return the image of the last successful pass.

        Raises:
            AssemblerError: If nothing has been assembled
        """
        if self._code is None:
            raise AssemblerError("no code has been assembled")
        return self._code

    def get_symbols(self) -> dict[str, int]:
        """Label name -> resolved address, from the last successful pass."""
        return dict(self._symbols)

    def write_rom(self, filepath: str | Path) -> None:
        """Write the image verbatim to filepath."""
        Path(filepath).write_bytes(self.get_code())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, sorted by name)
        """
        self.get_code()

        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by neoasm\n")
            if self._source_name:
                f.write(f"# Source: {self._source_name}\n")
            for name, address in sorted(self._symbols.items()):
                f.write(f"{name} ${address:06X}\n")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str | bytes, filename: str = "<input>", strict: bool = False) -> bytes:
    """Assemble source text with a throwaway Assembler."""
    return Assembler(strict=strict).assemble(source, filename)


def assemble_file(filepath: str | Path, strict: bool = False) -> bytes:
    """Assemble a source file with a throwaway Assembler."""
    return Assembler(strict=strict).assemble_file(filepath)
