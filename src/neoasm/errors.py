"""
Neoasm Error Hierarchy
======================

This module defines the exception hierarchy for the whole Neoasm toolchain.
All exceptions inherit from NeoasmError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
NeoasmError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - lexical errors in source
    ├── DuplicateSymbolError - label defined more than once
    ├── UnknownInstructionError - mnemonic not in the opcode table
    ├── ModifierError - return/size modifier not accepted by an opcode
    ├── UndefinedSymbolError - reference to an undefined label (strict mode)
    └── SourceReadError - the input stream could not be read

Every assembler error carries the location of the construct that caused it.
Messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class NeoasmError(Exception):
    """
    Base exception for all Neoasm errors.

        try:
            assembler.assemble_file("program.nasm")
        except NeoasmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for in-memory input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(NeoasmError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            hello.nasm:3:5: error: unknown instruction 'PUHS'
        """
        if self.location:
            parts = [f"{self.location}: error: {self.message}"]
        else:
            parts = [f"error: {self.message}"]

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Lexical error in assembly source code.

    Examples:
        - Unterminated comment
        - Empty label name or string literal
        - Odd-length or oversized hex run
        - Character outside every production
    """
    pass


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    The error points at the second definition; the hint names the
    location of the first one.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"cannot redefine label '{symbol}'",
            location=location,
            hint=hint,
        )


class UnknownInstructionError(AssemblerError):
    """
    Mnemonic that is not part of the instruction set.

    The reported name is the text scanned without its modifiers, so
    'PUHSr2' reports 'PUHS'.
    """

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        similar: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.similar = similar or []

        hint = None
        if self.similar:
            suggestions = ", ".join(f"'{s}'" for s in self.similar[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unknown instruction '{mnemonic}'",
            location=location,
            hint=hint,
        )


class ModifierError(AssemblerError):
    """
    Modifier used on an instruction that does not accept it.

    Example:
        BRPr   ( BRP takes neither the return nor the size modifier )
        JMP2   ( JMP has no size modifier )
    """

    def __init__(
        self,
        mnemonic: str,
        modifier: str,
        location: Optional[SourceLocation] = None,
    ):
        self.mnemonic = mnemonic
        self.modifier = modifier

        super().__init__(
            f"instruction '{mnemonic}' is incompatible with the {modifier} modifier",
            location=location,
        )


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that is never defined.

    Only raised when the assembler runs in strict mode; otherwise the
    placeholder bytes of the reference are left as zero.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        similar: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar = similar or []

        hint = None
        if self.similar:
            suggestions = ", ".join(f"'{s}'" for s in self.similar[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{symbol}'",
            location=location,
            hint=hint,
        )


class SourceReadError(AssemblerError):
    """
    The source stream raised an error while being read.

    A read failure ends the pass even if the stream was about to
    report end of input.
    """
    pass
