"""
Neoasm Source Scanner
=====================

A streaming cursor over assembly source. The scanner reads the input one
byte at a time and keeps a two-character window: the current character and
one character of lookahead. It never backtracks.

Each byte is surfaced as a one-character string (chr(byte)), so every byte
value maps to exactly one character and back with ord(). The empty string
stands for "no character" once the input is exhausted.

Position Tracking
-----------------
line and column always describe the current character, both 1-indexed.
Consuming a newline moves to column 1 of the next line. Productions capture
`scanner.location` before consuming anything so diagnostics point at the
start of the construct.

Example
-------
>>> import io
>>> scanner = Scanner(io.BytesIO(b"AB"), "example.nasm")
>>> scanner.current, scanner.peek
('A', 'B')
>>> scanner.advance()
'A'
>>> scanner.location
SourceLocation(filename='example.nasm', line=1, column=2)
"""

from typing import BinaryIO, Callable

from neoasm.errors import SourceLocation, SourceReadError


# =============================================================================
# Character Classes
# =============================================================================

# Hex digits are lowercase only; uppercase letters belong to mnemonics
HEX_DIGITS = "0123456789abcdef"

WHITESPACE = " \t\n\r\v\f"

# Printable characters that can never appear in a symbol
SYMBOL_EXCLUDED = "0123456789;@%!()"


def is_hex(char: str) -> bool:
    """True for a lowercase hex digit."""
    # Note: '' is a substring of every string, so check for a character first
    return len(char) == 1 and char in HEX_DIGITS


def is_space(char: str) -> bool:
    """True for an ASCII whitespace character."""
    return len(char) == 1 and char in WHITESPACE


def is_symbol(char: str) -> bool:
    """
    True for a symbol character.

    Symbols are printable ASCII (no space) except digits and ; @ % ! ( ).
    Mnemonics and label names are runs of symbol characters.
    """
    return len(char) == 1 and 0x20 < ord(char) < 0x7F and char not in SYMBOL_EXCLUDED


# =============================================================================
# Scanner Implementation
# =============================================================================

class Scanner:
    """
    Two-character lookahead cursor over a binary stream.

    Usage:
        scanner = Scanner(stream, filename)
        while not scanner.at_end:
            char = scanner.advance()

    Attributes:
        filename: Name of the source (for error locations)
        line: Line of the current character (1-indexed)
        column: Column of the current character (1-indexed)
    """

    def __init__(self, stream: BinaryIO, filename: str = "<input>"):
        """
        Initialize the scanner and prime the two-character window.

        Args:
            stream: Readable binary stream holding the source
            filename: Name of the source, used in error locations

        Raises:
            SourceReadError: If the stream fails while priming
        """
        self.filename = filename
        self.line = 1
        self.column = 1

        self._stream = stream
        self._exhausted = False

        self._current = self._read()
        self._next = self._read()

    # =========================================================================
    # Character Access
    # =========================================================================

    @property
    def current(self) -> str:
        """The character under the cursor, or '' at end of input."""
        return self._current

    @property
    def peek(self) -> str:
        """The character after the current one, or '' if there is none."""
        return self._next

    @property
    def at_end(self) -> bool:
        """True once every character of the input has been consumed."""
        return self._current == ""

    @property
    def location(self) -> SourceLocation:
        """Location of the current character."""
        return SourceLocation(self.filename, self.line, self.column)

    def advance(self) -> str:
        """
        Consume and return the current character.

        Updates line and column tracking and pulls one more byte from the
        stream into the lookahead slot. A no-op returning '' at end of input.

        Raises:
            SourceReadError: If the stream fails while refilling the lookahead
        """
        if self.at_end:
            return ""

        char = self._current

        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        self._current = self._next
        self._next = self._read()

        return char

    def take_while(self, predicate: Callable[[str], bool]) -> str:
        """
        Consume characters while predicate holds and return them.

        Stops at end of input; the character that fails the predicate is
        left as the current one.
        """
        chars = []
        while not self.at_end and predicate(self._current):
            chars.append(self.advance())
        return "".join(chars)

    # =========================================================================
    # Stream Access
    # =========================================================================

    def _read(self) -> str:
        """Read one byte from the stream as a character; '' once exhausted."""
        if self._exhausted:
            return ""

        try:
            data = self._stream.read(1)
        except OSError as e:
            raise SourceReadError(f"cannot read source: {e}", self.location) from e

        if not data:
            self._exhausted = True
            return ""

        return chr(data[0])
