"""
Neoasm Code Generator
=====================

This module turns assembly source into a NeoVM ROM image in a single
streaming pass. There is no token stream and no syntax tree: the character
under the scanner selects a production, and the production appends its bytes
to the image as soon as it is recognized.

Productions
-----------
Checked in this order against the current character:

| Lead        | Production        | Emits                                   |
|-------------|-------------------|-----------------------------------------|
| (           | comment           | nothing (ends at the next ')')          |
| ;name       | label reference   | LIT4 control byte + 4-byte placeholder  |
| @name       | label definition  | nothing                                 |
| 'text       | string            | the bytes of text (ends at whitespace)  |
| #hex        | sized literal     | LIT control byte + 1-4 bytes            |
| hex         | raw data          | 1-4 bytes                               |
| MNEMONIC    | instruction       | one control byte                        |
| whitespace  | -                 | nothing                                 |

Hex digits are lowercase and come in pairs; at most eight in a row.

Instructions
------------
A mnemonic may carry a return modifier (a trailing lowercase 'r') and a size
modifier (a digit 2, 3 or 4), in that order:

    ADD       ADDr      ADD2      ADDr4

Example
-------
>>> import io
>>> gen = CodeGenerator(io.BytesIO(b"#2a ;end JMP @end"), "example.nasm")
>>> gen.generate().hex()
'002a60008000000e'
"""

import difflib
import logging
from typing import BinaryIO

from neoasm.assembler.labels import ADDRESS_SIZE, LabelResolver
from neoasm.assembler.scanner import Scanner, is_hex, is_space, is_symbol
from neoasm.cpu import (
    ADDRESS_SPACE_SIZE,
    MAX_LITERAL_BYTES,
    MNEMONICS,
    RETURN_SUFFIX,
    SIZE_DIGITS,
    Opcode,
    SizeClass,
    encode_control_byte,
    get_instruction_info,
)
from neoasm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    ModifierError,
    SourceLocation,
    UnknownInstructionError,
)


logger = logging.getLogger(__name__)

# Control byte emitted in front of every label reference placeholder
LABEL_REFERENCE_BYTE = encode_control_byte(Opcode.LIT, size=SizeClass.FOUR)


class CodeGenerator:
    """
    Single-pass generator for one source stream.

    A generator owns the image buffer and the label tables of exactly one
    pass. Create a new generator for every source.

    Usage:
        gen = CodeGenerator(stream, "program.nasm")
        rom = gen.generate()
        for warning in gen.warnings:
            print(warning)

    Attributes:
        filename: Name of the source (for error locations)
        strict: If True, references to undefined labels are errors
        warnings: Non-fatal diagnostics from the last generate() call
    """

    def __init__(self, stream: BinaryIO, filename: str = "<input>", strict: bool = False):
        """
        Initialize the generator.

        Args:
            stream: Readable binary stream holding the source
            filename: Name of the source, used in error locations
            strict: Treat references to undefined labels as errors

        Raises:
            SourceReadError: If the stream cannot be read
        """
        self.filename = filename
        self.strict = strict
        self.warnings: list[str] = []

        self._scanner = Scanner(stream, filename)
        self._buffer = bytearray()
        self._labels = LabelResolver()

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self) -> bytes:
        """
        Assemble the whole stream and return the ROM image.

        Scans the source once, then patches every label reference with the
        label's address.

        Returns:
            The assembled image

        Raises:
            AssemblerError: On the first error; no partial image is returned
        """
        while not self._scanner.at_end:
            self._scan_token()

        if len(self._buffer) > ADDRESS_SPACE_SIZE:
            raise AssemblerError(
                f"image of {len(self._buffer)} bytes does not fit the "
                f"{ADDRESS_SPACE_SIZE}-byte address space"
            )

        self.warnings = self._labels.resolve(self._buffer, strict=self.strict)

        logger.debug(
            f"{self.filename}: generated {len(self._buffer)} bytes, "
            f"{len(self._labels.definitions)} labels"
        )
        return bytes(self._buffer)

    @property
    def labels(self) -> LabelResolver:
        """The label tables of this pass."""
        return self._labels

    def get_symbols(self) -> dict[str, int]:
        """Label name -> resolved address, for the image generated so far."""
        return self._labels.addresses(len(self._buffer))

    # =========================================================================
    # Token Classification
    # =========================================================================

    def _scan_token(self) -> None:
        """Run the production selected by the current character."""
        start = self._scanner.location
        char = self._scanner.current

        if char == "(":
            self._skip_comment(start)
        elif char == ";":
            self._emit_label_reference(start)
        elif char == "@":
            self._define_label(start)
        elif char == "'":
            self._emit_string(start)
        elif char == "#":
            self._emit_sized_literal(start)
        elif is_space(char):
            self._scanner.advance()
        elif is_hex(char):
            self._emit_data(start)
        elif is_symbol(char):
            self._emit_instruction(start)
        else:
            raise AssemblySyntaxError(
                f"unexpected character {char!r} ({ord(char)})",
                start,
            )

    # =========================================================================
    # Productions
    # =========================================================================

    def _skip_comment(self, start: SourceLocation) -> None:
        """Skip '(' ... ')'. Comments do not nest."""
        self._scanner.advance()  # consume (

        while not self._scanner.at_end and self._scanner.current != ")":
            self._scanner.advance()

        if self._scanner.at_end:
            raise AssemblySyntaxError("unterminated comment", start, hint="add a closing ')'")

        self._scanner.advance()  # consume )

    def _emit_label_reference(self, start: SourceLocation) -> None:
        """Emit a 4-byte LIT whose payload will receive a label's address."""
        name = self._scan_label_name("label reference", start)

        self._buffer.append(LABEL_REFERENCE_BYTE)
        self._labels.add_reference(name, len(self._buffer), start)
        self._buffer.extend(bytes(ADDRESS_SIZE))

    def _define_label(self, start: SourceLocation) -> None:
        """Bind a label to the current image offset."""
        name = self._scan_label_name("label definition", start)
        self._labels.define(name, len(self._buffer), start)

    def _emit_string(self, start: SourceLocation) -> None:
        """Emit the characters up to the next whitespace verbatim."""
        self._scanner.advance()  # consume '

        text = self._scanner.take_while(lambda c: not is_space(c))
        if not text:
            raise AssemblySyntaxError("string literals cannot be empty", start)

        self._buffer.extend(ord(c) for c in text)

    def _emit_sized_literal(self, start: SourceLocation) -> None:
        """Emit LIT with the size class matching the number of hex bytes."""
        self._scanner.advance()  # consume #

        payload = self._collect_hex(start)
        if not payload:
            raise AssemblySyntaxError("invalid number: expected hex digits after '#'", start)

        size = SizeClass.from_byte_count(len(payload))
        self._buffer.append(encode_control_byte(Opcode.LIT, size=size))
        self._buffer.extend(payload)

    def _emit_data(self, start: SourceLocation) -> None:
        """Emit a bare hex run as raw bytes."""
        self._buffer.extend(self._collect_hex(start))

    def _emit_instruction(self, start: SourceLocation) -> None:
        """
        Emit the control byte for a mnemonic with optional modifiers.

        The symbol run is the mnemonic; a trailing 'r' on the run is the
        return modifier. A size digit may follow the run.
        """
        run = self._scanner.take_while(is_symbol)

        name, ret = run, False
        if len(run) > 1 and run.endswith(RETURN_SUFFIX):
            name, ret = run[:-1], True

        size = SizeClass.DEFAULT
        sized = False
        if self._scanner.current and self._scanner.current in SIZE_DIGITS:
            size = SizeClass.from_digit(self._scanner.advance())
            sized = True

        info = get_instruction_info(name)
        if info is None:
            raise UnknownInstructionError(
                name,
                start,
                similar=difflib.get_close_matches(name, sorted(MNEMONICS)),
            )
        if ret and not info.accepts_return:
            raise ModifierError(name, "return", start)
        if sized and not info.accepts_size:
            raise ModifierError(name, "size", start)

        trailing = self._scanner.current
        if not (self._scanner.at_end or is_space(trailing) or trailing == "("):
            raise AssemblySyntaxError(
                f"unexpected character {trailing!r} after instruction '{name}'",
                start,
                hint="separate instructions with whitespace",
            )

        self._buffer.append(encode_control_byte(info.opcode, ret=ret, size=size))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _scan_label_name(self, kind: str, start: SourceLocation) -> str:
        """Consume a sigil and the symbol run after it."""
        self._scanner.advance()  # consume ; or @

        name = self._scanner.take_while(is_symbol)
        if not name:
            raise AssemblySyntaxError(f"{kind} names cannot be empty", start)
        return name

    def _collect_hex(self, start: SourceLocation) -> bytes:
        """
        Consume up to four pairs of hex digits.

        Returns:
            One byte per pair, first digit as the high nibble

        Raises:
            AssemblySyntaxError: If a pair is incomplete or more than eight
                digits appear in a row
        """
        payload = bytearray()

        while len(payload) < MAX_LITERAL_BYTES and is_hex(self._scanner.current):
            high = self._scanner.advance()
            if not is_hex(self._scanner.current):
                raise AssemblySyntaxError(
                    "invalid number: hex digits must come in pairs",
                    start,
                )
            low = self._scanner.advance()
            payload.append(int(high + low, 16))

        if is_hex(self._scanner.current):
            raise AssemblySyntaxError(
                f"invalid number: more than {MAX_LITERAL_BYTES * 2} hex digits",
                start,
            )

        return bytes(payload)

