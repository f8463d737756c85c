"""
NeoVM Disassembler
==================

Disassembles a NeoVM ROM image back into assembly text. This is the inverse
of the assembler's instruction encoding.

A ROM carries no markers between code and data, so every byte is decoded as
a control byte. A LIT control byte takes its payload (1-4 bytes, from the
size class) with it. Bytes that cannot be written as an instruction are
shown as raw data: an ordinal that names no opcode, a modifier the opcode
does not accept (such as BRPr or JMP2), or a LIT payload that runs past the
end of the image.

The output uses assembler syntax, so a listing reassembles to the same image:

    $7FFFF7: 00 2a           #2a
    $7FFFF9: 02              DEO
    $7FFFFA: 60 00 80 00 00  #00800000      ( end )
    $7FFFFF: 0e              JMP

Addresses
---------
By default the first byte is given the address the assembler resolves labels
against: ADDRESS_SPACE_SIZE - len(rom), so the last byte of the image sits at
the top of the address space.

Usage:
    disasm = NeoDisassembler()
    for instr in disasm.disassemble(rom):
        print(instr)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from neoasm.cpu import (
    Opcode,
    SizeClass,
    decode_control_byte,
    format_mnemonic,
    get_instruction_info,
    resolved_address,
)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single decoded instruction or data byte.

    Attributes:
        address: Address of the first byte
        raw_bytes: All bytes of the instruction, payload included
        text: Assembler syntax for the bytes (e.g. "ADDr2", "#2a")
        opcode: The decoded opcode, or None for raw data
        ret: Return modifier flag
        size: Size class of the control byte
        comment: Optional annotation (symbol names)
    """
    address: int
    raw_bytes: bytes
    text: str
    opcode: Optional[Opcode] = None
    ret: bool = False
    size: SizeClass = SizeClass.DEFAULT
    comment: str = ""

    @property
    def is_data(self) -> bool:
        return self.opcode is None

    @property
    def payload(self) -> bytes:
        """Literal bytes following the control byte."""
        return b"" if self.is_data else self.raw_bytes[1:]

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: BYTES  TEXT"""
        hex_bytes = " ".join(f"{b:02x}" for b in self.raw_bytes)
        # 5 bytes at most: LIT4 plus its payload
        hex_bytes = hex_bytes.ljust(14)

        if self.comment:
            return f"${self.address:06X}: {hex_bytes}  {self.text:<14} ( {self.comment} )"
        return f"${self.address:06X}: {hex_bytes}  {self.text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:06X}",
            "address_int": self.address,
            "text": self.text,
            "opcode": self.opcode.name if self.opcode is not None else None,
            "ret": self.ret,
            "size": self.size.byte_count,
            "bytes": [f"{b:02x}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# NeoVM Disassembler
# =============================================================================

class NeoDisassembler:
    """
    Disassembler for NeoVM ROM images.

    Attributes:
        _symbol_table: Maps addresses to label names, used for annotation
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to label names
        """
        self._symbol_table = dict(symbol_table or {})

    def add_symbol(self, address: int, name: str) -> None:
        self._symbol_table[address] = name

    def add_symbols(self, symbols: Dict[str, int]) -> None:
        """Add labels from a name -> address mapping (as the assembler produces)."""
        for name, address in symbols.items():
            self._symbol_table[address] = name

    def disassemble_one(self, data: bytes, offset: int, address: int) -> DisassembledInstruction:
        """
        Decode the instruction starting at data[offset].

        Args:
            data: The ROM image
            offset: Offset of the control byte within data
            address: Address of that byte

        Returns:
            The decoded instruction, or a one-byte data entry
        """
        byte = data[offset]

        try:
            opcode, ret, size = decode_control_byte(byte)
        except ValueError:
            return self._data_byte(byte, address, "no such opcode")

        # The assembler rejects these spellings, so keep them as data
        info = get_instruction_info(opcode.name)
        if (ret and not info.accepts_return) or (size != SizeClass.DEFAULT and not info.accepts_size):
            return self._data_byte(byte, address, "modifier not accepted")

        if opcode != Opcode.LIT:
            return DisassembledInstruction(
                address=address,
                raw_bytes=bytes([byte]),
                text=format_mnemonic(opcode, ret, size),
                opcode=opcode,
                ret=ret,
                size=size,
                comment=self._label_at(address),
            )

        end = offset + 1 + size.byte_count
        if end > len(data):
            return self._data_byte(byte, address, "truncated literal")

        payload = data[offset + 1:end]
        if ret:
            # No '#' form for the return stack: spell out LITr and the payload
            text = f"{format_mnemonic(opcode, ret, size)} {payload.hex()}"
        else:
            text = f"#{payload.hex()}"

        comment = self._label_at(address)
        if size == SizeClass.FOUR:
            target = self._symbol_table.get(int.from_bytes(payload, "big"))
            if target:
                comment = f"{comment} -> {target}" if comment else target

        return DisassembledInstruction(
            address=address,
            raw_bytes=data[offset:end],
            text=text,
            opcode=opcode,
            ret=ret,
            size=size,
            comment=comment,
        )

    def disassemble(
        self,
        data: bytes,
        start_address: Optional[int] = None,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a whole image.

        Args:
            data: The ROM image
            start_address: Address of the first byte. Defaults to where the
                assembler places the image (top of the address space).
            count: Maximum number of entries to decode (None = all)

        Returns:
            List of DisassembledInstruction objects
        """
        data = bytes(data)
        if start_address is None:
            start_address = resolved_address(0, len(data))

        result = []
        offset = 0

        while offset < len(data):
            if count is not None and len(result) >= count:
                break

            instr = self.disassemble_one(data, offset, start_address + offset)
            result.append(instr)
            offset += len(instr.raw_bytes)

        return result

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: Optional[int] = None,
        count: Optional[int] = None,
        show_bytes: bool = True,
    ) -> str:
        """
        Disassemble and return a listing.

        With show_bytes False, only the assembler text is kept, which is
        valid source for the same image (labels aside).
        """
        instructions = self.disassemble(data, start_address, count)
        if show_bytes:
            return "\n".join(str(instr) for instr in instructions)
        return "\n".join(instr.text for instr in instructions)

    def _label_at(self, address: int) -> str:
        name = self._symbol_table.get(address)
        return f"@{name}" if name else ""

    def _data_byte(self, byte: int, address: int, reason: str) -> DisassembledInstruction:
        label = self._label_at(address)
        return DisassembledInstruction(
            address=address,
            raw_bytes=bytes([byte]),
            text=f"{byte:02x}",
            comment=f"{label} {reason}" if label else reason,
        )


def parse_symbol_file(text: str) -> Dict[str, int]:
    """
    Read a symbol file written by the assembler.

    Lines are 'name $ADDRESS'; blank lines and '#' comments are skipped.

    Raises:
        ValueError: On a malformed line
    """
    symbols = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        if len(parts) != 2 or not parts[1].startswith("$"):
            raise ValueError(f"line {lineno}: expected 'name $ADDRESS', got {line!r}")

        symbols[parts[0]] = int(parts[1][1:], 16)
    return symbols
