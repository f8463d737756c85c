# =============================================================================
# test_disassembler.py - NeoVM Disassembler Tests
# =============================================================================
# Tests for decoding ROM images back into assembler syntax.
#
# Test coverage includes:
#   - Instruction and literal decoding
#   - Invalid and truncated bytes
#   - Address assignment and symbol annotation
#   - Reassembling disassembler output
#   - Symbol file parsing
# =============================================================================

import pytest

from neoasm.assembler import Assembler, assemble
from neoasm.cpu import ADDRESS_SPACE_SIZE, Opcode, SizeClass
from neoasm.disassembler import NeoDisassembler, parse_symbol_file


PROGRAM = "#2a DEO ;end JMP @end"


def disassemble(data, **kwargs):
    return NeoDisassembler().disassemble(bytes(data), **kwargs)


# =============================================================================
# Basic Decoding Tests
# =============================================================================

class TestDecoding:
    """Test decoding of individual entries."""

    def test_program(self):
        instrs = disassemble(assemble(PROGRAM))
        assert [i.text for i in instrs] == ["#2a", "DEO", "#00800000", "JMP"]

    def test_default_addresses(self):
        """The image ends at the top of the address space."""
        instrs = disassemble(assemble(PROGRAM))
        assert [i.address for i in instrs] == [0x7FFFF7, 0x7FFFF9, 0x7FFFFA, 0x7FFFFF]

    def test_instruction_fields(self):
        instr = disassemble([0xB5])[0]
        assert instr.opcode == Opcode.ADD
        assert instr.ret
        assert instr.size == SizeClass.TWO
        assert instr.text == "ADDr2"
        assert not instr.is_data

    def test_literal_payload(self):
        instr = disassemble([0x40, 0x12, 0x34, 0x56])[0]
        assert instr.text == "#123456"
        assert instr.payload == bytes([0x12, 0x34, 0x56])
        assert instr.raw_bytes == bytes([0x40, 0x12, 0x34, 0x56])

    def test_return_stack_literal(self):
        assert disassemble([0x80, 0x2A])[0].text == "LITr 2a"
        assert disassemble([0xA0, 0x12, 0x34])[0].text == "LITr2 1234"

    @pytest.mark.parametrize("byte", [0x1D, 0x1E, 0x1F])
    def test_invalid_ordinal(self, byte):
        instr = disassemble([byte])[0]
        assert instr.is_data
        assert instr.text == f"{byte:02x}"
        assert instr.comment == "no such opcode"
        assert instr.payload == b""

    def test_truncated_literal(self):
        instrs = disassemble([0x60, 0x00])
        assert [i.text for i in instrs] == ["60", "00"]
        assert all(i.comment == "truncated literal" for i in instrs)

    def test_count(self):
        assert len(disassemble(assemble(PROGRAM), count=2)) == 2

    def test_explicit_start_address(self):
        instrs = disassemble(assemble(PROGRAM), start_address=0)
        assert [i.address for i in instrs] == [0, 2, 3, 8]

    def test_empty(self):
        assert disassemble(b"") == []


# =============================================================================
# Symbol Annotation Tests
# =============================================================================

class TestSymbols:
    """Test label annotations."""

    def test_literal_target(self):
        asm = Assembler()
        rom = asm.assemble(PROGRAM)
        disasm = NeoDisassembler()
        disasm.add_symbols(asm.get_symbols())
        instrs = disasm.disassemble(rom)
        assert instrs[2].comment == "end"

    def test_label_at_address(self):
        disasm = NeoDisassembler({ADDRESS_SPACE_SIZE - 1: "loop"})
        instr = disasm.disassemble(bytes([0x15]))[0]
        assert instr.comment == "@loop"

    def test_label_on_data_byte(self):
        disasm = NeoDisassembler()
        disasm.add_symbol(ADDRESS_SPACE_SIZE - 1, "junk")
        assert disasm.disassemble(bytes([0x1F]))[0].comment == "@junk no such opcode"

    def test_label_and_target(self):
        rom = assemble("@self ;self")
        disasm = NeoDisassembler({ADDRESS_SPACE_SIZE - 5: "self"})
        assert disasm.disassemble(rom)[0].comment == "@self -> self"


# =============================================================================
# Output Formatting Tests
# =============================================================================

class TestFormatting:
    """Test listing lines and text output."""

    def test_listing_line(self):
        line = str(disassemble(assemble(PROGRAM))[0])
        assert line.startswith("$7FFFF7: 00 2a ")
        assert line.endswith("  #2a")

    def test_listing_line_with_comment(self):
        disasm = NeoDisassembler({0x800000: "end"})
        line = str(disasm.disassemble(assemble(PROGRAM))[2])
        assert line.startswith("$7FFFFA: 60 00 80 00 00  #00800000")
        assert line.endswith("( end )")

    def test_to_dict(self):
        data = disassemble([0x35])[0].to_dict()
        assert data["address"] == "$7FFFFF"
        assert data["text"] == "ADD2"
        assert data["opcode"] == "ADD"
        assert data["size"] == 2
        assert data["bytes"] == ["35"]

    def test_to_dict_data_byte(self):
        assert disassemble([0x1D])[0].to_dict()["opcode"] is None

    def test_source_output_round_trip(self):
        rom = assemble("#2a DEO ADDr2 LITr 2a #12345678 1d BRP JMPr")
        text = NeoDisassembler().disassemble_to_text(rom, show_bytes=False)
        assert assemble(text) == rom


# =============================================================================
# Symbol File Tests
# =============================================================================

class TestParseSymbolFile:
    """Test reading assembler symbol files."""

    def test_parse(self):
        text = "# Symbol table\n\nalpha $7FFFFB\nzeta $7FFFF6\n"
        assert parse_symbol_file(text) == {"alpha": 0x7FFFFB, "zeta": 0x7FFFF6}

    def test_empty(self):
        assert parse_symbol_file("# nothing\n") == {}

    @pytest.mark.parametrize("line", ["alpha", "alpha 7FFFFB", "alpha $7FFFFB extra"])
    def test_malformed(self, line):
        with pytest.raises(ValueError, match="line 1"):
            parse_symbol_file(line)

    def test_bad_hex(self):
        with pytest.raises(ValueError):
            parse_symbol_file("alpha $xyz")


# =============================================================================
# Reassembly Tests
# =============================================================================

class TestReassembly:
    """Test that source output assembles back to the same image."""

    @staticmethod
    def reassemble(rom: bytes) -> bytes:
        return assemble(NeoDisassembler().disassemble_to_text(rom, show_bytes=False))

    @pytest.mark.parametrize("byte, spelling", [
        (0x84, "BRPr"),
        (0x24, "BRP2"),
        (0x2A, "GPC2"),
        (0x2E, "JMP2"),
        (0xEE, "JMPr4"),
    ])
    def test_rejected_modifiers_are_data(self, byte, spelling):
        """Modifiers the assembler refuses are not printed as instructions."""
        instr = disassemble([byte])[0]
        assert instr.is_data
        assert instr.text == f"{byte:02x}"
        assert instr.text != spelling
        assert instr.comment == "modifier not accepted"

    def test_accepted_modifiers_stay_instructions(self):
        assert disassemble([0x8E])[0].text == "JMPr"
        assert disassemble([0x8A])[0].text == "GPCr"

    @pytest.mark.parametrize("source", ["'.", "84", "2a", "4a", "'hello.world"])
    def test_source_round_trip(self, source):
        rom = assemble(source)
        assert self.reassemble(rom) == rom

    def test_every_byte_value(self):
        rom = bytes(range(256))
        assert self.reassemble(rom) == rom

    def test_every_byte_value_reversed(self):
        rom = bytes(reversed(range(256)))
        assert self.reassemble(rom) == rom
