# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the Assembler facade: source text or files in,
# ROM images and symbol tables out.
#
# Test coverage includes:
#   - Complete program assembly
#   - File, string, bytes and stream input
#   - ROM and symbol file output
#   - State after failed passes
# =============================================================================

import io

import pytest

from neoasm import ADDRESS_SPACE_SIZE
from neoasm.assembler import Assembler, assemble, assemble_file
from neoasm.disassembler import parse_symbol_file
from neoasm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    NeoasmError,
    SourceReadError,
    UndefinedSymbolError,
)


HELLO_SOURCE = """\
( print a character )
    #2a #00 DEO
    ;end JMP
@end
    HLT
"""


class FailingStream:
    """Binary stream that fails after a few bytes."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)

    def read(self, n: int = -1) -> bytes:
        chunk = self._data.read(n)
        if not chunk:
            raise OSError("connection reset")
        return chunk


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline from source to ROM image."""

    def test_minimal_program(self):
        asm = Assembler()
        assert asm.assemble("HLT") == bytes([0x03])

    def test_hello_program(self):
        asm = Assembler()
        code = asm.assemble(HELLO_SOURCE)
        assert code.hex() == "002a0000026000" "7fffff" "0e03"
        assert asm.get_symbols() == {"end": 8388607}

    def test_empty_program(self):
        asm = Assembler()
        assert asm.assemble("( nothing here )") == b""
        assert asm.get_code() == b""

    def test_bytes_input(self):
        assert Assembler().assemble(b"#2a #00 DEO") == bytes([0x00, 0x2A, 0x00, 0x00, 0x02])

    def test_string_is_utf8_encoded(self):
        assert Assembler().assemble_string("'é") == "é".encode("utf-8")

    def test_stream_input(self):
        assert Assembler().assemble_stream(io.BytesIO(b"ADD SUB")) == bytes([0x15, 0x16])

    def test_module_function(self):
        assert assemble("#2a #00 DEO").hex() == "002a000002"

    def test_module_function_strict(self):
        with pytest.raises(UndefinedSymbolError):
            assemble(";nowhere", strict=True)

    def test_label_addresses_track_image_length(self):
        """Appending bytes after a label moves its address down."""
        short = Assembler()
        short.assemble("@here ;here")
        longer = Assembler()
        longer.assemble("@here ;here 'padding")
        assert short.get_symbols()["here"] - longer.get_symbols()["here"] == 7

    def test_image_placed_at_top_of_memory(self):
        asm = Assembler()
        code = asm.assemble("@first 'abcdef @last")
        symbols = asm.get_symbols()
        assert symbols["first"] == ADDRESS_SPACE_SIZE - len(code)
        assert symbols["last"] == ADDRESS_SPACE_SIZE


# =============================================================================
# File Handling Tests
# =============================================================================

class TestFiles:
    """Test file input and output."""

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "hello.nasm"
        source.write_text(HELLO_SOURCE)
        asm = Assembler()
        code = asm.assemble_file(source)
        assert len(code) == 12

    def test_assemble_file_function(self, tmp_path):
        source = tmp_path / "prog.nasm"
        source.write_text("ADD")
        assert assemble_file(str(source)) == bytes([0x15])

    def test_errors_name_the_file(self, tmp_path):
        source = tmp_path / "bad.nasm"
        source.write_text("ADD\nPUHS\n")
        with pytest.raises(AssemblerError) as exc_info:
            Assembler().assemble_file(source)
        assert str(exc_info.value).startswith(f"{source}:2:1: error: unknown instruction 'PUHS'")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.nasm")

    def test_write_rom(self, tmp_path):
        asm = Assembler()
        code = asm.assemble(HELLO_SOURCE)
        rom = tmp_path / "hello.rom"
        asm.write_rom(rom)
        assert rom.read_bytes() == code

    def test_write_symbols(self, tmp_path):
        asm = Assembler()
        asm.assemble("@zeta ;alpha @alpha ;zeta", filename="prog.nasm")
        path = tmp_path / "prog.sym"
        asm.write_symbols(path)

        lines = path.read_text().splitlines()
        assert lines[:3] == ["# Symbol table", "# Generated by neoasm", "# Source: prog.nasm"]
        assert lines[3:] == ["alpha $7FFFFB", "zeta $7FFFF6"]

    def test_symbol_file_round_trip(self, tmp_path):
        asm = Assembler()
        asm.assemble(HELLO_SOURCE)
        path = tmp_path / "hello.sym"
        asm.write_symbols(path)
        assert parse_symbol_file(path.read_text()) == asm.get_symbols()


# =============================================================================
# Error State Tests
# =============================================================================

class TestErrorState:
    """Test that failed passes leave nothing behind."""

    def test_no_code_before_assembly(self):
        with pytest.raises(AssemblerError, match="no code has been assembled"):
            Assembler().get_code()

    def test_failed_pass_clears_previous_result(self):
        asm = Assembler()
        asm.assemble("@x ADD")
        assert asm.warnings

        with pytest.raises(AssemblySyntaxError):
            asm.assemble("ADD %")

        assert asm.warnings == []
        assert asm.get_symbols() == {}
        with pytest.raises(AssemblerError):
            asm.get_code()

    def test_no_rom_written_after_failure(self, tmp_path):
        asm = Assembler()
        with pytest.raises(NeoasmError):
            asm.assemble("#123")
        with pytest.raises(AssemblerError):
            asm.write_rom(tmp_path / "out.rom")
        assert not (tmp_path / "out.rom").exists()

    def test_passes_are_independent(self):
        """Labels from one pass are not visible in the next."""
        asm = Assembler(strict=True)
        asm.assemble("@shared ;shared")
        with pytest.raises(UndefinedSymbolError):
            asm.assemble(";shared")

    def test_read_failure(self):
        with pytest.raises(SourceReadError, match="connection reset"):
            Assembler().assemble_stream(FailingStream(b"ADD SUB"))


class TestWarnings:
    """Test warnings collected by the facade."""

    def test_unused_label(self):
        asm = Assembler()
        asm.assemble("@spare HLT", filename="w.nasm")
        assert asm.warnings == ["w.nasm:1:1: warning: label 'spare' is unused"]

    def test_clean_program(self):
        asm = Assembler()
        asm.assemble(HELLO_SOURCE)
        assert asm.warnings == []
