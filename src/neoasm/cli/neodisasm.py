"""
neodisasm - NeoVM Disassembler Command-Line Interface
=====================================================

Usage Examples
--------------
Disassemble a ROM (addresses as the assembler resolves them):
    $ neodisasm hello.rom

With an explicit base address:
    $ neodisasm hello.rom --address 0x0

Annotate with the labels from an assembler symbol file:
    $ neodisasm hello.rom -s hello.sym

Source only, reassemblable:
    $ neodisasm hello.rom --no-bytes -o hello.nasm

Machine-readable listing:
    $ neodisasm hello.rom --json
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from neoasm import __version__
from neoasm.cli.errors import ExitCode, configure_logging, handle_cli_exception
from neoasm.cpu import ADDRESS_SPACE_SIZE, resolved_address
from neoasm.disassembler import DisassembledInstruction, NeoDisassembler, parse_symbol_file


def parse_address(address: str) -> int:
    """Parse a base address written as 0x hex, $ hex or decimal."""
    text = address.strip()
    if text[:2].lower() == "0x":
        return int(text[2:], 16)
    if text.startswith("$"):
        return int(text[1:], 16)
    return int(text, 10)


def base_address_for(data: bytes, address: Optional[str]) -> int:
    """
    Pick the address of the first ROM byte.

    Without an explicit address the ROM sits where the assembler resolved
    its labels: last byte at the top of the address space.

    Raises:
        click.BadParameter: If address does not parse, or the ROM does not
            fit at it
    """
    if address is None:
        return resolved_address(0, len(data))

    try:
        base = parse_address(address)
    except ValueError:
        raise click.BadParameter(f"Invalid address '{address}'") from None

    if not 0 <= base <= ADDRESS_SPACE_SIZE - len(data):
        raise click.BadParameter(
            f"a {len(data)}-byte ROM at ${base:06X} does not fit the address space"
        )
    return base


def load_symbols(path: Path) -> dict[str, int]:
    try:
        return parse_symbol_file(path.read_text())
    except ValueError as e:
        raise click.BadParameter(f"{path}: {e}") from None


def render_listing(
    name: str,
    size: int,
    base_address: int,
    instructions: list[DisassembledInstruction],
    no_bytes: bool,
) -> str:
    # The header is a ( ) comment so --no-bytes output stays valid source
    lines = [
        f"( Disassembly of {name} )",
        f"( Size: {size} bytes, base address: ${base_address:06X} )",
        "",
    ]
    lines.extend(instr.text if no_bytes else str(instr) for instr in instructions)
    return "\n".join(lines) + "\n"


def render_json(
    name: str,
    size: int,
    base_address: int,
    instructions: list[DisassembledInstruction],
) -> str:
    """Listing as a JSON document, one object per entry."""
    document = {
        "file": name,
        "size": size,
        "base_address": base_address,
        "instructions": [instr.to_dict() for instr in instructions],
    }
    return json.dumps(document, indent=2) + "\n"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default=None,
    help="Base address (hex with 0x or $ prefix, or decimal). "
         "Default: top of the address space minus the ROM size",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Symbol file written by neoasm -s, for label annotations",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit addresses and raw bytes (output is assembler source)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Emit the listing as JSON (overrides --no-bytes)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(__version__, "--version", "-V", prog_name="neodisasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: Optional[str],
    count: Optional[int],
    symbols: Optional[Path],
    no_bytes: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a NeoVM ROM image.

    INPUT_FILE is the ROM to disassemble.
    """
    configure_logging(verbose)

    try:
        data = input_file.read_bytes()
        if not data:
            click.echo(f"Error: {input_file} is empty", err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        base_address = base_address_for(data, address)

        disasm = NeoDisassembler()
        if symbols:
            disasm.add_symbols(load_symbols(symbols))

        if verbose:
            click.echo(
                f"Disassembling {input_file} ({len(data)} bytes) at ${base_address:06X}",
                err=True,
            )

        instructions = disasm.disassemble(data, start_address=base_address, count=count)
        if as_json:
            listing = render_json(input_file.name, len(data), base_address, instructions)
        else:
            listing = render_listing(
                input_file.name, len(data), base_address, instructions, no_bytes
            )

        if output:
            output.write_text(listing, encoding="utf-8")
            if verbose:
                click.echo(f"Wrote {len(instructions)} entries to {output}", err=True)
        else:
            click.echo(listing, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
