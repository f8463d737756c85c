"""
neoasm - NeoVM Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the NeoVM assembler.

Usage Examples
--------------
Basic assembly (writes out.rom):
    $ neoasm hello.nasm

With output file (the .rom extension is added when missing):
    $ neoasm hello.nasm -o hello

With a symbol file:
    $ neoasm hello.nasm -o hello.rom -s hello.sym

Treat references to undefined labels as errors:
    $ neoasm --strict hello.nasm

Verbose mode:
    $ neoasm -v hello.nasm

Version:
    $ neoasm -V
"""

from pathlib import Path
from typing import Optional

import click

from neoasm import __version__
from neoasm.assembler import Assembler
from neoasm.cli.errors import configure_logging, handle_cli_exception


ROM_EXTENSION = ".rom"
DEFAULT_OUTPUT = "out"


def resolve_output_path(output: Path) -> Path:
    """
    Append the ROM extension unless the name already ends with it.

    Other extensions are kept: 'game.bin' becomes 'game.bin.rom'.
    """
    if output.suffix == ROM_EXTENSION:
        return output
    return output.with_name(output.name + ROM_EXTENSION)


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
    default=DEFAULT_OUTPUT,
    show_default=True,
    help="Output ROM file (.rom is appended if missing)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on references to labels that are never defined",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(
    __version__, "--version", "-V", prog_name="neoasm", message="Neoasm %(version)s"
)
def main(
    input_file: Path,
    output: Path,
    symbols: Optional[Path],
    strict: bool,
    verbose: bool,
) -> None:
    """
    Assemble NeoVM source code into a ROM image.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        neoasm hello.nasm              # Outputs out.rom
        neoasm hello.nasm -o hello     # Outputs hello.rom
        neoasm hello.nasm -s hello.sym # Also writes the symbol table
    """
    configure_logging(verbose)

    output_file = resolve_output_path(output)
    asm = Assembler(strict=strict)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        code = asm.assemble_file(input_file)

        asm.write_rom(output_file)

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        click.echo(f"Assembled as '{output_file}' in {len(code)} bytes")

        if verbose:
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
