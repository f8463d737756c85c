"""
CLI Error Reporting
===================

Exit codes and the shared failure path of the neoasm and neodisasm commands.
Both commands funnel exceptions through report_and_exit() so an assembly
error, a bad argument and a crash always end the process the same way.
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from neoasm.errors import NeoasmError


class ExitCode(IntEnum):
    """Process exit status of the command-line tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Source rejected by the assembler
    INVALID_ARGS = 2     # Bad option value, unreadable or missing file
    INTERNAL_ERROR = 3   # Bug


# OS errors that mean the user pointed us at the wrong path
_PATH_ERRORS = (FileNotFoundError, PermissionError, IsADirectoryError)


def exit_code_for(error: Exception) -> ExitCode:
    """Classify an exception raised while running a command."""
    if isinstance(error, NeoasmError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, *_PATH_ERRORS)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None,
) -> NoReturn:
    """
    Print error to stderr and exit with its ExitCode.

    Assembler errors are printed unchanged since they already start with
    their source location. Path problems get an "<error_type> error:"
    prefix. Anything else is reported as an internal error, with the
    traceback when verbose is set.

    Args:
        error: The exception that stopped the command
        verbose: Show tracebacks for internal errors
        error_type: Word naming the failed step (e.g., "Assembly")
    """
    code = exit_code_for(error)

    if code == ExitCode.BUILD_ERROR:
        message = str(error)
    elif code == ExitCode.INVALID_ARGS:
        prefix = f"{error_type} error" if error_type else "Error"
        message = f"{prefix}: {error}"
    else:
        message = f"Internal error: {error}"

    click.echo(message, err=True)
    if code == ExitCode.INTERNAL_ERROR and verbose:
        traceback.print_exc()

    sys.exit(code)


def configure_logging(verbose: bool) -> None:
    """
    Send library log records to stderr.

    Warnings are printed as-is; with verbose, debug records are shown too,
    tagged with the logger name.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")
