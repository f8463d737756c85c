"""
Neoasm Command-Line Interface
=============================

This package provides the command-line tools:

- **neoasm**: NeoVM assembler
- **neodisasm**: NeoVM ROM disassembler

Each tool is implemented as a Click-based CLI application.
"""

__all__ = ["neoasm", "neodisasm"]
