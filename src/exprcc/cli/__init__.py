"""
exprcc Command-Line Interface
=============================

This package provides the command-line tools:

- **excc**: expression compiler
- **exrun**: reference emulator for the generated assembly

Each tool is a Click command sharing the exit codes and error handling
in exprcc.cli.errors.
"""

__all__ = ["excc", "exrun"]
