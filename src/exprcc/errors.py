"""
exprcc Error Hierarchy
======================

This module defines the base of the exception hierarchy for exprcc.
All exceptions inherit from ExprccError, allowing callers to catch all
toolchain errors with a single except clause if desired.

Exception Hierarchy
-------------------
ExprccError (base)
├── CompileError (exprcc.compiler.errors)
│   ├── LexError - the input cannot be tokenized
│   └── ParseError - the tokens do not form an expression
└── EmulatorError (exprcc.emulator) - the emitted program faulted

Source Positions
----------------
Tokens and errors carry a plain integer offset into the input string.
The offset is turned into a SourceLocation (line and column) only when
an error message is formatted, using the original input stored on the
error itself.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class ExprccError(Exception):
    """
    Base exception for all exprcc errors.

    All exceptions in the toolchain inherit from this class, allowing
    callers to catch every compiler or emulator error at once:

        try:
            compile_expression("1+")
        except ExprccError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the input for error reporting.

    Attributes:
        filename: Name of the input (or "<input>" for command-line input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"

    @classmethod
    def from_offset(
        cls,
        source: str,
        offset: int,
        filename: str = "<input>",
    ) -> "SourceLocation":
        """
        Resolve a character offset against the input it points into.

        Offsets past the end of the input (the EOF token) resolve to the
        column just after the last character.
        """
        offset = max(0, min(offset, len(source)))
        line = source.count("\n", 0, offset) + 1
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(filename, line, offset - line_start + 1)


def source_line_at(source: str, offset: int) -> str:
    """Return the text of the input line containing offset."""
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    return source[line_start:line_end]
