"""
Expression Compiler Error Hierarchy
===================================

This module defines the exceptions raised while compiling an expression.
All of them inherit from CompileError, which itself inherits from the
base ExprccError for consistent error handling across the toolchain.

Exception Hierarchy
-------------------
CompileError (base for all compiler errors)
├── LexError - the lexer found something it cannot tokenize
│   ├── InvalidCharacterError - unexpected character
│   └── IntegerRangeError - literal does not fit the integer type
└── ParseError - the parser found tokens it cannot accept
    ├── MissingTokenError - a required token such as ')' is absent
    ├── ExpectedNumberError - an operand is missing
    ├── UnexpectedTokenError - tokens left over after the expression
    └── NestingDepthError - parentheses nested too deeply

Every error is fatal: the first one raised aborts the compilation.

Error Message Format
--------------------
    <input>:1:3: error: invalid character '@' (0x40)
        1+@
          ^
"""

from typing import Optional

from exprcc.errors import ExprccError, SourceLocation, source_line_at


# =============================================================================
# Base Compiler Exception
# =============================================================================

class CompileError(ExprccError):
    """
    Base exception for all compiler errors.

    The error stores the raw offset together with the input it refers to,
    and resolves both into a line, column and caret only when formatting.

    Attributes:
        message: The error description
        offset: Character offset into the input (None if not locatable)
        source: The input being compiled
        filename: Name of the input for the location prefix
        hint: A suggestion for fixing the error
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
        hint: Optional[str] = None,
    ):
        self.message = message
        self.offset = offset
        self.source = source
        self.filename = filename
        self.hint = hint
        super().__init__(self._format_message())

    @property
    def location(self) -> Optional[SourceLocation]:
        """Line and column of the error, if it can be located."""
        if self.offset is None or self.source is None:
            return None
        return SourceLocation.from_offset(self.source, self.offset, self.filename)

    @property
    def source_line(self) -> Optional[str]:
        """The input line the error points into."""
        if self.offset is None or self.source is None:
            return None
        return source_line_at(self.source, self.offset)

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            <input>:1:3: error: expected a number
                1+
                  ^
        """
        parts = []
        location = self.location

        # Location prefix
        if location:
            parts.append(f"{location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if location is not None:
            parts.append(f"    {self.source_line}")
            # Tabs before the column are kept so the caret lines up
            prefix = self.source_line[:location.column - 1]
            padding = "    " + "".join(c if c == "\t" else " " for c in prefix)
            parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexer Errors
# =============================================================================

class LexError(CompileError):
    """
    The input could not be tokenized.

    Raised by the lexer for characters outside the expression alphabet
    and for integer literals that do not fit the target integer type.
    """
    pass


class InvalidCharacterError(LexError):
    """
    Invalid character in the input.

    Raised when the lexer encounters a character that is neither
    whitespace, a digit, nor one of the operator characters.
    """

    def __init__(
        self,
        char: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            offset=offset,
            source=source,
            filename=filename,
        )


class IntegerRangeError(LexError):
    """
    Integer literal out of range.

    Literals are pushed as 32-bit sign-extended immediates, so anything
    above 2147483647 cannot be encoded.
    """

    def __init__(
        self,
        text: str,
        limit: int,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.text = text
        self.limit = limit
        super().__init__(
            f"integer literal '{text}' is too large",
            offset=offset,
            source=source,
            filename=filename,
            hint=f"literals must not exceed {limit}",
        )


# =============================================================================
# Parser Errors
# =============================================================================

class ParseError(CompileError):
    """
    The token sequence is not a valid expression.

    Raised by the parser at the offset of the token it could not accept.
    """
    pass


class MissingTokenError(ParseError):
    """
    Required token is missing.

    Raised when a required token (like ')') is not found where expected.
    """

    def __init__(
        self,
        expected: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.expected = expected
        super().__init__(
            f"expected '{expected}'",
            offset=offset,
            source=source,
            filename=filename,
        )


class ExpectedNumberError(ParseError):
    """
    An operand is missing.

    Raised when the parser needs an integer literal (or a parenthesized
    expression) and finds an operator or the end of the input instead.
    """

    def __init__(
        self,
        found: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.found = found
        super().__init__(
            "expected a number",
            offset=offset,
            source=source,
            filename=filename,
            hint=f"found {found}",
        )


class UnexpectedTokenError(ParseError):
    """
    Tokens left over after a complete expression.

    Example:
        1 2      // the '2' cannot follow a finished expression
        (1+2))   // unbalanced ')'
    """

    def __init__(
        self,
        found: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.found = found
        super().__init__(
            f"unexpected token '{found}'",
            offset=offset,
            source=source,
            filename=filename,
            hint="expected end of input",
        )


class NestingDepthError(ParseError):
    """
    Parentheses nested too deeply.

    Raised at the '(' that opens one level more than the parser accepts.
    """

    def __init__(
        self,
        limit: int,
        offset: Optional[int] = None,
        source: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.limit = limit
        super().__init__(
            "expression nested too deeply",
            offset=offset,
            source=source,
            filename=filename,
            hint=f"at most {limit} levels of parentheses are allowed",
        )
