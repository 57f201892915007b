"""
Expression Lexer (Tokenizer)
============================

This module implements the lexer for arithmetic expressions.
It converts the input string into a forward-only sequence of tokens
for the parser, in a single left-to-right pass.

Token Categories
----------------
- Reserved: operators and punctuation
    two characters: ==  !=  <=  >=
    one character:  +  -  *  /  (  )  <  >
- Numbers: a maximal run of decimal digits
- EOF: always the last token

Two-character operators are tried before single characters, so "<="
is one token and never "<" followed by an invalid "=".

Example Usage
-------------
>>> from exprcc.compiler.lexer import tokenize
>>> for token in tokenize("1 + 23"):
...     print(token)
Token(NUMBER, 1, @0)
Token(RESERVED, '+', @2)
Token(NUMBER, 23, @4)
Token(EOF, @6)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from exprcc.compiler.errors import InvalidCharacterError, IntegerRangeError


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds for the expression language.

    Operators and punctuation share one kind and are told apart by their
    text; the parser matches on the text.
    """
    RESERVED = auto()   # Operator or punctuation
    NUMBER = auto()     # Integer literal
    EOF = auto()        # End of input


# =============================================================================
# Operator Tables
# =============================================================================

# Tried first, longest match wins
TWO_CHAR_OPERATORS = ("==", "!=", "<=", ">=")

SINGLE_CHAR_OPERATORS = "+-*/()<>"

# C isspace() in the default locale
WHITESPACE = " \t\n\v\f\r"

# Largest literal a sign-extended 32-bit push immediate can carry
MAX_LITERAL = 2**31 - 1


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token of the input.

    Tokens store a plain offset into the input rather than a line and
    column; errors resolve the offset against the input when reported.

    Attributes:
        kind: The TokenKind classification
        text: The lexeme as it appears in the input
        offset: Index of the first character in the input
        value: The integer value for NUMBER tokens, otherwise None
    """
    kind: TokenKind
    text: str
    offset: int
    value: Optional[int] = None

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.kind == TokenKind.NUMBER:
            return f"Token({self.kind.name}, {self.value}, @{self.offset})"
        if self.kind == TokenKind.EOF:
            return f"Token({self.kind.name}, @{self.offset})"
        return f"Token({self.kind.name}, {self.text!r}, @{self.offset})"

    @property
    def length(self) -> int:
        """Number of input characters this token spans."""
        return len(self.text)

    def describe(self) -> str:
        """Human-readable form for error messages."""
        if self.kind == TokenKind.EOF:
            return "end of input"
        return f"'{self.text}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes an arithmetic expression.

    Usage:
        lexer = Lexer("2*(3+4)")
        tokens = list(lexer.tokenize())

    Attributes:
        source: The input being tokenized
        filename: Name of the input (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the input.

        Yields:
            Token objects in input order, ending with an EOF token

        Raises:
            LexError: If a character cannot start any token
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()

        yield Token(TokenKind.EOF, "", self._pos)

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of the input."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or an empty string past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in WHITESPACE:
            self._pos += 1

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start = self._pos

        if self.source.startswith(TWO_CHAR_OPERATORS, start):
            self._pos += 2
            return Token(TokenKind.RESERVED, self.source[start:self._pos], start)

        char = self._peek()

        if char in SINGLE_CHAR_OPERATORS:
            self._pos += 1
            return Token(TokenKind.RESERVED, char, start)

        if char in string.digits:
            return self._scan_number(start)

        raise InvalidCharacterError(char, start, self.source, self.filename)

    def _scan_number(self, start: int) -> Token:
        """Scan a maximal run of decimal digits."""
        while not self._at_end() and self._peek() in string.digits:
            self._pos += 1

        text = self.source[start:self._pos]
        value = int(text)
        if value > MAX_LITERAL:
            raise IntegerRangeError(
                text, MAX_LITERAL, start, self.source, self.filename
            )

        return Token(TokenKind.NUMBER, text, start, value)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize an expression into a list ending with an EOF token.

    Raises:
        LexError: If the input contains an invalid character or literal
    """
    return list(Lexer(source, filename).tokenize())
