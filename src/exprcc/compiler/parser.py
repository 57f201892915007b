"""
Expression Recursive Descent Parser
===================================

This module implements a recursive descent parser for arithmetic
expressions. It takes the token list from the lexer and builds an
Abstract Syntax Tree (AST).

Grammar (EBNF)
--------------
expression     ::= equality
equality       ::= relational ( ('==' | '!=') relational )*
relational     ::= additive ( ('<' | '<=' | '>' | '>=') additive )*
additive       ::= multiplicative ( ('+' | '-') multiplicative )*
multiplicative ::= unary ( ('*' | '/') unary )*
unary          ::= ('+' | '-')? primary
primary        ::= '(' expression ')' | NUMBER

Expression Precedence (lowest to highest)
-----------------------------------------
1. equality        == !=
2. relational      < <= > >=
3. additive        + -
4. multiplicative  * /
5. unary           + -
6. primary         NUMBER, '(' expression ')'

All binary levels are left-associative.
Parentheses may nest at most MAX_NESTING_DEPTH (256) levels deep.

Rewrites
--------
- a > b   parses as  b < a
- a >= b  parses as  b <= a
- -x      parses as  0 - x
- +x      parses as  x

Example Usage
-------------
>>> from exprcc.compiler.parser import parse_expression
>>> ast = parse_expression("5 > 3")
>>> print(ast.kind, ast.left.value, ast.right.value)
NodeKind.LESS 3 5
"""

import sys
from typing import Callable

from exprcc.compiler.lexer import Token, TokenKind, tokenize
from exprcc.compiler.ast import (
    Expression,
    BinaryExpression,
    NumberLiteral,
    NodeKind,
)
from exprcc.compiler.errors import (
    MissingTokenError,
    ExpectedNumberError,
    UnexpectedTokenError,
    NestingDepthError,
)

# Deepest parenthesis nesting accepted
MAX_NESTING_DEPTH = 256

# Python frames one nesting level costs, from _parse_expression down to
# _parse_primary, with some headroom
FRAMES_PER_LEVEL = 12


# Operator text -> (node kind, operands swapped)
BinaryOperators = dict[str, tuple[NodeKind, bool]]

EQUALITY_OPERATORS: BinaryOperators = {
    "==": (NodeKind.EQUAL, False),
    "!=": (NodeKind.NOT_EQUAL, False),
}

RELATIONAL_OPERATORS: BinaryOperators = {
    "<": (NodeKind.LESS, False),
    "<=": (NodeKind.LESS_EQ, False),
    ">": (NodeKind.LESS, True),
    ">=": (NodeKind.LESS_EQ, True),
}

ADDITIVE_OPERATORS: BinaryOperators = {
    "+": (NodeKind.ADD, False),
    "-": (NodeKind.SUBTRACT, False),
}

MULTIPLICATIVE_OPERATORS: BinaryOperators = {
    "*": (NodeKind.MULTIPLY, False),
    "/": (NodeKind.DIVIDE, False),
}


class ExprParser:
    """
    Recursive descent parser for arithmetic expressions.

    The parser owns a single cursor into the token list. Grammar
    methods advance the cursor; the tokens themselves are never touched.
    Every error is fatal and raised at the offending token's offset.

    Attributes:
        tokens: Token list ending with an EOF token
        source: The original input, for error messages
        filename: Input name for error messages
    """

    def __init__(
        self,
        tokens: list[Token],
        source: str = "",
        filename: str = "<input>",
    ):
        self.tokens = tokens
        self.source = source
        self.filename = filename

        # Current position in token stream
        self._pos = 0

        # Open parentheses around the cursor
        self._depth = 0

    def parse(self) -> Expression:
        """
        Parse the whole token list into one expression.

        Returns:
            The root node of the AST

        Raises:
            ParseError: If the tokens do not form exactly one expression
            NestingDepthError: If parentheses nest deeper than
                MAX_NESTING_DEPTH
        """
        # Each nesting level recurses through every precedence method
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(limit + MAX_NESTING_DEPTH * FRAMES_PER_LEVEL)
        try:
            expr = self._parse_expression()
        finally:
            sys.setrecursionlimit(limit)

        if not self._at_end():
            token = self._peek()
            raise UnexpectedTokenError(
                token.text, token.offset, self.source, self.filename
            )

        return expr

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().kind == TokenKind.EOF

    def _peek(self) -> Token:
        """Current token; the EOF token once the list is exhausted."""
        if self._pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, op: str) -> bool:
        token = self._peek()
        return token.kind == TokenKind.RESERVED and token.text == op

    def _consume(self, op: str) -> bool:
        """
        Consume the current token if it is the reserved token op.

        Returns:
            True if matched and consumed, False otherwise (cursor unchanged)
        """
        if self._check(op):
            self._advance()
            return True
        return False

    def _expect(self, op: str) -> None:
        """
        Consume the reserved token op or fail.

        Raises:
            MissingTokenError: If the current token is not op
        """
        if not self._consume(op):
            raise MissingTokenError(
                op, self._peek().offset, self.source, self.filename
            )

    def _expect_number(self) -> int:
        """
        Consume an integer literal and return its value.

        Raises:
            ExpectedNumberError: If the current token is not a NUMBER
        """
        token = self._peek()
        if token.kind != TokenKind.NUMBER:
            raise ExpectedNumberError(
                token.describe(), token.offset, self.source, self.filename
            )
        self._advance()
        return token.value

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_expression(self) -> Expression:
        return self._parse_equality()

    def _parse_equality(self) -> Expression:
        """Parse equality expression (== !=)."""
        return self._parse_binary(self._parse_relational, EQUALITY_OPERATORS)

    def _parse_relational(self) -> Expression:
        """Parse relational expression (< <= > >=)."""
        return self._parse_binary(self._parse_additive, RELATIONAL_OPERATORS)

    def _parse_additive(self) -> Expression:
        """Parse additive expression (+ -)."""
        return self._parse_binary(self._parse_multiplicative, ADDITIVE_OPERATORS)

    def _parse_multiplicative(self) -> Expression:
        """Parse multiplicative expression (* /)."""
        return self._parse_binary(self._parse_unary, MULTIPLICATIVE_OPERATORS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: BinaryOperators,
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Function parsing the next-higher precedence level
            operators: Map of operator text to (node kind, swap operands)
        """
        expr = operand_parser()

        while True:
            token = self._peek()
            if token.kind != TokenKind.RESERVED or token.text not in operators:
                return expr
            self._advance()

            kind, swapped = operators[token.text]
            right = operand_parser()
            if swapped:
                expr = BinaryExpression(kind, right, expr, offset=token.offset)
            else:
                expr = BinaryExpression(kind, expr, right, offset=token.offset)

    def _parse_unary(self) -> Expression:
        """Parse unary expression (+x is x, -x is 0 - x)."""
        token = self._peek()

        if self._consume("+"):
            return self._parse_primary()

        if self._consume("-"):
            zero = NumberLiteral(0, offset=token.offset)
            return BinaryExpression(
                NodeKind.SUBTRACT, zero, self._parse_primary(), offset=token.offset
            )

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """Parse primary expression (literal or parenthesized)."""
        token = self._peek()
        if self._consume("("):
            self._depth += 1
            if self._depth > MAX_NESTING_DEPTH:
                raise NestingDepthError(
                    MAX_NESTING_DEPTH, token.offset, self.source, self.filename
                )
            expr = self._parse_expression()
            self._expect(")")
            self._depth -= 1
            return expr

        offset = self._peek().offset
        return NumberLiteral(self._expect_number(), offset=offset)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expression(source: str, filename: str = "<input>") -> Expression:
    """
    Parse an expression string into an AST.

    This is a convenience function that combines lexing and parsing.

    Raises:
        LexError: If tokenization fails
        ParseError: If parsing fails
    """
    tokens = tokenize(source, filename)
    return ExprParser(tokens, source, filename).parse()
