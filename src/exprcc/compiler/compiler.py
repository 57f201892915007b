"""
Expression Compiler Main Module
===============================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    Expression → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ excc "2*(3+4)" -o expr.s

Programmatic:
    >>> from exprcc.compiler import compile_expression
    >>> asm = compile_expression("2*(3+4)")

Error Handling
--------------
Compilation stops at the first error. LexError and ParseError propagate
to the caller unchanged; there is no partial result.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from exprcc.compiler.lexer import Lexer, Token
from exprcc.compiler.parser import ExprParser
from exprcc.compiler.codegen import CodeGenerator
from exprcc.compiler.ast import Expression

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        filename: Name used for the input in error messages
        entry_symbol: Global label the program starts at
        output_comments: Annotate the assembly with comments
    """
    filename: str = "<input>"
    entry_symbol: str = "main"
    output_comments: bool = False


@dataclass
class CompilerResult:
    """
    Result of compiling one expression.

    Attributes:
        source: The input expression
        tokens: Token list produced by the lexer
        ast: Root of the parsed tree
        lines: Assembly program, one line per entry
    """
    source: str
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Expression] = None
    lines: list[str] = field(default_factory=list)

    @property
    def assembly(self) -> str:
        """The assembly program as text, newline terminated."""
        return "\n".join(self.lines) + "\n"

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class ExpressionCompiler:
    """
    Compiler from an arithmetic expression to x86-64 assembly.

    Example:
        compiler = ExpressionCompiler()
        result = compiler.compile_source("1+2*3")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str) -> CompilerResult:
        """
        Compile an expression to assembly.

        Args:
            source: The expression text

        Returns:
            CompilerResult holding every stage's output

        Raises:
            LexError: If the input cannot be tokenized
            ParseError: If the tokens are not a single expression
        """
        result = CompilerResult(source=source)

        # Stage 1: Lexical analysis
        result.tokens = self.tokenize(source)

        # Stage 2: Parsing
        result.ast = self._parse(result.tokens, source)

        # Stage 3: Code generation
        result.lines = self._generate(result.ast, source)

        logger.debug(f"Compiled {self.options.filename}: {len(result.lines)} lines")
        return result

    def tokenize(self, source: str) -> list[Token]:
        """Run the lexer only."""
        tokens = list(Lexer(source, self.options.filename).tokenize())
        logger.debug(f"Tokenized: {len(tokens)} tokens")
        return tokens

    def parse(self, source: str) -> Expression:
        """Run the lexer and parser, returning the AST."""
        return self._parse(self.tokenize(source), source)

    def _parse(self, tokens: list[Token], source: str) -> Expression:
        ast = ExprParser(tokens, source, self.options.filename).parse()
        logger.debug("Parsed expression tree")
        return ast

    def _generate(self, ast: Expression, source: str) -> list[str]:
        generator = CodeGenerator(
            entry_symbol=self.options.entry_symbol,
            output_comments=self.options.output_comments,
        )
        return generator.generate_program(ast, source)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_expression(
    source: str,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile an expression and return the assembly text.

    Raises:
        LexError: If the input cannot be tokenized
        ParseError: If the tokens are not a single expression
    """
    return ExpressionCompiler(options).compile_source(source).assembly
