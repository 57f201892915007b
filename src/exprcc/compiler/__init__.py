"""
Expression Compiler
===================

This package compiles a single arithmetic expression into x86-64
assembly that evaluates it on the stack and returns its value from main.

It provides:

- A lexer (tokenizer) for the expression language
- A recursive descent parser producing an AST
- A code generator emitting stack-machine style assembly

Pipeline
--------
    Expression → Lexer → Parser → AST → Code Generator → Assembly

The generated assembly is meant for the GNU assembler; this package never
invokes it. exprcc.emulator can run the output in-process.

Language
--------
- Integer literals (decimal, up to 2147483647)
- Arithmetic: + - * /
- Comparison: == != < <= > >=  (0 or 1)
- Unary + and -
- Parentheses

Usage
-----
>>> from exprcc.compiler import compile_expression
>>> print(compile_expression("2+3*4"))
"""

from exprcc.compiler.compiler import (
    ExpressionCompiler,
    CompilerOptions,
    CompilerResult,
    compile_expression,
)
from exprcc.compiler.errors import (
    CompileError,
    LexError,
    ParseError,
    InvalidCharacterError,
    IntegerRangeError,
    MissingTokenError,
    ExpectedNumberError,
    UnexpectedTokenError,
    NestingDepthError,
)
from exprcc.compiler.lexer import Lexer, Token, TokenKind, tokenize
from exprcc.compiler.parser import ExprParser, parse_expression
from exprcc.compiler.codegen import CodeGenerator
from exprcc.compiler.ast import (
    ASTPrinter,
    Expression,
    BinaryExpression,
    NumberLiteral,
    NodeKind,
)

__all__ = [
    # Main API
    "ExpressionCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expression",
    # Errors
    "CompileError",
    "LexError",
    "ParseError",
    "InvalidCharacterError",
    "IntegerRangeError",
    "MissingTokenError",
    "ExpectedNumberError",
    "UnexpectedTokenError",
    "NestingDepthError",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    # Parser
    "ExprParser",
    "parse_expression",
    # Code Generator
    "CodeGenerator",
    # AST
    "ASTPrinter",
    "Expression",
    "BinaryExpression",
    "NumberLiteral",
    "NodeKind",
]
