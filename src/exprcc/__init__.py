"""
exprcc - Arithmetic Expression Compiler for x86-64
==================================================

This package compiles a single integer arithmetic expression into a
complete x86-64 assembly program (GNU assembler, Intel syntax) whose
`main` returns the value of the expression.

Main Components
---------------
- **compiler**: lexer, parser, AST and code generator (excc)
    Turns an expression such as "2*(3+4)" into stack-machine assembly

- **emulator**: reference stack-machine emulator (exrun)
    Runs the generated assembly in-process and returns main's value

Quick Start
-----------
Compile an expression:
    >>> from exprcc import compile_expression
    >>> asm = compile_expression("2*(3+4)")

Check what it evaluates to:
    >>> from exprcc import run_assembly
    >>> run_assembly(asm)
    14

Or use the command-line tools:
    $ excc "2*(3+4)" -o expr.s
    $ cc -o expr expr.s && ./expr; echo $?
    $ exrun expr.s

Version History
---------------
1.0.0 - Initial release with compiler, emulator and command-line tools
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from exprcc.errors import ExprccError, SourceLocation
from exprcc.compiler import (
    ExpressionCompiler,
    CompilerOptions,
    CompilerResult,
    compile_expression,
    CompileError,
    LexError,
    ParseError,
)
from exprcc.emulator import (
    StackMachine,
    EmulatorError,
    exit_status,
    run_assembly,
)

__all__ = [
    "__version__",
    # Errors
    "ExprccError",
    "SourceLocation",
    "CompileError",
    "LexError",
    "ParseError",
    "EmulatorError",
    # Compiler
    "ExpressionCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expression",
    # Emulator
    "StackMachine",
    "exit_status",
    "run_assembly",
]
