"""
Reference Emulator
==================

In-process interpreter for the assembly emitted by the expression
compiler. Used by the test-suite and by the exrun tool to check the
value a compiled program returns without assembling it.

Usage
-----
>>> from exprcc.compiler import compile_expression
>>> from exprcc.emulator import run_assembly
>>> run_assembly(compile_expression("(2+3)*4"))
20
"""

from exprcc.emulator.machine import (
    StackMachine,
    Instruction,
    EmulatorError,
    exit_status,
    parse_program,
    run_assembly,
    to_signed,
)

__all__ = [
    "StackMachine",
    "Instruction",
    "EmulatorError",
    "exit_status",
    "parse_program",
    "run_assembly",
    "to_signed",
]
