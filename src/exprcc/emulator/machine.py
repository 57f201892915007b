"""
x86-64 Stack-Machine Emulator
=============================

Executes the assembly dialect produced by exprcc.compiler.codegen without
an assembler, so the value a compiled program returns can be checked
in-process.

Only the instructions the code generator emits are modelled:

    push    imm | reg           pop     reg
    mov     reg, imm | reg      ret
    add     reg, reg            sub     reg, reg
    imul    reg, reg            cqo
    idiv    reg                 cmp     reg, reg
    sete / setne / setl / setle al
    movzb   reg, al

Registers are 64-bit with two's complement wraparound. AL is the low
byte of RAX. IDIV divides RDX:RAX and faults on a zero divisor or a
quotient that does not fit, as the hardware does.

Program text is parsed line by line: '#' starts a comment, lines starting
with '.' are directives, 'name:' defines a label. Execution starts at the
entry label and ends at the first RET.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from exprcc.errors import ExprccError

logger = logging.getLogger(__name__)

MASK64 = (1 << 64) - 1
SIGN64 = 1 << 63

# push takes a sign-extended 32-bit immediate
IMM32_MIN = -(1 << 31)
IMM32_MAX = (1 << 31) - 1

REGISTERS_64 = ("rax", "rdi", "rdx")
REGISTERS_8 = ("al",)

# Mnemonic -> number of operands
OPERAND_COUNTS = {
    "push": 1,
    "pop": 1,
    "mov": 2,
    "add": 2,
    "sub": 2,
    "imul": 2,
    "cqo": 0,
    "idiv": 1,
    "cmp": 2,
    "sete": 1,
    "setne": 1,
    "setl": 1,
    "setle": 1,
    "movzb": 2,
    "ret": 0,
}

# SETcc conditions over the signed operands of the last CMP
CONDITIONS = {
    "sete": lambda a, b: a == b,
    "setne": lambda a, b: a != b,
    "setl": lambda a, b: a < b,
    "setle": lambda a, b: a <= b,
}


class EmulatorError(ExprccError):
    """
    The program could not be executed.

    Raised for malformed program text and for runtime faults such as a
    division by zero or a pop from an empty stack.

    Attributes:
        message: The error description
        line: 1-indexed program line of the failing instruction, if known
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        if line is not None:
            super().__init__(f"line {line}: error: {message}")
        else:
            super().__init__(f"error: {message}")


@dataclass(frozen=True)
class Instruction:
    """
    One parsed instruction.

    Attributes:
        mnemonic: Lower-case instruction name
        operands: Operand strings, stripped
        line: 1-indexed line number in the program text
    """
    mnemonic: str
    operands: tuple[str, ...]
    line: int

    def __str__(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic


def to_signed(value: int) -> int:
    """Interpret the low 64 bits of value as a signed integer."""
    value &= MASK64
    return value - (1 << 64) if value & SIGN64 else value


def exit_status(value: int) -> int:
    """Process exit status for a value returned from main."""
    return value & 0xFF


def parse_program(
    program: Union[str, Iterable[str]],
) -> tuple[list[Instruction], dict[str, int]]:
    """
    Parse program text into instructions and a label table.

    Returns:
        (instructions, labels) where labels maps a label name to the
        index of the instruction that follows it

    Raises:
        EmulatorError: If a line is not a label, directive or instruction
    """
    lines = program.splitlines() if isinstance(program, str) else list(program)

    instructions: list[Instruction] = []
    labels: dict[str, int] = {}

    for number, raw in enumerate(lines, start=1):
        text = raw.split("#", 1)[0].strip()
        if not text:
            continue

        if text.startswith("."):
            if text.split()[0] == ".att_syntax":
                raise EmulatorError("only Intel syntax is supported", number)
            continue

        if text.endswith(":"):
            name = text[:-1].strip()
            if name in labels:
                raise EmulatorError(f"duplicate label '{name}'", number)
            labels[name] = len(instructions)
            continue

        parts = text.split(None, 1)
        mnemonic = parts[0].lower()
        operands = ()
        if len(parts) > 1:
            operands = tuple(op.strip().lower() for op in parts[1].split(","))

        if mnemonic not in OPERAND_COUNTS:
            raise EmulatorError(f"unknown instruction '{mnemonic}'", number)
        expected = OPERAND_COUNTS[mnemonic]
        if len(operands) != expected:
            word = "operand" if expected == 1 else "operands"
            raise EmulatorError(
                f"'{mnemonic}' expects {expected} {word}, got {len(operands)}",
                number,
            )

        instructions.append(Instruction(mnemonic, operands, number))

    return instructions, labels


class StackMachine:
    """
    Interpreter for the generated instruction subset.

    Usage:
        machine = StackMachine()
        value = machine.run(assembly_text)

    Attributes:
        entry: Label execution starts at
        trace: Log every executed instruction at debug level
        stack: The evaluation stack, top at the end
    """

    def __init__(self, entry: str = "main", trace: bool = False):
        self.entry = entry
        self.trace = trace
        self.reset()

    def reset(self) -> None:
        """Clear registers, stack and comparison state."""
        self.registers: dict[str, int] = {name: 0 for name in REGISTERS_64}
        self.stack: list[int] = []
        self._compare: Optional[tuple[int, int]] = None
        self.steps = 0

    @property
    def rax(self) -> int:
        """RAX as a signed value."""
        return to_signed(self.registers["rax"])

    def run(self, program: Union[str, Iterable[str]]) -> int:
        """
        Execute a program from its entry label until RET.

        Returns:
            The signed 64-bit value of RAX at RET

        Raises:
            EmulatorError: On malformed text or a runtime fault
        """
        instructions, labels = parse_program(program)
        if self.entry not in labels:
            raise EmulatorError(f"entry label '{self.entry}' not found")

        self.reset()
        pc = labels[self.entry]

        while pc < len(instructions):
            instruction = instructions[pc]
            if self.trace:
                logger.debug(f"{instruction.line:4d}: {instruction}")
            self.steps += 1

            if instruction.mnemonic == "ret":
                if self.stack:
                    logger.debug(f"{len(self.stack)} value(s) left on the stack at ret")
                return self.rax

            self._execute(instruction)
            pc += 1

        raise EmulatorError("execution ran past the last instruction without 'ret'")

    # =========================================================================
    # Operand Access
    # =========================================================================

    def _read(self, operand: str, line: int) -> int:
        """Read a register or immediate operand as an unsigned 64-bit value."""
        if operand in REGISTERS_64:
            return self.registers[operand]
        if operand in REGISTERS_8:
            return self.registers["rax"] & 0xFF
        try:
            value = int(operand, 0)
        except ValueError:
            raise EmulatorError(f"invalid operand '{operand}'", line) from None
        if not IMM32_MIN <= value <= IMM32_MAX:
            raise EmulatorError(f"immediate {value} does not fit in 32 bits", line)
        return value & MASK64

    def _write(self, operand: str, value: int, line: int) -> None:
        if operand in REGISTERS_64:
            self.registers[operand] = value & MASK64
        elif operand in REGISTERS_8:
            rax = self.registers["rax"]
            self.registers["rax"] = (rax & ~0xFF & MASK64) | (value & 0xFF)
        else:
            raise EmulatorError(f"cannot write to '{operand}'", line)

    # =========================================================================
    # Instruction Execution
    # =========================================================================

    def _execute(self, instruction: Instruction) -> None:
        op = instruction.mnemonic
        args = instruction.operands
        line = instruction.line

        if op == "push":
            self.stack.append(self._read(args[0], line))

        elif op == "pop":
            if not self.stack:
                raise EmulatorError("pop from empty stack", line)
            self._write(args[0], self.stack.pop(), line)

        elif op == "mov":
            self._write(args[0], self._read(args[1], line), line)

        elif op == "add":
            self._write(args[0], self._read(args[0], line) + self._read(args[1], line), line)

        elif op == "sub":
            self._write(args[0], self._read(args[0], line) - self._read(args[1], line), line)

        elif op == "imul":
            product = to_signed(self._read(args[0], line)) * to_signed(self._read(args[1], line))
            self._write(args[0], product, line)

        elif op == "cqo":
            self.registers["rdx"] = MASK64 if self.registers["rax"] & SIGN64 else 0

        elif op == "idiv":
            self._divide(args[0], line)

        elif op == "cmp":
            self._compare = (
                to_signed(self._read(args[0], line)),
                to_signed(self._read(args[1], line)),
            )

        elif op in CONDITIONS:
            if args[0] not in REGISTERS_8:
                raise EmulatorError(f"'{op}' needs an 8-bit register", line)
            if self._compare is None:
                raise EmulatorError(f"'{op}' without a preceding 'cmp'", line)
            self._write(args[0], int(CONDITIONS[op](*self._compare)), line)

        elif op == "movzb":
            if args[1] not in REGISTERS_8:
                raise EmulatorError("'movzb' source must be an 8-bit register", line)
            self._write(args[0], self._read(args[1], line), line)

    def _divide(self, operand: str, line: int) -> None:
        """Signed divide RDX:RAX, quotient to RAX and remainder to RDX."""
        divisor = to_signed(self._read(operand, line))
        if divisor == 0:
            raise EmulatorError("division by zero", line)

        wide = (self.registers["rdx"] << 64) | self.registers["rax"]
        if wide & (1 << 127):
            wide -= 1 << 128

        # Truncate toward zero
        quotient = abs(wide) // abs(divisor)
        if (wide < 0) != (divisor < 0):
            quotient = -quotient
        remainder = wide - quotient * divisor

        if not -SIGN64 <= quotient < SIGN64:
            raise EmulatorError("division overflow", line)

        self.registers["rax"] = quotient & MASK64
        self.registers["rdx"] = remainder & MASK64


# =============================================================================
# Convenience Functions
# =============================================================================

def run_assembly(program: Union[str, Iterable[str]], entry: str = "main") -> int:
    """Execute program text and return the value main returns."""
    return StackMachine(entry).run(program)
