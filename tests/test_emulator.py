"""
Reference Emulator Tests
========================

Tests for the stack-machine emulator: program parsing, register and
stack semantics, signed division and comparison, and fault reporting.
"""

import pytest
from exprcc.emulator import (
    StackMachine,
    EmulatorError,
    exit_status,
    parse_program,
    run_assembly,
    to_signed,
)


def run(*lines: str, entry: str = "main") -> int:
    """Run instruction lines placed under a main label."""
    text = "\n".join([".intel_syntax noprefix", f".globl {entry}", f"{entry}:", *lines])
    return run_assembly(text, entry)


# =============================================================================
# Program Parsing Tests
# =============================================================================

class TestParseProgram:
    """Test splitting program text into labels and instructions."""

    def test_directives_and_comments_skipped(self):
        text = """
# header comment
.intel_syntax noprefix
.globl main
main:
        push    1       # one
        pop     rax
        ret
"""
        instructions, labels = parse_program(text)
        assert [i.mnemonic for i in instructions] == ["push", "pop", "ret"]
        assert labels == {"main": 0}

    def test_line_numbers(self):
        instructions, _ = parse_program("main:\n\n  push 1\n  ret\n")
        assert [i.line for i in instructions] == [3, 4]

    def test_operands_split(self):
        instructions, _ = parse_program("main:\n  add rax, rdi\n")
        assert instructions[0].operands == ("rax", "rdi")
        assert str(instructions[0]) == "add rax, rdi"

    def test_accepts_line_list(self):
        instructions, labels = parse_program(["main:", "  push 1", "  pop rax", "  ret"])
        assert len(instructions) == 3

    def test_unknown_instruction(self):
        with pytest.raises(EmulatorError) as exc_info:
            parse_program("main:\n  jmp main\n")
        assert exc_info.value.line == 2
        assert "jmp" in str(exc_info.value)

    def test_operand_count_checked(self):
        with pytest.raises(EmulatorError):
            parse_program("main:\n  add rax\n")
        with pytest.raises(EmulatorError):
            parse_program("main:\n  ret rax\n")

    def test_att_syntax_rejected(self):
        with pytest.raises(EmulatorError):
            parse_program(".att_syntax\nmain:\n  ret\n")

    def test_duplicate_label(self):
        with pytest.raises(EmulatorError):
            parse_program("main:\n  ret\nmain:\n  ret\n")


# =============================================================================
# Execution Tests
# =============================================================================

class TestExecution:
    """Test instruction semantics."""

    def test_push_pop(self):
        assert run("push 7", "pop rax", "ret") == 7

    def test_stack_is_lifo(self):
        assert run("push 1", "push 2", "pop rdi", "pop rax", "sub rax, rdi",
                   "push rax", "pop rax", "ret") == -1

    def test_mov(self):
        assert run("mov rdi, 9", "mov rax, rdi", "ret") == 9

    def test_negative_immediate(self):
        assert run("push -5", "pop rax", "ret") == -5

    def test_immediate_range(self):
        with pytest.raises(EmulatorError):
            run("push 2147483648", "pop rax", "ret")

    def test_multiply_wraps(self):
        """Products wrap at 64 bits."""
        lines = ["push 2147483647", "pop rax", "mov rdi, rax"]
        # 2**31-1 squared, then squared again, overflows 64 bits
        lines += ["imul rax, rdi", "mov rdi, rax", "imul rax, rdi", "ret"]
        expected = to_signed((2**31 - 1) ** 4)
        assert run(*lines) == expected

    def test_imul_signed(self):
        assert run("mov rax, -3", "mov rdi, 4", "imul rax, rdi", "ret") == -12

    def test_idiv_truncates_toward_zero(self):
        cases = [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3)]
        for a, b, expected in cases:
            value = run(f"mov rax, {a}", f"mov rdi, {b}", "cqo", "idiv rdi", "ret")
            assert value == expected, (a, b)

    def test_idiv_remainder_in_rdx(self):
        machine = StackMachine()
        machine.run("main:\n mov rax, -7\n mov rdi, 2\n cqo\n idiv rdi\n ret\n")
        assert to_signed(machine.registers["rdx"]) == -1

    def test_cqo_sign_extends(self):
        machine = StackMachine()
        machine.run("main:\n mov rax, -1\n cqo\n ret\n")
        assert machine.registers["rdx"] == 2**64 - 1

    def test_comparisons(self):
        cases = [
            ("sete", 3, 3, 1), ("sete", 3, 4, 0),
            ("setne", 3, 4, 1), ("setne", 3, 3, 0),
            ("setl", -1, 0, 1), ("setl", 0, -1, 0),
            ("setle", 2, 2, 1), ("setle", 3, 2, 0),
        ]
        for setcc, a, b, expected in cases:
            value = run(f"mov rax, {a}", f"mov rdi, {b}", "cmp rax, rdi",
                        f"{setcc} al", "movzb rax, al", "ret")
            assert value == expected, (setcc, a, b)

    def test_setcc_writes_only_al(self):
        """SETcc leaves the upper bytes of RAX alone until MOVZB."""
        machine = StackMachine()
        machine.run("main:\n mov rax, 256\n mov rdi, 0\n cmp rax, rdi\n setne al\n ret\n")
        assert machine.rax == 257

    def test_custom_entry(self):
        assert run("push 3", "pop rax", "ret", entry="start") == 3

    def test_execution_starts_at_entry(self):
        text = "other:\n push 1\n pop rax\n ret\nmain:\n push 2\n pop rax\n ret\n"
        assert run_assembly(text) == 2

    def test_trace_logs_instructions(self, caplog):
        machine = StackMachine(trace=True)
        with caplog.at_level("DEBUG", logger="exprcc.emulator.machine"):
            machine.run("main:\n push 1\n pop rax\n ret\n")
        assert "push 1" in caplog.text
        assert machine.steps == 3


# =============================================================================
# Fault Tests
# =============================================================================

class TestFaults:
    """Runtime faults raise EmulatorError."""

    def test_division_by_zero(self):
        with pytest.raises(EmulatorError) as exc_info:
            run("mov rax, 1", "mov rdi, 0", "cqo", "idiv rdi", "ret")
        assert "division by zero" in str(exc_info.value)
        assert exc_info.value.line == 7

    def test_division_overflow(self):
        """INT64_MIN / -1 does not fit and faults like the hardware."""
        with pytest.raises(EmulatorError) as exc_info:
            run("mov rax, -2147483648", "mov rdi, -2147483648",
                "imul rax, rdi", "mov rdi, 2", "imul rax, rdi",  # wraps to INT64_MIN
                "mov rdi, -1", "cqo", "idiv rdi", "ret")
        assert "overflow" in str(exc_info.value)

    def test_pop_empty_stack(self):
        with pytest.raises(EmulatorError):
            run("pop rax", "ret")

    def test_missing_entry(self):
        with pytest.raises(EmulatorError) as exc_info:
            run_assembly("start:\n ret\n")
        assert "main" in str(exc_info.value)

    def test_runs_off_end(self):
        with pytest.raises(EmulatorError):
            run("push 1", "pop rax")

    def test_invalid_operand(self):
        with pytest.raises(EmulatorError):
            run("push rbx", "ret")

    def test_setcc_without_cmp(self):
        with pytest.raises(EmulatorError):
            run("sete al", "ret")

    def test_write_to_immediate(self):
        with pytest.raises(EmulatorError):
            run("push 1", "pop 5", "ret")


# =============================================================================
# Exit Status Tests
# =============================================================================

class TestExitStatus:
    """The process status is the low byte of the returned value."""

    def test_exit_status(self):
        assert exit_status(14) == 14
        assert exit_status(256) == 0
        assert exit_status(-1) == 255
        assert exit_status(-8) == 248
