"""
Expression Compiler Integration Tests
=====================================

End-to-end tests: compile an expression, run the emitted program on the
reference emulator and check the value main returns.

Test Organization
-----------------
- TestEvaluation: arithmetic and comparison results
- TestCompilerDriver: ExpressionCompiler, options and results
- TestCompileErrors: errors surfacing through the driver
- TestLargeInputs: long chains and deep nesting end to end
"""

import pytest
from exprcc import (
    ExprccError,
    ExpressionCompiler,
    CompilerOptions,
    CompileError,
    LexError,
    ParseError,
    EmulatorError,
    compile_expression,
    run_assembly,
    exit_status,
)
from exprcc.compiler.parser import MAX_NESTING_DEPTH, parse_expression


def evaluate(source: str) -> int:
    """Compile source and return what the program's main returns."""
    return run_assembly(compile_expression(source))


# =============================================================================
# Evaluation Tests
# =============================================================================

class TestEvaluation:
    """Compiled programs compute the value of the expression."""

    def test_literal(self):
        assert evaluate("42") == 42

    def test_precedence(self):
        assert evaluate("2+3*4") == 14
        assert evaluate("(2+3)*4") == 20

    def test_left_associative_subtraction(self):
        assert evaluate("8-3-2") == 3

    def test_unary_minus(self):
        assert evaluate("-3+5") == 2
        assert evaluate("-(3+5)") == -8

    def test_unary_plus(self):
        assert evaluate("+7") == 7

    def test_division(self):
        assert evaluate("17/5") == 3
        assert evaluate("-17/5") == -3
        assert evaluate("100/10/5") == 2

    def test_comparisons(self):
        cases = {
            "1<2": 1,
            "2<=1": 0,
            "3==3": 1,
            "3!=3": 0,
            "2<=2": 1,
            "1!=2": 1,
        }
        for source, expected in cases.items():
            assert evaluate(source) == expected, source

    def test_greater_like_swapped_less(self):
        for a, b in [(5, 3), (3, 5), (4, 4)]:
            assert evaluate(f"{a}>{b}") == evaluate(f"{b}<{a}")
            assert evaluate(f"{a}>={b}") == evaluate(f"{b}<={a}")
        assert evaluate("5>3") == 1
        assert evaluate("3>=5") == 0

    def test_comparison_results_compose(self):
        assert evaluate("(1<2)+(3<4)") == 2
        assert evaluate("1<2==1") == 1

    def test_large_literals(self):
        assert evaluate("2147483647") == 2147483647
        assert evaluate("2147483647*2") == 4294967294

    def test_against_python(self):
        """Results agree with Python for expressions without division."""
        for source in ["1+2*3-4", "(1+2)*(3-4)", "-5*-(2+1)", "10-2-3-4"]:
            assert evaluate(source) == eval(source), source

    def test_exit_status_wraps(self):
        """The value the shell sees is the low byte."""
        assert exit_status(evaluate("-(3+5)")) == 248
        assert exit_status(evaluate("300")) == 44

    def test_division_by_zero_faults_at_runtime(self):
        """The compiler emits the division; running it faults."""
        assembly = compile_expression("1/0")
        with pytest.raises(EmulatorError):
            run_assembly(assembly)


# =============================================================================
# Driver Tests
# =============================================================================

class TestCompilerDriver:
    """Test ExpressionCompiler and CompilerResult."""

    def test_result_stages(self):
        result = ExpressionCompiler().compile_source("1+2")
        assert result.source == "1+2"
        assert result.token_count == 4
        assert result.ast == parse_expression("1+2")
        assert result.lines[0] == ".intel_syntax noprefix"

    def test_assembly_is_newline_terminated(self):
        assembly = compile_expression("1")
        assert assembly.endswith("ret\n")
        assert assembly.splitlines()[-2].split() == ["pop", "rax"]

    def test_entry_symbol_option(self):
        options = CompilerOptions(entry_symbol="compute")
        assembly = compile_expression("6*7", options)
        assert ".globl compute" in assembly
        assert run_assembly(assembly, entry="compute") == 42

    def test_commented_output_runs(self):
        options = CompilerOptions(output_comments=True)
        assembly = compile_expression("(2+3)*4", options)
        assert "# Expression: (2+3)*4" in assembly
        assert run_assembly(assembly) == 20

    def test_deterministic(self):
        """Identical input produces identical output."""
        for source in ["2+3*4", "5>3", "-(1)"]:
            assert compile_expression(source) == compile_expression(source)

    def test_tokenize_and_parse(self):
        compiler = ExpressionCompiler()
        assert len(compiler.tokenize("1 < 2")) == 4
        assert compiler.parse("5>3") == compiler.parse("3<5")

    def test_debug_logging(self, caplog):
        with caplog.at_level("DEBUG", logger="exprcc.compiler.compiler"):
            ExpressionCompiler().compile_source("1+2")
        assert "Tokenized: 4 tokens" in caplog.text


# =============================================================================
# Error Tests
# =============================================================================

class TestCompileErrors:
    """Errors from each stage reach the caller."""

    def test_lex_error_offset(self):
        with pytest.raises(LexError) as exc_info:
            compile_expression("1+@")
        assert exc_info.value.offset == 2

    def test_parse_error(self):
        with pytest.raises(ParseError):
            compile_expression("1+")

    def test_errors_share_base_classes(self):
        for source in ["1+@", "1+", "(1", "1)"]:
            with pytest.raises(CompileError):
                compile_expression(source)
            with pytest.raises(ExprccError):
                compile_expression(source)

    def test_filename_in_message(self):
        options = CompilerOptions(filename="expr.txt")
        with pytest.raises(ParseError) as exc_info:
            compile_expression("(1", options)
        assert str(exc_info.value).startswith("expr.txt:1:3: error: expected ')'")


# =============================================================================
# Large Input Tests
# =============================================================================

class TestLargeInputs:
    """Long and deeply nested expressions compile and run."""

    def test_thousand_term_sum(self):
        assert evaluate("+".join(["1"] * 1000)) == 1000

    def test_long_mixed_chain(self):
        source = "-".join(["3"] * 800) + "*2"
        assert evaluate(source) == 3 - 3 * 798 - 6

    def test_deeply_parenthesized_literal(self):
        depth = MAX_NESTING_DEPTH
        assert evaluate("(" * depth + "42" + ")" * depth) == 42

    def test_deep_right_nesting(self):
        source = "1+(" * 200 + "1" + ")" * 200
        assert evaluate(source) == 201

    def test_nesting_over_limit(self):
        depth = MAX_NESTING_DEPTH + 1
        with pytest.raises(ParseError) as exc_info:
            compile_expression("(" * depth + "1" + ")" * depth)
        assert "nested too deeply" in str(exc_info.value)
