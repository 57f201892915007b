"""
x86-64 Stack-Machine Code Generator
===================================

This module generates x86-64 assembly (GNU assembler, Intel syntax)
from the expression AST.

Code Generation Strategy
------------------------
The generator uses the hardware stack as the evaluation stack and walks
the tree in post-order:

1. A literal pushes its value
2. A binary node generates its left child, then its right child, pops
   the right operand into RDI and the left operand into RAX, computes
   the result into RAX and pushes it

After the whole tree has been generated exactly one value remains on the
stack. The program epilogue pops it into RAX, the return register, so
the expression's value becomes main's return value.

Register Usage
--------------
| Register | Usage                                     |
|----------|-------------------------------------------|
| RAX      | left operand, result (accumulator)        |
| RDI      | right operand                             |
| RDX      | sign extension of RAX for IDIV (via CQO)  |
| AL       | comparison flag result before MOVZB       |

Comparisons
-----------
CMP sets the flags from RAX - RDI, SETcc writes 0 or 1 to AL and
MOVZB zero-extends AL back into RAX:

    cmp     rax, rdi
    setl    al
    movzb   rax, al

Example output for "1+2":
    .intel_syntax noprefix
    .globl main
    main:
            push    1
            push    2
            pop     rdi
            pop     rax
            add     rax, rdi
            push    rax
            pop     rax
            ret
"""

from exprcc.compiler.ast import (
    ASTVisitor,
    ASTPrinter,
    Expression,
    BinaryExpression,
    NumberLiteral,
    NodeKind,
)


# Instruction sequence computing RAX = RAX op RDI
OPERATOR_INSTRUCTIONS: dict[NodeKind, list[tuple[str, str]]] = {
    NodeKind.ADD: [("add", "rax, rdi")],
    NodeKind.SUBTRACT: [("sub", "rax, rdi")],
    NodeKind.MULTIPLY: [("imul", "rax, rdi")],
    NodeKind.DIVIDE: [("cqo", ""), ("idiv", "rdi")],
    NodeKind.EQUAL: [("cmp", "rax, rdi"), ("sete", "al"), ("movzb", "rax, al")],
    NodeKind.NOT_EQUAL: [("cmp", "rax, rdi"), ("setne", "al"), ("movzb", "rax, al")],
    NodeKind.LESS: [("cmp", "rax, rdi"), ("setl", "al"), ("movzb", "rax, al")],
    NodeKind.LESS_EQ: [("cmp", "rax, rdi"), ("setle", "al"), ("movzb", "rax, al")],
}

# Operator comments render at most this many tree levels
COMMENT_DEPTH = 2


class CodeGenerator(ASTVisitor):
    """
    Generates x86-64 stack-machine assembly from an expression AST.

    The generator performs no validation: any tree built by the parser
    is accepted, and anything else is a programming error.

    Attributes:
        entry_symbol: Name of the global entry label
        output_comments: Annotate the output with comments
    """

    def __init__(self, entry_symbol: str = "main", output_comments: bool = False):
        self.entry_symbol = entry_symbol
        self.output_comments = output_comments

        # Assembly output lines
        self._output: list[str] = []

    def generate(self, root: Expression) -> list[str]:
        """
        Generate the instruction lines evaluating root.

        The lines leave the value of root on top of the stack. Popping
        it is left to the caller (see generate_program).

        Returns:
            Instruction lines in emission order
        """
        self._output = []
        self._generate_tree(root)
        return self._output

    def generate_program(self, root: Expression, source: str = "") -> list[str]:
        """
        Generate a complete program returning the value of root.

        Args:
            root: The expression AST
            source: Original input, echoed in the header comment

        Returns:
            All lines of the assembly program
        """
        body = self.generate(root)

        self._output = []
        self._emit_header(source)
        self._output.extend(body)
        self._emit_footer()
        return self._output

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line of assembly."""
        self._output.append(line)

    def _emit_comment(self, comment: str) -> None:
        if self.output_comments:
            self._emit(f"        # {comment}")

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        """Emit an instruction with optional operand."""
        if operand:
            self._emit(f"        {mnemonic:<8}{operand}")
        else:
            self._emit(f"        {mnemonic}")

    def _emit_header(self, source: str) -> None:
        if self.output_comments:
            self._emit("# =============================================================================")
            self._emit("# Generated by excc - expression compiler")
            if source:
                self._emit(f"# Expression: {' '.join(source.split())}")
            self._emit("# =============================================================================")
        self._emit(".intel_syntax noprefix")
        self._emit(f".globl {self.entry_symbol}")
        self._emit(f"{self.entry_symbol}:")

    def _emit_footer(self) -> None:
        self._emit_comment("return the value left on the stack")
        self._emit_instruction("pop", "rax")
        self._emit_instruction("ret")

    # =========================================================================
    # Expression Code Generation
    # =========================================================================

    def _generate_tree(self, root: Expression) -> None:
        """
        Emit root in post-order using an explicit work stack.

        A binary node is pushed back marked as expanded underneath its
        children, so its operator is emitted once both operands are on
        the evaluation stack. Tree depth is bounded only by memory.
        """
        work: list[tuple[Expression, bool]] = [(root, False)]
        while work:
            node, expanded = work.pop()
            if isinstance(node, BinaryExpression) and not expanded:
                work.append((node, True))
                work.append((node.right, False))
                work.append((node.left, False))
            elif isinstance(node, BinaryExpression):
                self._emit_operator(node)
            else:
                self.visit(node)

    def visit_NumberLiteral(self, node: NumberLiteral) -> None:
        self._emit_instruction("push", str(node.value))

    def _emit_operator(self, node: BinaryExpression) -> None:
        """Combine the two topmost stack values with node's operator."""
        self._emit_comment(ASTPrinter.expr_str(node, depth=COMMENT_DEPTH))
        self._emit_instruction("pop", "rdi")
        self._emit_instruction("pop", "rax")
        for mnemonic, operand in OPERATOR_INSTRUCTIONS[node.kind]:
            self._emit_instruction(mnemonic, operand)
        self._emit_instruction("push", "rax")
