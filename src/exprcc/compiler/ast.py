"""
Expression Abstract Syntax Tree (AST) Definitions
=================================================

This module defines the AST node types built by the parser and consumed
by the code generator.

Node Hierarchy
--------------
Expression (base)
├── BinaryExpression - ADD, SUBTRACT, MULTIPLY, DIVIDE,
│                      EQUAL, NOT_EQUAL, LESS, LESS_EQ
└── NumberLiteral - integer constant (kind NUMBER)

Design Notes
------------
- Nodes are frozen dataclasses; a tree never changes after parsing
- Every node is a leaf (NumberLiteral) or has exactly two children
- There are no unary nodes: the parser rewrites -x as 0 - x
- There are no "greater" kinds: the parser rewrites a > b as b < a
- The source offset is kept for diagnostics but ignored by equality,
  so two trees compare equal when their structure is equal
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional


# =============================================================================
# Node Kinds
# =============================================================================

class NodeKind(Enum):
    """Kinds of expression nodes."""
    # Arithmetic
    ADD = auto()        # +
    SUBTRACT = auto()   # -
    MULTIPLY = auto()   # *
    DIVIDE = auto()     # /

    # Comparison (result is 0 or 1)
    EQUAL = auto()      # ==
    NOT_EQUAL = auto()  # !=
    LESS = auto()       # <
    LESS_EQ = auto()    # <=

    # Leaf
    NUMBER = auto()     # integer literal


OPERATOR_SYMBOLS = {
    NodeKind.ADD: "+",
    NodeKind.SUBTRACT: "-",
    NodeKind.MULTIPLY: "*",
    NodeKind.DIVIDE: "/",
    NodeKind.EQUAL: "==",
    NodeKind.NOT_EQUAL: "!=",
    NodeKind.LESS: "<",
    NodeKind.LESS_EQ: "<=",
}


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """
    Base class for all expression nodes.

    Attributes:
        offset: Input offset of the token that produced this node
    """
    offset: Optional[int] = field(default=None, compare=False, kw_only=True)

    @property
    def kind(self) -> NodeKind:
        raise NotImplementedError


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Binary operation (left op right).

    Attributes:
        operator: The node kind; never NUMBER
        left: Left operand, the first operand of the operation
        right: Right operand, the second operand of the operation
    """
    operator: NodeKind
    left: Expression
    right: Expression

    @property
    def kind(self) -> NodeKind:
        return self.operator


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """
    Integer literal expression.

    Attributes:
        value: The integer value
    """
    value: int

    @property
    def kind(self) -> NodeKind:
        return NodeKind.NUMBER


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care about.

    Usage:
        class Counter(ASTVisitor):
            def visit_NumberLiteral(self, node):
                return 1

            def visit_BinaryExpression(self, node):
                return self.visit(node.left) + self.visit(node.right)
    """

    def visit(self, node: Expression) -> Any:
        """Visit a node by dispatching to the matching visit_* method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Expression) -> None:
        """Default visit method: visit the children in post-order."""
        if isinstance(node, BinaryExpression):
            self.visit(node.left)
            self.visit(node.right)

    def visit_BinaryExpression(self, node: BinaryExpression): return self.generic_visit(node)
    def visit_NumberLiteral(self, node: NumberLiteral): return self.generic_visit(node)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented tree, one node per line:

        LESS
          NUMBER 3
          NUMBER 5

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Expression) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        # Explicit stack of (node, indent level) so deep trees print too
        pending: list[tuple[Expression, int]] = [(node, 0)]
        while pending:
            current, self.indent_level = pending.pop()
            self.visit(current)
            if isinstance(current, BinaryExpression):
                pending.append((current.right, self.indent_level + 1))
                pending.append((current.left, self.indent_level + 1))
        self.indent_level = 0
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_BinaryExpression(self, node: BinaryExpression):
        self._emit(node.kind.name)

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"NUMBER {node.value}")

    @staticmethod
    def expr_str(node: Expression, depth: Optional[int] = None) -> str:
        """
        Render an expression fully parenthesized, e.g. ((1 + 2) * 3).

        With depth set, operators more than depth levels below node are
        elided as "(...)".
        """
        if isinstance(node, NumberLiteral):
            return str(node.value)
        if depth is not None:
            if depth <= 0:
                return "(...)"
            depth -= 1
        left = ASTPrinter.expr_str(node.left, depth)
        right = ASTPrinter.expr_str(node.right, depth)
        return f"({left} {OPERATOR_SYMBOLS[node.kind]} {right})"
