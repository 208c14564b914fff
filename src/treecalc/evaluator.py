from __future__ import annotations

import re
from typing import Dict, Optional

from .tree import NodeIndex, Tree, TreeNode
from .types import (
    DivisionByZeroError,
    ExprNode,
    IncompleteExpressionError,
    LiteralError,
    Number,
    NumericOverflowError,
    UnknownOperatorError,
)

LITERAL_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_literal(expr: ExprNode) -> Number:
    text = expr.text
    if not LITERAL_RE.fullmatch(text):
        raise LiteralError(text, expr)

    try:
        if "." in text:
            return float(text)
        return int(text)
    except ValueError as exc:
        # int() refuses digit strings past the interpreter's conversion limit
        raise LiteralError(text, expr) from exc


def apply_operator(expr: ExprNode, lhs: Number, rhs: Number) -> Number:
    op = expr.text
    if op == "/" and rhs == 0:
        raise DivisionByZeroError(expr)

    try:
        if op == "+":
            return lhs + rhs
        if op == "-":
            return lhs - rhs
        if op == "*":
            return lhs * rhs
        if op == "/":
            return lhs / rhs
    except OverflowError as exc:
        raise NumericOverflowError(expr) from exc

    raise UnknownOperatorError(op, expr)


def evaluate(tree: Tree[ExprNode]) -> Number:
    """Reduce a built expression tree to a number.

    Walks the tree with the post-order sequencer, so every child is reduced
    before its parent and deep trees never hit the recursion limit.
    """
    root = tree.root
    if root is None or root not in tree:
        raise IncompleteExpressionError("Empty expression")

    results: Dict[NodeIndex, Number] = {}

    for index in tree.postorder():
        node = tree.get(index)
        if node is None:
            continue
        expr = node.value

        if expr.is_value():
            results[index] = parse_literal(expr)
        elif expr.is_operator():
            lhs = _operand(results, node.left, node)
            rhs = _operand(results, node.right, node)
            results[index] = apply_operator(expr, lhs, rhs)
        else:
            # a group is worth its content; open and closed alike
            if node.left is None:
                raise IncompleteExpressionError("Empty parentheses", expr)
            results[index] = _operand(results, node.left, node)

    return results[root]


def _operand(results: Dict[NodeIndex, Number], index: Optional[NodeIndex],
             parent: TreeNode[ExprNode]) -> Number:
    if index is None or index not in results:
        raise IncompleteExpressionError(
            f"Missing operand for '{parent.value.text}'", parent.value
        )
    return results[index]
