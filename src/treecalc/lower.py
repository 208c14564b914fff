"""Conversions from the arena representation to nested trees and text.

``lower`` produces a ``lark.Tree`` so the usual ``pretty()`` output can be
used for inspecting what the builder produced.
"""
from __future__ import annotations

from typing import Dict, List, Union

from lark import Token, Tree as LarkTree

from .tree import NodeIndex, Tree
from .types import ExprNode

_OP_LABELS = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
}

MISSING = "?"

LarkNode = Union[LarkTree, Token]


def lower(tree: Tree[ExprNode]) -> LarkTree:
    """Nested lark tree for ``tree``; an empty tree lowers to ``expr`` with no children."""
    root = tree.root
    if root is None or root not in tree:
        return LarkTree("expr", [])

    lowered: Dict[NodeIndex, LarkNode] = {}

    for index in tree.postorder():
        node = tree.get(index)
        if node is None:
            continue
        expr = node.value
        kids: List[LarkNode] = [
            lowered[child] for child in (node.left, node.right)
            if child is not None and child in lowered
        ]

        if expr.is_value():
            lowered[index] = Token("NUMBER", expr.text)
        elif expr.is_operator():
            lowered[index] = LarkTree(_OP_LABELS.get(expr.text, "op"), kids)
        elif expr.is_close_paren():
            lowered[index] = LarkTree("group", kids)
        else:
            lowered[index] = LarkTree("open_group", kids)

    return LarkTree("expr", [lowered[root]])


def pretty(tree: Tree[ExprNode]) -> str:
    return lower(tree).pretty()


def to_infix(tree: Tree[ExprNode]) -> str:
    """Normalised source text for ``tree``; missing operands show as ``?``."""
    root = tree.root
    if root is None or root not in tree:
        return ""

    rendered: Dict[NodeIndex, str] = {}

    for index in tree.postorder():
        node = tree.get(index)
        if node is None:
            continue
        expr = node.value
        left = rendered.get(node.left, MISSING) if node.left is not None else MISSING
        right = rendered.get(node.right, MISSING) if node.right is not None else MISSING

        if expr.is_value():
            rendered[index] = expr.text
        elif expr.is_operator():
            rendered[index] = f"{left} {expr.text} {right}"
        elif expr.is_close_paren():
            rendered[index] = f"({left if node.left is not None else ''})"
        else:
            rendered[index] = f"({left if node.left is not None else ''}"

    return rendered[root]


def postorder_texts(tree: Tree[ExprNode]) -> List[str]:
    """Literal text of every node, in post-order"""
    texts = []
    for index in tree.postorder():
        node = tree.get(index)
        if node is None:
            continue
        texts.append(node.value.text)
    return texts
