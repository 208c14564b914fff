"""
Incremental expression-tree builder for treecalc

Turns a token stream into a binary expression tree in a single pass, without
an operator stack. Each token is attached relative to a cursor (the node most
recently placed) using local tree surgery:

- values and groups hang off the open side of the cursor
- ``*`` and ``/`` splice themselves directly above the cursor
- ``+`` and ``-`` climb to the root or to the nearest open group and splice
  themselves in there
- a closing paren retags its open paren node in place

Structure:
- BuildError hierarchy: one class per adjacency rule that can be violated
- Builder: the per-build state (arena + cursor) and placement rules
"""

import logging
from typing import Iterable, List, Optional, Union

from .token_types import TIGHT_OPERATORS, TT, Tok, classify
from .tree import ChildSide, NodeIndex, Tree, TreeNode
from .types import ExprNode

logger = logging.getLogger(__name__)

# ============================================================================
# Errors
# ============================================================================

class BuildError(Exception):
    """Structural error with the offending token"""
    kind = "build-error"

    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        super().__init__(
            f"{message}: '{token.value}' at col {token.column}" if token else message
        )

class ConsecutiveValuesError(BuildError):
    kind = "two-consecutive-values"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Two values in a row", token)

class ConsecutiveOperatorsError(BuildError):
    kind = "two-consecutive-operators"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Two operators in a row", token)

class LeadingOperatorError(BuildError):
    kind = "operator-cannot-lead"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Expression cannot begin with an operator", token)

class OperatorAfterOpenParenError(BuildError):
    kind = "operator-after-open-paren"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Operator cannot follow an open paren", token)

class ValueAfterCloseParenError(BuildError):
    kind = "value-after-close-paren"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Value cannot follow a close paren", token)

class OpenParenAfterCloseParenError(BuildError):
    kind = "open-paren-after-close-paren"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Open paren cannot follow a close paren", token)

class OpenParenAfterValueError(BuildError):
    kind = "open-paren-after-value"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Open paren cannot follow a value", token)

class MalformedExpressionError(BuildError):
    kind = "malformed-subexpression"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Incomplete sub-expression before this token", token)

class UnmatchedCloseParenError(BuildError):
    kind = "unmatched-close-paren"

    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Close paren without a matching open paren", token)

class InternalBuildError(BuildError):
    """Tree surgery failed in a way the placement rules should rule out"""
    kind = "internal"

# ============================================================================
# Builder
# ============================================================================

TokenLike = Union[Tok, str]


def _as_tokens(tokens: Iterable[TokenLike]) -> List[Tok]:
    """Accept typed tokens or bare fragments; fragments get running offsets"""
    out: List[Tok] = []
    offset = 0
    for tok in tokens:
        if not isinstance(tok, Tok):
            tok = Tok(classify(tok), tok, offset, offset + len(tok))
        out.append(tok)
        offset = tok.end
    return out


class Builder:
    """
    Single-use expression-tree builder.

    State is the arena being filled and the cursor; both belong to this
    instance only, so every build starts from a fresh Builder.
    """

    def __init__(self, tokens: Iterable[TokenLike]):
        self.tokens = _as_tokens(tokens)
        self.tree: Tree[ExprNode] = Tree()
        self.cursor: Optional[NodeIndex] = None

    # ========================================================================
    # Driver
    # ========================================================================

    def build(self) -> Tree[ExprNode]:
        """Place every token, return the finished tree"""
        for tok in self.tokens:
            if tok.type is TT.VALUE:
                self.place_value(tok)
            elif tok.type is TT.OPERATOR:
                self.place_operator(tok)
            elif tok.type is TT.LPAR:
                self.place_open_paren(tok)
            else:
                self.close_group(tok)

        # Trailing operators and unclosed groups are left as they are
        return self.tree

    # ========================================================================
    # Placement Rules
    # ========================================================================

    def place_value(self, tok: Tok):
        cursor = self.cursor
        if cursor is None:
            self.cursor = self.new_root(tok)
            return

        expr = self.payload(cursor, tok)

        if expr.is_value():
            raise ConsecutiveValuesError(tok)
        if expr.is_close_paren():
            raise ValueAfterCloseParenError(tok)

        if expr.is_operator():
            self.require_left(cursor, tok)
            side = ChildSide.RIGHT
        else:
            # first content of an open group
            side = ChildSide.LEFT

        index = self.new_node(tok)
        self.attach(cursor, index, side, tok)
        self.cursor = index

    def place_operator(self, tok: Tok):
        cursor = self.cursor
        if cursor is None:
            raise LeadingOperatorError(tok)

        expr = self.payload(cursor, tok)

        if expr.is_operator():
            raise ConsecutiveOperatorsError(tok)
        if expr.is_open_paren():
            raise OperatorAfterOpenParenError(tok)

        if tok.value in TIGHT_OPERATORS:
            anchor = cursor
        else:
            anchor = self.find_loose_anchor(cursor, tok)

        index = self.new_node(tok)

        if self.tree.is_root(anchor):
            logger.debug("%r replaces root %d", tok, anchor)
            ok = self.tree.replace_root_with(index, ChildSide.LEFT)
        else:
            logger.debug("%r inserted above node %d", tok, anchor)
            ok = self.tree.insert_above(anchor, index, ChildSide.LEFT)

        if not ok:
            raise InternalBuildError(f"Could not insert operator above node {anchor}", tok)

        # right side stays open for the next operand
        self.cursor = index

    def place_open_paren(self, tok: Tok):
        cursor = self.cursor
        if cursor is None:
            self.cursor = self.new_root(tok)
            return

        expr = self.payload(cursor, tok)

        if expr.is_value():
            raise OpenParenAfterValueError(tok)
        if expr.is_close_paren():
            raise OpenParenAfterCloseParenError(tok)

        if expr.is_operator():
            self.require_left(cursor, tok)
            side = ChildSide.RIGHT
        else:
            node = self.tree.get(cursor)
            if node is not None and node.has_left():
                raise InternalBuildError(f"Open paren node {cursor} already has content", tok)
            side = ChildSide.LEFT

        index = self.new_node(tok)
        self.attach(cursor, index, side, tok)
        self.cursor = index

    def close_group(self, tok: Tok):
        cursor = self.cursor
        if cursor is None:
            raise UnmatchedCloseParenError(tok)

        node = cursor
        while True:
            expr = self.payload(node, tok)
            if expr.is_open_paren():
                break
            if expr.is_operator() and self.tree.child_count(node) < 2:
                raise MalformedExpressionError(tok)

            parent = self.tree.parent_of(node)
            if parent is None:
                raise UnmatchedCloseParenError(tok)
            node = parent

        logger.debug("%r closes group at node %d", tok, node)
        expr.close(tok.value)
        self.cursor = node

    def find_loose_anchor(self, cursor: NodeIndex, tok: Tok) -> NodeIndex:
        """
        Climb from the cursor to where a + or - belongs.

        Stops at the root, or at the child directly below an open paren (the
        group's barrier). Operators passed on the way must be complete.
        """
        node = cursor
        while not self.tree.is_root(node):
            parent = self.tree.parent_of(node)
            if parent is None:
                raise InternalBuildError(f"Node {node} is detached from the tree", tok)

            parent_expr = self.payload(parent, tok)
            if parent_expr.is_open_paren():
                return node
            if parent_expr.is_operator() and self.tree.child_count(parent) < 2:
                raise MalformedExpressionError(tok)

            node = parent

        return node

    # ========================================================================
    # Arena Helpers
    # ========================================================================

    def new_node(self, tok: Tok) -> NodeIndex:
        return self.tree.add(TreeNode(ExprNode(tok.type, tok.value)))

    def new_root(self, tok: Tok) -> NodeIndex:
        index = self.new_node(tok)
        self.tree.set_root(index)
        logger.debug("%r starts the tree at node %d", tok, index)
        return index

    def payload(self, index: NodeIndex, tok: Tok) -> ExprNode:
        node = self.tree.get(index)
        if node is None:
            raise InternalBuildError(f"No node at index {index}", tok)
        return node.value

    def require_left(self, index: NodeIndex, tok: Tok):
        node = self.tree.get(index)
        if node is None or not node.has_left():
            raise InternalBuildError(f"Operator node {index} has no left operand", tok)

    def attach(self, parent: NodeIndex, child: NodeIndex, side: ChildSide, tok: Tok):
        if not self.tree.set_child(parent, child, side):
            raise InternalBuildError(f"Could not attach node {child} to node {parent}", tok)
        logger.debug("%r attached %s of node %d", tok, side.value, parent)


def build(tokens: Iterable[TokenLike]) -> Tree[ExprNode]:
    """Build an expression tree from tokens (or token-text fragments)"""
    return Builder(tokens).build()
