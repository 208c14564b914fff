from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from typing_extensions import TypeAlias

from .token_types import TT
from .utils import format_number

Number: TypeAlias = Union[int, float]

# ---------- Expression node payload ----------

@dataclass
class ExprNode:
    """Payload of an expression-tree node: kind tag plus source text.

    Mutable on purpose: an open group is retagged in place when it closes.
    """
    kind: TT
    text: str

    def is_value(self) -> bool:
        return self.kind is TT.VALUE

    def is_operator(self) -> bool:
        return self.kind is TT.OPERATOR

    def is_open_paren(self) -> bool:
        return self.kind is TT.LPAR

    def is_close_paren(self) -> bool:
        return self.kind is TT.RPAR

    def close(self, text: str) -> None:
        self.kind = TT.RPAR
        self.text = text

    def __repr__(self) -> str:
        return f"{self.kind.name}({self.text!r})"

# ---------- Calculation outcome ----------

@dataclass
class CalcResult:
    """Outcome of one submitted expression: a number or an error message."""
    value: Optional[Number] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def display(self) -> str:
        if self.error is not None:
            return self.error
        return format_number(self.value) if self.value is not None else ""

    def __repr__(self) -> str:
        return self.display()

# ---------- Exceptions ----------

class EvalError(Exception):
    """Failure while reducing a completed tree to a number."""
    def __init__(self, message: str, node: Optional[ExprNode] = None):
        super().__init__(message)
        self.node = node

class DivisionByZeroError(EvalError):
    def __init__(self, node: Optional[ExprNode] = None):
        super().__init__("Division by zero", node)

class LiteralError(EvalError):
    def __init__(self, text: str, node: Optional[ExprNode] = None):
        super().__init__(f"Invalid number literal '{text}'", node)
        self.text = text

class IncompleteExpressionError(EvalError):
    pass

class NumericOverflowError(EvalError):
    def __init__(self, node: Optional[ExprNode] = None):
        op = f" in '{node.text}'" if node is not None else ""
        super().__init__(f"Numeric overflow{op}", node)

class UnknownOperatorError(EvalError):
    def __init__(self, text: str, node: Optional[ExprNode] = None):
        super().__init__(f"Unknown operator '{text}'", node)
        self.text = text
