"""
Token Types for treecalc

Shared between lexer, builder and highlighter to avoid circular dependencies.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - also used as the kind tag of expression nodes"""

    VALUE = auto()
    OPERATOR = auto()
    LPAR = auto()
    RPAR = auto()


OPERATOR_CHARS = "+-*/"
TIGHT_OPERATORS = "*/"  # bind before + and -
LPAR_CHAR = "("
RPAR_CHAR = ")"


def classify(text: str) -> TT:
    """Kind of a token-text fragment as produced by the tokenizer"""
    if len(text) == 1:
        if text in OPERATOR_CHARS:
            return TT.OPERATOR
        if text == LPAR_CHAR:
            return TT.LPAR
        if text == RPAR_CHAR:
            return TT.RPAR
    return TT.VALUE


@dataclass(frozen=True)
class Tok:
    """Token with its span in the raw source"""

    type: TT
    value: str
    start: int = 0
    end: int = 0

    @property
    def column(self) -> int:
        return self.start + 1

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.start}:{self.end})"
