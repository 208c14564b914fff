"""
Lexer for treecalc expressions

Splits a raw expression into value, operator and parenthesis tokens.

Features:
- Single-pass tokenization
- Spaces are dropped before anything else is considered
- Unary minus folded into the following numeric literal
- Never fails: grammar checks belong to the builder
"""

from typing import List, Optional

from .token_types import LPAR_CHAR, OPERATOR_CHARS, RPAR_CHAR, TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Expression lexer.

    Value characters accumulate into a pending literal; every operator or
    parenthesis character flushes that literal and is emitted on its own.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: List[Tok] = []

        # Pending value literal and where it started in the source
        self.literal = ''
        self.literal_start: Optional[int] = None
        self.literal_end = 0

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_char()

        self.flush_literal()
        return self.tokens

    def scan_char(self):
        """Scan next character"""
        ch = self.peek()

        if ch == ' ':
            self.advance()
            return

        if ch in OPERATOR_CHARS:
            if ch == '-' and self.starts_negative_literal():
                self.append_literal(self.advance())
                return
            self.flush_literal()
            self.emit(TT.OPERATOR, self.advance())
            return

        if ch == LPAR_CHAR:
            self.flush_literal()
            self.emit(TT.LPAR, self.advance())
            return

        if ch == RPAR_CHAR:
            self.flush_literal()
            self.emit(TT.RPAR, self.advance())
            return

        # Digits, dots and anything unrecognised: part of a literal
        self.append_literal(self.advance())

    def starts_negative_literal(self) -> bool:
        """A '-' is unary at the very start or right after an operator or '('"""
        if self.literal:
            return False
        if not self.tokens:
            return True
        return self.tokens[-1].type in (TT.OPERATOR, TT.LPAR)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self) -> str:
        """Look at the current character"""
        if self.pos < len(self.source):
            return self.source[self.pos]
        return '\0'

    def advance(self) -> str:
        """Consume one character and return it"""
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def append_literal(self, ch: str):
        if self.literal_start is None:
            self.literal_start = self.pos - 1
        self.literal += ch
        self.literal_end = self.pos

    def flush_literal(self):
        """Emit the pending literal, if any"""
        if not self.literal:
            return
        start = self.literal_start if self.literal_start is not None else 0
        self.tokens.append(Tok(TT.VALUE, self.literal, start, self.literal_end))
        self.literal = ''
        self.literal_start = None

    def emit(self, token_type: TT, value: str):
        """Emit a single-character token ending at the current position"""
        self.tokens.append(Tok(token_type, value, self.pos - len(value), self.pos))


def lex(source: str) -> List[Tok]:
    """Tokenize source into typed tokens"""
    return Lexer(source).tokenize()


def tokenize(source: str) -> List[str]:
    """Tokenize source into token-text fragments"""
    return [tok.value for tok in lex(source)]
