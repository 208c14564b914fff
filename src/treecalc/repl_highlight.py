"""prompt_toolkit lexer for live expression highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .evaluator import LITERAL_RE
from .lexer import lex
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "number": "ansimagenta",
    "operator": "bold",
    "punctuation": "ansicyan",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.VALUE: "number",
    TT.OPERATOR: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
}


def _token_group(tok: Tok, depth: int) -> str:
    if tok.type == TT.VALUE and not LITERAL_RE.fullmatch(tok.value):
        return "error"
    if tok.type == TT.RPAR and depth <= 0:
        return "error"
    return _TT_GROUP.get(tok.type, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    result: StyleAndTextTuples = []
    pos = 0
    depth = 0

    for tok in lex(text):
        # Unstyled gap (spaces) before token.
        if tok.start > pos:
            result.append(("", text[pos:tok.start]))

        style = GROUP_STYLE.get(_token_group(tok, depth), "")
        result.append((style, text[tok.start:tok.end]))
        pos = tok.end

        if tok.type == TT.LPAR:
            depth += 1
        elif tok.type == TT.RPAR:
            depth = max(depth - 1, 0)

    # Trailing spaces.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class CalcLexer(Lexer):
    """prompt_toolkit Lexer that highlights expressions using the calculator lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
