"""Arithmetic expression calculator built on an indexed expression tree."""

__all__ = [
    "builder",
    "evaluator",
    "history",
    "lexer",
    "lower",
    "runner",
    "token_types",
    "tree",
]
