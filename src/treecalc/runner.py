from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

from .builder import BuildError, build
from .evaluator import evaluate
from .lexer import lex
from .lower import postorder_texts, pretty
from .tree import Tree
from .types import CalcResult, EvalError, ExprNode, Number
from .utils import configure_logging

logger = logging.getLogger(__name__)


def parse(src: str) -> Tree[ExprNode]:
    """Tokenize and build ``src``; raises BuildError on structural problems."""
    tokens = lex(src)
    logger.debug("tokens: %r", tokens)
    return build(tokens)


def run(src: str) -> Number:
    return evaluate(parse(src))


def error_result(exc: Union[BuildError, EvalError]) -> CalcResult:
    if isinstance(exc, BuildError):
        return CalcResult(error=f"Syntax error: {exc}")
    return CalcResult(error=f"Math error: {exc}")


def calculate(src: str) -> CalcResult:
    """Like :func:`run`, but failures come back as an error result."""
    try:
        return CalcResult(value=run(src))
    except (BuildError, EvalError) as exc:
        logger.debug("calculation failed for %r: %s", src, exc)
        return error_result(exc)


def _load_lines(arg: Optional[str]) -> List[str]:
    """
    Resolve CLI input into expressions, one per non-blank line.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as a literal expression.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
    else:
        candidate = Path(arg)
        if candidate.is_file():
            data = candidate.read_text(encoding="utf-8")
        else:
            data = arg

    return [line.strip() for line in data.splitlines() if line.strip()]


def report(src: str, show_tree: bool = False, show_postorder: bool = False) -> bool:
    """Print one expression's result (and inspections); True when it succeeded."""
    try:
        tree = parse(src)
        if show_tree:
            print(pretty(tree), end="")
        if show_postorder:
            print(" ".join(postorder_texts(tree)))
        result = CalcResult(value=evaluate(tree))
    except (BuildError, EvalError) as exc:
        logger.debug("calculation failed for %r: %s", src, exc)
        result = error_result(exc)

    print(f"{src} = {result.display()}")
    return result.ok


def main(argv: Optional[List[str]] = None) -> None:
    configure_logging()

    show_tree = False
    show_postorder = False
    arg = None

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--tree":
            show_tree = True
            continue

        if token == "--postorder":
            show_postorder = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    ok = True
    for line in _load_lines(arg):
        ok = report(line, show_tree=show_tree, show_postorder=show_postorder) and ok

    if not ok:
        raise SystemExit(1)

if __name__ == "__main__":
    main()
