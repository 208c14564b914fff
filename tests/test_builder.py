from __future__ import annotations

from typing import List

import pytest

from treecalc.builder import Builder, InternalBuildError, build
from treecalc.lower import postorder_texts
from tests.support.harness import (
    TT,
    BuildError,
    Case,
    ConsecutiveOperatorsError,
    ConsecutiveValuesError,
    LeadingOperatorError,
    MalformedExpressionError,
    OpenParenAfterCloseParenError,
    OpenParenAfterValueError,
    OperatorAfterOpenParenError,
    UnmatchedCloseParenError,
    ValueAfterCloseParenError,
    build_source,
    check_links,
    lex,
    postorder_of,
    root_kind,
    tokenize,
)

POSTORDER_CASES: List[Case] = [
    Case("single-value", "42", ("42",)),
    Case("add", "123 + 456", ("123", "456", "+")),
    Case("mul-binds-tighter", "123 + 456 * 789", ("123", "456", "789", "*", "+")),
    Case("mixed-chain", "1 + 2 * 3 + 4", ("1", "2", "3", "*", "+", "4", "+")),
    Case("mul-chain", "1 * 2 * 3 * 4", ("1", "2", "3", "4", "*", "*", "*")),
    Case(
        "groups",
        "(1+2) + (3+4)*5",
        ("1", "2", "+", ")", "3", "4", "+", ")", "5", "*", "+"),
    ),
    Case("sub-left-assoc", "1 - 2 - 3", ("1", "2", "-", "3", "-")),
    Case("mul-then-sub", "2 * 3 - 1", ("2", "3", "*", "1", "-")),
    Case("group-times-value", "(1+2)*3", ("1", "2", "+", ")", "3", "*")),
    Case("value-times-group", "3*(1+2)", ("3", "1", "2", "+", ")", "*")),
    Case("nested-groups", "((1))", ("1", ")", ")")),
    Case("negative-literals", "-1 - -2", ("-1", "-2", "-")),
    Case("plus-inside-group-stays", "2*(1+3*4)", ("2", "1", "3", "4", "*", "+", ")", "*")),
    Case("group-after-plus", "1 + (2)", ("1", "2", ")", "+")),
    Case("division-chain", "8 / 4 / 2", ("8", "4", "2", "/", "/")),
    Case("plus-after-group-in-group", "((1+2)+3)", ("1", "2", "+", ")", "3", "+", ")")),
]


@pytest.mark.parametrize("case", POSTORDER_CASES, ids=lambda case: case.name)
def test_postorder_sequences(case: Case) -> None:
    assert postorder_of(case.source) == list(case.postorder)


@pytest.mark.parametrize("case", POSTORDER_CASES, ids=lambda case: case.name)
def test_built_trees_keep_links_consistent(case: Case) -> None:
    check_links(build_source(case.source))


@pytest.mark.parametrize("case", POSTORDER_CASES, ids=lambda case: case.name)
def test_postorder_covers_every_token(case: Case) -> None:
    tree = build_source(case.source)
    first = list(tree.postorder())
    second = list(tree.postorder())
    assert len(first) == len(tokenize(case.source)) - case.source.count(")")
    assert first == second


def test_node_count_matches_tokens_without_close_parens() -> None:
    source = "(1+2)*(3-4)"
    tree = build_source(source)
    # closing parens retag their open node instead of adding one
    assert len(tree) == len(tokenize(source)) - 2
    assert len(postorder_texts(tree)) == len(tree)


def test_empty_input_builds_empty_tree() -> None:
    tree = build([])
    assert tree.root is None
    assert len(tree) == 0
    assert list(tree.postorder()) == []


def test_accepts_plain_fragments() -> None:
    tree = build(["1", "+", "2", "*", "3"])
    assert postorder_texts(tree) == ["1", "2", "3", "*", "+"]


def test_close_paren_retags_open_node_in_place() -> None:
    builder = Builder(lex("(1+2"))
    tree = builder.build()
    root = tree.root
    assert root is not None
    assert root_kind(tree) is TT.LPAR
    children_before = (tree.get(root).left, tree.get(root).right)  # type: ignore[union-attr]

    closed = Builder(lex("(1+2)")).build()
    assert closed.root == root
    node = closed.get(root)
    assert node is not None
    assert node.value.kind is TT.RPAR
    assert node.value.text == ")"
    assert (node.left, node.right) == children_before


def test_unclosed_group_is_not_an_error() -> None:
    tree = build_source("(1+2")
    assert root_kind(tree) is TT.LPAR
    assert postorder_texts(tree) == ["1", "2", "+", "("]


def test_trailing_operator_is_not_an_error() -> None:
    tree = build_source("1+")
    assert root_kind(tree) is TT.OPERATOR
    root = tree.get(tree.root)  # type: ignore[arg-type]
    assert root is not None and root.right is None


def test_empty_group_builds() -> None:
    tree = build_source("()")
    assert root_kind(tree) is TT.RPAR
    assert len(tree) == 1


ERROR_CASES = [
    pytest.param("1++2", ConsecutiveOperatorsError, id="double-plus"),
    pytest.param("1*/2", ConsecutiveOperatorsError, id="star-slash"),
    pytest.param("1 2", None, id="spaces-join-not-error"),
    pytest.param("+1", LeadingOperatorError, id="leading-plus"),
    pytest.param("*", LeadingOperatorError, id="lone-star"),
    pytest.param("(+1)", OperatorAfterOpenParenError, id="op-after-open"),
    pytest.param("(*2)", OperatorAfterOpenParenError, id="star-after-open"),
    pytest.param("(1)2", ValueAfterCloseParenError, id="value-after-close"),
    pytest.param("(1)(2)", OpenParenAfterCloseParenError, id="open-after-close"),
    pytest.param("2(3)", OpenParenAfterValueError, id="open-after-value"),
    pytest.param("-(1)", OpenParenAfterValueError, id="bare-minus-before-group"),
    pytest.param(")", UnmatchedCloseParenError, id="lone-close"),
    pytest.param("1)", UnmatchedCloseParenError, id="close-without-open"),
    pytest.param("(1))", UnmatchedCloseParenError, id="extra-close"),
    pytest.param("(1+)", MalformedExpressionError, id="close-after-operator"),
    pytest.param("--1", None, id="bare-minus-literal-builds"),
]


@pytest.mark.parametrize("source, exc", ERROR_CASES)
def test_build_errors(source: str, exc) -> None:
    if exc is None:
        build_source(source)
        return

    with pytest.raises(exc) as exc_info:
        build_source(source)

    assert isinstance(exc_info.value, BuildError)
    assert exc_info.value.token is not None


def test_consecutive_values_from_fragments() -> None:
    with pytest.raises(ConsecutiveValuesError):
        build(["1", "2"])


def test_error_message_names_token_and_column() -> None:
    with pytest.raises(ConsecutiveOperatorsError) as exc_info:
        build_source("12 ++ 3")

    err = exc_info.value
    assert err.kind == "two-consecutive-operators"
    assert err.token is not None
    assert err.token.column == 5
    assert "'+' at col 5" in str(err)


def test_error_kinds_are_distinct() -> None:
    kinds = {
        cls.kind
        for cls in (
            ConsecutiveValuesError,
            ConsecutiveOperatorsError,
            LeadingOperatorError,
            OperatorAfterOpenParenError,
            ValueAfterCloseParenError,
            OpenParenAfterCloseParenError,
            OpenParenAfterValueError,
            MalformedExpressionError,
            UnmatchedCloseParenError,
            InternalBuildError,
        )
    }
    assert len(kinds) == 10


def test_builders_do_not_share_state() -> None:
    first = build_source("1+2")
    second = build_source("3")
    assert postorder_texts(first) == ["1", "2", "+"]
    assert postorder_texts(second) == ["3"]
