from __future__ import annotations

import pytest

from treecalc.history import History
from treecalc.types import CalcResult
from treecalc.utils import DEFAULT_HISTORY_LIMIT


def _filled(count: int, limit: int = 100) -> History:
    history = History(limit=limit)
    for i in range(count):
        history.record(f"{i}+0", CalcResult(value=i))
    return history


def test_default_limit_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    assert History().limit == DEFAULT_HISTORY_LIMIT

    monkeypatch.setenv("TREECALC_HISTORY_LIMIT", "3")
    assert History().limit == 3

    monkeypatch.setenv("TREECALC_HISTORY_LIMIT", "lots")
    assert History().limit == DEFAULT_HISTORY_LIMIT

    monkeypatch.setenv("TREECALC_HISTORY_LIMIT", "0")
    assert History().limit == DEFAULT_HISTORY_LIMIT


def test_record_drops_oldest_over_limit() -> None:
    history = _filled(5, limit=3)
    assert len(history) == 3
    assert [entry.source for entry in history.entries] == ["2+0", "3+0", "4+0"]


def test_positions_count_back_from_newest() -> None:
    history = _filled(3)
    assert history.get(1).source == "2+0"  # type: ignore[union-attr]
    assert history.get(3).source == "0+0"  # type: ignore[union-attr]
    assert history.get(0) is None
    assert history.get(4) is None


def test_recent_newest_first() -> None:
    history = _filled(4)
    assert [(pos, entry.source) for pos, entry in history.recent(2)] == [(1, "3+0"), (2, "2+0")]
    assert len(history.recent(10)) == 4


def test_recall_input_or_result() -> None:
    history = History(limit=10)
    history.record("1/4", CalcResult(value=0.25))
    history.record("1/0", CalcResult(error="Math error: Division by zero"))

    assert history.recall(2) == "1/4"
    assert history.recall(2, result=True) == "0.25"
    assert history.recall(1, result=True) == "Math error: Division by zero"
    assert history.recall(3) is None


def test_entry_display() -> None:
    history = History(limit=10)
    entry = history.record("0.1+0.2", CalcResult(value=0.1 + 0.2))
    assert str(entry) == "0.1+0.2 = 0.3"


def test_clear() -> None:
    history = _filled(2)
    history.clear()
    assert len(history) == 0
    assert history.recall(1) is None
