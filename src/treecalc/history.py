from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .types import CalcResult
from .utils import history_limit


@dataclass
class HistoryEntry:
    source: str
    result: CalcResult

    def __str__(self) -> str:
        return f"{self.source} = {self.result.display()}"


class History:
    """Bounded list of past calculations, oldest first.

    Positions used by :meth:`get` and :meth:`recall` count back from the most
    recent entry, starting at 1.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit if limit is not None else history_limit()
        self.entries: List[HistoryEntry] = []

    def record(self, source: str, result: CalcResult) -> HistoryEntry:
        entry = HistoryEntry(source, result)
        self.entries.append(entry)
        overflow = len(self.entries) - self.limit
        if overflow > 0:
            del self.entries[:overflow]
        return entry

    def recent(self, count: int) -> List[Tuple[int, HistoryEntry]]:
        """Up to ``count`` latest entries with their positions, newest first."""
        out = []
        for pos, entry in enumerate(reversed(self.entries), start=1):
            if pos > count:
                break
            out.append((pos, entry))
        return out

    def get(self, position: int) -> Optional[HistoryEntry]:
        if position < 1 or position > len(self.entries):
            return None
        return self.entries[-position]

    def recall(self, position: int, result: bool = False) -> Optional[str]:
        """Text to put back on the prompt: the input, or the displayed result."""
        entry = self.get(position)
        if entry is None:
            return None
        if result:
            return entry.result.display()
        return entry.source

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)
