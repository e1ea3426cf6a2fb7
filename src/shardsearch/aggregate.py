"""
Result aggregation shared by leaf indexes and cluster engines.

Search results from different shards are merged by summing counts: the same
document may have postings in several leaves (an active one and the frozen
ones that came before it), and each of those contributes its own occurrences.
Suggestions are merged as an ordered, de-duplicated list capped at a limit.
"""

from __future__ import annotations
from collections import Counter
from typing import Iterable, List, Mapping

from .models import Postings


def merge_postings(parts: Iterable[Mapping[str, int]]) -> Postings:
    """
    Sum document counts across partial results.

    Example:
        >>> merge_postings([{"a": 1, "b": 2}, {"b": 3}])
        {'a': 1, 'b': 5}
    """
    total: Counter = Counter()
    for part in parts:
        total.update(part)
    return dict(total)


class SuggestionSet:
    """
    Insertion-ordered distinct suggestions with a hard cap.

    add() returns True once the cap is reached so callers can stop consuming
    further partial results.
    """
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._seen: dict[str, None] = {}

    def add(self, words: Iterable[str]) -> bool:
        for w in words:
            if self.full:
                break
            self._seen.setdefault(w, None)
        return self.full

    @property
    def full(self) -> bool:
        return len(self._seen) >= self.limit

    def to_list(self) -> List[str]:
        return list(self._seen)[: self.limit]
