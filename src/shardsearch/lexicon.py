from __future__ import annotations
import bisect
import threading
from typing import Iterator, List


class Lexicon:
    """
    Sorted set of words supporting prefix scans.
    Insert-time: bisect.insort into a plain sorted list (duplicates ignored).
    Query-time: bisect_left finds the start of the prefix range, so a scan
    costs O(log n + limit) and yields keys in lexicographic order.
    Also exposes iter_items() for exporting to snapshot formats.
    """
    def __init__(self) -> None:
        self._keys: List[str] = []
        self._lock = threading.Lock()

    # -------- Build-time API --------
    def insert(self, key: str) -> bool:
        with self._lock:
            i = bisect.bisect_left(self._keys, key)
            if i != len(self._keys) and self._keys[i] == key:
                return False
            self._keys.insert(i, key)
            return True

    def __contains__(self, key: str) -> bool:
        with self._lock:
            i = bisect.bisect_left(self._keys, key)
            return i != len(self._keys) and self._keys[i] == key

    def __len__(self) -> int:
        return len(self._keys)

    # -------- Query --------
    def with_prefix(self, prefix: str, limit: int) -> List[str]:
        if limit <= 0:
            return []
        out: List[str] = []
        with self._lock:
            keys = self._keys
            i = bisect.bisect_left(keys, prefix)
            # keys sharing a prefix are contiguous from the insertion point
            while i < len(keys) and len(out) < limit and keys[i].startswith(prefix):
                out.append(keys[i])
                i += 1
        return out

    # -------- Export --------
    def keys(self) -> List[str]:
        """Copy of all keys in sorted order."""
        with self._lock:
            return list(self._keys)

    def iter_items(self) -> Iterator[str]:
        """Yield keys in sorted order from a point-in-time copy."""
        yield from self.keys()
