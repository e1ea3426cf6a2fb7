# src/shardsearch/models.py
"""
Shared contracts and small data containers for the sharded index.

- SearchEntry: the capability set every node of the shard tree exposes.
  Leaf indexes and cluster engines both satisfy it, so a cluster can wrap
  either one without knowing which.
- Postings: the result shape of a search (document name -> occurrence count).
- TreeStats: a read-only summary of a shard tree, used by the facade and CLI.

No business logic lives here.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

Postings = Dict[str, int]


class SearchEntry(Protocol):
    def add_document(self, name: str, text: str) -> bool: ...
    def search_documents(self, word: str) -> Postings: ...
    def suggest(
        self,
        prefix: str,
        limit: int = 10,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[str]: ...
    def size(self) -> int: ...


@dataclass(frozen=True, slots=True)
class TreeStats:
    """
    Summary of one shard tree.

    Attributes
    ----------
    leaves : int
        Leaf indexes reachable from the root, active and frozen.
    frozen_leaves : int
        Leaf indexes that no longer accept writes.
    words : int
        Distinct words summed over all leaves. A word indexed by two leaves
        counts twice.
    pending : int
        Words queued but not yet incorporated into autocomplete structures.
    """
    leaves: int
    frozen_leaves: int
    words: int
    pending: int
