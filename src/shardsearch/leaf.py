"""
Leaf inverted index.

A leaf owns the postings for the words routed to it and two lookup
structures built from those words:

- an Aho-Corasick automaton (pyahocorasick) used by search_documents() to
  find every indexed word inside a query string in one pass;
- a sorted Lexicon used by suggest() for prefix lookups.

Postings are updated synchronously by add_document(). The lookup structures
catch up through incorporate_pending(), either inline at the end of the write
or later on a TrieMaintainer worker. The automaton is rebuilt from scratch and
published with a single attribute assignment, so readers always see a
complete snapshot.
"""

from __future__ import annotations
import logging
import threading
from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, Iterator, List, Optional, Tuple

import ahocorasick

from . import config as CFG
from .aggregate import merge_postings
from .lexicon import Lexicon
from .models import Postings
from .normalize import fold, spans_whole_token, tokenize

if TYPE_CHECKING:
    from .maintainer import TrieMaintainer

log = logging.getLogger(__name__)


class LeafIndex:
    """
    Terminal search entry of the shard tree.

    size() is the number of distinct words, which is what parent clusters
    compare against their capacity when deciding to freeze a leaf.
    """

    def __init__(
        self,
        *,
        maintainer: Optional["TrieMaintainer"] = None,
        whole_words: bool = CFG.WHOLE_WORDS,
    ) -> None:
        self._postings: Dict[str, Dict[str, int]] = {}
        self._postings_lock = threading.Lock()

        self._pending: Deque[str] = deque()
        self._lexicon = Lexicon()
        self._matcher: Optional[ahocorasick.Automaton] = None  # published snapshot
        self._rebuild_flag = threading.Lock()  # single-flight guard
        self._stale = False                    # lexicon ahead of _matcher

        self._maintainer = maintainer
        self._whole_words = whole_words

    # ---- Write ----
    def add_document(self, name: str, text: str) -> bool:
        if not name or text is None:
            return False

        words = tokenize(text)
        with self._postings_lock:
            for word in words:
                docs = self._postings.setdefault(word, {})
                docs[name] = docs.get(name, 0) + 1
        self._pending.extend(words)

        if self._maintainer is not None:
            self._maintainer.schedule_rebuild(self)
        else:
            self.incorporate_pending()
        return True

    # ---- Query ----
    def search_documents(self, word: str) -> Postings:
        if not word:
            raise ValueError("search_documents(): query word is required")

        matcher = self._matcher
        if matcher is None:
            return {}

        query = fold(word)
        matched = set()
        for end, keyword in matcher.iter(query):
            if self._whole_words:
                start = end - len(keyword) + 1
                if not spans_whole_token(query, start, end + 1):
                    continue
            matched.add(keyword)

        if not matched:
            return {}
        with self._postings_lock:
            parts = [dict(self._postings[k]) for k in matched if k in self._postings]
        return merge_postings(parts)

    def suggest(
        self,
        prefix: str,
        limit: int = CFG.SUGGEST_LIMIT,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[str]:
        if not prefix or limit <= 0:
            return []
        if cancel is not None and cancel.is_set():
            return []
        return self._lexicon.with_prefix(fold(prefix), limit)

    def size(self) -> int:
        return len(self._postings)

    # ---- Autocomplete maintenance ----
    def incorporate_pending(self) -> bool:
        """
        Move queued words into the lexicon and publish a fresh automaton.

        Returns False when another thread already holds the rebuild; that
        rebuild re-checks the queue after releasing, so nothing queued here
        is left behind.
        """
        ran = False
        while self._pending:
            if not self._rebuild_flag.acquire(blocking=False):
                return ran
            try:
                self._rebuild()
                ran = True
            finally:
                self._rebuild_flag.release()
        return True

    def _rebuild(self) -> None:
        # peek before pop: a failed insert leaves the word queued
        while self._pending:
            if self._lexicon.insert(self._pending[0]):
                self._stale = True
            self._pending.popleft()
        if not self._stale:
            return

        automaton = ahocorasick.Automaton()
        for word in self._lexicon.iter_items():
            automaton.add_word(word, word)
        automaton.make_automaton()
        self._matcher = automaton
        self._stale = False
        log.debug("published matcher with %d words", len(automaton))

    def pending_count(self) -> int:
        return len(self._pending)

    # ---- Snapshot export ----
    def iter_postings(self) -> Iterator[Tuple[str, Dict[str, int]]]:
        """Yield (word, {document: count}) copies in word order."""
        with self._postings_lock:
            items = [(w, dict(docs)) for w, docs in self._postings.items()]
        items.sort(key=lambda kv: kv[0])
        yield from items
