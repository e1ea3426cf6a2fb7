"""
Generic sharding and fan-out engine.

A ClusterEngine holds a set of child entries, each satisfying the
SearchEntry contract. Children are either leaf indexes or other cluster
engines, so the same class builds every level of the shard tree; the only
per-level difference is the factory that creates children.

Writes are routed by a stable hash of the document name onto one of the
active slots. When the child in that slot is full it is frozen (kept for
reads only) and replaced by a fresh child before the write lands. Reads are
broadcast to every active and frozen child on a thread pool and the partial
results are merged.
"""

from __future__ import annotations
import logging
import threading
import hashlib
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from . import config as CFG
from .aggregate import SuggestionSet, merge_postings
from .models import Postings, SearchEntry

log = logging.getLogger(__name__)

E = TypeVar("E", bound=SearchEntry)


def slot_for(name: str, slots: int, salt: bytes = b"") -> int:
    """
    Stable shard slot for a document name (same across processes).

    Levels of the tree pass different salts so that the slot picked at one
    level says nothing about the slot picked at the next.
    """
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8, salt=salt).digest()
    return int.from_bytes(digest, "big") % max(slots, 1)


class ClusterEngine(Generic[E]):
    """
    One level of the shard tree.

    Parameters
    ----------
    factory : Callable[[], E]
        Creates a fresh child entry.
    capacity : int
        A child whose size() reaches this value is frozen before the next
        write to its slot.
    fan_out : int
        Slots pre-populated at construction. With 0, slot 0 is created on the
        first write and the engine stays single-slot.
    executor : Executor, optional
        Pool used for read fan-out. Engines of the same level may share one.
        When omitted the engine creates and owns a pool of CFG.WORKERS threads.
    salt : bytes
        Routing salt for this level (at most 16 bytes).
    """

    def __init__(
        self,
        factory: Callable[[], E],
        *,
        capacity: int,
        fan_out: int = 0,
        executor: Optional[Executor] = None,
        salt: bytes = b"",
    ) -> None:
        if capacity <= 0:
            raise ValueError("ClusterEngine(): capacity must be positive")
        if len(salt) > hashlib.blake2b.SALT_SIZE:
            raise ValueError("ClusterEngine(): salt is limited to 16 bytes")
        self._factory = factory
        self.capacity = capacity
        self.salt = salt
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=CFG.WORKERS, thread_name_prefix="cluster-fanout"
        )

        self._lock = threading.Lock()
        self._slot_locks: Dict[int, threading.Lock] = {}  # serializes freeze + write per slot
        self.active: Dict[int, E] = {i: factory() for i in range(fan_out)}
        self.frozen: Dict[int, List[E]] = {}

    # ------------- write -------------

    def add_document(self, name: str, text: str) -> bool:
        if not name:
            raise ValueError("add_document(): document name is required")

        with self._lock:
            slot = slot_for(name, len(self.active), self.salt)
            slot_lock = self._slot_locks.setdefault(slot, threading.Lock())

        # a frozen child is never written to: it can only be frozen by the
        # holder of its slot lock, and only between two writes
        with slot_lock:
            with self._lock:
                entry = self.active.get(slot)
                if entry is None:
                    entry = self.active[slot] = self._factory()
                elif entry.size() >= self.capacity:
                    self.frozen.setdefault(slot, []).append(entry)
                    entry = self.active[slot] = self._factory()
                    log.info("Froze entry in slot %d (%d frozen in slot)", slot, len(self.frozen[slot]))
            return entry.add_document(name, text)

    # ------------- read -------------

    def search_documents(self, word: str) -> Postings:
        if not word:
            raise ValueError("search_documents(): query word is required")

        futures = [self._executor.submit(e.search_documents, word) for e in self.entries()]
        parts: List[Postings] = []
        for fut in futures:
            try:
                parts.append(fut.result())
            except Exception as exc:
                log.warning("Shard search failed for %r: %r", word, exc)
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

        stop = threading.Event()

        def _stopped() -> bool:
            return stop.is_set() or (cancel is not None and cancel.is_set())

        def _one(entry: E) -> List[str]:
            if _stopped():
                return []
            return entry.suggest(prefix, limit, cancel=stop)

        futures: List[Future] = [self._executor.submit(_one, e) for e in self.entries()]
        found = SuggestionSet(limit)
        try:
            for fut in futures:
                try:
                    words = self._await(fut, _stopped)
                except Exception as exc:
                    log.warning("Shard suggest failed for %r: %r", prefix, exc)
                    continue
                if words is None or found.add(words):
                    break
        finally:
            # remaining children: signal running ones, drop queued ones
            stop.set()
            for fut in futures:
                fut.cancel()
        return found.to_list()

    @staticmethod
    def _await(fut: Future, stopped: Callable[[], bool]) -> Optional[List[str]]:
        """Result of fut, or None once stopped() turns true while waiting."""
        while not stopped():
            try:
                return fut.result(timeout=CFG.CANCEL_POLL_INTERVAL)
            except FuturesTimeout:
                if fut.done():
                    raise
        return None

    def size(self) -> int:
        return len(self.active)

    # ------------- introspection -------------

    def entries(self) -> List[E]:
        """All children, active first then frozen, as a point-in-time list."""
        with self._lock:
            return list(self.active.values()) + self._frozen_locked()

    def active_entries(self) -> List[E]:
        with self._lock:
            return list(self.active.values())

    def frozen_entries(self) -> List[E]:
        with self._lock:
            return self._frozen_locked()

    def _frozen_locked(self) -> List[E]:
        return [e for slot in sorted(self.frozen) for e in self.frozen[slot]]

    def frozen_count(self) -> int:
        with self._lock:
            return sum(len(q) for q in self.frozen.values())

    # ------------- teardown -------------

    def close(self) -> None:
        """Close nested engines, then this engine's own pool (shared pools are left alone)."""
        for entry in self.entries():
            closer = getattr(entry, "close", None)
            if callable(closer):
                closer()
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)
