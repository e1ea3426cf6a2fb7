from __future__ import annotations
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional, Protocol, Set

from . import config as CFG

log = logging.getLogger(__name__)


class Rebuildable(Protocol):
    def incorporate_pending(self) -> bool: ...


class TrieMaintainer:
    """
    Background runner for leaf autocomplete rebuilds.

    Lifecycle: start() -> schedule_rebuild()* -> drain() -> shutdown().
    start() is implicit on the first schedule_rebuild(). The object is also a
    context manager that shuts down on exit.

    A leaf that is already queued and not yet running is not queued again:
    the queued rebuild drains every word pending by the time it runs.
    """

    def __init__(self, workers: Optional[int] = None) -> None:
        self._workers = workers or CFG.WORKERS
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._queued: Set[int] = set()          # id(leaf) waiting for a worker
        self._futures: Set[Future] = set()
        self._closed = False

    # ------------- lifecycle -------------

    def start(self) -> None:
        with self._lock:
            self._start_locked()

    def _start_locked(self) -> None:
        if self._closed:
            raise RuntimeError("TrieMaintainer is shut down")
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._workers, thread_name_prefix="trie-rebuild"
            )
            log.info("Trie maintainer started with %d workers", self._workers)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for every scheduled rebuild. False if timeout expired first."""
        with self._lock:
            pending = set(self._futures)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, *, cancel_pending: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=cancel_pending)
        log.info("Trie maintainer shutdown complete")

    def __enter__(self) -> "TrieMaintainer":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # ------------- scheduling -------------

    def schedule_rebuild(self, leaf: Rebuildable) -> None:
        key = id(leaf)
        with self._lock:
            self._start_locked()
            if key in self._queued:
                return
            self._queued.add(key)
            fut = self._executor.submit(self._run, leaf, key)
            self._futures.add(fut)
        fut.add_done_callback(self._on_done)

    def _run(self, leaf: Rebuildable, key: int) -> bool:
        # once running, later writes must be able to queue another pass
        with self._lock:
            self._queued.discard(key)
        return leaf.incorporate_pending()

    def _on_done(self, fut: Future) -> None:
        with self._lock:
            self._futures.discard(fut)
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            log.error("Trie rebuild failed: %r", exc)

    @property
    def outstanding(self) -> int:
        with self._lock:
            return len(self._futures)
