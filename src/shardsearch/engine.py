# shardsearch/engine.py
from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

from . import config as CFG
from .cluster import ClusterEngine
from .leaf import LeafIndex
from .loader import iter_documents
from .maintainer import TrieMaintainer
from .models import Postings, TreeStats

log = logging.getLogger(__name__)


# /* ~~~ level factories: the shard tree is plain composition ~~~ */

def make_shard_cluster(
    *,
    fan_out: int = CFG.SHARD_SIZE,
    leaf_capacity: int = CFG.LEAF_CAPACITY,
    executor: Optional[Executor] = None,
    maintainer: Optional[TrieMaintainer] = None,
    whole_words: bool = CFG.WHOLE_WORDS,
) -> ClusterEngine[LeafIndex]:
    """Shard level: a cluster of leaf indexes."""
    return ClusterEngine(
        lambda: LeafIndex(maintainer=maintainer, whole_words=whole_words),
        capacity=leaf_capacity,
        fan_out=fan_out,
        executor=executor,
        salt=CFG.SHARD_SALT,
    )


def make_node_cluster(
    *,
    fan_out: int = CFG.NODE_SIZE,
    shard_capacity: int = CFG.NODE_CAPACITY,
    shard_fan_out: int = CFG.SHARD_SIZE,
    leaf_capacity: int = CFG.LEAF_CAPACITY,
    executor: Optional[Executor] = None,
    shard_executor: Optional[Executor] = None,
    maintainer: Optional[TrieMaintainer] = None,
    whole_words: bool = CFG.WHOLE_WORDS,
) -> ClusterEngine[ClusterEngine[LeafIndex]]:
    """Node level: a cluster of shard clusters."""
    def _shard() -> ClusterEngine[LeafIndex]:
        return make_shard_cluster(
            fan_out=shard_fan_out,
            leaf_capacity=leaf_capacity,
            executor=shard_executor,
            maintainer=maintainer,
            whole_words=whole_words,
        )
    return ClusterEngine(
        _shard, capacity=shard_capacity, fan_out=fan_out, executor=executor, salt=CFG.NODE_SALT
    )


def collect_stats(root: ClusterEngine) -> TreeStats:
    """Walk the tree; a leaf counts as frozen if it or any ancestor is frozen."""
    leaves = frozen = words = pending = 0
    stack: List[Tuple[object, bool]] = [(root, False)]
    while stack:
        entry, is_frozen = stack.pop()
        if isinstance(entry, LeafIndex):
            leaves += 1
            frozen += int(is_frozen)
            words += entry.size()
            pending += entry.pending_count()
            continue
        stack.extend((child, is_frozen) for child in entry.active_entries())
        stack.extend((child, True) for child in entry.frozen_entries())
    return TreeStats(leaves=leaves, frozen_leaves=frozen, words=words, pending=pending)


class Engine:
    """
    Thin orchestration layer that glues together:
      - the shard tree (Node cluster -> Shard clusters -> Leaf indexes),
      - one fan-out pool per cluster level,
      - the trie maintainer (only when async rebuild is enabled).

    Public API (used by the CLI):
      * add_document(name, text)
      * search(word)          -> {document: count}
      * suggest(prefix, limit)-> [word, ...]
      * ingest(roots)         -> number of documents added
      * flush()               -> wait for background rebuilds
      * stats()               -> TreeStats
      * shutdown()            -> release pools and maintainer
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        *,
        node_size: int = CFG.NODE_SIZE,
        shard_size: int = CFG.SHARD_SIZE,
        leaf_capacity: int = CFG.LEAF_CAPACITY,
        node_capacity: int = CFG.NODE_CAPACITY,
        workers: int = CFG.WORKERS,
        async_rebuild: bool = CFG.ASYNC_REBUILD,
        whole_words: bool = CFG.WHOLE_WORDS,
        verbose: bool = CFG.VERBOSE,
    ) -> None:
        if verbose:
            logging.basicConfig(level=logging.INFO)
            os.environ["SHARDSEARCH_VERBOSE"] = "1"

        self._node_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="node-fanout")
        self._shard_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="shard-fanout")
        self.maintainer: Optional[TrieMaintainer] = TrieMaintainer(workers) if async_rebuild else None

        self.root: Optional[ClusterEngine] = make_node_cluster(
            fan_out=node_size,
            shard_capacity=node_capacity,
            shard_fan_out=shard_size,
            leaf_capacity=leaf_capacity,
            executor=self._node_pool,
            shard_executor=self._shard_pool,
            maintainer=self.maintainer,
            whole_words=whole_words,
        )
        log.info(
            "Engine ready: node_size=%d shard_size=%d leaf_capacity=%d async_rebuild=%s",
            node_size, shard_size, leaf_capacity, async_rebuild,
        )

    # ------------- write -------------

    def add_document(self, name: str, text: str) -> bool:
        return self._tree().add_document(name, text)

    def ingest(self, roots: Iterable[str]) -> int:
        roots = list(roots)
        if not roots:
            raise ValueError("ingest(): at least one root folder is required")
        log.info("Loading documents from %s", roots)
        n = 0
        for name, text in iter_documents(roots):
            if self.add_document(name, text):
                n += 1
        log.info("Ingested %d documents", n)
        return n

    # ------------- query -------------

    def search(self, word: str) -> Postings:
        return self._tree().search_documents(word)

    def suggest(self, prefix: str, limit: int = CFG.SUGGEST_LIMIT) -> List[str]:
        return self._tree().suggest(prefix, limit)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until background rebuilds finish. Always True in inline mode."""
        if self.maintainer is None:
            return True
        return self.maintainer.drain(timeout)

    def stats(self) -> TreeStats:
        return collect_stats(self._tree())

    # ------------- teardown -------------

    def shutdown(self) -> None:
        try:
            if self.maintainer is not None:
                self.maintainer.shutdown()
            if self.root is not None:
                self.root.close()
        finally:
            self._node_pool.shutdown(wait=True, cancel_futures=True)
            self._shard_pool.shutdown(wait=True, cancel_futures=True)
            self.root = None
            log.info("Engine shutdown complete")

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # ------------- internals -------------

    def _tree(self) -> ClusterEngine:
        if self.root is None:
            raise RuntimeError("Engine is shut down")
        return self.root
