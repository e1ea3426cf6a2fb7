"""
Sharded Search Index Module

This module provides an in-process full-text index that spreads documents
over a tree of shards. Every leaf shard keeps word postings (document ->
occurrence count) plus a sorted lexicon for prefix autocomplete; queries fan
out across all active and frozen shards in parallel and the partial results
are merged.

The module is designed with a clean separation of concerns:
- Leaf indexing and autocomplete maintenance (leaf, lexicon, maintainer)
- Generic sharding and fan-out (cluster, aggregate)
- Wiring, lifecycle and corpus loading (engine, loader)
- Configuration management (config)

Main Classes:
    Engine: default Node -> Shard -> Leaf tree with owned worker pools
    ClusterEngine: one generic level of the shard tree
    LeafIndex: terminal inverted index
    TrieMaintainer: background autocomplete rebuilds

Example Usage:
    from shardsearch import Engine

    with Engine() as eng:
        eng.add_document("doc1", "hello world hello")
        eng.search("hello")        # {"doc1": 2}
        eng.suggest("wo")          # ["world"]
"""

# src/shardsearch/__init__.py
from .cluster import ClusterEngine
from .engine import Engine, make_node_cluster, make_shard_cluster
from .leaf import LeafIndex
from .maintainer import TrieMaintainer
from .models import SearchEntry, TreeStats

__version__ = "1.0.0"
__all__ = [
    "ClusterEngine",
    "Engine",
    "LeafIndex",
    "SearchEntry",
    "TreeStats",
    "TrieMaintainer",
    "make_node_cluster",
    "make_shard_cluster",
]
