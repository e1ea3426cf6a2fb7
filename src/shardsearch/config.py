from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# /* ~~~ tree shape: Node level -> Shard level -> Leaf indexes ~~~ */
NODE_SIZE: int = _env_int("SHARDSEARCH_NODE_SIZE", 10)      # shards pre-populated per node
SHARD_SIZE: int = _env_int("SHARDSEARCH_SHARD_SIZE", 10)    # leaves pre-populated per shard

# per-level routing salts; a shared hash would pin node slot s to leaf slot s
NODE_SALT: bytes = b"node"
SHARD_SALT: bytes = b"shard"

# Freeze thresholds, compared against the child's size():
#  - a leaf reports distinct indexed words
#  - a shard reports its active leaf count (never above SHARD_SIZE)
LEAF_CAPACITY: int = _env_int("SHARDSEARCH_LEAF_CAPACITY", 100)
NODE_CAPACITY: int = _env_int("SHARDSEARCH_NODE_CAPACITY", 100)

# suggest() default limit
SUGGEST_LIMIT: int = 10

# how often a blocked suggest() fan-out re-checks its cancel signal (seconds)
CANCEL_POLL_INTERVAL: float = 0.05

# workers per fan-out level and for the trie maintainer
_cpu = os.cpu_count() or 4
WORKERS: int = _env_int("SHARDSEARCH_WORKERS", _cpu)

# rebuild autocomplete structures in the background instead of inline
ASYNC_REBUILD: bool = _env_flag("SHARDSEARCH_ASYNC_REBUILD")

# exact search: False -> any indexed word found inside the query,
#               True  -> only indexed words spanning whole query tokens
WHOLE_WORDS: bool = _env_flag("SHARDSEARCH_WHOLE_WORDS")

# loader
INCLUDE_EXTS = [".txt", ".md", ".csv", ".log"]
EXCLUDE_DIRS = {".git", ".hg", ".svn", ".idea", ".vscode", "node_modules", "__pycache__"}
ENCODING = "utf-8"

VERBOSE: bool = _env_flag("SHARDSEARCH_VERBOSE")  # Progress logging (set SHARDSEARCH_VERBOSE=1 to enable)
