"""
Folder loader for Engine.ingest().

Each root is walked with os.scandir, files are read on a thread pool and
every file becomes one document. Document names are the file's path
relative to its root, prefixed with the root's folder name, e.g.
``Archive/python-3.8.4-docs-text/about.txt``. Roots whose folder names
collide get a numbered label (``docs``, ``docs~2``) so their documents stay
apart.
"""

from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Optional, Set, Tuple

from . import config as CFG

log = logging.getLogger(__name__)

__all__ = ["SourceFile", "fast_walk", "parallel_read", "iter_documents"]


class SourceFile(NamedTuple):
    path: str   # absolute or root-joined path on disk
    name: str   # document name handed to the index


def _wanted(filename: str, exts: Optional[Set[str]]) -> bool:
    return exts is None or os.path.splitext(filename)[1].lower() in exts


def fast_walk(
    root: str | Path,
    include_exts: Optional[Iterable[str]] = None,
    exclude_dirs: Optional[Iterable[str]] = None,
    label: Optional[str] = None,
) -> List[SourceFile]:
    """Every matching file under root, sorted by document name."""
    base = Path(root)
    if not base.is_dir():
        raise FileNotFoundError(base)

    exts = {e.lower() if e.startswith(".") else "." + e.lower() for e in include_exts} if include_exts else None
    skip = {d.lower() for d in (exclude_dirs or CFG.EXCLUDE_DIRS)}
    prefix = label or base.name

    found: List[SourceFile] = []
    todo: List[Tuple[str, str]] = [(str(base), "")]   # (dir on disk, relative prefix)
    while todo:
        folder, rel = todo.pop()
        try:
            with os.scandir(folder) as it:
                entries = list(it)
        except PermissionError:
            continue
        for entry in entries:
            rel_name = f"{rel}{entry.name}"
            if entry.is_dir(follow_symlinks=False):
                if entry.name.lower() not in skip:
                    todo.append((entry.path, rel_name + "/"))
            elif entry.is_file(follow_symlinks=False) and _wanted(entry.name, exts):
                found.append(SourceFile(entry.path, f"{prefix}/{rel_name}"))

    found.sort(key=lambda f: f.name)
    return found


def _load(src: SourceFile) -> Tuple[str, str]:
    data = Path(src.path).read_bytes()
    try:
        return src.name, data.decode(CFG.ENCODING)
    except UnicodeDecodeError:
        return src.name, data.decode("latin-1", errors="ignore")


def parallel_read(files: List[SourceFile], workers: Optional[int] = None) -> Iterator[Tuple[str, str]]:
    """Yield (document_name, text) in input order; files are read on a thread pool."""
    if not files:
        return
    with ThreadPoolExecutor(max_workers=workers or CFG.WORKERS * 2, thread_name_prefix="loader") as ex:
        yield from ex.map(_load, files, chunksize=64)


def iter_documents(roots: Iterable[str | Path]) -> Iterator[Tuple[str, str]]:
    labels: Set[str] = set()
    for root in roots:
        name = label = Path(root).name
        n = 1
        while label in labels:
            n += 1
            label = f"{name}~{n}"
        labels.add(label)
        if label != name:
            log.warning("Root %s shares its folder name; its documents are labelled %r", root, label)
        yield from parallel_read(fast_walk(root, include_exts=CFG.INCLUDE_EXTS, label=label))
