import logging
from pathlib import Path

import pytest
from shardsearch.loader import fast_walk, iter_documents


def _tree(tmp: Path) -> Path:
    root = tmp / "Docs"; root.mkdir()
    (root / "b.txt").write_text("bee", encoding="utf-8")
    (root / "a.TXT").write_text("ay", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")
    git = root / ".git"; git.mkdir()
    (git / "HEAD.txt").write_text("ref", encoding="utf-8")
    deep = root / "sub" / "deeper"; deep.mkdir(parents=True)
    (deep / "c.md").write_bytes("caf\xe9".encode("latin-1"))
    return root


def test_walk_names_filters_and_sorts(tmp_path: Path):
    root = _tree(tmp_path)
    names = [f.name for f in fast_walk(root, include_exts=["txt", ".md"])]
    assert names == ["Docs/a.TXT", "Docs/b.txt", "Docs/sub/deeper/c.md"]


def test_iter_documents_falls_back_to_latin1(tmp_path: Path):
    root = _tree(tmp_path)
    docs = dict(iter_documents([root]))
    assert docs["Docs/sub/deeper/c.md"] == "café"
    assert docs["Docs/b.txt"] == "bee"
    assert not any(".git" in n for n in docs)


def test_walk_missing_root(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        fast_walk(tmp_path / "nope")


def test_roots_with_the_same_folder_name_stay_apart(tmp_path: Path, caplog):
    roots = []
    for parent in ("a", "b"):
        root = tmp_path / parent / "docs"; root.mkdir(parents=True)
        (root / "x.txt").write_text(f"from {parent}", encoding="utf-8")
        roots.append(root)

    with caplog.at_level(logging.WARNING, logger="shardsearch.loader"):
        docs = dict(iter_documents(roots))

    assert docs == {"docs/x.txt": "from a", "docs~2/x.txt": "from b"}
    assert "docs~2" in caplog.text
