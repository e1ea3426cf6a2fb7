import logging

from shardsearch.cluster import ClusterEngine


class _Fixed:
    def __init__(self, hits=None, words=None):
        self.hits = hits or {}
        self.words = words or []
        self.calls = 0

    def add_document(self, name, text):
        return True

    def search_documents(self, word):
        self.calls += 1
        return dict(self.hits)

    def suggest(self, prefix, limit=10, *, cancel=None):
        return list(self.words)[:limit]

    def size(self):
        return 0


class _Broken(_Fixed):
    def search_documents(self, word):
        raise RuntimeError("disk on fire")

    def suggest(self, prefix, limit=10, *, cancel=None):
        raise RuntimeError("disk on fire")


def _engine(*children):
    it = iter(children)
    return ClusterEngine(lambda: next(it), capacity=10, fan_out=len(children))


def test_counts_from_children_are_summed():
    eng = _engine(_Fixed({"doc1": 2, "doc2": 1}), _Fixed({"doc1": 3}))
    try:
        assert eng.search_documents("q") == {"doc1": 5, "doc2": 1}
    finally:
        eng.close()


def test_failing_child_degrades_search_instead_of_failing_it(caplog):
    eng = _engine(_Broken(), _Fixed({"doc1": 1}))
    try:
        with caplog.at_level(logging.WARNING, logger="shardsearch.cluster"):
            assert eng.search_documents("q") == {"doc1": 1}
        assert "Shard search failed" in caplog.text
    finally:
        eng.close()


def test_failing_child_is_skipped_by_suggest(caplog):
    eng = _engine(_Broken(), _Fixed(words=["alpha", "alps"]))
    try:
        with caplog.at_level(logging.WARNING, logger="shardsearch.cluster"):
            assert eng.suggest("al", 10) == ["alpha", "alps"]
        assert "Shard suggest failed" in caplog.text
    finally:
        eng.close()


def test_invalid_query_is_rejected_before_fan_out():
    child = _Fixed({"doc1": 1})
    eng = _engine(child)
    try:
        try:
            eng.search_documents("")
        except ValueError:
            pass
        else:
            raise AssertionError("expected ValueError")
        assert child.calls == 0
    finally:
        eng.close()


def test_suggest_deduplicates_and_respects_limit():
    eng = _engine(_Fixed(words=["ab", "ac"]), _Fixed(words=["ac", "ad", "ae"]))
    try:
        assert eng.suggest("a", 10) == ["ab", "ac", "ad", "ae"]
        assert eng.suggest("a", 3) == ["ab", "ac", "ad"]
        assert eng.suggest("a") == ["ab", "ac", "ad", "ae"]
        assert eng.suggest("", 10) == []
    finally:
        eng.close()
