import pytest
from shardsearch.leaf import LeafIndex


@pytest.fixture
def leaf() -> LeafIndex:
    return LeafIndex()


def test_counts_repeated_words_in_one_document(leaf: LeafIndex):
    assert leaf.add_document("doc1", "hello world hello") is True
    assert leaf.search_documents("hello") == {"doc1": 2}


def test_word_shared_by_two_documents(leaf: LeafIndex):
    leaf.add_document("doc1", "java spring boot")
    leaf.add_document("doc2", "spring framework")
    assert leaf.search_documents("spring") == {"doc1": 1, "doc2": 1}


def test_unknown_word_returns_empty_mapping(leaf: LeafIndex):
    leaf.add_document("doc1", "java code index")
    assert leaf.search_documents("python") == {}


def test_search_before_any_document_is_empty(leaf: LeafIndex):
    assert leaf.search_documents("anything") == {}


def test_re_adding_a_document_accumulates_counts(leaf: LeafIndex):
    leaf.add_document("doc1", "red green")
    leaf.add_document("doc1", "red blue red")
    assert leaf.search_documents("red") == {"doc1": 3}
    assert leaf.search_documents("green") == {"doc1": 1}


def test_search_is_case_insensitive(leaf: LeafIndex):
    leaf.add_document("doc1", "Hello HELLO hello")
    assert leaf.search_documents("HeLLo") == {"doc1": 3}


def test_whitespace_runs_do_not_index_empty_words(leaf: LeafIndex):
    leaf.add_document("doc1", "  alpha \t\n  beta  ")
    assert leaf.size() == 2


def test_missing_name_or_text_is_rejected(leaf: LeafIndex):
    assert leaf.add_document(None, "text") is False
    assert leaf.add_document("", "text") is False
    assert leaf.add_document("doc1", None) is False
    assert leaf.size() == 0


@pytest.mark.parametrize("query", ["", None])
def test_empty_query_raises(leaf: LeafIndex, query):
    leaf.add_document("doc1", "x")
    with pytest.raises(ValueError):
        leaf.search_documents(query)


def test_size_counts_distinct_words_not_documents(leaf: LeafIndex):
    leaf.add_document("d1", "foo bar baz")
    leaf.add_document("d2", "foo bar")
    assert leaf.size() == 3


def test_iter_postings_exports_sorted_copies(leaf: LeafIndex):
    leaf.add_document("d1", "b a b")
    items = list(leaf.iter_postings())
    assert items == [("a", {"d1": 1}), ("b", {"d1": 2})]
    items[0][1]["d1"] = 99
    assert leaf.search_documents("a") == {"d1": 1}
