from shardsearch.leaf import LeafIndex


def test_substring_mode_finds_indexed_words_inside_the_query():
    leaf = LeafIndex(whole_words=False)
    leaf.add_document("doc1", "hell")
    assert leaf.search_documents("hello") == {"doc1": 1}


def test_whole_word_mode_ignores_partial_matches():
    leaf = LeafIndex(whole_words=True)
    leaf.add_document("doc1", "hell")
    assert leaf.search_documents("hello") == {}
    assert leaf.search_documents("hell") == {"doc1": 1}


def test_multi_word_query_sums_counts_per_document():
    leaf = LeafIndex(whole_words=True)
    leaf.add_document("doc1", "spring boot")
    leaf.add_document("doc2", "spring")
    assert leaf.search_documents("spring boot") == {"doc1": 2, "doc2": 1}


def test_keyword_repeated_in_query_is_counted_once():
    leaf = LeafIndex()
    leaf.add_document("doc1", "echo")
    assert leaf.search_documents("echo echo") == {"doc1": 1}
