from __future__ import annotations
from typing import List


def fold(text: str) -> str:
    """Case-insensitive form used for both indexing and querying."""
    return text.casefold()


def tokenize(text: str) -> List[str]:
    """
    Split text into indexable words.
    Rules:
      * case-insensitive: words are casefolded
      * words are maximal runs of non-whitespace; punctuation stays attached
      * runs of whitespace never produce empty words
    """
    return fold(text).split()


def spans_whole_token(text: str, start: int, end: int) -> bool:
    """True if text[start:end] is bounded by whitespace or the string edges."""
    if start > 0 and not text[start - 1].isspace():
        return False
    if end < len(text) and not text[end].isspace():
        return False
    return True
