"""
Word tokenization for the suggestion vocabulary.

Only runs of ASCII letters count as words. Digits, punctuation and
non-ASCII characters are separators, so verse numbers never leak
into suggestions:

Examples:
    "Alma 5:12 Wherefore" -> ["alma", "wherefore"]
    "I, Nephi, having..."  -> ["nephi", "having"]
"""

import re
from typing import Iterable

from .schemas.verse import Verse

MIN_WORD_LENGTH = 3

WORD_PATTERN = re.compile(r"[a-z]+")


def word_tokenize(text: str, min_length: int = MIN_WORD_LENGTH) -> list[str]:
    """
    Tokenize text into lowercase letter runs.

    Examples:
        >>> word_tokenize("And it came to pass")
        ['and', 'came', 'pass']

        >>> word_tokenize("1 Nephi 3:7 -- I will go")
        ['nephi', 'will']
    """
    return [
        word
        for word in WORD_PATTERN.findall(text.lower())
        if len(word) >= min_length
    ]


def build_vocabulary(
    verses: Iterable[Verse],
    min_length: int = MIN_WORD_LENGTH,
) -> tuple[str, ...]:
    """
    Collect the sorted, distinct words of all verse texts.

    References are never tokenized; only ``Verse.text`` contributes.
    """
    words: set[str] = set()
    for verse in verses:
        words.update(word_tokenize(verse.text, min_length))
    return tuple(sorted(words))
