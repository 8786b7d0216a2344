"""
Query interface over a VerseIndex.

Provides stable contracts for the presentation layer:
- suggest(): Prefix completions from the vocabulary
- search(): Case-insensitive substring search over verse text
- highlight() / match_spans(): Emphasis markup for a query in a verse
- get_verse(): Fetch one verse by ID
- get_front_matter(): Legal/disclaimer text

All functions are pure readers of the index; none of them mutate it.
No ranking is applied: results keep vocabulary or document order.
"""

import re
from bisect import bisect_left
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .schemas.index import VerseIndex
from .schemas.verse import Verse

SUGGESTION_LIMIT = 15
MIN_PREFIX_LENGTH = 2
SEARCH_LIMIT = 50

NO_MATCHES_MESSAGE = "No matches found."


class SearchResult(BaseModel):
    """
    Verses matching a query, in document order.

    ``truncated`` is True when the result hit the cap, meaning more
    matches may exist beyond the ones returned.
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., description="Query as entered")
    verses: tuple[Verse, ...] = Field(default=(), description="Matching verses")
    limit: int = Field(SEARCH_LIMIT, ge=1, description="Cap applied to the search")
    truncated: bool = Field(False, description="Whether the cap was reached")

    @property
    def count(self) -> int:
        return len(self.verses)

    @property
    def message(self) -> str:
        """User-facing summary of the result."""
        if not self.verses:
            return NO_MATCHES_MESSAGE
        if self.truncated:
            return (
                f"Showing the first {self.limit} matches. "
                "Refine your search to see more."
            )
        noun = "match" if self.count == 1 else "matches"
        return f"Found {self.count} {noun}."


def _query_pattern(query: str) -> re.Pattern:
    # Search and highlighting always match with the same pattern
    return re.compile(re.escape(query), re.IGNORECASE)


def suggest(
    index: VerseIndex,
    prefix: str,
    limit: int = SUGGESTION_LIMIT,
    min_prefix: int = MIN_PREFIX_LENGTH,
) -> list[str]:
    """
    Vocabulary words starting with ``prefix`` (case-insensitive).

    Args:
        index: VerseIndex to read
        prefix: Partial word as typed
        limit: Maximum number of suggestions
        min_prefix: Shorter prefixes return no suggestions

    Returns:
        Up to ``limit`` words in vocabulary (lexicographic) order
    """
    if len(prefix) < min_prefix:
        return []

    needle = prefix.lower()
    vocabulary = index.vocabulary
    matches: list[str] = []

    # Words sharing a prefix form one contiguous run of the sorted vocabulary
    position = bisect_left(vocabulary, needle)
    while position < len(vocabulary) and len(matches) < limit:
        word = vocabulary[position]
        if not word.startswith(needle):
            break
        matches.append(word)
        position += 1

    return matches


def search(
    index: VerseIndex,
    query: str,
    limit: int = SEARCH_LIMIT,
) -> Optional[SearchResult]:
    """
    Case-insensitive substring search over verse text.

    References are not searched. Returns None without searching when
    the query is empty.

    Args:
        index: VerseIndex to read
        query: Substring to look for
        limit: Maximum number of verses returned

    Returns:
        SearchResult in document order, or None for an empty query
    """
    if not query:
        return None

    pattern = _query_pattern(query)
    matches: list[Verse] = []

    for verse in index.verses:
        if pattern.search(verse.text):
            matches.append(verse)
            if len(matches) == limit:
                break

    return SearchResult(
        query=query,
        verses=tuple(matches),
        limit=limit,
        truncated=len(matches) == limit,
    )


def match_spans(text: str, query: str) -> list[tuple[int, int]]:
    """
    (start, end) offsets of every case-insensitive occurrence of ``query``.

    The query is matched literally; regex metacharacters have no effect.
    """
    if not query:
        return []
    return [match.span() for match in _query_pattern(query).finditer(text)]


def highlight(
    text: str,
    query: str,
    open_tag: str = "<b>",
    close_tag: str = "</b>",
) -> str:
    """
    Wrap every occurrence of ``query`` in ``text`` with emphasis delimiters.

    The matched text keeps its original casing and every other character
    is left unchanged.

    Examples:
        >>> highlight("Wherefore I say unto you", "wherefore")
        '<b>Wherefore</b> I say unto you'

        >>> highlight("cost (a+b)", "(a+b)", "[", "]")
        'cost [(a+b)]'
    """
    parts: list[str] = []
    cursor = 0
    for start, end in match_spans(text, query):
        parts.append(text[cursor:start])
        parts.append(f"{open_tag}{text[start:end]}{close_tag}")
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def get_verse(index: VerseIndex, verse_id: int) -> Optional[Verse]:
    """
    Fetch a verse by ID.

    IDs are assigned sequentially during ingestion, so the ID is
    also the verse's position.
    """
    if 0 <= verse_id < len(index.verses):
        verse = index.verses[verse_id]
        if verse.id == verse_id:
            return verse
    # Fall back to a scan for indexes built with non-positional IDs
    for verse in index.verses:
        if verse.id == verse_id:
            return verse
    return None


def get_front_matter(index: VerseIndex) -> str:
    """Legal/disclaimer text, for on-demand display only."""
    return index.front_matter
