"""
VerseIndex construction.

Chains splitting, normalization and tokenization into one
immutable VerseIndex. The index is only returned once every
step has finished, so callers never see a partial build.
"""

import logging

from .normalize import MIN_VERSE_LENGTH, normalize_fragments
from .schemas.index import VerseIndex
from .split_document import (
    FRONT_MATTER_LINES,
    FRONT_MATTER_MARKER,
    SPLIT_STRATEGY,
    SplitStrategy,
    segment_content,
    split_document,
)
from .tokenizers import MIN_WORD_LENGTH, build_vocabulary

logger = logging.getLogger(__name__)


def build_verse_index(
    raw: str,
    strategy: SplitStrategy = SPLIT_STRATEGY,
    marker: str = FRONT_MATTER_MARKER,
    line_count: int = FRONT_MATTER_LINES,
    min_verse_length: int = MIN_VERSE_LENGTH,
    min_word_length: int = MIN_WORD_LENGTH,
) -> VerseIndex:
    """
    Build a VerseIndex from raw document text.

    Args:
        raw: Full document text
        strategy: Front matter split strategy ("marker" or "line_count")
        marker: Marker string for the marker strategy
        line_count: Front matter line count for the line_count strategy
        min_verse_length: Fragments at or below this cleaned length are dropped
        min_word_length: Shortest word kept in the vocabulary

    Returns:
        VerseIndex ready for querying
    """
    front_matter, content = split_document(raw, strategy, marker, line_count)

    fragments = segment_content(content)
    verses = normalize_fragments(fragments, min_length=min_verse_length)
    vocabulary = build_vocabulary(verses, min_length=min_word_length)

    logger.info(
        f"Built index: {len(verses)} verses from {len(fragments)} fragments, "
        f"{len(vocabulary)} words"
    )

    return VerseIndex(
        verses=tuple(verses),
        vocabulary=vocabulary,
        front_matter=front_matter,
    )
