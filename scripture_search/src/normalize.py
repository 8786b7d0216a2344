"""
Fragment normalization.

Turns raw content fragments into Verse objects:
- collapses whitespace runs and trims
- drops fragments at or below the minimum length (headers, stray lines)
- detects a chapter:verse style reference on the first line

Reference detection is a heuristic and will occasionally misclassify
a fragment. Fragments without a detectable citation get a truncated
text prefix as their reference instead.
"""

import logging
import re
from typing import Iterable, Optional

from .schemas.verse import Verse

logger = logging.getLogger(__name__)

MIN_VERSE_LENGTH = 20
MAX_REFERENCE_LINE_LENGTH = 50
FALLBACK_REFERENCE_LENGTH = 30
ELLIPSIS = "..."

WHITESPACE_RUN = re.compile(r"\s+")
CITATION_PATTERN = re.compile(r"\d+:\d+")


def clean(text: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return WHITESPACE_RUN.sub(" ", text).strip()


def fallback_reference(cleaned: str) -> str:
    return cleaned[:FALLBACK_REFERENCE_LENGTH] + ELLIPSIS


def detect_reference(fragment: str) -> Optional[tuple[str, str]]:
    """
    Extract (reference, text) from a fragment whose first line is a citation.

    The first line must be short and contain digits:digits, and at least
    one further line must follow it. Returns None when not applicable.
    """
    lines = fragment.strip().splitlines()
    if len(lines) < 2:
        return None

    first_line = lines[0].strip()
    if len(first_line) >= MAX_REFERENCE_LINE_LENGTH:
        return None
    if not CITATION_PATTERN.search(first_line):
        return None

    text = clean(" ".join(lines[1:]))
    if not text:
        return None
    return first_line, text


def normalize_fragment(
    fragment: str,
    verse_id: int,
    min_length: int = MIN_VERSE_LENGTH,
) -> Optional[Verse]:
    """
    Build a Verse from one fragment, or None if it is too short.

    Args:
        fragment: Raw fragment text (line breaks preserved)
        verse_id: Identifier to assign
        min_length: Fragments whose cleaned length is <= this are dropped

    Returns:
        Verse, or None for dropped fragments
    """
    cleaned = clean(fragment)
    if len(cleaned) <= min_length:
        logger.debug(f"Skipping short fragment ({len(cleaned)} chars): {cleaned!r}")
        return None

    detected = detect_reference(fragment)
    if detected is None:
        return Verse(id=verse_id, reference=fallback_reference(cleaned), text=cleaned)

    reference, text = detected
    return Verse(id=verse_id, reference=reference, text=text)


def normalize_fragments(
    fragments: Iterable[str],
    min_length: int = MIN_VERSE_LENGTH,
) -> list[Verse]:
    """Normalize fragments in order, numbering retained verses from 0."""
    verses: list[Verse] = []
    skipped = 0

    for fragment in fragments:
        verse = normalize_fragment(fragment, verse_id=len(verses), min_length=min_length)
        if verse is None:
            skipped += 1
            continue
        verses.append(verse)

    if skipped:
        logger.debug(f"Dropped {skipped} fragments at or below {min_length} chars")
    return verses
