"""
Document splitting.

Separates the raw document into:
- front matter: legal/disclaimer prefix, kept for display only
- content: the searchable body, segmented into fragments at blank lines

Two split strategies are supported. The active one is a configuration
constant (SPLIT_STRATEGY) so the boundary is never hardwired silently:
- "marker": content starts at the first occurrence of FRONT_MATTER_MARKER
- "line_count": the first FRONT_MATTER_LINES lines are front matter
"""

import logging
import re
from typing import Literal

from .errors import ParseAnomaly

logger = logging.getLogger(__name__)

SplitStrategy = Literal["marker", "line_count"]

# Default split parameters
SPLIT_STRATEGY: SplitStrategy = "marker"
FRONT_MATTER_MARKER = "THE FIRST BOOK OF NEPHI"
FRONT_MATTER_LINES = 260

MISSING_MARKER_TEMPLATE = (
    "Front matter unavailable: the marker {marker!r} was not found, "
    "so the whole document is searchable."
)

# A blank line (optionally holding spaces/tabs) between two line breaks
FRAGMENT_BOUNDARY = re.compile(r"\r?\n(?:[ \t]*\r?\n)+")

# Newline-terminated lines plus an unterminated last line
LINE = re.compile(r"[^\n]*\n|[^\n]+")


def _locate_marker(raw: str, marker: str) -> int:
    """Return the offset of the first marker occurrence or raise ParseAnomaly."""
    if not marker:
        raise ParseAnomaly("Empty front matter marker")
    position = raw.find(marker)
    if position < 0:
        raise ParseAnomaly(f"Marker {marker!r} not found in document")
    return position


def split_by_marker(raw: str, marker: str = FRONT_MATTER_MARKER) -> tuple[str, str]:
    """
    Split at the first occurrence of ``marker``.

    Everything before the marker is front matter; content starts exactly
    at the marker (marker included). When the marker is absent the whole
    document is content and the front matter is a diagnostic placeholder.
    """
    try:
        position = _locate_marker(raw, marker)
    except ParseAnomaly as e:
        logger.warning(f"{e}; treating entire document as content")
        return MISSING_MARKER_TEMPLATE.format(marker=marker), raw

    return raw[:position], raw[position:]


def split_by_line_count(raw: str, line_count: int = FRONT_MATTER_LINES) -> tuple[str, str]:
    """Split after the first ``line_count`` newline-delimited lines."""
    lines = LINE.findall(raw)
    if len(lines) <= line_count:
        logger.warning(
            f"Document has {len(lines)} lines, not more than the "
            f"{line_count} front matter lines; no content region"
        )
    front_matter = "".join(lines[:line_count])
    content = "".join(lines[line_count:])
    return front_matter, content


def split_document(
    raw: str,
    strategy: SplitStrategy = SPLIT_STRATEGY,
    marker: str = FRONT_MATTER_MARKER,
    line_count: int = FRONT_MATTER_LINES,
) -> tuple[str, str]:
    """
    Separate raw text into (front_matter, content).

    Args:
        raw: Full document text
        strategy: "marker" or "line_count"
        marker: Marker string for the marker strategy
        line_count: Number of front matter lines for the line_count strategy

    Returns:
        Tuple of (front_matter, content). Never raises for malformed text.
    """
    if strategy == "line_count":
        return split_by_line_count(raw, line_count)
    if strategy == "marker":
        return split_by_marker(raw, marker)
    raise ValueError(f"Unknown split strategy: {strategy!r}")


def segment_content(content: str) -> list[str]:
    """
    Split content into candidate fragments at blank lines.

    Fragments keep their line structure (needed for reference
    detection); whitespace-only fragments are dropped.
    """
    return [
        fragment
        for fragment in FRAGMENT_BOUNDARY.split(content)
        if fragment.strip()
    ]
