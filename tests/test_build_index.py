"""Tests for VerseIndex construction from raw text."""

import pytest
from pydantic import ValidationError

from scripture_search.src.build_index import build_verse_index
from scripture_search.src.retrieval import highlight, search
from scripture_search.src.schemas.index import VerseIndex
from scripture_search.src.schemas.verse import Verse

SCENARIO = "Header\n\nAlma 5:12\nWherefore I say unto you\n\nShort\n\n"

SAMPLE_DOCUMENT = (
    "The Project Gutenberg eBook of a test\n\n"
    "License: use freely.\n\n"
    "THE FIRST BOOK OF NEPHI\n\n"
    "1 Nephi 1:1\nI, Nephi, having been born of goodly parents, therefore I was taught.\n\n"
    "1 Nephi 3:7\nAnd it came to pass that I, Nephi, said unto my father: I will go and do.\n\n"
    "Short line\n"
)


class TestScenario:
    """The header/verse/short scenario."""

    def test_single_verse_produced(self):
        """Only the cited fragment survives."""
        index = build_verse_index(SCENARIO)

        assert len(index.verses) == 1
        verse = index.verses[0]
        assert verse.reference == "Alma 5:12"
        assert verse.text == "Wherefore I say unto you"

    def test_dropped_fragments_contribute_no_words(self):
        index = build_verse_index(SCENARIO)
        assert "header" not in index.vocabulary
        assert "short" not in index.vocabulary
        assert index.vocabulary == ("say", "unto", "wherefore", "you")

    def test_search_highlights_match(self):
        index = build_verse_index(SCENARIO)
        result = search(index, "wherefore")

        assert [v.reference for v in result.verses] == ["Alma 5:12"]
        assert highlight(result.verses[0].text, "wherefore") == "<b>Wherefore</b> I say unto you"


class TestSampleDocument:
    """Marker split on a small Gutenberg-style document."""

    def test_front_matter_separated(self):
        index = build_verse_index(SAMPLE_DOCUMENT)
        assert index.front_matter == (
            "The Project Gutenberg eBook of a test\n\nLicense: use freely.\n\n"
        )

    def test_front_matter_not_searchable(self):
        index = build_verse_index(SAMPLE_DOCUMENT)
        assert "gutenberg" not in index.vocabulary
        assert search(index, "License").verses == ()

    def test_verses_in_order(self):
        index = build_verse_index(SAMPLE_DOCUMENT)

        assert [v.id for v in index.verses] == [0, 1, 2]
        assert [v.reference for v in index.verses] == [
            "THE FIRST BOOK OF NEPHI...",
            "1 Nephi 1:1",
            "1 Nephi 3:7",
        ]

    def test_line_count_strategy(self):
        index = build_verse_index(SAMPLE_DOCUMENT, strategy="line_count", line_count=4)
        assert index.front_matter.startswith("The Project Gutenberg")
        assert index.verses[0].reference == "THE FIRST BOOK OF NEPHI..."

    def test_empty_document(self):
        """No content yields an empty but valid index."""
        index = build_verse_index("")
        assert index.is_empty
        assert index.vocabulary == ()


class TestVerseIndexSchema:
    """Tests for VerseIndex validation."""

    def test_unsorted_vocabulary_rejected(self):
        with pytest.raises(ValidationError):
            VerseIndex(vocabulary=("beta", "alpha"))

    def test_duplicate_vocabulary_rejected(self):
        with pytest.raises(ValidationError):
            VerseIndex(vocabulary=("alpha", "alpha"))

    def test_frozen(self):
        index = VerseIndex(verses=(Verse(id=0, reference="r", text="t"),))
        with pytest.raises(ValidationError):
            index.front_matter = "changed"

    def test_empty_reference_rejected(self):
        with pytest.raises(ValidationError):
            Verse(id=0, reference="", text="text")
