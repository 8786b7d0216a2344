"""
VerseIndex schema: the in-memory search index and its persisted form.

The index is one owned structure holding everything the query
engine reads:
- verses: searchable units in document order
- vocabulary: sorted distinct words for prefix suggestions
- front_matter: legal/disclaimer text, shown on demand only

When persisted, the fields are written under the record keys
``verses``, ``words`` and ``legal``.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .verse import Verse


class VerseIndex(BaseModel):
    """
    Derived search structures for one document.

    Constructed once per successful ingestion and replaced wholesale
    on re-ingestion. Never patched in place.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    verses: tuple[Verse, ...] = Field(
        default=(),
        description="Searchable units in document order",
    )
    vocabulary: tuple[str, ...] = Field(
        default=(),
        alias="words",
        description="Sorted, deduplicated lowercase words from verse text",
    )
    front_matter: str = Field(
        default="",
        alias="legal",
        description="Non-searchable legal/disclaimer prefix",
    )

    @field_validator("vocabulary")
    @classmethod
    def _vocabulary_sorted(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Prefix lookup relies on strict ordering
        if any(a >= b for a, b in zip(value, value[1:])):
            raise ValueError("vocabulary must be sorted and deduplicated")
        return value

    @property
    def is_empty(self) -> bool:
        return not self.verses

    def to_record(self) -> str:
        """Serialize to the persisted ``{verses, words, legal}`` JSON record."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_record(cls, record: str | bytes) -> "VerseIndex":
        """Parse a persisted record. Raises ``pydantic.ValidationError`` if malformed."""
        return cls.model_validate_json(record)
