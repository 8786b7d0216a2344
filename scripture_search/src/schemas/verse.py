"""
Verse schema for searchable units.

Verses are the atomic units for suggestion and substring search.
Each verse carries a short reference label so every search result
can be shown with a heading, even when no chapter:verse citation
was detected in the source.
"""

from pydantic import BaseModel, ConfigDict, Field


class Verse(BaseModel):
    """
    A searchable unit of the document.

    Immutable once created; the full set is rebuilt on re-ingestion.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1042,
                "reference": "Alma 5:12",
                "text": "And according to his faith there was a mighty change wrought in his heart.",
            }
        },
    )

    id: int = Field(
        ...,
        ge=0,
        description="Sequential identifier within one ingestion pass",
        examples=[0, 1042],
    )
    reference: str = Field(
        ...,
        min_length=1,
        description="Citation label, or a truncated text prefix when none was detected",
        examples=["Alma 5:12", "And it came to pass that..."],
    )
    text: str = Field(
        ...,
        min_length=1,
        description="Whitespace-normalized body text (searched)",
    )
