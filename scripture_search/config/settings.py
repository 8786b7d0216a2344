"""
Application settings with environment variable support.

Configuration is loaded from environment variables with optional .env file.
Defaults mirror the constants of the ingestion and query modules.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..src.fetch import DOCUMENT_SOURCE, REQUEST_TIMEOUT, is_url
from ..src.index_cache import INDEX_VERSION, VALID_KEY
from ..src.normalize import MIN_VERSE_LENGTH
from ..src.retrieval import MIN_PREFIX_LENGTH, SEARCH_LIMIT, SUGGESTION_LIMIT
from ..src.split_document import FRONT_MATTER_LINES, FRONT_MATTER_MARKER
from ..src.tokenizers import MIN_WORD_LENGTH


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "scripture-search"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Source document
    document_source: str = Field(
        default=DOCUMENT_SOURCE, alias="SCRIPTURE_DOCUMENT_SOURCE"
    )
    request_timeout: float = Field(
        default=REQUEST_TIMEOUT, gt=0, alias="SCRIPTURE_REQUEST_TIMEOUT"
    )

    # Index cache
    cache_dir: Path = Field(
        default_factory=_default_cache_dir, alias="SCRIPTURE_CACHE_DIR"
    )
    index_version: str = Field(
        default=INDEX_VERSION,
        pattern=VALID_KEY.pattern,
        alias="SCRIPTURE_INDEX_VERSION",
    )

    # Document splitting
    split_strategy: Literal["marker", "line_count"] = Field(
        default="marker", alias="SCRIPTURE_SPLIT_STRATEGY"
    )
    front_matter_marker: str = Field(
        default=FRONT_MATTER_MARKER, alias="SCRIPTURE_FRONT_MATTER_MARKER"
    )
    front_matter_lines: int = Field(
        default=FRONT_MATTER_LINES, ge=0, alias="SCRIPTURE_FRONT_MATTER_LINES"
    )

    # Normalization and tokenization
    min_verse_length: int = Field(
        default=MIN_VERSE_LENGTH, ge=0, alias="SCRIPTURE_MIN_VERSE_LENGTH"
    )
    min_word_length: int = Field(
        default=MIN_WORD_LENGTH, ge=1, alias="SCRIPTURE_MIN_WORD_LENGTH"
    )

    # Query limits
    suggestion_limit: int = Field(
        default=SUGGESTION_LIMIT, ge=1, alias="SCRIPTURE_SUGGESTION_LIMIT"
    )
    min_prefix_length: int = Field(
        default=MIN_PREFIX_LENGTH, ge=0, alias="SCRIPTURE_MIN_PREFIX_LENGTH"
    )
    search_limit: int = Field(
        default=SEARCH_LIMIT, ge=1, alias="SCRIPTURE_SEARCH_LIMIT"
    )

    def is_remote_source(self) -> bool:
        """Check if the document is fetched over HTTP."""
        return is_url(self.document_source)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
