"""
Pydantic schemas for scripture search artifacts.
"""

from .index import VerseIndex
from .verse import Verse

__all__ = [
    "Verse",
    "VerseIndex",
]
