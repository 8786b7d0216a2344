"""
Scripture Search

Offline full-text search over a single scripture document.

Pipeline:
- ingestion: document -> front matter + verses -> vocabulary
- cache: versioned snapshot of the derived index
- query: prefix suggestions, substring search, highlighting
"""

__version__ = "0.1.0"
