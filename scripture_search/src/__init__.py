"""
Scripture Search source modules.

Pipeline:
    ingest.py          - Startup orchestrator (warm/cold start, status)
    fetch.py           - Document loading (path or URL)
    split_document.py  - Raw text -> front matter + fragments
    normalize.py       - Fragments -> verses with references
    tokenizers.py      - Verse text -> vocabulary tokens
    build_index.py     - Chains the above into a VerseIndex
    index_cache.py     - Versioned persistence of the VerseIndex
    retrieval.py       - Suggestions, search, highlighting
"""
