"""Command-line interface for scripture search."""
