"""Command-line interface for daybook."""
