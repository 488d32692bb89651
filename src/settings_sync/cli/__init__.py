"""Command-line interface for Settings Sync."""
