"""Command-line interface for lessonchat."""
