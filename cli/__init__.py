"""Command-line interface for the AI team."""
