"""Command-line interface for cinemem."""
