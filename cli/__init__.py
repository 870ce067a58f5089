"""Command line interface for quickfind."""
