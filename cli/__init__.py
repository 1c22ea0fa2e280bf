"""Command line entry point for graph-transform."""
