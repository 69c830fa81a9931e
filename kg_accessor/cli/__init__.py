"""Command line interface for kg-accessor."""
