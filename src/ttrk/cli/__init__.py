"""Command line interface for ttrk."""
