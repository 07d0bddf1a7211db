"""Command-line interface for epi-mci."""
