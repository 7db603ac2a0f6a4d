"""Command-line interface for DIP-ML."""
