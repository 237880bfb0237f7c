"""Command-line interface for issuing requests through the courier pipeline."""
