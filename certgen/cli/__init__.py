"""Command line interface for Certgen."""
