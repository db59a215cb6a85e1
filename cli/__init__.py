"""Command-line interface for winfit."""
