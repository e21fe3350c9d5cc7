"""Command-line interface for checker-runner."""
