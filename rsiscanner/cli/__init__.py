"""CLI commands for the RSI scanner.

This package provides the terminal front end: one-off scans, the live
dashboard, and symbol and alert management.
"""

from rsiscanner.cli.main import cli, main

__all__ = ["cli", "main"]
