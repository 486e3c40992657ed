"""Command-line interface for the quality gate toolkit."""

from .app import main

__all__ = ["main"]
