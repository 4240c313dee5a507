"""Command-line interface for the content console."""

from .main import cli

__all__ = ["cli"]
