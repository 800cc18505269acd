"""
Command-line interface for the clustermon package.

This module provides the main CLI entry point.
"""

from .main import main, main_cli

__all__ = [
    "main",
    "main_cli",
]
