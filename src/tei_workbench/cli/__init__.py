"""Command-line interface module for the TEI workbench.

This module provides CLI tools for checking and canonically formatting TEI
documents on disk.
"""

from .main import main

__all__ = ["main"]
