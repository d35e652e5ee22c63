"""Command-line interface module for Ultra Robust BBCode Parser.

This module provides CLI tools for rendering, stripping and validating BBCode
files with JSON configuration and output.
"""

from .main import main

__all__ = ["main"]
