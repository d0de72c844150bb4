"""Parsing utilities for PHP sources."""

from parse.treesitter_php import extract_declarations, extract_declarations_from_file

__all__ = [
    "extract_declarations",
    "extract_declarations_from_file",
]
