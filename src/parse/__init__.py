"""Parsing utilities for archfit."""

from parse.ast_imports import extract_dependencies, resolve_relative_import

__all__ = [
    "extract_dependencies",
    "resolve_relative_import",
]
