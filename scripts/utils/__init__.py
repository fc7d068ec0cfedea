"""Shared utilities for scripts."""

from .paths import (
    expand_paths,
    is_pattern,
    resolve_path,
)

__all__ = [
    "expand_paths",
    "is_pattern",
    "resolve_path",
]
