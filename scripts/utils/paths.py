"""Path-related utility functions."""

from __future__ import annotations

import glob
from pathlib import Path
from typing import List

GLOB_CHARACTERS = ("*", "?", "[")


def resolve_path(raw: str | Path, base_dir: Path) -> Path:
    """Resolve a path relative to a base directory.

    Args:
        raw: Path string (can be relative or absolute).
        base_dir: Directory relative paths are anchored to.

    Returns:
        Normalized absolute Path.
    """
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


def is_pattern(raw: str) -> bool:
    """Whether a path string contains glob characters."""
    return any(char in raw for char in GLOB_CHARACTERS)


def expand_paths(raw: str, base_dir: Path) -> List[Path]:
    """Expand a path or glob pattern into existing files.

    Args:
        raw: Path or glob pattern (``**`` is recursive), relative to base_dir
            unless absolute.
        base_dir: Directory relative paths are anchored to.

    Returns:
        Sorted list of normalized absolute paths to existing files.

    Raises:
        FileNotFoundError: If the path does not exist or the pattern matches no file.
    """
    if not is_pattern(raw):
        candidate = resolve_path(raw, base_dir)
        if not candidate.is_file():
            raise FileNotFoundError(f"Specified path does not exist: {raw}")
        return [candidate]

    pattern = Path(raw).expanduser()
    if not pattern.is_absolute():
        pattern = base_dir / pattern
    matches = sorted(Path(match).resolve() for match in glob.glob(str(pattern), recursive=True))
    files = [match for match in matches if match.is_file()]
    if not files:
        raise FileNotFoundError(f"Pattern matched no files: {raw}")
    return files
